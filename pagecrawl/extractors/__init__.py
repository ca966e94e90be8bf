"""Extraction sub-package: URL gating, URL resolution, selectors and Markdown."""

from .markdown import html_to_markdown, node_to_markdown
from .selectors import extract_field, parse_selector_chain, select_node
from .urlnorm import resolve_url
from .urlsafety import is_safe_url

__all__ = [
    "extract_field",
    "html_to_markdown",
    "is_safe_url",
    "node_to_markdown",
    "parse_selector_chain",
    "resolve_url",
    "select_node",
]
