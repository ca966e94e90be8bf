"""Fallback-chained selector extraction.

A selector field is a single string holding one or more selectors separated
by ``|``.  They are tried left to right and the first one that yields a
non-empty value wins::

    "h1.title|meta[property='og:title']|title"

Selectors shaped like ``meta[attr='value']`` are looked up directly as
``<meta>`` tags and return their ``content`` attribute.  Everything else is a
CSS query where only the first matching element is considered:

    <img>          → ``src``
    has ``href``   → ``href``
    otherwise      → trimmed text
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any

from bs4 import BeautifulSoup, Tag
from soupsieve import SelectorSyntaxError

logger = logging.getLogger(__name__)

_META_SELECTOR_RE = re.compile(
    r"""^meta\[\s*([\w:-]+)\s*=\s*(['"])([^'"]+)\2\s*\]""",
)


@dataclass(frozen=True)
class MetaSelector:
    """``meta[attr='value']``: read ``content`` from the matching meta tag."""

    attr: str
    value: str


@dataclass(frozen=True)
class CssSelector:
    """Generic CSS query; only the first match is used."""

    query: str


Selector = MetaSelector | CssSelector
SelectorChain = tuple[Selector, ...]


def _safe_str(val: Any) -> str:
    """Convert a BeautifulSoup attribute value (str | list | None) to str."""
    if val is None:
        return ""
    if isinstance(val, list):
        return " ".join(str(v) for v in val)
    return str(val)


def parse_selector(text: str) -> Selector:
    """Parse a single (already trimmed) selector segment."""
    match = _META_SELECTOR_RE.match(text)
    if match:
        return MetaSelector(attr=match.group(1), value=match.group(3))
    return CssSelector(query=text)


def parse_selector_chain(field: str | None) -> SelectorChain:
    """Split a ``|``-separated selector field into a typed chain.

    Segments are trimmed and empty segments are dropped.
    """
    if not field:
        return ()
    segments = (s.strip() for s in field.split("|"))
    return tuple(parse_selector(s) for s in segments if s)


# ---------------------------------------------------------------------------
# Per-selector lookups
# ---------------------------------------------------------------------------

def _find_meta(soup: BeautifulSoup | Tag, selector: MetaSelector) -> Tag | None:
    found = soup.find("meta", attrs={selector.attr: selector.value})
    return found if isinstance(found, Tag) else None


def _meta_content(soup: BeautifulSoup | Tag, selector: MetaSelector) -> str | None:
    meta = _find_meta(soup, selector)
    if meta is None:
        return None
    return _safe_str(meta.get("content")).strip() or None


def _select_first(soup: BeautifulSoup | Tag, query: str) -> Tag | None:
    try:
        return soup.select_one(query)
    except (SelectorSyntaxError, ValueError) as exc:
        logger.debug("Skipping invalid selector %r: %s", query, exc)
        return None


def _node_value(node: Tag) -> str | None:
    """Return the usable value of a matched element, or None."""
    if node.name == "img":
        src = _safe_str(node.get("src")).strip()
        if src:
            return src
    href = _safe_str(node.get("href")).strip()
    if href:
        return href
    return node.get_text().strip() or None


def _evaluate(soup: BeautifulSoup | Tag, selector: Selector) -> str | None:
    if isinstance(selector, MetaSelector):
        return _meta_content(soup, selector)
    node = _select_first(soup, selector.query)
    if node is None:
        return None
    return _node_value(node)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def extract_field(
    soup: BeautifulSoup | Tag,
    field: str | SelectorChain | None,
) -> str | None:
    """Return the first non-empty value produced by the selector chain *field*.

    Args:
        soup:  Parsed document (or any element to search within).
        field: Raw ``|``-separated selector string or a pre-parsed chain.

    Returns ``None`` when nothing matches; a miss is never an error.
    """
    chain = parse_selector_chain(field) if isinstance(field, str | None) else field
    for selector in chain:
        value = _evaluate(soup, selector)
        if value:
            return value
    if chain:
        logger.debug("No selector matched in chain %r", field)
    return None


def select_node(
    soup: BeautifulSoup | Tag,
    field: str | SelectorChain | None,
) -> Tag | str | None:
    """Return the element matched by the first productive selector in *field*.

    CSS selectors return the matched element itself when it has any text or
    child elements.  Meta selectors return the tag's ``content`` string.
    """
    chain = parse_selector_chain(field) if isinstance(field, str | None) else field
    for selector in chain:
        if isinstance(selector, MetaSelector):
            content = _meta_content(soup, selector)
            if content:
                return content
            continue
        node = _select_first(soup, selector.query)
        if node is None:
            continue
        if node.get_text().strip() or node.find(True) is not None:
            return node
    return None
