"""Convert an HTML fragment to flat Markdown with a fixed per-tag rule table.

Only the direct children of ``<body>`` (or of the element passed to
:func:`node_to_markdown`) are walked.  Each child is rendered from its own
text content, so nested inline formatting inside a block is flattened to
plain text.  Block rules end with a blank line; inline rules (``code``,
``strong``/``b``, ``em``/``i``) do not.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable

from bs4 import BeautifulSoup, Tag
from bs4.element import NavigableString, PageElement, PreformattedString

logger = logging.getLogger(__name__)

_EXCESSIVE_BLANK_LINES_RE = re.compile(r"\n{3,}")


def _text(el: Tag) -> str:
    return el.get_text().strip()


def _attr(el: Tag, name: str) -> str:
    val = el.get(name)
    if isinstance(val, list):
        return " ".join(val)
    return val or ""


# ---------------------------------------------------------------------------
# Rule table
# ---------------------------------------------------------------------------

def _heading(level: int) -> Callable[[Tag], str]:
    prefix = "#" * level

    def render(el: Tag) -> str:
        return f"{prefix} {_text(el)}\n\n"

    return render


def _paragraph(el: Tag) -> str:
    return f"{_text(el)}\n\n"


def _link(el: Tag) -> str:
    href = _attr(el, "href")
    text = _text(el)
    if href:
        return f"[{text}]({href})\n\n"
    return f"{text}\n\n"


def _image(el: Tag) -> str:
    src = _attr(el, "src")
    if not src:
        return ""
    return f"![{_attr(el, 'alt')}]({src})\n\n"


def _list(el: Tag) -> str:
    # ordered and unordered lists both render as "-" bullets
    items = "".join(f"- {_text(li)}\n" for li in el.find_all("li"))
    return items + "\n"


def _blockquote(el: Tag) -> str:
    return f"> {_text(el)}\n\n"


def _inline_code(el: Tag) -> str:
    return f"`{_text(el)}`"


def _preformatted(el: Tag) -> str:
    return f"```\n{_text(el)}\n```\n\n"


def _strong(el: Tag) -> str:
    return f"**{_text(el)}**"


def _emphasis(el: Tag) -> str:
    return f"*{_text(el)}*"


def _fallback(el: Tag) -> str:
    text = _text(el)
    return f"{text}\n\n" if text else ""


TAG_RULES: dict[str, Callable[[Tag], str]] = {
    **{f"h{n}": _heading(n) for n in range(1, 7)},
    "p": _paragraph,
    "a": _link,
    "img": _image,
    "ul": _list,
    "ol": _list,
    "blockquote": _blockquote,
    "code": _inline_code,
    "pre": _preformatted,
    "strong": _strong,
    "b": _strong,
    "em": _emphasis,
    "i": _emphasis,
}


def render_element(el: Tag) -> str:
    """Render one element with the rule for its tag (text fallback otherwise)."""
    rule = TAG_RULES.get((el.name or "").lower(), _fallback)
    return rule(el)


def _render_child(child: PageElement) -> str:
    if isinstance(child, Tag):
        return render_element(child)
    # comments, doctypes, CDATA and processing instructions carry no content
    if isinstance(child, NavigableString) and not isinstance(child, PreformattedString):
        return f"{child.strip()}\n\n"
    return ""


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def node_to_markdown(node: Tag) -> str:
    """Render the direct children of an already-parsed *node* as Markdown."""
    markdown = "".join(_render_child(child) for child in node.children)
    return _EXCESSIVE_BLANK_LINES_RE.sub("\n\n", markdown).strip()


def html_to_markdown(html: str | None) -> str:
    """Convert *html* to Markdown.  Returns ``""`` for empty input; never raises.

    Malformed markup is parsed leniently by lxml and whatever tree results is
    rendered.
    """
    if not html:
        return ""

    try:
        soup = BeautifulSoup(html, "lxml")
    except Exception as exc:
        logger.debug("HTML parse failed, returning no markdown: %s", exc)
        return ""

    # head-only markup produces no <body>
    if soup.body is None:
        return ""
    return node_to_markdown(soup.body)
