"""URL resolution utilities."""

from __future__ import annotations

import logging
from urllib.parse import urljoin, urlsplit

logger = logging.getLogger(__name__)

_ABSOLUTE_PREFIXES: tuple[str, ...] = ("http://", "https://")


def resolve_url(reference: str, base: str) -> str | None:
    """Resolve *reference* against *base* and return an absolute URL.

    References that already start with ``http://`` or ``https://`` are
    returned unchanged.  Any base carrying a scheme is accepted, including
    host-less ones such as ``file:///a/b``.  Returns ``None`` when *base*
    has no scheme or the reference cannot be resolved to an absolute URL.

    Example:
        resolve_url("../x", "http://example.com/a/b/c") → http://example.com/a/x
    """
    if reference.startswith(_ABSOLUTE_PREFIXES):
        return reference

    try:
        if not urlsplit(base).scheme:
            return None
        resolved = urljoin(base, reference)
        parsed = urlsplit(resolved)
        # touching .port validates the netloc of the result
        parsed.port  # noqa: B018
    except (ValueError, TypeError, AttributeError) as exc:
        logger.debug("Could not resolve %r against %r: %s", reference, base, exc)
        return None
    # urljoin hands back the bare reference for non-hierarchical schemes
    if not parsed.scheme:
        return None
    return resolved
