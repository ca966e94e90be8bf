"""pagecrawl.query - URL gating, fetch and selector-driven extraction API.

Pure extraction (no network)::

    from pagecrawl import CrawlRequest, extract

    request = CrawlRequest(
        url="https://shop.example/item/42",
        title_selector="h1.product-title|meta[property='og:title']",
        image_selector="img.hero|meta[property='og:image']",
        content_selector="article|main",
    )
    data = extract(html, request)
    print(data.title, data.image)
    print(data.plain_text)

Fetch + extract, returning the ``{ok, data, error}`` envelope::

    from pagecrawl import crawl

    response = crawl(CrawlRequest.model_validate(payload))
    json.dumps(response.to_dict())

HTTP uses only the stdlib (``urllib``).  Every URL, including redirect
targets, is checked with :func:`~pagecrawl.extractors.urlsafety.is_safe_url`
before a connection is made.
"""

from __future__ import annotations

import gzip
import logging
import random
import time
import urllib.error
import urllib.request
import zlib
from datetime import UTC, datetime
from typing import TYPE_CHECKING
from urllib.parse import urlsplit

from bs4 import BeautifulSoup, Tag

from pagecrawl import settings
from pagecrawl.auth import AuthSession
from pagecrawl.extractors.markdown import html_to_markdown, node_to_markdown
from pagecrawl.extractors.selectors import extract_field, select_node
from pagecrawl.extractors.urlnorm import resolve_url
from pagecrawl.extractors.urlsafety import is_safe_url
from pagecrawl.items import CrawlData, CrawlRequest, CrawlResponse

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Public exceptions
# ---------------------------------------------------------------------------

class CrawlRequestError(ValueError):
    """Raised when a crawl request is structurally invalid (e.g. missing url)."""


class FetchError(RuntimeError):
    """Raised when a URL cannot be fetched.

    Attributes:
        url    -- the URL that failed
        status -- HTTP status code (0 if no response was received)
        body   -- decoded error body, when the server sent one
    """

    def __init__(
        self,
        message: str,
        url: str = "",
        status: int = 0,
        body: str | None = None,
    ) -> None:
        super().__init__(message)
        self.url = url
        self.status = status
        self.body = body


class UnsafeUrlError(FetchError):
    """Raised when a URL (or a redirect target) points at a non-public host."""


# ---------------------------------------------------------------------------
# Low-level HTTP fetch
# ---------------------------------------------------------------------------

_RETRY_CODES: frozenset[int] = frozenset({429, 500, 502, 503, 504})


def _decode_response_body(raw: bytes, headers: object | None, url: str) -> str:
    encoding = ""
    if headers is not None:
        try:
            encoding = str(headers.get("Content-Encoding", "")).lower().strip()
        except Exception:
            encoding = ""

    if encoding == "gzip":
        raw = gzip.decompress(raw)
    elif encoding in ("deflate", "zlib"):
        raw = zlib.decompress(raw)
    elif encoding == "br":
        raise FetchError(f"Unsupported Brotli-encoded response from {url}", url=url)

    charset = "utf-8"
    if headers is not None:
        try:
            charset = headers.get_content_charset("utf-8") or "utf-8"
        except Exception:
            charset = "utf-8"
    try:
        return raw.decode(charset, errors="replace")
    except (LookupError, ValueError):
        return raw.decode("utf-8", errors="replace")


_CREDENTIAL_HEADERS: tuple[str, ...] = ("Authorization", "Cookie")


def _origin(url: str) -> tuple[str, str, int | None] | None:
    try:
        parts = urlsplit(url)
        return parts.scheme.lower(), (parts.hostname or "").lower(), parts.port
    except ValueError:
        return None


class _SafeRedirectHandler(urllib.request.HTTPRedirectHandler):
    """Refuses redirects that lead to non-public hosts.

    Credentials are only forwarded to the origin they were issued for.
    """

    def __init__(self, resolve_dns: bool) -> None:
        self.resolve_dns = resolve_dns

    def redirect_request(self, req, fp, code, msg, headers, newurl):  # type: ignore[no-untyped-def]
        if not is_safe_url(newurl, resolve_dns=self.resolve_dns):
            logger.warning("Refusing redirect from %s to non-public URL", req.full_url)
            if fp is not None:
                fp.close()
            raise UnsafeUrlError(
                f"Redirect to a non-public URL refused: {newurl}",
                url=newurl,
                status=code,
            )
        new = super().redirect_request(req, fp, code, msg, headers, newurl)
        if new is not None:
            source = _origin(req.full_url)
            if source is None or source != _origin(newurl):
                for name in _CREDENTIAL_HEADERS:
                    new.remove_header(name)
        return new


def fetch_html(
    url: str,
    *,
    timeout: int | None = None,
    user_agent: str | None = None,
    max_retries: int | None = None,
    auth: AuthSession | None = None,
    resolve_dns: bool | None = None,
) -> str:
    """Fetch *url* and return the response body as a decoded string.

    The URL is gated with :func:`is_safe_url` first, and so is every redirect
    target.  Retries up to *max_retries* times with jittered exponential
    backoff on transient errors (429, 5xx and network-level failures).

    Args:
        url:         Fully-qualified HTTP/HTTPS URL.
        timeout:     Request timeout in seconds (default ``settings.TIMEOUT``).
        user_agent:  Override the default browser User-Agent string.
        max_retries: Maximum number of retry attempts.
        auth:        Optional credentials applied as request headers.
        resolve_dns: Resolve the host and reject private addresses
                     (default ``settings.RESOLVE_DNS``).

    Raises:
        UnsafeUrlError: The URL or a redirect target is not public.
        FetchError:     On HTTP errors, connection failures or invalid URLs.
    """
    timeout = settings.TIMEOUT if timeout is None else timeout
    max_retries = settings.MAX_RETRIES if max_retries is None else max_retries
    resolve_dns = settings.RESOLVE_DNS if resolve_dns is None else resolve_dns

    if not is_safe_url(url, resolve_dns=resolve_dns):
        logger.warning("Refusing to fetch non-public URL %s", url)
        raise UnsafeUrlError(f"URL is not allowed: {url}", url=url)

    headers = {
        "User-Agent": user_agent or settings.USER_AGENT,
        "Accept": (
            "text/html,application/xhtml+xml,application/xml;"
            "q=0.9,image/avif,image/webp,*/*;q=0.8"
        ),
        "Accept-Language": "en-US,en;q=0.9",
        "Accept-Encoding": "gzip, deflate",
    }
    if auth:
        auth.apply_headers(headers)
    req = urllib.request.Request(url, headers=headers)
    opener = urllib.request.build_opener(_SafeRedirectHandler(resolve_dns))

    last_exc: FetchError | None = None
    for attempt in range(max_retries + 1):
        try:
            with opener.open(req, timeout=timeout) as resp:
                raw: bytes = resp.read()
                try:
                    return _decode_response_body(raw, resp.headers, url)
                except OSError as exc:
                    raise FetchError(
                        f"gzip decompression failed for {url}: {exc}", url=url,
                    ) from exc
                except zlib.error as exc:
                    raise FetchError(
                        f"deflate decompression failed for {url}: {exc}", url=url,
                    ) from exc

        except FetchError:
            raise

        except urllib.error.HTTPError as exc:
            body_text = ""
            try:
                raw = exc.read()
                if raw:
                    body_text = _decode_response_body(raw, exc.headers, url)
            except Exception:
                body_text = ""
            last_exc = FetchError(
                f"HTTP {exc.code} fetching {url}: {exc.reason}",
                url=url,
                status=exc.code,
                body=body_text,
            )
            if exc.code in _RETRY_CODES and attempt < max_retries:
                # Honour Retry-After (RFC 7231 §7.1.3) when present
                retry_after = 0
                try:
                    ra_header = exc.headers.get("Retry-After", "") if exc.headers else ""
                    retry_after = int(ra_header) if ra_header and ra_header.strip().isdigit() else 0
                except Exception:
                    retry_after = 0
                delay = max(retry_after, 2 ** attempt) + random.uniform(0, 1)
                logger.debug(
                    "HTTP %d for %s - retrying in %.1fs (attempt %d/%d)",
                    exc.code, url, delay, attempt + 1, max_retries,
                )
                time.sleep(delay)
                continue
            raise last_exc from exc

        except urllib.error.URLError as exc:
            last_exc = FetchError(f"URL error fetching {url}: {exc.reason}", url=url)
            if attempt < max_retries:
                delay = (2 ** attempt) + random.uniform(0, 1)
                logger.debug(
                    "URL error for %s - retrying in %.1fs (attempt %d/%d): %s",
                    url, delay, attempt + 1, max_retries, exc.reason,
                )
                time.sleep(delay)
                continue
            raise last_exc from exc

        except OSError as exc:
            last_exc = FetchError(f"Network error fetching {url}: {exc}", url=url)
            if attempt < max_retries:
                delay = (2 ** attempt) + random.uniform(0, 1)
                logger.debug(
                    "Network error for %s - retrying in %.1fs (attempt %d/%d): %s",
                    url, delay, attempt + 1, max_retries, exc,
                )
                time.sleep(delay)
                continue
            raise last_exc from exc

    raise last_exc or FetchError(f"All retries exhausted for {url}", url=url)


# ---------------------------------------------------------------------------
# Extraction (HTML → CrawlData, no network)
# ---------------------------------------------------------------------------

def _render_content(content: Tag | str | None) -> tuple[str | None, str]:
    """Return ``(content_html, plain_text)`` for a matched content node."""
    if content is None:
        return None, ""
    if isinstance(content, str):
        return content, html_to_markdown(content)
    return str(content), node_to_markdown(content)


def extract(html: str | BeautifulSoup, request: CrawlRequest) -> CrawlData:
    """Extract a :class:`~pagecrawl.items.CrawlData` record from *html*.

    Runs the configured selector chains for title, description, image and
    content; resolves the image against ``request.url``; renders the content
    block to Markdown.  Makes no network requests.

    Args:
        html:    Raw HTML string or an already-parsed BeautifulSoup document.
        request: Source URL and selector hints.

    Returns:
        A frozen :class:`CrawlData`.  Fields that cannot be extracted are
        ``None`` (``plain_text`` is ``""``).

    Raises:
        CrawlRequestError: If ``request.url`` is missing.
    """
    if not request.url:
        raise CrawlRequestError("Missing required field: url")

    if isinstance(html, BeautifulSoup):
        soup = html
    else:
        try:
            soup = BeautifulSoup(html or "", "lxml")
        except Exception as exc:
            logger.warning("HTML parse failed for %s: %s", request.url, exc)
            soup = BeautifulSoup("", "lxml")

    title = extract_field(soup, request.title_selector)
    description = extract_field(soup, request.description_selector)

    image = None
    raw_image = extract_field(soup, request.image_selector)
    if raw_image:
        image = resolve_url(raw_image, request.url)
        if image is None:
            logger.debug("Dropping unresolvable image %r for %s", raw_image, request.url)

    try:
        content_html, plain_text = _render_content(
            select_node(soup, request.content_selector),
        )
    except Exception as exc:
        logger.warning("content rendering failed for %s: %s", request.url, exc)
        content_html, plain_text = None, ""

    return CrawlData(
        source_url=request.url,
        title=title,
        description=description,
        image=image,
        content_html=content_html,
        plain_text=plain_text,
        fetched_at=datetime.now(UTC).isoformat(),
    )


# ---------------------------------------------------------------------------
# Main public API
# ---------------------------------------------------------------------------

def crawl(
    request: CrawlRequest,
    *,
    timeout: int | None = None,
    user_agent: str | None = None,
    max_retries: int | None = None,
    resolve_dns: bool | None = None,
) -> CrawlResponse:
    """Gate, fetch and extract ``request.url``; never raises for bad input.

    The request's ``cookies`` and ``auth_token`` are attached to the fetch.

    Returns:
        ``CrawlResponse(ok=True, data=...)`` on success, otherwise
        ``CrawlResponse(ok=False, error=...)`` with a readable message.

    Example::

        from pagecrawl import CrawlRequest, crawl

        response = crawl(CrawlRequest(url="https://example.com/post",
                                      title_selector="h1|title"))
        if response.ok:
            print(response.data.title)
    """
    if not request.url:
        return CrawlResponse.failure("Missing required field: url")

    logger.info("crawl: %s", request.url)
    try:
        html = fetch_html(
            request.url,
            timeout=timeout,
            user_agent=user_agent,
            max_retries=max_retries,
            auth=AuthSession.from_request(request.cookies, request.auth_token),
            resolve_dns=resolve_dns,
        )
    except FetchError as exc:
        logger.warning("crawl: fetch failed for %s: %s", request.url, exc)
        return CrawlResponse.failure(str(exc))

    try:
        data = extract(html, request)
    except CrawlRequestError as exc:
        return CrawlResponse.failure(str(exc))
    return CrawlResponse.success(data)


def crawl_batch(
    requests: Iterable[CrawlRequest],
    *,
    max_workers: int | None = None,
    timeout: int | None = None,
    user_agent: str | None = None,
    max_retries: int | None = None,
    resolve_dns: bool | None = None,
) -> list[CrawlResponse]:
    """Run :func:`crawl` for many requests concurrently.

    Uses a :class:`~concurrent.futures.ThreadPoolExecutor`.  Results are
    returned in the same order as *requests* regardless of which finish
    first; a failure in one request never affects the others.
    """
    from concurrent.futures import ThreadPoolExecutor, as_completed

    items = list(requests)
    results: list[CrawlResponse | None] = [None] * len(items)

    def _crawl_one(idx: int, request: CrawlRequest) -> tuple[int, CrawlResponse]:
        try:
            return idx, crawl(
                request,
                timeout=timeout,
                user_agent=user_agent,
                max_retries=max_retries,
                resolve_dns=resolve_dns,
            )
        except Exception as exc:
            logger.warning("crawl_batch: unexpected error for %s: %s", request.url, exc)
            return idx, CrawlResponse.failure(f"Server error: {exc}")

    with ThreadPoolExecutor(max_workers=max_workers or settings.MAX_WORKERS) as executor:
        futures = {
            executor.submit(_crawl_one, i, request): i
            for i, request in enumerate(items)
        }
        for future in as_completed(futures):
            idx, response = future.result()
            results[idx] = response

    return [r for r in results if r is not None]
