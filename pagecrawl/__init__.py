"""pagecrawl - selector-driven content extraction with SSRF-safe fetching.

Extract from HTML you already have::

    from pagecrawl import CrawlRequest, extract

    data = extract(html, CrawlRequest(
        url="https://shop.example/p/1",
        title_selector="h1.title|meta[property='og:title']",
        content_selector="article|body",
    ))
    print(data.title, data.plain_text)

Gate, fetch and extract in one call::

    from pagecrawl import crawl, is_safe_url

    if is_safe_url(url):
        response = crawl(CrawlRequest(url=url, image_selector="meta[property='og:image']"))
"""

from pagecrawl.auth import AuthSession
from pagecrawl.extractors import (
    extract_field,
    html_to_markdown,
    is_safe_url,
    parse_selector_chain,
    resolve_url,
    select_node,
)
from pagecrawl.items import CrawlData, CrawlRequest, CrawlResponse
from pagecrawl.query import (
    CrawlRequestError,
    FetchError,
    UnsafeUrlError,
    crawl,
    crawl_batch,
    extract,
    fetch_html,
)

__version__ = "0.1.0"
__all__ = [
    "AuthSession",
    "CrawlData",
    "CrawlRequest",
    "CrawlRequestError",
    "CrawlResponse",
    "FetchError",
    "UnsafeUrlError",
    "crawl",
    "crawl_batch",
    "extract",
    "extract_field",
    "fetch_html",
    "html_to_markdown",
    "is_safe_url",
    "parse_selector_chain",
    "resolve_url",
    "select_node",
]
