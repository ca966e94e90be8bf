"""CLI entry point: python -m pagecrawl --url URL [selector options]"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from pagecrawl import settings
from pagecrawl.extractors.urlsafety import is_safe_url
from pagecrawl.items import CrawlRequest, CrawlResponse
from pagecrawl.query import CrawlRequestError, crawl, extract

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pagecrawl",
        description=(
            "Extract title, description, image and content from a public page.\n"
            "Selectors accept '|'-separated fallbacks, e.g. \"h1.title|meta[property='og:title']\"."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--url", required=True, metavar="URL",
                        help="Page URL (also the base for relative image URLs)")
    parser.add_argument("--title-selector", default=None, metavar="SEL",
                        help="Selector chain for the title")
    parser.add_argument("--description-selector", default=None, metavar="SEL",
                        help="Selector chain for the description")
    parser.add_argument("--image-selector", default=None, metavar="SEL",
                        help="Selector chain for the primary image")
    parser.add_argument("--content-selector", default=None, metavar="SEL",
                        help="Selector chain for the content block")
    parser.add_argument("--cookies", default=None, metavar="HEADER",
                        help="Raw Cookie header forwarded to the fetch")
    parser.add_argument("--auth-token", default=None, metavar="TOKEN",
                        help="Bearer token forwarded to the fetch")
    parser.add_argument("--html-file", default=None, metavar="PATH",
                        help="Extract from a local HTML file instead of fetching URL")
    parser.add_argument("--check-only", action="store_true", default=False,
                        help="Only report whether URL is safe to fetch")
    parser.add_argument("--timeout", type=int, default=None, metavar="N",
                        help=f"Fetch timeout in seconds (default: {settings.TIMEOUT})")
    parser.add_argument("--pretty", action="store_true", default=False,
                        help="Pretty-print the JSON response with Rich")
    parser.add_argument("--log-level", default=settings.LOG_LEVEL,
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        metavar="{DEBUG,INFO,WARNING,ERROR}",
                        help=f"Logging level (default: {settings.LOG_LEVEL})")
    return parser


def _request_from_args(args: argparse.Namespace) -> CrawlRequest:
    return CrawlRequest(
        url=args.url,
        title_selector=args.title_selector,
        description_selector=args.description_selector,
        image_selector=args.image_selector,
        content_selector=args.content_selector,
        cookies=args.cookies,
        auth_token=args.auth_token,
    )


def _extract_local(request: CrawlRequest, path: str) -> CrawlResponse:
    try:
        html = Path(path).read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        return CrawlResponse.failure(f"Could not read {path}: {exc}")
    try:
        return CrawlResponse.success(extract(html, request))
    except CrawlRequestError as exc:
        return CrawlResponse.failure(str(exc))


def _emit(payload: dict, pretty: bool) -> None:
    text = json.dumps(payload, ensure_ascii=False)
    if pretty:
        from rich.console import Console

        Console().print_json(text)
    else:
        print(text)


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=args.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    if args.check_only:
        safe = is_safe_url(args.url, resolve_dns=settings.RESOLVE_DNS)
        _emit({"url": args.url, "safe": safe}, args.pretty)
        return 0 if safe else 1

    request = _request_from_args(args)
    if args.html_file:
        response = _extract_local(request, args.html_file)
    else:
        response = crawl(request, timeout=args.timeout)

    _emit(response.to_dict(), args.pretty)
    return 0 if response.ok else 1


if __name__ == "__main__":
    sys.exit(main())
