"""Runtime settings for pagecrawl.

Every value can be overridden with a ``PAGECRAWL_*`` environment variable;
keyword arguments passed to :mod:`pagecrawl.query` functions take precedence
over both.
"""

from __future__ import annotations

import os


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    try:
        return int(raw) if raw else default
    except ValueError:
        return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name, "").strip().lower()
    if not raw:
        return default
    return raw not in ("0", "false", "no", "off")


# ---------------------------------------------------------------------------
# Fetching
# ---------------------------------------------------------------------------
# Request timeout (seconds)
TIMEOUT = _env_int("PAGECRAWL_TIMEOUT", 30)

# Retries on 429/5xx and network errors
MAX_RETRIES = _env_int("PAGECRAWL_MAX_RETRIES", 3)

USER_AGENT = os.getenv(
    "PAGECRAWL_USER_AGENT",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/122.0.0.0 Safari/537.36",
)

# ---------------------------------------------------------------------------
# SSRF protection
# ---------------------------------------------------------------------------
# Resolve hostnames and reject those pointing at private address space
RESOLVE_DNS = _env_bool("PAGECRAWL_RESOLVE_DNS", True)

# ---------------------------------------------------------------------------
# Batch crawling
# ---------------------------------------------------------------------------
MAX_WORKERS = _env_int("PAGECRAWL_MAX_WORKERS", 8)

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
LOG_LEVEL = os.getenv("PAGECRAWL_LOG_LEVEL", "WARNING").upper()
