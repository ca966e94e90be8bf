"""Shared pytest fixtures."""

from __future__ import annotations

import socket
from pathlib import Path

import pytest

FIXTURES_DIR = Path(__file__).parent / "fixtures"

# documentation address standing in for any public host
PUBLIC_IP = "93.184.216.34"


def _read_fixture(name: str) -> str:
    return (FIXTURES_DIR / name).read_text(encoding="utf-8")


@pytest.fixture
def product_html() -> str:
    return _read_fixture("product.html")


@pytest.fixture
def blog_post_html() -> str:
    return _read_fixture("blog_post.html")


@pytest.fixture(autouse=True)
def _stub_dns(monkeypatch):
    """Resolve every hostname to a public address so no test touches DNS."""

    def fake_getaddrinfo(host, *args, **kwargs):
        return [(socket.AF_INET, socket.SOCK_STREAM, 6, "", (PUBLIC_IP, 0))]

    monkeypatch.setattr(socket, "getaddrinfo", fake_getaddrinfo)
