"""Unit tests for selector chain parsing and extraction."""

from __future__ import annotations

import pytest
from bs4 import BeautifulSoup, Tag

from pagecrawl.extractors.selectors import (
    CssSelector,
    MetaSelector,
    extract_field,
    parse_selector_chain,
    select_node,
)


def _soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "lxml")


# ---------------------------------------------------------------------------
# Chain parsing
# ---------------------------------------------------------------------------

class TestParseSelectorChain:
    def test_splits_and_trims(self):
        chain = parse_selector_chain("  h1.title | h2  ")
        assert chain == (CssSelector("h1.title"), CssSelector("h2"))

    def test_drops_empty_segments(self):
        assert parse_selector_chain("h1|| |h2|") == (CssSelector("h1"), CssSelector("h2"))

    @pytest.mark.parametrize("field", [None, "", " | |"])
    def test_empty_field(self, field):
        assert parse_selector_chain(field) == ()

    def test_single_quoted_meta(self):
        (sel,) = parse_selector_chain("meta[property='og:image']")
        assert sel == MetaSelector(attr="property", value="og:image")

    def test_double_quoted_meta(self):
        (sel,) = parse_selector_chain('meta[name="description"]')
        assert sel == MetaSelector(attr="name", value="description")

    def test_unquoted_meta_is_css(self):
        (sel,) = parse_selector_chain("meta[name=description]")
        assert isinstance(sel, CssSelector)

    def test_mixed_chain_keeps_order(self):
        chain = parse_selector_chain("h1.title|meta[property='og:title']|title")
        assert [type(s) for s in chain] == [CssSelector, MetaSelector, CssSelector]


# ---------------------------------------------------------------------------
# Field extraction
# ---------------------------------------------------------------------------

class TestExtractField:
    def test_missing_selector_is_absent(self, product_html):
        soup = _soup(product_html)
        assert extract_field(soup, None) is None
        assert extract_field(soup, "") is None

    def test_text_is_trimmed(self, product_html):
        assert extract_field(_soup(product_html), "h1.product-title") == "Walnut Desk Lamp"

    def test_meta_fallback_when_primary_missing(self):
        html = "<html><head><meta property='og:title' content='From OG'></head><body></body></html>"
        assert extract_field(_soup(html), "h1.title|meta[property='og:title']") == "From OG"

    def test_first_productive_selector_wins(self, product_html):
        field = "meta[property='og:title']|h1.product-title"
        assert extract_field(_soup(product_html), field) == "Walnut Desk Lamp"

    def test_meta_content_trimmed(self, product_html):
        value = extract_field(_soup(product_html), "meta[name='description']")
        assert value == "A warm, dimmable lamp for late-night reading."

    def test_meta_without_content_falls_through(self):
        html = "<meta property='og:title'><h1>Heading</h1>"
        assert extract_field(_soup(html), "meta[property='og:title']|h1") == "Heading"

    def test_img_returns_src(self, product_html):
        assert extract_field(_soup(product_html), "img.hero") == "media/lamp.jpg"

    def test_img_without_src_yields_nothing(self):
        html = "<img class='hero' alt='x'><p class='fallback'>text</p>"
        assert extract_field(_soup(html), "img.hero|p.fallback") == "text"

    def test_href_preferred_over_text(self, product_html):
        assert extract_field(_soup(product_html), "a.zoom") == "/media/lamp-large.jpg"

    def test_only_first_match_used(self):
        html = "<p class='x'>   </p><p class='x'>second</p>"
        # first match is blank, so the selector yields nothing
        assert extract_field(_soup(html), "p.x") is None

    def test_unquoted_meta_selector_yields_nothing(self, product_html):
        assert extract_field(_soup(product_html), "meta[name=description]") is None

    def test_no_match_anywhere(self, product_html):
        assert extract_field(_soup(product_html), "h6.nothing|meta[property='og:missing']") is None

    def test_invalid_css_is_skipped(self, product_html):
        assert extract_field(_soup(product_html), "div[[[|h1.product-title") == "Walnut Desk Lamp"

    def test_accepts_parsed_chain(self, product_html):
        chain = parse_selector_chain("h1.product-title")
        assert extract_field(_soup(product_html), chain) == "Walnut Desk Lamp"


class TestSelectNode:
    def test_returns_matched_element(self, product_html):
        node = select_node(_soup(product_html), "article.product")
        assert isinstance(node, Tag)
        assert node.name == "article"

    def test_skips_empty_elements(self, product_html):
        node = select_node(_soup(product_html), "div.empty|article.product")
        assert isinstance(node, Tag)
        assert node.name == "article"

    def test_element_with_only_children_counts(self):
        node = select_node(_soup("<div id='c'><img src='a.png'></div>"), "#c")
        assert isinstance(node, Tag)

    def test_meta_returns_content_string(self, product_html):
        assert select_node(_soup(product_html), "meta[property='og:description']") == (
            "Hand-finished walnut lamp with brass details."
        )

    def test_nothing_matched(self, product_html):
        assert select_node(_soup(product_html), "section.none") is None
        assert select_node(_soup(product_html), None) is None
