"""Unit tests for the flat HTML → Markdown renderer."""

from __future__ import annotations

import re

import pytest
from bs4 import BeautifulSoup

from pagecrawl.extractors.markdown import TAG_RULES, html_to_markdown, node_to_markdown


class TestEmptyInput:
    @pytest.mark.parametrize("html", [None, ""])
    def test_returns_empty_string(self, html):
        assert html_to_markdown(html) == ""

    def test_whitespace_only(self):
        assert html_to_markdown("   \n  ") == ""


class TestBlockRules:
    def test_heading_and_paragraph(self):
        assert html_to_markdown("<h1>A</h1><p>B</p>") == "# A\n\nB"

    @pytest.mark.parametrize("level", range(1, 7))
    def test_heading_levels(self, level):
        md = html_to_markdown(f"<h{level}>  Title  </h{level}>")
        assert md == "#" * level + " Title"

    def test_link_with_href(self):
        assert html_to_markdown('<a href="/x">Go</a>') == "[Go](/x)"

    def test_link_without_href(self):
        assert html_to_markdown("<a>Plain</a>") == "Plain"

    def test_image(self):
        assert html_to_markdown('<img src="/a.png" alt="Chart">') == "![Chart](/a.png)"

    def test_image_alt_defaults_to_empty(self):
        assert html_to_markdown('<img src="/a.png">') == "![](/a.png)"

    def test_image_without_src_emits_nothing(self):
        assert html_to_markdown('<img alt="x"><p>after</p>') == "after"

    def test_lists_render_as_dash_bullets(self):
        html = "<ul><li>one</li><li> two </li></ul><ol><li>three</li></ol>"
        assert html_to_markdown(html) == "- one\n- two\n\n- three"

    def test_nested_list_items_are_all_listed(self):
        html = "<ul><li>outer<ul><li>inner</li></ul></li></ul>"
        md = html_to_markdown(html)
        assert "- inner" in md
        assert md.startswith("- outer")

    def test_blockquote(self):
        assert html_to_markdown("<blockquote> quoted </blockquote>") == "> quoted"

    def test_pre_is_fenced(self):
        assert html_to_markdown("<pre>  x = 1\n</pre>") == "```\nx = 1\n```"

    def test_unknown_tag_falls_back_to_text(self):
        assert html_to_markdown("<section><span>Hi</span> there</section>") == "Hi there"

    def test_unknown_empty_tag_contributes_nothing(self):
        assert html_to_markdown("<div></div><p>x</p>") == "x"


class TestInlineRules:
    def test_inline_rules_have_no_separator(self):
        html = "<body><strong>bold</strong><em>it</em><code>c</code></body>"
        assert html_to_markdown(html) == "**bold***it*`c`"

    def test_b_and_i_aliases(self):
        assert html_to_markdown("<b>x</b>") == "**x**"
        assert html_to_markdown("<i>y</i>") == "*y*"

    def test_nested_formatting_is_flattened(self):
        assert html_to_markdown("<p>Some <strong>bold</strong> text</p>") == "Some bold text"


class TestTextNodes:
    def test_bare_text_between_blocks(self):
        html = "<body><h2>Head</h2>loose text<p>para</p></body>"
        assert html_to_markdown(html) == "## Head\n\nloose text\n\npara"

    def test_comments_are_ignored(self):
        assert html_to_markdown("<body><!-- hidden --><p>seen</p></body>") == "seen"


class TestNormalization:
    def test_never_three_newlines(self, product_html, blog_post_html):
        for html in (product_html, blog_post_html, "<p></p><p></p><p>x</p><br><br><p>y</p>"):
            assert not re.search(r"\n{3,}", html_to_markdown(html))

    def test_result_is_trimmed(self):
        md = html_to_markdown("<p>  </p><p>x</p><p> </p>")
        assert md == "x"

    def test_malformed_html_does_not_raise(self):
        md = html_to_markdown("<h1>Unclosed<p>para<ul><li>item")
        assert isinstance(md, str)
        assert "Unclosed" in md

    def test_head_only_document(self):
        assert html_to_markdown("<html><head><title>t</title></head></html>") == ""


class TestNodeToMarkdown:
    def test_renders_children_of_parsed_node(self, blog_post_html):
        soup = BeautifulSoup(blog_post_html, "lxml")
        md = node_to_markdown(soup.select_one("#post"))
        assert md == (
            "## What changed\n\n"
            "The parser is faster.\n\n"
            "```\npip install --upgrade tool\n```\n\n"
            "- Faster parsing\n- Fewer allocations\n\n"
            "![Benchmark chart](/img/chart.png)\n\n"
            "[Full changelog](https://example.com/changelog)"
        )

    def test_rule_table_covers_documented_tags(self):
        expected = {
            "h1", "h2", "h3", "h4", "h5", "h6", "p", "a", "img", "ul", "ol",
            "blockquote", "code", "pre", "strong", "b", "em", "i",
        }
        assert set(TAG_RULES) == expected
