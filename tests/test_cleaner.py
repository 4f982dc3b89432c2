"""Tests for chunking.cleaner — whitespace cleanup and title extraction."""

import pytest

from chunking.cleaner import (
    TITLE_MAX_TOKENS,
    cleanup_content,
    extract_html_body,
    extract_html_title,
    extract_text_title,
)


class TestCleanupContent:
    def test_collapses_horizontal_whitespace(self):
        assert cleanup_content("a   b\t\tc") == "a b c"

    def test_collapses_hyphen_runs(self):
        assert cleanup_content("a-----b") == "a--b"

    def test_single_hyphen_kept(self):
        assert cleanup_content("well-known") == "well-known"

    def test_collapses_blank_lines(self):
        assert cleanup_content("line1\n\n\nline2") == "line1\nline2"

    def test_whitespace_only_lines_removed(self):
        assert cleanup_content("line1\n   \n\t\nline2") == "line1\nline2"

    def test_strips(self):
        assert cleanup_content("  \n text \n ") == "text"

    @pytest.mark.parametrize(
        "text",
        [
            "a   b\n\n\n c",
            "x \n  \n---\n\n\ny",
            "\t\tIndented\n    \n\n   more  text ----  end  ",
            "",
            "already clean",
        ],
    )
    def test_idempotent(self, text):
        once = cleanup_content(text)
        assert cleanup_content(once) == once


class TestExtractTextTitle:
    def test_title_property(self):
        assert extract_text_title("intro\ntitle: My Document \nbody") == "My Document"

    def test_first_alphanumeric_line(self):
        assert extract_text_title("\n----\n  Chapter 1  \nbody") == "Chapter 1"

    def test_fallback(self):
        assert extract_text_title("---\n\n***", fallback="notes.txt") == "notes.txt"

    def test_empty(self):
        assert extract_text_title("", fallback="empty.txt") == "empty.txt"


class TestExtractHtmlTitle:
    def test_title_tag(self):
        html = "<html><head><title>Page</title></head><body><h1>Heading</h1></body></html>"
        assert extract_html_title(html) == "Page"

    def test_h1_before_h2(self):
        html = "<body><h2>Second</h2><h1>First</h1></body>"
        assert extract_html_title(html) == "First"

    def test_h2_only(self):
        assert extract_html_title("<h2>Report</h2><p>Quarterly numbers.</p>") == "Report"

    def test_first_text_node(self):
        html = "<div>   </div><p>  Opening words  </p><p>later</p>"
        assert extract_html_title(html) == "Opening words"

    def test_comments_skipped(self):
        assert extract_html_title("<!-- hidden --><p>Visible</p>") == "Visible"

    def test_first_text_truncated(self, counter):
        html = "<p>" + "word " * 500 + "</p>"
        title = extract_html_title(html)
        assert counter.count(title) <= TITLE_MAX_TOKENS

    def test_fallback(self):
        assert extract_html_title("<div></div>", fallback="page.html") == "page.html"


class TestExtractHtmlBody:
    def test_visible_text_only(self):
        html = (
            "<html><head><title>T</title><style>p {}</style></head>"
            "<body><script>var a = 1;</script><p>Hello</p><p>World</p></body></html>"
        )
        assert extract_html_body(html) == "Hello\nWorld"

    def test_fragment_without_body(self):
        assert extract_html_body("<p>Just a fragment</p>") == "Just a fragment"
