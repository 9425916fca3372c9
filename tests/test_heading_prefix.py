"""Tests for heading marker and numbering prefix scanning."""

import logging

import pytest

from headnum.document import MarkdownDocument, Position, TextRange
from headnum.transforms.heading_prefix import (
    get_heading_hash_string,
    get_heading_prefix_range,
    make_heading_hash_string,
    match_heading_prefix,
)


class TestMakeHeadingHashString:
    def test_plain_heading(self) -> None:
        assert make_heading_hash_string("## Background") == "##"

    def test_numbered_heading(self) -> None:
        assert make_heading_hash_string("### 1.2.3. Background") == "###"

    def test_leading_whitespace_is_dropped(self) -> None:
        assert make_heading_hash_string("   # Title") == "#"

    def test_no_marker(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING):
            assert make_heading_hash_string("Background") is None
        assert "Unexpected heading format: 'Background'" in caplog.text


class TestMatchHeadingPrefix:
    @pytest.mark.parametrize(
        ("line", "prefix"),
        [
            ("## Background", "## "),
            ("## 1.2. Background", "## 1.2. "),
            ("## 1.2 Background", "## 1.2 "),
            ("### A.3: Background", "### A.3: "),
            ("# 4- Background", "# 4- "),
            ("# 12. Background", "# 12. "),
            ("##   Background", "##   "),
            ("  ## 1.A.1 Background", "  ## 1.A.1 "),
            ("## A Tale", "## A "),
        ],
    )
    def test_prefixes(self, line: str, prefix: str) -> None:
        assert match_heading_prefix(line) == prefix

    def test_no_space_after_marker(self) -> None:
        assert match_heading_prefix("##") is None

    def test_lowercase_letters_are_body_text(self) -> None:
        """Only uppercase letters are numbering tokens."""
        assert match_heading_prefix("## a. Background") == "## "

    def test_words_are_not_numbering(self) -> None:
        assert match_heading_prefix("## Intro. Background") == "## "


class TestGetHeadingPrefixRange:
    def test_range_spans_prefix_on_heading_line(self) -> None:
        doc = MarkdownDocument("# Title\n## 2.1. Sub\n")
        heading = doc.headings[1]
        assert get_heading_prefix_range(doc, heading) == TextRange(
            Position(1, 0), Position(1, 8)
        )
        assert get_heading_hash_string(doc, heading) == "##"

    def test_unnumbered_range(self) -> None:
        doc = MarkdownDocument("### Details")
        prefix_range = get_heading_prefix_range(doc, doc.headings[0])
        assert prefix_range == TextRange(Position(0, 0), Position(0, 4))
        assert doc.get_range(prefix_range) == "### "

    def test_empty_heading_is_unrecognized(self, caplog: pytest.LogCaptureFixture) -> None:
        doc = MarkdownDocument("# One\n##\n")
        assert len(doc.headings) == 2
        with caplog.at_level(logging.WARNING):
            assert get_heading_prefix_range(doc, doc.headings[1]) is None
        assert "Unexpected heading format: '##'" in caplog.text
