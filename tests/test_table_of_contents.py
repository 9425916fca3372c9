"""Tests for table of contents generation."""

from __future__ import annotations

from headnum.document import MarkdownDocument, Position, TextRange
from headnum.settings import NumberingSettings
from headnum.transforms.table_of_contents import (
    GithubSlugger,
    TocLinkStyle,
    build_toc,
    clean_heading_text_for_toc,
    compute_table_of_contents_changes,
    create_toc_entry,
    find_toc_range,
    heading_to_slug,
    update_table_of_contents,
)

GUIDE = """\
# Guide
## Contents
## Intro
### Background
## Methods
"""

GUIDE_WITH_TOC = """\
# Guide
## Contents

- [[#Contents|Contents]]
- [[#Intro|Intro]]
\t- [[#Background|Background]]
- [[#Methods|Methods]]
## Intro
### Background
## Methods
"""

TOC_SETTINGS = NumberingSettings(skip_top_level=True, contents="Contents")


class TestHeadingToSlug:
    def test_basic(self) -> None:
        assert heading_to_slug("Introduction") == "introduction"

    def test_numbers_and_punctuation(self) -> None:
        assert heading_to_slug("1.2. Details") == "12-details"
        assert heading_to_slug("What's New?") == "whats-new"

    def test_spaces(self) -> None:
        assert heading_to_slug("  Design   Overview ") == "design-overview"

    def test_slugger_deduplicates(self) -> None:
        slugger = GithubSlugger()
        assert slugger.slug("Notes") == "notes"
        assert slugger.slug("Notes") == "notes-1"
        assert slugger.slug("Notes") == "notes-2"


class TestTocEntries:
    def test_clean_heading_text(self) -> None:
        assert clean_heading_text_for_toc("Intro ^intro-block") == "Intro"
        assert clean_heading_text_for_toc("  Intro  ") == "Intro"

    def test_wiki_entry(self) -> None:
        doc = MarkdownDocument("## Intro ^block\n")
        entry = create_toc_entry(doc.headings[0], NumberingSettings())
        assert entry == "\t- [[#Intro ^block|Intro]]"

    def test_wiki_entry_links_to_source_text(self) -> None:
        doc = MarkdownDocument("# Use `x` here\n## See **bold** text\n")
        settings = NumberingSettings()
        assert create_toc_entry(doc.headings[0], settings) == "- [[#Use `x` here|Use x here]]"
        assert (
            create_toc_entry(doc.headings[1], settings)
            == "\t- [[#See **bold** text|See bold text]]"
        )

    def test_markdown_entry_slugs_plain_text(self) -> None:
        doc = MarkdownDocument("# Use `x` here\n")
        entry = create_toc_entry(doc.headings[0], NumberingSettings(), TocLinkStyle.markdown)
        assert entry == "- [Use x here](#use-x-here)"

    def test_indent_is_relative_to_start_level(self) -> None:
        doc = MarkdownDocument("### Detail\n")
        settings = NumberingSettings(skip_top_level=True)
        assert create_toc_entry(doc.headings[0], settings) == "\t- [[#Detail|Detail]]"

    def test_markdown_entry(self) -> None:
        doc = MarkdownDocument("# 1. Getting Started\n")
        entry = create_toc_entry(doc.headings[0], NumberingSettings(), TocLinkStyle.markdown)
        assert entry == "- [1. Getting Started](#1-getting-started)"


class TestBuildToc:
    def test_finds_anchor_and_builds_block(self) -> None:
        doc = MarkdownDocument(GUIDE)
        toc_heading, block = build_toc(doc.headings, TOC_SETTINGS)
        assert toc_heading is not None
        assert toc_heading.position.line == 1
        assert block == (
            "\n- [[#Contents|Contents]]\n- [[#Intro|Intro]]\n"
            "\t- [[#Background|Background]]\n- [[#Methods|Methods]]\n"
        )

    def test_excluded_anchor_is_still_found(self) -> None:
        doc = MarkdownDocument("# Contents\n## Intro\n")
        toc_heading, block = build_toc(doc.headings, TOC_SETTINGS)
        assert toc_heading is not None and toc_heading.text == "Contents"
        assert block == "\n- [[#Intro|Intro]]\n"

    def test_anchor_is_a_case_sensitive_suffix(self) -> None:
        doc = MarkdownDocument("## Table of Contents\n## contents\n")
        toc_heading, _ = build_toc(doc.headings, TOC_SETTINGS)
        assert toc_heading is not None and toc_heading.text == "Table of Contents"

    def test_empty_block(self) -> None:
        doc = MarkdownDocument("## Contents\n")
        _, block = build_toc(doc.headings, NumberingSettings(max_level=1, contents="Contents"))
        assert block == ""

    def test_markdown_slugs_count_excluded_headings(self) -> None:
        doc = MarkdownDocument("# Notes\n## Notes\n## Notes\n")
        settings = NumberingSettings(skip_top_level=True, contents="Contents")
        _, block = build_toc(doc.headings, settings, TocLinkStyle.markdown)
        assert block == "\n- [Notes](#notes-1)\n- [Notes](#notes-2)\n"


class TestFindTocRange:
    def test_no_list_before_next_heading(self) -> None:
        doc = MarkdownDocument(GUIDE)
        assert find_toc_range(doc, doc.headings[1]) == TextRange(Position(2, 0), Position(2, 0))

    def test_existing_list(self) -> None:
        doc = MarkdownDocument(GUIDE_WITH_TOC)
        assert find_toc_range(doc, doc.headings[1]) == TextRange(Position(2, 0), Position(7, 0))

    def test_list_ends_at_non_bullet_line(self) -> None:
        doc = MarkdownDocument("## Contents\n- [[#A|A]]\n\nText\n")
        assert find_toc_range(doc, doc.headings[0]) == TextRange(Position(1, 0), Position(2, 0))

    def test_end_of_document_without_list(self) -> None:
        doc = MarkdownDocument("## Contents\nSome text")
        assert find_toc_range(doc, doc.headings[0]) == TextRange(Position(1, 0), Position(1, 0))

    def test_list_running_to_end_of_document(self) -> None:
        doc = MarkdownDocument("## Contents\n- old")
        assert find_toc_range(doc, doc.headings[0]) == TextRange(Position(1, 0), Position(1, 5))


class TestUpdateTableOfContents:
    def test_inserts_toc(self) -> None:
        doc = MarkdownDocument(GUIDE)
        assert update_table_of_contents(doc, TOC_SETTINGS) == 1
        assert doc.text == GUIDE_WITH_TOC

    def test_idempotent(self) -> None:
        doc = MarkdownDocument(GUIDE_WITH_TOC)
        assert compute_table_of_contents_changes(doc, TOC_SETTINGS) == []
        assert update_table_of_contents(doc, TOC_SETTINGS) == 0

    def test_replaces_stale_list(self) -> None:
        stale = GUIDE_WITH_TOC.replace("- [[#Methods|Methods]]\n", "- [[#Old|Old]]\n- [[#Gone|Gone]]\n")
        doc = MarkdownDocument(stale)
        assert update_table_of_contents(doc, TOC_SETTINGS) == 1
        assert doc.text == GUIDE_WITH_TOC

    def test_excluded_headings_have_no_entry(self) -> None:
        doc = MarkdownDocument(GUIDE)
        settings = NumberingSettings(skip_top_level=True, max_level=2, contents="Contents")
        update_table_of_contents(doc, settings)
        assert "Background|" not in doc.text
        assert "- [[#Methods|Methods]]\n" in doc.text

    def test_empty_toc_removes_list(self) -> None:
        text = "# Doc\n## Contents\n\n- [[#Old|Old]]\n## Next\n"
        doc = MarkdownDocument(text)
        settings = NumberingSettings(skip_top_level=True, max_level=1, contents="Contents")
        assert update_table_of_contents(doc, settings) == 1
        assert doc.text == "# Doc\n## Contents\n## Next\n"

    def test_list_at_end_of_document(self) -> None:
        doc = MarkdownDocument("## Contents\n- old")
        update_table_of_contents(doc, NumberingSettings(contents="Contents"))
        assert doc.text == "## Contents\n\n\t- [[#Contents|Contents]]\n"
        assert update_table_of_contents(doc, NumberingSettings(contents="Contents")) == 0

    def test_no_marker_configured(self) -> None:
        doc = MarkdownDocument(GUIDE)
        assert update_table_of_contents(doc, NumberingSettings()) == 0
        assert doc.text == GUIDE

    def test_no_anchor_heading(self) -> None:
        doc = MarkdownDocument("# Intro\n## Background\n")
        assert update_table_of_contents(doc, NumberingSettings(contents="Contents")) == 0

    def test_markdown_links(self) -> None:
        doc = MarkdownDocument(GUIDE)
        update_table_of_contents(doc, TOC_SETTINGS, TocLinkStyle.markdown)
        assert "- [Intro](#intro)\n\t- [Background](#background)\n" in doc.text
