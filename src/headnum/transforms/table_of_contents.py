"""
Table of contents generation under a designated "contents" heading.

The contents heading is the (last) heading whose text ends with the configured
marker, e.g. "Contents" matches "## Table of Contents". Below it, a bullet list with
one entry per numbered heading is kept up to date:

    ## Contents

    - [[#Intro|Intro]]
    	- [[#Background|Background]]
    - [[#Methods|Methods]]

Entries are indented with one tab per level below the start level. Headings that
are excluded from numbering get no entry. The contents heading itself is looked for
before the exclusion check, so it can be excluded and still found.

LINK STYLES
-----------
- wiki: `[[#Heading text|Label]]`, as understood by wiki-link editors (the default)
- markdown: `[Label](#slug)` with GitHub-compatible slugs

Labels use the plain heading text and drop any trailing block reference
(`Intro ^intro-block` -> `Intro`). Wiki link targets keep the heading's source text,
markup included, so "## Use `x` here" links as `[[#Use `x` here|Use x here]]`.

REPLACED RANGE
--------------
Starting on the line after the contents heading, the scan skips non-list lines until
it finds the first line starting with `-`, then extends over the contiguous run of
such lines. Everything from the line after the heading to the end of that run is
replaced. If another heading or the end of the document comes first, the list is
inserted right after the contents heading.
"""

from __future__ import annotations

import logging
import re
import unicodedata
from dataclasses import dataclass, field
from enum import Enum

from headnum.document import (
    EditorChange,
    Heading,
    MarkdownDocument,
    Position,
    TextRange,
    replace_range_safely,
)
from headnum.settings import NumberingSettings, does_contents_have_value

logger = logging.getLogger(__name__)

TOC_LIST_ITEM_BULLET = "-"


class TocLinkStyle(str, Enum):
    """How table of contents entries link to their headings."""

    wiki = "wiki"
    markdown = "markdown"


def heading_to_slug(text: str) -> str:
    """
    Convert heading text to a GitHub-compatible anchor slug: lowercase, drop
    punctuation, spaces to hyphens, collapse and trim hyphens.
    """
    result = text.lower()

    cleaned: list[str] = []
    for char in result:
        if char.isalnum() or char == " " or char == "-":
            cleaned.append(char)
        elif unicodedata.category(char).startswith("L"):
            cleaned.append(char)
    result = "".join(cleaned)

    result = result.replace(" ", "-")
    result = re.sub(r"-+", "-", result)
    return result.strip("-")


@dataclass
class GithubSlugger:
    """
    Generates unique slugs within a document: repeated headings get -1, -2, etc.
    """

    _seen: dict[str, int] = field(default_factory=dict)

    def slug(self, text: str) -> str:
        base_slug = heading_to_slug(text)

        if base_slug not in self._seen:
            self._seen[base_slug] = 0
            return base_slug

        self._seen[base_slug] += 1
        return f"{base_slug}-{self._seen[base_slug]}"


def clean_heading_text_for_toc(text: str) -> str:
    """Drop a trailing `^block-reference` and surrounding whitespace."""
    if "^" in text:
        return text.split("^")[0].strip()
    return text.strip()


def create_toc_entry(
    heading: Heading,
    settings: NumberingSettings,
    link_style: TocLinkStyle = TocLinkStyle.wiki,
    slugger: GithubSlugger | None = None,
) -> str:
    text = heading.text
    clean_text = clean_heading_text_for_toc(text)

    bullet_indent = "\t" * max(heading.level - settings.start_level, 0)

    if link_style == TocLinkStyle.markdown:
        slug = slugger.slug(text) if slugger else heading_to_slug(text)
        entry_link = f"[{clean_text}](#{slug})"
    else:
        # Wiki editors resolve the link against the heading as written.
        target = heading.raw_text or text
        entry_link = f"[[#{target}|{clean_text}]]"

    return bullet_indent + TOC_LIST_ITEM_BULLET + " " + entry_link


def build_toc(
    headings: list[Heading],
    settings: NumberingSettings,
    link_style: TocLinkStyle = TocLinkStyle.wiki,
) -> tuple[Heading | None, str]:
    """
    Find the contents heading and build the list block that belongs under it.

    Returns `(toc_heading, block)`. The block starts with a newline (leaving a blank
    line below the heading) and ends with one, or is empty if no heading qualifies.
    """
    toc_heading: Heading | None = None
    # Slugs cover every heading, since excluded headings still get anchors.
    slugger = GithubSlugger()
    entries: list[str] = []

    for heading in headings:
        # Look for the contents heading before skipping excluded headings.
        if heading.text.endswith(settings.contents):
            toc_heading = heading

        if settings.is_excluded(heading.level):
            if link_style == TocLinkStyle.markdown:
                slugger.slug(heading.text)
            continue

        entries.append(create_toc_entry(heading, settings, link_style, slugger))

    if not entries:
        return toc_heading, ""
    return toc_heading, "\n" + "".join(entry + "\n" for entry in entries)


def find_toc_range(document: MarkdownDocument, toc_heading: Heading) -> TextRange:
    """
    The range holding the existing list below `toc_heading`, or an empty range on
    the line after it when there is no list yet.
    """
    starting_line = toc_heading.position.line + 1
    start = Position(starting_line, 0)

    found_list = False
    ending_line = starting_line
    while True:
        line = document.get_line(ending_line)
        if line is None:
            if found_list:
                return TextRange(start, document.end_position)
            return TextRange(start, start)

        trimmed_line = line.lstrip()
        if found_list:
            if not trimmed_line.startswith(TOC_LIST_ITEM_BULLET) or trimmed_line.startswith("#"):
                break
        elif trimmed_line.startswith(TOC_LIST_ITEM_BULLET):
            found_list = True
        elif trimmed_line.startswith("#"):
            return TextRange(start, start)

        ending_line += 1

    return TextRange(start, Position(ending_line, 0))


def compute_table_of_contents_changes(
    document: MarkdownDocument,
    settings: NumberingSettings,
    link_style: TocLinkStyle = TocLinkStyle.wiki,
) -> list[EditorChange]:
    changes: list[EditorChange] = []
    if not does_contents_have_value(settings.contents):
        return changes

    toc_heading, toc_block = build_toc(document.headings, settings, link_style)
    if toc_heading is None:
        logger.info("No heading ending with %r, table of contents not updated", settings.contents)
        return changes

    toc_range = find_toc_range(document, toc_heading)
    logger.debug("Replacing range for table of contents: %s", toc_range)
    replace_range_safely(document, changes, toc_range, toc_block)
    return changes


def update_table_of_contents(
    document: MarkdownDocument,
    settings: NumberingSettings,
    link_style: TocLinkStyle = TocLinkStyle.wiki,
) -> int:
    """
    Insert or refresh the table of contents in place. Returns the number of changes
    applied (0 or 1).
    """
    changes = compute_table_of_contents_changes(document, settings, link_style)
    if changes:
        logger.info("Applying table of contents changes: %d", len(changes))
        document.transaction(changes)
    return len(changes)
