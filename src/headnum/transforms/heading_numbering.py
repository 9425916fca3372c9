"""
Outline numbering of Markdown headings.

Headings are walked top to bottom while a numbering stack mirrors the current
nesting path: one token per numbered level, index 0 being the top numbered level.
For each heading:

- Excluded headings (H1 when the top level is skipped, or deeper than the max
  level) are restored to their bare marker run, e.g. "### 1.2.3 Foo" -> "### Foo".
  The stack is not touched.
- A sibling (same level as the previous heading) increments the top token.
- Going back up pops the deeper tokens, then increments the new top.
- Going deeper pushes a first token (in the "other levels" style) per new level.

The new prefix is the marker run, a space, the tokens joined by ".", the separator
and a space:

    ## 1.2. Background

All replacements are collected first and applied as a single transaction, and a
replacement identical to the existing prefix is not emitted. Numbering an already
numbered document therefore makes no edits.

EXAMPLE
-------
Input:
    # Intro
    ## Background
    ## Related Work
    # Methods
    ## Setup

Output (default settings):
    # 1. Intro
    ## 1.1. Background
    ## 1.2. Related Work
    # 2. Methods
    ## 2.1. Setup
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator

from headnum.document import EditorChange, Heading, MarkdownDocument, replace_range_safely
from headnum.settings import NumberingSettings
from headnum.transforms.heading_prefix import get_heading_hash_string, get_heading_prefix_range
from headnum.transforms.numbering_tokens import (
    NumberingToken,
    first_token,
    parse_token,
    preceding_token,
    zeroth_token,
)

logger = logging.getLogger(__name__)


def make_numbering_string(numbering_stack: list[NumberingToken]) -> str:
    """
    Format the stack as " 1.2.3": a leading space, then tokens joined by ".".
    """
    return " " + ".".join(str(token) for token in numbering_stack) if numbering_stack else ""


def initial_numbering_stack(settings: NumberingSettings) -> list[NumberingToken]:
    """
    The stack before the first heading: the token just before the first top-level
    number, so that the first heading increments into it. A start-at value is read
    in the top-level style.
    """
    if settings.start_at:
        return [preceding_token(parse_token(settings.start_at, settings.style_level_1))]
    return [zeroth_token(settings.style_level_1)]


def iter_heading_numbers(
    headings: Iterable[Heading], settings: NumberingSettings
) -> Iterator[tuple[Heading, list[NumberingToken] | None]]:
    """
    Walk the headings in order, yielding each with a snapshot of the numbering stack,
    or `None` for headings that should carry no number.
    """
    numbering_stack = initial_numbering_stack(settings)
    previous_level = settings.start_level

    for heading in headings:
        level = heading.level

        if settings.is_excluded(level):
            yield heading, None
            continue

        if level == previous_level:
            if numbering_stack:
                numbering_stack.append(numbering_stack.pop().next())
        elif level < previous_level:
            for _ in range(previous_level - level):
                if numbering_stack:
                    numbering_stack.pop()
            if numbering_stack:
                numbering_stack.append(numbering_stack.pop().next())
        else:
            for _ in range(level - previous_level):
                numbering_stack.append(first_token(settings.style_level_other))

        previous_level = level

        # Normally filtered by the exclusion check above.
        if level > settings.max_level:
            yield heading, None
            continue

        yield heading, list(numbering_stack)


def compute_heading_numbering_changes(
    document: MarkdownDocument, settings: NumberingSettings
) -> list[EditorChange]:
    """
    Compute the edits that number every heading of `document` per `settings`,
    without applying them.
    """
    changes: list[EditorChange] = []

    for heading, numbering_stack in iter_heading_numbers(document.headings, settings):
        prefix_range = get_heading_prefix_range(document, heading)
        if prefix_range is None:
            continue
        hash_string = get_heading_hash_string(document, heading)
        if hash_string is None:
            continue

        if numbering_stack is None:
            # Restore excluded headings to an unnumbered prefix.
            replace_range_safely(document, changes, prefix_range, hash_string + " ")
            continue

        numbering_string = make_numbering_string(numbering_stack)
        replace_range_safely(
            document,
            changes,
            prefix_range,
            hash_string + numbering_string + settings.separator + " ",
        )

    return changes


def update_heading_numbering(document: MarkdownDocument, settings: NumberingSettings) -> int:
    """
    Number all headings in place. Returns the number of headings changed.
    """
    changes = compute_heading_numbering_changes(document, settings)
    if changes:
        logger.info("Applying heading numbering changes: %d", len(changes))
        document.transaction(changes)
    return len(changes)


def compute_remove_numbering_changes(document: MarkdownDocument) -> list[EditorChange]:
    changes: list[EditorChange] = []
    for heading in document.headings:
        prefix_range = get_heading_prefix_range(document, heading)
        if prefix_range is None:
            continue
        hash_string = get_heading_hash_string(document, heading)
        if hash_string is None:
            continue
        replace_range_safely(document, changes, prefix_range, hash_string + " ")
    return changes


def remove_heading_numbering(document: MarkdownDocument) -> int:
    """
    Strip the numbering from every heading in place. Returns the number of headings
    changed.
    """
    changes = compute_remove_numbering_changes(document)
    if changes:
        logger.info("Applying heading numbering removal changes: %d", len(changes))
        document.transaction(changes)
    return len(changes)
