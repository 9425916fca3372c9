"""
Scanning of heading lines for the marker run and any existing numbering prefix.

Two patterns are applied to the raw heading line:

- The marker run: up to 4 leading whitespace characters and one or more `#`.
  The run is returned without the leading whitespace, e.g. "##".
- The full prefix: the marker run, an optional space, any existing outline number
  (`1.`, `A.`, `1.2.`, `A.3`, ...), an optional `:`, `.` or `-`, and one or more
  spaces. Everything up to the end of this match is replaced when a heading is
  (re)numbered or stripped.

Examples of full prefixes (shown in brackets):
    [## ]Background
    [## 1.2. ]Background
    [### A.3: ]Background
    [# 4- ]Background

Note a heading whose body starts with a lone uppercase letter or number followed
by a space ("## A Tale") has that word treated as numbering.
"""

from __future__ import annotations

import logging
import re

from headnum.document import Heading, MarkdownDocument, Position, TextRange

logger = logging.getLogger(__name__)

HEADING_HASH_PATTERN = re.compile(r"^\s{0,4}#+")

HEADING_PREFIX_PATTERN = re.compile(r"^\s{0,4}#+( )?([0-9]+\.|[A-Z]\.)*([0-9]+|[A-Z])?[:.-]?( )+")


def make_heading_hash_string(line: str) -> str | None:
    """
    Return the marker run of a heading line, e.g. "###", or `None` if the line
    does not start with one.
    """
    match = HEADING_HASH_PATTERN.match(line)
    if not match:
        logger.warning("Unexpected heading format: '%s'", line)
        return None
    return match.group(0).lstrip()


def match_heading_prefix(line: str) -> str | None:
    """
    Return the full existing prefix of a heading line (marker run, numbering and
    trailing spaces), or `None` if the line doesn't have one.
    """
    match = HEADING_PREFIX_PATTERN.match(line)
    if not match:
        return None
    return match.group(0)


def get_heading_prefix_range(document: MarkdownDocument, heading: Heading) -> TextRange | None:
    """
    The range of the heading's full prefix on its line, starting at column 0.
    Returns `None` (and logs) when the line is missing or not in a recognized format,
    in which case the heading should be left alone.
    """
    line_number = heading.position.line
    line = document.get_line(line_number)
    if not line:
        return None

    prefix = match_heading_prefix(line)
    if prefix is None:
        logger.warning("Unexpected heading format: '%s'", line)
        return None

    return TextRange(Position(line_number, 0), Position(line_number, len(prefix)))


def get_heading_hash_string(document: MarkdownDocument, heading: Heading) -> str | None:
    line = document.get_line(heading.position.line)
    if not line:
        return None
    return make_heading_hash_string(line)
