"""
In-memory Markdown document with the editor-like surface the transforms work against.

A `MarkdownDocument` wraps the full text and offers:
- Line access by index (`get_line`) and range reads (`get_range`)
- Atomic application of a batch of range replacements (`transaction`)
- The document's ATX headings in order (`headings`), each with its line position
- The YAML front matter block at the top of the document, if any (`front_matter`)

Positions are `(line, ch)` pairs with 0-based lines and columns. A range end may
point one line past the last line, which means the end of the document.

Heading detection walks the lines, skipping the front matter block and fenced code,
and hands each candidate `#` line to marko. Only lines marko agrees are headings
are reported. Setext headings (underlined with `===`) carry no marker run to number
and are not reported.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

import yaml
from marko import Markdown, block, inline

from headnum.errors import OverlappingEditsError

logger = logging.getLogger(__name__)

FRONT_MATTER_DELIMITER = "---"

_ATX_CANDIDATE_PATTERN = re.compile(r"^ {0,3}#{1,6}(?:[ \t]|$)")
_FENCE_OPEN_PATTERN = re.compile(r"^ {0,3}(`{3,}|~{3,})")
_ATX_MARKER_PATTERN = re.compile(r"^ {0,3}#{1,6}")
_ATX_CLOSING_PATTERN = re.compile(r"(?:^|[ \t]+)#+[ \t]*$")

_markdown = Markdown()


@dataclass(frozen=True, order=True)
class Position:
    line: int
    ch: int = 0


@dataclass(frozen=True)
class TextRange:
    start: Position
    end: Position


@dataclass(frozen=True)
class EditorChange:
    """Replace the text in `range` with `text`."""

    range: TextRange
    text: str


@dataclass(frozen=True)
class Heading:
    """
    A heading as found in the document. `text` is the plain heading text (inline
    markup removed, closing `#` sequence removed) and `position` is the heading's
    line. `raw_text` is the source text after the marker run, markup included.
    """

    level: int
    text: str
    position: Position
    raw_text: str = ""


@dataclass(frozen=True)
class FrontMatter:
    """
    The parsed YAML front matter and the lines of its `---` delimiters.
    """

    data: dict[str, Any]
    start_line: int
    end_line: int

    def get(self, key: str) -> Any:
        return self.data.get(key)

    def __contains__(self, key: str) -> bool:
        return key in self.data


def replace_range_safely(
    document: MarkdownDocument, changes: list[EditorChange], text_range: TextRange, text: str
) -> None:
    """
    Queue a replacement, but only if it changes the text. Re-running an operation
    on an up-to-date document then produces no edits at all.
    """
    if document.get_range(text_range) != text:
        changes.append(EditorChange(range=text_range, text=text))


def _get_heading_text(heading: block.Heading) -> str:
    """
    Extract the plain text from a heading element, descending into emphasis,
    links, code spans and other inline elements.
    """
    text_parts: list[str] = []

    def collect_text(element: object) -> None:
        if isinstance(element, inline.RawText):
            assert isinstance(element.children, str)
            text_parts.append(element.children)
        else:
            children = getattr(element, "children", None)
            if isinstance(children, list):
                for child in children:  # pyright: ignore[reportUnknownVariableType]
                    collect_text(child)  # pyright: ignore[reportUnknownArgumentType]
            elif isinstance(children, str):
                text_parts.append(children)

    collect_text(heading)
    return "".join(text_parts)


def parse_heading_line(line: str) -> tuple[int, str] | None:
    """
    Return `(level, text)` if marko parses `line` as an ATX heading, else `None`.
    """
    if not _ATX_CANDIDATE_PATTERN.match(line):
        return None
    doc = _markdown.parse(line)
    if not doc.children or not isinstance(doc.children[0], block.Heading):
        return None
    heading = doc.children[0]
    return heading.level, _get_heading_text(heading).strip()


def get_raw_heading_text(line: str) -> str:
    """
    The source text of an ATX heading line, without the marker run or a closing
    `#` sequence: "## Use `x` here ##" -> "Use `x` here".
    """
    text = _ATX_MARKER_PATTERN.sub("", line, count=1).strip()
    return _ATX_CLOSING_PATTERN.sub("", text).strip()


def _is_fence_close(line: str, fence: str) -> bool:
    stripped = line.strip()
    return len(stripped) >= len(fence) and stripped == fence[0] * len(stripped)


class MarkdownDocument:
    """
    A Markdown document held in memory, edited only through `transaction()`.
    """

    def __init__(self, text: str) -> None:
        self._text = text
        self._lines: list[str] | None = None
        self._line_offsets: list[int] | None = None
        self._headings: list[Heading] | None = None
        self._front_matter: FrontMatter | None = None
        self._front_matter_parsed = False

    @property
    def text(self) -> str:
        return self._text

    @property
    def lines(self) -> list[str]:
        if self._lines is None:
            self._lines = self._text.split("\n")
        return self._lines

    @property
    def line_count(self) -> int:
        return len(self.lines)

    def get_line(self, line: int) -> str | None:
        """The text of line `line` without its newline, or `None` past the end."""
        if line < 0 or line >= self.line_count:
            return None
        return self.lines[line]

    @property
    def end_position(self) -> Position:
        return Position(self.line_count - 1, len(self.lines[-1]))

    def offset_of(self, position: Position) -> int:
        """Convert a position to a character offset, clamped to the document."""
        if self._line_offsets is None:
            offsets: list[int] = []
            offset = 0
            for line in self.lines:
                offsets.append(offset)
                offset += len(line) + 1
            self._line_offsets = offsets

        if position.line >= self.line_count:
            return len(self._text)
        line_start = self._line_offsets[max(position.line, 0)]
        return line_start + min(position.ch, len(self.lines[max(position.line, 0)]))

    def get_range(self, text_range: TextRange) -> str:
        return self._text[self.offset_of(text_range.start) : self.offset_of(text_range.end)]

    def transaction(self, changes: Iterable[EditorChange]) -> None:
        """
        Apply all changes at once. Ranges refer to the document as it is before the
        transaction. Nothing is modified unless every change is valid.
        """
        spans: list[tuple[int, int, str]] = []
        for change in changes:
            start = self.offset_of(change.range.start)
            end = self.offset_of(change.range.end)
            if end < start:
                raise ValueError(f"Range end before start: {change.range}")
            spans.append((start, end, change.text))

        if not spans:
            return

        # Stable sort keeps insertions at the same point in batch order
        spans.sort(key=lambda span: (span[0], span[1]))
        for (_, prev_end, _), (next_start, _, _) in zip(spans, spans[1:]):
            if next_start < prev_end:
                raise OverlappingEditsError(
                    f"Overlapping edits at offsets {next_start} and {prev_end}"
                )

        pieces: list[str] = []
        cursor = 0
        for start, end, text in spans:
            pieces.append(self._text[cursor:start])
            pieces.append(text)
            cursor = end
        pieces.append(self._text[cursor:])

        self._set_text("".join(pieces))

    def _set_text(self, text: str) -> None:
        self._text = text
        self._lines = None
        self._line_offsets = None
        self._headings = None
        self._front_matter = None
        self._front_matter_parsed = False

    @property
    def front_matter(self) -> FrontMatter | None:
        if not self._front_matter_parsed:
            self._front_matter = self._parse_front_matter()
            self._front_matter_parsed = True
        return self._front_matter

    def _parse_front_matter(self) -> FrontMatter | None:
        lines = self.lines
        if not lines or lines[0].rstrip() != FRONT_MATTER_DELIMITER:
            return None

        end_line = None
        for i in range(1, len(lines)):
            if lines[i].rstrip() == FRONT_MATTER_DELIMITER:
                end_line = i
                break
        if end_line is None:
            return None

        yaml_content = "\n".join(lines[1:end_line])
        data: dict[str, Any] = {}
        try:
            loaded = yaml.safe_load(yaml_content)
        except yaml.YAMLError as e:
            logger.warning("Could not parse front matter: %s", e)
        else:
            if isinstance(loaded, dict):
                data = {str(k): v for k, v in loaded.items()}  # pyright: ignore[reportUnknownVariableType]

        return FrontMatter(data=data, start_line=0, end_line=end_line)

    @property
    def headings(self) -> list[Heading]:
        if self._headings is None:
            self._headings = self._find_headings()
        return self._headings

    def _find_headings(self) -> list[Heading]:
        headings: list[Heading] = []
        front_matter = self.front_matter
        first_body_line = front_matter.end_line + 1 if front_matter else 0

        fence: str | None = None
        for i in range(first_body_line, self.line_count):
            line = self.lines[i]
            if fence is not None:
                if _is_fence_close(line, fence):
                    fence = None
                continue
            fence_match = _FENCE_OPEN_PATTERN.match(line)
            if fence_match:
                fence = fence_match.group(1)
                continue

            parsed = parse_heading_line(line)
            if parsed is None:
                continue
            level, text = parsed
            headings.append(
                Heading(
                    level=level,
                    text=text,
                    position=Position(i, 0),
                    raw_text=get_raw_heading_text(line),
                )
            )

        return headings
