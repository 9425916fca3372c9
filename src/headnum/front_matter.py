"""
Reading and writing numbering settings in the document's YAML front matter.

Settings live under a single key as a compact, comma-separated directive string:

    ---
    number headings: auto, first-level 1, max 4, contents Contents, start-at 1, _.1.A.
    ---

Recognized segments (order-insensitive, last one wins):

- `auto`: number automatically
- `first-level N`: the first heading level (1-6), kept for round trips
- `max N`: the deepest heading level to number (1-6)
- `start-at V`: value of the first top-level number (e.g. `5` or `C`)
- `contents TEXT`: marker that identifies the table of contents heading
- a format token `[_.]S1.S2[SEP]`: `_.` skips H1, S1/S2 are the styles (`1` or `A`)
  of the top level and of the other levels, SEP is `.`, `:` or `-` (or nothing)

Invalid values are ignored and the previous value kept. Documents written for
older versions may instead carry one key per setting (`number-headings-max-level`,
`header-numbering-style-level-1`, ...); those are read when the compact key is
absent.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Callable
from dataclasses import dataclass, replace
from typing import Any

import yaml

from headnum.document import (
    EditorChange,
    FrontMatter,
    MarkdownDocument,
    Position,
    TextRange,
    replace_range_safely,
)
from headnum.errors import FrontMatterKeyNotFoundError
from headnum.settings import (
    DEFAULT_SETTINGS,
    NumberingSettings,
    is_valid_contents,
    is_valid_first_or_max_level,
    is_valid_flag,
    is_valid_numbering_style_string,
    is_valid_numbering_value_string,
    is_valid_separator,
)
from headnum.transforms.numbering_tokens import NumberingStyle

logger = logging.getLogger(__name__)

FRONT_MATTER_KEY = "number headings"

AUTO_PART_KEY = "auto"
FIRST_LEVEL_PART_KEY = "first-level"
MAX_LEVEL_PART_KEY = "max"
START_AT_PART_KEY = "start-at"
CONTENTS_PART_KEY = "contents"


def _to_int(value: str) -> int | None:
    try:
        return int(value)
    except ValueError:
        return None


@dataclass(frozen=True)
class _DirectivePart:
    """A `key value` segment of the directive string and the setting it feeds."""

    key: str
    field: str
    convert: Callable[[str], Any]
    is_valid: Callable[[Any], bool]


# Checked in this order, after the bare `auto` segment.
_DIRECTIVE_PARTS = [
    _DirectivePart(FIRST_LEVEL_PART_KEY, "first_level", _to_int, is_valid_first_or_max_level),
    _DirectivePart(MAX_LEVEL_PART_KEY, "max_level", _to_int, is_valid_first_or_max_level),
    _DirectivePart(START_AT_PART_KEY, "start_at", str, is_valid_numbering_value_string),
    _DirectivePart(CONTENTS_PART_KEY, "contents", str, is_valid_contents),
]


def update_settings_from_format_part(part: str, settings: NumberingSettings) -> NumberingSettings:
    """
    Apply a format token like `1.1`, `_.1.A.` or `A.1:` to `settings`.

    The separator is always reset (to empty if the token has none), and the skip
    flag is set or cleared depending on a leading `_.`.
    """
    separator = ""
    part_without_separator = part
    if part and is_valid_separator(part[-1]):
        separator = part[-1]
        part_without_separator = part[:-1]

    descriptors = part_without_separator.split(".")
    first_numbered_descriptor = 0
    skip_top_level = False
    if len(descriptors) > 1 and descriptors[0] == "_":
        skip_top_level = True
        first_numbered_descriptor = 1

    changes: dict[str, Any] = {"separator": separator, "skip_top_level": skip_top_level}

    if len(descriptors) - first_numbered_descriptor >= 2:
        style_level_1 = descriptors[first_numbered_descriptor]
        if is_valid_numbering_style_string(style_level_1):
            changes["style_level_1"] = NumberingStyle(style_level_1)
        style_level_other = descriptors[first_numbered_descriptor + 1]
        if is_valid_numbering_style_string(style_level_other):
            changes["style_level_other"] = NumberingStyle(style_level_other)

    return replace(settings, **changes)


def parse_compact_settings(value: str) -> NumberingSettings:
    """
    Parse a directive string into settings, starting from the defaults.
    """
    settings = DEFAULT_SETTINGS

    for part in value.split(","):
        trimmed_part = part.strip()
        if not trimmed_part:
            continue

        if trimmed_part == AUTO_PART_KEY:
            settings = replace(settings, auto=True)
            continue

        for directive in _DIRECTIVE_PARTS:
            if trimmed_part == directive.key or trimmed_part.startswith(directive.key + " "):
                raw_value = trimmed_part[len(directive.key) + 1 :].strip()
                converted = directive.convert(raw_value)
                if directive.is_valid(converted):
                    settings = replace(settings, **{directive.field: converted})
                else:
                    logger.debug("Ignoring invalid %r in front matter", trimmed_part)
                break
        else:
            settings = update_settings_from_format_part(trimmed_part, settings)

    return settings


def parse_compact_front_matter_settings(front_matter: FrontMatter) -> NumberingSettings | None:
    """
    Settings from the compact `number headings` key, or `None` if it is absent.
    """
    entry = front_matter.get(FRONT_MATTER_KEY)
    if entry is None or entry == "":
        return None
    return parse_compact_settings(str(entry))


@dataclass(frozen=True)
class _LegacyKey:
    """A setting stored under its own key by older versions."""

    field: str
    suffix: str
    is_valid: Callable[[Any], bool]
    as_string: bool = False

    def read(self, front_matter: FrontMatter) -> Any:
        for prefix in _LEGACY_PREFIXES:
            value = front_matter.get(f"{prefix}-{self.suffix}")
            if value is not None:
                return str(value) if self.as_string else value
        return None


_LEGACY_PREFIXES = ("number-headings", "header-numbering")

_LEGACY_KEYS = [
    _LegacyKey("skip_top_level", "skip-top-level", is_valid_flag),
    _LegacyKey("max_level", "max-level", is_valid_first_or_max_level),
    _LegacyKey("style_level_1", "style-level-1", is_valid_numbering_style_string, as_string=True),
    _LegacyKey(
        "style_level_other", "style-level-other", is_valid_numbering_style_string, as_string=True
    ),
    _LegacyKey("auto", "auto", is_valid_flag),
]


def parse_legacy_front_matter_settings(
    front_matter: FrontMatter, alternative: NumberingSettings
) -> NumberingSettings:
    """
    Settings from the per-setting keys of older versions. Each key is validated on
    its own; missing or invalid ones keep the value from `alternative`.
    """
    changes: dict[str, Any] = {}
    for legacy_key in _LEGACY_KEYS:
        value = legacy_key.read(front_matter)
        if value is not None and legacy_key.is_valid(value):
            if legacy_key.field.startswith("style_"):
                value = NumberingStyle(value)
            changes[legacy_key.field] = value
    return replace(alternative, **changes)


def get_front_matter_settings_or_alternative(
    front_matter: FrontMatter | None, alternative: NumberingSettings
) -> NumberingSettings:
    """
    The document's own settings if its front matter has any, else `alternative`.
    """
    if front_matter is None:
        return alternative

    compact_settings = parse_compact_front_matter_settings(front_matter)
    if compact_settings is not None:
        return compact_settings

    return parse_legacy_front_matter_settings(front_matter, alternative)


def settings_to_compact_front_matter_value(settings: NumberingSettings) -> str:
    """
    Serialize settings to a directive string. The format token comes last and has
    no trailing comma.
    """
    auto_part = f"{AUTO_PART_KEY}, " if settings.auto else ""
    first_level_part = f"{FIRST_LEVEL_PART_KEY} {settings.first_level}, "
    max_part = f"{MAX_LEVEL_PART_KEY} {settings.max_level}, "
    contents_part = f"{CONTENTS_PART_KEY} {settings.contents}, " if settings.contents else ""
    start_at_part = f"{START_AT_PART_KEY} {settings.start_at}, " if settings.start_at else ""
    skip_top_level_string = "_." if settings.skip_top_level else ""
    style_part = (
        f"{skip_top_level_string}{NumberingStyle(settings.style_level_1).value}."
        f"{NumberingStyle(settings.style_level_other).value}{settings.separator}"
    )
    return auto_part + first_level_part + max_part + contents_part + start_at_part + style_part


def make_front_matter_key_line(value: str) -> str:
    """
    The `number headings: ...` line for `value`, quoted by YAML where a plain scalar
    would not read back verbatim (a trailing `:` separator, a ` #` in the contents
    marker, ...).
    """
    return yaml.safe_dump(
        {FRONT_MATTER_KEY: value}, default_flow_style=False, allow_unicode=True, width=sys.maxsize
    )


def _find_line_which_starts_with(
    document: MarkdownDocument, search: str, after_line: int, before_line: int
) -> int | None:
    for i in range(after_line, min(before_line, document.line_count)):
        line = document.get_line(i)
        if line is not None and line.startswith(search):
            return i
    return None


def compute_save_settings_changes(
    document: MarkdownDocument, settings: NumberingSettings
) -> list[EditorChange]:
    changes: list[EditorChange] = []
    key_line_text = make_front_matter_key_line(settings_to_compact_front_matter_value(settings))
    front_matter = document.front_matter

    if front_matter is None:
        start = Position(0, 0)
        new_front_matter = f"---\n{key_line_text}---\n\n"
        replace_range_safely(document, changes, TextRange(start, start), new_front_matter)
        return changes

    front_matter_line = front_matter.start_line

    if FRONT_MATTER_KEY in front_matter:
        key_line = _find_line_which_starts_with(
            document, FRONT_MATTER_KEY, front_matter_line + 1, front_matter.end_line
        )
        if key_line is None:
            raise FrontMatterKeyNotFoundError(
                f'"{FRONT_MATTER_KEY}" key exists in front matter but its line was not found'
            )
        key_range = TextRange(Position(key_line, 0), Position(key_line + 1, 0))
        replace_range_safely(document, changes, key_range, key_line_text)
    else:
        insert_at = Position(front_matter_line + 1, 0)
        replace_range_safely(document, changes, TextRange(insert_at, insert_at), key_line_text)

    return changes


def save_settings_to_front_matter(document: MarkdownDocument, settings: NumberingSettings) -> int:
    """
    Write `settings` into the document's front matter, replacing the existing key,
    adding it to an existing block, or creating a new block at the top.
    Returns the number of changes applied (0 or 1).
    """
    changes = compute_save_settings_changes(document, settings)
    if changes:
        logger.info("Saving settings to front matter: %s", changes[0].text.strip())
        document.transaction(changes)
    return len(changes)
