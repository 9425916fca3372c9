"""
Numbering settings and the validators shared by front matter, config files and the CLI.

Settings are an immutable record. Front matter parsing falls back silently when a
value does not validate; config files and CLI flags are explicit user input, so
`validate_settings()` raises instead.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, fields
from typing import Any

from headnum.errors import InvalidSettingsError
from headnum.transforms.numbering_tokens import NumberingStyle

MIN_LEVEL = 1
MAX_LEVEL = 6

# Separators the heading prefix scanner can strip again on the next run.
VALID_SEPARATORS = ("", ".", ":", "-")

# Marker used by `headnum toc` when no contents marker is configured.
DEFAULT_CONTENTS_MARKER = "Contents"

_NUMBERING_VALUE_PATTERN = re.compile(r"^(?:[1-9][0-9]*|[A-Z])$")


@dataclass(frozen=True)
class NumberingSettings:
    """
    Settings for one numbering or table of contents run.
    """

    skip_top_level: bool = False
    first_level: int = 1
    max_level: int = MAX_LEVEL
    style_level_1: NumberingStyle = NumberingStyle.decimal
    style_level_other: NumberingStyle = NumberingStyle.decimal
    auto: bool = False
    separator: str = "."
    contents: str = ""
    start_at: str = ""

    @property
    def start_level(self) -> int:
        """The shallowest heading level that gets a number."""
        return 2 if self.skip_top_level else 1

    def is_excluded(self, level: int) -> bool:
        """Whether headings at this level are left (or restored) unnumbered."""
        return (self.skip_top_level and level == 1) or level > self.max_level


DEFAULT_SETTINGS = NumberingSettings()

SETTINGS_FIELDS = frozenset(f.name for f in fields(NumberingSettings))


def is_valid_flag(value: Any) -> bool:
    return isinstance(value, bool)


def is_valid_first_or_max_level(value: Any) -> bool:
    # bool is an int subclass, but `max: true` is not a level
    if isinstance(value, bool) or not isinstance(value, int):
        return False
    return MIN_LEVEL <= value <= MAX_LEVEL


def is_valid_numbering_style_string(value: Any) -> bool:
    return isinstance(value, str) and value in (s.value for s in NumberingStyle)


def is_valid_numbering_value_string(value: Any) -> bool:
    """A start-at value: empty, a positive integer or a single uppercase letter."""
    if not isinstance(value, str):
        return False
    return value == "" or _NUMBERING_VALUE_PATTERN.match(value) is not None


def is_valid_separator(value: Any) -> bool:
    return isinstance(value, str) and value in VALID_SEPARATORS


def is_valid_contents(value: Any) -> bool:
    """A contents marker must fit in one comma-separated directive segment."""
    return (
        isinstance(value, str)
        and len(value.strip()) > 0
        and "," not in value
        and "\n" not in value
    )


def does_contents_have_value(contents: str) -> bool:
    return len(contents) > 0


_FIELD_VALIDATORS = {
    "skip_top_level": is_valid_flag,
    "first_level": is_valid_first_or_max_level,
    "max_level": is_valid_first_or_max_level,
    "style_level_1": is_valid_numbering_style_string,
    "style_level_other": is_valid_numbering_style_string,
    "auto": is_valid_flag,
    "separator": is_valid_separator,
    "contents": lambda v: v == "" or is_valid_contents(v),
    "start_at": is_valid_numbering_value_string,
}


def validate_settings(settings: NumberingSettings) -> NumberingSettings:
    """
    Check every field of `settings`, raising `InvalidSettingsError` on the first
    bad one. Returns the settings unchanged so calls can be chained.
    """
    for name, validator in _FIELD_VALIDATORS.items():
        value = getattr(settings, name)
        if not validator(value):
            raise InvalidSettingsError(f"Invalid value for {name.replace('_', '-')}: {value!r}")
    return settings
