"""
Numbering tokens: the per-level counters that make up an outline number.

A token is either an integer (style "1") or a single uppercase letter (style "A").
Letters wrap around from Z back to A.

The numbering stack is seeded with the *zeroth* token of the top-level style, so
that the first heading is produced the same way as every later one: increment the
top of the stack, then use it. For decimals 0 + 1 = 1; for letters Z wraps to A.

Usage:
    from headnum.transforms.numbering_tokens import NumberingStyle, zeroth_token

    token = zeroth_token(NumberingStyle.letter)
    token = token.next()  # LetterToken("A")
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class NumberingStyle(str, Enum):
    """Numbering style for a heading level, spelled as in the front matter."""

    decimal = "1"  # 1, 2, 3, ... 10, 11
    letter = "A"  # A, B, C, ... Z, A


@dataclass(frozen=True)
class IntegerToken:
    value: int

    def next(self) -> IntegerToken:
        return IntegerToken(self.value + 1)

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class LetterToken:
    letter: str

    def __post_init__(self) -> None:
        if len(self.letter) != 1 or not ("A" <= self.letter <= "Z"):
            raise ValueError(f"Letter token must be a single uppercase letter: {self.letter!r}")

    def next(self) -> LetterToken:
        if self.letter == "Z":
            return LetterToken("A")
        return LetterToken(chr(ord(self.letter) + 1))

    def __str__(self) -> str:
        return self.letter


NumberingToken = IntegerToken | LetterToken


def first_token(style: NumberingStyle | str) -> NumberingToken:
    """The token a newly entered nesting level starts at."""
    if style == NumberingStyle.letter:
        return LetterToken("A")
    return IntegerToken(1)


def zeroth_token(style: NumberingStyle | str) -> NumberingToken:
    """The token just before `first_token()`, used to seed the numbering stack."""
    if style == NumberingStyle.letter:
        return LetterToken("Z")
    return IntegerToken(0)


def next_token(token: NumberingToken) -> NumberingToken:
    return token.next()


def parse_token(value: str, style: NumberingStyle | str | None = None) -> NumberingToken:
    """
    Parse a start-at value like "5" or "C" into a token. Given a `style`, the value
    is converted to it by position: "C" is 3 in decimal, 3 is "C" in letters (and
    27 wraps back to "A"). Without one, the value keeps its own style.
    """
    if value.isdigit():
        position = int(value)
    else:
        position = ord(LetterToken(value).letter) - ord("A") + 1

    if style is None:
        style = NumberingStyle.decimal if value.isdigit() else NumberingStyle.letter
    if style == NumberingStyle.letter:
        return LetterToken(chr(ord("A") + (position - 1) % 26))
    return IntegerToken(position)


def preceding_token(token: NumberingToken) -> NumberingToken:
    """
    The token whose `next()` is `token`. Used to seed the stack so that the first
    top-level heading receives exactly the start-at value.
    """
    if isinstance(token, IntegerToken):
        return IntegerToken(token.value - 1)
    if token.letter == "A":
        return LetterToken("Z")
    return LetterToken(chr(ord(token.letter) - 1))
