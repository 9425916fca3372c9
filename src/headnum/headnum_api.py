"""
Text and file level entry points: resolve the effective settings for a document
and run one command against it.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, replace
from enum import Enum
from pathlib import Path
from typing import Any

from strif import atomic_output_file

from headnum.document import MarkdownDocument
from headnum.front_matter import (
    get_front_matter_settings_or_alternative,
    save_settings_to_front_matter,
    settings_to_compact_front_matter_value,
)
from headnum.settings import (
    DEFAULT_CONTENTS_MARKER,
    DEFAULT_SETTINGS,
    NumberingSettings,
    does_contents_have_value,
    validate_settings,
)
from headnum.transforms.heading_numbering import remove_heading_numbering, update_heading_numbering
from headnum.transforms.table_of_contents import TocLinkStyle, update_table_of_contents

logger = logging.getLogger(__name__)

BACKUP_SUFFIX = ".orig"


class Command(str, Enum):
    """What to do with a document."""

    number = "number"  # number headings, then refresh the table of contents
    auto = "auto"  # like `number`, but only if the document enables `auto`
    toc = "toc"  # refresh the table of contents only
    remove = "remove"  # strip heading numbers
    save = "save"  # write the effective settings into the front matter
    show = "show"  # print the effective settings as a directive string


@dataclass
class CommandResult:
    text: str
    changes: int
    settings: NumberingSettings

    @property
    def directive(self) -> str:
        return settings_to_compact_front_matter_value(self.settings)


def resolve_settings(
    document: MarkdownDocument,
    alternative: NumberingSettings = DEFAULT_SETTINGS,
    overrides: dict[str, Any] | None = None,
) -> NumberingSettings:
    """
    The settings for `document`: its front matter settings if any (else
    `alternative`), with `overrides` applied on top.
    """
    settings = get_front_matter_settings_or_alternative(document.front_matter, alternative)
    if overrides:
        settings = validate_settings(replace(settings, **overrides))
    return settings


def run_command(
    document: MarkdownDocument,
    command: Command,
    settings: NumberingSettings,
    link_style: TocLinkStyle = TocLinkStyle.wiki,
) -> int:
    """
    Run `command` on `document` in place. Returns the number of changes applied.
    """
    if command == Command.auto and not settings.auto:
        logger.info("Automatic numbering is off for this document")
        return 0

    if command in (Command.number, Command.auto):
        changes = update_heading_numbering(document, settings)
        # Second transaction, so the entries show the new numbers.
        if does_contents_have_value(settings.contents):
            changes += update_table_of_contents(document, settings, link_style)
        return changes
    elif command == Command.toc:
        if not does_contents_have_value(settings.contents):
            settings = replace(settings, contents=DEFAULT_CONTENTS_MARKER)
        return update_table_of_contents(document, settings, link_style)
    elif command == Command.remove:
        return remove_heading_numbering(document)
    elif command == Command.save:
        return save_settings_to_front_matter(document, settings)
    else:
        return 0


def process_text(
    text: str,
    command: Command = Command.number,
    alternative: NumberingSettings = DEFAULT_SETTINGS,
    overrides: dict[str, Any] | None = None,
    link_style: TocLinkStyle = TocLinkStyle.wiki,
) -> CommandResult:
    """
    Run `command` on Markdown `text` and return the resulting text.
    """
    document = MarkdownDocument(text)
    settings = resolve_settings(document, alternative, overrides)
    changes = run_command(document, command, settings, link_style)
    return CommandResult(text=document.text, changes=changes, settings=settings)


def _read_input(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    return Path(path).read_text(encoding="utf-8")


def _write_output(path: str | Path, text: str, backup: bool, make_parents: bool) -> None:
    backup_suffix = BACKUP_SUFFIX if backup else None
    with atomic_output_file(
        str(path), make_parents=make_parents, backup_suffix=backup_suffix
    ) as tmp_path:
        Path(tmp_path).write_text(text, encoding="utf-8")


def process_file(
    path: str,
    command: Command = Command.number,
    output: str = "-",
    inplace: bool = False,
    nobackup: bool = False,
    alternative: NumberingSettings = DEFAULT_SETTINGS,
    overrides: dict[str, Any] | None = None,
    link_style: TocLinkStyle = TocLinkStyle.wiki,
    make_parents: bool = True,
) -> CommandResult:
    """
    Run `command` on a file (or stdin, as "-") and write the result.

    With `inplace`, the file is rewritten only if it changed (keeping a `.orig`
    backup unless `nobackup`). Otherwise the full result goes to `output`, which is
    stdout for "-". For `Command.show`, the directive string is printed instead.
    """
    if inplace and path == "-":
        raise ValueError("Cannot use --inplace with stdin")

    text = _read_input(path)
    result = process_text(text, command, alternative, overrides, link_style)

    if command == Command.show:
        print(result.directive)
        return result

    if inplace:
        if result.text == text:
            logger.info("%s: no changes", path)
        else:
            logger.info("%s: %d change(s)", path, result.changes)
            _write_output(path, result.text, backup=not nobackup, make_parents=False)
    elif output == "-":
        sys.stdout.write(result.text)
    else:
        _write_output(output, result.text, backup=False, make_parents=make_parents)

    return result
