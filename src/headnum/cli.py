#!/usr/bin/env python3
"""
headnum: Outline numbering and tables of contents for Markdown headings

Common usage:
  headnum number README.md -i
  headnum toc README.md -i
  headnum remove README.md -i
  headnum save README.md -i --max-level 3 --style-level-other A

Settings are read from the document's front matter (`number headings:` key),
then a `.headnum.toml`, `headnum.toml` or `pyproject.toml [tool.headnum]` file.
Flags given on the command line take precedence over both.
"""

from __future__ import annotations

import argparse
import importlib.metadata
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from headnum.config import find_config_file, load_config, merge_cli_with_config
from headnum.errors import HeadnumError
from headnum.headnum_api import Command, process_file
from headnum.settings import (
    DEFAULT_SETTINGS,
    VALID_SEPARATORS,
    NumberingSettings,
    validate_settings,
)
from headnum.transforms.numbering_tokens import NumberingStyle
from headnum.transforms.table_of_contents import TocLinkStyle

# Options that map one-to-one onto `NumberingSettings` fields.
_SETTINGS_OPTIONS = (
    "skip_top_level",
    "first_level",
    "max_level",
    "style_level_1",
    "style_level_other",
    "separator",
    "contents",
    "start_at",
    "auto",
)


@dataclass
class Options:
    """Command-line options for the headnum tool."""

    command: Command | None
    file: str | None
    output: str
    inplace: bool
    nobackup: bool
    verbose: bool
    version: bool
    # Numbering settings
    skip_top_level: bool
    first_level: int
    max_level: int
    style_level_1: str
    style_level_other: str
    separator: str
    contents: str
    start_at: str
    auto: bool
    toc_links: str


def _parse_args(args: list[str] | None = None) -> tuple[Options, set[str]]:
    """
    Parse command-line arguments.

    Returns a tuple of (options, explicit_flags) where `explicit_flags` tracks which
    settings the user explicitly passed (for precedence over config and front matter).
    """
    # Use the module's docstring as the description
    module_doc = __doc__ or ""
    doc_parts = module_doc.split("\n\n")
    description = doc_parts[0]
    epilog = "\n\n".join(doc_parts[1:])

    parser = argparse.ArgumentParser(
        prog="headnum",
        description=description,
        epilog=epilog,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "command",
        nargs="?",
        choices=[c.value for c in Command],
        help="number: number headings and refresh the table of contents; "
        "auto: same, if the document enables `auto`; toc: refresh the table of contents; "
        "remove: strip heading numbers; save: write settings to the front matter; "
        "show: print the effective settings",
    )
    parser.add_argument(
        "file",
        nargs="?",
        type=str,
        default=None,
        help="Input Markdown file (use '-' for stdin)",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=str,
        default="-",
        help="Output file (use '-' for stdout)",
    )
    parser.add_argument(
        "-i", "--inplace", action="store_true", help="Edit the file in place (ignores --output)"
    )
    parser.add_argument(
        "--nobackup",
        action="store_true",
        help="Do not make a backup of the original file when using --inplace",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Log what is changed (to stderr)"
    )
    parser.add_argument(
        "--version",
        action="store_true",
        help="Show version information and exit",
    )
    # Numbering settings
    parser.add_argument(
        "--skip-top-level",
        action=argparse.BooleanOptionalAction,
        default=DEFAULT_SETTINGS.skip_top_level,
        help="Leave H1 headings unnumbered (document titles)",
    )
    parser.add_argument(
        "--first-level",
        type=int,
        default=DEFAULT_SETTINGS.first_level,
        metavar="N",
        help="First heading level, saved in the front matter directive (default: %(default)s)",
    )
    parser.add_argument(
        "--max-level",
        type=int,
        default=DEFAULT_SETTINGS.max_level,
        metavar="N",
        help="Deepest heading level to number; deeper headings are left unnumbered "
        "(default: %(default)s)",
    )
    parser.add_argument(
        "--style-level-1",
        type=str,
        choices=[s.value for s in NumberingStyle],
        default=DEFAULT_SETTINGS.style_level_1.value,
        help="Numbering style of the top numbered level: 1 or A (default: %(default)s)",
    )
    parser.add_argument(
        "--style-level-other",
        type=str,
        choices=[s.value for s in NumberingStyle],
        default=DEFAULT_SETTINGS.style_level_other.value,
        help="Numbering style of all other levels: 1 or A (default: %(default)s)",
    )
    parser.add_argument(
        "--separator",
        type=str,
        choices=list(VALID_SEPARATORS),
        default=DEFAULT_SETTINGS.separator,
        help="Punctuation after the number, e.g. '.' for '1.2.' (default: %(default)r)",
    )
    parser.add_argument(
        "--contents",
        type=str,
        default=DEFAULT_SETTINGS.contents,
        metavar="TEXT",
        help="The table of contents goes below the heading ending with TEXT",
    )
    parser.add_argument(
        "--start-at",
        type=str,
        default=DEFAULT_SETTINGS.start_at,
        metavar="VALUE",
        help="Number of the first top-level heading, e.g. 5 or C",
    )
    parser.add_argument(
        "--auto",
        action=argparse.BooleanOptionalAction,
        default=DEFAULT_SETTINGS.auto,
        help="Enable automatic numbering (used by `headnum auto` and saved by `headnum save`)",
    )
    parser.add_argument(
        "--toc-links",
        type=str,
        choices=[s.value for s in TocLinkStyle],
        default=TocLinkStyle.wiki.value,
        help="Link style of table of contents entries (default: %(default)s)",
    )
    opts = parser.parse_args(args)

    # Re-parse with sentinel defaults to detect which flags were actually supplied.
    _SENTINEL = object()
    sentinel_parser = argparse.ArgumentParser(add_help=False)
    sentinel_parser.add_argument(
        "--skip-top-level", action=argparse.BooleanOptionalAction, default=_SENTINEL
    )
    sentinel_parser.add_argument("--first-level", type=int, default=_SENTINEL)
    sentinel_parser.add_argument("--max-level", type=int, default=_SENTINEL)
    sentinel_parser.add_argument("--style-level-1", default=_SENTINEL)
    sentinel_parser.add_argument("--style-level-other", default=_SENTINEL)
    sentinel_parser.add_argument("--separator", default=_SENTINEL)
    sentinel_parser.add_argument("--contents", default=_SENTINEL)
    sentinel_parser.add_argument("--start-at", default=_SENTINEL)
    sentinel_parser.add_argument("--auto", action=argparse.BooleanOptionalAction, default=_SENTINEL)
    sentinel_parser.add_argument("--toc-links", default=_SENTINEL)
    sentinel_opts, _ = sentinel_parser.parse_known_args(args if args is not None else sys.argv[1:])

    explicit_flags: set[str] = set()
    for field_name in (*_SETTINGS_OPTIONS, "toc_links"):
        if getattr(sentinel_opts, field_name, _SENTINEL) is not _SENTINEL:
            explicit_flags.add(field_name)

    return (
        Options(
            command=Command(opts.command) if opts.command else None,
            file=opts.file,
            output=opts.output,
            inplace=opts.inplace,
            nobackup=opts.nobackup,
            verbose=opts.verbose,
            version=opts.version,
            skip_top_level=opts.skip_top_level,
            first_level=opts.first_level,
            max_level=opts.max_level,
            style_level_1=opts.style_level_1,
            style_level_other=opts.style_level_other,
            separator=opts.separator,
            contents=opts.contents,
            start_at=opts.start_at,
            auto=opts.auto,
            toc_links=opts.toc_links,
        ),
        explicit_flags,
    )


def _settings_from_options(options: Options, names: tuple[str, ...] | set[str]) -> dict[str, Any]:
    values: dict[str, Any] = {}
    for name in names:
        if name not in _SETTINGS_OPTIONS:
            continue
        value = getattr(options, name)
        if name.startswith("style_"):
            value = NumberingStyle(value)
        values[name] = value
    return values


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )


def main(args: list[str] | None = None) -> int:
    """
    Main entry point for the headnum CLI.

    Args:
        args: Command-line arguments (uses sys.argv if None)

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    options, explicit_flags = _parse_args(args)

    # Display version information if requested
    if options.version:
        try:
            version = importlib.metadata.version("headnum")
            print(f"v{version}")
        except importlib.metadata.PackageNotFoundError:
            print("unknown (package not installed)")
        return 0

    if options.command is None or options.file is None:
        print(
            "Error: Provide a command and a file (or '-' for stdin). Use --help for more options.",
            file=sys.stderr,
        )
        return 1

    _configure_logging(options.verbose)

    try:
        # Load and merge config file settings
        config_path = find_config_file(Path.cwd())
        if config_path:
            config = load_config(config_path)
            merge_cli_with_config(options, config, explicit_flags)

        alternative = validate_settings(
            NumberingSettings(**_settings_from_options(options, _SETTINGS_OPTIONS))
        )
        overrides = _settings_from_options(options, explicit_flags)

        process_file(
            options.file,
            command=options.command,
            output=options.output,
            inplace=options.inplace,
            nobackup=options.nobackup,
            alternative=alternative,
            overrides=overrides,
            link_style=TocLinkStyle(options.toc_links),
        )
    except (HeadnumError, ValueError) as e:
        # Bad settings, a broken front matter key, or --inplace with stdin.
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        # Catch other potential file or processing errors.
        print(f"Error: {e}", file=sys.stderr)
        return 2

    return 0


if __name__ == "__main__":
    sys.exit(main())
