"""
TOML-based config file loading for headnum.

Searches for `.headnum.toml`, `headnum.toml`, or `pyproject.toml [tool.headnum]`
walking up from the current directory. Config values provide the defaults for
documents without their own front matter settings. Precedence, highest first:
explicit CLI flags > document front matter > config file > built-in defaults.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, TypeVar

if sys.version_info >= (3, 11):
    import tomllib  # pyright: ignore[reportUnreachable]
else:
    import tomli as tomllib  # type: ignore[no-redef]  # pyright: ignore[reportUnreachable]

logger = logging.getLogger(__name__)


@dataclass
class HeadnumConfig:
    """
    Parsed config from a TOML file. Fields are `None` when not set in the config,
    allowing the merge logic to distinguish "not configured" from "explicitly set
    to default value".
    """

    # Numbering
    skip_top_level: bool | None = None
    first_level: int | None = None
    max_level: int | None = None
    style_level_1: str | None = None
    style_level_other: str | None = None
    separator: str | None = None
    start_at: str | None = None
    auto: bool | None = None
    # Table of contents
    contents: str | None = None
    toc_links: str | None = None


# Config file search order (first match wins within each directory level)
_CONFIG_FILENAMES = [".headnum.toml", "headnum.toml", "pyproject.toml"]

# Mapping from TOML kebab-case keys to Python snake_case field names
_KEBAB_TO_SNAKE: dict[str, str] = {
    "skip-top-level": "skip_top_level",
    "first-level": "first_level",
    "max-level": "max_level",
    "max": "max_level",
    "style-level-1": "style_level_1",
    "style-level-other": "style_level_other",
    "start-at": "start_at",
    "toc-links": "toc_links",
}

_VALID_FIELDS = {f.name for f in fields(HeadnumConfig)}


def find_config_file(start_dir: Path) -> Path | None:
    """
    Walk up from `start_dir` looking for a config file. Returns the first
    found, or `None`. Search order per directory: `.headnum.toml` >
    `headnum.toml` > `pyproject.toml` (only if it has `[tool.headnum]`).
    """
    start = start_dir.resolve()
    for directory in (start, *start.parents):
        for filename in _CONFIG_FILENAMES:
            candidate = directory / filename
            if not candidate.is_file():
                continue
            if filename != "pyproject.toml" or _pyproject_has_headnum_section(candidate):
                return candidate
    return None


def _pyproject_has_headnum_section(path: Path) -> bool:
    """Check if a pyproject.toml has a [tool.headnum] section."""
    try:
        data = tomllib.loads(path.read_text())
        return "headnum" in data.get("tool", {})
    except (tomllib.TOMLDecodeError, OSError):
        return False


def load_config(config_path: Path) -> HeadnumConfig:
    """
    Load a `HeadnumConfig` from a TOML file. Supports both standalone
    `headnum.toml` / `.headnum.toml` and `pyproject.toml` (extracts
    `[tool.headnum]`). TOML kebab-case keys are mapped to Python snake_case.
    """
    data = tomllib.loads(config_path.read_text())

    if config_path.name == "pyproject.toml":
        data = data.get("tool", {}).get("headnum", {})

    return _parse_config_data(data)


def _parse_config_data(data: dict[str, Any]) -> HeadnumConfig:
    """Map the flat TOML keys onto HeadnumConfig fields."""
    mapped: dict[str, Any] = {}
    for key, value in data.items():
        snake_key = _KEBAB_TO_SNAKE.get(key, key.replace("-", "_"))
        if snake_key in _VALID_FIELDS:
            # TOML has no way to spell style "1" other than a string or an int
            if snake_key.startswith("style_") or snake_key == "start_at":
                value = str(value)
            mapped[snake_key] = value
        else:
            logger.warning("Ignoring unrecognized config key: %s", key)

    return HeadnumConfig(**mapped)


_T = TypeVar("_T")


def merge_cli_with_config(
    cli_opts: _T,
    config: HeadnumConfig | None,
    explicit_flags: set[str],
) -> _T:
    """
    Merge CLI options with config file settings.

    Precedence: explicit CLI flags > config file > built-in defaults.
    """
    if config is None:
        return cli_opts

    for cfg_field in fields(HeadnumConfig):
        cfg_value = getattr(config, cfg_field.name)
        if cfg_value is None:
            continue  # Not set in config

        # Skip if CLI explicitly set this flag
        if cfg_field.name in explicit_flags:
            continue

        if hasattr(cli_opts, cfg_field.name):
            setattr(cli_opts, cfg_field.name, cfg_value)

    return cli_opts
