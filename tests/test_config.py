"""Tests for config file loading and merging."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import pytest

from headnum.cli import Options
from headnum.config import HeadnumConfig, find_config_file, load_config, merge_cli_with_config


def test_find_config_headnum_toml(tmp_path: Path) -> None:
    config_file = tmp_path / "headnum.toml"
    config_file.write_text("max-level = 3\n")
    result = find_config_file(tmp_path)
    assert result == config_file


def test_find_config_dot_headnum_toml_takes_precedence(tmp_path: Path) -> None:
    (tmp_path / "headnum.toml").write_text("max-level = 3\n")
    dot_config = tmp_path / ".headnum.toml"
    dot_config.write_text("max-level = 4\n")
    result = find_config_file(tmp_path)
    assert result == dot_config


def test_find_config_pyproject_toml(tmp_path: Path) -> None:
    config_file = tmp_path / "pyproject.toml"
    config_file.write_text("[tool.headnum]\nmax-level = 3\n")
    result = find_config_file(tmp_path)
    assert result == config_file


def test_find_config_pyproject_without_section_skipped(tmp_path: Path) -> None:
    (tmp_path / "pyproject.toml").write_text("[tool.ruff]\nline-length = 100\n")
    result = find_config_file(tmp_path)
    assert result is None


def test_find_config_walks_up(tmp_path: Path) -> None:
    config_file = tmp_path / "headnum.toml"
    config_file.write_text("max-level = 3\n")
    subdir = tmp_path / "sub" / "deep"
    subdir.mkdir(parents=True)
    result = find_config_file(subdir)
    assert result == config_file


def test_find_config_none_when_missing(tmp_path: Path) -> None:
    result = find_config_file(tmp_path)
    assert result is None


def test_load_config_headnum_toml(tmp_path: Path) -> None:
    config_file = tmp_path / "headnum.toml"
    config_file.write_text("skip-top-level = true\nmax-level = 4\ncontents = \"Contents\"\n")
    config = load_config(config_file)
    assert config.skip_top_level is True
    assert config.max_level == 4
    assert config.contents == "Contents"
    # Unset fields should be None (not set)
    assert config.separator is None
    assert config.auto is None


def test_load_config_pyproject_toml(tmp_path: Path) -> None:
    config_file = tmp_path / "pyproject.toml"
    config_file.write_text("[project]\nname = \"x\"\n\n[tool.headnum]\nmax = 2\nauto = true\n")
    config = load_config(config_file)
    assert config.max_level == 2
    assert config.auto is True


def test_load_config_kebab_case(tmp_path: Path) -> None:
    config_file = tmp_path / ".headnum.toml"
    config_file.write_text(
        "first-level = 2\n"
        'style-level-1 = "A"\n'
        "style-level-other = 1\n"
        'separator = ":"\n'
        "start-at = 3\n"
        'contents = "Overview"\n'
        'toc-links = "markdown"\n'
    )
    config = load_config(config_file)
    assert config.first_level == 2
    assert config.style_level_1 == "A"
    assert config.style_level_other == "1"
    assert config.separator == ":"
    assert config.start_at == "3"
    assert config.contents == "Overview"
    assert config.toc_links == "markdown"


def test_load_config_malformed_toml(tmp_path: Path) -> None:
    config_file = tmp_path / "headnum.toml"
    config_file.write_text("this is not valid toml [[[")
    with pytest.raises(ValueError):
        load_config(config_file)


def test_load_config_warns_unknown_keys(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    config_file = tmp_path / "headnum.toml"
    config_file.write_text("unknown_key = true\nmax-level = 3\n")
    with caplog.at_level(logging.WARNING):
        config = load_config(config_file)
    assert config.max_level == 3
    assert "Ignoring unrecognized config key: unknown_key" in caplog.text


def _make_options(**overrides: Any) -> Options:
    values: dict[str, Any] = dict(
        command=None,
        file=None,
        output="-",
        inplace=False,
        nobackup=False,
        verbose=False,
        version=False,
        skip_top_level=False,
        first_level=1,
        max_level=6,
        style_level_1="1",
        style_level_other="1",
        separator=".",
        contents="",
        start_at="",
        auto=False,
        toc_links="wiki",
    )
    values.update(overrides)
    return Options(**values)


def test_merge_no_config() -> None:
    opts = _make_options(max_level=4)
    result = merge_cli_with_config(opts, config=None, explicit_flags=set())
    assert result.max_level == 4


def test_merge_config_overrides_defaults() -> None:
    opts = _make_options()
    config = HeadnumConfig(max_level=3, skip_top_level=True, toc_links="markdown")
    result = merge_cli_with_config(opts, config=config, explicit_flags=set())
    assert result.max_level == 3
    assert result.skip_top_level is True
    assert result.toc_links == "markdown"
    # Fields not in the config keep their CLI values
    assert result.separator == "."


def test_merge_explicit_cli_overrides_config() -> None:
    opts = _make_options(max_level=5)
    config = HeadnumConfig(max_level=3, contents="Contents")
    result = merge_cli_with_config(opts, config=config, explicit_flags={"max_level"})
    assert result.max_level == 5
    assert result.contents == "Contents"


def test_load_config_tables_are_not_flattened(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    """Settings are top-level keys; a table is reported like any unknown key."""
    config_file = tmp_path / "headnum.toml"
    config_file.write_text("separator = \"-\"\n\n[numbering]\nmax-level = 3\n")
    with caplog.at_level(logging.WARNING):
        config = load_config(config_file)
    assert config.separator == "-"
    assert config.max_level is None
    assert "Ignoring unrecognized config key: numbering" in caplog.text
