"""Packaging entrypoint tests."""

from __future__ import annotations

import sys
from pathlib import Path

if sys.version_info >= (3, 11):
    import tomllib  # pyright: ignore[reportUnreachable]
else:
    import tomli as tomllib  # type: ignore[no-redef]  # pyright: ignore[reportUnreachable]


def test_headnum_py_alias_entrypoint() -> None:
    """Both headnum and headnum-py should point to the same CLI entrypoint."""
    pyproject = Path(__file__).resolve().parents[1] / "pyproject.toml"
    data = tomllib.loads(pyproject.read_text(encoding="utf-8"))
    scripts = data["project"]["scripts"]

    assert scripts["headnum"] == "headnum.cli:main"
    assert scripts["headnum-py"] == "headnum.cli:main"


def test_main_module_runs_cli() -> None:
    main_module = Path(__file__).resolve().parents[1] / "src" / "headnum" / "__main__.py"
    assert "from headnum.cli import main" in main_module.read_text(encoding="utf-8")
