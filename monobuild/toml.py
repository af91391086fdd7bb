"""TOML configuration loading.

monobuild reads optional defaults from the [tool.monobuild] table of the
pyproject.toml in the current directory:

    [tool.monobuild]
    dependency-files = "**/Dependencies"
    base-branch = "main"
    base-commit = "HEAD^1"
"""

from __future__ import annotations

from pathlib import Path

import tomlkit
from pydantic import ValidationError

from .models import Settings
from .shell import fatal


def load_pyproject(path: Path) -> tomlkit.TOMLDocument:
    """Load and parse a pyproject.toml file."""
    return tomlkit.parse(path.read_text())


def get_tool_table(doc: tomlkit.TOMLDocument) -> dict:
    """Extract [tool.monobuild] as a plain dict, empty if not present."""
    table = doc.get("tool", {}).get("monobuild")
    return table.unwrap() if table is not None else {}


def load_settings(root: Path) -> Settings:
    """Load settings from root/pyproject.toml, falling back to defaults.

    Raises:
        SystemExit: If the [tool.monobuild] table has unknown keys or
                    values of the wrong type.
    """
    pyproject = root / "pyproject.toml"
    if not pyproject.exists():
        return Settings()

    table = get_tool_table(load_pyproject(pyproject))
    try:
        return Settings.model_validate(table)
    except ValidationError as exc:
        fatal(f"Invalid [tool.monobuild] in {pyproject}:\n{exc}")
