"""TOML reading utilities.

Uses tomlkit to read the optional ``[tool.changesets-release]`` table from
the repository's pyproject.toml.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import tomlkit
from tomlkit.exceptions import ParseError

from .errors import ConfigurationError

TOOL_TABLE = "changesets-release"

# Keys accepted in [tool.changesets-release], mapped to ActionConfig fields.
SETTING_KEYS: dict[str, str] = {
    "publish": "publish",
    "version": "version",
    "title": "title",
    "commit": "commit",
    "branch": "branch",
    "registry": "registry_url",
    "setup-git-user": "setup_git_user",
    "create-github-releases": "create_github_releases",
}


def load_pyproject(path: Path) -> tomlkit.TOMLDocument:
    """Load and parse a pyproject.toml file.

    Raises:
        ConfigurationError: If the file is not valid TOML.
    """
    try:
        return tomlkit.parse(path.read_text())
    except ParseError as exc:
        raise ConfigurationError(f"Invalid TOML in {path}: {exc}") from exc


def get_release_settings(doc: tomlkit.TOMLDocument) -> dict[str, Any]:
    """Extract ``[tool.changesets-release]`` as ActionConfig field values.

    Unknown keys are rejected so typos don't silently fall back to defaults.

    Raises:
        ConfigurationError: If the table contains an unknown key.
    """
    table = doc.get("tool", {}).get(TOOL_TABLE, {})
    settings: dict[str, Any] = {}
    for key, value in table.items():
        if key not in SETTING_KEYS:
            raise ConfigurationError(
                f"Unknown key {key!r} in [tool.{TOOL_TABLE}]; "
                f"expected one of: {', '.join(SETTING_KEYS)}"
            )
        # Unwrap tomlkit items into plain Python values
        settings[SETTING_KEYS[key]] = value.unwrap() if hasattr(value, "unwrap") else value
    return settings


def read_settings(root: Path) -> dict[str, Any]:
    """Read release settings from ``root/pyproject.toml`` if it exists."""
    pyproject = root / "pyproject.toml"
    if not pyproject.exists():
        return {}
    return get_release_settings(load_pyproject(pyproject))
