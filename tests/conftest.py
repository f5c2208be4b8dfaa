"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from changesets_release.config import ActionConfig
from changesets_release.outputs import StepOutputs


@pytest.fixture
def home(tmp_path: Path) -> Path:
    """An empty home directory for credential files."""
    path = tmp_path / "home"
    path.mkdir()
    return path


@pytest.fixture
def repo(tmp_path: Path) -> Path:
    """An empty repository root."""
    path = tmp_path / "repo"
    path.mkdir()
    return path


@pytest.fixture
def make_config(home: Path) -> Callable[..., ActionConfig]:
    """Build an ActionConfig rooted in the temporary home directory."""

    def _make(**overrides: object) -> ActionConfig:
        values: dict[str, object] = {
            "github_token": "gh-token",
            "registry_token": "npm-token",
            "setup_git_user": False,
            "home": home,
        }
        values.update(overrides)
        return ActionConfig(**values)

    return _make


@pytest.fixture
def outputs(tmp_path: Path) -> StepOutputs:
    """Step outputs backed by a temporary $GITHUB_OUTPUT file."""
    return StepOutputs(tmp_path / "github_output.txt")


@pytest.fixture
def write_changeset(repo: Path) -> Callable[[str, str], Path]:
    """Write a changeset markdown file into ``repo/.changeset``."""

    def _write(changeset_id: str, content: str) -> Path:
        changeset_dir = repo / ".changeset"
        changeset_dir.mkdir(exist_ok=True)
        path = changeset_dir / f"{changeset_id}.md"
        path.write_text(content)
        return path

    return _write
