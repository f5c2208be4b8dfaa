"""Tests for changesets_release.config and changesets_release.toml."""

from __future__ import annotations

from pathlib import Path

import pytest

from changesets_release.config import (
    DEFAULT_REGISTRY,
    load_config,
    parse_bool,
    resolve_settings,
)
from changesets_release.errors import ConfigurationError


def _env(home: Path, **extra: str) -> dict[str, str]:
    return {"GITHUB_TOKEN": "gh-token", "HOME": str(home), **extra}


class TestParseBool:
    @pytest.mark.parametrize("raw", ["true", "True", "TRUE"])
    def test_true(self, raw: str) -> None:
        assert parse_bool("INPUT_X", raw) is True

    @pytest.mark.parametrize("raw", ["false", "False", "FALSE"])
    def test_false(self, raw: str) -> None:
        assert parse_bool("INPUT_X", raw) is False

    def test_invalid(self) -> None:
        with pytest.raises(ConfigurationError, match="INPUT_X"):
            parse_bool("INPUT_X", "yes")


class TestLoadConfig:
    def test_missing_github_token(self, home: Path, repo: Path) -> None:
        with pytest.raises(ConfigurationError, match="GITHUB_TOKEN"):
            load_config({"HOME": str(home)}, start_dir=repo)

    def test_defaults(self, home: Path, repo: Path) -> None:
        config = load_config(_env(home), start_dir=repo)

        assert config.github_token == "gh-token"
        assert config.publish is None
        assert not config.has_publish_script
        assert config.registry_url == DEFAULT_REGISTRY
        assert config.registry_token is None
        assert config.setup_git_user is True
        assert config.create_github_releases is True
        assert config.git_host == "github.com"
        assert config.netrc_path == home / ".netrc"
        assert config.npmrc_path == home / ".npmrc"
        assert config.github_output is None

    def test_action_inputs(self, home: Path, repo: Path, tmp_path: Path) -> None:
        env = _env(
            home,
            INPUT_PUBLISH="npx changeset publish",
            INPUT_VERSION="",
            INPUT_TITLE="Release",
            INPUT_SETUPGITUSER="false",
            INPUT_CREATEGITHUBRELEASES="FALSE",
            CUSTOM_NPM_REGISTRY="https://npm.example.com/",
            ARTIFACTORY_AUTH_TOKEN="artifactory",
            GITHUB_OUTPUT=str(tmp_path / "out"),
            GITHUB_SERVER_URL="https://github.example.com",
        )

        config = load_config(env, start_dir=repo)

        assert config.publish == "npx changeset publish"
        assert config.has_publish_script
        assert config.version is None
        assert config.title == "Release"
        assert config.setup_git_user is False
        assert config.create_github_releases is False
        assert config.registry_url == "https://npm.example.com/"
        assert config.registry_token == "artifactory"
        assert config.github_output == tmp_path / "out"
        assert config.git_host == "github.example.com"

    def test_npm_token_fallback(self, home: Path, repo: Path) -> None:
        config = load_config(_env(home, NPM_TOKEN="npm"), start_dir=repo)
        assert config.registry_token == "npm"

    def test_flags_override_inputs(self, home: Path, repo: Path) -> None:
        env = _env(home, INPUT_PUBLISH="from-env", INPUT_SETUPGITUSER="true")

        config = load_config(
            env,
            {"publish": "from-flag", "setup_git_user": False, "title": None},
            start_dir=repo,
        )

        assert config.publish == "from-flag"
        assert config.setup_git_user is False
        assert config.title is None

    def test_pyproject_settings(self, home: Path, repo: Path) -> None:
        (repo / "pyproject.toml").write_text(
            "[tool.changesets-release]\n"
            'publish = "make publish"\n'
            'registry = "https://npm.example.com/"\n'
            "create-github-releases = false\n"
        )

        config = load_config(_env(home, INPUT_PUBLISH="from-env"), start_dir=repo)

        assert config.publish == "from-env"
        assert config.registry_url == "https://npm.example.com/"
        assert config.create_github_releases is False

    def test_pyproject_read_from_cwd_input(self, home: Path, tmp_path: Path) -> None:
        sub = tmp_path / "sub"
        sub.mkdir()
        (sub / "pyproject.toml").write_text(
            '[tool.changesets-release]\nbranch = "develop"\n'
        )

        config = load_config(_env(home, INPUT_CWD="sub"), start_dir=tmp_path)

        assert config.cwd == "sub"
        assert config.branch == "develop"

    def test_unknown_pyproject_key(self, home: Path, repo: Path) -> None:
        (repo / "pyproject.toml").write_text(
            '[tool.changesets-release]\npublsh = "typo"\n'
        )

        with pytest.raises(ConfigurationError, match="publsh"):
            load_config(_env(home), start_dir=repo)

    def test_invalid_pyproject(self, home: Path, repo: Path) -> None:
        (repo / "pyproject.toml").write_text("[tool\n")

        with pytest.raises(ConfigurationError, match="Invalid TOML"):
            load_config(_env(home), start_dir=repo)

    def test_invalid_value_type(self, home: Path, repo: Path) -> None:
        (repo / "pyproject.toml").write_text(
            '[tool.changesets-release]\nsetup-git-user = "sometimes"\n'
        )

        with pytest.raises(ConfigurationError, match="Invalid configuration"):
            load_config(_env(home), start_dir=repo)


class TestResolveSettings:
    def test_needs_no_token(self, repo: Path) -> None:
        (repo / "pyproject.toml").write_text(
            '[tool.changesets-release]\npublish = "make publish"\n'
        )

        settings = resolve_settings({}, start_dir=repo)

        assert settings == {"publish": "make publish"}

    def test_flags_override_env_and_pyproject(self, repo: Path) -> None:
        (repo / "pyproject.toml").write_text(
            '[tool.changesets-release]\npublish = "make publish"\n'
        )

        from_env = resolve_settings({"INPUT_PUBLISH": "from-env"}, start_dir=repo)
        from_flag = resolve_settings(
            {"INPUT_PUBLISH": "from-env"}, {"publish": "from-flag"}, repo
        )

        assert from_env["publish"] == "from-env"
        assert from_flag["publish"] == "from-flag"

    def test_none_flags_are_ignored(self, repo: Path) -> None:
        settings = resolve_settings({"INPUT_PUBLISH": "from-env"}, {"publish": None}, repo)

        assert settings["publish"] == "from-env"
