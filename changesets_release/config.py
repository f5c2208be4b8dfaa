"""Run configuration.

All inputs are resolved once at startup into an ActionConfig, so the rest of
the code never reads the process environment directly. Precedence, highest
first: CLI flags, GitHub Actions inputs and variables, the
``[tool.changesets-release]`` table in pyproject.toml, built-in defaults.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

from pydantic import BaseModel, ValidationError

from .errors import ConfigurationError
from .toml import read_settings

DEFAULT_REGISTRY = "https://registry.npmjs.org/"
DEFAULT_GIT_HOST = "github.com"

# GitHub Actions exposes `with:` inputs as INPUT_<NAME> variables.
INPUT_VARS: dict[str, str] = {
    "publish": "INPUT_PUBLISH",
    "version": "INPUT_VERSION",
    "title": "INPUT_TITLE",
    "commit": "INPUT_COMMIT",
    "branch": "INPUT_BRANCH",
    "cwd": "INPUT_CWD",
    "setup_git_user": "INPUT_SETUPGITUSER",
    "create_github_releases": "INPUT_CREATEGITHUBRELEASES",
}

BOOL_FIELDS = {"setup_git_user", "create_github_releases"}

_TRUE = {"true", "True", "TRUE"}
_FALSE = {"false", "False", "FALSE"}


class ActionConfig(BaseModel):
    """Resolved configuration for a single release run.

    Attributes:
        github_token: Token used for git pushes, gh calls and the .netrc file.
        publish: Publish command; publishing is enabled only when set.
        version: Version command; the runner falls back to
                 ``npx changeset version`` when unset.
        title: Pull request title override.
        commit: Commit message override for the version commit.
        branch: Target branch of the version PR; defaults to the current one.
        cwd: Directory to run in, relative to where the tool was started.
        setup_git_user: Configure the github-actions[bot] git identity.
        create_github_releases: Create a GitHub release per published package.
        registry_url: npm registry that receives the auth token.
        registry_token: Registry auth token written to the user .npmrc.
        home: Home directory holding .netrc and .npmrc.
        github_output: Step output file ($GITHUB_OUTPUT), if any.
        git_host: Host written to .netrc.
    """

    github_token: str
    publish: str | None = None
    version: str | None = None
    title: str | None = None
    commit: str | None = None
    branch: str | None = None
    cwd: str | None = None
    setup_git_user: bool = True
    create_github_releases: bool = True
    registry_url: str = DEFAULT_REGISTRY
    registry_token: str | None = None
    home: Path
    github_output: Path | None = None
    git_host: str = DEFAULT_GIT_HOST

    @property
    def has_publish_script(self) -> bool:
        return bool(self.publish)

    @property
    def netrc_path(self) -> Path:
        return self.home / ".netrc"

    @property
    def npmrc_path(self) -> Path:
        return self.home / ".npmrc"


def parse_bool(name: str, raw: str) -> bool:
    """Parse a boolean input using the same rules as GitHub's getBooleanInput.

    Raises:
        ConfigurationError: If ``raw`` is not one of the accepted spellings.
    """
    if raw in _TRUE:
        return True
    if raw in _FALSE:
        return False
    raise ConfigurationError(
        f"Input does not meet YAML 1.2 \"Core Schema\" specification: {name}\n"
        "Support boolean input list: `true | True | TRUE | false | False | FALSE`"
    )


def _git_host(server_url: str | None) -> str:
    if not server_url:
        return DEFAULT_GIT_HOST
    return urlparse(server_url).netloc or DEFAULT_GIT_HOST


def _inputs_from_env(environ: Mapping[str, str]) -> dict[str, Any]:
    values: dict[str, Any] = {}
    for field, var in INPUT_VARS.items():
        raw = environ.get(var, "").strip()
        if not raw:
            # Empty inputs count as unset
            continue
        values[field] = parse_bool(var, raw) if field in BOOL_FIELDS else raw

    if environ.get("CUSTOM_NPM_REGISTRY"):
        values["registry_url"] = environ["CUSTOM_NPM_REGISTRY"]
    registry_token = environ.get("ARTIFACTORY_AUTH_TOKEN") or environ.get("NPM_TOKEN")
    if registry_token:
        values["registry_token"] = registry_token
    if environ.get("GITHUB_OUTPUT"):
        values["github_output"] = Path(environ["GITHUB_OUTPUT"])
    return values


def resolve_settings(
    environ: Mapping[str, str],
    overrides: Mapping[str, Any] | None = None,
    start_dir: Path | None = None,
) -> dict[str, Any]:
    """Merge pyproject settings, action inputs and CLI flags.

    Later sources win: pyproject.toml, then the environment, then flags.
    Needs no token, so it also serves commands that only inspect the
    repository.

    Args:
        environ: Process environment (or a fake one in tests).
        overrides: Values from CLI flags; None values are ignored.
        start_dir: Directory the tool was started in; ``cwd`` is resolved
                   against it to locate pyproject.toml.

    Raises:
        ConfigurationError: If pyproject.toml or a boolean input is invalid.
    """
    flags = {k: v for k, v in (overrides or {}).items() if v is not None}
    env_values = _inputs_from_env(environ)

    start = start_dir or Path.cwd()
    cwd = flags.get("cwd") or env_values.get("cwd")
    root = start / cwd if cwd else start

    values = read_settings(root)
    values.update(env_values)
    values.update(flags)
    return values


def load_config(
    environ: Mapping[str, str],
    overrides: Mapping[str, Any] | None = None,
    start_dir: Path | None = None,
) -> ActionConfig:
    """Build the run configuration.

    Args:
        environ: Process environment (or a fake one in tests).
        overrides: Values from CLI flags; None values are ignored.
        start_dir: Directory the tool was started in.

    Raises:
        ConfigurationError: If GITHUB_TOKEN is missing or any value is invalid.
    """
    github_token = environ.get("GITHUB_TOKEN")
    if not github_token:
        raise ConfigurationError("Please add the GITHUB_TOKEN to the changesets action")

    values: dict[str, Any] = {
        "home": Path(environ["HOME"]) if environ.get("HOME") else Path.home(),
        "git_host": _git_host(environ.get("GITHUB_SERVER_URL")),
    }
    values.update(resolve_settings(environ, overrides, start_dir))
    values["github_token"] = github_token

    try:
        return ActionConfig(**values)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid configuration: {exc}") from exc
