"""CLI entry point for changesets-release."""

from __future__ import annotations

import os
from pathlib import Path

import click

from changesets_release.changesets import read_changesets
from changesets_release.config import load_config, resolve_settings
from changesets_release.errors import ConfigurationError, ReleaseError
from changesets_release.orchestrator import decide, run_action
from changesets_release.outputs import StepOutputs
from changesets_release.shell import fatal, step
from changesets_release.state import classify


@click.group()
@click.version_option(package_name="changesets-release")
def cli() -> None:
    """Version PRs and publishing for changeset-managed monorepos."""


@cli.command()
@click.option("--publish", default=None, help="Command that publishes packages.")
@click.option(
    "--version-script",
    "version",
    default=None,
    help="Command that versions packages. [default: npx changeset version]",
)
@click.option("--title", default=None, help="Title of the version PR.")
@click.option("--commit", default=None, help="Commit message of the version commit.")
@click.option("--branch", default=None, help="Base branch of the version PR.")
@click.option("--cwd", default=None, help="Directory to run in.")
@click.option("--registry", "registry_url", default=None, help="npm registry URL.")
@click.option(
    "--setup-git-user/--no-setup-git-user",
    default=None,
    help="Configure the github-actions[bot] git identity. [default: on]",
)
@click.option(
    "--create-github-releases/--no-create-github-releases",
    default=None,
    help="Create a GitHub release per published package. [default: on]",
)
def run(**overrides: object) -> None:
    """Open the version PR or publish, whichever the repository needs.

    Usually called from CI on every push to the base branch. Reads the same
    INPUT_* variables GitHub Actions sets for action inputs; flags win.
    """
    try:
        config = load_config(os.environ, overrides)
        if config.cwd:
            step(f"Changing directory to {config.cwd}")
            try:
                os.chdir(config.cwd)
            except OSError as exc:
                raise ConfigurationError(f"Cannot change to {config.cwd}: {exc}") from exc
        run_action(config, StepOutputs(config.github_output))
    except ReleaseError as exc:
        fatal(str(exc))


@cli.command()
@click.option("--publish", default=None, help="Publish command that would be used.")
@click.option(
    "--root",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=".",
    show_default=True,
    help="Repository root.",
)
def plan(publish: str | None, root: Path) -> None:
    """Show which action a run would take, without side effects.

    The publish command is resolved like ``run`` does: flag, then
    INPUT_PUBLISH, then pyproject.toml.
    """
    try:
        settings = resolve_settings(os.environ, {"publish": publish}, root)
        cwd = settings.get("cwd")
        changesets = read_changesets(root / cwd if cwd else root)
    except ReleaseError as exc:
        fatal(str(exc))
        return

    state = classify(changesets, bool(settings.get("publish")))
    click.echo(f"Changesets: {len(changesets)}")
    for changeset in changesets:
        bumps = ", ".join(f"{r.name}:{r.type}" for r in changeset.releases)
        click.echo(f"  {changeset.id}: {bumps or '<empty>'}")
    click.echo(f"Action: {decide(state).value}")
