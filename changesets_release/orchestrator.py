"""Release run: classify → decide → dispatch.

Every run ends in exactly one of four actions:

1. SKIP: no changesets and no publish command, nothing to do.
2. PUBLISH_ONLY: no changesets (e.g. the version PR was just merged) and a
   publish command is configured, so publish whatever is unpublished.
3. SKIP_EMPTY_CHANGESETS: changesets exist but none bumps a package.
4. OPEN_VERSION_PR: changesets bump packages; open or refresh the PR.

The decision is a pure function of RepositoryReleaseState, so it can be
tested without touching git, files or the network. Effects live in
dispatch(). Default outputs are written before dispatching so a failed run
still reports ``published=false``.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from enum import Enum
from pathlib import Path

from .changesets import read_changesets
from .config import ActionConfig
from .credentials import ensure_registry_auth, write_netrc
from .gitutils import setup_user
from .models import (
    ChangeDescriptor,
    PublishOptions,
    PublishResult,
    RepositoryReleaseState,
    VersionOptions,
    VersionResult,
)
from .outputs import StepOutputs
from .runners import run_publish, run_version
from .shell import info, step
from .state import classify

PublishRunner = Callable[[PublishOptions], PublishResult]
VersionRunner = Callable[[VersionOptions], VersionResult]
ChangesetReader = Callable[[Path], list[ChangeDescriptor]]


class ReleaseAction(str, Enum):
    SKIP = "skip"
    PUBLISH_ONLY = "publish-only"
    SKIP_EMPTY_CHANGESETS = "skip-empty-changesets"
    OPEN_VERSION_PR = "open-version-pr"


def decide(state: RepositoryReleaseState) -> ReleaseAction:
    """Select the single action for this run, first match wins."""
    if not state.has_changesets and not state.has_publish_script:
        return ReleaseAction.SKIP
    if not state.has_changesets:
        return ReleaseAction.PUBLISH_ONLY
    if not state.has_non_empty_changesets:
        return ReleaseAction.SKIP_EMPTY_CHANGESETS
    return ReleaseAction.OPEN_VERSION_PR


def emit_defaults(outputs: StepOutputs, state: RepositoryReleaseState) -> None:
    outputs.set("published", "false")
    outputs.set("publishedPackages", "[]")
    outputs.set("hasChangesets", str(state.has_changesets).lower())


def dispatch(
    action: ReleaseAction,
    config: ActionConfig,
    outputs: StepOutputs,
    *,
    publish_runner: PublishRunner = run_publish,
    version_runner: VersionRunner = run_version,
) -> None:
    """Perform the effects of ``action``.

    Raises:
        ReleaseError: Credential or runner failures propagate unchanged.
    """
    if action is ReleaseAction.SKIP:
        info(
            "No changesets present or were removed by merging release PR. "
            "Not publishing because no publish script found."
        )
        return

    if action is ReleaseAction.SKIP_EMPTY_CHANGESETS:
        info("All changesets are empty; not creating PR")
        return

    if action is ReleaseAction.PUBLISH_ONLY:
        info("No changesets found. Attempting to publish any unpublished packages.")
        step(f"Using npm registry: {config.registry_url}")
        ensure_registry_auth(
            config.npmrc_path, config.registry_url, config.registry_token
        )
        result = publish_runner(
            PublishOptions(
                script=config.publish or "",
                github_token=config.github_token,
                create_github_releases=config.create_github_releases,
            )
        )
        if result.published:
            outputs.set("published", "true")
            outputs.set(
                "publishedPackages",
                json.dumps(
                    [p.model_dump() for p in result.published_packages],
                    separators=(",", ":"),
                ),
            )
        return

    result = version_runner(
        VersionOptions(
            script=config.version,
            github_token=config.github_token,
            pr_title=config.title,
            commit_message=config.commit,
            has_publish_script=config.has_publish_script,
            branch=config.branch,
        )
    )
    if result.pull_request_number is not None:
        outputs.set("pullRequestNumber", str(result.pull_request_number))


def run_action(
    config: ActionConfig,
    outputs: StepOutputs,
    *,
    root: Path | None = None,
    read: ChangesetReader = read_changesets,
    publish_runner: PublishRunner = run_publish,
    version_runner: VersionRunner = run_version,
) -> ReleaseAction:
    """Execute one release run and return the action taken.

    Args:
        config: Resolved run configuration.
        outputs: Sink for step outputs.
        root: Repository root holding ``.changeset``; defaults to cwd.
        read: Changeset reader.
        publish_runner: Called on the PUBLISH_ONLY branch.
        version_runner: Called on the OPEN_VERSION_PR branch.
    """
    root = root or Path.cwd()

    if config.setup_git_user:
        step("Setting git user")
        setup_user()

    step("Setting GitHub credentials")
    write_netrc(config.netrc_path, config.git_host, config.github_token)

    step("Reading changesets")
    changesets = read(root)
    for changeset in changesets:
        bumps = ", ".join(f"{r.name}:{r.type}" for r in changeset.releases)
        info(f"{changeset.id} ({bumps or 'empty'})")

    state = classify(changesets, config.has_publish_script)
    emit_defaults(outputs, state)

    action = decide(state)
    step(f"Action: {action.value}")
    dispatch(
        action,
        config,
        outputs,
        publish_runner=publish_runner,
        version_runner=version_runner,
    )
    return action
