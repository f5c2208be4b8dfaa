"""Shell, git and gh utilities.

Thin wrappers around subprocess calls plus the console output helpers used
throughout the release run. Failures surface as RunnerFailure so the CLI can
report them in one place.
"""

from __future__ import annotations

import os
import subprocess
import sys
from collections.abc import Mapping

from .errors import RunnerFailure


def run(
    *args: str,
    check: bool = True,
    env: Mapping[str, str] | None = None,
) -> subprocess.CompletedProcess[str]:
    """Run a command, capturing its output.

    Output is captured (not streamed) because the publish and version steps
    need to parse it. The captured stdout is echoed so CI logs still show it.

    Args:
        *args: Command and arguments (e.g., "npx", "changeset", "publish").
        check: If True (default), raise RunnerFailure on non-zero exit.
        env: Extra environment variables layered over the current ones.

    Returns:
        CompletedProcess with returncode, stdout and stderr.
    """
    full_env = {**os.environ, **env} if env else None
    try:
        result = subprocess.run(
            args, capture_output=True, text=True, env=full_env, check=False
        )
    except OSError as exc:
        raise RunnerFailure(f"Could not run {args[0]}: {exc}") from exc

    if result.stdout:
        print(result.stdout.rstrip())
    if check and result.returncode != 0:
        message = (result.stderr or result.stdout).strip()
        raise RunnerFailure(
            f"`{' '.join(args)}` exited with code {result.returncode}: {message}"
        )
    return result


def git(*args: str, check: bool = True) -> str:
    """Run a git command and return stripped stdout."""
    try:
        result = subprocess.run(["git", *args], capture_output=True, text=True)
    except OSError as exc:
        raise RunnerFailure(f"Could not run git: {exc}") from exc
    if check and result.returncode != 0:
        raise RunnerFailure(f"git {' '.join(args)} failed: {result.stderr.strip()}")
    return result.stdout.strip()


def gh(*args: str, token: str, check: bool = True) -> str:
    """Run a gh CLI command authenticated with ``token`` and return stdout."""
    try:
        result = subprocess.run(
            ["gh", *args],
            capture_output=True,
            text=True,
            env={**os.environ, "GH_TOKEN": token},
        )
    except OSError as exc:
        raise RunnerFailure(f"Could not run gh: {exc}") from exc
    if check and result.returncode != 0:
        raise RunnerFailure(f"gh {' '.join(args)} failed: {result.stderr.strip()}")
    return result.stdout.strip()


def step(msg: str) -> None:
    """Print a visually distinct step header."""
    print(f"\n{'─' * 60}\n{msg}\n{'─' * 60}")


def info(msg: str) -> None:
    """Print an indented progress line under the current step."""
    print(f"  {msg}")


def fatal(msg: str) -> None:
    """Print an error message and exit with code 1.

    Under GitHub Actions an ``::error::`` annotation is emitted as well so the
    failure shows up on the run summary.
    """
    if os.environ.get("GITHUB_ACTIONS") == "true":
        print(f"::error::{msg}")
    print(f"ERROR: {msg}", file=sys.stderr)
    sys.exit(1)
