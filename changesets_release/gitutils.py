"""Git operations used by the release run."""

from __future__ import annotations

from .shell import git

BOT_NAME = "github-actions[bot]"
BOT_EMAIL = "github-actions[bot]@users.noreply.github.com"


def setup_user() -> None:
    """Configure the github-actions[bot] identity for commits made by the run."""
    git("config", "user.name", BOT_NAME)
    git("config", "user.email", BOT_EMAIL)


def current_branch() -> str:
    return git("rev-parse", "--abbrev-ref", "HEAD")


def switch_to_maybe_existing_branch(branch: str) -> None:
    """Check out ``branch``, creating it from HEAD if it doesn't exist."""
    if not git("rev-parse", "--verify", "--quiet", branch, check=False):
        git("checkout", "-b", branch)
    else:
        git("checkout", branch)


def reset_hard(ref: str) -> None:
    git("reset", "--hard", ref)


def is_clean() -> bool:
    """Return True if the working tree has no uncommitted changes."""
    return git("status", "--porcelain") == ""


def commit_all(message: str) -> None:
    git("add", "-A")
    git("commit", "-m", message)


def push(branch: str, *, force: bool = False) -> None:
    args = ["push", "origin", f"HEAD:{branch}"]
    if force:
        args.append("--force")
    git(*args)


def push_tags() -> None:
    git("push", "origin", "--tags")
