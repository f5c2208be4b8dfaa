"""Repository release state derived from pending changesets."""

from __future__ import annotations

from collections.abc import Sequence

from .models import ChangeDescriptor, RepositoryReleaseState


def classify(
    changesets: Sequence[ChangeDescriptor], has_publish_script: bool
) -> RepositoryReleaseState:
    """Summarize the pending changesets into the flags the decision needs.

    Args:
        changesets: Pending changesets, possibly empty.
        has_publish_script: Whether a non-empty publish command is configured.
    """
    return RepositoryReleaseState(
        has_changesets=len(changesets) > 0,
        has_non_empty_changesets=any(c.releases for c in changesets),
        has_publish_script=has_publish_script,
    )
