"""Tests for changesets_release.state and the release decision."""

from __future__ import annotations

import itertools

import pytest
from pydantic import ValidationError

from changesets_release.models import ChangeDescriptor, Release, RepositoryReleaseState
from changesets_release.orchestrator import ReleaseAction, decide
from changesets_release.state import classify

EMPTY = ChangeDescriptor(id="docs-only")
MINOR = ChangeDescriptor(id="feat", releases=(Release(name="pkg-a", type="minor"),))
PATCH = ChangeDescriptor(
    id="fix",
    releases=(Release(name="pkg-a", type="patch"), Release(name="pkg-b", type="patch")),
)


class TestClassify:
    def test_no_changesets(self) -> None:
        state = classify([], has_publish_script=False)
        assert state == RepositoryReleaseState(
            has_changesets=False,
            has_non_empty_changesets=False,
            has_publish_script=False,
        )

    def test_only_empty_changesets(self) -> None:
        state = classify([EMPTY, EMPTY], has_publish_script=True)
        assert state.has_changesets
        assert not state.has_non_empty_changesets
        assert state.has_publish_script

    def test_mixed_changesets(self) -> None:
        state = classify([EMPTY, MINOR], has_publish_script=False)
        assert state.has_changesets
        assert state.has_non_empty_changesets

    def test_accepts_tuple(self) -> None:
        assert classify((PATCH,), has_publish_script=False).has_non_empty_changesets


class TestRepositoryReleaseState:
    def test_non_empty_requires_changesets(self) -> None:
        with pytest.raises(ValidationError):
            RepositoryReleaseState(
                has_changesets=False,
                has_non_empty_changesets=True,
                has_publish_script=False,
            )


class TestDecide:
    @pytest.mark.parametrize(
        ("changesets", "has_publish", "expected"),
        [
            ([], False, ReleaseAction.SKIP),
            ([], True, ReleaseAction.PUBLISH_ONLY),
            ([EMPTY], False, ReleaseAction.SKIP_EMPTY_CHANGESETS),
            ([EMPTY], True, ReleaseAction.SKIP_EMPTY_CHANGESETS),
            ([MINOR], False, ReleaseAction.OPEN_VERSION_PR),
            ([EMPTY, MINOR], True, ReleaseAction.OPEN_VERSION_PR),
        ],
    )
    def test_decision_table(
        self,
        changesets: list[ChangeDescriptor],
        has_publish: bool,
        expected: ReleaseAction,
    ) -> None:
        assert decide(classify(changesets, has_publish)) is expected

    def test_every_valid_state_maps_to_one_action(self) -> None:
        """The four branches partition all valid states."""
        seen: dict[ReleaseAction, list[tuple[bool, bool, bool]]] = {}
        for has, non_empty, publish in itertools.product([False, True], repeat=3):
            if non_empty and not has:
                continue
            state = RepositoryReleaseState(
                has_changesets=has,
                has_non_empty_changesets=non_empty,
                has_publish_script=publish,
            )
            seen.setdefault(decide(state), []).append((has, non_empty, publish))

        assert set(seen) == set(ReleaseAction)
        assert seen[ReleaseAction.SKIP] == [(False, False, False)]
        assert seen[ReleaseAction.PUBLISH_ONLY] == [(False, False, True)]
        assert sorted(seen[ReleaseAction.SKIP_EMPTY_CHANGESETS]) == [
            (True, False, False),
            (True, False, True),
        ]
        assert sorted(seen[ReleaseAction.OPEN_VERSION_PR]) == [
            (True, True, False),
            (True, True, True),
        ]
