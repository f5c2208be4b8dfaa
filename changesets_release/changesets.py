"""Reading pending changesets from the ``.changeset`` directory.

A changeset is a markdown file whose front matter lists package bumps::

    ---
    "@scope/pkg-a": minor
    pkg-b: patch
    ---

    Add the frobnicator.

A file with an empty front-matter block is an "empty" changeset: it is
pending but bumps nothing.
"""

from __future__ import annotations

import re
from pathlib import Path

from .errors import ConfigurationError
from .models import ChangeDescriptor, Release

CHANGESET_DIR = ".changeset"
BUMP_TYPES = {"major", "minor", "patch", "none"}

_RELEASE_LINE = re.compile(
    r"""^\s*(?P<quote>["']?)(?P<name>[^"':]+)(?P=quote)\s*:\s*(?P<type>\w+)\s*$"""
)


def parse_changeset(changeset_id: str, text: str) -> ChangeDescriptor:
    """Parse the contents of a single changeset file.

    Raises:
        ConfigurationError: If the front matter is missing or a release line
            cannot be parsed.
    """
    lines = text.lstrip().splitlines()
    if not lines or lines[0].strip() != "---":
        raise ConfigurationError(f"Changeset {changeset_id} has no front matter")

    try:
        end = next(i for i, line in enumerate(lines[1:], 1) if line.strip() == "---")
    except StopIteration:
        raise ConfigurationError(
            f"Changeset {changeset_id} has an unterminated front matter block"
        ) from None

    releases: list[Release] = []
    for line in lines[1:end]:
        if not line.strip() or line.lstrip().startswith("#"):
            continue
        match = _RELEASE_LINE.match(line)
        if not match or match["type"] not in BUMP_TYPES:
            raise ConfigurationError(
                f"Invalid release line in changeset {changeset_id}: {line.strip()!r}"
            )
        releases.append(Release(name=match["name"].strip(), type=match["type"]))

    summary = "\n".join(lines[end + 1 :]).strip()
    return ChangeDescriptor(id=changeset_id, summary=summary, releases=tuple(releases))


def read_changesets(root: Path) -> list[ChangeDescriptor]:
    """Read all pending changesets under ``root/.changeset``.

    Files are returned sorted by id. README.md is not a changeset. A missing
    directory means there is nothing pending.
    """
    changeset_dir = root / CHANGESET_DIR
    if not changeset_dir.is_dir():
        return []

    changesets: list[ChangeDescriptor] = []
    for path in sorted(changeset_dir.glob("*.md")):
        if path.name.lower() == "readme.md":
            continue
        changesets.append(parse_changeset(path.stem, path.read_text()))
    return changesets
