"""Data models for changesets-release.

These Pydantic models represent the data passed between the changeset
reader, the decision engine and the publish/version runners. None of them
outlive a single run.
"""

from __future__ import annotations

import semver
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class Release(BaseModel):
    """A single package bump requested by a changeset.

    Attributes:
        name: Package name as it appears in the changeset front matter.
        type: Bump magnitude ("major", "minor", "patch" or "none").
    """

    model_config = ConfigDict(frozen=True)

    name: str
    type: str


class ChangeDescriptor(BaseModel):
    """A pending changeset.

    Attributes:
        id: Changeset identifier (the markdown file name without suffix).
        summary: Free-form description from the changeset body.
        releases: Packages affected by this changeset. A changeset with no
                  releases is "empty" and carries no version effect.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    summary: str = ""
    releases: tuple[Release, ...] = ()


class RepositoryReleaseState(BaseModel):
    """Flags derived from the repository at the start of a run."""

    model_config = ConfigDict(frozen=True)

    has_changesets: bool
    has_non_empty_changesets: bool
    has_publish_script: bool

    @model_validator(mode="after")
    def _non_empty_implies_present(self) -> RepositoryReleaseState:
        if self.has_non_empty_changesets and not self.has_changesets:
            raise ValueError("has_non_empty_changesets requires has_changesets")
        return self


class CredentialEntry(BaseModel):
    """An ``//host/:_authToken=...`` line parsed from an npmrc file.

    Attributes:
        host: Registry host and path, scheme and trailing slashes stripped,
              lowercased for comparison.
        token: The secret value. Never compared when matching entries.
        line_number: Zero-based index of the line in the file.
    """

    host: str
    token: str
    line_number: int


class PublishedPackage(BaseModel):
    """A package version that the publish script reported as released."""

    name: str
    version: str

    @field_validator("version")
    @classmethod
    def _valid_semver(cls, value: str) -> str:
        if not semver.Version.is_valid(value):
            raise ValueError(f"not a semver version: {value!r}")
        return value


class PublishOptions(BaseModel):
    script: str
    github_token: str
    create_github_releases: bool = True


class PublishResult(BaseModel):
    published: bool
    published_packages: list[PublishedPackage] = Field(default_factory=list)


class VersionOptions(BaseModel):
    script: str | None = None
    github_token: str
    pr_title: str | None = None
    commit_message: str | None = None
    has_publish_script: bool = False
    branch: str | None = None


class VersionResult(BaseModel):
    pull_request_number: int | None = None
