"""Exceptions raised during a release run.

Every failure aborts the whole run; the CLI reports it and exits non-zero.
"""

from __future__ import annotations


class ReleaseError(Exception):
    """Base class for all release run failures."""


class ConfigurationError(ReleaseError):
    """Required configuration is missing or invalid."""


class CredentialIOError(ReleaseError):
    """A credential file could not be read or written."""


class RunnerFailure(ReleaseError):
    """An external command (publish, version, git, gh) failed."""


class OutputError(ReleaseError):
    """Step outputs could not be written."""
