"""Credential files for git and the npm registry.

Two files are managed:

- ``~/.netrc`` grants git-over-HTTPS access for the run. It belongs to the
  ephemeral CI environment, so it is overwritten every time.
- ``~/.npmrc`` may be maintained by hand. Registry auth is merged into it:
  an existing ``//host/:_authToken=`` line for the configured registry is
  left alone (even if its token differs), otherwise one line is appended.
  Nothing already in the file is removed or reordered.
"""

from __future__ import annotations

import re
from pathlib import Path

from .errors import ConfigurationError, CredentialIOError
from .models import CredentialEntry
from .shell import info

BOT_LOGIN = "github-actions[bot]"
AUTH_TOKEN_KEY = ":_authToken="

_SCHEME = re.compile(r"^https?:", re.IGNORECASE)
_AUTH_KEY = re.compile(re.escape(AUTH_TOKEN_KEY), re.IGNORECASE)


def normalize_registry_host(registry_url: str) -> str:
    """Strip the scheme and surrounding slashes from a registry URL.

    Examples:
        "https://registry.npmjs.org/" → "registry.npmjs.org"
        "http://npm.example.com/api/npm/" → "npm.example.com/api/npm"
        "//npm.example.com" → "npm.example.com"
    """
    return _SCHEME.sub("", registry_url.strip()).strip("/")


def auth_line(host: str, token: str) -> str:
    """Format the npmrc line binding ``token`` to ``host``."""
    return f"//{host}/{AUTH_TOKEN_KEY}{token}"


def parse_auth_line(line: str, line_number: int) -> CredentialEntry | None:
    """Parse a single npmrc line into a CredentialEntry.

    Accepts ``//host/:_authToken=value`` with optional leading whitespace,
    matching the key case-insensitively.
    A scheme in front of the ``//`` is tolerated. Returns None for any other
    line (comments, other settings, blank lines).
    """
    parts = _AUTH_KEY.split(line.strip(), maxsplit=1)
    if len(parts) != 2:
        return None
    key, token = parts
    key = _SCHEME.sub("", key)
    if not key.startswith("//"):
        return None
    return CredentialEntry(
        host=key.strip("/").lower(), token=token, line_number=line_number
    )


class NpmrcFile:
    """Registry auth entries parsed from the text of an npmrc file.

    Only auth lines are interpreted; every line is kept verbatim so that
    rendering reproduces the original text plus any appended entries.
    """

    def __init__(self, text: str = "") -> None:
        self.text = text
        self.entries: dict[str, CredentialEntry] = {}
        for i, line in enumerate(text.splitlines()):
            entry = parse_auth_line(line, i)
            # First occurrence wins, matching npm's own lookup
            if entry and entry.host not in self.entries:
                self.entries[entry.host] = entry

    def has_entry(self, host: str) -> bool:
        """Return True if an auth line for ``host`` exists (case-insensitive)."""
        return host.lower() in self.entries

    def append_entry(self, host: str, token: str) -> None:
        """Append an auth line for ``host``, keeping all existing content."""
        line = auth_line(host, token)
        if self.text and not self.text.endswith("\n"):
            self.text += "\n"
        self.entries[host.lower()] = CredentialEntry(
            host=host.lower(), token=token, line_number=len(self.text.splitlines())
        )
        self.text += line + "\n"


def write_netrc(path: Path, host: str, token: str) -> None:
    """Overwrite ``path`` with a single-machine git credential record.

    Raises:
        CredentialIOError: If the file cannot be written.
    """
    try:
        path.write_text(f"machine {host}\nlogin {BOT_LOGIN}\npassword {token}")
    except OSError as exc:
        raise CredentialIOError(f"Could not write {path}: {exc}") from exc


def ensure_registry_auth(path: Path, registry_url: str, token: str | None) -> bool:
    """Make sure the npmrc at ``path`` holds an auth line for the registry.

    Args:
        path: The user-level npmrc file.
        registry_url: Registry URL; the scheme is ignored for matching.
        token: Auth token to write if no entry exists yet.

    Returns:
        True if the file was created or appended to, False if an entry for
        the registry was already present.

    Raises:
        ConfigurationError: If an entry must be written but no token is set.
        CredentialIOError: If the file cannot be read or written.
    """
    host = normalize_registry_host(registry_url)

    try:
        exists = path.exists()
        npmrc = NpmrcFile(path.read_text() if exists else "")
    except OSError as exc:
        raise CredentialIOError(f"Could not read {path}: {exc}") from exc

    if exists:
        info(f"Found existing user .npmrc file at {path}")
        if npmrc.has_entry(host):
            info(f"Found existing auth token for {host} in the user .npmrc file")
            return False
        info(f"No auth token for {host} in the user .npmrc file, adding one")
    else:
        info("No user .npmrc file found, creating one")

    if not token:
        raise ConfigurationError(
            f"No auth token configured for registry {host}; "
            "set ARTIFACTORY_AUTH_TOKEN or NPM_TOKEN"
        )

    npmrc.append_entry(host, token)
    try:
        path.write_text(npmrc.text)
    except OSError as exc:
        raise CredentialIOError(f"Could not write {path}: {exc}") from exc
    return True
