"""Publish and version runners.

Both runners wrap user-supplied commands (``changeset publish``,
``changeset version`` or whatever the repository configures):

- run_publish runs the publish command, works out which packages were
  released from its output, pushes the new tags and optionally creates one
  GitHub release per package.
- run_version runs the version command on a ``changeset-release/<branch>``
  branch, force-pushes it and opens (or refreshes) the version PR.
"""

from __future__ import annotations

import json
import re
import shlex
from pathlib import Path

import semver

from .errors import RunnerFailure
from .gitutils import (
    commit_all,
    current_branch,
    is_clean,
    push,
    push_tags,
    reset_hard,
    switch_to_maybe_existing_branch,
)
from .models import (
    PublishedPackage,
    PublishOptions,
    PublishResult,
    VersionOptions,
    VersionResult,
)
from .shell import gh, git, info, run, step

DEFAULT_VERSION_COMMAND = "npx changeset version"
DEFAULT_TITLE = "Version Packages"
DEFAULT_COMMIT_MESSAGE = "Version Packages"
VERSION_BRANCH_PREFIX = "changeset-release/"

# "🦋  New tag:  @scope/pkg@1.2.0" or "New tag: pkg@1.2.0"
_PACKAGE_TAG = re.compile(r"New tag:\s+(?P<name>@[^/\s]+/[^@\s]+|[^@\s]+)@(?P<version>\S+)")
# Single-package repos tag as "New tag: v1.2.0"
_VERSION_TAG = re.compile(r"New tag:\s+v?(?P<version>\d+\.\d+\.\d+\S*)\s*$")
_PR_URL = re.compile(r"/pull/(?P<number>\d+)")


def _command(script: str) -> list[str]:
    argv = shlex.split(script)
    if not argv:
        raise RunnerFailure(f"Empty command: {script!r}")
    return argv


def _read_package_name(package_json: Path) -> str | None:
    if not package_json.exists():
        return None
    try:
        return json.loads(package_json.read_text()).get("name")
    except json.JSONDecodeError:
        return None


def parse_published_packages(
    output: str, root_package_name: str | None = None
) -> list[PublishedPackage]:
    """Extract released packages from publish command output.

    Monorepo tags name the package (``pkg@1.2.0``). A bare ``v1.2.0`` tag is
    attributed to the root package, and ignored if its name is unknown.
    Packages are returned in the order they were reported, without repeats.
    """
    packages: list[PublishedPackage] = []
    seen: set[tuple[str, str]] = set()
    for line in output.splitlines():
        match = _PACKAGE_TAG.search(line)
        if match:
            name, version = match["name"], match["version"]
        else:
            match = _VERSION_TAG.search(line)
            if not match or not root_package_name:
                continue
            name, version = root_package_name, match["version"]
        if not semver.Version.is_valid(version):
            info(f"Ignoring tag with a non-semver version: {name}@{version}")
            continue
        if (name, version) not in seen:
            seen.add((name, version))
            packages.append(PublishedPackage(name=name, version=version))
    return packages


def find_package_dirs(root: Path) -> dict[str, Path]:
    """Map package names to their directories by scanning package.json files."""
    dirs: dict[str, Path] = {}
    for package_json in sorted(root.glob("**/package.json")):
        if "node_modules" in package_json.parts:
            continue
        name = _read_package_name(package_json)
        if name and name not in dirs:
            dirs[name] = package_json.parent
    return dirs


def get_changelog_entry(changelog: str, version: str) -> str | None:
    """Return the body of the ``## <version>`` section of a changelog."""
    lines = changelog.splitlines()
    start: int | None = None
    for i, line in enumerate(lines):
        if start is None:
            if line.startswith("## ") and line[3:].strip() == version:
                start = i + 1
        elif line.startswith("## ") or line.startswith("# "):
            return "\n".join(lines[start:i]).strip()
    if start is None:
        return None
    return "\n".join(lines[start:]).strip()


def create_github_release(
    package: PublishedPackage,
    package_dir: Path | None,
    github_token: str,
    *,
    tag: str,
) -> None:
    """Create a GitHub release for a published package version."""
    notes = None
    changelog = package_dir / "CHANGELOG.md" if package_dir else None
    if changelog and changelog.exists():
        notes = get_changelog_entry(changelog.read_text(), package.version)
    if notes is None:
        info(f"No changelog entry for {package.name}@{package.version}")

    gh(
        "release",
        "create",
        tag,
        "--title",
        tag,
        "--notes",
        notes or "",
        token=github_token,
    )
    info(f"Created release {tag}")


def run_publish(options: PublishOptions, root: Path | None = None) -> PublishResult:
    """Run the publish command and report what it released.

    Raises:
        RunnerFailure: If the publish command, git or gh fails.
    """
    root = root or Path.cwd()
    step("Publishing packages")

    result = run(*_command(options.script), env={"GITHUB_TOKEN": options.github_token})
    root_name = _read_package_name(root / "package.json")
    packages = parse_published_packages(
        f"{result.stdout}\n{result.stderr}", root_name
    )
    if not packages:
        info("No packages were published")
        return PublishResult(published=False)

    for pkg in packages:
        info(f"Published {pkg.name}@{pkg.version}")
    push_tags()

    if options.create_github_releases:
        step("Creating GitHub releases")
        dirs = find_package_dirs(root)
        single_package = root_name is not None and len(dirs) <= 1
        for pkg in packages:
            tag = f"v{pkg.version}" if single_package else f"{pkg.name}@{pkg.version}"
            create_github_release(pkg, dirs.get(pkg.name), options.github_token, tag=tag)

    return PublishResult(published=True, published_packages=packages)


def pr_body(branch: str, has_publish_script: bool) -> str:
    if has_publish_script:
        how = "the packages will be published to npm automatically"
    else:
        how = (
            "you can publish to npm yourself or "
            "setup this action to publish automatically"
        )
    return (
        "This PR was opened by the changesets release action. "
        f"When you're ready to do a release, you can merge this and {how}. "
        "If you're not ready to do a release yet, that's fine, whenever you "
        f"add more changesets to {branch}, this PR will be updated."
    )


def find_open_pull_request(head: str, base: str, github_token: str) -> int | None:
    output = gh(
        "pr",
        "list",
        "--head",
        head,
        "--base",
        base,
        "--state",
        "open",
        "--json",
        "number",
        "--limit",
        "1",
        token=github_token,
    )
    try:
        prs = json.loads(output) if output else []
    except json.JSONDecodeError as exc:
        raise RunnerFailure(f"Unexpected gh pr list output: {output!r}") from exc
    return int(prs[0]["number"]) if prs else None


def run_version(options: VersionOptions) -> VersionResult:
    """Version packages on the release branch and open or update its PR.

    Returns:
        The PR number, or None when versioning produced no changes and no PR
        is open yet.

    Raises:
        RunnerFailure: If the version command, git or gh fails.
    """
    branch = options.branch or current_branch()
    version_branch = f"{VERSION_BRANCH_PREFIX}{branch}"
    step(f"Versioning packages on {version_branch}")

    sha = git("rev-parse", "HEAD")
    switch_to_maybe_existing_branch(version_branch)
    reset_hard(sha)

    run(
        *_command(options.script or DEFAULT_VERSION_COMMAND),
        env={"GITHUB_TOKEN": options.github_token},
    )

    title = options.pr_title or DEFAULT_TITLE
    existing = find_open_pull_request(version_branch, branch, options.github_token)

    if is_clean():
        info("Versioning produced no changes")
        return VersionResult(pull_request_number=existing)

    commit_all(options.commit_message or DEFAULT_COMMIT_MESSAGE)
    push(version_branch, force=True)

    body = pr_body(branch, options.has_publish_script)
    if existing is not None:
        step(f"Updating pull request #{existing}")
        gh(
            "pr",
            "edit",
            str(existing),
            "--title",
            title,
            "--body",
            body,
            token=options.github_token,
        )
        return VersionResult(pull_request_number=existing)

    step("Creating pull request")
    url = gh(
        "pr",
        "create",
        "--base",
        branch,
        "--head",
        version_branch,
        "--title",
        title,
        "--body",
        body,
        token=options.github_token,
    )
    match = _PR_URL.search(url)
    if not match:
        raise RunnerFailure(f"Could not find a pull request number in {url!r}")
    info(url)
    return VersionResult(pull_request_number=int(match["number"]))
