"""changesets-release: version PRs and publishing for changeset-managed monorepos."""
