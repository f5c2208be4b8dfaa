from changesets_release.cli import cli

if __name__ == "__main__":
    cli()
