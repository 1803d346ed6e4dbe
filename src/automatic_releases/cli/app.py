"""Command line entry point."""

from __future__ import annotations

from pathlib import Path

import click
from rich.console import Console

from automatic_releases import __version__
from automatic_releases.logging import configure_logging

console = Console()
err_console = Console(stderr=True)


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(__version__, prog_name="automatic-releases")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug output.")
@click.option("-q", "--quiet", is_flag=True, help="Only show warnings and errors.")
def cli(verbose: bool, quiet: bool) -> None:
    """Generate GitHub releases with conventional-commit changelogs."""
    configure_logging(verbose=verbose, quiet=quiet)


@cli.command("release")
@click.option(
    "--path",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Project directory holding pyproject.toml (default: cwd).",
)
@click.option("--token", envvar="GITHUB_TOKEN", default=None, help="GitHub token.")
@click.option(
    "--dry-run",
    is_flag=True,
    help="Do not move tags; suffix the release tag with a timestamp.",
)
def release_command(path: Path | None, token: str | None, dry_run: bool) -> None:
    """Create or replace the GitHub release for the current commit."""
    from automatic_releases.cli.commands.release import run_release

    run_release(path, token, dry_run, console, err_console)


@cli.command("changelog")
@click.option("--base", default=None, help="Ref to compare from (previous release tag).")
@click.option("--head", default=None, help="Ref to compare to (default: $GITHUB_SHA).")
@click.option(
    "--from-metadata",
    "metadata_in",
    type=click.Path(dir_okay=False, exists=True, path_type=Path),
    default=None,
    help="Render previously generated changelog metadata instead of querying GitHub.",
)
@click.option(
    "--metadata",
    "metadata_out",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write changelog metadata JSON to this file.",
)
@click.option("--with-authors", is_flag=True, help="Render author links instead of SHAs.")
@click.option("--merge-similar", is_flag=True, help="Fold near-duplicate commits.")
@click.option("--token", envvar="GITHUB_TOKEN", default=None, help="GitHub token.")
def changelog_command(
    base: str | None,
    head: str | None,
    metadata_in: Path | None,
    metadata_out: Path | None,
    with_authors: bool,
    merge_similar: bool,
    token: str | None,
) -> None:
    """Generate and print a changelog."""
    from automatic_releases.cli.commands.changelog import run_changelog

    run_changelog(
        base=base,
        head=head,
        metadata_in=metadata_in,
        metadata_out=metadata_out,
        with_authors=with_authors,
        merge_similar=merge_similar,
        token=token,
        err_console=err_console,
    )


@cli.command("suggest-versions")
@click.argument("version", required=False)
@click.option(
    "--path",
    type=click.Path(path_type=Path),
    default=None,
    help="Manifest or project directory to read the version from.",
)
@click.option("--sha", envvar="GITHUB_SHA", default=None, help="Commit SHA for hash variants.")
def suggest_versions_command(version: str | None, path: Path | None, sha: str | None) -> None:
    """Suggest release versions derived from VERSION or the project manifest."""
    from automatic_releases.cli.commands.versions import run_suggest_versions

    run_suggest_versions(version, path, sha, console, err_console)


def main() -> None:
    cli()
