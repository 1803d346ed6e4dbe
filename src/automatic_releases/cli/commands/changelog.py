"""Implementation of the 'changelog' command.

Generates changelog metadata from a commit range (or loads it from a
previous run) and prints the rendered Markdown to stdout.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from automatic_releases.config import load_config, load_github_context
from automatic_releases.core.changelog import (
    generate_changelog_metadata,
    load_changelog,
    render_changelog,
    save_changelog,
)
from automatic_releases.core.commits import collect_parsed_commits
from automatic_releases.exceptions import AutomaticReleasesError
from automatic_releases.vcs import GitHubClient

if TYPE_CHECKING:
    from pathlib import Path

    from rich.console import Console

    from automatic_releases.core.changelog import Changelog


def _fetch_changelog(base: str, head: str | None, token: str | None) -> Changelog:
    config = load_config()
    context = load_github_context()
    if token is None and config.github.token is not None:
        token = config.github.token.get_secret_value()

    with GitHubClient(context.owner, context.repo, token, config.github.api_url) as client:
        commits = client.compare_commits(base, head or context.sha)
        parsed = collect_parsed_commits(commits, client.list_pull_requests_for_commit)
    return generate_changelog_metadata(parsed)


def run_changelog(
    *,
    base: str | None,
    head: str | None,
    metadata_in: Path | None,
    metadata_out: Path | None,
    with_authors: bool,
    merge_similar: bool,
    token: str | None,
    err_console: Console,
) -> None:
    """Run the changelog command.

    Args:
        base: Ref to compare from
        head: Ref to compare to (default: ``$GITHUB_SHA``)
        metadata_in: Metadata file to render instead of querying GitHub
        metadata_out: Where to store the generated metadata
        with_authors: Render author links instead of SHAs
        merge_similar: Fold near-duplicate commits
        token: GitHub token
        err_console: Console for error output
    """
    if metadata_in is None and not base:
        err_console.print("[red]Error:[/] Pass [cyan]--base[/] or [cyan]--from-metadata[/].")
        raise SystemExit(1)

    try:
        if metadata_in is not None:
            changelog = load_changelog(metadata_in)
        else:
            changelog = _fetch_changelog(base, head, token)
        if metadata_out is not None:
            save_changelog(changelog, metadata_out)
    except AutomaticReleasesError as e:
        err_console.print(f"[red]Error generating changelog:[/] {e}")
        raise SystemExit(1) from e

    # Plain echo keeps the Markdown byte-exact for piping
    click.echo(render_changelog(changelog, with_authors, merge_similar))
