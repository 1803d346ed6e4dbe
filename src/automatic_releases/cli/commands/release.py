"""Implementation of the 'release' command.

The release command runs a full automatic release for the commit the
workflow was triggered for.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.panel import Panel

from automatic_releases.config import load_config, load_github_context
from automatic_releases.core.changelog import summarize_changelog
from automatic_releases.core.outputs import export_variables, set_outputs
from automatic_releases.core.release import AutomaticReleases
from automatic_releases.exceptions import AutomaticReleasesError
from automatic_releases.vcs import GitHubClient

if TYPE_CHECKING:
    from pathlib import Path

    from rich.console import Console


def run_release(
    path: Path | None,
    token: str | None,
    dry_run: bool,
    console: Console,
    err_console: Console,
) -> None:
    """Run the release command.

    Args:
        path: Optional path to project directory
        token: GitHub token overriding the configured one
        dry_run: Force dry-run mode
        console: Console for standard output
        err_console: Console for error output
    """
    # Load configuration
    try:
        config = load_config(path)
        context = load_github_context()
    except AutomaticReleasesError as e:
        err_console.print(f"[red]Error loading config:[/] {e}")
        raise SystemExit(1) from e

    if dry_run:
        config = config.model_copy(
            update={"release": config.release.model_copy(update={"dry_run": True})}
        )

    if token is None and config.github.token is not None:
        token = config.github.token.get_secret_value()
    if not token:
        err_console.print(
            "[red]Error:[/] No GitHub token found.\n"
            "Set [cyan]GITHUB_TOKEN[/], the [cyan]repo-token[/] input or pass [cyan]--token[/]."
        )
        raise SystemExit(1)

    mode_str = "[yellow]DRY-RUN[/]" if config.release.dry_run else "[green]EXECUTING[/]"
    console.print(
        f"\n{mode_str} - Releasing [cyan]{context.owner}/{context.repo}[/] at {context.sha}\n"
    )

    try:
        with GitHubClient(context.owner, context.repo, token, config.github.api_url) as client:
            result = AutomaticReleases(client, context, config).run()
    except AutomaticReleasesError as e:
        err_console.print(f"[red]Release failed:[/] {e}")
        raise SystemExit(1) from e

    summary = summarize_changelog(result.changelog)
    export_variables({"AUTOMATIC_RELEASES_TAG": result.tag_name})
    set_outputs(
        {
            "automatic_releases_tag": result.tag_name,
            "upload_url": result.release.upload_url,
            **{f"count_{name}": count for name, count in summary.items()},
        }
    )

    assets = "\n".join(f"  • {name}" for name in result.assets) or "  (none)"
    console.print(
        Panel(
            f"[green]Published release {result.tag_name}![/]\n\n"
            f"Commits: {summary['total']} "
            f"(breaking {summary['breaking']}, features {summary['feat']}, "
            f"fixes {summary['fix']})\n"
            f"Assets:\n{assets}\n\n"
            f"{result.release.html_url}",
            title="[green]Release Complete[/]",
            border_style="green",
        )
    )
