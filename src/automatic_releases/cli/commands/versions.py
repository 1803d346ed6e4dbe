"""Implementation of the 'suggest-versions' command."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from rich.table import Table

from automatic_releases.core.outputs import set_outputs
from automatic_releases.core.version import suggest_versions
from automatic_releases.exceptions import AutomaticReleasesError
from automatic_releases.project.manifest import get_project_version

if TYPE_CHECKING:
    from pathlib import Path

    from rich.console import Console


def run_suggest_versions(
    version: str | None,
    path: Path | None,
    sha: str | None,
    console: Console,
    err_console: Console,
) -> None:
    """Run the suggest-versions command.

    Args:
        version: Version to derive from; read from the manifest when omitted
        path: Manifest file or project directory
        sha: Commit SHA for the hash variants
        console: Console for standard output
        err_console: Console for error output
    """
    try:
        current = version or get_project_version(path)
        suggestions = suggest_versions(current, datetime.now(UTC), sha=sha)
    except AutomaticReleasesError as e:
        err_console.print(f"[red]Error suggesting versions:[/] {e}")
        raise SystemExit(1) from e

    set_outputs(suggestions)

    table = Table(title=f"Version suggestions for {current}")
    table.add_column("Name", style="cyan")
    table.add_column("Version", style="green")
    for name, value in suggestions.items():
        table.add_row(name, value)
    console.print(table)
