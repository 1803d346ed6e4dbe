"""Command line interface for automatic-releases."""

from __future__ import annotations

from automatic_releases.cli.app import cli, main

__all__ = ["cli", "main"]
