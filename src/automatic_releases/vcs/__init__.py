"""Version control hosting backends."""

from __future__ import annotations

from automatic_releases.vcs.github import GitHubClient, Release

__all__ = ["GitHubClient", "Release"]
