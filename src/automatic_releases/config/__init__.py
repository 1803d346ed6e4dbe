"""Configuration management for automatic-releases."""

from __future__ import annotations

from automatic_releases.config.loader import load_config, load_github_context
from automatic_releases.config.models import (
    AutomaticReleasesConfig,
    ChangelogConfig,
    GitHubConfig,
    GitHubContext,
    ReleaseConfig,
)

__all__ = [
    "AutomaticReleasesConfig",
    "ChangelogConfig",
    "GitHubConfig",
    "GitHubContext",
    "ReleaseConfig",
    "load_config",
    "load_github_context",
]
