"""Core business logic for automatic-releases.

This package contains the fundamental building blocks:
- Conventional commit parsing and enrichment
- Changelog aggregation, persistence and rendering
- Version parsing and release version suggestions
- Release orchestration and artifact upload
"""

from __future__ import annotations

from automatic_releases.core.changelog import (
    CONVENTIONAL_COMMIT_TYPES,
    Changelog,
    generate_changelog_metadata,
    get_formatted_changelog_entry,
    load_changelog,
    render_changelog,
    save_changelog,
    summarize_changelog,
)
from automatic_releases.core.commits import (
    ParsedCommit,
    ParsedCommitHeader,
    PullRequestRef,
    RawCommit,
    enrich_commit,
    is_breaking_change,
    parse_commit,
    parse_commit_message,
)
from automatic_releases.core.version import BumpType, Version, parse_version, suggest_versions

__all__ = [
    # Changelog
    "CONVENTIONAL_COMMIT_TYPES",
    "Changelog",
    "generate_changelog_metadata",
    "get_formatted_changelog_entry",
    "load_changelog",
    "render_changelog",
    "save_changelog",
    "summarize_changelog",
    # Commits
    "ParsedCommit",
    "ParsedCommitHeader",
    "PullRequestRef",
    "RawCommit",
    "enrich_commit",
    "is_breaking_change",
    "parse_commit",
    "parse_commit_message",
    # Version
    "BumpType",
    "Version",
    "parse_version",
    "suggest_versions",
]
