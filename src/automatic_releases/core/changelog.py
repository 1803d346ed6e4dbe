"""Changelog aggregation and rendering.

Enriched commits are grouped into a :class:`Changelog` (breaking
changes, one bucket per conventional commit type, dependency updates
and commits without convention). The metadata can be persisted as JSON
and rendered to Markdown later, optionally folding near-duplicate
commits (e.g. bot version bumps) into a single summary line.
"""

from __future__ import annotations

import logging
import os
import re
import tempfile
from collections.abc import Callable, Iterable, Sequence
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, ConfigDict, ValidationError
from pyuca import Collator

from automatic_releases.core.commits import ParsedCommit
from automatic_releases.exceptions import ChangelogError

logger = logging.getLogger(__name__)

# Rendering order is the declaration order of this sequence
CONVENTIONAL_COMMIT_TYPES: tuple[tuple[str, str], ...] = (
    ("feat", "Features"),
    ("fix", "Bug Fixes"),
    ("docs", "Documentation"),
    ("style", "Styles"),
    ("refactor", "Code Refactoring"),
    ("perf", "Performance Improvements"),
    ("test", "Tests"),
    ("build", "Builds"),
    ("ci", "Continuous Integration"),
    ("chore", "Chores"),
    ("revert", "Reverts"),
)

CONVENTIONAL_TYPE_KEYS: frozenset[str] = frozenset(key for key, _ in CONVENTIONAL_COMMIT_TYPES)

DEPENDENCY_SCOPE = "deps"

PATCH_LEVEL_TYPES = ("fix", "perf", "refactor", "revert")
LIFECYCLE_TYPES = ("build", "chore", "ci", "docs", "style", "test")

_GROUPABLE_PATTERN = re.compile(r"[a-fA-F0-9]{7,}|\d+")


class TypeBuckets(BaseModel):
    """One list of commits per conventional commit type."""

    model_config = ConfigDict(frozen=True)

    feat: tuple[ParsedCommit, ...] = ()
    fix: tuple[ParsedCommit, ...] = ()
    docs: tuple[ParsedCommit, ...] = ()
    style: tuple[ParsedCommit, ...] = ()
    refactor: tuple[ParsedCommit, ...] = ()
    perf: tuple[ParsedCommit, ...] = ()
    test: tuple[ParsedCommit, ...] = ()
    build: tuple[ParsedCommit, ...] = ()
    ci: tuple[ParsedCommit, ...] = ()
    chore: tuple[ParsedCommit, ...] = ()
    revert: tuple[ParsedCommit, ...] = ()

    def bucket(self, commit_type: str) -> tuple[ParsedCommit, ...]:
        """Return the commits of one conventional type."""
        if commit_type not in CONVENTIONAL_TYPE_KEYS:
            raise KeyError(commit_type)
        return getattr(self, commit_type)

    def total(self) -> int:
        return sum(len(self.bucket(key)) for key, _ in CONVENTIONAL_COMMIT_TYPES)


class Changelog(TypeBuckets):
    """Changelog metadata for one release.

    Attributes:
        breaking_changes: Every commit flagged as breaking, in any bucket
        deps: Commits scoped ``deps``, bucketed by type
        commits: All enriched input commits, unfiltered
        unconventional: Non-``deps`` commits without a known type
    """

    breaking_changes: tuple[ParsedCommit, ...] = ()
    deps: TypeBuckets = TypeBuckets()
    commits: tuple[ParsedCommit, ...] = ()
    unconventional: tuple[ParsedCommit, ...] = ()


# =============================================================================
# Aggregation
# =============================================================================


def _by_type(commits: Sequence[ParsedCommit]) -> dict[str, tuple[ParsedCommit, ...]]:
    return {
        key: tuple(commit for commit in commits if commit.type == key)
        for key, _ in CONVENTIONAL_COMMIT_TYPES
    }


def generate_changelog_metadata(parsed_commits: Iterable[ParsedCommit]) -> Changelog:
    """Group enriched commits into changelog buckets.

    ``deps``-scoped commits go to :attr:`Changelog.deps` only. Breaking
    changes are collected from all commits and stay in their regular
    bucket as well.

    Args:
        parsed_commits: Enriched, merge-filtered commits

    Returns:
        The changelog metadata
    """
    commits = tuple(parsed_commits)
    without_deps = [commit for commit in commits if commit.scope != DEPENDENCY_SCOPE]
    deps = [commit for commit in commits if commit.scope == DEPENDENCY_SCOPE]

    return Changelog(
        **_by_type(without_deps),
        breaking_changes=tuple(commit for commit in commits if commit.extra.breaking_change),
        deps=TypeBuckets(**_by_type(deps)),
        commits=commits,
        unconventional=tuple(
            commit for commit in without_deps if commit.type not in CONVENTIONAL_TYPE_KEYS
        ),
    )


def summarize_changelog(changelog: Changelog) -> dict[str, int]:
    """Derive rollup counters for pipeline reporting."""
    summary = {"breaking": len(changelog.breaking_changes)}
    for key, _ in CONVENTIONAL_COMMIT_TYPES:
        summary[key] = len(changelog.bucket(key))
    summary["patch"] = sum(len(changelog.bucket(key)) for key in PATCH_LEVEL_TYPES)
    summary["lifecycle"] = sum(len(changelog.bucket(key)) for key in LIFECYCLE_TYPES)
    summary["dependencies"] = changelog.deps.total()
    summary["unconventional"] = len(changelog.unconventional)
    summary["total"] = len(changelog.commits)
    return summary


# =============================================================================
# Persistence
# =============================================================================


def save_changelog(changelog: Changelog, path: Path) -> Path:
    """Write changelog metadata as JSON.

    The file is written next to its destination and renamed into place,
    so an interrupted write never leaves a partial artifact behind.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(changelog.model_dump_json(indent=2))
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
    logger.info("Wrote changelog metadata to %s", path)
    return path


def load_changelog(path: Path) -> Changelog:
    """Load changelog metadata written by :func:`save_changelog`.

    Raises:
        ChangelogError: If the file is missing or not valid metadata
    """
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ChangelogError(f"Cannot read changelog metadata {path}: {e}") from e
    try:
        return Changelog.model_validate_json(content)
    except ValidationError as e:
        raise ChangelogError(f"Invalid changelog metadata in {path}: {e}") from e


# =============================================================================
# Rendering
# =============================================================================


@lru_cache(maxsize=1)
def _collator() -> Collator:
    # Loading the collation table is slow, do it once
    return Collator()


def _sort_key(commit: ParsedCommit) -> tuple[tuple[int, ...], str]:
    return (_collator().sort_key(commit.header), commit.header)


def sort_by_header(commits: Iterable[ParsedCommit]) -> list[ParsedCommit]:
    """Sort commits by header using Unicode collation.

    Punctuation orders before digits and letters (``feat: x`` before
    ``feat(api): x``) and lowercase before uppercase, as in a locale-aware
    string comparison.
    """
    return sorted(commits, key=_sort_key)


def to_groupable(header: str) -> str:
    """Normalize hashes and numbers so near-duplicate headers compare equal."""
    return _GROUPABLE_PATTERN.sub("x", header)


def get_formatted_changelog_entry(commit: ParsedCommit, with_authors: bool) -> str:
    """Render one changelog line.

    Format: ``- **scope**: subject [#1](url),[#2](url) (author-or-sha)``.
    The scope prefix and pull request links are omitted when empty. The
    parenthetical is an author link when ``with_authors`` is set and the
    author is known, otherwise the full commit SHA.
    """
    raw = commit.extra.commit
    pr_links = ",".join(f"[#{pr.number}]({pr.url})" for pr in commit.extra.pull_requests)
    pr_string = f" {pr_links}" if pr_links else ""

    scope = f"**{commit.scope}**: " if commit.scope else ""
    text = commit.subject if commit.subject else commit.header
    if with_authors and raw.author_name:
        attribution = f"[{raw.author_name}]({raw.html_url})"
    else:
        attribution = raw.sha

    return f"- {scope}{text}{pr_string} ({attribution})"


def format_merged_commits(commits: Sequence[ParsedCommit]) -> str:
    """Render the summary line for folded similar commits."""
    count = len(commits)
    plural = "s" if count != 1 else ""
    shas = ", ".join(commit.sha for commit in commits)
    return f"<sup>{count} similar commit{plural} not listed: {shas}</sup>"


def merge_similar_commits(
    commits: Iterable[ParsedCommit],
    with_authors: bool,
    on_merge: Callable[[list[ParsedCommit]], str],
) -> list[str]:
    """Render a bucket, folding repeats of the same header shape.

    The first commit of each run of equal :func:`to_groupable` keys is
    listed individually; the remaining commits of the run are passed to
    ``on_merge``, whose return value is emitted as one line.
    """
    block: list[str] = []
    last_key: str | None = None
    grouped: list[ParsedCommit] = []

    for commit in sort_by_header(commits):
        key = to_groupable(commit.header)
        if key == last_key:
            grouped.append(commit)
            continue

        if grouped:
            block.append(on_merge(grouped))
            grouped = []

        block.append(get_formatted_changelog_entry(commit, with_authors))
        last_key = key

    if grouped:
        block.append(on_merge(grouped))

    return block


def count_changes(total_count: int, merged_count: int) -> str:
    """Format the count suffix of a section title."""
    if merged_count == 0:
        return str(total_count)
    return f"{total_count - merged_count}/+{merged_count} unlisted"


def _render_block(
    commits: Sequence[ParsedCommit],
    with_authors: bool,
    merge_similar: bool,
) -> tuple[list[str], str]:
    """Render the lines of one bucket and its count suffix."""
    if not merge_similar:
        lines = [get_formatted_changelog_entry(c, with_authors) for c in sort_by_header(commits)]
        return lines, count_changes(len(commits), 0)

    merged_count = 0

    def on_merge(grouped: list[ParsedCommit]) -> str:
        nonlocal merged_count
        merged_count += len(grouped)
        return format_merged_commits(grouped)

    lines = merge_similar_commits(commits, with_authors, on_merge)
    return lines, count_changes(len(commits), merged_count)


def render_changelog(changelog: Changelog, with_authors: bool, merge_similar: bool) -> str:
    """Render changelog metadata to Markdown.

    Sections, each only when non-empty: Breaking Changes, one section per
    conventional type in declaration order, Dependency Changes (one
    collapsible block per type) and Commits without convention.

    Args:
        changelog: Metadata from :func:`generate_changelog_metadata`
        with_authors: Render author links instead of commit SHAs
        merge_similar: Fold near-duplicate commits into summary lines

    Returns:
        The Markdown changelog
    """
    text = ""

    breaking = [
        get_formatted_changelog_entry(commit, with_authors)
        for commit in sort_by_header(changelog.breaking_changes)
    ]
    if breaking:
        text += "## Breaking Changes\n"
        text += "\n".join(breaking).strip()

    for key, label in CONVENTIONAL_COMMIT_TYPES:
        lines, count = _render_block(changelog.bucket(key), with_authors, merge_similar)
        if lines:
            text += f"\n\n## {label} ({count})\n"
            text += "\n".join(lines).strip()

    if changelog.deps.total():
        text += "\n\n## Dependency Changes\n"
        for key, label in CONVENTIONAL_COMMIT_TYPES:
            lines, count = _render_block(changelog.deps.bucket(key), with_authors, merge_similar)
            if lines:
                text += "\n<details>\n"
                text += f"<summary>{label} ({count})</summary>\n\n"
                text += "\n".join(lines).strip()
                text += "\n</details>\n"

    lines, count = _render_block(changelog.unconventional, with_authors, merge_similar)
    if lines:
        text += f"\n\n## Commits without convention ({count})\n"
        text += "\n".join(lines).strip()

    return text.strip()
