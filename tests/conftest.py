"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

import pytest

from automatic_releases.core.commits import (
    PullRequestRef,
    RawCommit,
    enrich_commit,
    parse_commit,
)

if TYPE_CHECKING:
    from pathlib import Path

    from automatic_releases.core.commits import ParsedCommit


def make_raw_commit(
    message: str,
    sha: str = "8f5fd3a938a1162daedf135293e163fba99d07ef",
    author_name: str | None = "Oliver Salzburg",
) -> RawCommit:
    return RawCommit(
        sha=sha,
        message=message,
        html_url=f"https://github.com/kitten-science/kitten-scientists/commit/{sha}",
        author_name=author_name,
    )


def make_parsed_commit(
    message: str,
    sha: str = "8f5fd3a938a1162daedf135293e163fba99d07ef",
    pull_requests: tuple[PullRequestRef, ...] = (),
    author_name: str | None = "Oliver Salzburg",
) -> ParsedCommit:
    raw = make_raw_commit(message, sha=sha, author_name=author_name)
    parsed = enrich_commit(raw, parse_commit(raw), pull_requests)
    assert parsed is not None
    return parsed


@pytest.fixture
def raw_commit() -> Callable[..., RawCommit]:
    """Factory for commits as returned by the compare API."""
    return make_raw_commit


@pytest.fixture
def parsed_commit() -> Callable[..., ParsedCommit]:
    """Factory for enriched commits."""
    return make_parsed_commit


@pytest.fixture
def sample_commits() -> list[ParsedCommit]:
    """A realistic mix of commits."""
    return [
        make_parsed_commit("feat: add user authentication", sha="a" * 40),
        make_parsed_commit("fix(core): handle null response", sha="b" * 40),
        make_parsed_commit("docs: update README", sha="c" * 40),
        make_parsed_commit("chore(deps): bump httpx to 0.27.0", sha="d" * 40),
        make_parsed_commit(
            "feat(api)!: remove v1 endpoints\n\nBREAKING CHANGE: v1 is gone",
            sha="e" * 40,
        ),
        make_parsed_commit("Update Crowdin configuration file", sha="f" * 40),
    ]


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> dict[str, str]:
    """Remove GitHub Actions variables and run from an empty directory."""
    for name in (
        "GITHUB_TOKEN",
        "GITHUB_REPOSITORY",
        "GITHUB_SHA",
        "GITHUB_REF",
        "GITHUB_OUTPUT",
        "GITHUB_ENV",
        "GITHUB_API_URL",
        "INPUT_REPO-TOKEN",
        "INPUT_REPO_TOKEN",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    return {}
