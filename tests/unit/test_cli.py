"""Tests for the command line interface."""

from __future__ import annotations

from typing import TYPE_CHECKING
from unittest.mock import MagicMock

import pytest
from click.testing import CliRunner

from automatic_releases import __version__
from automatic_releases.cli.app import cli
from automatic_releases.core.changelog import (
    generate_changelog_metadata,
    render_changelog,
    save_changelog,
)
from automatic_releases.exceptions import NotFoundError
from automatic_releases.vcs.github import Release

if TYPE_CHECKING:
    from pathlib import Path

SHA = "8f5fd3a938a1162daedf135293e163fba99d07ef"


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def mock_github(monkeypatch: pytest.MonkeyPatch, raw_commit) -> MagicMock:
    """Replace the GitHub client used by the release command."""
    client_cls = MagicMock()
    client = client_cls.return_value.__enter__.return_value
    client.get_ref.side_effect = NotFoundError("not found", status_code=404)
    client.compare_commits.return_value = [raw_commit("feat: add dark mode", sha=SHA)]
    client.list_pull_requests_for_commit.return_value = []
    client.get_release_by_tag.side_effect = NotFoundError("not found", status_code=404)
    client.create_release.return_value = Release(
        id=1,
        tag_name="latest",
        upload_url="https://uploads.github.com/repos/o/r/releases/1/assets{?name,label}",
        html_url="https://github.com/o/r/releases/tag/latest",
    )
    monkeypatch.setattr("automatic_releases.cli.commands.release.GitHubClient", client_cls)
    return client


class TestCli:
    """Tests for the command group."""

    def test_version(self, runner: CliRunner):
        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_help_lists_commands(self, runner: CliRunner):
        result = runner.invoke(cli, ["--help"])

        assert result.exit_code == 0
        for command in ("release", "changelog", "suggest-versions"):
            assert command in result.output


class TestSuggestVersionsCommand:
    """Tests for 'suggest-versions'."""

    def test_explicit_version(self, runner: CliRunner, clean_env, tmp_path: Path):
        output = tmp_path / "output"

        result = runner.invoke(
            cli,
            ["suggest-versions", "1.2.3", "--sha", SHA],
            env={"GITHUB_OUTPUT": str(output)},
        )

        assert result.exit_code == 0
        assert "1.2.4+8f5fd3a" in result.stdout
        lines = output.read_text().splitlines()
        assert "current=1.2.3" in lines
        assert "patch_hash=1.2.4+8f5fd3a" in lines

    def test_version_from_manifest(self, runner: CliRunner, clean_env, tmp_path: Path):
        (tmp_path / "pyproject.toml").write_text('[project]\nversion = "0.9.0"\n')

        result = runner.invoke(cli, ["suggest-versions", "--path", str(tmp_path)])

        assert result.exit_code == 0
        assert "1.0.0" in result.stdout

    def test_invalid_version(self, runner: CliRunner, clean_env):
        result = runner.invoke(cli, ["suggest-versions", "latest"])

        assert result.exit_code == 1


class TestChangelogCommand:
    """Tests for 'changelog'."""

    def test_from_metadata(self, runner: CliRunner, sample_commits, tmp_path: Path):
        changelog = generate_changelog_metadata(sample_commits)
        path = save_changelog(changelog, tmp_path / "changelog.json")

        result = runner.invoke(cli, ["changelog", "--from-metadata", str(path), "--merge-similar"])

        assert result.exit_code == 0
        assert result.stdout == render_changelog(changelog, False, True) + "\n"

    def test_copy_metadata(self, runner: CliRunner, sample_commits, tmp_path: Path):
        source = save_changelog(
            generate_changelog_metadata(sample_commits), tmp_path / "changelog.json"
        )
        target = tmp_path / "copy" / "changelog.json"

        result = runner.invoke(
            cli, ["changelog", "--from-metadata", str(source), "--metadata", str(target)]
        )

        assert result.exit_code == 0
        assert target.read_text() == source.read_text()

    def test_requires_base_or_metadata(self, runner: CliRunner, clean_env):
        result = runner.invoke(cli, ["changelog"])

        assert result.exit_code == 1


class TestReleaseCommand:
    """Tests for 'release'."""

    def test_missing_repository(self, runner: CliRunner, clean_env):
        result = runner.invoke(cli, ["release"], env={"GITHUB_TOKEN": "tok"})

        assert result.exit_code == 1

    def test_missing_token(self, runner: CliRunner, clean_env):
        result = runner.invoke(
            cli,
            ["release"],
            env={"GITHUB_REPOSITORY": "o/r", "GITHUB_SHA": SHA},
        )

        assert result.exit_code == 1

    def test_release(self, runner: CliRunner, clean_env, mock_github: MagicMock, tmp_path: Path):
        output = tmp_path / "output"
        env_file = tmp_path / "env"

        result = runner.invoke(
            cli,
            ["release"],
            env={
                "GITHUB_REPOSITORY": "o/r",
                "GITHUB_SHA": SHA,
                "GITHUB_TOKEN": "tok",
                "GITHUB_OUTPUT": str(output),
                "GITHUB_ENV": str(env_file),
                "INPUT_AUTOMATIC_RELEASE_TAG": "latest",
                "INPUT_TITLE": "Development Build",
            },
        )

        assert result.exit_code == 0, result.output
        mock_github.create_ref.assert_called_once_with("refs/tags/latest", SHA)
        assert mock_github.create_release.call_args.kwargs["name"] == "Development Build"
        outputs = output.read_text().splitlines()
        assert "automatic_releases_tag=latest" in outputs
        assert "count_feat=1" in outputs
        assert "count_total=1" in outputs
        assert env_file.read_text() == "AUTOMATIC_RELEASES_TAG=latest\n"

    def test_dry_run(self, runner: CliRunner, clean_env, mock_github: MagicMock):
        result = runner.invoke(
            cli,
            ["release", "--dry-run"],
            env={
                "GITHUB_REPOSITORY": "o/r",
                "GITHUB_SHA": SHA,
                "GITHUB_TOKEN": "tok",
                "INPUT_AUTOMATIC_RELEASE_TAG": "latest",
            },
        )

        assert result.exit_code == 0, result.output
        mock_github.create_ref.assert_not_called()
        assert mock_github.create_release.call_args.kwargs["tag_name"].startswith("latest-")
