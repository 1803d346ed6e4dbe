"""Configuration models for automatic-releases."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator


class _Section(BaseModel):
    model_config = ConfigDict(extra="forbid")


class ReleaseConfig(_Section):
    """Settings of a single release run (the action inputs)."""

    automatic_release_tag: str = ""
    body_prefix: str = ""
    body_suffix: str = ""
    draft: bool = False
    prerelease: bool = False
    title: str = ""
    files: list[str] = Field(default_factory=list)
    dry_run: bool = False
    merge_similar: bool = False
    with_authors: bool = False

    @field_validator("files", mode="before")
    @classmethod
    def _split_files(cls, value: object) -> object:
        if isinstance(value, str):
            return [line.strip() for line in value.splitlines() if line.strip()]
        return value


class GitHubConfig(_Section):
    """GitHub API settings."""

    api_url: str = "https://api.github.com"
    token: SecretStr | None = None


class ChangelogConfig(_Section):
    """Changelog metadata artifact settings."""

    metadata_path: Path | None = None


class AutomaticReleasesConfig(_Section):
    """Root configuration."""

    release: ReleaseConfig = Field(default_factory=ReleaseConfig)
    github: GitHubConfig = Field(default_factory=GitHubConfig)
    changelog: ChangelogConfig = Field(default_factory=ChangelogConfig)


class GitHubContext(BaseModel):
    """The repository and commit a run operates on."""

    model_config = ConfigDict(frozen=True)

    owner: str
    repo: str
    sha: str
    ref: str = ""
