"""Tests for configuration loading and validation."""

from __future__ import annotations

from pathlib import Path

import pytest

from automatic_releases.config.loader import (
    extract_tool_config,
    find_pyproject_toml,
    load_config,
    load_github_context,
    load_pyproject_toml,
    parse_boolean_input,
    read_action_inputs,
    read_token,
)
from automatic_releases.config.models import AutomaticReleasesConfig, ReleaseConfig
from automatic_releases.exceptions import ConfigNotFoundError, ConfigValidationError


class TestAutomaticReleasesConfig:
    """Tests for AutomaticReleasesConfig model."""

    def test_default_config(self):
        """Default configuration has sensible values."""
        config = AutomaticReleasesConfig()

        assert config.release.automatic_release_tag == ""
        assert config.release.draft is False
        assert config.release.prerelease is False
        assert config.release.files == []
        assert config.release.merge_similar is False
        assert config.github.api_url == "https://api.github.com"
        assert config.github.token is None
        assert config.changelog.metadata_path is None

    def test_files_from_multiline_string(self):
        """Newline separated globs become a list."""
        config = ReleaseConfig(files="dist/*.whl\n\n  LICENSE  \n")

        assert config.files == ["dist/*.whl", "LICENSE"]

    def test_unknown_keys_rejected(self):
        with pytest.raises(ValueError, match="extra"):
            ReleaseConfig.model_validate({"tag": "latest"})

    def test_token_is_secret(self):
        config = AutomaticReleasesConfig.model_validate({"github": {"token": "s3cret"}})

        assert config.github.token is not None
        assert config.github.token.get_secret_value() == "s3cret"
        assert "s3cret" not in repr(config)


class TestPyprojectLookup:
    """Tests for pyproject.toml discovery and parsing."""

    def test_find_pyproject_toml(self, tmp_path: Path):
        (tmp_path / "pyproject.toml").write_text("[project]\nname = 'x'\n")
        nested = tmp_path / "src" / "pkg"
        nested.mkdir(parents=True)

        assert find_pyproject_toml(nested) == (tmp_path / "pyproject.toml").resolve()

    def test_load_missing(self, tmp_path: Path):
        with pytest.raises(ConfigNotFoundError):
            load_pyproject_toml(tmp_path / "pyproject.toml")

    def test_load_invalid_toml(self, tmp_path: Path):
        path = tmp_path / "pyproject.toml"
        path.write_text("[tool\n")

        with pytest.raises(ConfigValidationError, match="Invalid TOML"):
            load_pyproject_toml(path)

    def test_extract_tool_config(self):
        pyproject = {"tool": {"automatic-releases": {"release": {"draft": True}}}}

        assert extract_tool_config(pyproject) == {"release": {"draft": True}}
        assert extract_tool_config({}) == {}


class TestActionInputs:
    """Tests for GitHub Actions input parsing."""

    @pytest.mark.parametrize("value", ["true", "True", "TRUE"])
    def test_true_values(self, value):
        assert parse_boolean_input("draft", value) is True

    @pytest.mark.parametrize("value", ["false", "False", "FALSE"])
    def test_false_values(self, value):
        assert parse_boolean_input("draft", value) is False

    @pytest.mark.parametrize("value", ["yes", "1", "tRuE"])
    def test_invalid_boolean(self, value):
        with pytest.raises(ConfigValidationError, match="YAML 1.2"):
            parse_boolean_input("draft", value)

    def test_read_action_inputs(self):
        environ = {
            "INPUT_AUTOMATIC_RELEASE_TAG": "latest",
            "INPUT_TITLE": "  Development Build  ",
            "INPUT_DRAFT": "true",
            "INPUT_PRERELEASE": "false",
            "INPUT_FILES": "dist/*\nLICENSE",
            "INPUT_BODY_PREFIX": "",
        }

        assert read_action_inputs(environ) == {
            "automatic_release_tag": "latest",
            "title": "Development Build",
            "files": "dist/*\nLICENSE",
            "draft": True,
            "prerelease": False,
        }

    def test_read_token_precedence(self):
        assert read_token({"GITHUB_TOKEN": "b", "INPUT_REPO_TOKEN": "a"}) == "a"
        assert read_token({"GITHUB_TOKEN": "b"}) == "b"
        assert read_token({"GITHUB_TOKEN": " "}) is None


class TestLoadConfig:
    """Tests for load_config()."""

    def test_defaults_without_pyproject(self, tmp_path: Path):
        config = load_config(tmp_path, environ={})

        assert config == AutomaticReleasesConfig()

    def test_pyproject_values(self, tmp_path: Path):
        (tmp_path / "pyproject.toml").write_text(
            "[tool.automatic-releases.release]\n"
            "automatic_release_tag = 'latest'\n"
            "prerelease = true\n"
            "files = ['dist/*.whl']\n"
            "\n"
            "[tool.automatic-releases.changelog]\n"
            "metadata_path = 'build/changelog.json'\n"
        )

        config = load_config(tmp_path, environ={})

        assert config.release.automatic_release_tag == "latest"
        assert config.release.prerelease is True
        assert config.release.files == ["dist/*.whl"]
        assert config.changelog.metadata_path == Path("build/changelog.json")

    def test_inputs_override_pyproject(self, tmp_path: Path):
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text(
            "[tool.automatic-releases.release]\nautomatic_release_tag = 'latest'\ndraft = true\n"
        )
        environ = {
            "INPUT_AUTOMATIC_RELEASE_TAG": "nightly",
            "INPUT_DRAFT": "false",
            "GITHUB_TOKEN": "tok",
            "GITHUB_API_URL": "https://github.example.com/api/v3",
        }

        config = load_config(pyproject, environ=environ)

        assert config.release.automatic_release_tag == "nightly"
        assert config.release.draft is False
        assert config.github.token is not None
        assert config.github.token.get_secret_value() == "tok"
        assert config.github.api_url == "https://github.example.com/api/v3"

    def test_invalid_values(self, tmp_path: Path):
        (tmp_path / "pyproject.toml").write_text(
            "[tool.automatic-releases.release]\nunknown_option = 1\n"
        )

        with pytest.raises(ConfigValidationError, match="Invalid configuration"):
            load_config(tmp_path, environ={})

    def test_invalid_boolean_input(self, tmp_path: Path):
        with pytest.raises(ConfigValidationError):
            load_config(tmp_path, environ={"INPUT_DRY_RUN": "maybe"})


class TestGitHubContext:
    """Tests for load_github_context()."""

    def test_context(self):
        context = load_github_context(
            {
                "GITHUB_REPOSITORY": "kitten-science/kitten-scientists",
                "GITHUB_SHA": "abc123",
                "GITHUB_REF": "refs/tags/v1.0.0",
            }
        )

        assert context.owner == "kitten-science"
        assert context.repo == "kitten-scientists"
        assert context.sha == "abc123"
        assert context.ref == "refs/tags/v1.0.0"

    @pytest.mark.parametrize(
        "environ",
        [
            {"GITHUB_SHA": "abc123"},
            {"GITHUB_REPOSITORY": "no-slash", "GITHUB_SHA": "abc123"},
            {"GITHUB_REPOSITORY": "o/r"},
        ],
    )
    def test_missing_values(self, environ):
        with pytest.raises(ConfigValidationError):
            load_github_context(environ)
