"""Tests for project version lookup."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest

from automatic_releases.exceptions import ProjectError, VersionNotFoundError
from automatic_releases.project.manifest import (
    get_package_json_version,
    get_project_version,
    get_pyproject_version,
)

if TYPE_CHECKING:
    from pathlib import Path


class TestPyprojectVersion:
    """Tests for get_pyproject_version()."""

    def test_pep621(self, tmp_path: Path):
        path = tmp_path / "pyproject.toml"
        path.write_text(
            '[project]\nname = "demo"\nversion = "1.2.3"\n\n[tool.other]\nversion = "9.9.9"\n'
        )

        assert get_pyproject_version(path) == "1.2.3"

    def test_poetry(self, tmp_path: Path):
        path = tmp_path / "pyproject.toml"
        path.write_text('[project]\nname = "demo"\n\n[tool.poetry]\nversion = "0.4.0-rc.1"\n')

        assert get_pyproject_version(path) == "0.4.0-rc.1"

    def test_version_in_other_section_is_ignored(self, tmp_path: Path):
        path = tmp_path / "pyproject.toml"
        path.write_text('[project]\nname = "demo"\n\n[tool.bumpversion]\nversion = "1.0.0"\n')

        with pytest.raises(VersionNotFoundError):
            get_pyproject_version(path)


class TestPackageJsonVersion:
    """Tests for get_package_json_version()."""

    def test_version(self, tmp_path: Path):
        path = tmp_path / "package.json"
        path.write_text(json.dumps({"name": "kitten-scientists", "version": "2.0.0-beta.3"}))

        assert get_package_json_version(path) == "2.0.0-beta.3"

    def test_missing_version(self, tmp_path: Path):
        path = tmp_path / "package.json"
        path.write_text(json.dumps({"name": "kitten-scientists"}))

        with pytest.raises(VersionNotFoundError):
            get_package_json_version(path)

    def test_invalid_json(self, tmp_path: Path):
        path = tmp_path / "package.json"
        path.write_text("{")

        with pytest.raises(ProjectError, match="Invalid JSON"):
            get_package_json_version(path)


class TestProjectVersion:
    """Tests for get_project_version()."""

    def test_directory_prefers_pyproject(self, tmp_path: Path):
        (tmp_path / "pyproject.toml").write_text('[project]\nversion = "1.0.0"\n')
        (tmp_path / "package.json").write_text(json.dumps({"version": "2.0.0"}))

        assert get_project_version(tmp_path) == "1.0.0"

    def test_directory_with_package_json(self, tmp_path: Path):
        (tmp_path / "package.json").write_text(json.dumps({"version": "2.0.0"}))

        assert get_project_version(tmp_path) == "2.0.0"

    def test_explicit_file(self, tmp_path: Path):
        path = tmp_path / "package.json"
        path.write_text(json.dumps({"version": "3.1.4"}))
        (tmp_path / "pyproject.toml").write_text('[project]\nversion = "1.0.0"\n')

        assert get_project_version(path) == "3.1.4"

    def test_no_manifest(self, tmp_path: Path):
        with pytest.raises(ProjectError, match="No pyproject.toml or package.json"):
            get_project_version(tmp_path)
