"""Configuration loading.

Configuration is merged from three sources, later ones winning:

1. Model defaults
2. ``[tool.automatic-releases]`` in the nearest ``pyproject.toml``
3. GitHub Actions inputs (``INPUT_<NAME>`` environment variables)
"""

from __future__ import annotations

import os
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from automatic_releases.config.models import AutomaticReleasesConfig, GitHubContext
from automatic_releases.exceptions import ConfigNotFoundError, ConfigValidationError

TOOL_NAME = "automatic-releases"

# Action input name -> ReleaseConfig field
STRING_INPUTS = {
    "automatic_release_tag": "automatic_release_tag",
    "body_prefix": "body_prefix",
    "body_suffix": "body_suffix",
    "title": "title",
    "files": "files",
}
BOOLEAN_INPUTS = {
    "draft": "draft",
    "prerelease": "prerelease",
    "dry_run": "dry_run",
    "merge_similar": "merge_similar",
    "with_authors": "with_authors",
}

# YAML 1.2 core schema booleans, as accepted by GitHub Actions
_TRUE_VALUES = frozenset({"true", "True", "TRUE"})
_FALSE_VALUES = frozenset({"false", "False", "FALSE"})

TOKEN_VARIABLES = ("INPUT_REPO-TOKEN", "INPUT_REPO_TOKEN", "GITHUB_TOKEN")


def find_pyproject_toml(start: Path | None = None) -> Path:
    """Find the nearest pyproject.toml, searching upwards.

    Raises:
        ConfigNotFoundError: If no pyproject.toml exists up to the root
    """
    current = (start or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        candidate = directory / "pyproject.toml"
        if candidate.is_file():
            return candidate
    raise ConfigNotFoundError(f"No pyproject.toml found in {current} or any parent directory")


def load_pyproject_toml(path: Path) -> dict[str, Any]:
    """Read and parse a pyproject.toml file.

    Raises:
        ConfigNotFoundError: If the file does not exist
        ConfigValidationError: If the file is not valid TOML
    """
    if not path.is_file():
        raise ConfigNotFoundError(f"Configuration file not found: {path}")
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigValidationError(f"Invalid TOML in {path}: {e}") from e


def extract_tool_config(pyproject: Mapping[str, Any]) -> dict[str, Any]:
    """Return the ``[tool.automatic-releases]`` table, or an empty dict."""
    return dict(pyproject.get("tool", {}).get(TOOL_NAME, {}))


def parse_boolean_input(name: str, value: str) -> bool:
    """Parse a boolean action input.

    Raises:
        ConfigValidationError: If the value is not a YAML 1.2 boolean
    """
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigValidationError(
        f'Input "{name}" does not meet YAML 1.2 "Core Schema" specification: {value!r}. '
        "Support boolean input list: `true | True | TRUE | false | False | FALSE`"
    )


def _get_input(environ: Mapping[str, str], name: str) -> str:
    return environ.get(f"INPUT_{name.replace(' ', '_').upper()}", "").strip()


def read_action_inputs(environ: Mapping[str, str]) -> dict[str, Any]:
    """Collect the release settings given as GitHub Actions inputs.

    Inputs that are unset or empty are left out so lower precedence
    sources keep their values.
    """
    values: dict[str, Any] = {}
    for name, field in STRING_INPUTS.items():
        raw = _get_input(environ, name)
        if raw:
            values[field] = raw
    for name, field in BOOLEAN_INPUTS.items():
        raw = _get_input(environ, name)
        if raw:
            values[field] = parse_boolean_input(name, raw)
    return values


def read_token(environ: Mapping[str, str]) -> str | None:
    """Return the first GitHub token found in the environment."""
    for variable in TOKEN_VARIABLES:
        value = environ.get(variable, "").strip()
        if value:
            return value
    return None


def load_config(
    path: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> AutomaticReleasesConfig:
    """Load configuration from pyproject.toml and the environment.

    A missing pyproject.toml is not an error; CI runs usually configure
    everything through action inputs.

    Args:
        path: Project directory or pyproject.toml path (default: cwd)
        environ: Environment to read inputs from (default: os.environ)

    Raises:
        ConfigValidationError: If any value is invalid
    """
    env = os.environ if environ is None else environ

    try:
        pyproject_path = path if path is not None and path.is_file() else find_pyproject_toml(path)
        data = extract_tool_config(load_pyproject_toml(pyproject_path))
    except ConfigNotFoundError:
        data = {}

    release = {**data.get("release", {}), **read_action_inputs(env)}
    github = dict(data.get("github", {}))
    token = read_token(env)
    if token:
        github["token"] = token
    if env.get("GITHUB_API_URL"):
        github["api_url"] = env["GITHUB_API_URL"]

    try:
        return AutomaticReleasesConfig.model_validate(
            {**data, "release": release, "github": github}
        )
    except ValidationError as e:
        raise ConfigValidationError(f"Invalid configuration: {e}") from e


def load_github_context(environ: Mapping[str, str] | None = None) -> GitHubContext:
    """Read the repository, commit and ref of the current workflow run.

    Raises:
        ConfigValidationError: If ``GITHUB_REPOSITORY`` or ``GITHUB_SHA`` is missing
    """
    env = os.environ if environ is None else environ
    repository = env.get("GITHUB_REPOSITORY", "")
    sha = env.get("GITHUB_SHA", "")
    owner, _, repo = repository.partition("/")
    if not owner or not repo:
        raise ConfigValidationError(
            f'GITHUB_REPOSITORY must be set to "owner/repo", got {repository!r}'
        )
    if not sha:
        raise ConfigValidationError("GITHUB_SHA is not set")
    return GitHubContext(owner=owner, repo=repo, sha=sha, ref=env.get("GITHUB_REF", ""))
