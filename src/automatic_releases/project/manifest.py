"""Project version lookup.

Reads the current version of the project being released, so version
suggestions can be derived without passing the version explicitly.
Supported manifests, in lookup order:

- ``pyproject.toml``: ``[project].version`` or ``[tool.poetry].version``
- ``package.json``: top-level ``version``
"""

from __future__ import annotations

import json
import re
from pathlib import Path

from automatic_releases.exceptions import ProjectError, VersionNotFoundError

MANIFEST_NAMES = ("pyproject.toml", "package.json")


def _find_section_version(content: str, section_header: str) -> str | None:
    """Find `version = "..."` within one TOML table."""
    # Match the entire section up to the next section or EOF
    section = re.search(
        rf"^{section_header}\s*$.*?(?=^\[|\Z)",
        content,
        re.MULTILINE | re.DOTALL,
    )
    if not section:
        return None
    match = re.search(r'^version\s*=\s*["\']([^"\']+)["\']', section.group(0), re.MULTILINE)
    return match.group(1) if match else None


def get_pyproject_version(pyproject_path: Path) -> str:
    """Get the version from pyproject.toml.

    Raises:
        VersionNotFoundError: If version cannot be found
    """
    content = pyproject_path.read_text(encoding="utf-8")

    # Try PEP 621 format first, then Poetry
    for section in (r"\[project\]", r"\[tool\.poetry\]"):
        version = _find_section_version(content, section)
        if version:
            return version

    raise VersionNotFoundError(
        f"Could not find version in {pyproject_path}. "
        "Expected [project].version or [tool.poetry].version."
    )


def get_package_json_version(package_json_path: Path) -> str:
    """Get the version from package.json.

    Raises:
        ProjectError: If the file is not valid JSON
        VersionNotFoundError: If version cannot be found
    """
    try:
        data = json.loads(package_json_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ProjectError(f"Invalid JSON in {package_json_path}: {e}") from e

    version = data.get("version") if isinstance(data, dict) else None
    if not isinstance(version, str) or not version:
        raise VersionNotFoundError(f"Could not find version in {package_json_path}")
    return version


def get_project_version(path: Path | None = None) -> str:
    """Get the current project version.

    Args:
        path: A manifest file or a project directory (default: cwd)

    Raises:
        ProjectError: If no supported manifest exists
        VersionNotFoundError: If the manifest has no version
    """
    target = path or Path.cwd()
    if target.is_file():
        candidates = [target]
    else:
        candidates = [target / name for name in MANIFEST_NAMES if (target / name).is_file()]
    if not candidates:
        raise ProjectError(f"No pyproject.toml or package.json found in {target}")

    manifest = candidates[0]
    if manifest.name == "package.json":
        return get_package_json_version(manifest)
    return get_pyproject_version(manifest)
