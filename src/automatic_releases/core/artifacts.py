"""Release artifact upload."""

from __future__ import annotations

import glob
import hashlib
import logging
from collections.abc import Iterable
from pathlib import Path
from typing import TYPE_CHECKING

from automatic_releases.exceptions import GitHubAPIError

if TYPE_CHECKING:
    from automatic_releases.vcs.github import GitHubClient, Release

logger = logging.getLogger(__name__)


def sha256_of_file(path: Path) -> str:
    """Return the hex SHA-256 digest of a file."""
    digest = hashlib.sha256()
    with path.open("rb") as f:
        for chunk in iter(lambda: f.read(1 << 16), b""):
            digest.update(chunk)
    return digest.hexdigest()


def expand_globs(patterns: Iterable[str], root: Path) -> list[Path]:
    """Expand file globs relative to ``root``, keeping pattern order.

    Absolute patterns are expanded as given. ``**`` matches any number of
    directories. Patterns that match nothing are logged as errors and
    skipped.
    """
    paths: list[Path] = []
    for pattern in patterns:
        # Absolute results ignore root_dir, and joining keeps them absolute
        found = (root / match for match in glob.glob(pattern, root_dir=root, recursive=True))
        matches = sorted(p for p in found if p.is_file())
        if not matches:
            logger.error("%s doesn't match any files", pattern)
        paths.extend(matches)
    return paths


def upload_release_artifacts(
    client: GitHubClient,
    release: Release,
    patterns: Iterable[str],
    root: Path | None = None,
) -> list[str]:
    """Upload every file matched by ``patterns`` to ``release``.

    When an upload is rejected (usually a name clash), it is retried
    once with the file's SHA-256 appended to the file stem.

    Returns:
        The asset names used for the uploads
    """
    names: list[str] = []
    for path in expand_globs(patterns, root or Path.cwd()):
        logger.info("Uploading: %s", path)
        data = path.read_bytes()
        try:
            client.upload_release_asset(release, path.name, data)
            names.append(path.name)
        except GitHubAPIError as e:
            logger.info(
                "Problem uploading %s as a release asset (%s). "
                "Will retry with the SHA256 hash appended to the filename.",
                path,
                e,
            )
            new_name = f"{path.stem}-{sha256_of_file(path)}{path.suffix}"
            client.upload_release_asset(release, new_name, data)
            names.append(new_name)
    return names
