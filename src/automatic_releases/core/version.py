"""Version parsing, comparison and release version suggestions.

Only the subset of semantic versioning needed to order release tags is
implemented: ``[v]MAJOR.MINOR.PATCH[-PRERELEASE][+BUILD]`` with
prerelease precedence. Build metadata is ignored for ordering.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from functools import total_ordering

from automatic_releases.exceptions import InvalidVersionError

SEMVER_PATTERN = re.compile(
    r"^v?(?P<major>0|[1-9]\d*)\.(?P<minor>0|[1-9]\d*)\.(?P<patch>0|[1-9]\d*)"
    r"(?:-(?P<prerelease>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?"
    r"(?:\+(?P<build>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?$"
)

# Loose form used for suggestions: numeric core plus anything after it
_ROOT_PATTERN = re.compile(r"^v?(\d+)\.(\d+)\.(\d+)(.*)$", re.DOTALL)

SHORT_SHA_LENGTH = 7


class BumpType(str, Enum):
    """Version bump levels."""

    MAJOR = "major"
    MINOR = "minor"
    PATCH = "patch"

    def __str__(self) -> str:
        return self.value


@total_ordering
@dataclass(frozen=True)
class Version:
    """A semantic version.

    Attributes:
        major: Major version number
        minor: Minor version number
        patch: Patch version number
        prerelease: Dot-separated prerelease identifiers, without the ``-``
        build: Build metadata, without the ``+``
    """

    major: int
    minor: int
    patch: int
    prerelease: str | None = None
    build: str | None = None

    @classmethod
    def parse(cls, text: str) -> Version:
        """Parse a strict semantic version, allowing a leading ``v``.

        Raises:
            InvalidVersionError: If the text is not a semantic version
        """
        match = SEMVER_PATTERN.match(text.strip())
        if not match:
            raise InvalidVersionError(f"Invalid semantic version: {text!r}")
        return cls(
            major=int(match.group("major")),
            minor=int(match.group("minor")),
            patch=int(match.group("patch")),
            prerelease=match.group("prerelease"),
            build=match.group("build"),
        )

    @classmethod
    def is_valid(cls, text: str) -> bool:
        """Return whether ``text`` parses as a semantic version."""
        return SEMVER_PATTERN.match(text.strip()) is not None

    @property
    def root(self) -> str:
        """The ``MAJOR.MINOR.PATCH`` core."""
        return f"{self.major}.{self.minor}.{self.patch}"

    def bump(self, bump_type: BumpType) -> Version:
        """Return the next version for a bump level, dropping prerelease and build."""
        if bump_type is BumpType.MAJOR:
            return Version(self.major + 1, 0, 0)
        if bump_type is BumpType.MINOR:
            return Version(self.major, self.minor + 1, 0)
        return Version(self.major, self.minor, self.patch + 1)

    def _precedence_key(self) -> tuple:
        # A version without prerelease ranks above any prerelease of it
        if self.prerelease is None:
            prerelease_key: tuple = ((1,),)
        else:
            prerelease_key = tuple(
                (0, int(part), "") if part.isdigit() else (1, 0, part)
                for part in self.prerelease.split(".")
            )
            prerelease_key = ((0,), *prerelease_key)
        return (self.major, self.minor, self.patch, prerelease_key)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._precedence_key() < other._precedence_key()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._precedence_key() == other._precedence_key()

    def __hash__(self) -> int:
        return hash(self._precedence_key())

    def __str__(self) -> str:
        text = self.root
        if self.prerelease:
            text += f"-{self.prerelease}"
        if self.build:
            text += f"+{self.build}"
        return text


def parse_version(text: str) -> Version:
    """Parse a semantic version string."""
    return Version.parse(text)


def split_version(current_version: str) -> tuple[Version, str]:
    """Split a loose version string into its numeric root and extension.

    ``"v1.2.3-pre.19"`` becomes ``(Version(1, 2, 3), "-pre.19")``. The
    extension is everything from the first ``-`` after the numeric core.

    Raises:
        InvalidVersionError: If there is no ``MAJOR.MINOR.PATCH`` core
    """
    match = _ROOT_PATTERN.match(current_version.strip())
    if not match:
        raise InvalidVersionError(
            f"Cannot derive versions from {current_version!r}: expected MAJOR.MINOR.PATCH"
        )
    rest = match.group(4)
    dash = rest.find("-")
    extension = rest[dash:] if dash != -1 else ""
    root = Version(int(match.group(1)), int(match.group(2)), int(match.group(3)))
    return root, extension


def suggest_versions(
    current_version: str,
    now: datetime,
    sha: str | None = None,
) -> dict[str, str]:
    """Suggest release versions derived from the current version.

    Produces the cross product of {root, major, minor, patch} with the
    channels {plain, dev, nightly}, with or without the original
    extension, and with or without ``+<short sha>`` build metadata.
    Bumps apply to the numeric root only; extended variants splice the
    original extension back in after the bumped root.

    Args:
        current_version: Version to derive from, e.g. ``"1.2.3-pre.19"``
        now: Timestamp for the dev and nightly channels (naive means UTC)
        sha: Commit SHA for the hash variants; ``"unknown"`` when missing

    Returns:
        Mapping of suggestion name to version string, e.g.
        ``{"major": "2.0.0", "dev_extended_hash": "1.2.3-pre.19-dev.20250519104203+abc1234"}``
    """
    root, extension = split_version(current_version)

    if now.tzinfo is None:
        now = now.replace(tzinfo=UTC)
    now = now.astimezone(UTC)
    channels = {
        "": "",
        "dev": f"-dev.{now.strftime('%Y%m%d%H%M%S')}",
        "nightly": f"-nightly.{now.strftime('%Y%m%d')}",
    }
    build = f"+{sha[:SHORT_SHA_LENGTH]}" if sha else "+unknown"

    suggestions = {
        "current": current_version,
        "root": root.root,
        "extension": extension,
    }

    bases = {"root": root, **{str(level): root.bump(level) for level in BumpType}}
    for base_name, base in bases.items():
        for channel, channel_suffix in channels.items():
            for extended in (False, True):
                for hashed in (False, True):
                    if base_name == "root":
                        parts = [channel or "root"]
                    else:
                        parts = [base_name]
                    if extended:
                        parts.append("extended")
                    if channel and base_name != "root":
                        parts.append(channel)
                    if hashed:
                        parts.append("hash")
                    name = "_".join(parts)

                    value = base.root
                    if extended:
                        value += extension
                    value += channel_suffix
                    if hashed:
                        value += build
                    suggestions.setdefault(name, value)

    return suggestions
