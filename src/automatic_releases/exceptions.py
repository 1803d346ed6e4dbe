"""Exception hierarchy for automatic-releases.

All errors raised on purpose by this package derive from
:class:`AutomaticReleasesError`, so callers (and the CLI) can catch
one base class and report a clear message.
"""

from __future__ import annotations


class AutomaticReleasesError(Exception):
    """Base class for all automatic-releases errors."""


# =============================================================================
# Configuration
# =============================================================================


class ConfigError(AutomaticReleasesError):
    """Configuration could not be loaded or is invalid."""


class ConfigNotFoundError(ConfigError):
    """No configuration file was found."""


class ConfigValidationError(ConfigError):
    """Configuration values failed validation."""


# =============================================================================
# Changelog
# =============================================================================


class ChangelogError(AutomaticReleasesError):
    """Changelog metadata could not be generated, stored or loaded."""


# =============================================================================
# Versions
# =============================================================================


class VersionError(AutomaticReleasesError):
    """Base class for version handling errors."""


class InvalidVersionError(VersionError):
    """A version string could not be parsed."""


# =============================================================================
# Release orchestration
# =============================================================================


class ReleaseError(AutomaticReleasesError):
    """A release precondition failed."""


class MissingReleaseTagError(ReleaseError):
    """Neither an automatic release tag nor a tag ref was provided."""


class InvalidReleaseTagError(ReleaseError):
    """The current release tag is not a semantic version."""


# =============================================================================
# GitHub API
# =============================================================================


class GitHubAPIError(AutomaticReleasesError):
    """A GitHub REST API call failed."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class NotFoundError(GitHubAPIError):
    """The requested GitHub resource does not exist."""


# =============================================================================
# Project metadata
# =============================================================================


class ProjectError(AutomaticReleasesError):
    """Project metadata could not be read."""


class VersionNotFoundError(ProjectError):
    """The project does not declare a version."""
