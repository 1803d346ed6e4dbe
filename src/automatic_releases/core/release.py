"""Release orchestration.

:class:`AutomaticReleases` drives one release run: resolve the release
tags, collect the commits since the previous release, build and render
the changelog, move the tag, replace the release and upload artifacts.
"""

from __future__ import annotations

import logging
import re
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from automatic_releases.core.artifacts import upload_release_artifacts
from automatic_releases.core.changelog import (
    Changelog,
    generate_changelog_metadata,
    render_changelog,
    save_changelog,
)
from automatic_releases.core.commits import RawCommit, collect_parsed_commits
from automatic_releases.core.version import Version
from automatic_releases.exceptions import (
    GitHubAPIError,
    InvalidReleaseTagError,
    MissingReleaseTagError,
    NotFoundError,
)

if TYPE_CHECKING:
    from automatic_releases.config.models import AutomaticReleasesConfig, GitHubContext
    from automatic_releases.vcs.github import GitHubClient, Release

logger = logging.getLogger(__name__)

MAX_RELEASE_BODY_LENGTH = 125_000

# Base used when the previous release tag does not exist
FIRST_RELEASE_BASE = "HEAD"

_TAG_REF_PATTERN = re.compile(r"^(refs/)?tags/(.*)$")


def parse_git_tag(ref: str) -> str:
    """Return the tag name of a git ref, or ``""`` if it is not a tag ref.

    >>> parse_git_tag("refs/tags/v1.0.0")
    'v1.0.0'
    """
    match = _TAG_REF_PATTERN.match(ref)
    if not match or not match.group(2):
        logger.debug('Input "%s" does not appear to be a tag', ref)
        return ""
    return match.group(2)


def _require_semver(tag: str) -> Version:
    if not Version.is_valid(tag):
        raise InvalidReleaseTagError(
            'The parameter "automatic_release_tag" was not set and the current tag '
            f'"{tag}" does not appear to conform to semantic versioning.'
        )
    return Version.parse(tag)


def search_previous_release_tag(tags: Iterable[str], current_tag: str) -> str:
    """Find the highest semantic version tag lower than ``current_tag``.

    Tags that are not semantic versions are ignored.

    Returns:
        The tag name, or ``""`` when there is no earlier release

    Raises:
        InvalidReleaseTagError: If ``current_tag`` is not a semantic version
    """
    current = _require_semver(current_tag)

    candidates = []
    for tag in tags:
        logger.debug("Currently processing tag %s", tag)
        if Version.is_valid(tag):
            candidates.append((Version.parse(tag), tag))

    for version, tag in sorted(candidates, key=lambda item: item[0], reverse=True):
        if version < current:
            return tag
    return ""


def compose_release_body(changelog_text: str, prefix: str = "", suffix: str = "") -> str:
    """Wrap the rendered changelog with the optional prefix and suffix."""
    body = changelog_text
    if prefix:
        body = f"{prefix}\n{body}"
    if suffix:
        body = f"{body}\n{suffix}"
    return body


def truncate_release_body(body: str, limit: int = MAX_RELEASE_BODY_LENGTH) -> str:
    """Truncate a release body that exceeds GitHub's size limit."""
    if len(body) <= limit:
        return body
    logger.warning(
        "Release body exceeds %d characters! Actual length: %d. Body will be truncated.",
        limit,
        len(body),
    )
    return body[: limit - 1]


@dataclass
class ReleaseResult:
    """Outcome of a release run."""

    tag_name: str
    release: Release
    changelog: Changelog
    body: str
    assets: list[str] = field(default_factory=list)


class AutomaticReleases:
    """One release run against a GitHub repository.

    Args:
        client: GitHub client bound to the repository
        context: Commit and ref of the run
        config: Loaded configuration
        clock: Time source for dry-run tag suffixes
    """

    def __init__(
        self,
        client: GitHubClient,
        context: GitHubContext,
        config: AutomaticReleasesConfig,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.client = client
        self.context = context
        self.config = config
        self._clock = clock

    def determine_release_tags(self) -> tuple[str, str]:
        """Resolve the tag to release and the tag of the previous release.

        Raises:
            MissingReleaseTagError: If no tag is configured and the run is not a tag event
            InvalidReleaseTagError: If the tag event's tag is not a semantic version
        """
        automatic_tag = self.config.release.automatic_release_tag
        release_tag = automatic_tag or parse_git_tag(self.context.ref)
        if not release_tag:
            raise MissingReleaseTagError(
                'The parameter "automatic_release_tag" was not set and this does not '
                f"appear to be a GitHub tag event. (Event: {self.context.ref})"
            )

        if automatic_tag:
            return release_tag, automatic_tag

        # Fail before listing tags
        _require_semver(release_tag)
        previous_tag = search_previous_release_tag(self.client.list_tags(), release_tag)
        return release_tag, previous_tag

    def get_commits_since_release(self, previous_tag: str) -> list[RawCommit]:
        """Return the commits between the previous release tag and the run's commit."""
        base = FIRST_RELEASE_BASE
        if previous_tag:
            logger.info('Searching for SHA corresponding to previous "%s" release tag', previous_tag)
            try:
                self.client.get_ref(f"tags/{previous_tag}")
                base = previous_tag
            except GitHubAPIError as e:
                logger.info(
                    'Could not find SHA corresponding to tag "%s" (%s). '
                    "Assuming this is the first release.",
                    previous_tag,
                    e,
                )

        logger.info("Retrieving commits between %s and %s", base, self.context.sha)
        try:
            commits = self.client.compare_commits(base, self.context.sha)
        except GitHubAPIError as e:
            logger.warning(
                "Could not find any commits between %s and %s (%s)", base, self.context.sha, e
            )
            return []
        logger.info(
            "Successfully retrieved %d commits between %s and %s",
            len(commits),
            base,
            self.context.sha,
        )
        return commits

    def build_changelog(self, commits: Iterable[RawCommit]) -> Changelog:
        """Parse, enrich and aggregate commits into changelog metadata."""
        parsed = collect_parsed_commits(commits, self.client.list_pull_requests_for_commit)
        changelog = generate_changelog_metadata(parsed)
        if self.config.changelog.metadata_path is not None:
            save_changelog(changelog, self.config.changelog.metadata_path)
        return changelog

    def create_release_tag(self, tag: str) -> None:
        """Point ``tag`` at the run's commit, moving it if it already exists."""
        logger.info('Attempting to create or update release tag "%s"', tag)
        try:
            self.client.create_ref(f"refs/tags/{tag}", self.context.sha)
        except GitHubAPIError as e:
            logger.info(
                'Could not create new tag "refs/tags/%s" (%s) therefore updating existing tag "tags/%s"',
                tag,
                e,
                tag,
            )
            self.client.update_ref(f"tags/{tag}", self.context.sha, force=True)
        logger.info('Successfully created or updated the release tag "%s"', tag)

    def delete_previous_release(self, tag: str) -> None:
        """Delete the release attached to ``tag``, if there is one."""
        logger.info('Searching for releases corresponding to the "%s" tag', tag)
        try:
            release = self.client.get_release_by_tag(tag)
        except NotFoundError as e:
            logger.info('Could not find release associated with tag "%s" (%s)', tag, e)
            return
        logger.info("Deleting release: %d", release.id)
        self.client.delete_release(release.id)

    def run(self) -> ReleaseResult:
        """Execute the release."""
        settings = self.config.release

        release_tag, previous_tag = self.determine_release_tags()
        commits = self.get_commits_since_release(previous_tag)
        changelog = self.build_changelog(commits)
        changelog_text = render_changelog(changelog, settings.with_authors, settings.merge_similar)
        logger.debug("Changelog:\n%s", changelog_text)

        if settings.automatic_release_tag and not settings.dry_run:
            self.create_release_tag(settings.automatic_release_tag)
            self.delete_previous_release(settings.automatic_release_tag)

        tag_name = release_tag
        if settings.dry_run:
            tag_name += f"-{int(self._clock() * 1000)}"

        body = truncate_release_body(
            compose_release_body(changelog_text, settings.body_prefix, settings.body_suffix)
        )

        logger.info('Generating new GitHub release for the "%s" tag', tag_name)
        release = self.client.create_release(
            tag_name=tag_name,
            name=settings.title or release_tag,
            body=body,
            draft=settings.draft,
            prerelease=settings.prerelease,
        )

        assets = upload_release_artifacts(self.client, release, settings.files)
        return ReleaseResult(
            tag_name=tag_name,
            release=release,
            changelog=changelog,
            body=body,
            assets=assets,
        )
