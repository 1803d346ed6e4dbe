"""Conventional commit parsing.

This module turns raw commit messages into structured records:

- :func:`parse_commit_message` applies the conventional-commit grammar
  (merge, breaking header, header, body/footer, notes, references,
  revert) and never raises on malformed input
- :func:`is_breaking_change` is the authoritative breaking-change
  signal used for bucketing
- :func:`enrich_commit` attaches pull requests and the breaking-change
  flag, producing the fully non-null :class:`ParsedCommit`
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

from pydantic import BaseModel, ConfigDict

logger = logging.getLogger(__name__)

BREAKING_CHANGE_NOTE = "BREAKING CHANGE"

BREAKING_CHANGE_PATTERN = re.compile(r"^BREAKING\s+CHANGES?:\s+", re.MULTILINE)

# Issue references: "#12", "owner/repo#12", "Closes #12"
REFERENCE_PATTERN = re.compile(
    r"(?:(?P<action>close[sd]?|fix(?:e[sd])?|resolve[sd]?)\s+)?"
    r"(?:(?P<owner>[\w.-]+)/(?P<repo>[\w.-]+))?"
    r"(?P<prefix>#)(?P<issue>\d+)\b",
    re.IGNORECASE,
)

MENTION_PATTERN = re.compile(r"(?<![\w@])@([\w-]+)")


@dataclass(frozen=True)
class ParserOptions:
    """Grammar configuration for :func:`parse_commit_message`."""

    header_pattern: re.Pattern[str] = re.compile(r"^(\w*)(?:\((.*)\))?: (.*)$")
    breaking_header_pattern: re.Pattern[str] = re.compile(r"^(\w*)(?:\((.*)\))?!: (.*)$")
    header_correspondence: tuple[str, ...] = ("type", "scope", "subject")
    note_keywords: tuple[str, ...] = (BREAKING_CHANGE_NOTE,)
    merge_pattern: re.Pattern[str] = re.compile(r"^Merge pull request #(.*) from (.*)$")
    merge_correspondence: tuple[str, ...] = ("issueId", "source")
    revert_pattern: re.Pattern[str] = re.compile(
        r'^(?:Revert|revert:)\s"?([\s\S]+?)"?\s*This reverts commit (\w{7,40})\b',
        re.IGNORECASE,
    )
    revert_correspondence: tuple[str, ...] = ("header", "hash")
    note_patterns: tuple[re.Pattern[str], ...] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        patterns = tuple(
            re.compile(rf"^{re.escape(keyword)}:\s*(.*)$") for keyword in self.note_keywords
        )
        object.__setattr__(self, "note_patterns", patterns)


_DEFAULT_OPTIONS = ParserOptions()


def get_changelog_options() -> ParserOptions:
    """Return the default commit grammar."""
    logger.debug("Changelog options: %r", _DEFAULT_OPTIONS)
    return _DEFAULT_OPTIONS


# =============================================================================
# Models
# =============================================================================


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class CommitNote(_Frozen):
    """A keyword-triggered annotation, e.g. ``BREAKING CHANGE: ...``."""

    title: str
    text: str


class CommitReference(_Frozen):
    """An issue or pull request reference found in a commit message."""

    action: str | None = None
    owner: str | None = None
    repo: str | None = None
    issue: str
    raw: str
    prefix: str = "#"


class CommitRevert(_Frozen):
    """The commit a revert commit undoes."""

    header: str
    hash: str


class RawCommit(_Frozen):
    """A commit as returned by the GitHub compare API."""

    sha: str
    message: str
    html_url: str = ""
    author_name: str | None = None
    committer_name: str | None = None
    committer_email: str | None = None

    @classmethod
    def from_api(cls, payload: dict) -> RawCommit:
        """Build a RawCommit from a compare-commits API item."""
        commit = payload.get("commit") or {}
        author = commit.get("author") or {}
        committer = commit.get("committer") or {}
        return cls(
            sha=payload["sha"],
            message=commit.get("message") or "",
            html_url=payload.get("html_url") or "",
            author_name=author.get("name"),
            committer_name=committer.get("name"),
            committer_email=committer.get("email"),
        )


class ParsedCommitHeader(_Frozen):
    """Result of applying the commit grammar to one message.

    ``type``, ``scope`` and ``subject`` are all ``None`` when the header
    does not follow the convention.
    """

    type: str | None = None
    scope: str | None = None
    subject: str | None = None
    header: str = ""
    body: str | None = None
    footer: str | None = None
    notes: tuple[CommitNote, ...] = ()
    references: tuple[CommitReference, ...] = ()
    mentions: tuple[str, ...] = ()
    merge: str | None = None
    revert: CommitRevert | None = None


class PullRequestRef(_Frozen):
    """A pull request associated with a commit."""

    number: int
    url: str


class CommitExtra(_Frozen):
    """Data attached to a commit during enrichment."""

    commit: RawCommit
    pull_requests: tuple[PullRequestRef, ...] = ()
    breaking_change: bool = False


class ParsedCommit(_Frozen):
    """A fully non-null, enriched commit ready for aggregation."""

    sha: str
    type: str = ""
    scope: str = ""
    subject: str = ""
    merge: str = ""
    header: str = ""
    body: str = ""
    footer: str = ""
    notes: tuple[CommitNote, ...] = ()
    references: tuple[CommitReference, ...] = ()
    mentions: tuple[str, ...] = ()
    revert: CommitRevert | None = None
    extra: CommitExtra


# =============================================================================
# Parsing
# =============================================================================


def _split_body_and_footer(lines: list[str]) -> tuple[str | None, str | None]:
    """Split the lines after the header into body and footer.

    The body is the first paragraph; everything after the next blank
    line is the footer.
    """
    while lines and not lines[0].strip():
        lines = lines[1:]
    if not lines:
        return None, None

    for index, line in enumerate(lines):
        if not line.strip():
            body = "\n".join(lines[:index]).strip()
            footer = "\n".join(lines[index + 1 :]).strip()
            return body or None, footer or None

    return "\n".join(lines).strip() or None, None


def _extract_references(text: str) -> tuple[CommitReference, ...]:
    references = []
    for match in REFERENCE_PATTERN.finditer(text):
        action = match.group("action")
        references.append(
            CommitReference(
                action=action.capitalize() if action else None,
                owner=match.group("owner"),
                repo=match.group("repo"),
                issue=match.group("issue"),
                raw=match.group(0),
                prefix=match.group("prefix"),
            )
        )
    return tuple(references)


def parse_commit_message(message: object, options: ParserOptions | None = None) -> ParsedCommitHeader:
    """Parse a raw commit message.

    Args:
        message: Full commit message (header, optional body and footer)
        options: Grammar to apply; defaults to :func:`get_changelog_options`

    Returns:
        The parsed header. Malformed input yields an all-null record
        with ``header == ""`` instead of raising.
    """
    if not isinstance(message, str) or not message.strip():
        return ParsedCommitHeader()

    opts = options or _DEFAULT_OPTIONS
    text = message.replace("\r\n", "\n").strip("\n")
    lines = text.split("\n")
    header = lines[0]

    merge_match = opts.merge_pattern.match(header)
    if merge_match:
        return ParsedCommitHeader(header=header, merge=header)

    fields: dict[str, str | None] = dict.fromkeys(opts.header_correspondence)
    notes: list[CommitNote] = []

    breaking_match = opts.breaking_header_pattern.match(header)
    header_match = breaking_match or opts.header_pattern.match(header)
    if header_match:
        for name, value in zip(opts.header_correspondence, header_match.groups(), strict=False):
            fields[name] = value
        if breaking_match:
            notes.append(CommitNote(title=BREAKING_CHANGE_NOTE, text=fields.get("subject") or ""))

    body, footer = _split_body_and_footer(lines[1:])

    for segment in (body, footer):
        if not segment:
            continue
        for line in segment.split("\n"):
            for keyword, pattern in zip(opts.note_keywords, opts.note_patterns, strict=True):
                note_match = pattern.match(line)
                if note_match:
                    notes.append(CommitNote(title=keyword, text=note_match.group(1).strip()))

    revert = None
    revert_match = opts.revert_pattern.match(text)
    if revert_match:
        reverted = dict(zip(opts.revert_correspondence, revert_match.groups(), strict=False))
        revert = CommitRevert(header=reverted["header"], hash=reverted["hash"])

    return ParsedCommitHeader(
        type=fields.get("type"),
        scope=fields.get("scope"),
        subject=fields.get("subject"),
        header=header,
        body=body,
        footer=footer,
        notes=tuple(notes),
        references=_extract_references(text),
        mentions=tuple(MENTION_PATTERN.findall(text)),
        revert=revert,
    )


def parse_commit(commit: RawCommit, options: ParserOptions | None = None) -> ParsedCommitHeader:
    """Parse the message of a commit returned by the GitHub API."""
    return parse_commit_message(commit.message, options)


def is_breaking_change(body: str | None, footer: str | None) -> bool:
    """Determine whether a commit body or footer announces a breaking change.

    A line must start with ``BREAKING CHANGE:`` (or ``BREAKING CHANGES:``)
    followed by whitespace and content.
    """
    return bool(
        BREAKING_CHANGE_PATTERN.search(body or "") or BREAKING_CHANGE_PATTERN.search(footer or "")
    )


# =============================================================================
# Enrichment
# =============================================================================


def enrich_commit(
    commit: RawCommit,
    parsed: ParsedCommitHeader,
    pull_requests: Iterable[PullRequestRef] = (),
) -> ParsedCommit | None:
    """Normalize a parsed header into a :class:`ParsedCommit`.

    Args:
        commit: The raw commit the header was parsed from
        parsed: Result of :func:`parse_commit`
        pull_requests: Pull requests associated with the commit

    Returns:
        The enriched commit, or ``None`` for merge commits
    """
    if parsed.merge:
        logger.debug("Ignoring merge commit: %s", parsed.merge)
        return None

    return ParsedCommit(
        sha=commit.sha,
        type=parsed.type or "",
        scope=parsed.scope or "",
        subject=parsed.subject or "",
        merge="",
        header=parsed.header or "",
        body=parsed.body or "",
        footer=parsed.footer or "",
        notes=parsed.notes,
        references=parsed.references,
        mentions=parsed.mentions,
        revert=parsed.revert,
        extra=CommitExtra(
            commit=commit,
            pull_requests=tuple(pull_requests),
            breaking_change=is_breaking_change(parsed.body, parsed.footer),
        ),
    )


def collect_parsed_commits(
    commits: Iterable[RawCommit],
    lookup_pull_requests: Callable[[str], Iterable[PullRequestRef]],
    options: ParserOptions | None = None,
) -> list[ParsedCommit]:
    """Parse and enrich every commit, dropping merge commits.

    Args:
        commits: Commits in range order
        lookup_pull_requests: Returns the pull requests for a commit SHA
        options: Grammar to apply

    Returns:
        Enriched commits in input order
    """
    parsed_commits: list[ParsedCommit] = []
    for commit in commits:
        parsed = parse_commit(commit, options)
        if parsed.merge:
            logger.debug("Ignoring merge commit: %s", parsed.merge)
            continue

        logger.debug("Searching for pull requests associated with commit %s", commit.sha)
        pulls = list(lookup_pull_requests(commit.sha))
        if pulls:
            logger.info("Found %d pull request(s) associated with commit %s", len(pulls), commit.sha)

        enriched = enrich_commit(commit, parsed, pulls)
        if enriched is not None:
            parsed_commits.append(enriched)
            logger.info('Adding commit "%s" to the changelog', parsed.header)
    return parsed_commits
