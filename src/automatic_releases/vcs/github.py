"""GitHub REST API client.

A thin synchronous wrapper around ``httpx`` covering the endpoints a
release run needs: tags and refs, commit comparison, pull request
lookup, releases and asset uploads.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any

import httpx

from automatic_releases.core.commits import PullRequestRef, RawCommit
from automatic_releases.exceptions import GitHubAPIError, NotFoundError

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"
PER_PAGE = 100


@dataclass(frozen=True)
class Release:
    """The parts of a created release used after creation."""

    id: int
    tag_name: str
    upload_url: str
    html_url: str = ""

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> Release:
        return cls(
            id=payload["id"],
            tag_name=payload.get("tag_name", ""),
            upload_url=payload.get("upload_url", ""),
            html_url=payload.get("html_url", ""),
        )


class GitHubClient:
    """GitHub API client bound to one repository.

    Args:
        owner: Repository owner
        repo: Repository name
        token: Token used for bearer authentication
        api_url: API root, override for GitHub Enterprise
        transport: Optional httpx transport (used by tests)
    """

    def __init__(
        self,
        owner: str,
        repo: str,
        token: str | None = None,
        api_url: str = DEFAULT_API_URL,
        *,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.owner = owner
        self.repo = repo
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = httpx.Client(
            base_url=api_url.rstrip("/"),
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    def __enter__(self) -> GitHubClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    @property
    def _repo_path(self) -> str:
        return f"/repos/{self.owner}/{self.repo}"

    def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            response = self._client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise GitHubAPIError(f"{method} {url} failed: {e}") from e

        if response.status_code == 404:
            raise NotFoundError(f"{method} {url}: not found", status_code=404)
        if response.is_error:
            try:
                message = response.json().get("message", response.text)
            except ValueError:
                message = response.text
            raise GitHubAPIError(
                f"{method} {url} failed with status {response.status_code}: {message}",
                status_code=response.status_code,
            )
        return response

    def _paginate(self, url: str, params: dict[str, Any] | None = None) -> Iterator[Any]:
        """Yield the JSON body of each page until a short page is returned."""
        page = 1
        while True:
            query = {**(params or {}), "per_page": PER_PAGE, "page": page}
            body = self._request("GET", url, params=query).json()
            yield body
            items = body.get("commits", []) if isinstance(body, dict) else body
            if len(items) < PER_PAGE:
                return
            page += 1

    # -------------------------------------------------------------------------
    # Tags and refs
    # -------------------------------------------------------------------------

    def list_tags(self) -> list[str]:
        """Return the names of all tags in the repository."""
        names: list[str] = []
        for page in self._paginate(f"{self._repo_path}/tags"):
            names.extend(tag["name"] for tag in page)
        return names

    def get_ref(self, ref: str) -> dict[str, Any]:
        """Fetch a git ref such as ``tags/v1.0.0``.

        Raises:
            NotFoundError: If the ref does not exist
        """
        return self._request("GET", f"{self._repo_path}/git/ref/{ref}").json()

    def create_ref(self, ref: str, sha: str) -> None:
        """Create a fully qualified ref (``refs/tags/latest``) pointing at ``sha``."""
        self._request("POST", f"{self._repo_path}/git/refs", json={"ref": ref, "sha": sha})

    def update_ref(self, ref: str, sha: str, *, force: bool = True) -> None:
        """Move an existing ref (``tags/latest``) to ``sha``."""
        self._request(
            "PATCH",
            f"{self._repo_path}/git/refs/{ref}",
            json={"sha": sha, "force": force},
        )

    # -------------------------------------------------------------------------
    # Commits and pull requests
    # -------------------------------------------------------------------------

    def compare_commits(self, base: str, head: str) -> list[RawCommit]:
        """Return the commits reachable from ``head`` but not from ``base``."""
        commits: list[RawCommit] = []
        for page in self._paginate(f"{self._repo_path}/compare/{base}...{head}"):
            commits.extend(RawCommit.from_api(item) for item in page.get("commits", []))
        return commits

    def list_pull_requests_for_commit(self, sha: str) -> list[PullRequestRef]:
        """Return the pull requests associated with a commit."""
        response = self._request("GET", f"{self._repo_path}/commits/{sha}/pulls")
        return [PullRequestRef(number=pr["number"], url=pr["html_url"]) for pr in response.json()]

    # -------------------------------------------------------------------------
    # Releases
    # -------------------------------------------------------------------------

    def get_release_by_tag(self, tag: str) -> Release:
        """Fetch the release for a tag.

        Raises:
            NotFoundError: If no release exists for the tag
        """
        response = self._request("GET", f"{self._repo_path}/releases/tags/{tag}")
        return Release.from_api(response.json())

    def delete_release(self, release_id: int) -> None:
        self._request("DELETE", f"{self._repo_path}/releases/{release_id}")

    def create_release(
        self,
        tag_name: str,
        name: str,
        body: str,
        *,
        draft: bool = False,
        prerelease: bool = False,
    ) -> Release:
        """Create a release for an existing tag."""
        response = self._request(
            "POST",
            f"{self._repo_path}/releases",
            json={
                "tag_name": tag_name,
                "name": name,
                "body": body,
                "draft": draft,
                "prerelease": prerelease,
            },
        )
        return Release.from_api(response.json())

    def upload_release_asset(self, release: Release, name: str, data: bytes) -> None:
        """Upload a file to a release.

        The upload URL comes from the release itself and is an RFC 6570
        template (``.../assets{?name,label}``).
        """
        url = release.upload_url.split("{", 1)[0]
        self._request(
            "POST",
            url,
            params={"name": name},
            content=data,
            headers={"Content-Type": "application/octet-stream"},
        )
