"""GitHub REST API client for release planning.

Implements :class:`vtl.core.planner.ReleaseTagClient` on top of httpx.
Only single pages are fetched: 100 tags is enough to find the latest
release among custom tags, and 100 commits bounds the search for the
previous release commit.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Self

import httpx

from vtl.core.commits import Commit
from vtl.core.planner import TagInfo
from vtl.docker import ReleaseInfo
from vtl.exceptions import GitHubError

if TYPE_CHECKING:
    from types import TracebackType

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"
PAGE_SIZE = 100
DEFAULT_TIMEOUT = 30.0


class GitHubClient:
    """Client for the tag and commit endpoints of a single repository.

    Use as a context manager, or call :meth:`close` when done::

        with GitHubClient(token, "owner", "repo") as client:
            tags = client.get_tags()
    """

    def __init__(
        self,
        token: str,
        owner: str,
        repo: str,
        *,
        api_url: str = DEFAULT_API_URL,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.owner = owner
        self.repo = repo
        self._client = httpx.Client(
            base_url=api_url.rstrip("/"),
            headers={
                "Authorization": f"Bearer {token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
            },
            timeout=DEFAULT_TIMEOUT,
            transport=transport,
        )

    @property
    def _repo_path(self) -> str:
        return f"/repos/{self.owner}/{self.repo}"

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            response = self._client.request(method, f"{self._repo_path}{path}", **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise GitHubError(
                f"GitHub API {method} {path} failed with status {e.response.status_code}: "
                f"{e.response.text}",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise GitHubError(f"GitHub API {method} {path} failed: {e}") from e

        return response.json()

    def get_tags(self) -> list[TagInfo]:
        """Get the most recent tags of the repository."""
        data = self._request("GET", "/tags", params={"per_page": PAGE_SIZE})
        tags = [TagInfo(name=item["name"], commit_sha=item["commit"]["sha"]) for item in data]
        logger.debug("Fetched %d tags", len(tags))
        return tags

    def get_commits(self, start_sha: str) -> list[Commit]:
        """Get the history starting at ``start_sha``, newest first."""
        data = self._request("GET", "/commits", params={"sha": start_sha, "per_page": PAGE_SIZE})
        commits = [Commit(sha=item["sha"], message=item["commit"]["message"]) for item in data]
        logger.debug("Fetched %d commits starting at %s", len(commits), start_sha[:8])
        return commits

    def get_releases(self) -> list[ReleaseInfo]:
        """Get the most recent releases of the repository."""
        data = self._request("GET", "/releases", params={"per_page": PAGE_SIZE})
        releases = [
            ReleaseInfo(tag_name=item["tag_name"], prerelease=bool(item.get("prerelease")))
            for item in data
        ]
        logger.debug("Fetched %d releases", len(releases))
        return releases

    def create_tag(self, name: str, notes: str, commit_sha: str) -> None:
        """Create an annotated tag object and the ref pointing to it."""
        tag = self._request(
            "POST",
            "/git/tags",
            json={"tag": name, "message": notes, "object": commit_sha, "type": "commit"},
        )
        self._request(
            "POST",
            "/git/refs",
            json={"ref": f"refs/tags/{name}", "sha": tag.get("sha", commit_sha)},
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
