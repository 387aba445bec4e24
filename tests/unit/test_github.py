"""Tests for the GitHub REST client."""

from __future__ import annotations

import json

import httpx
import pytest

from vtl.core.commits import Commit
from vtl.core.planner import TagInfo
from vtl.docker import ReleaseInfo
from vtl.exceptions import GitHubError
from vtl.vcs.github import PAGE_SIZE, GitHubClient


class RecordingHandler:
    """httpx mock handler answering from a route table and recording requests."""

    def __init__(self, routes: dict[tuple[str, str], httpx.Response]) -> None:
        self.routes = routes
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.routes.get(
            (request.method, request.url.path), httpx.Response(404, json={"message": "Not Found"})
        )


def make_client(handler: RecordingHandler) -> GitHubClient:
    return GitHubClient(
        "secret-token",
        "mapped",
        "action-vtl",
        api_url="https://github.example.com/api/v3/",
        transport=httpx.MockTransport(handler),
    )


class TestGetTags:
    """Tests for GitHubClient.get_tags()."""

    def test_get_tags(self):
        """Tags are mapped to name and commit sha."""
        handler = RecordingHandler(
            {
                ("GET", "/api/v3/repos/mapped/action-vtl/tags"): httpx.Response(
                    200,
                    json=[
                        {"name": "v1.1.0", "commit": {"sha": "bbb", "url": "..."}},
                        {"name": "v1.0.0", "commit": {"sha": "aaa", "url": "..."}},
                    ],
                )
            }
        )

        with make_client(handler) as client:
            tags = client.get_tags()

        assert tags == [TagInfo("v1.1.0", "bbb"), TagInfo("v1.0.0", "aaa")]
        request = handler.requests[0]
        assert request.url.params["per_page"] == str(PAGE_SIZE)
        assert request.headers["Authorization"] == "Bearer secret-token"
        assert request.headers["Accept"] == "application/vnd.github+json"


class TestGetCommits:
    """Tests for GitHubClient.get_commits()."""

    def test_get_commits(self):
        """History starts at the requested sha."""
        handler = RecordingHandler(
            {
                ("GET", "/api/v3/repos/mapped/action-vtl/commits"): httpx.Response(
                    200,
                    json=[
                        {"sha": "ccc", "commit": {"message": "feat: add title"}},
                        {"sha": "bbb", "commit": {"message": "fix: typo\n\nbody"}},
                    ],
                )
            }
        )

        with make_client(handler) as client:
            commits = client.get_commits("ccc")

        assert commits == [Commit("ccc", "feat: add title"), Commit("bbb", "fix: typo\n\nbody")]
        assert handler.requests[0].url.params["sha"] == "ccc"


class TestGetReleases:
    """Tests for GitHubClient.get_releases()."""

    def test_get_releases(self):
        """Releases keep their tag name and pre-release flag."""
        handler = RecordingHandler(
            {
                ("GET", "/api/v3/repos/mapped/action-vtl/releases"): httpx.Response(
                    200,
                    json=[
                        {"tag_name": "v2.0.0-rc.1", "prerelease": True, "draft": False},
                        {"tag_name": "v1.1.0", "prerelease": False, "draft": False},
                    ],
                )
            }
        )

        with make_client(handler) as client:
            releases = client.get_releases()

        assert releases == [ReleaseInfo("v2.0.0-rc.1", prerelease=True), ReleaseInfo("v1.1.0")]
        assert handler.requests[0].url.params["per_page"] == str(PAGE_SIZE)


class TestCreateTag:
    """Tests for GitHubClient.create_tag()."""

    def test_create_tag(self):
        """An annotated tag object is created, then the ref pointing to it."""
        handler = RecordingHandler(
            {
                ("POST", "/api/v3/repos/mapped/action-vtl/git/tags"): httpx.Response(
                    201, json={"sha": "tagobject", "tag": "v1.2.0"}
                ),
                ("POST", "/api/v3/repos/mapped/action-vtl/git/refs"): httpx.Response(
                    201, json={"ref": "refs/tags/v1.2.0"}
                ),
            }
        )

        with make_client(handler) as client:
            client.create_tag("v1.2.0", "feat: add title", "ccc")

        tag_request, ref_request = handler.requests
        assert json.loads(tag_request.content) == {
            "tag": "v1.2.0",
            "message": "feat: add title",
            "object": "ccc",
            "type": "commit",
        }
        assert json.loads(ref_request.content) == {"ref": "refs/tags/v1.2.0", "sha": "tagobject"}


class TestErrors:
    """Tests for error mapping."""

    def test_http_error_status(self):
        """Error responses raise GitHubError with the status code."""
        handler = RecordingHandler(
            {
                ("GET", "/api/v3/repos/mapped/action-vtl/tags"): httpx.Response(
                    403, json={"message": "Resource not accessible by integration"}
                )
            }
        )

        with make_client(handler) as client, pytest.raises(GitHubError) as exc_info:
            client.get_tags()

        assert exc_info.value.status_code == 403
        assert "Resource not accessible" in str(exc_info.value)

    def test_transport_error(self):
        """Network failures raise GitHubError without a status code."""

        def fail(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client = GitHubClient("t", "mapped", "action-vtl", transport=httpx.MockTransport(fail))

        with pytest.raises(GitHubError, match="connection refused") as exc_info:
            client.get_commits("ccc")
        client.close()

        assert exc_info.value.status_code is None
