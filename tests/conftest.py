"""Shared fixtures for vtl tests."""

from __future__ import annotations

import os
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import pytest

from vtl.core.commits import Commit
from vtl.core.planner import TagInfo
from vtl.core.version import BuildContext
from vtl.docker import ReleaseInfo

if TYPE_CHECKING:
    from collections.abc import Callable

BUILD_SHA = "a8cb3d0eae1f1a064896493f4cf63dafc17bafcf"
RELEASE_SHA = "0869c0d9638268ffbd1e03974ab0cdd07070c010"
MIDDLE_SHA = "626efe378fc93eabf78a99b8ff1d70bb7dcc68a3"
CREATED = datetime(2024, 3, 5, 7, 9, 11, 123000, tzinfo=UTC)


class FakeReleaseTagClient:
    """In-memory ReleaseTagClient recording created tags."""

    def __init__(
        self,
        tags: list[TagInfo],
        commits: list[Commit],
        releases: list[ReleaseInfo] | None = None,
    ) -> None:
        self.tags = tags
        self.commits = commits
        self.releases = releases or []
        self.created: list[tuple[str, str, str]] = []
        self.requested_shas: list[str] = []

    def get_tags(self) -> list[TagInfo]:
        return list(self.tags)

    def get_commits(self, start_sha: str) -> list[Commit]:
        self.requested_shas.append(start_sha)
        return list(self.commits)

    def get_releases(self) -> list[ReleaseInfo]:
        return list(self.releases)

    def create_tag(self, name: str, notes: str, commit_sha: str) -> None:
        self.created.append((name, notes, commit_sha))


@pytest.fixture(autouse=True)
def _clean_ci_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the CI environment of the test run out of the CLI under test."""
    for name in list(os.environ):
        if name.startswith(("GITHUB_", "INPUT_", "VTL_")):
            monkeypatch.delenv(name, raising=False)


@pytest.fixture
def make_context() -> Callable[..., BuildContext]:
    """Factory for build contexts with sensible defaults."""

    def _make(
        ref: str = "refs/heads/main",
        event_name: str = "push",
        sha: str = BUILD_SHA,
        run_number: str = "17",
    ) -> BuildContext:
        return BuildContext(
            event_name=event_name,
            ref=ref,
            sha=sha,
            run_number=run_number,
            created=CREATED,
        )

    return _make


@pytest.fixture
def released_history() -> tuple[list[TagInfo], list[Commit]]:
    """A v1.0.0 release followed by one fix commit."""
    tags = [TagInfo("v1.0.0", RELEASE_SHA)]
    commits = [
        Commit(BUILD_SHA, "fix: handle empty payloads"),
        Commit(RELEASE_SHA, "feat: previous release commit"),
    ]
    return tags, commits


@pytest.fixture
def fake_client_factory() -> Callable[..., FakeReleaseTagClient]:
    def _make(
        tags: list[TagInfo],
        commits: list[Commit],
        releases: list[ReleaseInfo] | None = None,
    ) -> FakeReleaseTagClient:
        return FakeReleaseTagClient(tags, commits, releases)

    return _make
