"""Source-control host integrations."""

from __future__ import annotations

from vtl.vcs.github import GitHubClient

__all__ = ["GitHubClient"]
