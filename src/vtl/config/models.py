"""Pydantic models for vtl configuration."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from vtl.core.release_tag import ReleaseTagVersion
from vtl.core.semver import SemVer
from vtl.core.version import normalize_branch_name
from vtl.exceptions import ConfigValidationError
from vtl.vcs.github import DEFAULT_API_URL


def parse_branch_mappings(text: str) -> dict[str, str]:
    """Parse newline-separated ``branch:channel`` pairs.

    Blank lines are ignored. Branch names are normalized the same way
    build refs are, so ``Release/V2:stable`` maps ``refs/heads/release/v2``.
    """
    mappings: dict[str, str] = {}
    for line in text.splitlines():
        line = line.strip()
        if not line:
            continue
        branch, sep, channel = line.partition(":")
        if not sep or not branch.strip() or not channel.strip():
            raise ValueError(f"Invalid branch mapping '{line}', expected 'branch:channel'")
        mappings[branch] = channel.strip()
    return mappings


class GitHubConfig(BaseModel):
    """GitHub API access used for release tagging."""

    model_config = ConfigDict(extra="forbid")

    token: str | None = Field(default=None, repr=False)
    api_url: str = DEFAULT_API_URL
    repository: str | None = Field(
        default=None,
        description="Repository as 'owner/name'",
    )

    @field_validator("repository")
    @classmethod
    def _check_repository(cls, value: str | None) -> str | None:
        if value is None:
            return None
        owner, sep, name = value.partition("/")
        if not sep or not owner or not name or "/" in name:
            raise ValueError(f"repository must be 'owner/name', got '{value}'")
        return value

    @property
    def owner(self) -> str | None:
        return self.repository.split("/", 1)[0] if self.repository else None

    @property
    def repo(self) -> str | None:
        return self.repository.split("/", 1)[1] if self.repository else None

    @property
    def can_create_tags(self) -> bool:
        return bool(self.token and self.repository)


class VtlConfig(BaseModel):
    """Root configuration.

    Attributes:
        base_version: SemVer the build version starts from
        branch_mappings: Normalized branch name -> channel label
        prerelease_prefix: Prefix of the run-number pre-release identifier
        releases_branch: Branch receiving release tags; empty disables tagging
        initial_release_tag: Version of the first release; defaults to the base version
        version_file: File receiving the composed SemVer; None disables it
        docker_image: Image receiving the build tags; empty disables them
        github: GitHub API access
    """

    model_config = ConfigDict(extra="forbid")

    base_version: str
    branch_mappings: dict[str, str] = Field(default_factory=dict)
    prerelease_prefix: str = ""
    releases_branch: str = ""
    initial_release_tag: str | None = None
    version_file: Path | None = Path("VERSION")
    docker_image: str = ""
    github: GitHubConfig = Field(default_factory=GitHubConfig)

    @field_validator("base_version")
    @classmethod
    def _check_base_version(cls, value: str) -> str:
        if SemVer.parse(value) is None:
            raise ValueError(f'base-version of "{value}" is not a valid SEMVER')
        return value

    @field_validator("branch_mappings", mode="before")
    @classmethod
    def _normalize_branch_mappings(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = parse_branch_mappings(value)
        if isinstance(value, dict):
            return {normalize_branch_name(str(k)): v for k, v in value.items()}
        return value

    @field_validator("initial_release_tag")
    @classmethod
    def _check_initial_release_tag(cls, value: str | None) -> str | None:
        if value and ReleaseTagVersion.parse(value) is None:
            raise ValueError(f"initial_release_tag '{value}' is not a release tag like v1.2.3")
        return value or None

    @property
    def effective_initial_release_tag(self) -> str:
        """The first release version, falling back to the base version's numbers."""
        if self.initial_release_tag:
            return self.initial_release_tag
        base = SemVer.parse(self.base_version)
        if base is None:
            raise ConfigValidationError(
                f'base-version of "{self.base_version}" is not a valid SEMVER'
            )
        return f"v{base.major}.{base.minor}.{base.patch}"

    @property
    def tagging_enabled(self) -> bool:
        return bool(self.releases_branch)
