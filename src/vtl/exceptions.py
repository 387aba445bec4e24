"""Exception hierarchy for vtl.

All errors raised by vtl derive from :class:`VtlError` so callers can
catch everything with a single ``except`` clause while still being able
to distinguish the individual failure modes.
"""

from __future__ import annotations


class VtlError(Exception):
    """Base exception for all vtl errors."""


# Versions


class VersionError(VtlError):
    """Base for errors while composing or comparing versions."""


class InvalidVersionError(VersionError):
    """A string that must be a version could not be parsed."""


class UnsupportedTriggerError(VersionError):
    """The event name / ref combination cannot be mapped to a version."""


# Releases


class ReleaseError(VtlError):
    """Base for release tag planning errors."""


class ReleaseBoundaryNotFoundError(ReleaseError):
    """The commit of the previous release tag was not found in the fetched history."""

    def __init__(self, message: str, *, tag: str, commit_sha: str) -> None:
        super().__init__(message)
        self.tag = tag
        self.commit_sha = commit_sha


# GitHub


class GitHubError(VtlError):
    """A GitHub API request failed."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


# Configuration


class ConfigError(VtlError):
    """Base for configuration errors."""


class ConfigNotFoundError(ConfigError):
    """No configuration file could be found."""


class ConfigValidationError(ConfigError):
    """Configuration values failed validation."""


# Build environment


class EventPayloadError(VtlError):
    """The workflow event payload could not be read."""
