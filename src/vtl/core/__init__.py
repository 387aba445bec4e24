"""Core business logic for vtl.

This module contains the fundamental building blocks:
- SemVer 2.0 parsing and precedence
- Release tag versions and bumps
- Conventional commit classification
- Release tag planning
- Build version composition
"""

from __future__ import annotations

from vtl.core.commits import (
    Commit,
    ParsedCommit,
    calculate_bump,
    classify_commit,
    format_release_notes,
    parse_commits,
)
from vtl.core.planner import (
    CreateReleaseResult,
    ReleaseTagClient,
    TagInfo,
    create_release_tag,
    find_previous_release,
)
from vtl.core.release_tag import BumpType, ReleaseTagVersion
from vtl.core.semver import SemVer, compare_semvers, max_semver, parse_semver, sort_semvers
from vtl.core.version import BuildContext, Version, compose_version, normalize_branch_name

__all__ = [
    "BuildContext",
    "BumpType",
    "Commit",
    "CreateReleaseResult",
    "ParsedCommit",
    "ReleaseTagClient",
    "ReleaseTagVersion",
    "SemVer",
    "TagInfo",
    "Version",
    "calculate_bump",
    "classify_commit",
    "compare_semvers",
    "compose_version",
    "create_release_tag",
    "find_previous_release",
    "format_release_notes",
    "max_semver",
    "normalize_branch_name",
    "parse_commits",
    "parse_semver",
    "sort_semvers",
]
