"""Conventional commit classification.

Each commit since the last release is classified into a version bump:

- ``type!:`` headers or a ``BREAKING CHANGE`` anywhere in the message -> MAJOR
- ``feat:`` -> MINOR
- any other known type (fix, chore, refactor, style, test, docs) -> PATCH
- messages that do not follow the convention at all -> PATCH

Unstructured messages are never ignored; every commit that reaches a
release counts as at least a patch change.

See: https://www.conventionalcommits.org/en/v1.0.0/
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

from vtl.core.release_tag import BumpType

if TYPE_CHECKING:
    from collections.abc import Iterable

COMMIT_TYPES = frozenset({"feat", "fix", "chore", "refactor", "style", "test", "docs"})

CONVENTIONAL_HEADER_PATTERN = re.compile(
    rf"^(?P<type>{'|'.join(sorted(COMMIT_TYPES))})"
    r"(?:\((?P<scope>[^()\r\n]*)\))?"
    r"(?P<breaking>!)?"
    r":\s?(?P<description>.*)$",
    re.IGNORECASE,
)

BREAKING_CHANGE_MARKER = "BREAKING CHANGE"


@dataclass(frozen=True)
class Commit:
    """A commit as returned by history traversal.

    Attributes:
        sha: Full commit SHA
        message: Full commit message (header and body)
    """

    sha: str
    message: str

    @property
    def header(self) -> str:
        """First line of the message."""
        return self.message.split("\n", 1)[0].strip()

    @property
    def short_sha(self) -> str:
        return self.sha[:8]


@dataclass(frozen=True)
class ParsedCommit:
    """A commit with its conventional commit header parsed.

    Attributes:
        commit: Original commit
        commit_type: Lowercased type (feat, fix, ...), None if non-conventional
        scope: Scope from ``type(scope):``, None if absent
        description: Header description, or the whole header if non-conventional
        is_breaking: Header has ``!`` or the message mentions BREAKING CHANGE
        is_conventional: Header follows the conventional commit format
    """

    commit: Commit
    commit_type: str | None
    scope: str | None
    description: str
    is_breaking: bool
    is_conventional: bool

    @classmethod
    def from_commit(cls, commit: Commit) -> ParsedCommit:
        """Parse a commit into its conventional commit parts."""
        breaking_in_message = BREAKING_CHANGE_MARKER in commit.message.upper()

        match = CONVENTIONAL_HEADER_PATTERN.match(commit.header)
        if match is None:
            return cls(
                commit=commit,
                commit_type=None,
                scope=None,
                description=commit.header,
                is_breaking=breaking_in_message,
                is_conventional=False,
            )

        return cls(
            commit=commit,
            commit_type=match.group("type").lower(),
            scope=match.group("scope") or None,
            description=match.group("description").strip(),
            is_breaking=bool(match.group("breaking")) or breaking_in_message,
            is_conventional=True,
        )

    @property
    def bump(self) -> BumpType:
        """Version bump this commit calls for."""
        if self.is_breaking:
            return BumpType.MAJOR
        if self.commit_type == "feat":
            return BumpType.MINOR
        # Known non-feature types and unstructured messages alike
        return BumpType.PATCH


def classify_commit(message: str) -> BumpType:
    """Classify a single commit message into a version bump.

    Args:
        message: Full commit message

    Returns:
        MAJOR, MINOR or PATCH; never NONE
    """
    return ParsedCommit.from_commit(Commit(sha="", message=message)).bump


def parse_commits(commits: Iterable[Commit]) -> list[ParsedCommit]:
    """Parse a sequence of commits, preserving order."""
    return [ParsedCommit.from_commit(commit) for commit in commits]


def calculate_bump(parsed_commits: Iterable[ParsedCommit]) -> BumpType:
    """Determine the most significant bump among the given commits.

    Returns NONE for an empty sequence.
    """
    result = BumpType.NONE
    for pc in parsed_commits:
        result = max(result, pc.bump)
        if result == BumpType.MAJOR:
            break
    return result


def format_release_notes(commits: Iterable[Commit]) -> str:
    """Join commit messages into release notes, one entry per commit."""
    return "\n".join(commit.message for commit in commits if commit.message)
