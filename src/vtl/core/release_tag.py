"""Release tag versions.

A release tag is the ``vMAJOR.MINOR.PATCH`` subset of SemVer used to
name releases in the repository. Pre-release and build metadata never
appear in release tags.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from enum import IntEnum


class BumpType(IntEnum):
    """Magnitude of a version change, ordered by significance."""

    NONE = 0
    PATCH = 1
    MINOR = 2
    MAJOR = 3

    def __str__(self) -> str:
        return self.name.lower()


_RELEASE_TAG_PATTERN = re.compile(r"v?(\d+)\.(\d+)\.(\d+)", re.IGNORECASE | re.ASCII)


@dataclass(frozen=True, order=True)
class ReleaseTagVersion:
    """An immutable ``(major, minor, patch)`` release tag version.

    Ordering compares the numeric components left to right, so the
    builtin comparison operators and ``max()`` work as expected.
    """

    major: int
    minor: int
    patch: int

    @classmethod
    def parse(cls, value: str | None) -> ReleaseTagVersion | None:
        """Parse a release tag such as ``v1.2.3`` or ``1.2.3``.

        Returns None instead of raising, since tags that are not release
        tags are expected in most repositories.
        """
        if value is None:
            return None

        match = _RELEASE_TAG_PATTERN.fullmatch(value.strip())
        if match is None:
            return None

        major, minor, patch = (int(part) for part in match.groups())
        return cls(major, minor, patch)

    def is_greater_or_equal_to(self, other: ReleaseTagVersion) -> bool:
        return self >= other

    def bump_major(self) -> ReleaseTagVersion:
        return ReleaseTagVersion(self.major + 1, 0, 0)

    def bump_minor(self) -> ReleaseTagVersion:
        return replace(self, minor=self.minor + 1, patch=0)

    def bump_patch(self) -> ReleaseTagVersion:
        return replace(self, patch=self.patch + 1)

    def bump(self, bump_type: BumpType) -> ReleaseTagVersion:
        """Return the version bumped by ``bump_type`` (unchanged for NONE)."""
        if bump_type == BumpType.MAJOR:
            return self.bump_major()
        if bump_type == BumpType.MINOR:
            return self.bump_minor()
        if bump_type == BumpType.PATCH:
            return self.bump_patch()
        return self

    def __str__(self) -> str:
        return f"v{self.major}.{self.minor}.{self.patch}"
