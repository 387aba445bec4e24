"""SemVer 2.0 parsing and precedence.

The grammar follows https://semver.org/#backusnaur-form-grammar-for-valid-semver-versions
with two relaxations used by CI tags: an optional leading ``v`` and
case-insensitive identifiers. A version must be a whole whitespace
delimited token, so ``a1.2.3``, ``1.2.3v`` and ``1.2.3.4`` do not match.

Precedence is implemented per https://semver.org/#spec-item-11.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import cmp_to_key
from typing import TYPE_CHECKING

from vtl.exceptions import InvalidVersionError

if TYPE_CHECKING:
    from collections.abc import Iterable

_NUMERIC = r"0|[1-9]\d*"
_PRERELEASE_ID = rf"(?:{_NUMERIC}|[\da-z-]*[a-z-][\da-z-]*)"
_BUILD_ID = r"[\da-z-]+"

SEMVER_REGEX = re.compile(
    r"(?:^|(?<=\s))v?"
    rf"(?P<major>{_NUMERIC})\.(?P<minor>{_NUMERIC})\.(?P<patch>{_NUMERIC})"
    rf"(?:-(?P<prerelease>{_PRERELEASE_ID}(?:\.{_PRERELEASE_ID})*))?"
    rf"(?:\+(?P<metadata>{_BUILD_ID}(?:\.{_BUILD_ID})*))?"
    r"(?=$|\s)",
    re.IGNORECASE | re.ASCII,
)


@dataclass(frozen=True)
class SemVer:
    """A parsed SemVer 2.0 version.

    Attributes:
        major: Major version number
        minor: Minor version number
        patch: Patch version number
        prerelease: Dot-separated pre-release identifiers, empty if none
        metadata: Dot-separated build metadata, empty if none
    """

    major: int
    minor: int
    patch: int
    prerelease: str = ""
    metadata: str = ""

    @classmethod
    def parse(cls, value: str | None) -> SemVer | None:
        """Parse a version string.

        Args:
            value: String to parse, optionally prefixed with ``v``

        Returns:
            The parsed version, or None if the string is not a valid SemVer
        """
        if not value:
            return None

        match = SEMVER_REGEX.search(value)
        if match is None:
            return None

        return cls(
            major=int(match.group("major")),
            minor=int(match.group("minor")),
            patch=int(match.group("patch")),
            prerelease=match.group("prerelease") or "",
            metadata=match.group("metadata") or "",
        )

    @property
    def is_prerelease(self) -> bool:
        return bool(self.prerelease)

    @property
    def core(self) -> tuple[int, int, int]:
        return (self.major, self.minor, self.patch)

    def __str__(self) -> str:
        result = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            result += f"-{self.prerelease}"
        if self.metadata:
            result += f"+{self.metadata}"
        return result


def parse_semver(value: str | None) -> SemVer | None:
    """Parse a SemVer string, returning None when it does not match."""
    return SemVer.parse(value)


def _require(value: str) -> SemVer:
    parsed = SemVer.parse(value)
    if parsed is None:
        raise InvalidVersionError(f'"{value}" is not a valid SEMVER')
    return parsed


def _cmp(left: int | str, right: int | str) -> int:
    return (left > right) - (left < right)  # type: ignore[operator]


def _compare_prerelease(left: str, right: str) -> int:
    left_ids = left.split(".")
    right_ids = right.split(".")

    for left_id, right_id in zip(left_ids, right_ids, strict=False):
        left_numeric = left_id.isdigit()
        right_numeric = right_id.isdigit()

        # Numeric identifiers always have lower precedence than alphanumeric ones
        if left_numeric and not right_numeric:
            return -1
        if right_numeric and not left_numeric:
            return 1

        if left_numeric:
            result = _cmp(int(left_id), int(right_id))
        else:
            result = _cmp(left_id, right_id)

        if result:
            return result

    # A larger set of identifiers wins when all shared ones are equal
    return _cmp(len(left_ids), len(right_ids))


def compare_semvers(left: str, right: str) -> int:
    """Compare two SemVer strings by precedence.

    Build metadata is ignored.

    Args:
        left: First version
        right: Second version

    Returns:
        -1 if left < right, 0 if they have equal precedence, 1 if left > right

    Raises:
        InvalidVersionError: If either string is not a valid SemVer
    """
    left_ver = _require(left)
    right_ver = _require(right)

    result = _cmp(left_ver.core, right_ver.core)
    if result:
        return result

    # A pre-release has lower precedence than the associated normal version
    if left_ver.is_prerelease and not right_ver.is_prerelease:
        return -1
    if right_ver.is_prerelease and not left_ver.is_prerelease:
        return 1
    if not left_ver.is_prerelease:
        return 0

    return _compare_prerelease(left_ver.prerelease, right_ver.prerelease)


def sort_semvers(values: Iterable[str], *, reverse: bool = False) -> list[str]:
    """Sort version strings by SemVer precedence (stable for equal precedence)."""
    return sorted(values, key=cmp_to_key(compare_semvers), reverse=reverse)


def max_semver(values: Iterable[str]) -> str | None:
    """Return the version with the highest precedence, or None for no input."""
    latest: str | None = None
    for value in values:
        _require(value)
        if latest is None or compare_semvers(value, latest) > 0:
            latest = value
    return latest
