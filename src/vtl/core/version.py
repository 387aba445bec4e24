"""Build version composition.

Turns a base version and the CI trigger context into the published
:class:`Version` record:

- ``refs/tags/<semver>``: the tag wins, it supplies the version numbers
  and pre-release, and the channel is the tag name itself
- ``schedule`` events: the ``nightly`` channel
- pull requests: the ``pr-<number>`` channel
- ``refs/heads/<branch>``: the branch mapping (or the branch name) is
  the channel, and a freshly created release tag replaces the version
  numbers and drops the pre-release

Every version carries ``<timestamp>.sha-<sha8>`` build metadata.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from vtl.core.semver import SemVer
from vtl.exceptions import InvalidVersionError, UnsupportedTriggerError, VersionError

if TYPE_CHECKING:
    from collections.abc import Mapping

    from vtl.core.release_tag import ReleaseTagVersion

TAG_REF_PREFIX = "refs/tags/"
BRANCH_REF_PREFIX = "refs/heads/"
PULL_REQUEST_EVENTS = frozenset({"pull_request", "pull_request_target"})
NIGHTLY_CHANNEL = "nightly"


def normalize_branch_name(branch: str) -> str:
    """Normalize a branch name for channel lookups.

    Lowercases and replaces every ``/`` with ``-``, so ``Feature/Login``
    becomes ``feature-login``.
    """
    return branch.strip().lower().replace("/", "-")


def format_timestamp(moment: datetime) -> str:
    """Format a moment as an ISO-8601 UTC timestamp with millisecond precision."""
    return moment.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class BuildContext:
    """The CI trigger a version is composed for.

    Attributes:
        event_name: Trigger event (push, pull_request, schedule, ...)
        ref: Git ref that triggered the build (refs/heads/..., refs/tags/..., refs/pull/...)
        sha: Commit SHA being built
        run_number: Incrementing build number of the workflow
        created: Build timestamp; defaults to the moment the context is created
    """

    event_name: str
    ref: str
    sha: str
    run_number: str
    created: datetime = field(default_factory=lambda: datetime.now(UTC))

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> BuildContext:
        """Create a context from the GitHub Actions environment variables."""
        env = os.environ if environ is None else environ
        return cls(
            event_name=env.get("GITHUB_EVENT_NAME", ""),
            ref=env.get("GITHUB_REF", ""),
            sha=env.get("GITHUB_SHA", ""),
            run_number=env.get("GITHUB_RUN_NUMBER", "0"),
        )


@dataclass(frozen=True)
class Version:
    """The version published for a build. Never modified after composition."""

    major: int
    minor: int
    patch: int
    pre_release: str
    metadata: str
    tag: str
    build_number: str
    created: str
    sem_ver: str
    sem_ver_no_meta: str
    sem_ver_four_tuple_numeric: str

    def as_outputs(self) -> dict[str, str]:
        """Fields under their published output names."""
        return {
            "tag": self.tag,
            "semVer": self.sem_ver,
            "semVerNoMeta": self.sem_ver_no_meta,
            "semVerFourTupleNumeric": self.sem_ver_four_tuple_numeric,
            "major": str(self.major),
            "minor": str(self.minor),
            "patch": str(self.patch),
            "preRelease": self.pre_release,
            "metadata": self.metadata,
            "buildNumber": self.build_number,
            "created": self.created,
        }

    def __str__(self) -> str:
        return self.sem_ver


def _parse_required(value: str, message: str) -> SemVer:
    parsed = SemVer.parse(value)
    if parsed is None:
        raise InvalidVersionError(message)
    return parsed


def _pull_request_channel(ref: str) -> str:
    # refs/pull/<number>/merge
    parts = ref.split("/")
    if len(parts) < 3 or not parts[2]:
        raise UnsupportedTriggerError(f"Cannot determine the pull request number from ref ({ref})")
    return f"pr-{parts[2]}"


def compose_version(
    base_version: str,
    branch_mappings: Mapping[str, str],
    prerelease_prefix: str,
    context: BuildContext,
    release_tag: ReleaseTagVersion | None = None,
) -> Version:
    """Compose the version for a build.

    Args:
        base_version: SemVer the build starts from unless a tag overrides it
        branch_mappings: Normalized branch name -> channel label
        prerelease_prefix: Prefix for the run-number pre-release, may be empty
        context: Trigger of the build
        release_tag: Release tag created for this build, if any

    Returns:
        The composed version

    Raises:
        InvalidVersionError: If the base version or a tag ref is not a valid SemVer
        UnsupportedTriggerError: If the event/ref combination is not supported
        VersionError: If the ref is missing
    """
    base = _parse_required(base_version, f'base-version of "{base_version}" is not a valid SEMVER')

    if not context.ref:
        raise VersionError("ref is not set")

    created = format_timestamp(context.created)
    metadata = f"{re.sub(r'[.:-]', '', created)}.sha-{context.sha[:8]}"
    run_number = str(context.run_number)
    pre_release = f"{prerelease_prefix}.{run_number}" if prerelease_prefix else run_number
    major, minor, patch = base.major, base.minor, base.patch

    if context.ref.startswith(TAG_REF_PREFIX):
        tag_name = context.ref[len(TAG_REF_PREFIX) :]
        tag_ver = _parse_required(tag_name, f'Tag of "{tag_name}" is not a valid SEMVER')

        # Tag wins for everything except metadata
        channel = tag_name.lower()
        major, minor, patch = tag_ver.major, tag_ver.minor, tag_ver.patch
        pre_release = tag_ver.prerelease
    elif context.event_name == "schedule":
        channel = NIGHTLY_CHANNEL
    elif context.event_name in PULL_REQUEST_EVENTS:
        channel = _pull_request_channel(context.ref)
    elif context.ref.startswith(BRANCH_REF_PREFIX):
        branch = normalize_branch_name(context.ref[len(BRANCH_REF_PREFIX) :])
        target = branch_mappings.get(branch)
        channel = target.lower() if target else branch

        if release_tag is not None:
            # A stable release supersedes the pre-release labeling
            major, minor, patch = release_tag.major, release_tag.minor, release_tag.patch
            pre_release = ""
    else:
        raise UnsupportedTriggerError(
            f"Unsupported event name ({context.event_name}) or ref ({context.ref})"
        )

    sem_ver_no_meta = str(SemVer(major, minor, patch, pre_release))

    return Version(
        major=major,
        minor=minor,
        patch=patch,
        pre_release=pre_release,
        metadata=metadata,
        tag=channel,
        build_number=run_number,
        created=created,
        sem_ver=f"{sem_ver_no_meta}+{metadata}",
        sem_ver_no_meta=sem_ver_no_meta,
        sem_ver_four_tuple_numeric=f"{major}.{minor}.{patch}.{run_number}",
    )
