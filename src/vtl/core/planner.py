"""Release tag planning.

Decides whether a build should mint a new release tag, and which one:

1. The previous release is the highest ``vX.Y.Z`` tag whose commit is
   reachable from the build commit. Tags on other branches, or on
   commits newer than a rerun build, are ignored.
2. Tags are only created for plain pushes to the releases branch.
3. Without a previous release the base version is tagged as-is.
4. Otherwise the commits since the previous release are classified and
   the most significant bump is applied. If the previous release commit
   is not in the fetched history the run fails rather than guessing.
5. If there are no commits since the previous release (a rerun of an
   already released build), nothing is created.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from vtl.core.commits import calculate_bump, format_release_notes, parse_commits
from vtl.core.release_tag import BumpType, ReleaseTagVersion
from vtl.exceptions import InvalidVersionError, ReleaseBoundaryNotFoundError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from vtl.core.commits import Commit
    from vtl.core.version import BuildContext

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TagInfo:
    """A tag in the remote repository and the commit it points at."""

    name: str
    commit_sha: str


class ReleaseTagClient(Protocol):
    """Source-control host operations needed for release planning."""

    def get_tags(self) -> list[TagInfo]:
        """Return recent tags, in any order."""
        ...

    def get_commits(self, start_sha: str) -> list[Commit]:
        """Return the history starting at ``start_sha``, newest first."""
        ...

    def create_tag(self, name: str, notes: str, commit_sha: str) -> None:
        """Create an annotated tag ``name`` on ``commit_sha``."""
        ...


@dataclass(frozen=True)
class CreateReleaseResult:
    """Outcome of a release planning run.

    Attributes:
        created_release_tag: Tag created by this run, None when no release was made
        previous_release_tag: Latest reachable release, or the base version if
            there is none yet
        previous_release_tag_commit_sha: Commit of the previous release, None if
            the repository has no reachable release tag
    """

    created_release_tag: ReleaseTagVersion | None
    previous_release_tag: ReleaseTagVersion
    previous_release_tag_commit_sha: str | None = None

    @property
    def is_prerelease(self) -> bool:
        """True when this build did not produce a release."""
        return self.created_release_tag is None

    @property
    def base_version_override(self) -> str:
        return str(self.created_release_tag or self.previous_release_tag)

    def as_outputs(self) -> dict[str, str]:
        """Fields under their published output names, absent values omitted."""
        outputs = {"previousReleaseTag": str(self.previous_release_tag)}
        if self.created_release_tag is not None:
            outputs["createdReleaseTag"] = str(self.created_release_tag)
        if self.previous_release_tag_commit_sha is not None:
            outputs["previousReleaseTagCommitSha"] = self.previous_release_tag_commit_sha
        return outputs


def find_previous_release(
    tags: Sequence[TagInfo],
    commits: Sequence[Commit],
    default: ReleaseTagVersion,
) -> tuple[ReleaseTagVersion, str | None]:
    """Find the highest release tag reachable from the first commit.

    Args:
        tags: Candidate tags in any order
        commits: History of the build commit, newest first
        default: Version to use if no tag qualifies

    Returns:
        The previous release and its commit SHA (None if ``default`` was used)
    """
    reachable = {commit.sha for commit in commits}
    previous, previous_sha = default, None

    for tag in tags:
        version = ReleaseTagVersion.parse(tag.name)
        if version is None:
            continue

        if tag.commit_sha not in reachable:
            logger.debug("Skipping tag %s, its commit is not reachable from this build", tag.name)
            continue

        if version.is_greater_or_equal_to(previous):
            previous, previous_sha = version, tag.commit_sha

    return previous, previous_sha


def _is_release_trigger(context: BuildContext, releases_branch: str) -> bool:
    if not releases_branch:
        return False

    # Tags, pull requests and scheduled runs never create releases
    if context.event_name != "push":
        return False

    return context.ref == f"refs/heads/{releases_branch}"


def create_release_tag(
    client: ReleaseTagClient | None,
    context: BuildContext,
    releases_branch: str,
    base_version: str | None,
) -> CreateReleaseResult:
    """Plan and, when appropriate, create the next release tag.

    Args:
        client: Source-control client, None when no credentials are available
        context: Trigger of the build
        releases_branch: Branch that receives release tags, empty to disable tagging
        base_version: Version of the first release, e.g. ``v0.1.0``

    Returns:
        The planning result; ``created_release_tag`` is None for benign no-ops

    Raises:
        InvalidVersionError: If ``base_version`` is not a release tag version
        ReleaseBoundaryNotFoundError: If the previous release commit is not
            in the fetched history
    """
    base = ReleaseTagVersion.parse(base_version)
    if base is None:
        raise InvalidVersionError(f"Failed to parse base version '{base_version}'")

    if client is None:
        logger.info("GitHub token is missing. Skipping release creation...")
        return CreateReleaseResult(None, base)

    tags = client.get_tags()
    commits = client.get_commits(context.sha)
    previous, previous_sha = find_previous_release(tags, commits, base)

    if not _is_release_trigger(context, releases_branch):
        return CreateReleaseResult(None, previous, previous_sha)

    if previous_sha is None:
        # First release: tag the base version as-is
        created, notes = previous, ""
    else:
        since_release: list[Commit] = []
        reached_boundary = False
        for commit in commits:
            if commit.sha == previous_sha:
                reached_boundary = True
                break
            since_release.append(commit)

        if not reached_boundary:
            raise ReleaseBoundaryNotFoundError(
                f"Failed to reach the latest release tag '{previous}' ({previous_sha}) "
                f"inside of the '{releases_branch}' branch.",
                tag=str(previous),
                commit_sha=previous_sha,
            )

        parsed = parse_commits(since_release)
        for pc in parsed:
            logger.debug("%s %s -> %s", pc.commit.short_sha, pc.commit.header, pc.bump)
        bump = calculate_bump(parsed)
        if bump == BumpType.NONE:
            logger.info(
                "Did not find any new commit since the latest release tag. "
                "Seems that release is already created."
            )
            return CreateReleaseResult(None, previous, previous_sha)

        logger.info(
            "Found %d commit(s) since %s, applying a %s bump", len(since_release), previous, bump
        )
        created = previous.bump(bump)
        notes = format_release_notes(since_release)

    client.create_tag(str(created), notes, context.sha)
    logger.info("Created a tag '%s'", created)

    return CreateReleaseResult(created, previous, previous_sha)
