"""Container image tags for a build.

Every build gets a tag for its channel (``edge``, ``pr-37``, ``1.3.5``)
and pushes get a ``sha-<sha8>`` tag. Builds of a SemVer tag also get
the stable ``MAJOR``, ``MAJOR.MINOR`` and ``MAJOR.MINOR.PATCH`` tags, or
only the full version for pre-releases. ``latest`` goes to a stable
release that no published release outranks.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from vtl.core.semver import SemVer, compare_semvers, max_semver
from vtl.core.version import PULL_REQUEST_EVENTS

if TYPE_CHECKING:
    from collections.abc import Sequence

    from vtl.core.version import BuildContext, Version

logger = logging.getLogger(__name__)

LATEST_TAG = "latest"


@dataclass(frozen=True)
class ReleaseInfo:
    """A published release of the repository."""

    tag_name: str
    prerelease: bool = False


@dataclass(frozen=True)
class DockerInfo:
    """Image tags for a build and whether to push them."""

    tags: tuple[str, ...]
    push: bool

    def as_outputs(self) -> dict[str, str]:
        return {"tags": ",".join(self.tags), "push": "true" if self.push else "false"}


def is_latest_release(tag: str, releases: Sequence[ReleaseInfo]) -> bool:
    """True when no stable release has a higher precedence than ``tag``.

    Pre-releases and releases whose tag is not a SemVer are ignored.
    """
    stable = []
    for release in releases:
        if release.prerelease:
            continue
        if SemVer.parse(release.tag_name) is None:
            logger.debug("Ignoring release %s, its tag is not a SemVer", release.tag_name)
            continue
        stable.append(release.tag_name)

    newest = max_semver(stable)
    return newest is None or compare_semvers(tag, newest) >= 0


def docker_info(
    image: str,
    version: Version,
    context: BuildContext,
    releases: Sequence[ReleaseInfo] | None = None,
) -> DockerInfo:
    """Derive the image tags of a build.

    Args:
        image: Image name the tags are added to, e.g. ``ghcr.io/owner/app``
        version: Composed version of the build
        context: Trigger of the build
        releases: Published releases, None when they could not be listed.
                  Without them ``latest`` is never assigned.

    Returns:
        Unique tags in the order they were derived
    """
    tags: list[str] = []
    tag_ver = SemVer.parse(version.tag)

    if version.tag != LATEST_TAG:
        if tag_ver is not None and version.tag[:1].lower() == "v":
            tags.append(f"{image}:{version.tag[1:]}")
        else:
            tags.append(f"{image}:{version.tag}")

    if context.event_name == "push":
        tags.append(f"{image}:sha-{context.sha[:8]}")

    if tag_ver is not None:
        if version.pre_release:
            tags.append(f"{image}:{version.sem_ver_no_meta}")
        else:
            tags.append(f"{image}:{version.major}")
            tags.append(f"{image}:{version.major}.{version.minor}")
            tags.append(f"{image}:{version.major}.{version.minor}.{version.patch}")

            if releases is not None and is_latest_release(version.tag, releases):
                tags.append(f"{image}:{LATEST_TAG}")

    return DockerInfo(
        tags=tuple(dict.fromkeys(tags)),
        push=context.event_name not in PULL_REQUEST_EVENTS,
    )
