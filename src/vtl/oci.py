"""OCI image annotations for a build.

Maps the composed version and the repository described by the workflow
event payload to the ``org.opencontainers.image.*`` annotations, see
https://github.com/opencontainers/image-spec/blob/main/annotations.md
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, ValidationError

from vtl.exceptions import EventPayloadError

if TYPE_CHECKING:
    from pathlib import Path

    from vtl.core.version import BuildContext, Version

LABEL_PREFIX = "org.opencontainers.image"


class LicenseInfo(BaseModel):
    model_config = ConfigDict(extra="ignore")

    spdx_id: str | None = None


class RepositoryInfo(BaseModel):
    """The ``repository`` object of a workflow event payload."""

    model_config = ConfigDict(extra="ignore")

    name: str = ""
    description: str | None = None
    html_url: str = ""
    clone_url: str = ""
    license: LicenseInfo | None = None


def load_event_repository(path: Path) -> RepositoryInfo | None:
    """Read the repository from a workflow event payload file (``GITHUB_EVENT_PATH``).

    Returns:
        The repository, or None if the payload does not describe one

    Raises:
        EventPayloadError: If the file cannot be read or is not a valid payload
    """
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise EventPayloadError(f"Failed to read event payload {path}: {e}") from e

    repository = payload.get("repository") if isinstance(payload, dict) else None
    if repository is None:
        return None

    try:
        return RepositoryInfo.model_validate(repository)
    except ValidationError as e:
        raise EventPayloadError(f"Invalid repository in event payload {path}:\n{e}") from e


@dataclass(frozen=True)
class OciInfo:
    """OCI annotation values and the rendered ``key=value`` labels."""

    title: str
    description: str
    url: str
    source: str
    version: str
    created: str
    revision: str
    licenses: str

    @property
    def labels(self) -> str:
        """Newline-separated labels, skipping those without a value."""
        values = {
            "title": self.title,
            "description": self.description,
            "url": self.url,
            "source": self.source,
            "version": self.version,
            "created": self.created,
            "revision": self.revision,
            "licenses": self.licenses,
        }
        return "\n".join(
            f"{LABEL_PREFIX}.{key}={value}" for key, value in values.items() if value.strip()
        )

    def as_outputs(self) -> dict[str, str]:
        return {
            "title": self.title,
            "description": self.description,
            "url": self.url,
            "source": self.source,
            "version": self.version,
            "created": self.created,
            "revision": self.revision,
            "licenses": self.licenses,
            "labels": self.labels,
        }


def oci_info(
    version: Version,
    context: BuildContext,
    repository: RepositoryInfo | None = None,
) -> OciInfo:
    """Collect the OCI annotations of a build.

    Repository fields are empty when no repository is known.
    """
    repo = repository or RepositoryInfo()
    licenses = repo.license.spdx_id if repo.license and repo.license.spdx_id else ""

    return OciInfo(
        title=repo.name,
        description=repo.description or "",
        url=repo.html_url,
        source=repo.clone_url,
        version=version.sem_ver,
        created=version.created,
        revision=context.sha,
        licenses=licenses,
    )
