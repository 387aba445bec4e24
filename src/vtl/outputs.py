"""Publishing results to the surrounding pipeline.

Results are flattened into ``<prefix>_<key>`` pairs, e.g. ``ver_semVer``
and ``release_tag_createdReleaseTag``, and appended to the file named by
``GITHUB_OUTPUT``.
"""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping
    from pathlib import Path

    from vtl.core.version import Version


def flatten_outputs(prefix: str, values: Mapping[str, object | None]) -> dict[str, str]:
    """Prefix keys and stringify values, dropping absent ones."""
    return {f"{prefix}_{key}": str(value) for key, value in values.items() if value is not None}


def format_output_line(key: str, value: str) -> str:
    if "\n" not in value:
        return f"{key}={value}\n"

    # Multi-line values use the heredoc form
    delimiter = f"ghadelimiter_{uuid.uuid4()}"
    return f"{key}<<{delimiter}\n{value}\n{delimiter}\n"


def write_github_output(path: Path, outputs: Mapping[str, str]) -> None:
    """Append outputs to a GITHUB_OUTPUT file."""
    with path.open("a", encoding="utf-8") as fh:
        for key, value in outputs.items():
            fh.write(format_output_line(key, value))


def write_version_file(path: Path, version: Version) -> None:
    """Write the full SemVer of ``version`` to ``path``."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(version.sem_ver, encoding="utf-8")
