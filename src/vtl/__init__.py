"""vtl - Version, tag and release planning for CI builds.

Computes SemVer 2.0 versions for a build from its trigger context and
decides the next release tag from the conventional commits since the
last release.
"""

from __future__ import annotations

__version__ = "0.3.0"

__all__ = ["__version__"]
