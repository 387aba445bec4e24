"""Configuration management for vtl."""

from __future__ import annotations

from vtl.config.loader import load_config
from vtl.config.models import GitHubConfig, VtlConfig, parse_branch_mappings

__all__ = [
    "GitHubConfig",
    "VtlConfig",
    "load_config",
    "parse_branch_mappings",
]
