"""Command line interface for vtl."""

from __future__ import annotations

from vtl.cli.app import app, main

__all__ = ["app", "main"]
