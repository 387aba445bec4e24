"""Implementation of the 'run' command.

The run command plans the release tag (when enabled), composes the build
version, derives the OCI annotations and image tags, and publishes them
to the pipeline.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING

from rich.table import Table

from vtl.core.planner import create_release_tag
from vtl.core.version import compose_version
from vtl.docker import docker_info
from vtl.exceptions import VtlError
from vtl.oci import load_event_repository, oci_info
from vtl.outputs import flatten_outputs, write_github_output, write_version_file
from vtl.vcs import GitHubClient

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

    from rich.console import Console

    from vtl.config.models import VtlConfig
    from vtl.core.release_tag import ReleaseTagVersion
    from vtl.core.version import BuildContext, Version
    from vtl.oci import RepositoryInfo


@contextmanager
def open_client(config: VtlConfig, console: Console) -> Iterator[GitHubClient | None]:
    """Yield a GitHub client, or None when credentials are incomplete."""
    github = config.github
    token, owner, repo = github.token, github.owner, github.repo

    if not token or owner is None or repo is None:
        if token:
            console.print("[yellow]GitHub repository is not set. Skipping GitHub requests...[/]")
        yield None
        return

    with GitHubClient(token, owner, repo, api_url=github.api_url) as client:
        yield client


def _publish(
    prefix: str,
    values: dict[str, str],
    github_output: Path | None,
    console: Console,
) -> None:
    outputs = flatten_outputs(prefix, values)

    table = Table(show_header=False, box=None, pad_edge=False)
    table.add_column(style="cyan")
    table.add_column()
    for key, value in outputs.items():
        table.add_row(key, value)
    console.print(table)

    if github_output is not None:
        write_github_output(github_output, outputs)


def run_versioning(
    config: VtlConfig,
    context: BuildContext,
    github_output: Path | None,
    console: Console,
    err_console: Console,
    event_path: Path | None = None,
) -> Version:
    """Run the release tag planning and version composition.

    Args:
        config: Loaded configuration
        context: Trigger of the build
        github_output: GITHUB_OUTPUT file to append outputs to, if any
        console: Console for standard output
        err_console: Console for error output
        event_path: Workflow event payload describing the repository, if any

    Returns:
        The composed version
    """
    repository: RepositoryInfo | None = None
    if event_path is not None:
        try:
            repository = load_event_repository(event_path)
        except VtlError as e:
            err_console.print(f"[red]Error reading event payload:[/] {e}")
            raise SystemExit(1) from e

    with open_client(config, console) as client:
        release_tag: ReleaseTagVersion | None = None

        if config.tagging_enabled:
            try:
                release_result = create_release_tag(
                    client,
                    context,
                    config.releases_branch,
                    config.effective_initial_release_tag,
                )
            except VtlError as e:
                err_console.print(f"[red]Error creating release tag:[/] {e}")
                raise SystemExit(1) from e

            release_tag = release_result.created_release_tag
            if release_tag is not None:
                console.print(f"[green]✓[/] Created release tag [green]{release_tag}[/]")
            _publish("release_tag", release_result.as_outputs(), github_output, console)

        try:
            version = compose_version(
                config.base_version,
                config.branch_mappings,
                config.prerelease_prefix,
                context,
                release_tag,
            )
        except VtlError as e:
            err_console.print(f"[red]Error composing version:[/] {e}")
            raise SystemExit(1) from e

        _publish("ver", version.as_outputs(), github_output, console)
        _publish("oci", oci_info(version, context, repository).as_outputs(), github_output, console)

        if config.docker_image:
            try:
                releases = client.get_releases() if client is not None else None
            except VtlError as e:
                err_console.print(f"[red]Error listing releases:[/] {e}")
                raise SystemExit(1) from e

            docker = docker_info(config.docker_image, version, context, releases)
            _publish("docker", docker.as_outputs(), github_output, console)

    if config.version_file is not None:
        try:
            write_version_file(config.version_file, version)
        except OSError as e:
            err_console.print(f"[red]Error writing {config.version_file}:[/] {e}")
            raise SystemExit(1) from e
        console.print(f"[green]✓[/] Wrote {version.sem_ver} to [cyan]{config.version_file}[/]")

    return version
