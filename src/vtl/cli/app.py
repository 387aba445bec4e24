"""vtl command line interface.

Every option can also be supplied through the environment, so the CLI
runs unchanged inside a GitHub Actions step: ``GITHUB_*`` variables
describe the build and ``INPUT_*`` variables carry the step inputs.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from vtl import __version__
from vtl.cli.commands.run import run_versioning
from vtl.config import load_config
from vtl.core.semver import compare_semvers, sort_semvers
from vtl.core.version import BuildContext
from vtl.exceptions import ConfigError, InvalidVersionError
from vtl.log import configure_logging

app = typer.Typer(
    name="vtl",
    help="SemVer build versions and conventional-commit release tags for CI.",
    no_args_is_help=True,
    add_completion=False,
)

console = Console()
err_console = Console(stderr=True)


@app.command()
def run(
    base_version: Annotated[
        str | None,
        typer.Option(envvar=["VTL_BASE_VERSION", "INPUT_BASEVERSION"], help="Base SemVer."),
    ] = None,
    branch_mappings: Annotated[
        str | None,
        typer.Option(
            envvar=["VTL_BRANCH_MAPPINGS", "INPUT_BRANCHMAPPINGS"],
            help="Newline-separated 'branch:channel' pairs.",
        ),
    ] = None,
    prerelease_prefix: Annotated[
        str | None,
        typer.Option(envvar=["VTL_PRERELEASE_PREFIX", "INPUT_PRERELEASEPREFIX"]),
    ] = None,
    releases_branch: Annotated[
        str | None,
        typer.Option(
            envvar=["VTL_RELEASES_BRANCH", "INPUT_RELEASESBRANCH"],
            help="Branch receiving release tags. Empty disables tagging.",
        ),
    ] = None,
    initial_release_tag: Annotated[
        str | None,
        typer.Option(envvar=["VTL_INITIAL_RELEASE_TAG", "INPUT_INITIALRELEASETAG"]),
    ] = None,
    version_file: Annotated[
        Path | None,
        typer.Option(envvar=["VTL_VERSION_FILE", "INPUT_VERSIONFILE"]),
    ] = None,
    docker_image: Annotated[
        str | None,
        typer.Option(
            envvar=["VTL_DOCKER_IMAGE", "INPUT_DOCKERIMAGE"],
            help="Image receiving the build tags, e.g. ghcr.io/owner/app.",
        ),
    ] = None,
    github_token: Annotated[
        str | None,
        typer.Option(envvar=["INPUT_GITHUBTOKEN", "GITHUB_TOKEN"], show_default=False),
    ] = None,
    repository: Annotated[str | None, typer.Option(envvar="GITHUB_REPOSITORY")] = None,
    api_url: Annotated[str | None, typer.Option(envvar="GITHUB_API_URL")] = None,
    event_name: Annotated[str, typer.Option(envvar="GITHUB_EVENT_NAME")] = "",
    ref: Annotated[str, typer.Option(envvar="GITHUB_REF")] = "",
    sha: Annotated[str, typer.Option(envvar="GITHUB_SHA")] = "",
    run_number: Annotated[str, typer.Option(envvar="GITHUB_RUN_NUMBER")] = "0",
    github_output: Annotated[Path | None, typer.Option(envvar="GITHUB_OUTPUT")] = None,
    event_path: Annotated[Path | None, typer.Option(envvar="GITHUB_EVENT_PATH")] = None,
    project: Annotated[
        Path | None,
        typer.Option("--project", "-p", help="Project directory with [tool.vtl] config."),
    ] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v")] = False,
) -> None:
    """Create the release tag if due and compute the build version."""
    configure_logging(logging.DEBUG if verbose else logging.INFO, err_console)

    overrides = {
        "base_version": base_version,
        "branch_mappings": branch_mappings,
        "prerelease_prefix": prerelease_prefix,
        "releases_branch": releases_branch,
        "initial_release_tag": initial_release_tag,
        "version_file": version_file,
        "docker_image": docker_image,
        "github": {"token": github_token, "repository": repository, "api_url": api_url},
    }

    try:
        config = load_config(project, overrides)
    except ConfigError as e:
        err_console.print(f"[red]Error loading config:[/] {e}")
        raise SystemExit(1) from e

    context = BuildContext(event_name=event_name, ref=ref, sha=sha, run_number=run_number)
    run_versioning(config, context, github_output, console, err_console, event_path)


@app.command()
def compare(left: str, right: str) -> None:
    """Compare two SemVer versions by precedence, printing -1, 0 or 1."""
    try:
        result = compare_semvers(left, right)
    except InvalidVersionError as e:
        err_console.print(f"[red]Error:[/] {e}")
        raise SystemExit(1) from e
    console.print(result)


@app.command("sort")
def sort_versions(
    versions: list[str],
    reverse: Annotated[bool, typer.Option("--reverse", "-r", help="Highest first.")] = False,
) -> None:
    """Print SemVer versions ordered by precedence, one per line."""
    try:
        ordered = sort_semvers(versions, reverse=reverse)
    except InvalidVersionError as e:
        err_console.print(f"[red]Error:[/] {e}")
        raise SystemExit(1) from e
    for value in ordered:
        console.print(value, highlight=False)


@app.command()
def version() -> None:
    """Show the vtl version."""
    console.print(f"vtl {__version__}")


def main() -> None:
    app()
