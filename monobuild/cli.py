"""CLI entry point for monobuild."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import click

from monobuild.impact import ScopeError
from monobuild.models import OutputOptions, Settings
from monobuild.pipeline import changed_files, load_graph, run_diff, run_print
from monobuild.shell import GitError
from monobuild.toml import load_settings

LINE_FORMAT_HELP = """
Each line in the output is a component and its dependencies:

\b
  <component>: <dependency>, <dependency>, <dependency>, ...

The output is either the build schedule (using only strong dependencies) or
the full dependency graph (using all dependencies).
"""


def input_options(fn: Callable) -> Callable:
    """Options controlling where the dependency graph is read from."""
    fn = click.option(
        "-f",
        "--file",
        "repo_manifest",
        type=click.Path(exists=True, dir_okay=False, path_type=Path),
        default=None,
        help="Full manifest file (as produced by 'print --full').",
    )(fn)
    fn = click.option(
        "--dependency-files",
        default=None,
        help="Search pattern for dependency files. [default: **/Dependencies]",
    )(fn)
    return fn


def output_options(fn: Callable) -> Callable:
    """Options controlling what is shown and how."""
    fn = click.option(
        "--top-level",
        is_flag=True,
        help="Only list top-level components that nothing depends on.",
    )(fn)
    fn = click.option(
        "--scope",
        default=None,
        help="Scope output to a single component and its dependencies.",
    )(fn)
    fn = click.option(
        "--full",
        is_flag=True,
        help="Print the full dependency graph including strengths.",
    )(fn)
    fn = click.option("--dot", is_flag=True, help="Print in DOT format for GraphViz.")(fn)
    fn = click.option(
        "--dependencies",
        is_flag=True,
        help="Output the dependencies, not the build schedule.",
    )(fn)
    return fn


def _load(settings: Settings, dependency_files: str | None, repo_manifest: Path | None):
    return load_graph(
        dependency_files or settings.dependency_files, Path.cwd(), repo_manifest
    )


@click.group()
@click.version_option(package_name="monobuild")
def cli() -> None:
    """A build orchestration tool for Continuous Integration in a monorepo.

    Reads a graph of dependencies between components living side by side in
    one repository and decides what should be built, given the git history.
    """


@cli.command(
    name="print",
    help="Print the full build schedule or dependency graph.\n" + LINE_FORMAT_HELP,
)
@input_options
@output_options
def print_graph(
    dependency_files: str | None, repo_manifest: Path | None, **output: object
) -> None:
    settings = load_settings(Path.cwd())
    graph = _load(settings, dependency_files, repo_manifest)

    try:
        result = run_print(graph, OutputOptions.model_validate(output))
    except ScopeError as exc:
        raise click.ClickException(str(exc)) from exc

    click.echo(result, nl=False)


@cli.command(
    help="Build schedule for components affected by git changes.\n"
    + LINE_FORMAT_HELP
    + "\nBy default changed files are determined from the local git repository. "
    "Optionally, they can be provided externally on stdin, by adding a hyphen "
    "(-) after the diff command."
)
@click.argument("source", required=False, type=click.Choice(["-"]))
@click.option(
    "--base-branch",
    default=None,
    help="Base branch to use for comparison. [default: master]",
)
@click.option(
    "--base-commit",
    default=None,
    help="Base commit to compare with in main branch mode. [default: HEAD^1]",
)
@click.option(
    "--main-branch",
    is_flag=True,
    help="Run in main branch mode (i.e. only compare with the base commit).",
)
@click.option(
    "--rebuild-strong",
    is_flag=True,
    help="Include all strong dependencies of affected components.",
)
@click.option(
    "--github-matrix",
    is_flag=True,
    help="Output a JSON array usable as a GitHub Actions build matrix.",
)
@input_options
@output_options
def diff(
    source: str | None,
    base_branch: str | None,
    base_commit: str | None,
    main_branch: bool,
    rebuild_strong: bool,
    dependency_files: str | None,
    repo_manifest: Path | None,
    **output: object,
) -> None:
    settings = load_settings(Path.cwd())
    graph = _load(settings, dependency_files, repo_manifest)

    if source == "-":
        lines = click.get_text_stream("stdin").read().splitlines()
        files = [line for line in lines if line.strip()]
    else:
        try:
            files = changed_files(
                main_branch,
                base_branch or settings.base_branch,
                base_commit or settings.base_commit,
            )
        except GitError as exc:
            raise click.ClickException(str(exc)) from exc

    try:
        result = run_diff(
            graph, files, OutputOptions.model_validate(output), rebuild_strong
        )
    except ScopeError as exc:
        raise click.ClickException(str(exc)) from exc

    click.echo(result, nl=False)
