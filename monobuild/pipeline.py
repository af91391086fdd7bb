"""Command pipeline: load manifests → find changes → select → render.

This module glues the graph engine to the outside world:
1. Load the dependency graph from manifest files (or a repo manifest)
2. Find changed files with git, or take them as given
3. Resolve changed files to components and compute the impact
4. Restrict the result to the requested scope
5. Render it in the requested format
"""

from __future__ import annotations

import subprocess
from collections.abc import Iterable
from pathlib import Path

from .graph import Graph, GraphView
from .impact import affected_view, changed_components, schedule, select
from .manifests import discover_manifests, parse_repo_manifest, read_manifests
from .models import OutputOptions
from .render import to_dot, to_matrix, to_text
from .shell import GitError, fatal, git, warn


def load_graph(
    dependency_files: str, root: Path, repo_manifest: Path | None = None
) -> Graph:
    """Load the dependency graph and report manifest warnings.

    Args:
        dependency_files: Glob for per-component manifests, relative to root.
        root: Repository root.
        repo_manifest: Read this single repo manifest instead of searching
                       for per-component manifests.

    Returns:
        The dependency graph.
    """
    try:
        if repo_manifest is not None:
            graph, warnings = parse_repo_manifest(repo_manifest.read_text())
        else:
            manifests = discover_manifests(dependency_files, root)
            if not manifests:
                warn(f"No dependency manifests found matching {dependency_files}")
            graph, warnings = read_manifests(manifests)
    except (OSError, UnicodeDecodeError) as exc:
        fatal(f"Cannot read dependency manifest: {exc}")

    for warning in warnings:
        warn(str(warning))

    return graph


def diff_base(main_branch: bool, base_branch: str, base_commit: str) -> str:
    """Find the commit to compare the working tree with.

    In main branch mode that's the configured base commit (by default the
    parent commit). On a feature branch it's the merge base with the base
    branch, so only changes made on the feature branch count.

    Raises:
        GitError: If the merge base can't be determined.
    """
    if main_branch:
        return base_commit.strip()

    try:
        return git("merge-base", base_branch, "HEAD")
    except subprocess.CalledProcessError as exc:
        raise GitError(
            f"Cannot find merge base with branch {base_branch}: "
            f"{(exc.stderr or '').strip()}"
        ) from exc


def changed_files(main_branch: bool, base_branch: str, base_commit: str) -> list[str]:
    """List files changed since the diff base.

    Raises:
        GitError: If git can't determine the base or the changed files.
    """
    base = diff_base(main_branch, base_branch, base_commit)

    try:
        output = git("diff", "--no-commit-id", "--name-only", "-r", base)
    except subprocess.CalledProcessError as exc:
        raise GitError(
            f"Finding changed files failed: {(exc.stderr or '').strip()}"
        ) from exc

    return [line for line in output.splitlines() if line.strip()]


def format_output(view: GraphView, opts: OutputOptions) -> str:
    """Render a selected view according to the output options.

    Full and matrix output ignore edge strengths. Otherwise the view is
    reduced to the build schedule (strong edges only) unless the
    dependency graph was asked for.
    """
    if opts.full:
        return to_text(view, full=True)
    if opts.github_matrix:
        return to_matrix(view) + "\n"

    if not opts.dependencies:
        view = schedule(view)

    if opts.dot:
        return to_dot(view, schedule=not opts.dependencies)
    return to_text(view)


def run_print(graph: Graph, opts: OutputOptions) -> str:
    """Render the whole build schedule or dependency graph.

    Raises:
        ScopeError: If opts.scope is not a component.
    """
    selection = select(graph, scope=opts.scope, top_level=opts.top_level)
    return format_output(selection, opts)


def run_diff(
    graph: Graph,
    files: Iterable[str],
    opts: OutputOptions,
    rebuild_strong: bool = False,
) -> str:
    """Render the part of the graph affected by changes to the given files.

    Args:
        graph: The dependency graph.
        files: Changed file paths relative to the repository root.
        opts: Output options.
        rebuild_strong: Also include strong dependencies of affected
                        components.

    Raises:
        ScopeError: If opts.scope is not a component.
    """
    changed = changed_components(graph.vertices(), files)
    selection = select(graph, scope=opts.scope, top_level=opts.top_level)
    affected = affected_view(graph, selection, changed, rebuild_strong=rebuild_strong)
    return format_output(affected, opts)
