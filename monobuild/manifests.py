"""Dependency manifest reading.

Each component directory carries a manifest file (by default named
``Dependencies``) listing one dependency per line:

    # comments and blank lines are ignored
    libs/lib1
    !app1        ← a leading "!" marks a strong dependency

Alternatively the whole repository can be described by one "repo
manifest", in the format produced by ``monobuild print --full``:

    app1: libs/lib1, libs/lib2
    stack1: !app1, !app2
"""

from __future__ import annotations

import glob
from collections.abc import Mapping
from pathlib import Path

from .graph import Graph
from .models import ManifestWarning, Strength


def parse_dependency(text: str) -> tuple[str, Strength] | None:
    """Parse a single dependency entry.

    Surrounding whitespace and a trailing "/" are ignored. Returns None for
    blank entries, comments and a lone "!".

    Examples:
        "libs/lib1/" → ("libs/lib1", Strength.WEAK)
        "!app1"      → ("app1", Strength.STRONG)
        "# note"     → None
    """
    dep = text.strip().rstrip("/")
    if not dep or dep.startswith("#"):
        return None
    if dep.startswith("!"):
        name = dep[1:].strip()
        return (name, Strength.STRONG) if name else None
    return dep, Strength.WEAK


def parse_manifest(text: str) -> dict[str, Strength]:
    """Parse a component manifest into a map of dependency → strength."""
    deps: dict[str, Strength] = {}
    for line in text.splitlines():
        parsed = parse_dependency(line)
        if parsed is not None:
            name, strength = parsed
            deps[name] = strength
    return deps


def read_manifests(manifests: Mapping[str, str]) -> tuple[Graph, list[ManifestWarning]]:
    """Build the dependency graph from per-component manifests.

    Dependencies on names that have no manifest of their own are dropped
    from the graph and reported as warnings instead.

    Args:
        manifests: Map of component path → manifest text.

    Returns:
        Tuple of (dependency graph, warnings sorted by component).
    """
    components = set(manifests)
    adjacency: dict[str, list[tuple[str, Strength]]] = {}
    warnings: list[ManifestWarning] = []

    for component in sorted(manifests):
        adjacency[component] = []
        for dep, strength in sorted(parse_manifest(manifests[component]).items()):
            if dep in components:
                adjacency[component].append((dep, strength))
            else:
                warnings.append(ManifestWarning.unknown(component, dep))

    return Graph(adjacency), warnings


def parse_repo_manifest(text: str) -> tuple[Graph, list[ManifestWarning]]:
    """Build the dependency graph from a single repository manifest.

    Lines that don't have the form "component: dependency, ..." are skipped
    and reported as warnings. Dependencies that aren't listed as components
    become vertices of the graph anyway.

    Returns:
        Tuple of (dependency graph, warnings in line order).
    """
    adjacency: dict[str, dict[str, Strength]] = {}
    warnings: list[ManifestWarning] = []

    lines = (line.strip() for line in text.splitlines())
    content = [line for line in lines if line and not line.startswith("#")]

    for number, line in enumerate(content):
        component, sep, deps = line.partition(":")
        if not sep:
            warnings.append(ManifestWarning.bad_line(number, line))
            continue

        edges = adjacency.setdefault(component.strip().rstrip("/"), {})
        for entry in deps.split(","):
            parsed = parse_dependency(entry)
            if parsed is not None:
                name, strength = parsed
                edges[name] = strength

    return Graph({c: edges.items() for c, edges in adjacency.items()}), warnings


def component_for(manifest: Path, root: Path) -> str:
    """Name a component after its manifest's directory, relative to root."""
    return manifest.parent.relative_to(root).as_posix()


def discover_manifests(pattern: str, root: Path) -> dict[str, str]:
    """Find manifest files matching a glob and read them.

    Args:
        pattern: Glob relative to root, "**" matches any number of
                 directories (e.g. "**/Dependencies").
        root: Repository root.

    Returns:
        Map of component path → manifest text.

    Raises:
        OSError: If a matching manifest can't be read.
    """
    manifests: dict[str, str] = {}
    matches = glob.glob(pattern, root_dir=root, recursive=True, include_hidden=True)
    for match in sorted(matches):
        path = root / match
        if path.is_file():
            manifests[component_for(path, root)] = path.read_text()
    return manifests
