"""Impact analysis: from changed files to the components that need building.

The dependency graph points from a component to what it depends on.
Reversing it gives the impact graph, pointing from a component to everything
that depends on it; expanding the changed components along the impact graph
yields every component affected by the change.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import PurePosixPath

from .graph import Graph, GraphView, Subgraph
from .models import Strength


class ScopeError(ValueError):
    """Raised when scoping output to a component that doesn't exist."""

    def __init__(self, component: str) -> None:
        super().__init__(f"Cannot scope to '{component}', not a component")
        self.component = component


def is_strong(strength: Strength) -> bool:
    return strength is Strength.STRONG


def changed_components(components: Iterable[str], files: Iterable[str]) -> set[str]:
    """Map changed file paths to the components that own them.

    A file belongs to the component with the longest path prefix matching
    it. Prefixes are compared segment by segment, so "libs/lib1" owns
    "libs/lib1/src/a.py" but not "libs/lib10/a.py". Files outside every
    component are ignored.

    Args:
        components: Component paths relative to the repository root.
        files: Changed file paths relative to the repository root.

    Returns:
        Set of components with at least one changed file.

    Example:
        changed_components(["app", "app/plugin"], ["app/plugin/x.py"])
        → {"app/plugin"}
    """
    # Longest paths first so nested components win over their parents
    owners = sorted(
        ((PurePosixPath(c).parts, c) for c in components),
        key=lambda owner: len(owner[0]),
        reverse=True,
    )

    changed: set[str] = set()
    for file in files:
        parts = PurePosixPath(file).parts
        for prefix, component in owners:
            # The repository root "." owns everything
            if not prefix or parts[: len(prefix)] == prefix:
                changed.add(component)
                break
    return changed


def impacted(graph: Graph, changed: Iterable[str]) -> set[str]:
    """Find every component affected by changes to the given components.

    Affected components are the changed components themselves plus every
    component depending on one of them, directly or transitively, through
    edges of any strength. Names not in the graph are ignored.
    """
    changed = set(changed)
    impact_graph = graph.reverse()
    return set(impact_graph.filter_vertices(lambda v: v in changed).expand().vertices())


def select(graph: Graph, scope: str | None = None, top_level: bool = False) -> Subgraph:
    """Select the part of the graph output should be restricted to.

    Args:
        graph: The full dependency graph.
        scope: Restrict to this component and everything it depends on.
        top_level: Restrict to components nothing else depends on.

    Raises:
        ScopeError: If scope is not a vertex of the graph.
    """
    selection = graph.as_subgraph()

    if scope is not None:
        if scope not in graph:
            raise ScopeError(scope)
        selection = selection.filter_vertices(lambda v: v == scope).expand()

    if top_level:
        # Top level is judged against the whole graph, not the scoped view
        roots = set(graph.roots().vertices())
        selection = selection.filter_vertices(lambda v: v in roots)

    return selection


def affected_view(
    graph: Graph,
    selection: GraphView,
    changed: Iterable[str],
    rebuild_strong: bool = False,
) -> Subgraph:
    """Restrict a selection of the dependency graph to affected components.

    With rebuild_strong, the result additionally grows along strong
    dependencies: anything an affected component strongly depends on is
    rebuilt too, even if no change reached it.

    Args:
        graph: The full dependency graph.
        selection: A view of the graph to restrict (see select()).
        changed: Components with changed files.
        rebuild_strong: Also include strong dependencies of affected
                        components.
    """
    affected = impacted(graph, changed)
    result = selection.filter_vertices(lambda v: v in affected)

    # Needs to come after the top level selection
    if rebuild_strong:
        result = result.expand_via(is_strong)

    return result


def schedule(view: GraphView) -> Subgraph:
    """Keep only the strong edges, which are the build order constraints.

    Weak edges still count for impact, but the dependent can build in
    parallel with its dependency, so they are not part of the schedule.
    """
    return view.filter_edges(is_strong)
