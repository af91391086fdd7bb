"""Dependency graph engine.

A Graph is built once from an adjacency description and never changes
afterwards. Vertices are sorted and addressed by a stable integer index;
edges are stored per source vertex keyed by destination index, so there is
at most one edge between any ordered pair of vertices and iteration order
is deterministic (ascending identifier everywhere).

Every transformation other than reverse() returns a Subgraph: a vertex
mask plus an edge mask layered over the same Graph. Subgraphs never copy
vertex or edge data, and chaining them only produces new masks.

Example:
    graph = Graph({"app": [("lib", Strength.WEAK)]})
    graph.vertices()                          → ["app", "lib"]
    graph.filter_vertices(lambda v: v != "lib").items()
                                              → [("app", [])]
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Mapping
from typing import Protocol, Union

from .models import Strength

EdgeList = list[tuple[str, Strength]]
Adjacency = Union[
    Mapping[str, Iterable[tuple[str, Strength]]],
    Iterable[tuple[str, Iterable[tuple[str, Strength]]]],
]
VertexPredicate = Callable[[str], bool]
EdgePredicate = Callable[[Strength], bool]


class GraphView(Protocol):
    """The read-only surface shared by Graph and Subgraph.

    Renderers, impact analysis and tests only rely on this, so a full Graph
    and any masked view of it can be used interchangeably.
    """

    def vertices(self) -> Iterator[str]: ...

    def edges(self, vertex: str) -> EdgeList: ...

    def items(self) -> Iterator[tuple[str, EdgeList]]: ...

    def filter_vertices(self, predicate: VertexPredicate) -> Subgraph: ...

    def filter_edges(self, predicate: EdgePredicate) -> Subgraph: ...

    def roots(self) -> Subgraph: ...

    def expand_via(self, predicate: EdgePredicate) -> Subgraph: ...

    def expand(self) -> Subgraph: ...


def _always(_: object) -> bool:
    return True


class Graph:
    """An immutable directed graph with weak and strong edges.

    Args:
        adjacency: Map (or iterable of pairs) of vertex → iterable of
                   (destination, strength). Destinations that never appear
                   as a source are added as vertices with no edges. A
                   repeated destination for the same source keeps the last
                   strength given.
    """

    __slots__ = ("_vertices", "_index", "_edges")

    def __init__(self, adjacency: Adjacency | None = None) -> None:
        pairs = adjacency.items() if isinstance(adjacency, Mapping) else adjacency
        # Make a local copy so the input can be a one-shot iterator
        entries = [(vertex, list(edges)) for vertex, edges in pairs or ()]

        # Collect every vertex mentioned as a source or a destination
        names: set[str] = set()
        for vertex, edges in entries:
            names.add(vertex)
            names.update(to for to, _ in edges)

        self._vertices: tuple[str, ...] = tuple(sorted(names))
        self._index: dict[str, int] = {v: i for i, v in enumerate(self._vertices)}

        unsorted: list[dict[int, Strength]] = [{} for _ in self._vertices]
        for vertex, edges in entries:
            outgoing = unsorted[self._index[vertex]]
            for to, strength in edges:
                outgoing[self._index[to]] = strength

        # Destination indexes follow identifier order, so sorting by index
        # gives ascending destination identifiers
        self._edges: tuple[dict[int, Strength], ...] = tuple(
            dict(sorted(outgoing.items())) for outgoing in unsorted
        )

    @classmethod
    def _from_parts(
        cls, vertices: tuple[str, ...], edges: tuple[dict[int, Strength], ...]
    ) -> Graph:
        graph = cls.__new__(cls)
        graph._vertices = vertices
        graph._index = {v: i for i, v in enumerate(vertices)}
        graph._edges = edges
        return graph

    # Inspect graph

    def __len__(self) -> int:
        return len(self._vertices)

    def __contains__(self, vertex: object) -> bool:
        return vertex in self._index

    def index_of(self, vertex: str) -> int:
        """Return the stable index of a vertex.

        Raises:
            KeyError: If the vertex is not part of the graph.
        """
        return self._index[vertex]

    def vertices(self) -> Iterator[str]:
        """Iterate over all vertices in ascending order."""
        return iter(self._vertices)

    def edges(self, vertex: str) -> EdgeList:
        """Return the outgoing (destination, strength) edges of a vertex."""
        outgoing = self._edges[self._index[vertex]]
        return [(self._vertices[to], strength) for to, strength in outgoing.items()]

    def items(self) -> Iterator[tuple[str, EdgeList]]:
        """Iterate over (vertex, outgoing edges) pairs in ascending order."""
        for vertex in self._vertices:
            yield vertex, self.edges(vertex)

    def __iter__(self) -> Iterator[tuple[str, EdgeList]]:
        return self.items()

    # Transform graph

    def reverse(self) -> Graph:
        """Return a new graph with every edge pointing the other way.

        Vertices and strengths are preserved. Reversing the dependency graph
        gives the impact graph: who is affected when a vertex changes.
        """
        edges: list[dict[int, Strength]] = [{} for _ in self._vertices]
        for source, outgoing in enumerate(self._edges):
            for target, strength in outgoing.items():
                edges[target][source] = strength
        return Graph._from_parts(
            self._vertices, tuple(dict(sorted(e.items())) for e in edges)
        )

    # Scope graph

    def as_subgraph(self) -> Subgraph:
        """Return a view including every vertex and every edge."""
        vertex_mask = (True,) * len(self._vertices)
        edge_mask = frozenset(
            (source, target)
            for source, outgoing in enumerate(self._edges)
            for target in outgoing
        )
        return Subgraph(self, vertex_mask, edge_mask)

    def filter_vertices(self, predicate: VertexPredicate) -> Subgraph:
        return self.as_subgraph().filter_vertices(predicate)

    def filter_edges(self, predicate: EdgePredicate) -> Subgraph:
        return self.as_subgraph().filter_edges(predicate)

    def roots(self) -> Subgraph:
        return self.as_subgraph().roots()

    def expand_via(self, predicate: EdgePredicate) -> Subgraph:
        return self.as_subgraph().expand_via(predicate)

    def expand(self) -> Subgraph:
        return self.as_subgraph().expand()

    # Compare and debug

    def __eq__(self, other: object) -> bool:
        return _views_equal(self, other)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return _debug("Graph", self)


class Subgraph:
    """A read-only, masked view over a Graph.

    Holds a reference to the underlying graph, one inclusion flag per vertex
    index and the set of included (from index, to index) edge pairs. An
    edge is only ever included when both of its endpoints are.

    Subgraphs are created by Graph/Subgraph operations rather than directly.
    """

    __slots__ = ("_graph", "_vertex_mask", "_edge_mask")

    def __init__(
        self,
        graph: Graph,
        vertex_mask: tuple[bool, ...],
        edge_mask: frozenset[tuple[int, int]],
    ) -> None:
        self._graph = graph
        self._vertex_mask = vertex_mask
        self._edge_mask = edge_mask

    @property
    def graph(self) -> Graph:
        """The graph this view is layered over."""
        return self._graph

    # Inspect graph

    def __len__(self) -> int:
        return sum(self._vertex_mask)

    def __contains__(self, vertex: object) -> bool:
        index = self._graph._index.get(vertex)  # type: ignore[arg-type]
        return index is not None and self._vertex_mask[index]

    def vertices(self) -> Iterator[str]:
        """Iterate over included vertices in ascending order."""
        for vertex, included in zip(self._graph._vertices, self._vertex_mask):
            if included:
                yield vertex

    def edges(self, vertex: str) -> EdgeList:
        """Return the included outgoing (destination, strength) edges of a vertex."""
        graph = self._graph
        source = graph._index[vertex]
        return [
            (graph._vertices[target], strength)
            for target, strength in graph._edges[source].items()
            if (source, target) in self._edge_mask
        ]

    def items(self) -> Iterator[tuple[str, EdgeList]]:
        """Iterate over included (vertex, included outgoing edges) pairs."""
        for vertex in self.vertices():
            yield vertex, self.edges(vertex)

    def __iter__(self) -> Iterator[tuple[str, EdgeList]]:
        return self.items()

    # Scope graph

    def filter_vertices(self, predicate: VertexPredicate) -> Subgraph:
        """Remove vertices failing the predicate, along with their edges.

        Already excluded vertices stay excluded; the predicate is only
        evaluated for vertices that are still included.
        """
        vertex_mask = tuple(
            included and predicate(vertex)
            for vertex, included in zip(self._graph._vertices, self._vertex_mask)
        )
        edge_mask = frozenset(
            (source, target)
            for source, target in self._edge_mask
            if vertex_mask[source] and vertex_mask[target]
        )
        return Subgraph(self._graph, vertex_mask, edge_mask)

    def filter_edges(self, predicate: EdgePredicate) -> Subgraph:
        """Remove edges whose strength fails the predicate.

        Vertices are left alone, even when all of their edges are removed.
        """
        outgoing = self._graph._edges
        edge_mask = frozenset(
            (source, target)
            for source, target in self._edge_mask
            if predicate(outgoing[source][target])
        )
        return Subgraph(self._graph, self._vertex_mask, edge_mask)

    def roots(self) -> Subgraph:
        """Select the included vertices that have no included incoming edge.

        Edges that are masked out don't count as incoming. The result has
        no edges at all.
        """
        has_incoming = {target for _, target in self._edge_mask}
        vertex_mask = tuple(
            included and index not in has_incoming
            for index, included in enumerate(self._vertex_mask)
        )
        return Subgraph(self._graph, vertex_mask, frozenset())

    def expand_via(self, predicate: EdgePredicate) -> Subgraph:
        """Grow the view along original edges until nothing more is added.

        Starting from the included vertices, every original outgoing edge
        whose strength passes the predicate is added together with its
        destination, and the destination is expanded in the next pass. Each
        vertex is expanded at most once, so cycles terminate.

        Args:
            predicate: Decides whether an edge of the given strength is
                       followed.

        Returns:
            A new Subgraph containing the current view plus everything
            reachable from it via qualifying edges.
        """
        outgoing = self._graph._edges
        vertex_mask = list(self._vertex_mask)
        edge_mask = set(self._edge_mask)
        expanded = [False] * len(vertex_mask)

        frontier = [index for index, included in enumerate(vertex_mask) if included]
        while frontier:
            discovered: list[int] = []
            for source in frontier:
                if expanded[source]:
                    continue
                expanded[source] = True

                for target, strength in outgoing[source].items():
                    if (source, target) in edge_mask or not predicate(strength):
                        continue
                    vertex_mask[target] = True
                    edge_mask.add((source, target))
                    if not expanded[target]:
                        discovered.append(target)
            frontier = discovered

        return Subgraph(self._graph, tuple(vertex_mask), frozenset(edge_mask))

    def expand(self) -> Subgraph:
        """Grow the view to everything reachable from it."""
        return self.expand_via(_always)

    # Compare and debug

    def __eq__(self, other: object) -> bool:
        return _views_equal(self, other)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return _debug("Subgraph", self)


def _views_equal(view: GraphView, other: object) -> bool:
    """Compare two views by their ordered vertices and ordered edges."""
    if not isinstance(other, (Graph, Subgraph)):
        return NotImplemented
    # Walk both in lockstep; a length mismatch shows up as a missing item
    mine, theirs = view.items(), other.items()
    sentinel = object()
    while True:
        a, b = next(mine, sentinel), next(theirs, sentinel)
        if a is sentinel or b is sentinel:
            return a is b
        if a != b:
            return False


def _debug(name: str, view: GraphView) -> str:
    vertices = list(view.vertices())
    edges = [
        (vertex, to, strength.name)
        for vertex, outgoing in view.items()
        for to, strength in outgoing
    ]
    return f"{name}(vertices={vertices!r}, edges={edges!r})"
