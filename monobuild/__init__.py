"""monobuild - decide what to rebuild in a monorepo from its dependency graph."""

from monobuild.graph import Graph, GraphView, Subgraph
from monobuild.models import Strength

__all__ = ["Graph", "GraphView", "Strength", "Subgraph"]
