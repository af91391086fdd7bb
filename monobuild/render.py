"""Output formats for graphs and graph views.

All renderers only use the ordered iteration every view provides, so they
produce byte-for-byte identical output for a Graph and an equal Subgraph.
"""

from __future__ import annotations

import json

from .graph import GraphView
from .models import Strength


def to_text(view: GraphView, full: bool = False) -> str:
    """Render one line per component: "<component>: <dep>, <dep>, ...".

    In full mode strong dependencies are prefixed with "!", which makes the
    output a valid repo manifest that can be read back with --file.
    """
    lines: list[str] = []
    for component, edges in view.items():
        deps = [
            f"!{dep}" if full and strength is Strength.STRONG else dep
            for dep, strength in edges
        ]
        lines.append(f"{component}: {', '.join(deps)}\n")
    return "".join(lines)


def to_dot(view: GraphView, schedule: bool = False) -> str:
    """Render the view in the DOT language for GraphViz.

    Weak edges are drawn dashed and strong edges solid. Components with no
    edges are listed on their own so they still show up.

    Args:
        view: Graph or view to render.
        schedule: Use the schedule layout (left to right, boxed nodes)
                  instead of the dependency graph layout.
    """
    if schedule:
        lines = ["digraph schedule {", '  rankdir="LR"', "  node [shape=box]"]
    else:
        lines = ["digraph dependencies {"]

    for component, edges in view.items():
        if not edges:
            lines.append(f'  "{component}"')
            continue
        for dep, strength in edges:
            style = " [style=dashed]" if strength is Strength.WEAK else ""
            lines.append(f'  "{component}" -> "{dep}"{style}')

    lines.append("}")
    return "\n".join(lines) + "\n"


def to_matrix(view: GraphView) -> str:
    """Render the components as a JSON array for a GitHub Actions matrix."""
    return json.dumps(list(view.vertices()))
