"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from monobuild.graph import Graph
from monobuild.models import Strength

W = Strength.WEAK
S = Strength.STRONG


@pytest.fixture
def example_graph() -> Graph:
    """A small graph mixing weak and strong dependencies."""
    return Graph(
        {
            "a": [("b", W), ("c", W)],
            "b": [("c", W)],
            "c": [],
            "d": [("a", S)],
            "e": [("a", S), ("b", S)],
        }
    )


@pytest.fixture
def impact_graph() -> Graph:
    """Two libraries sharing a third, one app using both, a stack of the app."""
    return Graph(
        {
            "app": [("lib1", W), ("lib2", W)],
            "lib1": [("lib3", W)],
            "lib2": [("lib3", W)],
            "stack": [("app", S)],
        }
    )


def write_manifests(root: Path, manifests: dict[str, str]) -> None:
    """Create a Dependencies file in each component directory."""
    for component, text in manifests.items():
        directory = root / component
        directory.mkdir(parents=True, exist_ok=True)
        (directory / "Dependencies").write_text(text)


@pytest.fixture
def repo(tmp_path: Path) -> Path:
    """A repository layout with per-component manifests."""
    write_manifests(
        tmp_path,
        {
            "apps/app1": "libs/lib1\nlibs/lib2/\n",
            "apps/app2": "libs/lib2\n\n\nlibs/lib3\n",
            "libs/lib1": "libs/lib3\n",
            "libs/lib2": "libs/lib3\n",
            "libs/lib3": "",
            "stacks/stack1": "# frontend\n!apps/app1\n\n# backend\n!apps/app2\n",
        },
    )
    return tmp_path
