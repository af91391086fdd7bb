"""Data models for monobuild.

These Pydantic models (and the dependency strength enum) represent the
small value types passed between manifest reading, the graph engine and
the command line.
"""

from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class Strength(str, Enum):
    """Strength of a dependency edge.

    WEAK edges only propagate impact: a change to the dependency marks the
    dependent as affected, but both can build in parallel. STRONG edges are
    build-order constraints: the dependent can only build once the
    dependency's build has finished.
    """

    WEAK = "weak"
    STRONG = "strong"


class ManifestWarning(BaseModel):
    """A non-fatal problem found while reading dependency manifests.

    Attributes:
        kind: "unknown" for a dependency on a component that has no manifest,
              "bad_line" for a repo manifest line that can't be parsed.
        component: The dependent component (unknown warnings only).
        dependency: The unknown dependency name (unknown warnings only).
        line_number: Index of the offending line (bad_line warnings only).
        line: The offending line text (bad_line warnings only).
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["unknown", "bad_line"]
    component: str = ""
    dependency: str = ""
    line_number: int = 0
    line: str = ""

    @classmethod
    def unknown(cls, component: str, dependency: str) -> ManifestWarning:
        return cls(kind="unknown", component=component, dependency=dependency)

    @classmethod
    def bad_line(cls, line_number: int, line: str) -> ManifestWarning:
        return cls(kind="bad_line", line_number=line_number, line=line)

    def __str__(self) -> str:
        if self.kind == "unknown":
            return f"Unknown dependency {self.dependency} of {self.component}."
        return (
            f"Bad line format: {self.line_number}: '{self.line}' "
            "expected 'component: dependency, dependency, dependency, ...'"
        )


class OutputOptions(BaseModel):
    """How the result of print or diff is shown.

    Attributes:
        dependencies: Show the dependency graph instead of the build
                      schedule (strong edges only).
        dot: Render in the DOT language for GraphViz.
        full: Render the dependency graph with strengths, in repo
              manifest format.
        github_matrix: Render the components as a JSON array.
        scope: Only show this component and what it depends on.
        top_level: Only show components nothing depends on.
    """

    dependencies: bool = False
    dot: bool = False
    full: bool = False
    github_matrix: bool = False
    scope: str | None = None
    top_level: bool = False


class Settings(BaseModel):
    """Configuration read from [tool.monobuild] in pyproject.toml.

    Attributes:
        dependency_files: Glob pattern used to find dependency manifests.
        base_branch: Branch to diff against in feature branch mode.
        base_commit: Commit to diff against in main branch mode.
    """

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    dependency_files: str = Field(default="**/Dependencies", alias="dependency-files")
    base_branch: str = Field(default="master", alias="base-branch")
    base_commit: str = Field(default="HEAD^1", alias="base-commit")
