"""Tests for monobuild.cli."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner

from monobuild.cli import cli
from monobuild.shell import GitError

SCHEDULE = (
    "apps/app1: \n"
    "apps/app2: \n"
    "libs/lib1: \n"
    "libs/lib2: \n"
    "libs/lib3: \n"
    "stacks/stack1: apps/app1, apps/app2\n"
)

FULL = (
    "apps/app1: libs/lib1, libs/lib2\n"
    "apps/app2: libs/lib2, libs/lib3\n"
    "libs/lib1: libs/lib3\n"
    "libs/lib2: libs/lib3\n"
    "libs/lib3: \n"
    "stacks/stack1: !apps/app1, !apps/app2\n"
)


@pytest.fixture
def runner(repo: Path, monkeypatch: pytest.MonkeyPatch) -> CliRunner:
    monkeypatch.chdir(repo)
    return CliRunner()


class TestPrint:
    def test_schedule(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["print"])
        assert result.exit_code == 0
        assert result.output == SCHEDULE

    def test_dependencies(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["print", "--dependencies", "--scope", "apps/app1"])
        assert result.exit_code == 0
        assert result.output == (
            "apps/app1: libs/lib1, libs/lib2\n"
            "libs/lib1: libs/lib3\n"
            "libs/lib2: libs/lib3\n"
            "libs/lib3: \n"
        )

    def test_full(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["print", "--full"])
        assert result.exit_code == 0
        assert result.output == FULL

    def test_top_level(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["print", "--top-level"])
        assert result.output == "stacks/stack1: \n"

    def test_dot(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["print", "--dot", "--scope", "stacks/stack1"])
        assert result.exit_code == 0
        assert result.output.startswith("digraph schedule {\n")
        assert '  "stacks/stack1" -> "apps/app1"\n' in result.output

    def test_unknown_scope(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["print", "--scope", "nope"])
        assert result.exit_code == 1
        assert "Cannot scope to 'nope', not a component" in result.output

    def test_repo_manifest(self, runner: CliRunner, tmp_path: Path) -> None:
        manifest = tmp_path / "manifest.txt"
        manifest.write_text("app: lib, !db\n")

        result = runner.invoke(cli, ["print", "-f", str(manifest)])
        assert result.exit_code == 0
        assert result.output == "app: db\ndb: \nlib: \n"

    def test_full_output_reads_back(self, runner: CliRunner, tmp_path: Path) -> None:
        manifest = tmp_path / "manifest.txt"
        manifest.write_text(runner.invoke(cli, ["print", "--full"]).output)

        result = runner.invoke(cli, ["print", "--full", "--file", str(manifest)])
        assert result.output == FULL

    def test_dependency_files_from_settings(
        self, runner: CliRunner, repo: Path
    ) -> None:
        (repo / "svc").mkdir()
        (repo / "svc" / "deps.txt").write_text("!db\n")
        (repo / "db").mkdir()
        (repo / "db" / "deps.txt").write_text("")
        (repo / "pyproject.toml").write_text(
            '[tool.monobuild]\ndependency-files = "**/deps.txt"\n'
        )

        result = runner.invoke(cli, ["print"])
        assert result.output == "db: \nsvc: db\n"


class TestDiff:
    def test_changed_files_from_stdin(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["diff", "-"], input="libs/lib1/src/a.c\n")
        assert result.exit_code == 0
        assert result.output == (
            "apps/app1: \nlibs/lib1: \nstacks/stack1: apps/app1\n"
        )

    def test_blank_stdin_lines_are_ignored(
        self, runner: CliRunner, repo: Path
    ) -> None:
        # A manifest at the root makes "." a component owning every path
        (repo / "Dependencies").write_text("")

        result = runner.invoke(cli, ["diff", "-"], input="libs/lib1/src/a.c\n\n  \n")
        assert result.exit_code == 0
        assert result.output == (
            "apps/app1: \nlibs/lib1: \nstacks/stack1: apps/app1\n"
        )

    def test_github_matrix(self, runner: CliRunner) -> None:
        result = runner.invoke(
            cli,
            ["diff", "-", "--top-level", "--github-matrix"],
            input="libs/lib3/README\n",
        )
        assert result.exit_code == 0
        assert result.output == '["stacks/stack1"]\n'

    def test_rebuild_strong(self, runner: CliRunner) -> None:
        result = runner.invoke(
            cli, ["diff", "-", "--rebuild-strong"], input="libs/lib1/a.c\n"
        )
        assert result.exit_code == 0
        assert result.output == (
            "apps/app1: \n"
            "apps/app2: \n"
            "libs/lib1: \n"
            "stacks/stack1: apps/app1, apps/app2\n"
        )

    def test_nothing_affected(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["diff", "-"], input="README.md\n")
        assert result.exit_code == 0
        assert result.output == ""

    @patch("monobuild.cli.changed_files")
    def test_changed_files_from_git(
        self, mock_changed: MagicMock, runner: CliRunner
    ) -> None:
        mock_changed.return_value = ["libs/lib2/x.c"]

        result = runner.invoke(cli, ["diff", "--base-branch", "main"])
        assert result.exit_code == 0
        assert result.output == (
            "apps/app1: \napps/app2: \nlibs/lib2: \n"
            "stacks/stack1: apps/app1, apps/app2\n"
        )
        mock_changed.assert_called_once_with(False, "main", "HEAD^1")

    @patch("monobuild.cli.changed_files")
    def test_main_branch_uses_configured_base(
        self, mock_changed: MagicMock, runner: CliRunner, repo: Path
    ) -> None:
        mock_changed.return_value = []
        (repo / "pyproject.toml").write_text(
            '[tool.monobuild]\nbase-commit = "HEAD~3"\n'
        )

        result = runner.invoke(cli, ["diff", "--main-branch"])
        assert result.exit_code == 0
        mock_changed.assert_called_once_with(True, "master", "HEAD~3")

    @patch("monobuild.cli.changed_files")
    def test_git_failure(self, mock_changed: MagicMock, runner: CliRunner) -> None:
        mock_changed.side_effect = GitError(
            "Cannot find merge base with branch master: fatal: not a git repository"
        )

        result = runner.invoke(cli, ["diff"])
        assert result.exit_code == 1
        assert "Cannot find merge base with branch master" in result.output

    def test_only_hyphen_source(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["diff", "changes.txt"])
        assert result.exit_code == 2
