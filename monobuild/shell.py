"""Shell and git utilities.

Provides a thin wrapper around git subprocess calls plus output helpers.
Command results go to stdout, so warnings and errors are written to stderr.
"""

from __future__ import annotations

import subprocess
import sys
from typing import NoReturn


class GitError(RuntimeError):
    """Raised when a git command needed to find changed files fails."""


def git(*args: str, check: bool = True) -> str:
    """Run a git command and return stdout.

    Args:
        *args: Arguments to pass to git (e.g., "merge-base", "main", "HEAD").
        check: If True (default), raise on non-zero exit.

    Returns:
        Stripped stdout from the git command.

    Raises:
        subprocess.CalledProcessError: If check is True and git fails.
    """
    result = subprocess.run(["git", *args], capture_output=True, text=True, check=check)
    return result.stdout.strip()


def warn(msg: str) -> None:
    """Print a non-fatal warning to stderr."""
    print(f"Warning: {msg}", file=sys.stderr)


def fatal(msg: str) -> NoReturn:
    """Print an error message and exit with code 1.

    Use for unrecoverable errors that should halt the command.
    """
    print(f"ERROR: {msg}", file=sys.stderr)
    sys.exit(1)
