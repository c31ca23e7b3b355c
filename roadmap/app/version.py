"""Runtime version info shown in the Streamlit sidebar and ``--version``.

The commit is looked up with ``git`` on demand so a deployed app always
shows which code it is running.
"""
from __future__ import annotations

import subprocess
from pathlib import Path

from core import __version__ as APP_VERSION

_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent


def _git(*args: str) -> str:
    """Run a git query in the project root; 'unknown' when git is unavailable."""
    try:
        result = subprocess.run(
            ["git", *args],
            cwd=str(_PROJECT_ROOT),
            capture_output=True,
            text=True,
            timeout=5,
        )
    except (OSError, subprocess.SubprocessError):
        return "unknown"
    if result.returncode != 0:
        return "unknown"
    return result.stdout.strip() or "unknown"


def get_git_commit() -> str:
    return _git("rev-parse", "--short", "HEAD")


def get_git_branch() -> str:
    return _git("rev-parse", "--abbrev-ref", "HEAD")


def version_label() -> str:
    """Return e.g. 'v0.3.0 (abc1234 @ main)', or just 'v0.3.0' outside a checkout."""
    commit = get_git_commit()
    if commit == "unknown":
        return f"v{APP_VERSION}"
    return f"v{APP_VERSION} ({commit} @ {get_git_branch()})"
