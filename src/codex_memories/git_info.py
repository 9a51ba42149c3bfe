"""Git repository discovery."""

from __future__ import annotations

from pathlib import Path


def get_git_repo_root(base: Path) -> Path | None:
    """Walk up from base, return the first directory containing a `.git` entry.

    `.git` may be a directory (normal checkout) or a file (worktree, submodule).
    """
    p = base.resolve()
    while True:
        if (p / ".git").exists():
            return p
        if p == p.parent:
            return None
        p = p.parent
