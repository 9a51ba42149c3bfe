"""Where memories live: the global store and the per-project store."""

from __future__ import annotations

from pathlib import Path

from codex_memories.config import MemoriesConfig
from codex_memories.git_info import get_git_repo_root

MEMORIES_DIRNAME = ".codex"
MEMORIES_FILENAME = "memories.md"


def global_memories_path(config: MemoriesConfig) -> Path:
    return config.codex_home / MEMORIES_FILENAME


def repo_memories_path(cwd: Path) -> Path | None:
    """Project store under the enclosing git root, or None outside a repo."""
    base = cwd
    while not base.is_dir():
        if base == base.parent:
            return None
        base = base.parent
    repo_root = get_git_repo_root(base)
    if repo_root is None:
        return None
    return repo_root / MEMORIES_DIRNAME / MEMORIES_FILENAME


def memory_paths(config: MemoriesConfig) -> list[Path]:
    """Stores to read, global first."""
    global_path = global_memories_path(config)
    paths = [global_path]
    repo_path = repo_memories_path(config.cwd)
    if repo_path is not None and repo_path != global_path:
        paths.append(repo_path)
    return paths


def memory_write_path(config: MemoriesConfig, cwd: Path) -> Path:
    """Store new notes go to: the project store if any, else the global one."""
    return repo_memories_path(cwd) or global_memories_path(config)
