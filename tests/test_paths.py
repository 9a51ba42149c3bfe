"""Tests for memory path resolution and git root discovery."""

from __future__ import annotations

from pathlib import Path

import pytest

from codex_memories.config import MemoriesConfig
from codex_memories.git_info import get_git_repo_root
from codex_memories.memory.paths import (
    MEMORIES_FILENAME,
    memory_paths,
    memory_write_path,
    repo_memories_path,
)


@pytest.fixture
def repo(tmp_path: Path) -> Path:
    root = tmp_path / "repo"
    (root / ".git").mkdir(parents=True)
    (root / "src" / "pkg").mkdir(parents=True)
    return root


@pytest.fixture
def no_repo(monkeypatch):
    monkeypatch.setattr("codex_memories.memory.paths.get_git_repo_root", lambda base: None)


class TestGitRepoRoot:
    def test_finds_root_from_subdir(self, repo: Path):
        assert get_git_repo_root(repo / "src" / "pkg") == repo.resolve()

    def test_git_file_counts(self, tmp_path: Path):
        worktree = tmp_path / "wt"
        worktree.mkdir()
        (worktree / ".git").write_text("gitdir: /elsewhere\n", encoding="utf-8")
        assert get_git_repo_root(worktree) == worktree.resolve()

    def test_nearest_root_wins(self, repo: Path):
        nested = repo / "vendor" / "lib"
        (nested / ".git").mkdir(parents=True)
        assert get_git_repo_root(nested) == nested.resolve()


class TestRepoMemoriesPath:
    def test_inside_repo(self, repo: Path):
        path = repo_memories_path(repo / "src")
        assert path == repo.resolve() / ".codex" / MEMORIES_FILENAME

    def test_missing_cwd_uses_nearest_existing_ancestor(self, repo: Path):
        path = repo_memories_path(repo / "src" / "gone" / "deeper")
        assert path == repo.resolve() / ".codex" / MEMORIES_FILENAME

    def test_file_cwd_uses_parent(self, repo: Path):
        f = repo / "src" / "main.py"
        f.write_text("", encoding="utf-8")
        assert repo_memories_path(f) == repo.resolve() / ".codex" / MEMORIES_FILENAME

    def test_outside_repo(self, tmp_path: Path, no_repo):
        assert repo_memories_path(tmp_path) is None


class TestMemoryPaths:
    def test_global_only_outside_repo(self, tmp_path: Path, no_repo):
        config = MemoriesConfig(codex_home=tmp_path / "home", cwd=tmp_path)
        assert memory_paths(config) == [tmp_path / "home" / MEMORIES_FILENAME]

    def test_global_then_project(self, tmp_path: Path, repo: Path):
        config = MemoriesConfig(codex_home=tmp_path / "home", cwd=repo)
        assert memory_paths(config) == [
            tmp_path / "home" / MEMORIES_FILENAME,
            repo.resolve() / ".codex" / MEMORIES_FILENAME,
        ]

    def test_project_equal_to_global_listed_once(self, repo: Path):
        config = MemoriesConfig(codex_home=repo.resolve() / ".codex", cwd=repo)
        assert memory_paths(config) == [repo.resolve() / ".codex" / MEMORIES_FILENAME]


class TestMemoryWritePath:
    def test_prefers_project(self, tmp_path: Path, repo: Path):
        config = MemoriesConfig(codex_home=tmp_path / "home", cwd=tmp_path)
        assert memory_write_path(config, repo) == repo.resolve() / ".codex" / MEMORIES_FILENAME

    def test_falls_back_to_global(self, tmp_path: Path, no_repo):
        config = MemoriesConfig(codex_home=tmp_path / "home", cwd=tmp_path)
        assert memory_write_path(config, tmp_path) == tmp_path / "home" / MEMORIES_FILENAME
