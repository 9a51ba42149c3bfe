"""Tests for the command-line entry point."""

import sys

import pytest
from pathlib import Path

from codex_memories import __main__ as cli


@pytest.fixture
def workspace(tmp_path: Path, monkeypatch) -> Path:
    repo = tmp_path / "repo"
    (repo / ".git").mkdir(parents=True)
    monkeypatch.chdir(repo)
    monkeypatch.setenv("CODEX_HOME", str(tmp_path / "home"))
    return repo


class TestMain:
    def test_show_empty(self, workspace: Path, monkeypatch, capsys):
        monkeypatch.setattr(sys, "argv", ["codex-memories", "show"])
        cli.main()
        assert "(no memories yet)" in capsys.readouterr().out

    def test_show_merged(self, workspace: Path, monkeypatch, capsys):
        store = workspace / ".codex" / "memories.md"
        store.parent.mkdir()
        store.write_text("# Memories\n- Uses tabs\n", encoding="utf-8")
        monkeypatch.setattr(sys, "argv", ["codex-memories"])
        cli.main()
        assert capsys.readouterr().out == "## Memories\n- Uses tabs\n"

    def test_paths(self, tmp_path: Path, workspace: Path, monkeypatch, capsys):
        monkeypatch.setattr(sys, "argv", ["codex-memories", "paths"])
        cli.main()
        out = capsys.readouterr().out.splitlines()
        assert out[0] == f"read   {tmp_path / 'home' / 'memories.md'}"
        assert out[-1] == f"write  {workspace.resolve() / '.codex' / 'memories.md'}"

    def test_unknown_command(self, workspace: Path, monkeypatch, capsys):
        monkeypatch.setattr(sys, "argv", ["codex-memories", "bogus"])
        with pytest.raises(SystemExit) as exc:
            cli.main()
        assert exc.value.code == 1
        assert "Usage" in capsys.readouterr().out
