"""Tests for configuration loading."""

import pytest
from pathlib import Path

from codex_memories.config import load_config

_ENV_KEYS = [
    "CODEX_MEMORIES_BASE_URL",
    "CODEX_MEMORIES_MODEL",
    "CODEX_MEMORIES_TIMEOUT",
    "CODEX_MEMORIES_SOURCE",
    "CODEX_MEMORIES_LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def clean_env(tmp_path: Path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("CODEX_HOME", str(tmp_path / "home"))
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


class TestConfig:
    def test_defaults(self, tmp_path: Path):
        config = load_config()
        assert config.codex_home == tmp_path / "home"
        assert config.cwd == Path.cwd()
        assert config.provider.base_url == "https://api.openai.com/v1"
        assert config.provider.model == "gpt-4o-mini"
        assert config.provider.api_key_env == "OPENAI_API_KEY"
        assert config.provider.timeout == 300
        assert config.session_source == "cli"
        assert config.log_level == "INFO"

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("CODEX_MEMORIES_MODEL", "gpt-4.1")
        monkeypatch.setenv("CODEX_MEMORIES_TIMEOUT", "60")
        monkeypatch.setenv("CODEX_MEMORIES_SOURCE", "exec")

        config = load_config()
        assert config.provider.model == "gpt-4.1"
        assert config.provider.timeout == 60
        assert config.session_source == "exec"

    def test_toml_file(self, tmp_path: Path):
        toml_path = tmp_path / "custom.toml"
        toml_path.write_text("""
log_level = "DEBUG"

[provider]
base_url = "http://localhost:8080/v1"
model = "local-model"
api_key_env = "LOCAL_KEY"
timeout = 30
""")
        config = load_config(toml_path)
        assert config.provider.base_url == "http://localhost:8080/v1"
        assert config.provider.model == "local-model"
        assert config.provider.api_key_env == "LOCAL_KEY"
        assert config.provider.timeout == 30
        assert config.log_level == "DEBUG"

    def test_env_overrides_toml(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("CODEX_MEMORIES_MODEL", "env-model")

        toml_path = tmp_path / "memories.toml"
        toml_path.write_text("""
[provider]
model = "toml-model"
""")
        config = load_config(toml_path)
        assert config.provider.model == "env-model"  # env wins

    def test_searches_cwd_then_codex_home(self, tmp_path: Path):
        home = tmp_path / "home"
        home.mkdir()
        (home / "memories.toml").write_text('session_source = "vscode"\n')
        assert load_config().session_source == "vscode"

        (tmp_path / "memories.toml").write_text('session_source = "mcp"\n')
        assert load_config().session_source == "mcp"
