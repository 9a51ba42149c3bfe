"""Configuration loading from environment variables and memories.toml."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib
from pathlib import Path

_DEFAULT_CODEX_HOME = Path.home() / ".codex"
_CONFIG_FILENAME = "memories.toml"


@dataclass
class ProviderConfig:
    """Model endpoint used for memory extraction."""

    base_url: str = "https://api.openai.com/v1"
    model: str = "gpt-4o-mini"
    api_key_env: str = "OPENAI_API_KEY"
    timeout: int = 300


@dataclass
class MemoriesConfig:
    """Top-level configuration."""

    codex_home: Path = _DEFAULT_CODEX_HOME
    cwd: Path = field(default_factory=Path.cwd)
    provider: ProviderConfig = field(default_factory=ProviderConfig)
    session_source: str = "cli"
    log_level: str = "INFO"


def load_config(config_path: Path | None = None) -> MemoriesConfig:
    """Load configuration from environment variables and optional memories.toml.

    Priority: environment variables > memories.toml > defaults.
    """
    codex_home = Path(os.getenv("CODEX_HOME", str(_DEFAULT_CODEX_HOME)))

    file_data: dict = {}
    if config_path and config_path.exists():
        file_data = tomllib.loads(config_path.read_text())
    else:
        # Search current dir and the codex home
        for candidate in [Path.cwd() / _CONFIG_FILENAME, codex_home / _CONFIG_FILENAME]:
            if candidate.exists():
                file_data = tomllib.loads(candidate.read_text())
                break

    provider_data = file_data.get("provider", {})

    config = MemoriesConfig(
        codex_home=codex_home,
        cwd=Path.cwd(),
        provider=ProviderConfig(
            base_url=os.getenv(
                "CODEX_MEMORIES_BASE_URL",
                provider_data.get("base_url", "https://api.openai.com/v1"),
            ),
            model=os.getenv("CODEX_MEMORIES_MODEL", provider_data.get("model", "gpt-4o-mini")),
            api_key_env=provider_data.get("api_key_env", "OPENAI_API_KEY"),
            timeout=int(os.getenv("CODEX_MEMORIES_TIMEOUT", provider_data.get("timeout", 300))),
        ),
        session_source=os.getenv(
            "CODEX_MEMORIES_SOURCE", file_data.get("session_source", "cli")
        ),
        log_level=os.getenv("CODEX_MEMORIES_LOG_LEVEL", file_data.get("log_level", "INFO")),
    )
    return config
