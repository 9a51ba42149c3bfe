"""Entry point: python -m codex_memories [show|paths|record TEXT...]

- No args / "show": Print the merged memories block for the current directory
- "paths":          Print the stores that are read and the one written to
- "record":         Run one extraction turn on TEXT against the configured model
"""

from __future__ import annotations

import asyncio
import logging
import sys

from codex_memories.config import MemoriesConfig, load_config


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def _run_show(config: MemoriesConfig) -> None:
    from codex_memories.memory.store import read_memories_for_instructions

    section = read_memories_for_instructions(config)
    print(section or "(no memories yet)")


def _run_paths(config: MemoriesConfig) -> None:
    from codex_memories.memory.paths import memory_paths, memory_write_path

    for path in memory_paths(config):
        print(f"read   {path}")
    print(f"write  {memory_write_path(config, config.cwd)}")


def _run_record(config: MemoriesConfig, text: str) -> None:
    from codex_memories.client.chat_completions import ChatCompletionsClient
    from codex_memories.memory.extractor import maybe_record_memories
    from codex_memories.memory.paths import memory_write_path
    from codex_memories.protocol import SessionSource, TextInput
    from codex_memories.session import Session, TurnContext

    client = ChatCompletionsClient(
        config=config,
        session_source=SessionSource.from_str(config.session_source),
    )
    turn = TurnContext(client=client, cwd=config.cwd, config=config)
    asyncio.run(maybe_record_memories(Session(), turn, [TextInput(text=text)]))

    path = memory_write_path(config, config.cwd)
    if path.exists():
        print(path.read_text(encoding="utf-8"), end="")
    else:
        print(f"(nothing recorded in {path})")


def main() -> None:
    cmd = sys.argv[1] if len(sys.argv) > 1 else "show"

    config = load_config()
    _setup_logging(config.log_level)

    if cmd == "show":
        _run_show(config)
    elif cmd == "paths":
        _run_paths(config)
    elif cmd == "record" and len(sys.argv) > 2:
        _run_record(config, " ".join(sys.argv[2:]))
    else:
        print("Usage: python -m codex_memories [show|paths|record TEXT...]")
        print("  show    — Print the merged memories block (default)")
        print("  paths   — Print the memory stores read and written")
        print("  record  — Extract memories from TEXT and append them")
        sys.exit(1)


if __name__ == "__main__":
    main()
