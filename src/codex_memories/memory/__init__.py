"""Durable memories extracted from user turns.

Layout:
    $CODEX_HOME/
    └── memories.md                    # Global store: notes from turns outside any repo
    <repo root>/
    └── .codex/
        └── memories.md                # Project store: notes from turns inside the repo

Both stores are read and merged into the prompt; new notes go to the project
store when the turn runs inside a git repository, else to the global one.
"""

from codex_memories.memory.extractor import maybe_record_memories, spawn_memory_recording
from codex_memories.memory.store import (
    append_memories,
    append_memories_to_instructions,
    read_memories_for_instructions,
)

__all__ = [
    "append_memories",
    "append_memories_to_instructions",
    "maybe_record_memories",
    "read_memories_for_instructions",
    "spawn_memory_recording",
]
