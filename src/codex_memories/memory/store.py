"""Memory stores — read/merge for prompts, dedup/append for new notes.

A store is one plain-text file:

    # Memories
    - Prefers short diffs
    - Runs tests before committing

    - Uses tabs

The header is written once when the file is created; each later batch is
appended after a blank line. Notes are never rewritten or deleted here.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path

from codex_memories.config import MemoriesConfig
from codex_memories.memory.parsing import memory_key, parse_memories
from codex_memories.memory.paths import memory_paths

logger = logging.getLogger(__name__)

MEMORIES_HEADER = "## Memories"
MEMORIES_SEPARATOR = "\n\n--- memories ---\n\n"
MEMORIES_FILE_HEADER = "# Memories"
MEMORIES_MAX_BYTES = 8 * 1024

# One lock per distinct store path, kept for the life of the process. Only the
# global and project stores are ever written, so this stays small.
_path_locks: dict[str, threading.Lock] = {}
_path_locks_guard = threading.Lock()


def _lock_for(path: Path) -> threading.Lock:
    """Per-path lock serializing read-merge-append within this process."""
    key = str(path.absolute())
    with _path_locks_guard:
        lock = _path_locks.get(key)
        if lock is None:
            lock = _path_locks[key] = threading.Lock()
        return lock


# ── Read ──────────────────────────────────────────────────────


def read_memories_file(path: Path) -> list[str]:
    """Read one store. Missing file reads as empty; other OSErrors propagate."""
    try:
        data = path.read_bytes()
    except FileNotFoundError:
        return []
    if not data:
        return []

    if len(data) > MEMORIES_MAX_BYTES:
        logger.warning(
            "Memories file %s exceeds max size (%d bytes); truncating.",
            path,
            MEMORIES_MAX_BYTES,
        )
        data = data[-MEMORIES_MAX_BYTES:]

    return parse_memories(data.decode("utf-8", errors="replace"))


def build_memories_section(entries: list[str]) -> str | None:
    """Render notes as a prompt block, or None when there are none."""
    if not entries:
        return None
    lines = [MEMORIES_HEADER]
    lines.extend(f"- {entry}" for entry in entries)
    return "\n".join(lines)


def read_memories_for_instructions(config: MemoriesConfig) -> str | None:
    """Merge the global and project stores into one block for the prompt."""
    entries: list[str] = []
    seen: set[str] = set()

    for path in memory_paths(config):
        try:
            values = read_memories_file(path)
        except OSError as e:
            logger.warning("Failed to read memories at %s: %s", path, e)
            continue
        for entry in values:
            trimmed = entry.strip()
            if not trimmed:
                continue
            key = memory_key(trimmed)
            if key not in seen:
                seen.add(key)
                entries.append(trimmed)

    return build_memories_section(entries)


def append_memories_to_instructions(instructions: str, config: MemoriesConfig) -> str:
    """Attach the memories block to base instructions, if there is one."""
    section = read_memories_for_instructions(config)
    if section is None:
        return instructions
    return f"{instructions}{MEMORIES_SEPARATOR}{section}"


# ── Write ─────────────────────────────────────────────────────


def append_memories(path: Path, entries: list[str]) -> int:
    """Append notes not already in the store. Returns how many were written.

    Raises OSError on any I/O failure; the caller decides what to do with it.
    """
    if not entries:
        return 0

    with _lock_for(path):
        existing = read_memories_file(path)
        seen = {memory_key(entry) for entry in existing}

        additions: list[str] = []
        for entry in entries:
            trimmed = entry.strip()
            if not trimmed:
                continue
            key = memory_key(trimmed)
            if key not in seen:
                seen.add(key)
                additions.append(trimmed)

        if not additions:
            return 0

        path.parent.mkdir(parents=True, exist_ok=True)

        try:
            is_empty = path.stat().st_size == 0
        except FileNotFoundError:
            is_empty = True

        lines = [MEMORIES_FILE_HEADER if is_empty else ""]
        lines.extend(f"- {entry}" for entry in additions)
        # Encode up front so a bad character cannot leave a partial batch.
        payload = ("\n".join(lines) + "\n").encode("utf-8", errors="replace")

        with path.open("ab") as f:
            f.write(payload)

    logger.debug("Appended %d memories to %s", len(additions), path)
    return len(additions)
