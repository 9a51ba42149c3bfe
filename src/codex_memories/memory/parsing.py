"""Pure text parsing for memory notes (no I/O).

- parse_memories: stored note file -> existing notes
- parse_memory_candidates: model output -> new candidate notes
"""

from __future__ import annotations

from collections.abc import Iterable

NO_MEMORIES_RESPONSE = "NO_MEMORIES"

_BULLET_PREFIXES = ("- ", "* ")


def memory_key(note: str) -> str:
    """Dedup key: two notes with the same key are the same memory."""
    return note.strip().lower()


def strip_bullet(line: str) -> str | None:
    """Return the trimmed body of a `- ` / `* ` bullet, or None if not a bullet."""
    for prefix in _BULLET_PREFIXES:
        if line.startswith(prefix):
            return line[len(prefix) :].strip()
    return None


def dedupe(entries: Iterable[str]) -> list[str]:
    """Drop case-insensitive repeats, keeping first-seen casing and order."""
    deduped: list[str] = []
    seen: set[str] = set()
    for entry in entries:
        key = memory_key(entry)
        if key not in seen:
            seen.add(key)
            deduped.append(entry)
    return deduped


def parse_memories(text: str) -> list[str]:
    """Parse a memories file into notes.

    Headings (`#...`) and blank lines are skipped. If the file has any
    bullet line, only bullet bodies are returned and every plain line is
    dropped; otherwise the plain lines are returned as-is.
    """
    bullets: list[str] = []
    lines: list[str] = []

    for line in text.split("\n"):
        trimmed = line.strip()
        if not trimmed or trimmed.startswith("#"):
            continue
        entry = strip_bullet(trimmed)
        if entry is not None:
            bullets.append(entry)
        else:
            lines.append(trimmed)

    return bullets if bullets else lines


def parse_memory_candidates(text: str) -> list[str]:
    """Parse model output into deduplicated candidate notes."""
    trimmed = text.strip()
    if not trimmed or trimmed.lower() == NO_MEMORIES_RESPONSE.lower():
        return []

    entries: list[str] = []
    for line in trimmed.split("\n"):
        line = line.strip()
        if not line or line.lower() == NO_MEMORIES_RESPONSE.lower():
            continue
        entry = strip_bullet(line)
        entries.append(entry if entry is not None else line)

    return dedupe(entries)
