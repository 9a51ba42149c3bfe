"""Byte-bounded text truncation."""

from __future__ import annotations


def _marker(removed: int) -> str:
    return f"…{removed} chars truncated…"


def _byte_len(text: str) -> int:
    return len(text.encode("utf-8"))


def _take_head(text: str, budget: int) -> str:
    """Longest prefix of text whose UTF-8 encoding fits in budget bytes."""
    return text.encode("utf-8")[:budget].decode("utf-8", errors="ignore")


def _take_tail(text: str, budget: int) -> str:
    """Longest suffix of text whose UTF-8 encoding fits in budget bytes."""
    data = text.encode("utf-8")
    if budget >= len(data):
        return text
    if budget <= 0:
        return ""
    return data[-budget:].decode("utf-8", errors="ignore")


def truncate_text(text: str, max_bytes: int) -> str:
    """Shorten text to at most max_bytes UTF-8 bytes, keeping head and tail.

    The dropped middle is replaced by a `…N chars truncated…` marker. Cuts
    always land on character boundaries.
    """
    if _byte_len(text) <= max_bytes:
        return text
    if max_bytes <= 0:
        return ""

    # The marker length depends on how much is removed; size it for the worst case.
    marker_budget = _byte_len(_marker(len(text)))
    if marker_budget >= max_bytes:
        return _take_head(text, max_bytes)

    remaining = max_bytes - marker_budget
    head = _take_head(text, remaining // 2)
    tail = _take_tail(text, remaining - remaining // 2)
    removed = len(text) - len(head) - len(tail)
    return f"{head}{_marker(removed)}{tail}"
