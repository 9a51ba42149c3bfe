"""SSE streaming protocol — frame types + parse (no network I/O).

Handles the server-sent-event body of a streaming completion:
- Split: raw text lines -> `data:` payloads
- Parse: payload -> typed event, chat chunk, DONE marker or raw dict
"""

from __future__ import annotations

import json
from collections.abc import AsyncIterable, AsyncIterator, Mapping
from dataclasses import dataclass
from typing import Any

from codex_memories.protocol import (
    Completed,
    Created,
    OutputItemDone,
    OutputTextDelta,
    RateLimits,
    RateLimitSnapshot,
    RateLimitWindow,
    ResponseEvent,
    TokenUsage,
    parse_response_item,
)

DONE_MARKERS = ("DONE", "[DONE]")


# ── Parsed frame types (server -> client) ──────────────────────


@dataclass
class Done:
    """Literal end-of-stream marker."""


@dataclass
class ChatChunk:
    """One chat-completions `choices[0]` delta."""

    content: str = ""
    finish_reason: str | None = None
    usage: TokenUsage | None = None


@dataclass
class ErrorFrame:
    """`error` / `response.failed` frame."""

    message: str


ParsedFrame = ResponseEvent | ChatChunk | Done | ErrorFrame | dict


# ── Line splitting ─────────────────────────────────────────────


async def iter_sse_data(lines: AsyncIterable[str]) -> AsyncIterator[str]:
    """Yield the `data:` payload of each SSE event.

    Multi-line data fields are joined with a newline; comments and other
    fields (`event:`, `id:`, `retry:`) are ignored.
    """
    buffer: list[str] = []
    async for line in lines:
        line = line.rstrip("\r")
        if not line:
            if buffer:
                yield "\n".join(buffer)
                buffer = []
            continue
        if line.startswith(":"):
            continue
        field_name, _, value = line.partition(":")
        if field_name != "data":
            continue
        buffer.append(value[1:] if value.startswith(" ") else value)
    if buffer:
        yield "\n".join(buffer)


# ── Parsing (payload -> typed frame) ───────────────────────────


def parse_frame(data: str) -> ParsedFrame:
    """Parse one SSE data payload.

    Returns the matching dataclass for known frame shapes, or the raw dict
    for anything unrecognized (callers ignore those).
    """
    if data.strip() in DONE_MARKERS:
        return Done()

    payload = json.loads(data)
    if not isinstance(payload, dict):
        return {"value": payload}

    frame_type = payload.get("type", "")

    if frame_type == "response.created":
        return Created()

    if frame_type == "response.output_text.delta":
        return OutputTextDelta(delta=payload.get("delta", ""))

    if frame_type == "response.output_item.done":
        return OutputItemDone(item=parse_response_item(payload.get("item", {})))

    if frame_type == "response.rate_limits":
        return RateLimits(snapshot=_parse_rate_limits(payload.get("rate_limits", {})))

    if frame_type == "response.completed":
        response = payload.get("response") or {}
        usage = response.get("usage")
        return Completed(
            response_id=response.get("id", ""),
            token_usage=TokenUsage.from_dict(usage) if usage else None,
        )

    if frame_type in ("response.failed", "error"):
        error = payload.get("error") or (payload.get("response") or {}).get("error") or {}
        return ErrorFrame(message=error.get("message", "") or str(payload))

    # Chat completions: no `type`, a `choices` list instead
    if "choices" in payload:
        choices = payload.get("choices") or [{}]
        choice = choices[0]
        delta = choice.get("delta") or {}
        usage = payload.get("usage")
        return ChatChunk(
            content=delta.get("content") or "",
            finish_reason=choice.get("finish_reason"),
            usage=TokenUsage.from_dict(usage) if usage else None,
        )

    return payload


def _parse_rate_limits(data: dict[str, Any]) -> RateLimitSnapshot:
    return RateLimitSnapshot(
        primary=_parse_window(data.get("primary")),
        secondary=_parse_window(data.get("secondary")),
    )


def _parse_window(data: dict[str, Any] | None) -> RateLimitWindow | None:
    if not data or "used_percent" not in data:
        return None
    return RateLimitWindow(
        used_percent=float(data["used_percent"]),
        window_minutes=data.get("window_minutes"),
        resets_in_seconds=data.get("resets_in_seconds"),
    )


def rate_limits_from_headers(headers: Mapping[str, str]) -> RateLimitSnapshot | None:
    """Build a snapshot from `x-codex-{primary,secondary}-*` response headers."""
    primary = _window_from_headers(headers, "x-codex-primary")
    secondary = _window_from_headers(headers, "x-codex-secondary")
    if primary is None and secondary is None:
        return None
    return RateLimitSnapshot(primary=primary, secondary=secondary)


def _window_from_headers(headers: Mapping[str, str], prefix: str) -> RateLimitWindow | None:
    used = headers.get(f"{prefix}-used-percent")
    if used is None:
        return None
    try:
        window = headers.get(f"{prefix}-window-minutes")
        resets = headers.get(f"{prefix}-reset-after-seconds")
        return RateLimitWindow(
            used_percent=float(used),
            window_minutes=int(window) if window else None,
            resets_in_seconds=int(resets) if resets else None,
        )
    except ValueError:
        return None
