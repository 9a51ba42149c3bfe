"""Wire types shared by the client, the session and the memory pipeline.

Plain dataclasses only (no I/O):
- User inputs as they arrive from the hosting turn
- Content / response items exchanged with the model
- Streaming response events
- The one-shot Prompt sent to a streaming client
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class SessionSource(str, Enum):
    """What kind of process started the current session."""

    CLI = "cli"
    VSCODE = "vscode"
    EXEC = "exec"
    MCP = "mcp"
    SUB_AGENT = "subagent"
    UNKNOWN = "unknown"

    @classmethod
    def from_str(cls, value: str | None) -> SessionSource:
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            return cls.UNKNOWN


# ── User inputs (hosting turn -> memories) ─────────────────────


@dataclass
class TextInput:
    text: str


@dataclass
class ImageInput:
    image_url: str


@dataclass
class LocalImageInput:
    path: str


UserInput = TextInput | ImageInput | LocalImageInput


# ── Content and response items ─────────────────────────────────


@dataclass
class InputText:
    text: str


@dataclass
class OutputText:
    text: str


@dataclass
class InputImage:
    image_url: str


ContentItem = InputText | OutputText | InputImage


@dataclass
class Message:
    """A chat message item (user, assistant or system)."""

    role: str
    content: list[ContentItem] = field(default_factory=list)
    id: str | None = None


@dataclass
class OtherItem:
    """Any non-message output item (reasoning, tool call, ...), kept raw."""

    type: str
    raw: dict[str, Any] = field(default_factory=dict)


ResponseItem = Message | OtherItem


def content_items_to_text(content: list[ContentItem]) -> str | None:
    """Join the non-empty text pieces of a message, or None if there are none."""
    pieces = [
        item.text
        for item in content
        if isinstance(item, (InputText, OutputText)) and item.text
    ]
    if not pieces:
        return None
    return "\n".join(pieces)


def parse_content_item(data: dict[str, Any]) -> ContentItem | None:
    item_type = data.get("type", "")
    if item_type == "input_text":
        return InputText(text=data.get("text", ""))
    if item_type == "output_text":
        return OutputText(text=data.get("text", ""))
    if item_type == "input_image":
        return InputImage(image_url=data.get("image_url", ""))
    return None


def parse_response_item(data: dict[str, Any]) -> ResponseItem:
    """Build a typed item from a Responses-style `item` object."""
    if data.get("type") == "message":
        content = [
            parsed
            for parsed in (parse_content_item(c) for c in data.get("content", []))
            if parsed is not None
        ]
        return Message(role=data.get("role", ""), content=content, id=data.get("id"))
    return OtherItem(type=data.get("type", ""), raw=data)


# ── Usage and rate limits ──────────────────────────────────────


@dataclass
class TokenUsage:
    input_tokens: int = 0
    cached_input_tokens: int = 0
    output_tokens: int = 0
    reasoning_output_tokens: int = 0
    total_tokens: int = 0

    def __add__(self, other: TokenUsage) -> TokenUsage:
        return TokenUsage(
            input_tokens=self.input_tokens + other.input_tokens,
            cached_input_tokens=self.cached_input_tokens + other.cached_input_tokens,
            output_tokens=self.output_tokens + other.output_tokens,
            reasoning_output_tokens=self.reasoning_output_tokens
            + other.reasoning_output_tokens,
            total_tokens=self.total_tokens + other.total_tokens,
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TokenUsage:
        """Accept both Responses (`input_tokens`) and chat (`prompt_tokens`) shapes."""
        input_tokens = data.get("input_tokens", data.get("prompt_tokens", 0)) or 0
        output_tokens = data.get("output_tokens", data.get("completion_tokens", 0)) or 0
        input_details = data.get("input_tokens_details") or data.get("prompt_tokens_details") or {}
        output_details = (
            data.get("output_tokens_details") or data.get("completion_tokens_details") or {}
        )
        return cls(
            input_tokens=int(input_tokens),
            cached_input_tokens=int(input_details.get("cached_tokens", 0) or 0),
            output_tokens=int(output_tokens),
            reasoning_output_tokens=int(output_details.get("reasoning_tokens", 0) or 0),
            total_tokens=int(data.get("total_tokens", input_tokens + output_tokens) or 0),
        )


@dataclass
class RateLimitWindow:
    used_percent: float
    window_minutes: int | None = None
    resets_in_seconds: int | None = None


@dataclass
class RateLimitSnapshot:
    primary: RateLimitWindow | None = None
    secondary: RateLimitWindow | None = None


# ── Streaming response events ──────────────────────────────────


@dataclass
class Created:
    pass


@dataclass
class OutputTextDelta:
    delta: str


@dataclass
class OutputItemDone:
    item: ResponseItem


@dataclass
class RateLimits:
    snapshot: RateLimitSnapshot


@dataclass
class Completed:
    response_id: str = ""
    token_usage: TokenUsage | None = None


ResponseEvent = Created | OutputTextDelta | OutputItemDone | RateLimits | Completed


# ── Prompt ─────────────────────────────────────────────────────


@dataclass
class Prompt:
    """A one-shot request for a streaming client."""

    input: list[ResponseItem] = field(default_factory=list)
    tools: list[dict[str, Any]] = field(default_factory=list)
    parallel_tool_calls: bool = False
    base_instructions_override: str | None = None
    output_schema: dict[str, Any] | None = None

    def to_messages(self) -> list[dict[str, str]]:
        """Render as chat-completions messages (system first, then messages)."""
        messages: list[dict[str, str]] = []
        if self.base_instructions_override:
            messages.append({"role": "system", "content": self.base_instructions_override})
        for item in self.input:
            if not isinstance(item, Message):
                continue
            text = content_items_to_text(item.content)
            if text is not None:
                messages.append({"role": item.role, "content": text})
        return messages
