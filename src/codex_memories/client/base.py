"""Client protocols and shared error types."""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Protocol, runtime_checkable

from codex_memories.protocol import Prompt, ResponseEvent, SessionSource


class ClientError(Exception):
    """Base error for model client failures."""


class StreamError(ClientError):
    """The response stream could not be opened or failed mid-way."""


@runtime_checkable
class StreamingClient(Protocol):
    """Anything that turns a Prompt into an ordered stream of response events."""

    async def stream(self, prompt: Prompt) -> AsyncIterator[ResponseEvent]:
        """Open the stream. Raising here means the request never started."""
        ...


@runtime_checkable
class SessionSourceProvider(Protocol):
    """Classifies the origin of the current session."""

    def get_session_source(self) -> SessionSource: ...


@runtime_checkable
class ModelClient(StreamingClient, SessionSourceProvider, Protocol):
    """A streaming client that also knows where its session came from."""
