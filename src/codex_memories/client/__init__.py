"""Model clients: streaming protocols, SSE parsing and the httpx chat client."""

from codex_memories.client.base import (
    ClientError,
    ModelClient,
    SessionSourceProvider,
    StreamError,
    StreamingClient,
)
from codex_memories.client.chat_completions import ChatCompletionsClient

__all__ = [
    "ChatCompletionsClient",
    "ClientError",
    "ModelClient",
    "SessionSourceProvider",
    "StreamError",
    "StreamingClient",
]
