"""Chat Completions streaming client — POST /chat/completions over httpx.

Aggregates chat `choices` deltas into the Responses-style event sequence the
memory pipeline consumes:
- content delta      -> OutputTextDelta
- finish_reason      -> OutputItemDone(assistant Message with all content)
- DONE / end of body -> Completed(usage), only after a finish_reason
Responses-style typed frames are passed through unchanged.
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from typing import Any

import httpx

from codex_memories.client.base import StreamError
from codex_memories.client.sse import (
    ChatChunk,
    Done,
    ErrorFrame,
    iter_sse_data,
    parse_frame,
    rate_limits_from_headers,
)
from codex_memories.config import MemoriesConfig
from codex_memories.protocol import (
    Completed,
    Message,
    OutputItemDone,
    OutputText,
    OutputTextDelta,
    Prompt,
    RateLimits,
    ResponseEvent,
    SessionSource,
    TokenUsage,
)

logger = logging.getLogger(__name__)


@dataclass
class ChatCompletionsClient:
    """Streaming client for any OpenAI-compatible chat completions endpoint."""

    config: MemoriesConfig
    session_source: SessionSource = SessionSource.CLI
    transport: httpx.AsyncBaseTransport | None = field(default=None, repr=False)

    def get_session_source(self) -> SessionSource:
        return self.session_source

    @property
    def url(self) -> str:
        return self.config.provider.base_url.rstrip("/") + "/chat/completions"

    def build_body(self, prompt: Prompt) -> dict[str, Any]:
        body: dict[str, Any] = {
            "model": self.config.provider.model,
            "messages": prompt.to_messages(),
            "stream": True,
            "stream_options": {"include_usage": True},
        }
        if prompt.tools:
            body["tools"] = prompt.tools
            body["parallel_tool_calls"] = prompt.parallel_tool_calls
        if prompt.output_schema is not None:
            body["response_format"] = {
                "type": "json_schema",
                "json_schema": {"name": "output", "schema": prompt.output_schema},
            }
        return body

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "text/event-stream"}
        api_key = os.getenv(self.config.provider.api_key_env, "")
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"
        return headers

    async def stream(self, prompt: Prompt) -> AsyncIterator[ResponseEvent]:
        """Send the request and return the event iterator once headers arrive."""
        client = httpx.AsyncClient(
            transport=self.transport,
            timeout=httpx.Timeout(self.config.provider.timeout),
        )
        request = client.build_request(
            "POST", self.url, json=self.build_body(prompt), headers=self._headers()
        )
        try:
            response = await client.send(request, stream=True)
        except httpx.HTTPError as e:
            await client.aclose()
            raise StreamError(f"request to {self.url} failed: {e}") from e

        if response.status_code >= 400:
            body = (await response.aread()).decode("utf-8", errors="replace")
            await response.aclose()
            await client.aclose()
            raise StreamError(f"HTTP {response.status_code}: {body.strip()[:500]}")

        return self._events(client, response)

    async def _events(
        self, client: httpx.AsyncClient, response: httpx.Response
    ) -> AsyncIterator[ResponseEvent]:
        content_parts: list[str] = []
        usage: TokenUsage | None = None
        finished = False
        try:
            snapshot = rate_limits_from_headers(response.headers)
            if snapshot is not None:
                yield RateLimits(snapshot=snapshot)

            async for data in iter_sse_data(response.aiter_lines()):
                try:
                    frame = parse_frame(data)
                except json.JSONDecodeError:
                    logger.debug("Skipping non-JSON SSE frame: %s", data[:200])
                    continue

                if isinstance(frame, Done):
                    break
                if isinstance(frame, ErrorFrame):
                    raise StreamError(frame.message)
                if isinstance(frame, ChatChunk):
                    if frame.usage is not None:
                        usage = frame.usage
                    if frame.content:
                        content_parts.append(frame.content)
                        yield OutputTextDelta(delta=frame.content)
                    if frame.finish_reason and not finished:
                        finished = True
                        yield OutputItemDone(
                            item=Message(
                                role="assistant",
                                content=[OutputText(text="".join(content_parts))],
                            )
                        )
                    continue
                if isinstance(frame, dict):
                    continue
                yield frame
                if isinstance(frame, Completed):
                    return

            if finished:
                yield Completed(token_usage=usage)
        except httpx.HTTPError as e:
            raise StreamError(f"stream from {self.url} failed: {e}") from e
        finally:
            await response.aclose()
            await client.aclose()
