"""Session / turn bookkeeping touched by memory extraction.

Only the two trackers the extraction stream feeds: the latest rate-limit
snapshot and cumulative token usage. Everything else about a session lives
with the hosting conversation.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from codex_memories.config import MemoriesConfig
from codex_memories.protocol import RateLimitSnapshot, TokenUsage

if TYPE_CHECKING:
    from codex_memories.client.base import ModelClient

logger = logging.getLogger(__name__)


@dataclass
class TurnContext:
    """Per-turn state: the model client, the working directory and config."""

    client: ModelClient
    cwd: Path
    config: MemoriesConfig


@dataclass
class TokenUsageInfo:
    total: TokenUsage = field(default_factory=TokenUsage)
    last: TokenUsage | None = None


class Session:
    """Session-level trackers plus the background tasks spawned per turn."""

    def __init__(self) -> None:
        self.rate_limits: RateLimitSnapshot | None = None
        self.token_usage_info = TokenUsageInfo()
        self._lock = asyncio.Lock()
        self._tasks: set[asyncio.Task] = set()

    async def update_rate_limits(
        self, turn_context: TurnContext, snapshot: RateLimitSnapshot
    ) -> None:
        async with self._lock:
            self.rate_limits = snapshot

    async def update_token_usage_info(
        self, turn_context: TurnContext, token_usage: TokenUsage | None
    ) -> None:
        if token_usage is None:
            return
        async with self._lock:
            info = self.token_usage_info
            info.total = info.total + token_usage
            info.last = token_usage
        logger.debug("Token usage updated: total=%d", info.total.total_tokens)

    def track_task(self, task: asyncio.Task) -> None:
        """Hold a reference to a background task until it finishes."""
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def wait_for_tasks(self) -> None:
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
