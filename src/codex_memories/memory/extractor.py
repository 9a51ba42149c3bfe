"""Memory extraction — one model round trip per turn, results appended to a store.

Never fails the hosting turn: every error is logged and dropped. Only task
cancellation propagates, and a cancelled extraction writes nothing.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from enum import Enum

from codex_memories.memory.parsing import parse_memory_candidates
from codex_memories.memory.paths import memory_write_path
from codex_memories.memory.store import append_memories
from codex_memories.protocol import (
    Completed,
    InputText,
    Message,
    OutputItemDone,
    OutputTextDelta,
    Prompt,
    RateLimits,
    ResponseEvent,
    SessionSource,
    TextInput,
    UserInput,
    content_items_to_text,
)
from codex_memories.session import Session, TurnContext
from codex_memories.truncate import truncate_text

logger = logging.getLogger(__name__)

MEMORIES_PROMPT_MAX_BYTES = 2000
MAX_NEW_MEMORIES_PER_TURN = 6

MEMORIES_PROMPT = """\
You are extracting durable memories from the user's latest messages.

A memory is a short fact that will still be useful in future, unrelated
sessions: stable preferences, working conventions, tools and environments the
user relies on, and explicit instructions about how they want to be helped.

Do not record:
- anything about the current task only (file names, errors, one-off requests)
- secrets, credentials, tokens or personal identifiers
- guesses; only what the user actually said

Output one memory per line, each starting with "- ", written as a short
third-person statement (for example "- Prefers tabs over spaces").
Output at most 6 lines.

If there is nothing worth remembering, output exactly: NO_MEMORIES
"""

_EXCLUDED_SOURCES = frozenset({SessionSource.EXEC, SessionSource.SUB_AGENT})


class ExtractionState(Enum):
    STREAMING = "streaming"
    COMPLETED = "completed"
    ABORTED = "aborted"


class ExtractionStream:
    """State machine over the response events of one extraction request.

    STREAMING --Completed--> COMPLETED
    STREAMING --error / early close--> ABORTED
    Every other event keeps the machine in STREAMING.
    """

    def __init__(self, session: Session, turn_context: TurnContext) -> None:
        self.session = session
        self.turn_context = turn_context
        self.state = ExtractionState.STREAMING
        self.output_items: list[str] = []
        self.streamed_text: list[str] = []

    async def feed(self, event: ResponseEvent) -> ExtractionState:
        if isinstance(event, OutputItemDone):
            if isinstance(event.item, Message):
                text = content_items_to_text(event.item.content)
                if text is not None:
                    self.output_items.append(text)
        elif isinstance(event, OutputTextDelta):
            self.streamed_text.append(event.delta)
        elif isinstance(event, RateLimits):
            await self.session.update_rate_limits(self.turn_context, event.snapshot)
        elif isinstance(event, Completed):
            await self.session.update_token_usage_info(self.turn_context, event.token_usage)
            self.state = ExtractionState.COMPLETED
        return self.state

    def abort(self) -> ExtractionState:
        self.state = ExtractionState.ABORTED
        return self.state

    async def consume(self, stream: AsyncIterator[ResponseEvent]) -> ExtractionState:
        """Drive the machine until it leaves STREAMING."""
        try:
            while self.state is ExtractionState.STREAMING:
                try:
                    event = await stream.__anext__()
                except StopAsyncIteration:
                    logger.warning("Memories extraction stream closed before completion")
                    return self.abort()
                except Exception as e:
                    logger.warning("Memories extraction failed: %s", e)
                    return self.abort()
                await self.feed(event)
        finally:
            aclose = getattr(stream, "aclose", None)
            if aclose is not None:
                await aclose()
        return self.state

    @property
    def raw_output(self) -> str:
        """Finished message items win over raw deltas."""
        if self.output_items:
            return "\n".join(self.output_items)
        return "".join(self.streamed_text)


def should_record_memories(turn_context: TurnContext) -> bool:
    return turn_context.client.get_session_source() not in _EXCLUDED_SOURCES


def collect_user_input_texts(inputs: list[UserInput]) -> list[str]:
    """Text inputs with visible content, in order."""
    return [
        item.text
        for item in inputs
        if isinstance(item, TextInput) and item.text.strip()
    ]


def build_memories_prompt(input_texts: list[str]) -> Prompt:
    combined = "\n\n".join(input_texts)
    if len(combined.encode("utf-8")) > MEMORIES_PROMPT_MAX_BYTES:
        combined = truncate_text(combined, MEMORIES_PROMPT_MAX_BYTES)

    return Prompt(
        input=[Message(role="user", content=[InputText(text=combined)])],
        tools=[],
        parallel_tool_calls=False,
        base_instructions_override=MEMORIES_PROMPT,
        output_schema=None,
    )


async def maybe_record_memories(
    session: Session,
    turn_context: TurnContext,
    inputs: list[UserInput],
) -> None:
    """Extract memories from this turn's user input and append them to the store."""
    if not should_record_memories(turn_context):
        return

    input_texts = collect_user_input_texts(inputs)
    if not input_texts:
        return

    prompt = build_memories_prompt(input_texts)

    try:
        stream = await turn_context.client.stream(prompt)
    except Exception as e:
        logger.warning("Failed to run memories extraction: %s", e)
        return

    extraction = ExtractionStream(session, turn_context)
    if await extraction.consume(stream) is not ExtractionState.COMPLETED:
        return

    candidates = parse_memory_candidates(extraction.raw_output)
    if not candidates:
        return
    candidates = candidates[:MAX_NEW_MEMORIES_PER_TURN]

    path = memory_write_path(turn_context.config, turn_context.cwd)
    try:
        written = await asyncio.to_thread(append_memories, path, candidates)
    except Exception as e:
        logger.warning("Failed to write memories to %s: %s", path, e)
        return
    logger.debug("Recorded %d new memories in %s", written, path)


def spawn_memory_recording(
    session: Session,
    turn_context: TurnContext,
    inputs: list[UserInput],
) -> asyncio.Task:
    """Run maybe_record_memories in the background of the current turn."""
    task = asyncio.create_task(
        maybe_record_memories(session, turn_context, inputs),
        name="record-memories",
    )
    session.track_task(task)
    return task
