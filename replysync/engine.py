"""Reply-set synchronization engine.

Keeps the bot's replies in step with the message that asked for them:

- created: run the processor and send the result, split over several
  messages when it does not fit one
- updated: delete the overflow messages, edit the first one in place with
  the new result, and send fresh overflow messages as needed
- deleted: delete every reply

Events for one source message are serialized through a KeyedDispatcher;
the reply-set store is written only after every send/edit of a pass went
through, so a transport failure never leaves it half updated.
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Hashable, Optional

from .commands import DEFAULT_COMMAND, extract_payload, is_tracked_form
from .communication.errors import classify_error
from .communication.segmenter import CODE_BLOCK_OVERHEAD, split_lines, wrap_code_block
from .communication.transport import Transport, TransportError
from .dispatcher import KeyedDispatcher
from .processor import FatalError, Failure, Processor, ProcessorResult, Success
from .store import ReplySetStore

logger = logging.getLogger("replysync.engine")

PLACEHOLDER_TEXT = "Recompiling..."
FAILURE_HEADER = "Compilation failed."
INCONSISTENT_TEXT = (
    "An unknown error occurred (this message is tracked but has no replies)."
)
_TRUNCATION_MARK = "\n..."


class EventKind(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"


@dataclass(frozen=True)
class SourceEvent:
    """Something happened to a source message."""
    kind: EventKind
    source_id: Hashable
    channel: Any = None
    content: str = ""


class SyncEngine:
    """Drive processor output to the transport and track what was sent."""

    def __init__(
        self,
        transport: Transport,
        processor: Processor,
        store: Optional[ReplySetStore] = None,
        unit_max_size: int = 4096,
        command: str = DEFAULT_COMMAND,
    ):
        if unit_max_size <= CODE_BLOCK_OVERHEAD:
            raise ValueError(
                f"unit_max_size must exceed the code block overhead ({CODE_BLOCK_OVERHEAD})"
            )
        self.transport = transport
        self.processor = processor
        self.store = store if store is not None else ReplySetStore()
        self.unit_max_size = unit_max_size
        self.command = command
        self.dispatcher = KeyedDispatcher(self.handle)

    # ── Entry points ─────────────────────────────────────────

    def submit(self, event: SourceEvent):
        """Queue event behind earlier events for the same source."""
        self.dispatcher.submit(event.source_id, event)

    async def handle(self, event: SourceEvent):
        """Process one event, containing transport failures to this pass."""
        logger.info(f"[{event.kind.value}] source {event.source_id}")
        try:
            if event.kind is EventKind.CREATED:
                await self.created(event)
            elif event.kind is EventKind.UPDATED:
                await self.updated(event)
            elif event.kind is EventKind.DELETED:
                await self.deleted(event)
        except TransportError as e:
            logger.error(
                f"Transport failed while handling {event.kind.value} for {event.source_id}: {e}",
                exc_info=True,
            )
            await self._notify_failure(event, e)

    # ── Event handlers ───────────────────────────────────────

    async def created(self, event: SourceEvent):
        if not is_tracked_form(event.content, self.command):
            return

        result = await self._run_processor(event.content)

        if isinstance(result, FatalError):
            # Terminal: shown once, never tracked
            await self.transport.send_as_reply(event.channel, event.source_id, result.message)
            return

        output_ids = await self._emit(event, render_result(result, self.unit_max_size))
        self.store.put(event.source_id, output_ids)

    async def updated(self, event: SourceEvent):
        output_ids = self.store.get(event.source_id)
        if output_ids is None:
            return

        if not output_ids:
            logger.error(f"Source {event.source_id} is tracked with an empty reply set")
            await self.transport.send_as_reply(event.channel, event.source_id, INCONSISTENT_TEXT)
            return

        if not is_tracked_form(event.content, self.command):
            await self.transport.delete(output_ids)
            self.store.remove(event.source_id)
            return

        primary = output_ids[0]
        await self.transport.retrieve(primary)

        await self.transport.delete(output_ids[1:])
        if len(output_ids) > 1:
            # Overflow messages are gone; only the primary is left to track
            self.store.put(event.source_id, [primary])

        await self.transport.edit(primary, PLACEHOLDER_TEXT)

        result = await self._run_processor(event.content)

        if isinstance(result, FatalError):
            await self.transport.edit(primary, result.message)
            self.store.put(event.source_id, [primary])
            return

        output_ids = await self._emit(event, render_result(result, self.unit_max_size), primary=primary)
        self.store.put(event.source_id, output_ids)

    async def deleted(self, event: SourceEvent):
        output_ids = self.store.get(event.source_id) or []
        await self.transport.delete(output_ids)
        self.store.remove(event.source_id)

    # ── Pipeline ─────────────────────────────────────────────

    async def _run_processor(self, content: str) -> ProcessorResult:
        payload = extract_payload(content, self.command)
        return await asyncio.to_thread(self.processor.process, payload)

    async def _emit(
        self,
        event: SourceEvent,
        pieces: list[str],
        primary: Optional[Hashable] = None,
    ) -> list[Hashable]:
        """Deliver pieces, reusing primary for the first one if given.

        Messages created here are deleted again if a later step fails, so
        a failed pass leaves no untracked replies behind.
        """
        created: list[Hashable] = []
        first, rest = pieces[0], pieces[1:]
        try:
            if primary is None:
                primary = await self.transport.send_as_reply(event.channel, event.source_id, first)
                created.append(primary)
            else:
                await self.transport.edit(primary, first)

            overflow = []
            for piece in rest:
                output_id = await self.transport.send_plain(event.channel, piece)
                created.append(output_id)
                overflow.append(output_id)
        except TransportError:
            await self._rollback(created)
            raise

        if overflow:
            logger.info(f"Split reply for {event.source_id} into {len(pieces)} messages")
        return [primary] + overflow

    async def _rollback(self, output_ids: list[Hashable]):
        if not output_ids:
            return
        try:
            await self.transport.delete(output_ids)
        except TransportError as e:
            logger.warning(f"Could not remove {len(output_ids)} partial replies: {e}")

    async def _notify_failure(self, event: SourceEvent, error: TransportError):
        if event.kind is EventKind.DELETED or event.channel is None:
            return
        try:
            await self.transport.send_plain(event.channel, f"⚠️ {classify_error(error)}")
        except TransportError as e:
            logger.debug(f"Could not report failure to {event.channel}: {e}")


def _truncate(text: str, limit: int) -> str:
    """Cut text to at most limit characters on a line boundary, marking the cut."""
    if len(text) <= limit:
        return text
    room = max(limit - len(_TRUNCATION_MARK), 1)
    chunks = split_lines(text, room)
    head = chunks[0][:room] if chunks else ""
    return head + _TRUNCATION_MARK


def render_result(result: ProcessorResult, unit_max_size: int) -> list[str]:
    """Turn a processor result into message texts, in sending order.

    Success output goes in code blocks, split over several messages by
    whole lines when it does not fit one. A failure report always stays a
    single message, its diagnostics cut short if needed.
    """
    if isinstance(result, Failure):
        budget = unit_max_size - len(FAILURE_HEADER) - 1 - CODE_BLOCK_OVERHEAD
        diagnostics = _truncate(result.diagnostics, budget)
        return [f"{FAILURE_HEADER}\n{wrap_code_block(diagnostics)}"]

    if isinstance(result, Success):
        wrapped = wrap_code_block(result.text)
        if len(wrapped) <= unit_max_size:
            return [wrapped]
        segments = split_lines(result.text, unit_max_size - CODE_BLOCK_OVERHEAD)
        return [wrap_code_block(segment) for segment in segments] or [wrapped]

    return [result.message]
