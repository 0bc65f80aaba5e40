"""Per-key event dispatch.

Events sharing a key run one after another in arrival order; events with
different keys run concurrently. Each active key gets its own queue and
worker task, and the worker exits once its queue is empty.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Hashable

logger = logging.getLogger("replysync.dispatcher")


class KeyedDispatcher:
    """Serialize work per key, parallelize across keys."""

    def __init__(self, handler: Callable[[Any], Awaitable[None]]):
        self._handler = handler
        self._queues: dict[Hashable, asyncio.Queue] = {}
        self._workers: dict[Hashable, asyncio.Task] = {}

    def submit(self, key: Hashable, item: Any):
        """Queue item behind any pending work for key."""
        queue = self._queues.get(key)
        if queue is None:
            queue = asyncio.Queue()
            self._queues[key] = queue
            self._workers[key] = asyncio.create_task(self._run(key, queue))
        queue.put_nowait(item)

    async def _run(self, key: Hashable, queue: asyncio.Queue):
        try:
            while True:
                try:
                    item = queue.get_nowait()
                except asyncio.QueueEmpty:
                    break
                try:
                    await self._handler(item)
                except Exception as e:
                    logger.error(f"Handler failed for {key}: {e}", exc_info=True)
        finally:
            # No await between the empty check and here, so nothing can
            # have been queued for this key in between
            if self._queues.get(key) is queue:
                del self._queues[key]
                del self._workers[key]

    @property
    def pending(self) -> int:
        """Number of keys with work queued or running."""
        return len(self._workers)

    async def drain(self):
        """Wait until every queued item has been handled."""
        while self._workers:
            await asyncio.gather(*list(self._workers.values()), return_exceptions=True)

    async def close(self):
        """Cancel all workers, dropping queued items."""
        workers = list(self._workers.values())
        for task in workers:
            task.cancel()
        if workers:
            await asyncio.gather(*workers, return_exceptions=True)
        self._queues.clear()
        self._workers.clear()
