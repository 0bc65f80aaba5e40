"""Reply-set store — which bot messages belong to which source message.

In-memory only; rebuilt empty on every start.
"""

import logging
import threading
from typing import Hashable, Iterable, Optional

logger = logging.getLogger("replysync.store")


class ReplySetStore:
    """Maps a source id to the ordered list of output ids it produced.

    The first output id is the primary unit, the one edited in place when
    the source changes. Lists are copied on the way in and out, so callers
    never hold a reference to stored state.
    """

    def __init__(self):
        self._entries: dict[Hashable, list[Hashable]] = {}
        self._lock = threading.Lock()

    def put(self, source_id: Hashable, output_ids: Iterable[Hashable]):
        """Replace the entry for source_id with output_ids."""
        ids = list(output_ids)
        with self._lock:
            self._entries[source_id] = ids
        logger.debug(f"Tracking {len(ids)} output(s) for {source_id}")

    def get(self, source_id: Hashable) -> Optional[list[Hashable]]:
        """Return the output ids for source_id, or None if untracked."""
        with self._lock:
            ids = self._entries.get(source_id)
            return list(ids) if ids is not None else None

    def remove(self, source_id: Hashable) -> list[Hashable]:
        """Stop tracking source_id and return its output ids (empty if none)."""
        with self._lock:
            ids = self._entries.pop(source_id, None)
        if ids is not None:
            logger.debug(f"Stopped tracking {source_id}")
        return ids or []

    def __contains__(self, source_id: Hashable) -> bool:
        with self._lock:
            return source_id in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
