"""Transport contract — how output messages are delivered, edited and removed.

The engine only talks to this interface. Concrete transports (Telegram)
translate platform failures into TransportError so the engine never has
to know which library raised.
"""

from abc import ABC, abstractmethod
from typing import Any, Hashable, Sequence


class TransportError(Exception):
    """A send, edit, retrieve or delete call failed."""

    def __init__(self, message: str, cause: BaseException | None = None):
        super().__init__(message)
        self.cause = cause


class Transport(ABC):
    """Abstract base class for output transports."""

    @abstractmethod
    async def send_as_reply(self, channel: Any, source_id: Hashable, content: str) -> Hashable:
        """Send content as a reply to the source message. Returns the new output id."""
        ...

    @abstractmethod
    async def send_plain(self, channel: Any, content: str) -> Hashable:
        """Send content to the channel. Returns the new output id."""
        ...

    @abstractmethod
    async def edit(self, output_id: Hashable, content: str) -> None:
        """Replace the content of an existing output."""
        ...

    @abstractmethod
    async def delete(self, output_ids: Sequence[Hashable]) -> None:
        """Delete outputs in bulk. Must be a no-op for an empty sequence."""
        ...

    @abstractmethod
    async def retrieve(self, output_id: Hashable) -> Any:
        """Return a handle to an existing output for later editing."""
        ...
