"""Pytest configuration and shared fixtures."""

import pytest

from replysync.communication.transport import Transport, TransportError
from replysync.engine import EventKind, SourceEvent, SyncEngine
from replysync.processor import Processor, Success


class FakeTransport(Transport):
    """In-memory transport that records every call.

    failures maps a method name to how many calls may succeed before it
    starts raising TransportError.
    """

    def __init__(self):
        self.messages: dict[int, str] = {}
        self.calls: list[tuple] = []
        self.failures: dict[str, int] = {}
        self._next_id = 100

    def _check(self, name: str):
        if name in self.failures:
            if self.failures[name] <= 0:
                raise TransportError(f"{name} failed", cause=RuntimeError(name))
            self.failures[name] -= 1

    def _create(self, content: str) -> int:
        output_id = self._next_id
        self._next_id += 1
        self.messages[output_id] = content
        return output_id

    async def send_as_reply(self, channel, source_id, content):
        self._check("send_as_reply")
        output_id = self._create(content)
        self.calls.append(("send_as_reply", channel, source_id, output_id))
        return output_id

    async def send_plain(self, channel, content):
        self._check("send_plain")
        output_id = self._create(content)
        self.calls.append(("send_plain", channel, output_id))
        return output_id

    async def edit(self, output_id, content):
        self._check("edit")
        if output_id not in self.messages:
            raise TransportError(f"message {output_id} not found")
        self.messages[output_id] = content
        self.calls.append(("edit", output_id, content))

    async def delete(self, output_ids):
        self._check("delete")
        self.calls.append(("delete", list(output_ids)))
        for output_id in output_ids:
            self.messages.pop(output_id, None)

    async def retrieve(self, output_id):
        self._check("retrieve")
        if output_id not in self.messages:
            raise TransportError(f"message {output_id} not found")
        return output_id

    def names(self) -> list[str]:
        return [call[0] for call in self.calls]


class StaticProcessor(Processor):
    """Returns whatever result is set, recording the payloads it saw."""

    name = "static"

    def __init__(self, result=None):
        self.result = result if result is not None else Success("OUT")
        self.payloads: list[str] = []

    def _process(self, raw):
        self.payloads.append(raw)
        return self.result


def make_event(kind=EventKind.CREATED, source_id=1, content="/bytecode x = 1", channel=10):
    return SourceEvent(kind=kind, source_id=source_id, channel=channel, content=content)


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def processor():
    return StaticProcessor()


@pytest.fixture
def engine(transport, processor):
    return SyncEngine(transport, processor, unit_max_size=40)


@pytest.fixture
def event():
    """Factory for source events."""
    return make_event
