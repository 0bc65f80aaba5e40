"""Tests for per-key event dispatch."""

import asyncio

import pytest

from replysync.dispatcher import KeyedDispatcher


class TestKeyedDispatcher:

    @pytest.mark.asyncio
    async def test_same_key_in_order(self):
        """Items for one key run sequentially, even when handlers yield."""
        seen = []

        async def handler(item):
            seen.append(("start", item))
            await asyncio.sleep(0.01 if item == 1 else 0)
            seen.append(("end", item))

        dispatcher = KeyedDispatcher(handler)
        for item in (1, 2, 3):
            dispatcher.submit("k", item)
        await dispatcher.drain()

        assert seen == [
            ("start", 1), ("end", 1),
            ("start", 2), ("end", 2),
            ("start", 3), ("end", 3),
        ]

    @pytest.mark.asyncio
    async def test_different_keys_concurrent(self):
        """Key a waits on key b; serializing across keys would deadlock."""
        b_ran = asyncio.Event()

        async def handler(item):
            if item == "a":
                await b_ran.wait()
            else:
                b_ran.set()

        dispatcher = KeyedDispatcher(handler)
        dispatcher.submit("a", "a")
        dispatcher.submit("b", "b")
        await asyncio.wait_for(dispatcher.drain(), timeout=2)

        assert b_ran.is_set()

    @pytest.mark.asyncio
    async def test_handler_error_does_not_stop_queue(self):
        seen = []

        async def handler(item):
            if item == "bad":
                raise RuntimeError("boom")
            seen.append(item)

        dispatcher = KeyedDispatcher(handler)
        for item in ("bad", "good"):
            dispatcher.submit("k", item)
        await dispatcher.drain()

        assert seen == ["good"]

    @pytest.mark.asyncio
    async def test_workers_exit_when_idle(self):
        async def handler(item):
            pass

        dispatcher = KeyedDispatcher(handler)
        dispatcher.submit("k", 1)
        assert dispatcher.pending == 1
        await dispatcher.drain()
        assert dispatcher.pending == 0

        # A new worker starts for later work on the same key
        dispatcher.submit("k", 2)
        assert dispatcher.pending == 1
        await dispatcher.drain()

    @pytest.mark.asyncio
    async def test_close_cancels(self):
        started = asyncio.Event()

        async def handler(item):
            started.set()
            await asyncio.sleep(10)

        dispatcher = KeyedDispatcher(handler)
        dispatcher.submit("k", 1)
        await started.wait()
        await asyncio.wait_for(dispatcher.close(), timeout=2)

        assert dispatcher.pending == 0
