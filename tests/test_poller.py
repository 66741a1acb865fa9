# tests/test_poller.py
"""Unit tests for the polling loop."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import asyncio
import pytest
from unittest.mock import MagicMock
from arrivals.clients.poller import PollingLoop
from arrivals.errors import UpstreamUnavailable


async def settle():
    for _ in range(3):
        await asyncio.sleep(0)


class TestPollingLoop:
    @pytest.mark.asyncio
    async def test_late_response_from_superseded_poll_is_dropped(self):
        gates = [asyncio.Event(), asyncio.Event()]
        results = ["old", "new"]
        calls = []

        async def fetch():
            i = len(calls)
            calls.append(i)
            await gates[i].wait()
            return results[i]

        applied = []
        loop = PollingLoop("test", 60, fetch, applied.append)
        first = asyncio.create_task(loop.poll_now())
        second = asyncio.create_task(loop.poll_now())
        await settle()

        gates[1].set()
        assert await second is True
        gates[0].set()
        assert await first is False
        assert applied == ["new"]

    @pytest.mark.asyncio
    async def test_stop_discards_in_flight_result(self):
        gate = asyncio.Event()
        applied = []

        async def fetch():
            await gate.wait()
            return "late"

        loop = PollingLoop("test", 60, fetch, applied.append)
        loop.start()
        await settle()
        assert loop.running

        await loop.stop()
        gate.set()
        await settle()

        assert applied == []
        assert not loop.running

    @pytest.mark.asyncio
    async def test_fetch_error_keeps_last_state(self):
        error = UpstreamUnavailable("Check-in service timed out")
        responses = iter(["good", error])

        async def fetch():
            value = next(responses)
            if isinstance(value, Exception):
                raise value
            return value

        applied = []
        on_error = MagicMock()
        loop = PollingLoop("test", 60, fetch, applied.append, on_error)

        assert await loop.poll_now() is True
        assert await loop.poll_now() is False
        assert applied == ["good"]
        on_error.assert_called_once_with(error)

    @pytest.mark.asyncio
    async def test_malformed_result_does_not_crash(self):
        async def fetch():
            return {"unexpected": True}

        def apply(result):
            raise ValueError("billboard payload has no eventId")

        loop = PollingLoop("test", 60, fetch, apply)
        assert await loop.poll_now() is False

    @pytest.mark.asyncio
    async def test_ticks_repeat_on_interval(self):
        calls = []

        async def fetch():
            calls.append(1)
            return len(calls)

        loop = PollingLoop("test", 0.01, fetch, lambda result: None)
        loop.start()
        await asyncio.sleep(0.06)
        await loop.stop()

        assert len(calls) >= 2

    @pytest.mark.asyncio
    async def test_error_from_superseded_poll_is_not_reported(self):
        gates = [asyncio.Event(), asyncio.Event()]
        calls = []

        async def fetch():
            i = len(calls)
            calls.append(i)
            await gates[i].wait()
            if i == 0:
                raise UpstreamUnavailable("Check-in service timed out")
            return "fresh"

        applied = []
        on_error = MagicMock()
        loop = PollingLoop("test", 60, fetch, applied.append, on_error)
        first = asyncio.create_task(loop.poll_now())
        second = asyncio.create_task(loop.poll_now())
        await settle()

        gates[1].set()
        assert await second is True
        gates[0].set()
        assert await first is False

        assert applied == ["fresh"]
        on_error.assert_not_called()
