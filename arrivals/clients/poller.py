# arrivals/clients/poller.py
"""
Fixed-interval polling used by every client view.

Each tick is started as its own task, so a slow request never delays the
next tick. Results pass through a ResponseGuard: only a response newer than
the last applied one is handed to `apply`. After stop() nothing else is
applied, even if a request was already in flight.

A failed fetch or a malformed result keeps the last good state, and the
error goes to `on_error` so the view can show it.
"""

import asyncio
from typing import Awaitable, Callable, Optional
from arrivals.clients.reconciler import ResponseGuard
from arrivals.errors import ArrivalsError
from arrivals.utils.logger import get_logger

logger = get_logger(__name__)


class PollingLoop:
    def __init__(self, name: str, interval: float,
                 fetch: Callable[[], Awaitable],
                 apply: Callable,
                 on_error: Optional[Callable[[ArrivalsError], None]] = None):
        self.name = name
        self.interval = interval
        self._fetch = fetch
        self._apply = apply
        self._on_error = on_error
        self._guard = ResponseGuard()
        self._task: Optional[asyncio.Task] = None
        self._inflight = set()

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self):
        if self.running:
            return
        if self._guard.closed:
            self._guard = ResponseGuard()
        self._task = asyncio.create_task(self._run(), name=f"poll-{self.name}")
        logger.debug(f"Polling {self.name} every {self.interval}s")

    async def _run(self):
        while True:
            task = asyncio.create_task(self._tick(self._guard.issue()))
            self._inflight.add(task)
            task.add_done_callback(self._inflight.discard)
            await asyncio.sleep(self.interval)

    async def poll_now(self) -> bool:
        """Run one tick inline. Returns whether its result was applied."""
        return await self._tick(self._guard.issue())

    async def _tick(self, ticket: int) -> bool:
        try:
            result = await self._fetch()
        except ArrivalsError as e:
            if self._guard.is_stale(ticket):
                return False
            logger.warning(f"⚠️ {self.name} poll failed, keeping last state: {e.message}")
            if self._on_error:
                self._on_error(e)
            return False

        if not self._guard.accept(ticket):
            logger.debug(f"{self.name}: dropped response #{ticket} (superseded or stopped)")
            return False

        try:
            self._apply(result)
        except (ValueError, TypeError, KeyError) as e:
            logger.warning(f"⚠️ {self.name} returned a malformed result, keeping last state: {e}")
            return False
        return True

    async def stop(self):
        self._guard.close()
        tasks = list(self._inflight)
        if self._task is not None:
            tasks.append(self._task)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._task = None
        self._inflight.clear()
