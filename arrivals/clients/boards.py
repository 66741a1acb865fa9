# arrivals/clients/boards.py
"""
Read-only display clients.

  PublicBillboard      — children awaiting pickup for the active billboard (10s)
  LocationStatusBoard  — per-room head counts for the active event (15s)
  StatusBoard          — passive, unscoped pickup list (30s)

None of them hold local edits, so whatever the server says is shown as-is.
A failed poll leaves the previous data on screen and sets `error`.
"""

from collections import OrderedDict
from typing import Optional
from arrivals.clients.api import BoardApi
from arrivals.clients.poller import PollingLoop
from arrivals.clients.reconciler import ServerBillboard
from arrivals.config import settings
from arrivals.errors import ArrivalsError, UpstreamAuthExpired


class _Board:
    def __init__(self, api: BoardApi):
        self.api = api
        self.billboard: Optional[ServerBillboard] = None
        self.error: Optional[str] = None
        self.needs_login = False
        self.loops: list = []

    def _on_error(self, error: ArrivalsError):
        self.error = error.message
        if isinstance(error, UpstreamAuthExpired):
            self.needs_login = True

    def _apply_billboard(self, payload):
        self.billboard = ServerBillboard.from_payload(payload)

    def _scope(self) -> tuple:
        if self.billboard is None:
            return None, None
        selection = self.billboard.selection
        return selection.event_id, selection.event_date or None

    async def start(self):
        for loop in self.loops:
            await loop.poll_now()
        for loop in self.loops:
            loop.start()

    async def stop(self):
        for loop in self.loops:
            await loop.stop()


class PublicBillboard(_Board):
    def __init__(self, api: BoardApi, poll_seconds: float = None):
        super().__init__(api)
        interval = poll_seconds if poll_seconds is not None else settings.BILLBOARD_POLL_SECONDS
        self.notifications: list = []
        self.loops = [
            PollingLoop("billboard", interval, self.api.get_global_billboard,
                        self._apply_billboard, self._on_error),
            PollingLoop("billboard-notifications", interval, self._fetch_notifications,
                        self._apply_notifications, self._on_error),
        ]

    async def _fetch_notifications(self) -> list:
        event_id, event_date = self._scope()
        if event_id is None:
            return []
        return await self.api.active_notifications(event_id, event_date)

    def _apply_notifications(self, items):
        if not isinstance(items, list):
            raise ValueError("active notifications must be a list")
        self.notifications = items
        self.error = None

    def by_location(self) -> "OrderedDict[str, list]":
        """Notifications grouped by room, in first-seen order."""
        groups = OrderedDict()
        for item in self.notifications:
            groups.setdefault(item.get("locationName") or "Unknown Location", []).append(item)
        return groups


class LocationStatusBoard(_Board):
    def __init__(self, api: BoardApi, poll_seconds: float = None):
        super().__init__(api)
        interval = poll_seconds if poll_seconds is not None else settings.LOCATION_STATUS_POLL_SECONDS
        self.locations: list = []
        self.loops = [
            PollingLoop("location-billboard", interval, self.api.get_global_billboard,
                        self._apply_billboard, self._on_error),
            PollingLoop("location-status", interval, self._fetch_status,
                        self._apply_status, self._on_error),
        ]

    async def _fetch_status(self) -> list:
        event_id, event_date = self._scope()
        if event_id is None:
            return []
        return await self.api.location_status(event_id, event_date)

    def _apply_status(self, items):
        if not isinstance(items, list):
            raise ValueError("location status must be a list")
        self.locations = items
        self.error = None

    @property
    def total_children(self) -> int:
        return sum(location.get("childCount", 0) for location in self.locations)


class StatusBoard(_Board):
    def __init__(self, api: BoardApi, poll_seconds: float = None):
        super().__init__(api)
        interval = poll_seconds if poll_seconds is not None else settings.STATUS_BOARD_POLL_SECONDS
        self.notifications: list = []
        self.loops = [
            PollingLoop("status-board", interval, self.api.active_notifications,
                        self._apply_notifications, self._on_error),
        ]

    def _apply_notifications(self, items):
        if not isinstance(items, list):
            raise ValueError("active notifications must be a list")
        self.notifications = items
        self.error = None
