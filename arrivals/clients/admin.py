# arrivals/clients/admin.py
"""
Admin panel client — picks a date and event, collects security codes and
launches the global billboard.

Two independent 10s loops run while the panel is open: the billboard loop
feeds the BillboardReconciler, the notifications loop refreshes the pickup
list for whatever the panel currently has selected. Notifications are a
read-only display and keep updating during an edit.
"""

import time
from typing import Optional
from arrivals.clients.api import BoardApi
from arrivals.clients.poller import PollingLoop
from arrivals.clients.reconciler import BillboardReconciler, Selection, SyncState
from arrivals.config import settings
from arrivals.errors import ArrivalsError, UpstreamAuthExpired
from arrivals.utils.logger import get_logger

logger = get_logger(__name__)


class AdminPanel:
    def __init__(self, api: BoardApi, poll_seconds: float = None, lease_seconds: float = None,
                 clock=time.monotonic):
        self.api = api
        self.reconciler = BillboardReconciler(lease_seconds=lease_seconds, clock=clock)
        interval = poll_seconds if poll_seconds is not None else settings.ADMIN_POLL_SECONDS

        self.events: list = []
        self.notifications: list = []
        self.error: Optional[str] = None
        self.needs_login = False

        self.billboard_loop = PollingLoop("admin-billboard", interval,
                                          self.api.get_global_billboard,
                                          self.reconciler.apply_server, self._on_error)
        self.notifications_loop = PollingLoop("admin-notifications", interval,
                                              self._fetch_notifications,
                                              self._apply_notifications, self._on_error)

    @property
    def state(self) -> SyncState:
        return self.reconciler.state

    @property
    def selection(self) -> Selection:
        return self.reconciler.selection

    async def start(self):
        await self.billboard_loop.poll_now()
        await self.notifications_loop.poll_now()
        self.billboard_loop.start()
        self.notifications_loop.start()

    async def stop(self):
        await self.billboard_loop.stop()
        await self.notifications_loop.stop()

    def _on_error(self, error: ArrivalsError):
        self.error = error.message
        if isinstance(error, UpstreamAuthExpired):
            self.needs_login = True

    async def _fetch_notifications(self) -> list:
        selection = self.reconciler.selection
        if not selection.event_id:
            return []
        return await self.api.active_notifications(selection.event_id, selection.event_date or None)

    def _apply_notifications(self, items):
        if not isinstance(items, list):
            raise ValueError("active notifications must be a list")
        self.notifications = items
        self.error = None

    # ── User actions ──────────────────────────────────────────────────────

    async def change_date(self, event_date: str) -> list:
        """Select a date and load its events. The event choice is reset."""
        self.reconciler.select_date(event_date)
        self.reconciler.select_event("", "")
        try:
            self.events = await self.api.events_by_date(event_date)
        except ArrivalsError as e:
            self._on_error(e)
            self.events = []
        return self.events

    def change_event(self, event_id: str) -> Selection:
        name = next((e.get("name") for e in self.events if e.get("id") == event_id), None)
        return self.reconciler.select_event(event_id, name or "Event")

    async def add_security_code(self, code: str) -> Optional[dict]:
        """
        Stage a code for the billboard. With an event and date selected the code
        is also submitted right away, so its children show up before the
        billboard is relaunched.
        """
        if not self.reconciler.add_code(code):
            return None
        selection = self.reconciler.selection
        if not (selection.event_id and selection.event_date):
            return None
        try:
            return await self.api.submit_security_code(code, selection.event_id, selection.event_date)
        except ArrivalsError as e:
            self._on_error(e)
            return None

    def remove_security_code(self, code: str) -> bool:
        return self.reconciler.remove_code(code)

    async def launch(self) -> Selection:
        selection = self.reconciler.begin_submit()
        try:
            response = await self.api.set_global_billboard(
                selection.event_id, selection.event_name,
                list(selection.security_codes), selection.event_date or None,
            )
        except ArrivalsError as e:
            self.reconciler.submit_failed()
            self._on_error(e)
            raise
        state = (response or {}).get("globalBillboardState") or {}
        self.error = None
        return self.reconciler.submit_succeeded(state.get("activeBillboard"))

    async def clear_local(self):
        await self.api.clear_global_billboard()
        self.reconciler.clear_local()
        self.notifications = []

    async def clear_global(self):
        await self.api.delete_global_billboard()
        self.reconciler.cleared_globally()
        self.notifications = []
        logger.info("🧹 Global billboard cleared from admin panel")
