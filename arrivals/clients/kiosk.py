# arrivals/clients/kiosk.py
"""Volunteer code-entry kiosk: follows the active billboard and submits codes against its scope."""

from typing import Optional
from arrivals.clients.api import BoardApi
from arrivals.clients.poller import PollingLoop
from arrivals.clients.reconciler import ServerBillboard
from arrivals.config import settings
from arrivals.errors import ArrivalsError, UpstreamAuthExpired, ValidationError
from arrivals.utils.logger import get_logger

logger = get_logger(__name__)


class CodeEntryKiosk:
    def __init__(self, api: BoardApi, poll_seconds: float = None):
        self.api = api
        self.billboard: Optional[ServerBillboard] = None
        self.last_result: Optional[dict] = None
        self.error: Optional[str] = None
        self.needs_login = False
        interval = poll_seconds if poll_seconds is not None else settings.KIOSK_POLL_SECONDS
        self.loop = PollingLoop("kiosk-billboard", interval, self.api.get_global_billboard,
                                self._apply_billboard, self._on_error)

    def _apply_billboard(self, payload):
        self.billboard = ServerBillboard.from_payload(payload)
        self.error = None

    def _on_error(self, error: ArrivalsError):
        self.error = error.message
        if isinstance(error, UpstreamAuthExpired):
            self.needs_login = True

    async def start(self):
        await self.loop.poll_now()
        self.loop.start()

    async def stop(self):
        await self.loop.stop()

    async def submit(self, code: str) -> dict:
        """
        Submit one code. Always returns a {success, message, ...} dict the kiosk
        can display; a code with no check-in is success=False, not an error.
        """
        code = (code or "").strip().upper()
        if not code:
            result = {"success": False, "message": "Please enter a security code"}
        elif self.billboard is None or not self.billboard.selection.event_date:
            result = {"success": False, "message": "No active billboard to add pickups to"}
        else:
            selection = self.billboard.selection
            try:
                result = await self.api.submit_security_code(code, selection.event_id, selection.event_date)
            except UpstreamAuthExpired as e:
                self._on_error(e)
                result = {"success": False, "message": "Session expired. Please log in again."}
            except ValidationError as e:
                result = {"success": False, "message": e.message}
            except ArrivalsError as e:
                logger.warning(f"⚠️ Kiosk submission of {code} failed: {e.message}")
                result = {"success": False, "message": "An error occurred. Please try again."}
        self.last_result = result
        return result
