# arrivals/clients/reconciler.py
"""
Reconciles a client's local billboard selection with the server's.

The client is always in one of three states:

  IDLE         server wins, every poll overwrites the local selection
  MANUAL_EDIT  the user changed date / event / codes; polls are observed but
               not applied until the edit lease runs out or the edit is launched
  SUBMITTING   a launch is in flight; polls are not applied and further edits
               are refused until it finishes

An IDLE poll that finds no server billboard clears the local selection,
except when that selection is a staged (never launched) event the admin is
still setting up.
"""

import time
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional
from arrivals.config import settings
from arrivals.errors import ValidationError
from arrivals.utils import dates
from arrivals.utils.logger import get_logger

logger = get_logger(__name__)


class SyncState(str, Enum):
    IDLE = "idle"
    MANUAL_EDIT = "manual_edit"
    SUBMITTING = "submitting"


@dataclass(frozen=True)
class Selection:
    event_id: str = ""
    event_name: str = ""
    event_date: str = ""
    security_codes: tuple = ()


@dataclass(frozen=True)
class ServerBillboard:
    selection: Selection
    last_updated: Optional[str]

    @classmethod
    def from_payload(cls, payload) -> Optional["ServerBillboard"]:
        """Parse an `activeBillboard` payload. Raises ValueError if it is malformed."""
        if payload is None:
            return None
        if not isinstance(payload, dict):
            raise ValueError(f"billboard payload is {type(payload).__name__}, not an object")
        event_id = payload.get("eventId")
        if not event_id:
            raise ValueError("billboard payload has no eventId")
        codes = payload.get("securityCodes") or []
        if not isinstance(codes, list) or not all(isinstance(c, str) for c in codes):
            raise ValueError("billboard securityCodes must be a list of strings")
        return cls(
            selection=Selection(
                event_id=str(event_id),
                event_name=payload.get("eventName") or "",
                event_date=payload.get("eventDate") or "",
                security_codes=tuple(c.upper() for c in codes),
            ),
            last_updated=payload.get("lastUpdated"),
        )


class ResponseGuard:
    """
    Tickets are handed out in request-start order. A response is applied only
    if its ticket is newer than the last one applied, so a slow early poll can
    never overwrite a faster later one. Closing the guard rejects everything.
    """

    def __init__(self):
        self._issued = 0
        self._applied = 0
        self._closed = False

    def issue(self) -> int:
        self._issued += 1
        return self._issued

    def accept(self, ticket: int) -> bool:
        if self.is_stale(ticket):
            return False
        self._applied = ticket
        return True

    def is_stale(self, ticket: int) -> bool:
        """True once a newer response was applied or the guard is closed."""
        return self._closed or ticket <= self._applied

    def close(self):
        self._closed = True

    @property
    def closed(self) -> bool:
        return self._closed


class BillboardReconciler:
    def __init__(self, lease_seconds: float = None, clock=time.monotonic, today=dates.today):
        self.lease_seconds = lease_seconds if lease_seconds is not None else settings.EDIT_LEASE_SECONDS
        self._clock = clock
        self._today = today
        self._state = SyncState.IDLE
        self._lease_expires = None
        self._selection = Selection(event_date=today())
        self._from_server = False        # selection mirrors a launched billboard
        self._dismissed = None           # lastUpdated of a soft-cleared billboard
        self.server: Optional[ServerBillboard] = None

    # ── State ─────────────────────────────────────────────────────────────

    @property
    def state(self) -> SyncState:
        if self._state is SyncState.MANUAL_EDIT and self._clock() >= self._lease_expires:
            logger.debug("Edit lease expired, resuming server sync")
            self._state = SyncState.IDLE
            self._lease_expires = None
        return self._state

    @property
    def selection(self) -> Selection:
        return self._selection

    def _edit(self, **changes) -> Selection:
        if self.state is SyncState.SUBMITTING:
            raise ValidationError("A billboard launch is in progress")
        self._selection = replace(self._selection, **changes)
        self._from_server = False
        self._state = SyncState.MANUAL_EDIT
        self._lease_expires = self._clock() + self.lease_seconds
        return self._selection

    # ── Local edits ───────────────────────────────────────────────────────

    def select_date(self, event_date: str) -> Selection:
        dates.validate_event_date(event_date)
        return self._edit(event_date=event_date)

    def select_event(self, event_id: str, event_name: str = "") -> Selection:
        return self._edit(event_id=event_id or "", event_name=event_name or "")

    def add_code(self, code: str) -> bool:
        code = (code or "").strip().upper()
        if not code or code in self._selection.security_codes:
            return False
        self._edit(security_codes=self._selection.security_codes + (code,))
        return True

    def remove_code(self, code: str) -> bool:
        code = (code or "").strip().upper()
        if code not in self._selection.security_codes:
            return False
        self._edit(security_codes=tuple(c for c in self._selection.security_codes if c != code))
        return True

    # ── Launch (commit) ───────────────────────────────────────────────────

    def begin_submit(self) -> Selection:
        if self.state is SyncState.SUBMITTING:
            raise ValidationError("A billboard launch is already in progress")
        if not self._selection.event_id:
            raise ValidationError("Select an event before launching the billboard")
        if not self._selection.security_codes:
            raise ValidationError("Add at least one security code before launching the billboard")
        self._state = SyncState.SUBMITTING
        self._lease_expires = None
        return self._selection

    def submit_succeeded(self, payload) -> Selection:
        billboard = ServerBillboard.from_payload(payload)
        self._state = SyncState.IDLE
        self._dismissed = None
        if billboard is not None:
            self.server = billboard
            self._selection = billboard.selection
            self._from_server = True
        logger.info(f"Billboard launched: {self._selection.event_name} ({self._selection.event_id})")
        return self._selection

    def submit_failed(self):
        """Keep the user's edit and give them a fresh lease to retry."""
        self._state = SyncState.MANUAL_EDIT
        self._lease_expires = self._clock() + self.lease_seconds

    # ── Clears ────────────────────────────────────────────────────────────

    def clear_local(self):
        """
        Drop the local view only. The billboard that was showing stays dismissed
        until the server publishes a newer one.
        """
        self._dismissed = self.server.last_updated if self.server else None
        self._reset()

    def cleared_globally(self):
        self.server = None
        self._dismissed = None
        self._reset()

    def _reset(self):
        self._selection = Selection(event_date=self._today())
        self._from_server = False
        self._state = SyncState.IDLE
        self._lease_expires = None

    # ── Poll results ──────────────────────────────────────────────────────

    def apply_server(self, payload) -> bool:
        """
        Merge one poll result. Returns True when the local selection changed.
        A malformed payload raises ValueError and leaves everything untouched.
        """
        billboard = ServerBillboard.from_payload(payload)
        self.server = billboard

        state = self.state
        if state is not SyncState.IDLE:
            logger.debug(f"Poll observed during {state.value}, local selection kept")
            return False

        if billboard is None:
            if not self._from_server:
                return False   # empty, or a staged selection not launched yet
            self._reset()
            logger.info("Server billboard is gone, local selection cleared")
            return True

        if self._dismissed is not None and billboard.last_updated == self._dismissed:
            return False
        self._dismissed = None

        changed = billboard.selection != self._selection or not self._from_server
        self._selection = billboard.selection
        self._from_server = True
        return changed
