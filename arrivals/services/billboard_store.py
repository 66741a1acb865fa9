# arrivals/services/billboard_store.py
"""
Global billboard store — the one server-side record of which event, date and
security codes are live.

Readers get an immutable ActiveBillboard snapshot (or None). Writers build a
complete new snapshot and swap the reference under a single asyncio lock, so
a reader racing a writer sees either the old or the new billboard, never a mix.
One store is created per app in main.py startup and injected into routes.
"""

import asyncio
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional
from arrivals.errors import ValidationError
from arrivals.utils.dates import optional_event_date
from arrivals.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class Actor:
    id: Optional[str]
    name: str = "Unknown User"


@dataclass(frozen=True)
class ActiveBillboard:
    event_id: str
    event_name: str
    event_date: Optional[str]
    security_codes: tuple
    created_by: Actor
    last_updated: datetime

    @property
    def scope(self) -> tuple:
        return (self.event_id, self.event_date)


def normalize_security_codes(codes: Optional[Iterable[str]]) -> tuple:
    """Trim, uppercase and de-duplicate, keeping first-seen order. Blank codes are dropped."""
    seen = []
    for code in codes or []:
        if not isinstance(code, str):
            raise ValidationError("Security codes must be strings")
        normalized = code.strip().upper()
        if normalized and normalized not in seen:
            seen.append(normalized)
    return tuple(seen)


class GlobalBillboardStore:
    def __init__(self):
        self._snapshot: Optional[ActiveBillboard] = None
        self._write_lock = asyncio.Lock()

    def get_active(self) -> Optional[ActiveBillboard]:
        return self._snapshot

    async def set_active(self, event_id: str, event_name: str, security_codes: Iterable[str],
                         event_date: Optional[str], actor: Actor) -> ActiveBillboard:
        """
        Replace the active billboard. The previous codes are NOT merged in —
        callers send the full desired set.
        """
        if not event_id or not str(event_id).strip():
            raise ValidationError("Event ID and event name are required")
        if not event_name or not str(event_name).strip():
            raise ValidationError("Event ID and event name are required")
        event_date = optional_event_date(event_date, "eventDate")
        codes = normalize_security_codes(security_codes)
        if not codes:
            # A code-less billboard is a client-side staging selection only
            raise ValidationError("At least one security code is required to launch a billboard")

        async with self._write_lock:
            snapshot = ActiveBillboard(
                event_id=str(event_id).strip(),
                event_name=str(event_name).strip(),
                event_date=event_date,
                security_codes=codes,
                created_by=actor,
                last_updated=datetime.utcnow(),
            )
            self._snapshot = snapshot

        logger.info(f"📋 Billboard set: {snapshot.event_name} ({snapshot.event_id}) "
                    f"date={snapshot.event_date} codes={len(codes)} by {actor.name} ({actor.id})")
        return snapshot

    async def clear_active(self, actor: Actor) -> bool:
        """Destroy the active billboard. Returns whether one existed; clearing twice is fine."""
        async with self._write_lock:
            existed = self._snapshot is not None
            self._snapshot = None
        if existed:
            logger.info(f"🧹 Billboard cleared by {actor.name} ({actor.id})")
        return existed

    def changed_since(self, since: Optional[datetime]) -> bool:
        snapshot = self._snapshot
        if snapshot is None:
            return False
        return since is None or snapshot.last_updated > since
