# arrivals/services/notification_service.py
"""
Pickup notifications — who is waiting to be picked up, per (event, date).

Nothing here is stored. Each call joins the scope's called security codes
(the active billboard's codes plus codes submitted at a kiosk) against the
upstream's live, not-checked-out check-ins. Upstream errors propagate as
UpstreamUnavailable / UpstreamAuthExpired for the route to translate.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional
from arrivals.services.billboard_store import GlobalBillboardStore
from arrivals.services.directory_client import DirectoryClient
from arrivals.services.pickup_requests import PickupRequestLog
from arrivals.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class PickupNotification:
    id: str                      # the underlying check-in id
    child_name: str
    security_code: str
    location_name: str
    location_id: Optional[str]
    notified_at: datetime
    check_in_time: Optional[str]
    event_id: str
    event_date: Optional[str]


def resolve_scope(store: GlobalBillboardStore, event_id: Optional[str],
                  event_date: Optional[str]) -> Optional[tuple]:
    """Explicit scope wins; otherwise the active billboard's; None when neither exists."""
    if event_id:
        return (event_id, event_date)
    billboard = store.get_active()
    if billboard is None:
        return None
    return billboard.scope


def called_codes(store: GlobalBillboardStore, requests: PickupRequestLog, scope: tuple) -> dict:
    """{code: notified_at} for every code that should surface a notification in scope."""
    codes = {}
    billboard = store.get_active()
    if billboard is not None and billboard.scope == scope:
        for code in billboard.security_codes:
            codes[code] = billboard.last_updated
    for code, requested_at in requests.codes_for(*scope).items():
        codes[code] = requested_at
    return codes


async def list_active_notifications(directory: DirectoryClient, store: GlobalBillboardStore,
                                    requests: PickupRequestLog, event_id: Optional[str] = None,
                                    event_date: Optional[str] = None) -> list:
    scope = resolve_scope(store, event_id, event_date)
    if scope is None:
        logger.debug("No explicit scope and no active billboard — no notifications")
        return []

    codes = called_codes(store, requests, scope)
    if not codes:
        return []

    scope_event, scope_date = scope
    check_ins = await directory.list_check_ins(scope_event, date=scope_date)

    notifications = [
        PickupNotification(
            id=record.id,
            child_name=record.person_name,
            security_code=record.security_code,
            location_name=record.location_name,
            location_id=record.location_id,
            notified_at=codes[record.security_code],
            check_in_time=record.check_in_time,
            event_id=scope_event,
            event_date=scope_date,
        )
        for record in check_ins
        if record.security_code and record.security_code in codes and not record.checked_out
    ]
    logger.debug(f"Notifications for {scope_event}/{scope_date}: {len(notifications)} "
                 f"from {len(check_ins)} active check-ins and {len(codes)} called codes")
    return notifications
