# arrivals/services/security_code_service.py
"""
Security-code submission (the kiosk write path) and bulk code lookup.

A submission does not publish anything by itself: it confirms the code has
active check-ins and records the code as called, and the children show up
through notification_service on the next poll. Repeat submissions are
answered again from live data, never suppressed.
"""

from dataclasses import dataclass, field
from typing import Optional
from arrivals.errors import ValidationError
from arrivals.services.billboard_store import normalize_security_codes
from arrivals.services.checkin_parser import CheckInRecord
from arrivals.services.directory_client import DirectoryClient
from arrivals.services.pickup_requests import PickupRequestLog
from arrivals.utils.dates import validate_event_date
from arrivals.utils.logger import get_logger

logger = get_logger(__name__)

CODE_NOT_FOUND = "Security code not found"
LOOKUP_MISS = "No check-in found with this security code"


@dataclass
class SubmissionResult:
    success: bool
    message: str
    child_name: Optional[str] = None
    added_children: list = field(default_factory=list)   # [{"childName", "locationName"}]


@dataclass(frozen=True)
class CodeLookup:
    security_code: str
    record: Optional[CheckInRecord] = None
    error: Optional[str] = None


async def submit_security_code(directory: DirectoryClient, requests: PickupRequestLog,
                               code: Optional[str], event_id: Optional[str],
                               event_date: Optional[str]) -> SubmissionResult:
    code = (code or "").strip().upper()
    if not code:
        raise ValidationError("Security code is required")
    if not event_id:
        raise ValidationError("Event ID is required")
    if not event_date:
        raise ValidationError("Event date is required")
    validate_event_date(event_date, "eventDate")

    logger.info(f"[SECURITY CODE] Looking up {code} in event {event_id} on {event_date}")
    matches = await directory.list_check_ins(event_id, date=event_date, security_code=code)

    if not matches:
        logger.info(f"[SECURITY CODE] {code}: no active check-in for {event_id}/{event_date}")
        return SubmissionResult(success=False, message=CODE_NOT_FOUND)

    requests.record(event_id, event_date, code)
    added = [{"childName": m.person_name, "locationName": m.location_name} for m in matches]
    child_name = ", ".join(child["childName"] for child in added)
    logger.info(f"[SECURITY CODE] Pickup requested: {child_name} ({code})")
    return SubmissionResult(
        success=True,
        child_name=child_name,
        added_children=added,
        message=f"{len(added)} child(ren) have been added to the pickup list.",
    )


async def lookup_security_codes(directory: DirectoryClient, event_id: Optional[str],
                                codes: Optional[list]) -> list:
    """
    Per-code lookup for the billboard display. Each requested code yields its
    check-ins (checked-out ones flagged, not hidden) or a single miss entry.
    With no codes, returns every active check-in of the event.
    """
    if not event_id:
        raise ValidationError("Event ID is required")
    wanted = normalize_security_codes(codes)

    if not wanted:
        roster = await directory.list_check_ins(event_id)
        return [CodeLookup(security_code=r.security_code, record=r) for r in roster]

    records = await directory.list_check_ins(event_id, include_checked_out=True)
    by_code = {}
    for record in records:
        if record.security_code in wanted:
            by_code.setdefault(record.security_code, []).append(record)

    results = []
    for code in wanted:
        found = by_code.get(code)
        if not found:
            results.append(CodeLookup(security_code=code, error=LOOKUP_MISS))
            continue
        results.extend(CodeLookup(security_code=code, record=r) for r in found)
    logger.debug(f"Lookup {event_id}: {len(by_code)}/{len(wanted)} codes matched")
    return results
