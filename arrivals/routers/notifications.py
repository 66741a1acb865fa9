# arrivals/routers/notifications.py
"""
Pickup notifications + the kiosk write path.
GET  /active-notifications  — derived pickup list for an event/date (or the active billboard)
POST /security-code-entry   — call a code; 200 with success=false when nothing matches
POST /security-codes        — per-code lookup for the billboard display
"""

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse
from typing import Optional
from arrivals.deps import get_billboard_store, get_directory, get_pickup_requests
from arrivals.errors import ValidationError
from arrivals.schemas.checkin import CheckInOut
from arrivals.schemas.notification import (
    PickupNotificationOut, SecurityCodeEntryRequest, SecurityCodeEntryResponse,
    SecurityCodeLookupRequest,
)
from arrivals.services.billboard_store import GlobalBillboardStore
from arrivals.services.directory_client import DirectoryClient
from arrivals.services.notification_service import list_active_notifications
from arrivals.services.pickup_requests import PickupRequestLog
from arrivals.services.security_code_service import lookup_security_codes, submit_security_code
from arrivals.utils.dates import optional_event_date
from arrivals.utils.logger import get_logger

router = APIRouter()
logger = get_logger(__name__)


@router.get("/active-notifications", response_model=list[PickupNotificationOut],
            summary="Children awaiting pickup")
async def get_active_notifications(event_id: Optional[str] = Query(default=None, alias="eventId"),
                                   event_date: Optional[str] = Query(default=None, alias="eventDate"),
                                   store: GlobalBillboardStore = Depends(get_billboard_store),
                                   requests: PickupRequestLog = Depends(get_pickup_requests),
                                   directory: DirectoryClient = Depends(get_directory)):
    event_date = optional_event_date(event_date, "eventDate")
    notifications = await list_active_notifications(directory, store, requests, event_id, event_date)
    return [PickupNotificationOut.model_validate(n) for n in notifications]


@router.post("/security-code-entry", response_model=SecurityCodeEntryResponse,
             summary="Volunteer enters a parent's security code")
async def security_code_entry(body: SecurityCodeEntryRequest,
                              requests: PickupRequestLog = Depends(get_pickup_requests),
                              directory: DirectoryClient = Depends(get_directory)):
    try:
        result = await submit_security_code(directory, requests, body.security_code,
                                            body.event_id, body.event_date)
    except ValidationError as e:
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST,
                            content={"success": False, "message": e.message})
    return SecurityCodeEntryResponse.model_validate(result)


@router.post("/security-codes", summary="Look up check-ins for a list of security codes")
async def security_codes(body: SecurityCodeLookupRequest,
                         directory: DirectoryClient = Depends(get_directory)):
    results = await lookup_security_codes(directory, body.event_id, body.security_codes)
    payload = []
    for lookup in results:
        if lookup.record is None:
            payload.append({"securityCode": lookup.security_code, "error": lookup.error})
        else:
            payload.append(CheckInOut.model_validate(lookup.record).model_dump(by_alias=True))
    return payload
