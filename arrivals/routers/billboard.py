# arrivals/routers/billboard.py
"""
Global billboard endpoints.
GET    /global-billboard         — current billboard or null, never an error
POST   /set-global-billboard     — full replace (admin)
POST   /clear-global-billboard   — soft clear, acknowledged for the calling client only (admin)
DELETE /global-billboard         — destroy for everyone (admin)
GET    /billboard-updates        — cheap "has anything changed since" check
"""

from fastapi import APIRouter, Depends, Query
from typing import Optional
from arrivals.deps import get_billboard_store, get_pickup_requests, require_admin
from arrivals.errors import ValidationError
from arrivals.schemas.billboard import (
    ActiveBillboardOut, ActorOut, BillboardSetRequest, BillboardUpdatesOut,
    ClearBillboardResponse, GlobalBillboardOut, SetBillboardResponse,
)
from arrivals.services.billboard_store import Actor, GlobalBillboardStore
from arrivals.services.pickup_requests import PickupRequestLog
from arrivals.utils.dates import parse_timestamp
from arrivals.utils.logger import get_logger

router = APIRouter()
logger = get_logger(__name__)


@router.get("/global-billboard", response_model=GlobalBillboardOut, summary="Current active billboard")
def get_global_billboard(store: GlobalBillboardStore = Depends(get_billboard_store)):
    return GlobalBillboardOut.from_snapshot(store.get_active())


@router.post("/set-global-billboard", response_model=SetBillboardResponse, summary="Replace the active billboard")
@router.post("/global-billboard", response_model=SetBillboardResponse, include_in_schema=False)
async def set_global_billboard(body: BillboardSetRequest,
                               actor: Actor = Depends(require_admin),
                               store: GlobalBillboardStore = Depends(get_billboard_store),
                               requests: PickupRequestLog = Depends(get_pickup_requests)):
    """
    Full-replace semantics: securityCodes must be the complete desired set.
    Moving from one event or date to another drops pickup requests from the old
    one; a first launch keeps codes already called for its scope.
    """
    previous = store.get_active()
    billboard = await store.set_active(body.event_id, body.event_name, body.security_codes,
                                       body.event_date, actor)
    cleared = 0
    if previous is not None and previous.scope != billboard.scope:
        cleared = requests.clear()
    return SetBillboardResponse(
        success=True,
        message="Global billboard state updated successfully",
        global_billboard_state=GlobalBillboardOut.from_snapshot(billboard),
        notifications_cleared=cleared,
    )


@router.post("/clear-global-billboard", response_model=ClearBillboardResponse,
             summary="Soft clear — the caller drops its local view, other clients are unaffected")
def clear_global_billboard_local(actor: Actor = Depends(require_admin),
                                 store: GlobalBillboardStore = Depends(get_billboard_store)):
    current = store.get_active()
    logger.info(f"Soft clear acknowledged for {actor.name} ({actor.id})")
    return ClearBillboardResponse(
        success=True,
        message="Billboard cleared for this client; it stays active for everyone else",
        scope="local",
        active_billboard=ActiveBillboardOut.model_validate(current) if current else None,
    )


@router.delete("/global-billboard", response_model=ClearBillboardResponse, summary="Destroy the active billboard")
async def delete_global_billboard(actor: Actor = Depends(require_admin),
                                  store: GlobalBillboardStore = Depends(get_billboard_store),
                                  requests: PickupRequestLog = Depends(get_pickup_requests)):
    await store.clear_active(actor)
    cleared = requests.clear()
    return ClearBillboardResponse(
        success=True,
        message="Global billboard state and active notifications cleared",
        scope="global",
        notifications_cleared=cleared,
    )


@router.get("/billboard-updates", response_model=BillboardUpdatesOut, summary="Poll for billboard changes")
def billboard_updates(last_update: Optional[str] = Query(default=None, alias="lastUpdate"),
                      event_id: Optional[str] = Query(default=None, alias="eventId"),
                      store: GlobalBillboardStore = Depends(get_billboard_store)):
    snapshot = store.get_active()
    if snapshot is None:
        return BillboardUpdatesOut(has_updates=False)

    since = None
    if last_update:
        parsed = parse_timestamp(last_update)
        if parsed is None:
            raise ValidationError("Invalid lastUpdate timestamp")
        since = parsed.replace(tzinfo=None)

    has_updates = (not event_id or snapshot.event_id == event_id) and store.changed_since(since)
    return BillboardUpdatesOut(
        has_updates=has_updates,
        last_updated=snapshot.last_updated,
        active_billboard=ActiveBillboardOut.model_validate(snapshot),
        created_by=ActorOut.model_validate(snapshot.created_by),
    )
