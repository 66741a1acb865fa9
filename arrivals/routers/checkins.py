# arrivals/routers/checkins.py
"""Read-only views over the upstream directory: events, locations, check-ins, room status."""

from fastapi import APIRouter, Depends, Query
from typing import Optional
from arrivals.deps import get_directory
from arrivals.errors import ValidationError
from arrivals.schemas.checkin import CheckInOut, EventOut, LocationOut, LocationSnapshotOut
from arrivals.services.directory_client import DirectoryClient
from arrivals.services.location_service import location_status
from arrivals.utils.dates import optional_event_date

router = APIRouter()


@router.get("/events", response_model=list[EventOut], summary="All non-archived events")
async def list_events(directory: DirectoryClient = Depends(get_directory)):
    return [EventOut.model_validate(e) for e in await directory.list_events()]


@router.get("/events-by-date", response_model=list[EventOut], summary="Non-archived events on a date")
async def events_by_date(date: Optional[str] = None, directory: DirectoryClient = Depends(get_directory)):
    date = optional_event_date(date)
    return [EventOut.model_validate(e) for e in await directory.list_events(date)]


@router.get("/events/{event_id}/locations", response_model=list[LocationOut], summary="Locations of an event")
async def event_locations(event_id: str, directory: DirectoryClient = Depends(get_directory)):
    return [LocationOut.model_validate(loc) for loc in await directory.list_locations(event_id)]


@router.get("/billboard/check-ins", response_model=list[CheckInOut], summary="Active check-ins for an event")
async def billboard_check_ins(event_id: Optional[str] = Query(default=None, alias="eventId"),
                              location_id: Optional[str] = Query(default=None, alias="locationId"),
                              date: Optional[str] = None,
                              directory: DirectoryClient = Depends(get_directory)):
    """locationId=all (or omitted) returns every active check-in, unassigned ones included."""
    if not event_id:
        raise ValidationError("Event ID is required")
    date = optional_event_date(date)
    records = await directory.list_check_ins(event_id, location_id=location_id, date=date)
    return [CheckInOut.model_validate(r) for r in records]


@router.get("/location-status", response_model=list[LocationSnapshotOut], summary="Children remaining per room")
async def get_location_status(event_id: Optional[str] = Query(default=None, alias="eventId"),
                              date: Optional[str] = None,
                              directory: DirectoryClient = Depends(get_directory)):
    if not event_id:
        raise ValidationError("eventId is required")
    date = optional_event_date(date)
    return [LocationSnapshotOut.model_validate(s) for s in await location_status(directory, event_id, date)]
