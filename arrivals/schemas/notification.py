# arrivals/schemas/notification.py
from pydantic import BaseModel
from pydantic.alias_generators import to_camel
from datetime import datetime
from typing import Optional


class PickupNotificationOut(BaseModel):
    id: str
    child_name: str
    security_code: str
    location_name: str
    location_id: Optional[str]
    notified_at: datetime
    check_in_time: Optional[str]
    event_id: str
    event_date: Optional[str]

    class Config:
        from_attributes = True
        alias_generator = to_camel
        populate_by_name = True


class SecurityCodeEntryRequest(BaseModel):
    security_code: Optional[str] = None
    event_id: Optional[str] = None
    event_date: Optional[str] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class AddedChildOut(BaseModel):
    child_name: str
    location_name: str

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class SecurityCodeEntryResponse(BaseModel):
    success: bool
    message: str
    child_name: Optional[str] = None
    added_children: list[AddedChildOut] = []

    class Config:
        from_attributes = True
        alias_generator = to_camel
        populate_by_name = True


class SecurityCodeLookupRequest(BaseModel):
    event_id: Optional[str] = None
    security_codes: list[str] = []

    class Config:
        alias_generator = to_camel
        populate_by_name = True
