# arrivals/schemas/checkin.py
from pydantic import BaseModel
from pydantic.alias_generators import to_camel
from typing import Optional


class EventOut(BaseModel):
    id: str
    name: str
    starts_at: Optional[str]
    archived: bool = False
    frequency: Optional[str] = None

    class Config:
        from_attributes = True
        alias_generator = to_camel
        populate_by_name = True


class LocationOut(BaseModel):
    id: str
    name: str
    kind: Optional[str] = None
    parent_id: Optional[str] = None

    class Config:
        from_attributes = True
        alias_generator = to_camel
        populate_by_name = True


class CheckInOut(BaseModel):
    id: str
    person_name: str
    security_code: str
    check_in_time: Optional[str]
    check_out_time: Optional[str]
    checked_out: bool
    location_id: Optional[str]
    location_name: str
    event_name: Optional[str]

    class Config:
        from_attributes = True
        alias_generator = to_camel
        populate_by_name = True


class LocationChildOut(BaseModel):
    id: str
    name: str
    check_in_time: Optional[str]
    security_code: str

    class Config:
        from_attributes = True
        alias_generator = to_camel
        populate_by_name = True


class LocationSnapshotOut(BaseModel):
    id: str
    name: str
    child_count: int
    children: list[LocationChildOut]

    class Config:
        from_attributes = True
        alias_generator = to_camel
        populate_by_name = True
