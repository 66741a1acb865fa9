# arrivals/schemas/billboard.py
from pydantic import BaseModel
from pydantic.alias_generators import to_camel
from datetime import datetime
from typing import Optional


class ActorOut(BaseModel):
    id: Optional[str]
    name: str

    class Config:
        from_attributes = True


class ActiveBillboardOut(BaseModel):
    event_id: str
    event_name: str
    event_date: Optional[str]
    security_codes: list[str]
    created_by: ActorOut
    last_updated: datetime

    class Config:
        from_attributes = True
        alias_generator = to_camel
        populate_by_name = True


class GlobalBillboardOut(BaseModel):
    active_billboard: Optional[ActiveBillboardOut] = None
    last_updated: Optional[datetime] = None
    created_by: Optional[ActorOut] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True

    @classmethod
    def from_snapshot(cls, snapshot) -> "GlobalBillboardOut":
        if snapshot is None:
            return cls()
        return cls(
            active_billboard=ActiveBillboardOut.model_validate(snapshot),
            last_updated=snapshot.last_updated,
            created_by=ActorOut.model_validate(snapshot.created_by),
        )


class BillboardSetRequest(BaseModel):
    event_id: Optional[str] = None
    event_name: Optional[str] = None
    security_codes: list[str] = []
    event_date: Optional[str] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class SetBillboardResponse(BaseModel):
    success: bool
    message: str
    global_billboard_state: GlobalBillboardOut
    notifications_cleared: int = 0

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class ClearBillboardResponse(BaseModel):
    success: bool
    message: str
    scope: str                       # local | global
    notifications_cleared: int = 0
    active_billboard: Optional[ActiveBillboardOut] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class BillboardUpdatesOut(BaseModel):
    has_updates: bool
    last_updated: Optional[datetime] = None
    active_billboard: Optional[ActiveBillboardOut] = None
    created_by: Optional[ActorOut] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True
