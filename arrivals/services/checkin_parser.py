# arrivals/services/checkin_parser.py
"""
Parses Planning Center Check-Ins JSON:API documents (events, locations,
check-ins with included Person/Location resources) into plain records.
Returns unified dataclasses regardless of which endpoint produced the page.
"""

from dataclasses import dataclass, field
from typing import Optional
from arrivals.utils.dates import parse_timestamp
from arrivals.utils.logger import get_logger

logger = get_logger(__name__)

UNASSIGNED_LOCATION = "No Location Assigned"


@dataclass(frozen=True)
class CheckInRecord:
    id: str
    person_name: str
    security_code: str               # uppercased, "" when upstream has none
    check_in_time: Optional[str]     # ISO-8601 UTC, as upstream reports created_at
    check_out_time: Optional[str]    # None while the child is still in care
    location_id: Optional[str]       # None when no location was assigned
    location_name: str
    event_name: Optional[str]
    person_id: Optional[str] = None

    @property
    def checked_out(self) -> bool:
        return self.check_out_time is not None


@dataclass(frozen=True)
class Event:
    id: str
    name: str
    starts_at: Optional[str]
    archived: bool = False
    frequency: Optional[str] = None


@dataclass(frozen=True)
class Location:
    id: str
    name: str
    kind: Optional[str] = None
    parent_id: Optional[str] = None


@dataclass
class IncludedIndex:
    """Lookup table over a document's `included` array, keyed by (type, id)."""
    items: dict = field(default_factory=dict)

    def add_all(self, included: list):
        for item in included or []:
            if isinstance(item, dict) and item.get("type") and item.get("id") is not None:
                self.items[(item["type"], str(item["id"]))] = item

    def get(self, kind: str, ident: Optional[str]) -> Optional[dict]:
        if ident is None:
            return None
        return self.items.get((kind, str(ident)))


def _relationship_id(resource: dict, name: str) -> Optional[str]:
    data = ((resource.get("relationships") or {}).get(name) or {}).get("data")
    if isinstance(data, list):
        data = data[0] if data else None
    if isinstance(data, dict) and data.get("id") is not None:
        return str(data["id"])
    return None


def _relationship_ids(resource: dict, name: str) -> list:
    data = ((resource.get("relationships") or {}).get(name) or {}).get("data")
    if isinstance(data, dict):
        data = [data]
    return [str(d["id"]) for d in data or [] if isinstance(d, dict) and d.get("id") is not None]


def _full_name(attrs: dict) -> str:
    name = " ".join(p for p in (attrs.get("first_name"), attrs.get("last_name")) if p)
    return name or attrs.get("name") or ""


def _normalize_timestamp(value: Optional[str]) -> Optional[str]:
    parsed = parse_timestamp(value)
    return parsed.isoformat().replace("+00:00", "Z") if parsed else None


def parse_check_in(resource: dict, index: IncludedIndex,
                   location_id: Optional[str] = None) -> CheckInRecord:
    """
    Build a CheckInRecord from one `check_ins` resource.
    When location_id is given and the check-in lists several locations, that
    location is preferred; otherwise the first listed location wins.
    """
    attrs = resource.get("attributes") or {}

    person_id = _relationship_id(resource, "person")
    person = index.get("Person", person_id)
    person_name = _full_name((person or {}).get("attributes") or {}) or _full_name(attrs) or "Unknown"

    loc_ids = _relationship_ids(resource, "locations")
    chosen = location_id if location_id in loc_ids else (loc_ids[0] if loc_ids else None)
    location = index.get("Location", chosen)
    if chosen is None:
        location_name = UNASSIGNED_LOCATION
    else:
        location_name = ((location or {}).get("attributes") or {}).get("name") or "Unknown Location"

    return CheckInRecord(
        id=str(resource.get("id")),
        person_name=person_name,
        security_code=(attrs.get("security_code") or "").strip().upper(),
        check_in_time=_normalize_timestamp(attrs.get("created_at")),
        check_out_time=_normalize_timestamp(attrs.get("checked_out_at")) if attrs.get("checked_out_at") else None,
        location_id=chosen,
        location_name=location_name,
        event_name=attrs.get("event_times_name") or attrs.get("event_name"),
        person_id=person_id,
    )


def parse_event(resource: dict) -> Event:
    attrs = resource.get("attributes") or {}
    return Event(
        id=str(resource.get("id")),
        name=attrs.get("name") or "",
        starts_at=attrs.get("starts_at") or attrs.get("created_at"),
        archived=attrs.get("archived") is True or attrs.get("archived_at") is not None,
        frequency=attrs.get("frequency"),
    )


def parse_location(resource: dict) -> Location:
    attrs = resource.get("attributes") or {}
    return Location(
        id=str(resource.get("id")),
        name=attrs.get("name") or "Unknown Location",
        kind=attrs.get("kind"),
        parent_id=_relationship_id(resource, "parent"),
    )
