# arrivals/services/location_service.py
"""Location status — children still in care, grouped per room."""

from dataclasses import dataclass, field
from typing import Optional
from arrivals.services.directory_client import DirectoryClient
from arrivals.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class LocationChild:
    id: str
    name: str
    check_in_time: Optional[str]
    security_code: str


@dataclass
class LocationSnapshot:
    id: str
    name: str
    child_count: int = 0
    children: list = field(default_factory=list)


def build_location_snapshots(check_ins: list) -> list:
    """Group active check-ins by location; unassigned ones are left out. Busiest first."""
    by_location = {}
    unassigned = 0
    for record in check_ins:
        if record.checked_out:
            continue
        if record.location_id is None:
            unassigned += 1
            continue
        snapshot = by_location.get(record.location_id)
        if snapshot is None:
            snapshot = by_location[record.location_id] = LocationSnapshot(
                id=record.location_id, name=record.location_name,
            )
        snapshot.children.append(LocationChild(
            id=record.id,
            name=record.person_name,
            check_in_time=record.check_in_time,
            security_code=record.security_code,
        ))
        snapshot.child_count += 1

    if unassigned:
        logger.debug(f"Location status: {unassigned} check-in(s) without a location skipped")
    return sorted(by_location.values(), key=lambda s: s.child_count, reverse=True)


async def location_status(directory: DirectoryClient, event_id: str, date: Optional[str] = None) -> list:
    check_ins = await directory.list_check_ins(event_id, date=date)
    snapshots = build_location_snapshots(check_ins)
    logger.info(f"Location status {event_id}/{date}: {len(snapshots)} rooms, "
                f"{sum(s.child_count for s in snapshots)} children")
    return snapshots
