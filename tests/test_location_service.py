# tests/test_location_service.py
"""Unit tests for per-room location status."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from unittest.mock import AsyncMock, MagicMock
from arrivals.services.checkin_parser import CheckInRecord, UNASSIGNED_LOCATION
from arrivals.services.location_service import build_location_snapshots, location_status


def make_record(ident, location_id, location_name, checked_out_at=None):
    return CheckInRecord(
        id=ident,
        person_name=f"Child {ident}",
        security_code="ABC1",
        check_in_time="2024-01-07T14:05:00Z",
        check_out_time=checked_out_at,
        location_id=location_id,
        location_name=location_name,
        event_name="Sunday AM",
    )


def test_busiest_room_first_and_exclusions():
    snapshots = build_location_snapshots([
        make_record("1", "L1", "Nursery"),
        make_record("2", "L2", "Toddlers"),
        make_record("3", "L2", "Toddlers"),
        make_record("4", "L2", "Toddlers", checked_out_at="2024-01-07T15:00:00Z"),
        make_record("5", None, UNASSIGNED_LOCATION),
    ])

    assert [(s.name, s.child_count) for s in snapshots] == [("Toddlers", 2), ("Nursery", 1)]
    assert [c.id for c in snapshots[0].children] == ["2", "3"]


@pytest.mark.asyncio
async def test_location_status_queries_event_and_date():
    directory = MagicMock()
    directory.list_check_ins = AsyncMock(return_value=[make_record("1", "L1", "Nursery")])

    snapshots = await location_status(directory, "E1", "2024-01-07")

    assert snapshots[0].child_count == 1
    directory.list_check_ins.assert_awaited_once_with("E1", date="2024-01-07")
