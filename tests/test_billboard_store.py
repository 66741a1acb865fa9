# tests/test_billboard_store.py
"""Unit tests for the global billboard store."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import asyncio
import pytest
from datetime import timedelta
from arrivals.errors import ValidationError
from arrivals.services.billboard_store import Actor, GlobalBillboardStore, normalize_security_codes

ADMIN = Actor(id="101", name="Pat Admin")


class TestSetActive:
    @pytest.mark.asyncio
    async def test_codes_are_uppercased_and_deduplicated(self):
        store = GlobalBillboardStore()
        await store.set_active("E1", "Sunday AM", ["abc1", " ABC1 ", "xy9"], "2024-01-07", ADMIN)

        active = store.get_active()
        assert active.security_codes == ("ABC1", "XY9")
        assert active.event_date == "2024-01-07"
        assert active.created_by == ADMIN

    @pytest.mark.asyncio
    async def test_full_replace_drops_previous_codes(self):
        store = GlobalBillboardStore()
        await store.set_active("E1", "Sunday AM", ["AAA1", "BBB2"], "2024-01-07", ADMIN)
        await store.set_active("E1", "Sunday AM", ["CCC3"], "2024-01-07", ADMIN)

        assert store.get_active().security_codes == ("CCC3",)

    @pytest.mark.asyncio
    async def test_missing_event_name_rejected_and_state_untouched(self):
        store = GlobalBillboardStore()
        await store.set_active("E1", "Sunday AM", ["AAA1"], "2024-01-07", ADMIN)

        with pytest.raises(ValidationError):
            await store.set_active("E2", "", ["BBB2"], "2024-01-07", ADMIN)

        assert store.get_active().event_id == "E1"

    @pytest.mark.asyncio
    async def test_empty_code_set_rejected(self):
        store = GlobalBillboardStore()
        with pytest.raises(ValidationError) as exc:
            await store.set_active("E1", "Sunday AM", ["  "], "2024-01-07", ADMIN)
        assert "security code" in exc.value.message
        assert store.get_active() is None

    @pytest.mark.asyncio
    async def test_bad_date_rejected(self):
        store = GlobalBillboardStore()
        with pytest.raises(ValidationError):
            await store.set_active("E1", "Sunday AM", ["AAA1"], "01/07/2024", ADMIN)

    @pytest.mark.asyncio
    async def test_concurrent_writers_leave_one_whole_snapshot(self):
        store = GlobalBillboardStore()
        await asyncio.gather(
            store.set_active("E1", "Sunday AM", ["AAA1"], "2024-01-07", ADMIN),
            store.set_active("E2", "Sunday PM", ["BBB2", "CCC3"], "2024-01-07", ADMIN),
        )
        active = store.get_active()
        assert (active.event_id, active.security_codes) in {
            ("E1", ("AAA1",)),
            ("E2", ("BBB2", "CCC3")),
        }


class TestClearActive:
    @pytest.mark.asyncio
    async def test_clear_is_idempotent(self):
        store = GlobalBillboardStore()
        await store.set_active("E1", "Sunday AM", ["AAA1"], "2024-01-07", ADMIN)

        assert await store.clear_active(ADMIN) is True
        assert store.get_active() is None
        assert await store.clear_active(ADMIN) is False
        assert store.get_active() is None


class TestChangedSince:
    @pytest.mark.asyncio
    async def test_changed_since(self):
        store = GlobalBillboardStore()
        assert store.changed_since(None) is False

        await store.set_active("E1", "Sunday AM", ["AAA1"], None, ADMIN)
        stamp = store.get_active().last_updated
        assert store.changed_since(None) is True
        assert store.changed_since(stamp - timedelta(seconds=1)) is True
        assert store.changed_since(stamp) is False


def test_normalize_rejects_non_strings():
    with pytest.raises(ValidationError):
        normalize_security_codes(["AAA1", 42])
