# tests/test_routes.py
"""API tests: the FastAPI app with an in-memory allow-list and a mocked directory."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock
from fastapi.testclient import TestClient
from arrivals.deps import get_billboard_store, get_directory, get_pickup_requests
from arrivals.errors import UpstreamUnavailable
from arrivals.main import app
from arrivals.services.billboard_store import GlobalBillboardStore
from arrivals.services.checkin_parser import CheckInRecord, Event
from arrivals.services.pickup_requests import PickupRequestLog

ADMIN = {"X-User-ID": "admin-1", "X-User-Name": "Pat Admin"}
SUNDAY = {"eventId": "E1", "eventName": "Sunday AM", "securityCodes": ["ABC1"], "eventDate": "2024-01-07"}


def make_record(ident="ci-1", name="Ava Kim", code="ABC1"):
    return CheckInRecord(
        id=ident,
        person_name=name,
        security_code=code,
        check_in_time="2024-01-07T14:05:00Z",
        check_out_time=None,
        location_id="L1",
        location_name="Nursery",
        event_name="Sunday AM",
    )


@pytest.fixture
def api():
    store = GlobalBillboardStore()
    requests_log = PickupRequestLog()
    directory = MagicMock()
    directory.list_check_ins = AsyncMock(return_value=[make_record()])
    directory.list_events = AsyncMock(return_value=[Event(id="E1", name="Sunday AM", starts_at="2024-01-07T09:00:00Z")])
    directory.list_locations = AsyncMock(return_value=[])

    app.dependency_overrides[get_billboard_store] = lambda: store
    app.dependency_overrides[get_pickup_requests] = lambda: requests_log
    app.dependency_overrides[get_directory] = lambda: directory
    with TestClient(app) as client:
        yield SimpleNamespace(client=client, store=store, requests=requests_log, directory=directory)
    app.dependency_overrides.clear()


class TestGlobalBillboard:
    def test_nothing_set_returns_null_not_error(self, api):
        response = api.client.get("/api/global-billboard")
        assert response.status_code == 200
        assert response.json()["activeBillboard"] is None

    def test_set_then_get(self, api):
        response = api.client.post("/api/set-global-billboard", headers=ADMIN,
                                   json={**SUNDAY, "securityCodes": ["abc1", "ABC1", "xy9"]})
        assert response.status_code == 200
        assert response.json()["success"] is True

        active = api.client.get("/api/global-billboard").json()["activeBillboard"]
        assert active["securityCodes"] == ["ABC1", "XY9"]
        assert active["createdBy"]["id"] == "admin-1"

    def test_empty_code_set_rejected(self, api):
        response = api.client.post("/api/set-global-billboard", headers=ADMIN,
                                   json={**SUNDAY, "securityCodes": []})
        assert response.status_code == 400
        assert "security code" in response.json()["detail"]

    def test_mutation_requires_user(self, api):
        response = api.client.post("/api/set-global-billboard", json=SUNDAY)
        assert response.status_code == 401

    def test_unknown_user_rejected_once_allow_list_exists(self, api):
        api.client.post("/api/set-global-billboard", headers=ADMIN, json=SUNDAY)
        response = api.client.delete("/api/global-billboard", headers={"X-User-ID": "stranger"})
        assert response.status_code == 403
        assert api.store.get_active() is not None

    def test_delete_is_idempotent(self, api):
        api.client.post("/api/set-global-billboard", headers=ADMIN, json=SUNDAY)

        assert api.client.delete("/api/global-billboard", headers=ADMIN).json()["scope"] == "global"
        assert api.client.delete("/api/global-billboard", headers=ADMIN).status_code == 200
        assert api.client.get("/api/global-billboard").json()["activeBillboard"] is None

    def test_soft_clear_leaves_billboard_for_everyone_else(self, api):
        api.client.post("/api/set-global-billboard", headers=ADMIN, json=SUNDAY)
        body = api.client.post("/api/clear-global-billboard", headers=ADMIN).json()

        assert body["scope"] == "local"
        assert api.client.get("/api/global-billboard").json()["activeBillboard"]["eventId"] == "E1"

    def test_billboard_updates(self, api):
        assert api.client.get("/api/billboard-updates").json()["hasUpdates"] is False
        api.client.post("/api/set-global-billboard", headers=ADMIN, json=SUNDAY)

        body = api.client.get("/api/billboard-updates").json()
        assert body["hasUpdates"] is True
        again = api.client.get("/api/billboard-updates", params={"lastUpdate": body["lastUpdated"]}).json()
        assert again["hasUpdates"] is False


class TestNotifications:
    def test_kiosk_code_shows_up_for_the_billboard_scope(self, api):
        api.client.post("/api/set-global-billboard", headers=ADMIN, json=SUNDAY)

        entry = api.client.post("/api/security-code-entry",
                                json={"securityCode": "abc1", "eventId": "E1", "eventDate": "2024-01-07"})
        assert entry.json()["success"] is True
        assert entry.json()["childName"] == "Ava Kim"

        notifications = api.client.get("/api/active-notifications",
                                       params={"eventId": "E1", "eventDate": "2024-01-07"}).json()
        assert len(notifications) == 1
        assert notifications[0]["securityCode"] == "ABC1"
        assert notifications[0]["childName"] == "Ava Kim"

    def test_first_launch_keeps_codes_called_before_it(self, api):
        api.directory.list_check_ins.return_value = [make_record(), make_record("ci-9", "Kai Doe", "KID9")]
        api.client.post("/api/security-code-entry",
                        json={"securityCode": "kid9", "eventId": "E1", "eventDate": "2024-01-07"})
        scope = {"eventId": "E1", "eventDate": "2024-01-07"}
        before = api.client.get("/api/active-notifications", params=scope).json()
        assert [n["securityCode"] for n in before] == ["KID9"]

        launch = api.client.post("/api/set-global-billboard", headers=ADMIN, json=SUNDAY).json()
        assert launch["notificationsCleared"] == 0

        after = api.client.get("/api/active-notifications", params=scope).json()
        assert sorted(n["securityCode"] for n in after) == ["ABC1", "KID9"]

    def test_relaunch_in_same_scope_keeps_called_codes(self, api):
        api.client.post("/api/set-global-billboard", headers=ADMIN, json=SUNDAY)
        api.client.post("/api/security-code-entry",
                        json={"securityCode": "KID9", "eventId": "E1", "eventDate": "2024-01-07"})

        relaunch = api.client.post("/api/set-global-billboard", headers=ADMIN,
                                   json={**SUNDAY, "securityCodes": ["ABC1", "XY9"]}).json()
        assert relaunch["notificationsCleared"] == 0
        assert list(api.requests.codes_for("E1", "2024-01-07")) == ["KID9"]

    def test_moving_to_another_scope_clears_called_codes(self, api):
        api.client.post("/api/set-global-billboard", headers=ADMIN, json=SUNDAY)
        api.client.post("/api/security-code-entry",
                        json={"securityCode": "KID9", "eventId": "E1", "eventDate": "2024-01-07"})

        moved = api.client.post("/api/set-global-billboard", headers=ADMIN,
                                json={**SUNDAY, "eventId": "E2", "eventName": "Sunday PM"}).json()
        assert moved["notificationsCleared"] == 1
        assert api.requests.codes_for("E1", "2024-01-07") == {}

    def test_delete_clears_called_codes(self, api):
        api.client.post("/api/set-global-billboard", headers=ADMIN, json=SUNDAY)
        api.client.post("/api/security-code-entry",
                        json={"securityCode": "KID9", "eventId": "E1", "eventDate": "2024-01-07"})

        deleted = api.client.delete("/api/global-billboard", headers=ADMIN).json()
        assert deleted["notificationsCleared"] == 1
        assert api.requests.codes_for("E1", "2024-01-07") == {}

    def test_unknown_code_is_success_false(self, api):
        api.directory.list_check_ins.return_value = []
        response = api.client.post("/api/security-code-entry",
                                   json={"securityCode": "NOPE", "eventId": "E1", "eventDate": "2024-01-07"})
        assert response.status_code == 200
        assert response.json() == {"success": False, "message": "Security code not found",
                                   "childName": None, "addedChildren": []}

    def test_missing_code_is_400(self, api):
        response = api.client.post("/api/security-code-entry", json={"eventId": "E1", "eventDate": "2024-01-07"})
        assert response.status_code == 400
        assert response.json()["success"] is False

    def test_upstream_timeout_is_503(self, api):
        api.client.post("/api/set-global-billboard", headers=ADMIN, json=SUNDAY)
        api.directory.list_check_ins.side_effect = UpstreamUnavailable("Check-in service timed out")

        response = api.client.get("/api/active-notifications")
        assert response.status_code == 503
        assert response.json()["detail"] == "Check-in service timed out"

    def test_bad_date_is_400(self, api):
        response = api.client.get("/api/active-notifications", params={"eventId": "E1", "eventDate": "01/07/2024"})
        assert response.status_code == 400
        api.directory.list_check_ins.assert_not_called()

    def test_security_code_lookup(self, api):
        response = api.client.post("/api/security-codes", json={"eventId": "E1", "securityCodes": ["abc1", "zz9"]})
        body = response.json()
        assert body[0]["securityCode"] == "ABC1"
        assert body[0]["personName"] == "Ava Kim"
        assert body[1] == {"securityCode": "ZZ9", "error": "No check-in found with this security code"}


class TestDirectoryViews:
    def test_events_by_date(self, api):
        body = api.client.get("/api/events-by-date", params={"date": "2024-01-07"}).json()
        assert body[0]["name"] == "Sunday AM"
        api.directory.list_events.assert_awaited_once_with("2024-01-07")

    def test_events_by_date_rejects_bad_format(self, api):
        assert api.client.get("/api/events-by-date", params={"date": "01/07/2024"}).status_code == 400

    def test_check_ins_require_event(self, api):
        assert api.client.get("/api/billboard/check-ins").status_code == 400

    def test_check_ins_pass_location_through(self, api):
        body = api.client.get("/api/billboard/check-ins", params={"eventId": "E1", "locationId": "all"}).json()
        assert body[0]["locationName"] == "Nursery"
        api.directory.list_check_ins.assert_awaited_once_with("E1", location_id="all", date=None)

    def test_location_status(self, api):
        body = api.client.get("/api/location-status", params={"eventId": "E1", "date": "2024-01-07"}).json()
        assert body == [{"id": "L1", "name": "Nursery", "childCount": 1, "children": [
            {"id": "ci-1", "name": "Ava Kim", "checkInTime": "2024-01-07T14:05:00Z", "securityCode": "ABC1"},
        ]}]
