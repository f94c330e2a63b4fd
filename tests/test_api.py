from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from app.db.session import get_db
from app.main import create_app
from app.utils.datetime_utils import DateTimeHelper

from tests.conftest import HOSTEL_LAT, HOSTEL_LON

STUDENT = {"X-User-Id": "student-1", "X-User-Role": "student"}
OTHER_STUDENT = {"X-User-Id": "student-2", "X-User-Role": "student"}
PARENT = {"X-User-Id": "parent-1", "X-User-Role": "parent"}
WARDEN = {"X-User-Id": "warden-1", "X-User-Role": "warden"}
GUARD = {"X-User-Id": "guard-1", "X-User-Role": "guard"}
ADMIN = {"X-User-Id": "admin-1", "X-User-Role": "admin"}


@pytest.fixture
def client(session_factory):
    app = create_app()

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)


@pytest.fixture
def open_window(client):
    """Disable the attendance window so marking does not depend on the wall clock."""
    response = client.put("/api/v1/system/config", json={"attendance_window_enabled": False}, headers=ADMIN)
    assert response.status_code == 200


def _pass_payload(days=2):
    start = DateTimeHelper.utcnow() + timedelta(hours=1)
    return {
        "reason": "Family function at home",
        "from_date": start.isoformat(),
        "to_date": (start + timedelta(days=days)).isoformat(),
    }


def _link(client, parent_id="parent-1", student_id="student-1"):
    response = client.post(
        "/api/v1/parent-links",
        json={"parent_id": parent_id, "student_id": student_id, "relationship": "Father"},
        headers=ADMIN,
    )
    assert response.status_code == 201
    return response.json()


def _approved_pass(client):
    _link(client)
    created = client.post("/api/v1/gatepass", json=_pass_payload(), headers=STUDENT).json()
    client.put(f"/api/v1/gatepass/{created['id']}/parent-decision", json={"approved": True}, headers=PARENT)
    return client.put(
        f"/api/v1/gatepass/{created['id']}/warden-decision", json={"approved": True}, headers=WARDEN
    ).json()


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert "X-Request-ID" in response.headers


def test_request_id_is_echoed(client):
    response = client.get("/health", headers={"X-Request-ID": "req-123"})
    assert response.headers["X-Request-ID"] == "req-123"


def test_error_shape_is_documented(client):
    schema = client.get("/openapi.json").json()
    assert "ErrorResponse" in schema["components"]["schemas"]
    mark = schema["paths"]["/api/v1/attendance/mark"]["post"]["responses"]
    assert mark["409"]["content"]["application/json"]["schema"]["$ref"].endswith("/ErrorResponse")


class TestAuthentication:

    def test_missing_headers(self, client):
        response = client.get("/api/v1/attendance/today")
        assert response.status_code == 401
        assert response.json()["error"]["code"] == "AUTHENTICATION_FAILED"

    def test_unknown_role(self, client):
        response = client.get("/api/v1/attendance/today", headers={"X-User-Id": "x", "X-User-Role": "janitor"})
        assert response.status_code == 401

    def test_wrong_role(self, client):
        response = client.post("/api/v1/attendance/manual", json={"student_id": "student-1"}, headers=STUDENT)
        assert response.status_code == 403
        assert response.json()["error"]["type"] == "AuthorizationError"

    def test_admin_may_act_as_any_role(self, client):
        response = client.get("/api/v1/gatepass/students-out", headers=ADMIN)
        assert response.status_code == 200


class TestAttendanceApi:

    def test_mark_and_read_back(self, client, open_window):
        response = client.post(
            "/api/v1/attendance/mark",
            json={"latitude": HOSTEL_LAT, "longitude": HOSTEL_LON},
            headers=STUDENT,
        )
        assert response.status_code == 201
        body = response.json()
        assert body["student_id"] == "student-1"
        assert body["within_geofence"] is True
        assert body["marked_at"].endswith(("+00:00", "Z"))

        today = client.get("/api/v1/attendance/today", headers=STUDENT).json()
        assert today["marked"] is True
        assert today["can_mark"] is False
        assert today["record"]["id"] == body["id"]

        history = client.get("/api/v1/attendance", headers=STUDENT).json()
        assert history["meta"]["total_items"] == 1

        stats = client.get("/api/v1/attendance/stats", headers=STUDENT).json()
        assert stats["present"] == 1

    def test_duplicate_mark_is_conflict(self, client, open_window):
        payload = {"latitude": HOSTEL_LAT, "longitude": HOSTEL_LON}
        client.post("/api/v1/attendance/mark", json=payload, headers=STUDENT)

        response = client.post("/api/v1/attendance/mark", json=payload, headers=STUDENT)

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "ATTENDANCE_ALREADY_MARKED"

    def test_far_away_is_forbidden(self, client, open_window):
        response = client.post("/api/v1/attendance/mark", json={"latitude": 28.5, "longitude": 77.0}, headers=STUDENT)
        assert response.status_code == 403
        assert response.json()["error"]["code"] == "OUT_OF_GEOFENCE"

    def test_bad_coordinates(self, client, open_window):
        response = client.post("/api/v1/attendance/mark", json={"latitude": 95, "longitude": 0}, headers=STUDENT)
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_COORDINATES"

    def test_students_cannot_read_others(self, client):
        response = client.get("/api/v1/attendance", params={"student_id": "student-2"}, headers=STUDENT)
        assert response.status_code == 403

    def test_manual_entry_and_daily_listing(self, client):
        response = client.post(
            "/api/v1/attendance/manual",
            json={"student_id": "student-1", "notes": "Phone lost"},
            headers=WARDEN,
        )
        assert response.status_code == 201
        record = response.json()
        assert record["manual_entry"] is True
        assert record["marked_by"] == "warden-1"

        listing = client.get(
            "/api/v1/attendance/by-date", params={"date": record["attendance_date"]}, headers=GUARD
        )
        assert [r["student_id"] for r in listing.json()] == ["student-1"]


class TestGatePassApi:

    def test_full_lifecycle(self, client):
        _link(client)
        created = client.post("/api/v1/gatepass", json=_pass_payload(), headers=STUDENT)
        assert created.status_code == 201
        pass_id = created.json()["id"]
        assert created.json()["status"] == "PENDING_PARENT"

        pending = client.get("/api/v1/gatepass/pending", headers=PARENT).json()
        assert [p["id"] for p in pending] == [pass_id]

        response = client.put(f"/api/v1/gatepass/{pass_id}/parent-decision", json={"approved": True}, headers=PARENT)
        assert response.json()["status"] == "PENDING_WARDEN"

        response = client.put(f"/api/v1/gatepass/{pass_id}/warden-decision", json={"approved": True}, headers=WARDEN)
        approved = response.json()
        assert approved["status"] == "APPROVED"
        assert approved["qr_value"].startswith("GP-")

        response = client.put(f"/api/v1/gatepass/{pass_id}/exit", json={}, headers=GUARD)
        assert response.status_code == 200
        assert response.json()["is_out"] is True

        out = client.get("/api/v1/gatepass/students-out", headers=GUARD).json()
        assert [entry["gate_pass"]["id"] for entry in out] == [pass_id]

        response = client.put(f"/api/v1/gatepass/{pass_id}/entry", headers=GUARD)
        assert response.json()["status"] == "CLOSED"
        assert response.json()["is_late"] is False

        logs = client.get("/api/v1/gatepass/logs", headers=WARDEN).json()
        assert [log["action"] for log in logs["items"]] == ["ENTRY", "EXIT"]

    def test_invalid_transition_is_conflict(self, client):
        pass_id = client.post("/api/v1/gatepass", json=_pass_payload(), headers=STUDENT).json()["id"]

        response = client.put(f"/api/v1/gatepass/{pass_id}/exit", headers=GUARD)

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "INVALID_STATE_TRANSITION"

    def test_duration_limit(self, client):
        response = client.post("/api/v1/gatepass", json=_pass_payload(days=30), headers=STUDENT)
        assert response.status_code == 422
        assert response.json()["error"]["code"] == "PASS_DURATION_EXCEEDED"

    def test_pending_limit(self, client):
        for _ in range(3):
            assert client.post("/api/v1/gatepass", json=_pass_payload(), headers=STUDENT).status_code == 201

        response = client.post("/api/v1/gatepass", json=_pass_payload(), headers=STUDENT)

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "TOO_MANY_PENDING_PASSES"

    def test_short_reason_is_rejected_by_schema(self, client):
        payload = dict(_pass_payload(), reason="abc")
        assert client.post("/api/v1/gatepass", json=payload, headers=STUDENT).status_code == 422

    def test_unknown_pass(self, client):
        response = client.get("/api/v1/gatepass/does-not-exist", headers=WARDEN)
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "RESOURCE_NOT_FOUND"

    def test_students_only_see_their_own_passes(self, client):
        pass_id = client.post("/api/v1/gatepass", json=_pass_payload(), headers=STUDENT).json()["id"]

        assert client.get(f"/api/v1/gatepass/{pass_id}", headers=STUDENT).status_code == 200
        assert client.get(f"/api/v1/gatepass/{pass_id}", headers=OTHER_STUDENT).status_code == 403
        assert client.get("/api/v1/gatepass", headers=OTHER_STUDENT).json()["meta"]["total_items"] == 0

    def test_current_pass(self, client):
        assert client.get("/api/v1/gatepass/current", headers=STUDENT).json() is None

    def test_validate_qr(self, client):
        approved = _approved_pass(client)

        response = client.post("/api/v1/gatepass/validate", json={"qr_value": approved["qr_value"]}, headers=GUARD)
        body = response.json()
        assert body["status"] == "NOT_STARTED"
        assert body["valid"] is False
        assert body["gate_pass"]["id"] == approved["id"]

        response = client.post("/api/v1/gatepass/validate", json={"qr_value": "GP-FFFFFFFF"}, headers=GUARD)
        assert response.json()["status"] == "INVALID"

    def test_ledger_views_require_staff(self, client):
        assert client.get("/api/v1/gatepass/late-returns", headers=STUDENT).status_code == 403
        assert client.get("/api/v1/gatepass/recent-entries", headers=GUARD).status_code == 200

    def test_recent_entries_since_parsing(self, client):
        assert client.get("/api/v1/gatepass/recent-entries", params={"since": "2026-03-12 09:00"}, headers=GUARD).status_code == 200
        response = client.get("/api/v1/gatepass/recent-entries", params={"since": "not a date"}, headers=GUARD)
        assert response.status_code == 422
        assert "since" in response.json()["error"]["details"]["field_errors"]


class TestParentLinkApi:

    def test_parent_reads_only_linked_students(self, client):
        _link(client)

        assert client.get("/api/v1/attendance", params={"student_id": "student-1"}, headers=PARENT).status_code == 200
        assert client.get("/api/v1/gatepass", params={"student_id": "student-1"}, headers=PARENT).status_code == 200
        response = client.get("/api/v1/attendance", params={"student_id": "student-2"}, headers=PARENT)
        assert response.status_code == 403
        assert response.json()["error"]["type"] == "AuthorizationError"
        assert client.get("/api/v1/attendance/stats", params={"student_id": "student-2"}, headers=PARENT).status_code == 403
        assert client.get("/api/v1/gatepass", params={"student_id": "student-2"}, headers=PARENT).status_code == 403

    def test_unlinked_parent_cannot_decide_or_view(self, client):
        pass_id = client.post("/api/v1/gatepass", json=_pass_payload(), headers=OTHER_STUDENT).json()["id"]
        _link(client)

        assert client.get("/api/v1/gatepass/pending", headers=PARENT).json() == []
        assert client.get(f"/api/v1/gatepass/{pass_id}", headers=PARENT).status_code == 403
        response = client.put(f"/api/v1/gatepass/{pass_id}/parent-decision", json={"approved": True}, headers=PARENT)
        assert response.status_code == 403
        assert client.get(f"/api/v1/gatepass/{pass_id}", headers=WARDEN).json()["status"] == "PENDING_PARENT"

    def test_admin_decides_without_a_link(self, client):
        pass_id = client.post("/api/v1/gatepass", json=_pass_payload(), headers=STUDENT).json()["id"]

        response = client.put(f"/api/v1/gatepass/{pass_id}/parent-decision", json={"approved": True}, headers=ADMIN)

        assert response.status_code == 200
        assert response.json()["status"] == "PENDING_WARDEN"

    def test_link_management(self, client):
        link = _link(client)
        assert link["is_active"] is True
        assert link["linked_by"] == "admin-1"

        duplicate = client.post(
            "/api/v1/parent-links",
            json={"parent_id": "parent-1", "student_id": "student-1", "relationship": "Mother"},
            headers=ADMIN,
        )
        assert duplicate.status_code == 409

        children = client.get("/api/v1/parent-links/children", headers=PARENT).json()
        assert children == {"parent_id": "parent-1", "student_ids": ["student-1"]}
        assert client.get("/api/v1/parent-links", headers=ADMIN).json()["meta"]["total_items"] == 1

        removed = client.delete(f"/api/v1/parent-links/{link['id']}", headers=ADMIN)
        assert removed.json()["is_active"] is False
        assert client.get("/api/v1/parent-links/children", headers=PARENT).json()["student_ids"] == []
        assert client.get("/api/v1/attendance", params={"student_id": "student-1"}, headers=PARENT).status_code == 403

    def test_only_admin_manages_links(self, client):
        response = client.post(
            "/api/v1/parent-links",
            json={"parent_id": "parent-1", "student_id": "student-1", "relationship": "Father"},
            headers=WARDEN,
        )
        assert response.status_code == 403
        assert client.delete("/api/v1/parent-links/missing", headers=ADMIN).status_code == 404


class TestSystemConfigApi:

    def test_read_and_update(self, client):
        config = client.get("/api/v1/system/config", headers=STUDENT).json()
        assert config["attendance_timezone"] == "Asia/Kolkata"

        response = client.put("/api/v1/system/config", json={"geofence_radius_meters": 80}, headers=ADMIN)

        assert response.status_code == 200
        assert response.json()["geofence_radius_meters"] == 80
        assert response.json()["updated_by"] == "admin-1"
        assert response.json()["attendance_start_hour"] == config["attendance_start_hour"]

    def test_only_admin_may_update(self, client):
        response = client.put("/api/v1/system/config", json={"geofence_radius_meters": 80}, headers=WARDEN)
        assert response.status_code == 403

    def test_invalid_timezone(self, client):
        response = client.put("/api/v1/system/config", json={"attendance_timezone": "Moon/Base"}, headers=ADMIN)
        assert response.status_code == 422
        assert "attendance_timezone" in response.json()["error"]["details"]["field_errors"]
