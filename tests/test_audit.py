"""
Audit log queries
"""
from datetime import timedelta

from hostel_admin.models.audit import AuditLog
from hostel_admin.services.audit_service import AuditService
from hostel_admin.utils.datetime_utils import utcnow

from tests.conftest import TEST_PASSWORD


def login(client, email, password=TEST_PASSWORD):
    return client.post("/api/auth/login", json={"identifier": email, "password": password})


class TestAuditQueries:

    def test_filters(self, client, student, trustee, trustee_headers):
        login(client, student.email)
        login(client, student.email, "WrongPass999")

        failures = client.get("/api/audit?action=login_failed", headers=trustee_headers).json()
        assert failures["pagination"]["total"] == 1
        entry = failures["data"][0]
        assert entry["success"] is False
        assert entry["actorId"] == student.id
        assert entry["metadata"]["identifier"] == student.email

        mine = client.get(f"/api/audit?actorId={student.id}&success=true", headers=trustee_headers).json()
        assert {e["action"] for e in mine["data"]} == {"LOGIN"}

    def test_date_range(self, client, db_session, student, trustee_headers):
        login(client, student.email)
        future = (utcnow() + timedelta(days=1)).isoformat()
        response = client.get(f"/api/audit?dateFrom={future}", headers=trustee_headers)
        assert response.json()["data"] == []

    def test_pagination(self, client, db_session, trustee_headers):
        service = AuditService(db_session)
        for index in range(5):
            service.log("UPDATE", "room", f"room-{index}")
        db_session.commit()

        page = client.get("/api/audit?entityType=room&limit=2&page=2", headers=trustee_headers).json()
        assert page["pagination"] == {
            "total": 5,
            "page": 2,
            "limit": 2,
            "totalPages": 3,
            "hasNext": True,
            "hasPrevious": True,
        }

    def test_entity_trail_oldest_first(self, client, db_session, trustee_headers):
        service = AuditService(db_session)
        service.log("CREATE", "room", "r1")
        service.log_status_change("room", "r1", "AVAILABLE", "MAINTENANCE")
        db_session.commit()

        trail = client.get("/api/audit/room/r1", headers=trustee_headers).json()["data"]
        assert [e["action"] for e in trail] == ["CREATE", "STATUS_CHANGE"]
        assert trail[1]["oldValue"] == {"status": "AVAILABLE"}
        assert trail[1]["actorType"] == "SYSTEM"

    def test_students_cannot_read(self, client, student_headers):
        assert client.get("/api/audit", headers=student_headers).status_code == 403

    def test_disabled_auditing_writes_nothing(self, db_session, monkeypatch):
        monkeypatch.setattr("hostel_admin.services.audit_service.settings.AUDIT_ENABLED", False)
        assert AuditService(db_session).log("CREATE", "room", "r2") is None
        assert db_session.query(AuditLog).count() == 0
