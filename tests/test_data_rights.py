"""
Data principal rights: export and erasure
"""
from datetime import timedelta

from hostel_admin.models.application import Application
from hostel_admin.models.audit import AuditLog
from hostel_admin.models.consent import ConsentRecord
from hostel_admin.models.user import User
from hostel_admin.schemas.common.enums import AuditAction, UserRole
from hostel_admin.utils.datetime_utils import local_today

from tests.conftest import TEST_PASSWORD
from tests.helpers import create_application, grant_consents

REASON = "Student requested erasure under DPDP"


def add_fee(client, headers, student_id):
    response = client.post(
        "/api/fees",
        json={
            "studentId": student_id,
            "feeType": "HOSTEL_FEE",
            "amount": 2500,
            "dueDate": (local_today() + timedelta(days=10)).isoformat(),
        },
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]


def erase(client, headers, user_id, reason=REASON):
    return client.post(f"/api/users/{user_id}/erase", json={"reason": reason}, headers=headers)


class TestExport:

    def test_export_own_data(self, client, db_session, student, student_headers, accounts_headers):
        grant_consents(client, student_headers)
        create_application(client, student_headers, type="RENEWAL")
        add_fee(client, accounts_headers, student.id)

        response = client.get("/api/users/profile/export", headers=student_headers)
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["user"]["id"] == student.id
        assert "password_hash" not in data["user"]
        assert len(data["applications"]) == 1
        assert len(data["fees"]) == 1
        assert len(data["consents"]) == 3
        assert data["allocations"] == []

        audit = db_session.query(AuditLog).filter(AuditLog.action == AuditAction.DATA_EXPORT.value).one()
        assert audit.entity_id == student.id

    def test_trustee_exports_any_user(self, client, student, trustee_headers):
        response = client.get(f"/api/users/{student.id}/export", headers=trustee_headers)
        assert response.status_code == 200
        assert response.json()["data"]["user"]["email"] == student.email

    def test_superintendent_cannot_export_others(self, client, student, superintendent_headers):
        response = client.get(f"/api/users/{student.id}/export", headers=superintendent_headers)
        assert response.status_code == 403


class TestErasure:

    def test_erase_student(self, client, db_session, student, student_headers, trustee_headers):
        grant_consents(client, student_headers)
        application = create_application(client, student_headers, type="RENEWAL")
        mobile = student.mobile

        response = erase(client, trustee_headers, student.id)
        assert response.status_code == 200
        assert response.json()["data"]["anonymized"] == {"users": 1, "applications": 1, "consents": 3}

        db_session.expire_all()
        user = db_session.get(User, student.id)
        assert user.full_name == "DELETED USER"
        assert user.mobile is None
        assert user.email.endswith("@deleted.local")
        assert user.is_active is False

        stored = db_session.get(Application, application["id"])
        assert stored.applicant_name == "DELETED USER"
        assert stored.applicant_mobile is None
        assert stored.data == {}

        active = db_session.query(ConsentRecord).filter(
            ConsentRecord.subject == student.id, ConsentRecord.is_current.is_(True)
        ).count()
        assert active == 0

        login = client.post("/api/auth/login", json={"identifier": mobile, "password": TEST_PASSWORD})
        assert login.status_code == 401

        audit = db_session.query(AuditLog).filter(AuditLog.action == AuditAction.DATA_DELETE.value).one()
        assert audit.extra["reason"] == REASON

    def test_student_with_room_must_vacate_first(self, client, student, superintendent_headers, trustee_headers):
        room = client.post(
            "/api/rooms", json={"roomNumber": "E1", "vertical": "BOYS", "capacity": 2}, headers=superintendent_headers
        ).json()["data"]
        client.post("/api/allocations", json={"studentId": student.id, "roomId": room["id"]}, headers=superintendent_headers)

        response = erase(client, trustee_headers, student.id)
        assert response.status_code == 422
        assert response.json()["message"] == "Vacate the student's room before erasing their data"

    def test_only_trustee_erases(self, client, student, superintendent_headers):
        assert erase(client, superintendent_headers, student.id).status_code == 403

    def test_reason_is_required(self, client, student, trustee_headers):
        assert erase(client, trustee_headers, student.id, reason="short").status_code == 400

    def test_cannot_erase_self(self, client, trustee, trustee_headers):
        response = erase(client, trustee_headers, trustee.id)
        assert response.status_code == 422

    def test_erase_twice(self, client, make_user, trustee_headers):
        clerk = make_user(UserRole.ACCOUNTS)
        assert erase(client, trustee_headers, clerk.id).status_code == 200
        again = erase(client, trustee_headers, clerk.id)
        assert again.status_code == 422
        assert again.json()["message"] == "User data has already been erased"
