"""
Renewal tracking for active allocations
"""
from datetime import timedelta

import pytest

from hostel_admin.config.settings import settings
from hostel_admin.models.room import RoomAllocation
from hostel_admin.schemas.common.enums import RenewalStatus, UserRole, Vertical
from hostel_admin.services.renewal_service import renewal_status
from hostel_admin.utils.datetime_utils import add_months, utcnow

from tests.conftest import headers_for
from tests.helpers import create_application


def allocate(client, headers, student, number):
    room = client.post(
        "/api/rooms", json={"roomNumber": number, "vertical": student.vertical.value, "capacity": 2}, headers=headers
    ).json()["data"]
    response = client.post("/api/allocations", json={"studentId": student.id, "roomId": room["id"]}, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]


def due_in(db_session, allocation_id, days):
    allocation = db_session.get(RoomAllocation, allocation_id)
    allocation.allocated_at = add_months(utcnow() + timedelta(days=days), -settings.RENEWAL_PERIOD_MONTHS)
    db_session.commit()


@pytest.mark.parametrize(
    "days,expected",
    [
        (-3, RenewalStatus.OVERDUE),
        (0, RenewalStatus.OVERDUE),
        (30, RenewalStatus.DUE_SOON),
        (31, RenewalStatus.UPCOMING),
        (60, RenewalStatus.UPCOMING),
        (61, RenewalStatus.NOT_DUE),
    ],
)
def test_renewal_status_bands(days, expected):
    assert renewal_status(days) == expected


class TestRenewals:

    def test_fresh_allocation_not_due(self, client, student, student_headers, trustee_headers):
        allocation = allocate(client, trustee_headers, student, "101")
        data = client.get("/api/renewals/me", headers=student_headers).json()["data"]
        assert data["allocationId"] == allocation["id"]
        assert data["roomNumber"] == "101"
        assert data["status"] == "NOT_DUE"
        assert data["renewalApplicationId"] is None

    def test_no_allocation(self, client, student_headers):
        body = client.get("/api/renewals/me", headers=student_headers).json()
        assert body["data"] is None
        assert body["message"] == "No active room allocation"

    def test_list_sorted_and_filtered(self, client, db_session, make_user, superintendent_headers):
        soon, later = make_user(UserRole.STUDENT, Vertical.BOYS), make_user(UserRole.STUDENT, Vertical.BOYS)
        first = allocate(client, superintendent_headers, later, "101")
        second = allocate(client, superintendent_headers, soon, "102")
        due_in(db_session, first["id"], 45)
        due_in(db_session, second["id"], 10)

        data = client.get("/api/renewals", headers=superintendent_headers).json()["data"]
        assert [r["studentId"] for r in data] == [soon.id, later.id]
        assert 7 <= data[0]["daysRemaining"] <= 10
        assert data[0]["status"] == "DUE_SOON"
        assert data[1]["status"] == "UPCOMING"

        due_soon = client.get("/api/renewals?status=DUE_SOON", headers=superintendent_headers).json()["data"]
        assert [r["studentId"] for r in due_soon] == [soon.id]

    def test_overdue(self, client, db_session, student, student_headers, trustee_headers):
        allocation = allocate(client, trustee_headers, student, "101")
        due_in(db_session, allocation["id"], -2)
        data = client.get("/api/renewals/me", headers=student_headers).json()["data"]
        assert data["status"] == "OVERDUE"
        assert data["daysRemaining"] <= 0

    def test_links_renewal_application(self, client, student, student_headers, trustee_headers):
        allocate(client, trustee_headers, student, "101")
        application = create_application(client, student_headers, type="RENEWAL")
        data = client.get(f"/api/renewals/student/{student.id}", headers=trustee_headers).json()["data"]
        assert data["renewalApplicationId"] == application["id"]

    def test_superintendent_scope(self, client, make_user, trustee_headers, superintendent_headers):
        girl = make_user(UserRole.STUDENT, Vertical.GIRLS)
        allocate(client, trustee_headers, girl, "G1")

        assert client.get("/api/renewals", headers=superintendent_headers).json()["data"] == []
        response = client.get(f"/api/renewals/student/{girl.id}", headers=superintendent_headers)
        assert response.status_code == 403

    def test_students_cannot_list(self, client, student):
        assert client.get("/api/renewals", headers=headers_for(student)).status_code == 403
