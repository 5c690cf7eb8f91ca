"""
Leave applications, limits, blackouts and the gate workflow
"""
from datetime import date, timedelta

import pytest

from hostel_admin.models.communication import CommunicationLog
from hostel_admin.schemas.common.enums import UserRole, Vertical
from hostel_admin.utils.datetime_utils import local_today, month_bounds

from tests.conftest import headers_for

REASON = "Going home for a family function"


def leave_month():
    """First day of a month comfortably in the future."""
    start, _ = month_bounds(local_today() + timedelta(days=40))
    return start


def apply(client, headers, start, days=1, leave_type="REGULAR", **body):
    payload = {
        "leaveType": leave_type,
        "startDate": start.isoformat(),
        "endDate": (start + timedelta(days=days - 1)).isoformat(),
        "reason": REASON,
    }
    payload.update(body)
    return client.post("/api/leaves", json=payload, headers=headers)


def leave_type_id(client, headers, leave_type):
    configs = client.get("/api/config/leave-types", headers=headers).json()["data"]
    return next(c["id"] for c in configs if c["leaveType"] == leave_type)


@pytest.fixture
def pending_leave(client, leave_types, student_headers):
    response = apply(client, student_headers, leave_month(), days=2)
    assert response.status_code == 201, response.text
    return response.json()["data"]


class TestApply:

    def test_apply_creates_pending_request(self, client, leave_types, student, student_headers):
        start = leave_month() + timedelta(days=2)
        response = apply(client, student_headers, start, days=3, destination="Pune")
        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Leave request submitted"
        data = body["data"]
        assert data["status"] == "PENDING"
        assert data["days"] == 3
        assert data["vertical"] == "BOYS"
        assert data["studentName"] == student.full_name
        assert data["parentNotified"] is False

    def test_only_students_apply(self, client, leave_types, superintendent_headers):
        response = apply(client, superintendent_headers, leave_month())
        assert response.status_code == 403

    def test_start_in_past(self, client, leave_types, student_headers):
        response = apply(client, student_headers, local_today() - timedelta(days=1))
        assert response.status_code == 400
        assert response.json()["message"] == "Start date cannot be in the past"

    def test_end_before_start(self, client, leave_types, student_headers):
        start = leave_month()
        response = client.post(
            "/api/leaves",
            json={
                "leaveType": "REGULAR",
                "startDate": start.isoformat(),
                "endDate": (start - timedelta(days=1)).isoformat(),
                "reason": REASON,
            },
            headers=student_headers,
        )
        assert response.status_code == 400
        assert response.json()["message"] == "End date must be on or after start date"

    def test_overlapping_requests(self, client, pending_leave, student_headers):
        response = apply(client, student_headers, leave_month() + timedelta(days=1), leave_type="EMERGENCY")
        assert response.status_code == 409

    def test_cancelled_leave_frees_dates(self, client, pending_leave, student_headers):
        client.post(f"/api/leaves/{pending_leave['id']}/cancel", headers=student_headers)
        response = apply(client, student_headers, leave_month(), days=2)
        assert response.status_code == 201

    def test_monthly_limit(self, client, leave_types, student_headers):
        start = leave_month()
        assert apply(client, student_headers, start, days=3).status_code == 201

        response = apply(client, student_headers, start + timedelta(days=10), days=2)
        assert response.status_code == 422
        body = response.json()
        assert body["error"] == "BUSINESS_RULE_VIOLATION"
        assert "4 days per month" in body["message"]

        assert apply(client, student_headers, start + timedelta(days=10), days=1).status_code == 201

    def test_limits_apply_per_leave_type(self, client, leave_types, student_headers):
        start = leave_month()
        assert apply(client, student_headers, start, days=4).status_code == 201
        response = apply(client, student_headers, start + timedelta(days=10), days=5, leave_type="MEDICAL")
        assert response.status_code == 201

    def test_inactive_leave_type(self, client, leave_types, student_headers, trustee_headers):
        config_id = leave_type_id(client, trustee_headers, "VACATION")
        client.put(f"/api/config/leave-types/{config_id}", json={"active": False}, headers=trustee_headers)

        response = apply(client, student_headers, leave_month(), leave_type="VACATION")
        assert response.status_code == 422
        assert response.json()["message"] == "Vacation is not available"

    def test_leave_type_restricted_to_vertical(self, client, leave_types, student_headers, trustee_headers):
        config_id = leave_type_id(client, trustee_headers, "VACATION")
        client.put(
            f"/api/config/leave-types/{config_id}", json={"allowedVerticals": ["GIRLS"]}, headers=trustee_headers
        )
        response = apply(client, student_headers, leave_month(), leave_type="VACATION")
        assert response.status_code == 422


class TestLimitWindows:

    @pytest.fixture
    def regular_limits(self, client, leave_types, trustee_headers):
        def set_limits(per_month, per_semester):
            config_id = leave_type_id(client, trustee_headers, "REGULAR")
            response = client.put(
                f"/api/config/leave-types/{config_id}",
                json={"maxDaysPerMonth": per_month, "maxDaysPerSemester": per_semester},
                headers=trustee_headers,
            )
            assert response.status_code == 200, response.text
        return set_limits

    def test_month_spanning_leave_counts_each_month(self, client, leave_types, student_headers):
        _, next_month = month_bounds(leave_month())
        month_end = next_month - timedelta(days=1)

        # 3 days each side of the month boundary, 6 in total
        response = apply(client, student_headers, month_end - timedelta(days=2), days=6)
        assert response.status_code == 201, response.text

        response = apply(client, student_headers, next_month + timedelta(days=10), days=2)
        assert response.status_code == 422
        assert f"(3 already used in {next_month.strftime('%B %Y')})" in response.json()["message"]

        assert apply(client, student_headers, next_month + timedelta(days=10), days=1).status_code == 201

    def test_spanning_leave_rejected_by_later_month(self, client, leave_types, student_headers):
        _, next_month = month_bounds(leave_month())
        assert apply(client, student_headers, next_month + timedelta(days=10), days=2).status_code == 201

        response = apply(client, student_headers, next_month - timedelta(days=2), days=5)
        assert response.status_code == 422
        assert f"(2 already used in {next_month.strftime('%B %Y')})" in response.json()["message"]

        assert apply(client, student_headers, next_month - timedelta(days=2), days=4).status_code == 201

    def test_semester_usage_accumulates(self, client, regular_limits, student_headers):
        regular_limits(31, 6)
        year = local_today().year + 1
        assert apply(client, student_headers, date(year, 2, 2), days=4).status_code == 201

        response = apply(client, student_headers, date(year, 3, 2), days=3)
        assert response.status_code == 422
        body = response.json()
        assert body["error"] == "BUSINESS_RULE_VIOLATION"
        assert "6 days per semester" in body["message"]
        assert "(4 already used since January" in body["message"]

        assert apply(client, student_headers, date(year, 3, 2), days=2).status_code == 201

    def test_leave_across_june_and_july(self, client, regular_limits, student_headers):
        regular_limits(31, 5)
        year = local_today().year + 1
        assert apply(client, student_headers, date(year, 7, 10), days=4).status_code == 201

        # 2 days in June, 2 days in July: the July half is already at 4
        response = apply(client, student_headers, date(year, 6, 29), days=4)
        assert response.status_code == 422
        assert f"since July {year}" in response.json()["message"]

        assert apply(client, student_headers, date(year, 6, 27), days=5).status_code == 201

        response = apply(client, student_headers, date(year, 6, 20), days=3)
        assert response.status_code == 422
        assert f"(4 already used since January {year})" in response.json()["message"]


class TestBlackouts:

    @pytest.fixture
    def blackout(self, client, trustee_headers):
        start = leave_month() + timedelta(days=14)
        response = client.post(
            "/api/config/blackout-dates",
            json={
                "name": "Semester exams",
                "startDate": start.isoformat(),
                "endDate": (start + timedelta(days=6)).isoformat(),
                "verticals": ["BOYS"],
            },
            headers=trustee_headers,
        )
        assert response.status_code == 201
        return response.json()["data"]

    def test_regular_leave_blocked(self, client, leave_types, blackout, student_headers):
        response = apply(client, student_headers, leave_month() + timedelta(days=13), days=2)
        assert response.status_code == 422
        assert response.json()["message"].startswith("Leave is not allowed during Semester exams")

    def test_emergency_leave_exempt(self, client, leave_types, blackout, student_headers):
        response = apply(client, student_headers, leave_month() + timedelta(days=15), leave_type="EMERGENCY")
        assert response.status_code == 201

    def test_other_vertical_not_blocked(self, client, leave_types, blackout, make_user):
        girl = make_user(UserRole.STUDENT, Vertical.GIRLS)
        response = apply(client, headers_for(girl), leave_month() + timedelta(days=15))
        assert response.status_code == 201


class TestReview:

    def test_approve_notifies_parent(self, client, db_session, pending_leave, parent, superintendent_headers):
        response = client.post(
            f"/api/leaves/{pending_leave['id']}/approve", json={"notes": "Travel safe"}, headers=superintendent_headers
        )
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["status"] == "APPROVED"
        assert data["approvedAt"] is not None
        assert data["parentNotified"] is True
        assert "Approved: Travel safe" in data["notes"]

        message = db_session.query(CommunicationLog).filter_by(related_entity_id=pending_leave["id"]).one()
        assert message.recipients == [parent.mobile]
        assert message.template_key == "leave_approved"
        assert message.status.value == "SENT"

    def test_approve_without_body(self, client, pending_leave, superintendent_headers):
        response = client.post(f"/api/leaves/{pending_leave['id']}/approve", headers=superintendent_headers)
        assert response.json()["data"]["status"] == "APPROVED"

    def test_reject_requires_reason(self, client, pending_leave, superintendent_headers):
        response = client.post(f"/api/leaves/{pending_leave['id']}/reject", json={}, headers=superintendent_headers)
        assert response.status_code == 400

        response = client.post(
            f"/api/leaves/{pending_leave['id']}/reject", json={"reason": "Exams next week"},
            headers=superintendent_headers,
        )
        data = response.json()["data"]
        assert data["status"] == "REJECTED"
        assert data["rejectionReason"] == "Exams next week"

    def test_only_pending_can_be_decided(self, client, pending_leave, superintendent_headers):
        client.post(f"/api/leaves/{pending_leave['id']}/approve", headers=superintendent_headers)
        response = client.post(f"/api/leaves/{pending_leave['id']}/approve", headers=superintendent_headers)
        assert response.status_code == 422
        assert response.json()["details"]["status"] == "APPROVED"

    def test_other_vertical_superintendent(self, client, pending_leave, girls_superintendent):
        response = client.post(
            f"/api/leaves/{pending_leave['id']}/approve", headers=headers_for(girls_superintendent)
        )
        assert response.status_code == 403

    def test_auto_approved_leave_type(self, client, leave_types, parent, student_headers, trustee_headers):
        config_id = leave_type_id(client, trustee_headers, "EMERGENCY")
        client.put(f"/api/config/leave-types/{config_id}", json={"requiresApproval": False}, headers=trustee_headers)

        response = apply(client, student_headers, leave_month(), leave_type="EMERGENCY")
        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Leave approved"
        assert body["data"]["status"] == "APPROVED"
        assert body["data"]["parentNotified"] is True


class TestMovement:

    def test_checkout_and_return(self, client, pending_leave, superintendent_headers):
        leave_id = pending_leave["id"]
        early = client.post(f"/api/leaves/{leave_id}/checkout", headers=superintendent_headers)
        assert early.status_code == 422

        client.post(f"/api/leaves/{leave_id}/approve", headers=superintendent_headers)
        out = client.post(f"/api/leaves/{leave_id}/checkout", json={"notes": "Left at 6pm"}, headers=superintendent_headers)
        assert out.json()["data"]["status"] == "CHECKED_OUT"
        assert out.json()["data"]["checkedOutAt"] is not None

        back = client.post(f"/api/leaves/{leave_id}/return", headers=superintendent_headers)
        assert back.json()["data"]["status"] == "RETURNED"
        assert back.json()["data"]["returnedAt"] is not None

    def test_cancel_own_leave(self, client, pending_leave, student_headers):
        response = client.post(
            f"/api/leaves/{pending_leave['id']}/cancel", json={"reason": "Plans changed"}, headers=student_headers
        )
        assert response.json()["data"]["status"] == "CANCELLED"

    def test_cannot_cancel_after_checkout(self, client, pending_leave, student_headers, superintendent_headers):
        client.post(f"/api/leaves/{pending_leave['id']}/approve", headers=superintendent_headers)
        client.post(f"/api/leaves/{pending_leave['id']}/checkout", headers=superintendent_headers)
        response = client.post(f"/api/leaves/{pending_leave['id']}/cancel", headers=student_headers)
        assert response.status_code == 422

    def test_cannot_cancel_someone_elses(self, client, pending_leave, make_user):
        other = make_user(UserRole.STUDENT, Vertical.BOYS)
        response = client.post(f"/api/leaves/{pending_leave['id']}/cancel", headers=headers_for(other))
        assert response.status_code == 403


class TestVisibility:

    def test_student_sees_only_own(self, client, pending_leave, make_user):
        other = make_user(UserRole.STUDENT, Vertical.BOYS)
        response = client.get("/api/leaves", headers=headers_for(other))
        assert response.json()["data"] == []
        assert client.get(f"/api/leaves/{pending_leave['id']}", headers=headers_for(other)).status_code == 403

    def test_parent_sees_ward(self, client, pending_leave, parent_headers):
        response = client.get("/api/leaves", headers=parent_headers)
        assert [leave["id"] for leave in response.json()["data"]] == [pending_leave["id"]]
        assert client.get(f"/api/leaves/{pending_leave['id']}", headers=parent_headers).status_code == 200

    def test_staff_scoping(self, client, pending_leave, superintendent_headers, girls_superintendent):
        mine = client.get("/api/leaves", headers=superintendent_headers).json()
        assert mine["pagination"]["total"] == 1
        theirs = client.get("/api/leaves", headers=headers_for(girls_superintendent)).json()
        assert theirs["pagination"]["total"] == 0

    def test_pending_and_stats(self, client, pending_leave, superintendent_headers):
        pending = client.get("/api/leaves/pending", headers=superintendent_headers).json()["data"]
        assert [leave["id"] for leave in pending] == [pending_leave["id"]]

        stats = client.get("/api/leaves/stats", headers=superintendent_headers).json()["data"]
        assert stats["pending"] == 1
        assert stats["approved"] == 0
        assert stats["totalThisMonth"] == 1

    def test_student_cannot_read_stats(self, client, pending_leave, student_headers):
        assert client.get("/api/leaves/stats", headers=student_headers).status_code == 403
