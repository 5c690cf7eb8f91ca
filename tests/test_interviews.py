"""
Interview scheduling
"""
from datetime import timedelta

from hostel_admin.schemas.common.enums import UserRole, Vertical
from hostel_admin.utils.datetime_utils import utcnow

from tests.conftest import headers_for
from tests.helpers import (
    create_application,
    interview_day,
    interview_time,
    move_application,
    submitted_application,
)


def schedule(client, headers, application_id, hour=11, **body):
    payload = {"applicationId": application_id, "scheduledAt": interview_time(hour)}
    payload.update(body)
    return client.post("/api/interviews", json=payload, headers=headers)


class TestSchedule:

    def test_schedule_moves_application(self, client, applicant_headers, superintendent_headers):
        application = submitted_application(client, applicant_headers)
        response = schedule(client, superintendent_headers, application["id"], location="Office 2")
        assert response.status_code == 201
        assert response.json()["data"]["status"] == "SCHEDULED"

        current = client.get(f"/api/applications/{application['id']}", headers=superintendent_headers).json()["data"]
        assert current["status"] == "INTERVIEW_SCHEDULED"
        assert len(current["interviews"]) == 1

    def test_draft_cannot_be_scheduled(self, client, applicant_headers, superintendent_headers):
        application = create_application(client, applicant_headers)
        response = schedule(client, superintendent_headers, application["id"])
        assert response.status_code == 422
        assert response.json()["message"] == "Cannot schedule interview for this application status"

    def test_past_time_rejected(self, client, applicant_headers, superintendent_headers):
        application = submitted_application(client, applicant_headers)
        past = (utcnow() - timedelta(days=1)).isoformat() + "Z"
        response = schedule(client, superintendent_headers, application["id"], scheduledAt=past)
        assert response.status_code == 400

    def test_video_call_needs_link(self, client, applicant_headers, superintendent_headers):
        application = submitted_application(client, applicant_headers)
        response = schedule(client, superintendent_headers, application["id"], mode="VIDEO_CALL")
        assert response.status_code == 400

    def test_double_booking(self, client, make_user, applicant_headers, superintendent_headers):
        first = submitted_application(client, applicant_headers)
        other_student = make_user(UserRole.STUDENT, Vertical.BOYS)
        second = submitted_application(client, headers_for(other_student))

        assert schedule(client, superintendent_headers, first["id"]).status_code == 201
        response = schedule(client, superintendent_headers, second["id"])
        assert response.status_code == 409
        assert response.json()["message"] == "This interview slot is already booked"

    def test_one_active_interview_per_application(self, client, applicant_headers, superintendent_headers):
        application = submitted_application(client, applicant_headers)
        move_application(client, superintendent_headers, application["id"], "UNDER_REVIEW")
        assert schedule(client, superintendent_headers, application["id"]).status_code == 201
        assert schedule(client, superintendent_headers, application["id"], hour=14).status_code == 422


class TestInterviewLifecycle:

    def test_complete(self, client, applicant_headers, superintendent_headers):
        application = submitted_application(client, applicant_headers)
        interview = schedule(client, superintendent_headers, application["id"]).json()["data"]

        response = client.post(
            f"/api/interviews/{interview['id']}/complete",
            json={"outcome": "RECOMMENDED", "score": 82, "notes": "Confident"},
            headers=superintendent_headers,
        )
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["outcome"] == "RECOMMENDED"
        assert data["score"] == 82

        current = client.get(f"/api/applications/{application['id']}", headers=superintendent_headers).json()["data"]
        assert current["status"] == "UNDER_REVIEW"

    def test_cancel_frees_slot(self, client, applicant_headers, superintendent_headers):
        application = submitted_application(client, applicant_headers)
        interview = schedule(client, superintendent_headers, application["id"]).json()["data"]

        response = client.post(
            f"/api/interviews/{interview['id']}/cancel", json={"reason": "Applicant unwell"}, headers=superintendent_headers
        )
        assert response.status_code == 200
        assert response.json()["data"]["status"] == "CANCELLED"

        again = schedule(client, superintendent_headers, application["id"])
        assert again.status_code == 201

    def test_reschedule(self, client, applicant_headers, superintendent_headers):
        application = submitted_application(client, applicant_headers)
        interview = schedule(client, superintendent_headers, application["id"]).json()["data"]

        response = client.put(
            f"/api/interviews/{interview['id']}/reschedule",
            json={"scheduledAt": interview_time(15)},
            headers=superintendent_headers,
        )
        assert response.status_code == 200
        assert response.json()["data"]["scheduledAt"] != interview["scheduledAt"]

    def test_completed_interview_cannot_be_cancelled(self, client, applicant_headers, superintendent_headers):
        application = submitted_application(client, applicant_headers)
        interview = schedule(client, superintendent_headers, application["id"]).json()["data"]
        client.post(
            f"/api/interviews/{interview['id']}/complete", json={"outcome": "NO_SHOW"}, headers=superintendent_headers
        )
        response = client.post(
            f"/api/interviews/{interview['id']}/cancel", json={"reason": "Too late"}, headers=superintendent_headers
        )
        assert response.status_code == 422


class TestSlots:

    def test_slots_mark_bookings(self, client, applicant_headers, superintendent_headers):
        application = submitted_application(client, applicant_headers)
        interview = schedule(client, superintendent_headers, application["id"], hour=11).json()["data"]

        day = interview_day().isoformat()
        response = client.get(f"/api/interviews/slots?date={day}", headers=superintendent_headers)
        assert response.status_code == 200
        slots = response.json()["data"]
        assert len(slots) == 7
        assert slots[0]["startsAt"].startswith(f"{day}T10:00")

        booked = [s for s in slots if not s["available"]]
        assert len(booked) == 1
        assert booked[0]["startsAt"].startswith(f"{day}T11:00")
        assert booked[0]["interviewId"] == interview["id"]

    def test_list_by_date(self, client, applicant_headers, superintendent_headers):
        application = submitted_application(client, applicant_headers)
        schedule(client, superintendent_headers, application["id"])

        day = interview_day().isoformat()
        response = client.get(f"/api/interviews?dateFrom={day}&dateTo={day}", headers=superintendent_headers)
        assert len(response.json()["data"]) == 1

        other_day = (interview_day() + timedelta(days=1)).isoformat()
        response = client.get(f"/api/interviews?dateFrom={other_day}", headers=superintendent_headers)
        assert response.json()["data"] == []
