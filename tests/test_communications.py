"""
Outbound messages and the communication log
"""
from datetime import timedelta

import pytest

from hostel_admin.services.common.errors import ValidationError
from hostel_admin.services.communication_service import render_template
from hostel_admin.utils.datetime_utils import utcnow
from hostel_admin.utils.sms import SMSResult, SMSService, SMSStatus


def send(client, headers, **body):
    payload = {"channel": "SMS", "recipients": ["+91 98765 43210"], "message": "Water supply off tomorrow 9-11am"}
    payload.update(body)
    return client.post("/api/communications", json=payload, headers=headers)


@pytest.fixture
def sent_message(client, superintendent_headers):
    response = send(client, superintendent_headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]


class TestRenderTemplate:

    def test_substitutes_placeholders(self):
        assert render_template("Hi {{ name }}, pay {{amount}}", {"name": "Ravi", "amount": 500}) == "Hi Ravi, pay 500"

    def test_missing_variables(self):
        with pytest.raises(ValidationError) as exc:
            render_template("{{a}} and {{b}}", {"a": 1})
        assert exc.value.details["missing"] == ["b"]


class TestSend:

    def test_sms_sent(self, sent_message, superintendent):
        assert sent_message["status"] == "SENT"
        assert sent_message["recipients"] == ["9876543210"]
        assert sent_message["senderId"] == superintendent.id
        assert sent_message["sentAt"] is not None

    def test_template_message(self, client, accounts_headers):
        response = send(
            client,
            accounts_headers,
            message=None,
            templateKey="fee_reminder",
            context="FEE",
            variables={"name": "Ravi", "feeType": "hostel fee", "amount": 5000, "dueDate": "2026-11-01"},
        )
        data = response.json()["data"]
        assert data["message"] == "Dear Ravi, your hostel fee of Rs. 5000 is due on 2026-11-01. Please pay on time."
        assert data["subject"] == "Fee reminder"

    def test_template_variables_required(self, client, accounts_headers):
        response = send(client, accounts_headers, message=None, templateKey="fee_reminder", variables={"name": "Ravi"})
        assert response.status_code == 400
        assert response.json()["details"]["missing"] == ["amount", "dueDate", "feeType"]

    def test_unknown_template(self, client, accounts_headers):
        response = send(client, accounts_headers, message=None, templateKey="birthday")
        assert response.status_code == 400

    def test_message_or_template_required(self, client, accounts_headers):
        response = send(client, accounts_headers, message=None)
        assert response.status_code == 400
        assert response.json()["message"] == "Either a template or a message body is required"

    def test_invalid_recipient(self, client, accounts_headers):
        response = send(client, accounts_headers, recipients=["12345"])
        assert response.status_code == 400
        assert response.json()["message"] == "Invalid recipient: 12345"

    def test_email_logged_as_sent(self, client, trustee_headers):
        response = send(client, trustee_headers, channel="EMAIL", recipients=["Parent@Example.com"], subject="Notice")
        data = response.json()["data"]
        assert data["status"] == "SENT"
        assert data["recipients"] == ["parent@example.com"]

    def test_scheduled(self, client, trustee_headers):
        later = (utcnow() + timedelta(days=1)).isoformat() + "Z"
        response = send(client, trustee_headers, scheduledAt=later)
        assert response.status_code == 201
        assert response.json()["message"] == "Message scheduled"
        data = response.json()["data"]
        assert data["status"] == "SCHEDULED"
        assert data["sentAt"] is None

    def test_delivery_failure_is_logged(self, client, trustee_headers, monkeypatch):
        class FailingProvider:
            name = "failing"

            def send_sms(self, message):
                return SMSResult(success=False, error="gateway down", status=SMSStatus.FAILED, provider="failing")

        monkeypatch.setattr(
            "hostel_admin.services.communication_service.get_sms_service", lambda: SMSService(FailingProvider())
        )
        response = send(client, trustee_headers)
        assert response.status_code == 201
        assert response.json()["message"] == "Message could not be delivered"
        data = response.json()["data"]
        assert data["status"] == "FAILED"
        assert data["error"] == "******3210: gateway down"

    def test_students_cannot_send(self, client, student_headers):
        assert send(client, student_headers).status_code == 403


class TestLog:

    def test_status_progression(self, client, sent_message, superintendent_headers):
        url = f"/api/communications/{sent_message['id']}/status"
        delivered = client.patch(url, json={"status": "DELIVERED"}, headers=superintendent_headers)
        assert delivered.json()["data"]["deliveredAt"] is not None

        read = client.patch(url, json={"status": "READ"}, headers=superintendent_headers)
        assert read.json()["data"]["readAt"] is not None

        backwards = client.patch(url, json={"status": "SENT"}, headers=superintendent_headers)
        assert backwards.status_code == 400
        assert backwards.json()["message"] == "Cannot change message status from READ to SENT"

    def test_escalate_once(self, client, sent_message, trustee_headers):
        url = f"/api/communications/{sent_message['id']}/escalate"
        response = client.post(url, json={"reason": "Parent did not respond"}, headers=trustee_headers)
        data = response.json()["data"]
        assert data["escalated"] is True
        assert data["escalationReason"] == "Parent did not respond"

        assert client.post(url, json={"reason": "Again"}, headers=trustee_headers).status_code == 409

    def test_list_filters(self, client, sent_message, trustee_headers):
        send(client, trustee_headers, channel="WHATSAPP")
        response = client.get("/api/communications?channel=WHATSAPP", headers=trustee_headers)
        assert [m["channel"] for m in response.json()["data"]] == ["WHATSAPP"]

        escalated = client.get("/api/communications?escalated=true", headers=trustee_headers)
        assert escalated.json()["data"] == []

    def test_list_limit_capped(self, client, trustee_headers):
        assert client.get("/api/communications?limit=500", headers=trustee_headers).status_code == 400

    def test_unknown_message(self, client, trustee_headers):
        assert client.get("/api/communications/missing", headers=trustee_headers).status_code == 404
