"""
Leave types, blackout dates and notification rules
"""
from datetime import date

from hostel_admin.services.config_service import ConfigService


class TestLeaveTypes:

    def test_seeded_defaults(self, client, leave_types, student_headers):
        assert leave_types == 4
        data = client.get("/api/config/leave-types", headers=student_headers).json()["data"]
        regular = next(c for c in data if c["leaveType"] == "REGULAR")
        assert regular["maxDaysPerMonth"] == 4
        assert regular["maxDaysPerSemester"] == 15
        assert regular["requiresApproval"] is True
        assert regular["allowedVerticals"] == []

    def test_seeding_is_idempotent(self, db_session, leave_types):
        assert ConfigService(db_session).seed_leave_types() == 0

    def test_create_and_duplicate(self, client, trustee_headers):
        payload = {"leaveType": "MEDICAL", "name": "Medical Leave", "maxDaysPerSemester": 20}
        response = client.post("/api/config/leave-types", json=payload, headers=trustee_headers)
        assert response.status_code == 201
        assert response.json()["data"]["allowedVerticals"] == ["BOYS", "GIRLS", "DHARAMSHALA"]

        again = client.post("/api/config/leave-types", json=payload, headers=trustee_headers)
        assert again.status_code == 409

    def test_update_and_active_filter(self, client, leave_types, trustee_headers):
        configs = client.get("/api/config/leave-types", headers=trustee_headers).json()["data"]
        vacation = next(c for c in configs if c["leaveType"] == "VACATION")

        response = client.put(
            f"/api/config/leave-types/{vacation['id']}",
            json={"active": False, "maxDaysPerSemester": 30},
            headers=trustee_headers,
        )
        assert response.json()["data"]["maxDaysPerSemester"] == 30

        active = client.get("/api/config/leave-types?activeOnly=true", headers=trustee_headers).json()["data"]
        assert "VACATION" not in {c["leaveType"] for c in active}

    def test_rename_to_existing_name(self, client, leave_types, trustee_headers):
        configs = client.get("/api/config/leave-types", headers=trustee_headers).json()["data"]
        vacation = next(c for c in configs if c["leaveType"] == "VACATION")
        response = client.put(
            f"/api/config/leave-types/{vacation['id']}", json={"name": "Regular Leave"}, headers=trustee_headers
        )
        assert response.status_code == 409

    def test_only_trustee_writes(self, client, superintendent_headers):
        response = client.post(
            "/api/config/leave-types", json={"leaveType": "REGULAR", "name": "Regular"}, headers=superintendent_headers
        )
        assert response.status_code == 403


class TestBlackoutDates:

    def payload(self, **overrides):
        body = {"name": "Diwali week", "startDate": "2026-11-06", "endDate": "2026-11-12"}
        body.update(overrides)
        return body

    def test_crud(self, client, trustee_headers, student_headers):
        created = client.post("/api/config/blackout-dates", json=self.payload(), headers=trustee_headers)
        assert created.status_code == 201
        blackout = created.json()["data"]
        assert blackout["verticals"] == ["BOYS", "GIRLS", "DHARAMSHALA"]

        listed = client.get("/api/config/blackout-dates", headers=student_headers).json()["data"]
        assert [b["id"] for b in listed] == [blackout["id"]]

        updated = client.put(
            f"/api/config/blackout-dates/{blackout['id']}", json={"verticals": ["GIRLS"]}, headers=trustee_headers
        )
        assert updated.json()["data"]["verticals"] == ["GIRLS"]

        deleted = client.delete(f"/api/config/blackout-dates/{blackout['id']}", headers=trustee_headers)
        assert deleted.json() == {"success": True, "message": "Blackout period removed"}
        assert client.get("/api/config/blackout-dates", headers=student_headers).json()["data"] == []

    def test_range_validation(self, client, trustee_headers):
        response = client.post(
            "/api/config/blackout-dates", json=self.payload(endDate="2026-11-01"), headers=trustee_headers
        )
        assert response.status_code == 400

        blackout = client.post("/api/config/blackout-dates", json=self.payload(), headers=trustee_headers).json()["data"]
        response = client.put(
            f"/api/config/blackout-dates/{blackout['id']}",
            json={"endDate": date(2026, 11, 1).isoformat()},
            headers=trustee_headers,
        )
        assert response.status_code == 400
        assert response.json()["message"] == "End date must be on or after start date"

    def test_delete_unknown(self, client, trustee_headers):
        assert client.delete("/api/config/blackout-dates/nope", headers=trustee_headers).status_code == 404


class TestNotificationRules:

    def rule(self, **overrides):
        body = {
            "name": "Fee due reminder",
            "event": "FEE_DUE",
            "channel": "SMS",
            "recipientRole": "PARENT",
            "template": "Fee of {{amount}} due on {{dueDate}}",
            "offsetDays": -3,
        }
        body.update(overrides)
        return body

    def test_create_list_update_delete(self, client, trustee_headers):
        created = client.post("/api/config/notification-rules", json=self.rule(), headers=trustee_headers)
        assert created.status_code == 201
        rule = created.json()["data"]
        client.post(
            "/api/config/notification-rules",
            json=self.rule(name="Leave approved", event="LEAVE_APPROVED", offsetDays=0),
            headers=trustee_headers,
        )

        fee_rules = client.get("/api/config/notification-rules?event=fee_due", headers=trustee_headers).json()["data"]
        assert [r["id"] for r in fee_rules] == [rule["id"]]

        updated = client.put(
            f"/api/config/notification-rules/{rule['id']}", json={"active": False}, headers=trustee_headers
        )
        assert updated.json()["data"]["active"] is False

        deleted = client.delete(f"/api/config/notification-rules/{rule['id']}", headers=trustee_headers)
        assert deleted.json()["message"] == "Rule deleted"

    def test_event_format(self, client, trustee_headers):
        response = client.post(
            "/api/config/notification-rules", json=self.rule(event="fee-due"), headers=trustee_headers
        )
        assert response.status_code == 400
