"""Request helpers shared by the API tests"""
from datetime import datetime, time, timedelta
from typing import Iterable

from hostel_admin.schemas.common.enums import ConsentType
from hostel_admin.utils.datetime_utils import local_today

APPLICATION_CONSENTS = (
    ConsentType.TERMS_AND_CONDITIONS,
    ConsentType.PRIVACY_POLICY,
    ConsentType.DATA_PROCESSING,
)


def grant_consents(client, headers, types: Iterable[ConsentType] = APPLICATION_CONSENTS) -> None:
    for consent_type in types:
        response = client.post(
            "/api/consent",
            json={
                "consentType": consent_type.value,
                "version": "1.0",
                "consentText": f"I accept the {consent_type.value.lower()} of the hostel.",
            },
            headers=headers,
        )
        assert response.status_code == 201, response.text


def create_application(client, headers, name: str = "Arjun Patel", **body) -> dict:
    payload = {"applicantName": name, "data": {"personal": {"fullName": name}}}
    payload.update(body)
    response = client.post("/api/applications", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]


def submitted_application(client, headers, **body) -> dict:
    application = create_application(client, headers, **body)
    grant_consents(client, headers)
    response = client.post(f"/api/applications/{application['id']}/submit", headers=headers)
    assert response.status_code == 200, response.text
    return response.json()["data"]


def move_application(client, headers, application_id: str, status: str, **body) -> dict:
    response = client.patch(
        f"/api/applications/{application_id}/status", json={"status": status, **body}, headers=headers
    )
    assert response.status_code == 200, response.text
    return response.json()["data"]


def interview_day():
    """A date two days ahead in the hostel's timezone"""
    return local_today() + timedelta(days=2)


def interview_time(hour: int) -> str:
    """Naive ISO timestamp, read by the API as hostel local time"""
    return datetime.combine(interview_day(), time(hour=hour)).isoformat()
