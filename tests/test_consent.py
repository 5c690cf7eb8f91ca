"""
Consent ledger: grants, revocation, checks and renewal
"""
from datetime import timedelta

from hostel_admin.models.consent import ConsentRecord
from hostel_admin.schemas.common.enums import ConsentType
from hostel_admin.utils.datetime_utils import utcnow

from tests.helpers import APPLICATION_CONSENTS, grant_consents

TEXT = "I agree to the hostel terms and conditions."


def grant(client, headers, consent_type="TERMS_AND_CONDITIONS", version="1.0", text=TEXT):
    response = client.post(
        "/api/consent",
        json={"consentType": consent_type, "version": version, "consentText": text},
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]


def set_expiry(db_session, consent_id, delta):
    record = db_session.get(ConsentRecord, consent_id)
    record.expires_at = utcnow() + delta
    db_session.commit()


class TestGrant:

    def test_grant_for_user(self, client, student, student_headers):
        record = grant(client, student_headers)
        assert record["subject"] == student.id
        assert record["isCurrent"] is True
        assert record["version"] == "1.0"
        assert len(record["textHash"]) == 64
        assert record["expiresAt"] > record["acceptedAt"]

    def test_grant_for_applicant_uses_contact(self, client, applicant_headers, applicant_mobile):
        record = grant(client, applicant_headers)
        assert record["subject"] == applicant_mobile

    def test_regrant_supersedes(self, client, student_headers):
        first = grant(client, student_headers, version="1.0")
        second = grant(client, student_headers, version="2.0")

        history = client.get("/api/consent/history?consentType=TERMS_AND_CONDITIONS", headers=student_headers)
        records = {r["id"]: r for r in history.json()["data"]}
        assert set(records) == {first["id"], second["id"]}
        assert records[first["id"]]["isCurrent"] is False
        assert records[second["id"]]["isCurrent"] is True

    def test_anonymous_rejected(self, client):
        response = client.post(
            "/api/consent", json={"consentType": "PRIVACY_POLICY", "version": "1", "consentText": TEXT}
        )
        assert response.status_code == 401

    def test_grant_is_audited(self, client, student_headers, trustee_headers):
        record = grant(client, student_headers)
        trail = client.get(f"/api/audit/consent/{record['id']}", headers=trustee_headers).json()["data"]
        assert [entry["action"] for entry in trail] == ["CONSENT_GRANTED"]


class TestChecks:

    def test_required_for_context(self, client, student_headers):
        response = client.get("/api/consent/check/APPLICATION", headers=student_headers)
        data = response.json()["data"]
        assert data["satisfied"] is False
        assert set(data["missing"]) == {t.value for t in APPLICATION_CONSENTS}

        grant_consents(client, student_headers)
        data = client.get("/api/consent/check/APPLICATION", headers=student_headers).json()["data"]
        assert data["satisfied"] is True
        assert data["missing"] == []

        admission = client.get("/api/consent/check/ADMISSION", headers=student_headers).json()["data"]
        assert admission["missing"] == ["HOSTEL_RULES"]

    def test_bulk_check(self, client, student_headers):
        grant(client, student_headers, "PRIVACY_POLICY")
        response = client.post(
            "/api/consent/bulk-check",
            json={"consentTypes": ["PRIVACY_POLICY", "HOSTEL_RULES"]},
            headers=student_headers,
        )
        assert response.json()["data"] == {"PRIVACY_POLICY": True, "HOSTEL_RULES": False}

    def test_bulk_check_needs_types(self, client, student_headers):
        response = client.post("/api/consent/bulk-check", json={"consentTypes": []}, headers=student_headers)
        assert response.status_code == 400

    def test_expired_consent_not_counted(self, client, db_session, student_headers):
        record = grant(client, student_headers, "PRIVACY_POLICY")
        set_expiry(db_session, record["id"], timedelta(days=-1))

        response = client.post(
            "/api/consent/bulk-check", json={"consentTypes": ["PRIVACY_POLICY"]}, headers=student_headers
        )
        assert response.json()["data"] == {"PRIVACY_POLICY": False}

    def test_verify_text(self, client, student_headers, make_user):
        record = grant(client, student_headers)
        match = client.post(
            "/api/consent/verify", json={"consentId": record["id"], "consentText": TEXT}, headers=student_headers
        )
        assert match.json()["data"] == {"valid": True}

        changed = client.post(
            "/api/consent/verify",
            json={"consentId": record["id"], "consentText": TEXT + " Updated."},
            headers=student_headers,
        )
        assert changed.json()["data"] == {"valid": False}

    def test_verify_other_subjects_record(self, client, student_headers, applicant_headers):
        record = grant(client, student_headers)
        response = client.post(
            "/api/consent/verify", json={"consentId": record["id"], "consentText": TEXT}, headers=applicant_headers
        )
        assert response.status_code == 404


class TestRevoke:

    def test_revoke(self, client, student_headers):
        grant_consents(client, student_headers)
        response = client.post(
            "/api/consent/revoke",
            json={"consentType": "DATA_PROCESSING", "reason": "No longer staying"},
            headers=student_headers,
        )
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["revokedAt"] is not None
        assert data["revocationReason"] == "No longer staying"
        assert data["isCurrent"] is False

        check = client.get("/api/consent/check/APPLICATION", headers=student_headers).json()["data"]
        assert check["missing"] == [ConsentType.DATA_PROCESSING.value]

    def test_revoke_without_consent(self, client, student_headers):
        response = client.post("/api/consent/revoke", json={"consentType": "HOSTEL_RULES"}, headers=student_headers)
        assert response.status_code == 404
        assert response.json()["message"] == "No active HOSTEL_RULES consent to revoke"


class TestRenewal:

    def test_no_consent(self, client, student_headers):
        data = client.get("/api/consent/renewal/RENEWAL_TERMS", headers=student_headers).json()["data"]
        assert data["needsRenewal"] is True
        assert data["reason"] == "No consent on record"

    def test_fresh_consent(self, client, student_headers):
        grant(client, student_headers, "RENEWAL_TERMS")
        data = client.get("/api/consent/renewal/RENEWAL_TERMS", headers=student_headers).json()["data"]
        assert data["needsRenewal"] is False
        assert data["daysRemaining"] > 150

    def test_expiring_soon(self, client, db_session, student_headers):
        record = grant(client, student_headers, "RENEWAL_TERMS")
        set_expiry(db_session, record["id"], timedelta(days=10))

        data = client.get("/api/consent/renewal/RENEWAL_TERMS", headers=student_headers).json()["data"]
        assert data["needsRenewal"] is True
        assert data["daysRemaining"] == 9
        assert data["reason"] == "Consent expires in 9 days"

    def test_expired(self, client, db_session, student_headers):
        record = grant(client, student_headers, "RENEWAL_TERMS")
        set_expiry(db_session, record["id"], timedelta(hours=-1))

        data = client.get("/api/consent/renewal/RENEWAL_TERMS", headers=student_headers).json()["data"]
        assert data["reason"] == "Consent has expired"
        assert data["daysRemaining"] == 0

    def test_expiring_list_for_staff(self, client, db_session, student_headers, superintendent_headers):
        soon = grant(client, student_headers, "HOSTEL_RULES")
        grant(client, student_headers, "PRIVACY_POLICY")
        set_expiry(db_session, soon["id"], timedelta(days=5))

        response = client.get("/api/consent/expiring?days=7", headers=superintendent_headers)
        assert [r["id"] for r in response.json()["data"]] == [soon["id"]]

        assert client.get("/api/consent/expiring", headers=student_headers).status_code == 403
