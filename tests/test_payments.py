"""
Fee ledger and payment recording
"""
from datetime import timedelta

import pytest

from hostel_admin.models.fee import Fee
from hostel_admin.schemas.common.enums import UserRole, Vertical
from hostel_admin.utils.datetime_utils import local_today, utcnow

from tests.conftest import headers_for


def create_fee(client, headers, student_id, amount=5000, due_in_days=30, fee_type="HOSTEL_FEE"):
    response = client.post(
        "/api/fees",
        json={
            "studentId": student_id,
            "feeType": fee_type,
            "amount": amount,
            "dueDate": (local_today() + timedelta(days=due_in_days)).isoformat(),
            "academicYear": "2026-2027",
        },
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]


def pay(client, headers, fee_id, amount, method="UPI"):
    return client.post(
        "/api/payments",
        json={"feeId": fee_id, "amount": amount, "method": method, "transactionReference": "UPI-778899"},
        headers=headers,
    )


@pytest.fixture
def fee(client, student, accounts_headers):
    return create_fee(client, accounts_headers, student.id)


class TestFees:

    def test_create_fee(self, fee, student):
        assert fee["studentId"] == student.id
        assert fee["amount"] == 5000.0
        assert fee["paidAmount"] == 0.0
        assert fee["balance"] == 5000.0
        assert fee["status"] == "PENDING"

    def test_past_due_fee_is_overdue(self, client, student, accounts_headers):
        fee = create_fee(client, accounts_headers, student.id, due_in_days=-3)
        assert fee["status"] == "OVERDUE"

    def test_only_finance_creates_fees(self, client, student, superintendent_headers, trustee_headers):
        response = client.post(
            "/api/fees",
            json={"studentId": student.id, "feeType": "MESS_FEE", "amount": 100, "dueDate": local_today().isoformat()},
            headers=superintendent_headers,
        )
        assert response.status_code == 403
        create_fee(client, trustee_headers, student.id, fee_type="MESS_FEE")

    def test_fee_for_unknown_student(self, client, superintendent, accounts_headers):
        response = client.post(
            "/api/fees",
            json={"studentId": superintendent.id, "feeType": "OTHER", "amount": 100, "dueDate": local_today().isoformat()},
            headers=accounts_headers,
        )
        assert response.status_code == 404

    def test_amount_must_be_positive(self, client, student, accounts_headers):
        response = client.post(
            "/api/fees",
            json={"studentId": student.id, "feeType": "OTHER", "amount": 0, "dueDate": local_today().isoformat()},
            headers=accounts_headers,
        )
        assert response.status_code == 400

    def test_overdue_refreshed_on_read(self, client, db_session, fee, accounts_headers):
        stored = db_session.get(Fee, fee["id"])
        stored.due_date = local_today() - timedelta(days=1)
        db_session.commit()

        response = client.get("/api/fees", headers=accounts_headers)
        assert response.json()["data"][0]["status"] == "OVERDUE"

    def test_student_sees_own_fees(self, client, fee, make_user, student_headers, accounts_headers):
        other = make_user(UserRole.STUDENT, Vertical.BOYS)
        create_fee(client, accounts_headers, other.id)

        mine = client.get("/api/fees", headers=student_headers).json()
        assert [f["id"] for f in mine["data"]] == [fee["id"]]
        assert mine["pagination"]["total"] == 1

        assert client.get(f"/api/fees/{fee['id']}", headers=headers_for(other)).status_code == 403

    def test_parent_sees_ward_fees(self, client, fee, parent_headers):
        response = client.get("/api/fees", headers=parent_headers)
        assert [f["id"] for f in response.json()["data"]] == [fee["id"]]

    def test_waive_fee(self, client, fee, accounts_headers):
        response = client.post(
            f"/api/fees/{fee['id']}/waive", json={"reason": "Scholarship holder"}, headers=accounts_headers
        )
        data = response.json()["data"]
        assert data["status"] == "WAIVED"
        assert data["waiverReason"] == "Scholarship holder"

        again = client.post(f"/api/fees/{fee['id']}/waive", json={"reason": "Twice"}, headers=accounts_headers)
        assert again.status_code == 422

    def test_summary(self, client, student, student_headers, accounts_headers):
        first = create_fee(client, accounts_headers, student.id, amount=5000)
        create_fee(client, accounts_headers, student.id, amount=1000, due_in_days=-1, fee_type="MESS_FEE")
        waived = create_fee(client, accounts_headers, student.id, amount=700, fee_type="LAUNDRY")
        client.post(f"/api/fees/{waived['id']}/waive", json={"reason": "Not applicable"}, headers=accounts_headers)
        pay(client, accounts_headers, first["id"], 2000)

        response = client.get(f"/api/fees/summary/{student.id}", headers=student_headers)
        assert response.status_code == 200
        summary = response.json()["data"]
        assert summary["totalDue"] == 6000.0
        assert summary["totalPaid"] == 2000.0
        assert summary["totalPending"] == 4000.0
        assert summary["overdueCount"] == 1
        assert summary["overdueFees"][0]["feeType"] == "MESS_FEE"
        assert len(summary["fees"]) == 3

    def test_summary_of_another_student(self, client, fee, make_user):
        other = make_user(UserRole.STUDENT, Vertical.BOYS)
        response = client.get(f"/api/fees/summary/{fee['studentId']}", headers=headers_for(other))
        assert response.status_code == 403


class TestPayments:

    def test_partial_then_full_payment(self, client, fee, accounts_headers):
        response = pay(client, accounts_headers, fee["id"], 2000)
        assert response.status_code == 201
        year = utcnow().year
        assert response.json()["message"] == f"Payment recorded. Receipt RCP-{year}-00001"
        payment = response.json()["data"]
        assert payment["amount"] == 2000.0
        assert payment["verified"] is False

        partial = client.get(f"/api/fees/{fee['id']}", headers=accounts_headers).json()["data"]
        assert partial["status"] == "PARTIALLY_PAID"
        assert partial["balance"] == 3000.0

        second = pay(client, accounts_headers, fee["id"], 3000, method="CASH")
        assert second.json()["data"]["receiptNumber"] == f"RCP-{year}-00002"

        paid = client.get(f"/api/fees/{fee['id']}", headers=accounts_headers).json()["data"]
        assert paid["status"] == "PAID"
        assert paid["balance"] == 0.0

    def test_partial_payment_on_overdue_fee(self, client, student, accounts_headers):
        late = create_fee(client, accounts_headers, student.id, amount=1000, due_in_days=-2)
        assert late["status"] == "OVERDUE"

        assert pay(client, accounts_headers, late["id"], 400).status_code == 201

        stored = client.get(f"/api/fees/{late['id']}", headers=accounts_headers).json()["data"]
        assert stored["status"] == "PARTIALLY_PAID"
        assert stored["balance"] == 600.0

        summary = client.get(f"/api/fees/summary/{student.id}", headers=accounts_headers).json()["data"]
        assert summary["overdueCount"] == 0

    def test_overpayment_rejected(self, client, fee, accounts_headers):
        response = pay(client, accounts_headers, fee["id"], 5000.01)
        assert response.status_code == 400
        assert response.json()["message"] == "Payment amount exceeds the outstanding balance (5000.00)"

    def test_settled_fee_rejects_payment(self, client, fee, accounts_headers):
        pay(client, accounts_headers, fee["id"], 5000)
        response = pay(client, accounts_headers, fee["id"], 1)
        assert response.status_code == 422
        assert response.json()["message"] == "Fee is already paid"

    def test_only_finance_records(self, client, fee, superintendent_headers, student_headers):
        assert pay(client, superintendent_headers, fee["id"], 100).status_code == 403
        assert pay(client, student_headers, fee["id"], 100).status_code == 403

    def test_verify_payment(self, client, fee, accounts_headers):
        payment = pay(client, accounts_headers, fee["id"], 1000).json()["data"]
        response = client.post(f"/api/payments/{payment['id']}/verify", headers=accounts_headers)
        assert response.json()["data"]["verified"] is True
        assert response.json()["data"]["verifiedAt"] is not None

        again = client.post(f"/api/payments/{payment['id']}/verify", headers=accounts_headers)
        assert again.status_code == 409

    def test_list_payments_filters(self, client, fee, accounts_headers, student_headers):
        first = pay(client, accounts_headers, fee["id"], 1000).json()["data"]
        pay(client, accounts_headers, fee["id"], 500, method="CASH")
        client.post(f"/api/payments/{first['id']}/verify", headers=accounts_headers)

        unverified = client.get("/api/payments?verified=false", headers=accounts_headers).json()
        assert unverified["pagination"]["total"] == 1
        cash = client.get("/api/payments?method=CASH", headers=accounts_headers).json()
        assert cash["data"][0]["method"] == "CASH"

        mine = client.get("/api/payments", headers=student_headers).json()
        assert mine["pagination"]["total"] == 2

    def test_payment_is_audited(self, client, fee, trustee_headers, accounts_headers):
        payment = pay(client, accounts_headers, fee["id"], 1000).json()["data"]
        trail = client.get(f"/api/audit/payment/{payment['id']}", headers=trustee_headers).json()["data"]
        assert trail[0]["action"] == "PAYMENT"
        assert trail[0]["newValue"]["fee_status"] == "PARTIALLY_PAID"
