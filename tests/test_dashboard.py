"""
Role dashboards
"""


def allocate(client, headers, student):
    room = client.post(
        "/api/rooms", json={"roomNumber": "101", "vertical": "BOYS", "capacity": 2}, headers=headers
    ).json()["data"]
    client.post("/api/allocations", json={"studentId": student.id, "roomId": room["id"]}, headers=headers)


def bill(client, headers, student, amount=4000):
    return client.post(
        "/api/fees",
        json={"studentId": student.id, "feeType": "HOSTEL_FEE", "amount": amount, "dueDate": "2099-01-01"},
        headers=headers,
    ).json()["data"]


class TestDashboards:

    def test_student(self, client, student, student_headers, superintendent_headers, accounts_headers):
        allocate(client, superintendent_headers, student)
        bill(client, accounts_headers, student)

        data = client.get("/api/dashboard/student", headers=student_headers).json()["data"]
        assert data["profile"]["id"] == student.id
        assert data["application"] is None
        assert data["allocation"]["roomNumber"] == "101"
        assert data["renewal"]["status"] == "NOT_DUE"
        assert data["fees"]["totalPending"] == 4000.0
        assert data["recentLeaves"] == []

    def test_superintendent(self, client, student, superintendent_headers):
        allocate(client, superintendent_headers, student)
        data = client.get("/api/dashboard/superintendent", headers=superintendent_headers).json()["data"]
        assert data["vertical"] == "BOYS"
        assert data["occupancy"]["occupiedBeds"] == 1
        assert data["applicationsByStatus"]["SUBMITTED"] == 0
        assert data["leaveStats"]["pending"] == 0
        assert data["renewalsDue"] == 0

    def test_trustee(self, client, student, trustee_headers, accounts_headers):
        fee = bill(client, accounts_headers, student)
        client.post(
            "/api/payments", json={"feeId": fee["id"], "amount": 1500, "method": "CASH"}, headers=accounts_headers
        )
        data = client.get("/api/dashboard/trustee", headers=trustee_headers).json()["data"]
        assert data["applicationsByVertical"] == {"BOYS": 0, "GIRLS": 0, "DHARAMSHALA": 0}
        assert [o["vertical"] for o in data["occupancy"]] == ["BOYS", "GIRLS", "DHARAMSHALA"]
        assert data["feesCollected"] == 1500.0
        assert data["feesOutstanding"] == 2500.0

    def test_accounts(self, client, student, accounts_headers, trustee_headers):
        fee = bill(client, accounts_headers, student)
        client.post(
            "/api/payments", json={"feeId": fee["id"], "amount": 4000, "method": "UPI"}, headers=accounts_headers
        )
        data = client.get("/api/dashboard/accounts", headers=accounts_headers).json()["data"]
        assert data["totalBilled"] == 4000.0
        assert data["unverifiedPayments"] == 1
        assert data["feesByStatus"]["PAID"] == 1
        assert client.get("/api/dashboard/accounts", headers=trustee_headers).status_code == 200

    def test_parent(self, client, student, parent_headers, accounts_headers):
        bill(client, accounts_headers, student)
        data = client.get("/api/dashboard/parent", headers=parent_headers).json()["data"]
        assert data["student"]["id"] == student.id
        assert data["allocation"] is None
        assert data["fees"]["totalDue"] == 4000.0

    def test_role_mismatch(self, client, student_headers, superintendent_headers):
        assert client.get("/api/dashboard/trustee", headers=student_headers).status_code == 403
        assert client.get("/api/dashboard/student", headers=superintendent_headers).status_code == 403
