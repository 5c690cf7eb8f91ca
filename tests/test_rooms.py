"""
Rooms, allocations, vacating and transfers
"""
import pytest

from hostel_admin.models.room import Room
from hostel_admin.schemas.common.enums import UserRole, Vertical

from tests.conftest import headers_for


def create_room(client, headers, number="101", capacity=2, vertical="BOYS", **body):
    payload = {"roomNumber": number, "vertical": vertical, "floor": 1, "capacity": capacity}
    payload.update(body)
    response = client.post("/api/rooms", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]


def allocate(client, headers, student_id, room_id):
    return client.post("/api/allocations", json={"studentId": student_id, "roomId": room_id}, headers=headers)


@pytest.fixture
def room(client, superintendent_headers):
    return create_room(client, superintendent_headers)


class TestRooms:

    def test_create_room(self, client, superintendent_headers):
        data = create_room(client, superintendent_headers, number="a-12", amenities=["fan", "desk"])
        assert data["roomNumber"] == "A-12"
        assert data["status"] == "AVAILABLE"
        assert data["availableBeds"] == 2

    def test_room_number_unique_per_vertical(self, client, superintendent_headers, trustee_headers):
        create_room(client, superintendent_headers, number="201")
        duplicate = client.post(
            "/api/rooms", json={"roomNumber": "201", "vertical": "BOYS", "capacity": 2}, headers=trustee_headers
        )
        assert duplicate.status_code == 409
        create_room(client, trustee_headers, number="201", vertical="GIRLS")

    def test_capacity_bounds(self, client, superintendent_headers):
        response = client.post(
            "/api/rooms", json={"roomNumber": "1", "vertical": "BOYS", "capacity": 21}, headers=superintendent_headers
        )
        assert response.status_code == 400

    def test_superintendent_cannot_create_other_vertical(self, client, superintendent_headers):
        response = client.post(
            "/api/rooms", json={"roomNumber": "1", "vertical": "GIRLS", "capacity": 2}, headers=superintendent_headers
        )
        assert response.status_code == 403

    def test_list_rooms_ordered_and_filtered(self, client, trustee_headers):
        create_room(client, trustee_headers, number="302", floor=3)
        create_room(client, trustee_headers, number="101", floor=1)
        create_room(client, trustee_headers, number="G1", vertical="GIRLS", floor=0)

        response = client.get("/api/rooms?vertical=BOYS", headers=trustee_headers)
        assert [r["roomNumber"] for r in response.json()["data"]] == ["101", "302"]

        response = client.get("/api/rooms?floor=0", headers=trustee_headers)
        assert [r["roomNumber"] for r in response.json()["data"]] == ["G1"]

    def test_capacity_shrinks_to_occupancy(self, client, room, student, superintendent_headers):
        allocate(client, superintendent_headers, student.id, room["id"])
        response = client.put(f"/api/rooms/{room['id']}", json={"capacity": 1}, headers=superintendent_headers)
        assert response.status_code == 200
        assert response.json()["data"]["status"] == "OCCUPIED"

        response = client.put(f"/api/rooms/{room['id']}", json={"capacity": 0}, headers=superintendent_headers)
        assert response.status_code == 400

    def test_manual_status_limited(self, client, room, superintendent_headers):
        response = client.put(f"/api/rooms/{room['id']}", json={"status": "OCCUPIED"}, headers=superintendent_headers)
        assert response.status_code == 400

        response = client.put(f"/api/rooms/{room['id']}", json={"status": "MAINTENANCE"}, headers=superintendent_headers)
        assert response.json()["data"]["status"] == "MAINTENANCE"

    def test_notes_can_be_cleared(self, client, superintendent_headers):
        room = create_room(client, superintendent_headers, number="N1", notes="Leaking tap")
        assert room["notes"] == "Leaking tap"

        response = client.put(f"/api/rooms/{room['id']}", json={"notes": None}, headers=superintendent_headers)
        assert response.status_code == 200
        assert response.json()["data"]["notes"] is None

        response = client.put(f"/api/rooms/{room['id']}", json={"floor": 2}, headers=superintendent_headers)
        assert response.json()["data"]["floor"] == 2

    def test_availability(self, client, room, student, superintendent_headers):
        create_room(client, superintendent_headers, number="102", capacity=3)
        allocate(client, superintendent_headers, student.id, room["id"])

        response = client.get("/api/rooms/availability", headers=superintendent_headers)
        data = response.json()["data"]
        assert data["vertical"] == "BOYS"
        assert data["totalRooms"] == 2
        assert data["totalBeds"] == 5
        assert data["occupiedBeds"] == 1
        assert data["availableBeds"] == 4
        assert data["occupancyRate"] == 20.0
        assert data["roomsByStatus"]["PARTIALLY_OCCUPIED"] == 1


class TestAllocations:

    def test_allocate(self, client, db_session, room, student, superintendent_headers):
        response = allocate(client, superintendent_headers, student.id, room["id"])
        assert response.status_code == 201
        data = response.json()["data"]
        assert data["roomNumber"] == "101"
        assert data["studentName"] == student.full_name
        assert data["status"] == "ACTIVE"

        stored = db_session.get(Room, room["id"])
        assert stored.occupied_count == 1

    def test_full_room(self, client, make_user, superintendent_headers):
        single = create_room(client, superintendent_headers, number="S1", capacity=1)
        first, second = (make_user(UserRole.STUDENT, Vertical.BOYS) for _ in range(2))

        assert allocate(client, superintendent_headers, first.id, single["id"]).status_code == 201
        response = allocate(client, superintendent_headers, second.id, single["id"])
        assert response.status_code == 409
        assert response.json()["message"] == "Room is at full capacity"

    def test_student_with_active_allocation(self, client, room, student, superintendent_headers):
        other = create_room(client, superintendent_headers, number="102")
        allocate(client, superintendent_headers, student.id, room["id"])
        response = allocate(client, superintendent_headers, student.id, other["id"])
        assert response.status_code == 409

    def test_maintenance_room(self, client, room, student, superintendent_headers):
        client.put(f"/api/rooms/{room['id']}", json={"status": "MAINTENANCE"}, headers=superintendent_headers)
        response = allocate(client, superintendent_headers, student.id, room["id"])
        assert response.status_code == 422

    def test_vertical_mismatch(self, client, make_user, trustee_headers):
        girls_room = create_room(client, trustee_headers, number="G1", vertical="GIRLS")
        boy = make_user(UserRole.STUDENT, Vertical.BOYS)
        response = allocate(client, trustee_headers, boy.id, girls_room["id"])
        assert response.status_code == 422

    def test_vacate(self, client, db_session, room, student, superintendent_headers):
        allocation = allocate(client, superintendent_headers, student.id, room["id"]).json()["data"]
        response = client.post(
            f"/api/allocations/vacate/{allocation['id']}", json={"reason": "Course completed"},
            headers=superintendent_headers,
        )
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["status"] == "ENDED"
        assert data["endReason"] == "Course completed"

        db_session.expire_all()
        stored = db_session.get(Room, room["id"])
        assert stored.occupied_count == 0
        assert stored.status.value == "AVAILABLE"

        again = client.post(f"/api/allocations/vacate/{allocation['id']}", headers=superintendent_headers)
        assert again.status_code == 422

    def test_transfer(self, client, db_session, room, student, superintendent_headers):
        target = create_room(client, superintendent_headers, number="102")
        allocation = allocate(client, superintendent_headers, student.id, room["id"]).json()["data"]

        response = client.post(
            f"/api/allocations/{allocation['id']}/transfer",
            json={"targetRoomId": target["id"], "reason": "Roommate request"},
            headers=superintendent_headers,
        )
        assert response.status_code == 200
        new_allocation = response.json()["data"]
        assert new_allocation["roomId"] == target["id"]
        assert new_allocation["status"] == "ACTIVE"

        history = client.get(f"/api/allocations?studentId={student.id}", headers=superintendent_headers)
        statuses = {a["id"]: a for a in history.json()["data"]}
        assert statuses[allocation["id"]]["status"] == "TRANSFERRED"
        assert statuses[allocation["id"]]["transferredToId"] == new_allocation["id"]

        db_session.expire_all()
        assert db_session.get(Room, room["id"]).occupied_count == 0
        assert db_session.get(Room, target["id"]).occupied_count == 1

    def test_student_confirms_own_check_in(self, client, room, student, student_headers, superintendent_headers):
        allocation = allocate(client, superintendent_headers, student.id, room["id"]).json()["data"]
        response = client.post(f"/api/allocations/{allocation['id']}/check-in", headers=student_headers)
        assert response.status_code == 200
        assert response.json()["data"]["checkInConfirmed"] is True

        again = client.post(f"/api/allocations/{allocation['id']}/check-in", headers=student_headers)
        assert again.status_code == 409

    def test_other_student_cannot_check_in(self, client, room, student, make_user, superintendent_headers):
        allocation = allocate(client, superintendent_headers, student.id, room["id"]).json()["data"]
        other = make_user(UserRole.STUDENT, Vertical.BOYS)
        response = client.post(f"/api/allocations/{allocation['id']}/check-in", headers=headers_for(other))
        assert response.status_code == 403

    def test_my_allocation(self, client, room, student, student_headers, superintendent_headers):
        empty = client.get("/api/allocations/me", headers=student_headers)
        assert empty.json()["data"] is None

        allocate(client, superintendent_headers, student.id, room["id"])
        mine = client.get("/api/allocations/me", headers=student_headers)
        assert mine.json()["data"]["roomNumber"] == "101"

    def test_list_filters_by_status(self, client, room, student, superintendent_headers):
        allocation = allocate(client, superintendent_headers, student.id, room["id"]).json()["data"]
        client.post(f"/api/allocations/vacate/{allocation['id']}", headers=superintendent_headers)

        active = client.get("/api/allocations?status=ACTIVE", headers=superintendent_headers)
        ended = client.get("/api/allocations?status=ENDED", headers=superintendent_headers)
        assert active.json()["data"] == []
        assert len(ended.json()["data"]) == 1

    def test_reserved_room_status_follows_occupancy(self, client, db_session, student, superintendent_headers):
        single = create_room(client, superintendent_headers, number="R1", capacity=1)
        reserved = client.put(f"/api/rooms/{single['id']}", json={"status": "RESERVED"}, headers=superintendent_headers)
        assert reserved.json()["data"]["status"] == "RESERVED"

        allocation = allocate(client, superintendent_headers, student.id, single["id"])
        assert allocation.status_code == 201

        db_session.expire_all()
        stored = db_session.get(Room, single["id"])
        assert stored.status.value == "OCCUPIED"
        assert stored.occupied_count == 1

    def test_vacating_maintenance_room_derives_status(
        self, client, db_session, make_user, superintendent_headers
    ):
        shared = create_room(client, superintendent_headers, number="M1", capacity=3)
        first, second = (make_user(UserRole.STUDENT, Vertical.BOYS) for _ in range(2))
        first_allocation = allocate(client, superintendent_headers, first.id, shared["id"]).json()["data"]
        second_allocation = allocate(client, superintendent_headers, second.id, shared["id"]).json()["data"]
        client.put(f"/api/rooms/{shared['id']}", json={"status": "MAINTENANCE"}, headers=superintendent_headers)

        client.post(f"/api/allocations/vacate/{first_allocation['id']}", headers=superintendent_headers)
        db_session.expire_all()
        assert db_session.get(Room, shared["id"]).status.value == "PARTIALLY_OCCUPIED"

        client.put(f"/api/rooms/{shared['id']}", json={"status": "MAINTENANCE"}, headers=superintendent_headers)
        client.post(f"/api/allocations/vacate/{second_allocation['id']}", headers=superintendent_headers)
        db_session.expire_all()
        assert db_session.get(Room, shared["id"]).status.value == "AVAILABLE"
