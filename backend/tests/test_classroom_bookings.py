import pytest

MONDAY = "2026-11-02"


def _booking(classroom_id, start, end, *, booking_date=MONDAY, **extra):
    return {
        "classroom_id": classroom_id,
        "booking_date": booking_date,
        "start_time": start,
        "end_time": end,
        "course": "Algorithms",
        "instructor": "Dr. Iyer",
        **extra,
    }


@pytest.fixture()
def room(create_classroom, departments):
    return create_classroom("CSE-101", department_id=departments["CSE"]["id"])


def test_booking_derives_day_of_week(client, faculty_cse, room):
    response = client.post("/api/classroom-bookings", json=_booking(room["id"], "09:00", "10:00"), headers=faculty_cse["headers"])
    assert response.status_code == 201
    data = response.json()["data"]
    assert data["day_of_week"] == 1
    assert data["status"] == "confirmed"
    assert data["booked_by_id"] == faculty_cse["user"]["id"]


def test_overlapping_booking_is_rejected_without_insert(client, faculty_cse, room):
    first = client.post("/api/classroom-bookings", json=_booking(room["id"], "09:00", "10:00"), headers=faculty_cse["headers"])
    assert first.status_code == 201

    response = client.post("/api/classroom-bookings", json=_booking(room["id"], "09:30", "10:30"), headers=faculty_cse["headers"])
    assert response.status_code == 409
    body = response.json()
    assert body["message"] == "There are conflicts with existing bookings"
    assert [item["id"] for item in body["details"]["conflicts"]] == [first.json()["data"]["id"]]

    listing = client.get("/api/classroom-bookings", params={"classroom_id": room["id"]}, headers=faculty_cse["headers"])
    assert listing.json()["total"] == 1


def test_touching_bookings_are_allowed(client, faculty_cse, room):
    assert client.post("/api/classroom-bookings", json=_booking(room["id"], "09:00", "10:00"), headers=faculty_cse["headers"]).status_code == 201
    assert client.post("/api/classroom-bookings", json=_booking(room["id"], "10:00", "11:00"), headers=faculty_cse["headers"]).status_code == 201
    assert client.post("/api/classroom-bookings", json=_booking(room["id"], "08:00", "09:00"), headers=faculty_cse["headers"]).status_code == 201


def test_same_time_on_another_date_is_allowed(client, faculty_cse, room):
    assert client.post("/api/classroom-bookings", json=_booking(room["id"], "09:00", "10:00"), headers=faculty_cse["headers"]).status_code == 201
    response = client.post(
        "/api/classroom-bookings",
        json=_booking(room["id"], "09:00", "10:00", booking_date="2026-11-09"),
        headers=faculty_cse["headers"],
    )
    assert response.status_code == 201


def test_pending_bookings_do_not_block(client, faculty_cse, room):
    pending = client.post(
        "/api/classroom-bookings",
        json=_booking(room["id"], "13:00", "14:00", status="pending"),
        headers=faculty_cse["headers"],
    )
    assert pending.status_code == 201
    confirmed = client.post("/api/classroom-bookings", json=_booking(room["id"], "13:00", "14:00"), headers=faculty_cse["headers"])
    assert confirmed.status_code == 201


def test_day_must_match_booking_date(client, faculty_cse, room):
    response = client.post(
        "/api/classroom-bookings",
        json=_booking(room["id"], "09:00", "10:00", day_of_week=3),
        headers=faculty_cse["headers"],
    )
    assert response.status_code == 400


def test_students_cannot_book(client, make_account, room):
    student = make_account("student")
    response = client.post("/api/classroom-bookings", json=_booking(room["id"], "09:00", "10:00"), headers=student["headers"])
    assert response.status_code == 403


def test_update_excludes_itself_but_not_others(client, faculty_cse, room):
    first_id = client.post(
        "/api/classroom-bookings", json=_booking(room["id"], "09:00", "10:00"), headers=faculty_cse["headers"]
    ).json()["data"]["id"]
    second_id = client.post(
        "/api/classroom-bookings", json=_booking(room["id"], "11:00", "12:00"), headers=faculty_cse["headers"]
    ).json()["data"]["id"]

    shifted = client.put(
        f"/api/classroom-bookings/{first_id}",
        json={"start_time": "09:30", "end_time": "10:30"},
        headers=faculty_cse["headers"],
    )
    assert shifted.status_code == 200
    assert shifted.json()["data"]["start_time"] == "09:30"

    clash = client.put(
        f"/api/classroom-bookings/{second_id}",
        json={"start_time": "10:00", "end_time": "11:30"},
        headers=faculty_cse["headers"],
    )
    assert clash.status_code == 409

    moved = client.put(
        f"/api/classroom-bookings/{second_id}",
        json={"booking_date": "2026-11-03"},
        headers=faculty_cse["headers"],
    )
    assert moved.status_code == 200
    assert moved.json()["data"]["day_of_week"] == 2


def test_check_conflicts_does_not_write(client, faculty_cse, room):
    client.post("/api/classroom-bookings", json=_booking(room["id"], "09:00", "10:00"), headers=faculty_cse["headers"])

    response = client.post(
        "/api/classroom-bookings/check-conflicts",
        json=_booking(room["id"], "09:45", "10:15"),
        headers=faculty_cse["headers"],
    )
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["has_conflicts"] is True
    assert len(data["conflicts"]) == 1

    clear = client.post(
        "/api/classroom-bookings/check-conflicts",
        json=_booking(room["id"], "10:00", "10:30"),
        headers=faculty_cse["headers"],
    ).json()
    assert clear["data"]["has_conflicts"] is False
    assert clear["message"] == "No conflicts"

    listing = client.get("/api/classroom-bookings", headers=faculty_cse["headers"]).json()
    assert listing["total"] == 1


def test_available_classrooms(client, faculty_cse, room, create_classroom):
    spare = create_classroom("Seminar Hall", capacity=200)
    client.post("/api/classroom-bookings", json=_booking(room["id"], "09:00", "10:00"), headers=faculty_cse["headers"])

    response = client.get(
        "/api/classroom-bookings/available-classrooms",
        params={"date": MONDAY, "start_time": "09:30", "end_time": "10:30"},
        headers=faculty_cse["headers"],
    )
    assert response.status_code == 200
    assert [item["id"] for item in response.json()["data"]] == [spare["id"]]

    later = client.get(
        "/api/classroom-bookings/available-classrooms",
        params={"date": MONDAY, "start_time": "10:00", "end_time": "11:00"},
        headers=faculty_cse["headers"],
    ).json()["data"]
    assert {item["id"] for item in later} == {room["id"], spare["id"]}

    invalid = client.get(
        "/api/classroom-bookings/available-classrooms",
        params={"date": MONDAY, "start_time": "11:00", "end_time": "10:00"},
        headers=faculty_cse["headers"],
    )
    assert invalid.status_code == 400


def test_listing_by_date_and_department(client, faculty_cse, room, departments):
    client.post(
        "/api/classroom-bookings",
        json=_booking(room["id"], "09:00", "10:00", department_id=departments["CSE"]["id"]),
        headers=faculty_cse["headers"],
    )
    client.post(
        "/api/classroom-bookings",
        json=_booking(room["id"], "09:00", "10:00", booking_date="2026-11-03"),
        headers=faculty_cse["headers"],
    )

    on_date = client.get(f"/api/classroom-bookings/date/{MONDAY}", headers=faculty_cse["headers"]).json()
    assert on_date["total"] == 1
    by_department = client.get(
        f"/api/classroom-bookings/department/{departments['CSE']['id']}",
        headers=faculty_cse["headers"],
    ).json()
    assert by_department["total"] == 1


def test_delete_booking(client, faculty_cse, room):
    booking_id = client.post(
        "/api/classroom-bookings", json=_booking(room["id"], "09:00", "10:00"), headers=faculty_cse["headers"]
    ).json()["data"]["id"]
    assert client.delete(f"/api/classroom-bookings/{booking_id}", headers=faculty_cse["headers"]).status_code == 204
    assert client.get(f"/api/classroom-bookings/{booking_id}", headers=faculty_cse["headers"]).status_code == 404
