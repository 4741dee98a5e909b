import pytest


@pytest.fixture()
def schedule(client, admin, departments, create_classroom):
    headers = admin["headers"]
    department_id = departments["CSE"]["id"]

    def post(path, payload):
        response = client.post(path, json=payload, headers=headers)
        assert response.status_code == 201, response.text
        return response.json()["data"]

    return {
        "timetable": post(
            "/api/timetables",
            {"name": "CSE Semester 3", "semester": 3, "department_id": department_id, "academic_year": "2026-27"},
        ),
        "subject": post("/api/subjects", {"name": "Data Structures", "code": "cs201", "department_id": department_id}),
        "faculty": [
            post("/api/faculty", {"name": "Dr. Mehta", "email": "mehta@example.com", "department_id": department_id}),
            post("/api/faculty", {"name": "Dr. Khan", "email": "khan@example.com", "department_id": department_id}),
        ],
        "rooms": [
            create_classroom("CSE-201", department_id=department_id),
            create_classroom("CSE-202", department_id=department_id),
        ],
    }


def _entry(schedule, *, faculty=0, room=0, day=1, start="09:00", end="10:00"):
    return {
        "subject_id": schedule["subject"]["id"],
        "faculty_id": schedule["faculty"][faculty]["id"],
        "classroom_id": schedule["rooms"][room]["id"],
        "day_of_week": day,
        "start_time": start,
        "end_time": end,
    }


def _add(client, admin, schedule, **overrides):
    return client.post(
        f"/api/timetables/{schedule['timetable']['id']}/entries",
        json=_entry(schedule, **overrides),
        headers=admin["headers"],
    )


def test_subject_codes_are_normalized(schedule):
    assert schedule["subject"]["code"] == "CS201"


def test_add_entry_and_read_back_detail(client, admin, schedule):
    response = _add(client, admin, schedule)
    assert response.status_code == 201
    entry = response.json()["data"]
    assert entry["timetable_id"] == schedule["timetable"]["id"]

    detail = client.get(f"/api/timetables/{schedule['timetable']['id']}", headers=admin["headers"]).json()["data"]
    assert detail["name"] == "CSE Semester 3"
    assert [item["id"] for item in detail["entries"]] == [entry["id"]]


def test_faculty_and_classroom_conflicts_are_reported_together(client, admin, schedule):
    assert _add(client, admin, schedule).status_code == 201

    response = _add(client, admin, schedule, start="09:30", end="10:30")
    assert response.status_code == 409
    body = response.json()
    assert body["message"] == "Cannot create session due to conflicts"
    details = body["details"]
    assert details["total_conflicts"] == 2
    assert len(details["faculty_conflicts"]) == 1
    assert len(details["classroom_conflicts"]) == 1
    assert details["messages"] == [
        "Faculty is already teaching another session on Monday from 09:00 to 10:00",
        "Classroom is already occupied on Monday from 09:00 to 10:00",
    ]


def test_classroom_only_conflict(client, admin, schedule):
    assert _add(client, admin, schedule).status_code == 201
    response = _add(client, admin, schedule, faculty=1, start="09:30", end="10:30")
    assert response.status_code == 409
    details = response.json()["details"]
    assert details["faculty_conflicts"] == []
    assert len(details["classroom_conflicts"]) == 1


def test_faculty_only_conflict(client, admin, schedule):
    assert _add(client, admin, schedule).status_code == 201
    response = _add(client, admin, schedule, room=1, start="09:15", end="09:45")
    assert response.status_code == 409
    details = response.json()["details"]
    assert len(details["faculty_conflicts"]) == 1
    assert details["classroom_conflicts"] == []


def test_boundaries_and_other_days_are_free(client, admin, schedule):
    assert _add(client, admin, schedule).status_code == 201
    assert _add(client, admin, schedule, start="10:00", end="11:00").status_code == 201
    assert _add(client, admin, schedule, day=2).status_code == 201

    entries = client.get(
        f"/api/timetables/{schedule['timetable']['id']}/entries",
        headers=admin["headers"],
    ).json()
    assert entries["total"] == 3


def test_invalid_entry_times_are_rejected(client, admin, schedule):
    assert _add(client, admin, schedule, start="9:00", end="10:00").status_code == 400
    assert _add(client, admin, schedule, start="10:00", end="09:00").status_code == 400
    assert _add(client, admin, schedule, day=8).status_code == 400


def test_unknown_references_are_not_found(client, admin, schedule):
    payload = _entry(schedule)
    payload["classroom_id"] = "missing-room"
    response = client.post(
        f"/api/timetables/{schedule['timetable']['id']}/entries",
        json=payload,
        headers=admin["headers"],
    )
    assert response.status_code == 404


def test_check_conflicts_reports_without_writing(client, admin, schedule):
    entry_id = _add(client, admin, schedule).json()["data"]["id"]
    url = f"/api/timetables/{schedule['timetable']['id']}/entries/check-conflicts"

    clash = client.post(url, json=_entry(schedule, start="09:30", end="10:30"), headers=admin["headers"]).json()
    assert clash["data"]["has_conflicts"] is True
    assert clash["data"]["total_conflicts"] == 2

    own = client.post(
        url,
        params={"exclude_entry_id": entry_id},
        json=_entry(schedule, start="09:30", end="10:30"),
        headers=admin["headers"],
    ).json()
    assert own["data"]["has_conflicts"] is False

    entries = client.get(f"/api/timetables/{schedule['timetable']['id']}/entries", headers=admin["headers"]).json()
    assert entries["total"] == 1


def test_update_entry_checks_conflicts_excluding_itself(client, admin, schedule):
    first_id = _add(client, admin, schedule).json()["data"]["id"]
    second_id = _add(client, admin, schedule, start="11:00", end="12:00").json()["data"]["id"]

    shifted = client.put(
        f"/api/timetables/entries/{first_id}",
        json={"start_time": "09:30", "end_time": "10:30"},
        headers=admin["headers"],
    )
    assert shifted.status_code == 200
    assert shifted.json()["data"]["start_time"] == "09:30"

    clash = client.put(
        f"/api/timetables/entries/{second_id}",
        json={"start_time": "10:00"},
        headers=admin["headers"],
    )
    assert clash.status_code == 409
    assert clash.json()["message"] == "Cannot update session due to conflicts"


def test_faculty_members_cannot_edit_timetables(client, faculty_cse, schedule):
    response = client.post(
        f"/api/timetables/{schedule['timetable']['id']}/entries",
        json=_entry(schedule),
        headers=faculty_cse["headers"],
    )
    assert response.status_code == 403


def test_delete_entry(client, admin, schedule):
    entry_id = _add(client, admin, schedule).json()["data"]["id"]
    assert client.delete(f"/api/timetables/entries/{entry_id}", headers=admin["headers"]).status_code == 204
    assert client.delete(f"/api/timetables/entries/{entry_id}", headers=admin["headers"]).status_code == 404


def test_deleting_timetable_removes_its_entries(client, admin, schedule):
    timetable_id = schedule["timetable"]["id"]
    first_id = _add(client, admin, schedule).json()["data"]["id"]
    _add(client, admin, schedule, day=3)

    assert client.delete(f"/api/timetables/{timetable_id}", headers=admin["headers"]).status_code == 204
    assert client.get(f"/api/timetables/{timetable_id}", headers=admin["headers"]).status_code == 404
    assert client.put(
        f"/api/timetables/entries/{first_id}",
        json={"start_time": "13:00", "end_time": "14:00"},
        headers=admin["headers"],
    ).status_code == 404

    logs = client.get(
        "/api/activity/logs",
        params={"action": "timetable.deleted", "entity_id": timetable_id},
        headers=admin["headers"],
    ).json()["data"]
    assert logs[0]["details"]["entries_removed"] == 2


def test_update_timetable_metadata(client, admin, schedule):
    response = client.put(
        f"/api/timetables/{schedule['timetable']['id']}",
        json={"section": "B", "number_of_students": 64},
        headers=admin["headers"],
    )
    assert response.status_code == 200
    data = response.json()["data"]
    assert (data["section"], data["number_of_students"], data["semester"]) == ("B", 64, 3)


def test_catalog_rows_used_by_entries_cannot_be_deleted(client, admin, schedule):
    assert _add(client, admin, schedule).status_code == 201
    room_id = schedule["rooms"][0]["id"]
    faculty_id = schedule["faculty"][0]["id"]
    subject_id = schedule["subject"]["id"]

    for path in (f"/api/classrooms/{room_id}", f"/api/faculty/{faculty_id}", f"/api/subjects/{subject_id}"):
        response = client.delete(path, headers=admin["headers"])
        assert response.status_code == 409, path
        assert "timetable_entries" in response.json()["message"]

    entries = client.get(f"/api/timetables/{schedule['timetable']['id']}/entries", headers=admin["headers"]).json()
    assert [item["classroom_id"] for item in entries["data"]] == [room_id]
    assert client.get(f"/api/classrooms/{room_id}", headers=admin["headers"]).status_code == 200

    # Unused rows still delete.
    spare_room = schedule["rooms"][1]["id"]
    assert client.delete(f"/api/classrooms/{spare_room}", headers=admin["headers"]).status_code == 204


def test_department_with_members_cannot_be_deleted(client, admin, schedule, departments):
    response = client.delete(f"/api/departments/{departments['CSE']['id']}", headers=admin["headers"])
    assert response.status_code == 409
    assert response.json()["success"] is False
    assert client.get(f"/api/departments/{departments['CSE']['id']}", headers=admin["headers"]).status_code == 200
