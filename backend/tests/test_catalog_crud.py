def test_department_lifecycle(client, admin):
    headers = admin["headers"]
    created = client.post(
        "/api/departments",
        json={"name": "Mechanical", "code": " mech ", "hod_email": "mech.hod@example.com"},
        headers=headers,
    )
    assert created.status_code == 201
    department = created.json()["data"]
    assert department["code"] == "MECH"

    duplicate = client.post("/api/departments", json={"name": "Mech Engg", "code": "MECH"}, headers=headers)
    assert duplicate.status_code == 409
    assert duplicate.json()["success"] is False

    updated = client.put(
        f"/api/departments/{department['id']}",
        json={"hod_name": "Dr. Varma"},
        headers=headers,
    )
    assert updated.status_code == 200
    assert updated.json()["data"]["hod_name"] == "Dr. Varma"

    listing = client.get("/api/departments", headers=headers).json()
    assert listing["success"] is True
    assert listing["total"] == 1

    assert client.delete(f"/api/departments/{department['id']}", headers=headers).status_code == 204
    assert client.get(f"/api/departments/{department['id']}", headers=headers).status_code == 404


def test_only_admin_or_principal_manage_departments(client, make_account):
    student = make_account("student")
    response = client.post("/api/departments", json={"name": "Civil", "code": "CIV"}, headers=student["headers"])
    assert response.status_code == 403
    assert response.json()["message"] == "Insufficient permissions"

    principal = make_account("principal")
    response = client.post("/api/departments", json={"name": "Civil", "code": "CIV"}, headers=principal["headers"])
    assert response.status_code == 201


def test_classrooms_by_department_include_shared_rooms(client, admin, departments, create_classroom):
    cse_room = create_classroom("CSE-101", department_id=departments["CSE"]["id"])
    create_classroom("ECE-101", department_id=departments["ECE"]["id"])
    shared = create_classroom("Auditorium", capacity=500)

    url = f"/api/classrooms/department/{departments['CSE']['id']}"
    with_shared = client.get(url, headers=admin["headers"]).json()["data"]
    assert {item["id"] for item in with_shared} == {cse_room["id"], shared["id"]}

    own_only = client.get(url, params={"include_shared": "false"}, headers=admin["headers"]).json()["data"]
    assert [item["id"] for item in own_only] == [cse_room["id"]]


def test_classroom_room_numbers_are_unique_per_building(client, admin):
    payload = {"name": "Lab A", "room_number": "L1", "building": "Block C", "capacity": 30, "type": "lab"}
    assert client.post("/api/classrooms", json=payload, headers=admin["headers"]).status_code == 201
    assert client.post("/api/classrooms", json=payload, headers=admin["headers"]).status_code == 409


def test_classroom_update_and_delete(client, admin, create_classroom):
    room = create_classroom("CSE-105")
    updated = client.put(
        f"/api/classrooms/{room['id']}",
        json={"capacity": 72, "features": ["projector", " projector ", "ac"]},
        headers=admin["headers"],
    )
    assert updated.status_code == 200
    assert updated.json()["data"]["capacity"] == 72
    assert updated.json()["data"]["features"] == ["projector", "ac"]

    assert client.delete(f"/api/classrooms/{room['id']}", headers=admin["headers"]).status_code == 204
    assert client.get(f"/api/classrooms/{room['id']}", headers=admin["headers"]).status_code == 404


def test_faculty_crud(client, admin, departments):
    headers = admin["headers"]
    created = client.post(
        "/api/faculty",
        json={"name": "Dr. Nair", "email": "Nair@Example.com", "department_id": departments["ECE"]["id"]},
        headers=headers,
    )
    assert created.status_code == 201
    faculty = created.json()["data"]
    assert faculty["email"] == "nair@example.com"
    assert faculty["role"] == "faculty"

    duplicate = client.post("/api/faculty", json={"name": "Other", "email": "nair@example.com"}, headers=headers)
    assert duplicate.status_code == 409

    promoted = client.put(f"/api/faculty/{faculty['id']}", json={"role": "hod"}, headers=headers)
    assert promoted.json()["data"]["role"] == "hod"

    hods = client.get("/api/faculty", params={"role": "hod"}, headers=headers).json()["data"]
    assert [item["id"] for item in hods] == [faculty["id"]]

    assert client.delete(f"/api/faculty/{faculty['id']}", headers=headers).status_code == 204


def test_subject_crud(client, admin, departments):
    headers = admin["headers"]
    created = client.post(
        "/api/subjects",
        json={"name": "Networks", "code": "ec301", "credits": 4, "department_id": departments["ECE"]["id"]},
        headers=headers,
    )
    assert created.status_code == 201
    subject = created.json()["data"]
    assert subject["code"] == "EC301"

    assert client.post("/api/subjects", json={"name": "Dup", "code": "EC301"}, headers=headers).status_code == 409

    filtered = client.get("/api/subjects", params={"department_id": departments["ECE"]["id"]}, headers=headers).json()
    assert filtered["total"] == 1

    updated = client.put(f"/api/subjects/{subject['id']}", json={"type": "practical"}, headers=headers)
    assert updated.json()["data"]["type"] == "practical"

    assert client.delete(f"/api/subjects/{subject['id']}", headers=headers).status_code == 204


def test_resources_shared_and_department_listings(client, admin, departments, create_resource):
    owned = create_resource("CSE Lab", department_id=departments["CSE"]["id"])
    shared = create_resource("Seminar Hall", type="seminar_hall")
    assert owned["is_shared"] is False
    assert shared["is_shared"] is True

    shared_list = client.get("/api/resources/shared", headers=admin["headers"]).json()["data"]
    assert [item["id"] for item in shared_list] == [shared["id"]]

    department_list = client.get(
        f"/api/resources/department/{departments['CSE']['id']}",
        headers=admin["headers"],
    ).json()["data"]
    assert [item["id"] for item in department_list] == [owned["id"]]

    labs = client.get("/api/resources", params={"type": "lab"}, headers=admin["headers"]).json()["data"]
    assert [item["id"] for item in labs] == [owned["id"]]


def test_resource_update_and_delete(client, admin, create_resource):
    resource = create_resource("Projector", type="equipment")
    updated = client.put(
        f"/api/resources/{resource['id']}",
        json={"is_active": False, "location": "Store room"},
        headers=admin["headers"],
    )
    assert updated.status_code == 200
    assert updated.json()["data"]["is_active"] is False

    active = client.get("/api/resources", headers=admin["headers"]).json()["data"]
    assert active == []
    everything = client.get("/api/resources", params={"active_only": "false"}, headers=admin["headers"]).json()
    assert everything["total"] == 1

    assert client.delete(f"/api/resources/{resource['id']}", headers=admin["headers"]).status_code == 204
    assert client.get(f"/api/resources/{resource['id']}", headers=admin["headers"]).status_code == 404


def test_resource_with_unknown_department_is_rejected(client, admin):
    response = client.post(
        "/api/resources",
        json={"name": "Ghost Lab", "type": "lab", "department_id": "missing"},
        headers=admin["headers"],
    )
    assert response.status_code == 404


def test_activity_logs_are_restricted(client, admin, faculty_cse):
    assert client.get("/api/activity/logs", headers=faculty_cse["headers"]).status_code == 403
    logs = client.get("/api/activity/logs", params={"entity_type": "department"}, headers=admin["headers"]).json()
    assert {item["action"] for item in logs["data"]} == {"department.created"}
    assert logs["total"] == 2
