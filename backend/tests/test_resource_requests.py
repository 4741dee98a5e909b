import pytest

MONDAY = "2026-11-02"


def _payload(resource_id, *, start="10:00", end="11:00", requested_date=MONDAY, **extra):
    return {
        "target_resource_id": resource_id,
        "requested_date": requested_date,
        "start_time": start,
        "end_time": end,
        "purpose": "Guest lecture",
        "expected_attendance": 40,
        **extra,
    }


def _create(client, account, resource_id, **overrides):
    return client.post(
        "/api/resource-requests/create",
        json=_payload(resource_id, **overrides),
        headers=account["headers"],
    )


@pytest.fixture()
def ece_lab(create_resource, departments):
    return create_resource("ECE Lab", department_id=departments["ECE"]["id"])


def test_only_hods_can_create(client, faculty_cse, ece_lab):
    response = _create(client, faculty_cse, ece_lab["id"])
    assert response.status_code == 403


def test_cross_department_request_is_pending(client, hod_cse, ece_lab, departments):
    response = _create(client, hod_cse, ece_lab["id"], priority="high", course_name="Embedded Systems")
    assert response.status_code == 201
    data = response.json()["data"]
    assert data["status"] == "pending"
    assert data["auto_approved"] is False
    assert data["priority"] == "high"
    assert data["requester_department_id"] == departments["CSE"]["id"]
    assert data["target_department_id"] == departments["ECE"]["id"]


def test_same_department_request_is_auto_approved(client, hod_ece, ece_lab):
    response = _create(client, hod_ece, ece_lab["id"])
    assert response.status_code == 201
    body = response.json()
    assert body["message"] == "Resource request auto-approved (same department HOD)"
    assert body["data"]["status"] == "approved"
    assert body["data"]["auto_approved"] is True
    assert body["data"]["approved_by_hod_id"] == hod_ece["user"]["id"]


def test_invalid_times_are_rejected(client, hod_cse, ece_lab):
    assert _create(client, hod_cse, ece_lab["id"], start="11:00", end="10:00").status_code == 400
    assert _create(client, hod_cse, ece_lab["id"], start="10:00", end="10:00").status_code == 400
    assert _create(client, hod_cse, ece_lab["id"], start="25:00", end="26:00").status_code == 400


def test_only_owning_hod_can_approve(client, hod_cse, hod_ece, ece_lab):
    request_id = _create(client, hod_cse, ece_lab["id"]).json()["data"]["id"]

    denied = client.put(f"/api/resource-requests/{request_id}/approve", json={}, headers=hod_cse["headers"])
    assert denied.status_code == 403

    response = client.put(
        f"/api/resource-requests/{request_id}/approve",
        json={"notes": "Keys at the front desk"},
        headers=hod_ece["headers"],
    )
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["status"] == "approved"
    assert data["approved_by_hod_id"] == hod_ece["user"]["id"]
    assert data["notes"] == "Keys at the front desk"

    again = client.put(f"/api/resource-requests/{request_id}/approve", json={}, headers=hod_ece["headers"])
    assert again.status_code == 400


def test_overlap_with_approved_request_conflicts(client, hod_cse, hod_ece, ece_lab):
    approved = _create(client, hod_ece, ece_lab["id"]).json()["data"]

    response = _create(client, hod_cse, ece_lab["id"], start="10:30", end="11:30")
    assert response.status_code == 409
    body = response.json()
    assert body["message"] == "Resource is already booked for the requested time"
    assert body["details"]["conflicts"][0]["id"] == approved["id"]

    assert _create(client, hod_cse, ece_lab["id"], start="11:00", end="12:00").status_code == 201
    assert _create(client, hod_cse, ece_lab["id"], requested_date="2026-11-09").status_code == 201


def test_approval_rechecks_conflicts(client, hod_cse, make_account, hod_ece, ece_lab, departments):
    other_hod = make_account("hod", department_id=departments["CSE"]["id"])
    first_id = _create(client, hod_cse, ece_lab["id"]).json()["data"]["id"]
    second_id = _create(client, other_hod, ece_lab["id"], start="10:15", end="10:45").json()["data"]["id"]

    assert client.put(f"/api/resource-requests/{first_id}/approve", json={}, headers=hod_ece["headers"]).status_code == 200
    response = client.put(f"/api/resource-requests/{second_id}/approve", json={}, headers=hod_ece["headers"])
    assert response.status_code == 409


def test_reject_requires_reason(client, hod_cse, hod_ece, ece_lab):
    request_id = _create(client, hod_cse, ece_lab["id"]).json()["data"]["id"]

    response = client.put(f"/api/resource-requests/{request_id}/reject", json={}, headers=hod_ece["headers"])
    assert response.status_code == 400

    response = client.put(
        f"/api/resource-requests/{request_id}/reject",
        json={"rejection_reason": "Exams scheduled"},
        headers=hod_ece["headers"],
    )
    assert response.status_code == 200
    assert response.json()["data"]["status"] == "rejected"
    assert response.json()["data"]["rejection_reason"] == "Exams scheduled"


def test_cancel_is_requester_only(client, hod_cse, hod_ece, ece_lab):
    request_id = _create(client, hod_cse, ece_lab["id"]).json()["data"]["id"]

    denied = client.put(f"/api/resource-requests/{request_id}/cancel", headers=hod_ece["headers"])
    assert denied.status_code == 403

    response = client.put(f"/api/resource-requests/{request_id}/cancel", headers=hod_cse["headers"])
    assert response.status_code == 200
    assert response.json()["data"]["status"] == "cancelled"

    again = client.put(f"/api/resource-requests/{request_id}/cancel", headers=hod_cse["headers"])
    assert again.status_code == 400


def test_update_only_while_pending(client, hod_cse, hod_ece, ece_lab):
    request_id = _create(client, hod_cse, ece_lab["id"]).json()["data"]["id"]

    response = client.put(
        f"/api/resource-requests/{request_id}/update",
        json={"start_time": "14:00", "end_time": "15:30", "expected_attendance": 55},
        headers=hod_cse["headers"],
    )
    assert response.status_code == 200
    data = response.json()["data"]
    assert (data["start_time"], data["end_time"], data["expected_attendance"]) == ("14:00", "15:30", 55)

    cleared = client.put(
        f"/api/resource-requests/{request_id}/update",
        json={"purpose": None},
        headers=hod_cse["headers"],
    )
    assert cleared.status_code == 400

    inverted = client.put(
        f"/api/resource-requests/{request_id}/update",
        json={"end_time": "13:00"},
        headers=hod_cse["headers"],
    )
    assert inverted.status_code == 400

    foreign = client.put(
        f"/api/resource-requests/{request_id}/update",
        json={"notes": "hijack"},
        headers=hod_ece["headers"],
    )
    assert foreign.status_code == 403

    client.put(
        f"/api/resource-requests/{request_id}/reject",
        json={"rejection_reason": "Hall reserved"},
        headers=hod_ece["headers"],
    )
    late = client.put(
        f"/api/resource-requests/{request_id}/update",
        json={"notes": "Please reconsider"},
        headers=hod_cse["headers"],
    )
    assert late.status_code == 400


def test_shared_resources_are_decided_by_admin_or_any_hod(client, admin, hod_cse, faculty_cse, create_resource):
    hall = create_resource("Seminar Hall", type="seminar_hall")
    request_id = _create(client, hod_cse, hall["id"]).json()["data"]["id"]

    denied = client.put(f"/api/resource-requests/{request_id}/approve", json={}, headers=faculty_cse["headers"])
    assert denied.status_code == 403

    response = client.put(f"/api/resource-requests/{request_id}/approve", json={}, headers=admin["headers"])
    assert response.status_code == 200
    assert response.json()["data"]["status"] == "approved"


def test_listings(client, hod_cse, hod_ece, ece_lab, departments):
    first_id = _create(client, hod_cse, ece_lab["id"]).json()["data"]["id"]
    _create(client, hod_cse, ece_lab["id"], start="15:00", end="16:00")
    client.put(f"/api/resource-requests/{first_id}/approve", json={}, headers=hod_ece["headers"])

    mine = client.get(f"/api/resource-requests/requester/{hod_cse['user']['id']}", headers=hod_cse["headers"]).json()
    assert mine["total"] == 2

    pending = client.get(
        f"/api/resource-requests/pending/department/{departments['ECE']['id']}",
        headers=hod_ece["headers"],
    ).json()
    assert pending["total"] == 1

    incoming = client.get(
        f"/api/resource-requests/target-department/{departments['ECE']['id']}",
        headers=hod_ece["headers"],
    ).json()
    assert incoming["total"] == 2

    approved = client.get("/api/resource-requests/status/approved", headers=hod_ece["headers"]).json()
    assert [item["id"] for item in approved["data"]] == [first_id]


def test_delete_by_requester_or_admin(client, admin, hod_cse, hod_ece, ece_lab):
    request_id = _create(client, hod_cse, ece_lab["id"]).json()["data"]["id"]
    assert client.delete(f"/api/resource-requests/{request_id}", headers=hod_ece["headers"]).status_code == 403
    assert client.delete(f"/api/resource-requests/{request_id}", headers=admin["headers"]).status_code == 204
    assert client.get(f"/api/resource-requests/{request_id}", headers=hod_cse["headers"]).status_code == 404
