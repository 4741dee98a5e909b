def test_register_login_me_logout_flow(client, departments):
    payload = {
        "name": "Asha Rao",
        "email": "Asha.Rao@Example.com",
        "password": "password123",
        "role": "faculty",
        "designation": "Assistant Professor",
        "department_id": departments["CSE"]["id"],
    }
    response = client.post("/api/auth/register", json=payload)
    assert response.status_code == 201
    user = response.json()
    assert user["email"] == "asha.rao@example.com"
    assert user["role"] == "faculty"
    assert user["is_active"] is True
    assert "hashed_password" not in user

    login = client.post(
        "/api/auth/login",
        json={"email": "asha.rao@example.com", "password": "password123", "role": "faculty"},
    )
    assert login.status_code == 200
    body = login.json()
    assert body["token_type"] == "bearer"
    assert body["user"]["id"] == user["id"]
    headers = {"Authorization": f"Bearer {body['access_token']}"}

    me = client.get("/api/auth/me", headers=headers)
    assert me.status_code == 200
    assert me.json()["department_id"] == departments["CSE"]["id"]

    logout = client.post("/api/auth/logout", headers=headers)
    assert logout.status_code == 200
    assert logout.json()["success"] is True


def test_register_creates_faculty_profile_for_teaching_roles(client, admin, hod_cse, departments):
    response = client.get(
        f"/api/faculty/department/{departments['CSE']['id']}",
        headers=admin["headers"],
    )
    assert response.status_code == 200
    profiles = response.json()["data"]
    assert [item["email"] for item in profiles] == [hod_cse["user"]["email"]]
    assert profiles[0]["role"] == "hod"


def test_duplicate_registration_is_rejected(client):
    payload = {"name": "Dup", "email": "dup@example.com", "password": "password123", "role": "student"}
    assert client.post("/api/auth/register", json=payload).status_code == 201
    response = client.post("/api/auth/register", json=payload)
    assert response.status_code == 409
    assert response.json()["success"] is False
    assert response.json()["message"] == "Email already registered"


def test_register_with_unknown_department_fails(client):
    payload = {
        "name": "Lost",
        "email": "lost@example.com",
        "password": "password123",
        "role": "faculty",
        "department_id": "missing",
    }
    assert client.post("/api/auth/register", json=payload).status_code == 404


def test_register_validation_errors_use_the_envelope(client):
    response = client.post(
        "/api/auth/register",
        json={"name": "Short", "email": "short@example.com", "password": "123", "role": "student"},
    )
    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["details"]["errors"][0]["field"] == "password"


def test_login_with_wrong_password_is_unauthorized(client, admin):
    response = client.post(
        "/api/auth/login",
        json={"email": admin["user"]["email"], "password": "wrong-password"},
    )
    assert response.status_code == 401
    assert response.json()["message"] == "Invalid email or password"


def test_login_with_mismatched_role_is_forbidden(client, admin):
    response = client.post(
        "/api/auth/login",
        json={"email": admin["user"]["email"], "password": "password123", "role": "student"},
    )
    assert response.status_code == 403


def test_protected_routes_require_a_token(client):
    assert client.get("/api/auth/me").status_code == 401
    response = client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"
