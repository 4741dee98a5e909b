import itertools
import os

# Settings are cached on first import; point them at a throwaway database first.
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.api.deps import get_db
from app.db.base import Base
from app.main import app

DEFAULT_PASSWORD = "password123"


@pytest.fixture()
def client():
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)

    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
    engine.dispose()


@pytest.fixture()
def make_account(client):
    counter = itertools.count(1)

    def _make(role, *, department_id=None, designation=None, name=None):
        index = next(counter)
        payload = {
            "name": name or f"{role.title()} User {index}",
            "email": f"{role}{index}@example.com",
            "password": DEFAULT_PASSWORD,
            "role": role,
            "department_id": department_id,
            "designation": designation,
        }
        response = client.post("/api/auth/register", json=payload)
        assert response.status_code == 201, response.text
        user = response.json()

        login = client.post(
            "/api/auth/login",
            json={"email": payload["email"], "password": DEFAULT_PASSWORD, "role": role},
        )
        assert login.status_code == 200, login.text
        token = login.json()["access_token"]
        return {"user": user, "headers": {"Authorization": f"Bearer {token}"}}

    return _make


@pytest.fixture()
def admin(make_account):
    return make_account("admin", name="Portal Admin")


@pytest.fixture()
def departments(client, admin):
    created = {}
    for name, code in (("Computer Science", "CSE"), ("Electronics", "ECE")):
        response = client.post(
            "/api/departments",
            json={"name": name, "code": code},
            headers=admin["headers"],
        )
        assert response.status_code == 201, response.text
        created[code] = response.json()["data"]
    return created


@pytest.fixture()
def hod_cse(make_account, departments):
    return make_account(
        "hod",
        department_id=departments["CSE"]["id"],
        designation="Professor & HOD",
        name="CSE Head",
    )


@pytest.fixture()
def hod_ece(make_account, departments):
    return make_account(
        "hod",
        department_id=departments["ECE"]["id"],
        designation="Professor & HOD",
        name="ECE Head",
    )


@pytest.fixture()
def faculty_cse(make_account, departments):
    return make_account("faculty", department_id=departments["CSE"]["id"], name="CSE Lecturer")


@pytest.fixture()
def create_resource(client, admin):
    def _create(name, *, type="lab", department_id=None, **extra):
        payload = {"name": name, "type": type, "department_id": department_id, "capacity": 40, **extra}
        response = client.post("/api/resources", json=payload, headers=admin["headers"])
        assert response.status_code == 201, response.text
        return response.json()["data"]

    return _create


@pytest.fixture()
def create_classroom(client, admin):
    counter = itertools.count(101)

    def _create(name, *, department_id=None, capacity=60):
        payload = {
            "name": name,
            "room_number": str(next(counter)),
            "building": "Block A",
            "capacity": capacity,
            "department_id": department_id,
        }
        response = client.post("/api/classrooms", json=payload, headers=admin["headers"])
        assert response.status_code == 201, response.text
        return response.json()["data"]

    return _create
