"""Seed departments, role accounts, rooms and shared resources for a local portal.

Run:
  PYTHONPATH=backend python scripts/seed_portal_data.py
"""

from __future__ import annotations

import os
from typing import Iterable

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.security import get_password_hash
from app.db.bootstrap import ensure_runtime_schema_compatibility
from app.db.session import SessionLocal
from app.models.classroom import Classroom, RoomType
from app.models.department import Department
from app.models.faculty import Faculty, FacultyRole
from app.models.resource import Resource, ResourceType
from app.models.user import User, UserRole

DEFAULT_PASSWORD = os.getenv("DEMO_PASSWORD", "DemoPass123!")

DEPARTMENTS = [
    {"name": "Computer Science", "code": "CSE"},
    {"name": "Electronics", "code": "ECE"},
    {"name": "Mechanical", "code": "MECH"},
]

ACCOUNTS = [
    {"key": "admin", "name": "Portal Admin", "role": UserRole.admin, "department": None, "designation": None},
    {"key": "vc", "name": "Vice Chancellor", "role": UserRole.vc, "department": None, "designation": "Vice Chancellor"},
    {"key": "principal", "name": "Principal", "role": UserRole.principal, "department": None, "designation": "Principal"},
    {"key": "hod_cse", "name": "CSE Head", "role": UserRole.hod, "department": "CSE", "designation": "Professor & HOD"},
    {"key": "hod_ece", "name": "ECE Head", "role": UserRole.hod, "department": "ECE", "designation": "Professor & HOD"},
    {"key": "faculty_cse", "name": "CSE Faculty", "role": UserRole.faculty, "department": "CSE", "designation": "Assistant Professor"},
    {"key": "student_cse", "name": "CSE Student", "role": UserRole.student, "department": "CSE", "designation": None},
]

CLASSROOMS = [
    {"name": "CSE-101", "room_number": "101", "building": "Block A", "floor": 1, "capacity": 60, "type": RoomType.lecture, "department": "CSE"},
    {"name": "CSE-Lab-1", "room_number": "L1", "building": "Block A", "floor": 2, "capacity": 40, "type": RoomType.lab, "department": "CSE"},
    {"name": "ECE-201", "room_number": "201", "building": "Block B", "floor": 2, "capacity": 60, "type": RoomType.lecture, "department": "ECE"},
    {"name": "Seminar Hall", "room_number": "SH", "building": "Main", "floor": 0, "capacity": 200, "type": RoomType.seminar, "department": None},
]

RESOURCES = [
    {"name": "CSE-Lab-1", "type": ResourceType.lab, "classroom": "CSE-Lab-1", "department": "CSE"},
    {"name": "ECE-201", "type": ResourceType.classroom, "classroom": "ECE-201", "department": "ECE"},
    {"name": "Seminar Hall", "type": ResourceType.seminar_hall, "classroom": "Seminar Hall", "department": None},
    {"name": "Portable Projector", "type": ResourceType.equipment, "classroom": None, "department": None},
]


def _email_for(key: str) -> str:
    override = os.getenv(f"DEMO_{key.upper()}_EMAIL", "").strip()
    return override or f"{key.replace('_', '.')}@campusdesk.local"


def _upsert_departments(session: Session) -> dict[str, Department]:
    by_code: dict[str, Department] = {}
    for item in DEPARTMENTS:
        department = session.execute(select(Department).where(Department.code == item["code"])).scalar_one_or_none()
        if department is None:
            department = Department(**item)
            session.add(department)
        else:
            department.name = item["name"]
        by_code[item["code"]] = department
    session.flush()
    return by_code


def _upsert_accounts(session: Session, departments: dict[str, Department]) -> dict[str, User]:
    users: dict[str, User] = {}
    for item in ACCOUNTS:
        email = _email_for(item["key"])
        department = departments.get(item["department"]) if item["department"] else None
        user = session.execute(select(User).where(User.email == email)).scalar_one_or_none()
        if user is None:
            user = User(email=email, hashed_password=get_password_hash(DEFAULT_PASSWORD))
            session.add(user)
        user.name = item["name"]
        user.role = item["role"]
        user.designation = item["designation"]
        user.department_id = department.id if department else None
        user.is_active = True
        users[item["key"]] = user

        if item["role"] in (UserRole.hod, UserRole.faculty):
            _upsert_faculty_profile(session, user)
        if item["role"] == UserRole.hod and department is not None:
            department.hod_name = user.name
            department.hod_email = user.email
    session.flush()
    return users


def _upsert_faculty_profile(session: Session, user: User) -> Faculty:
    faculty = session.execute(select(Faculty).where(Faculty.email == user.email)).scalar_one_or_none()
    if faculty is None:
        faculty = Faculty(email=user.email)
        session.add(faculty)
    faculty.name = user.name
    faculty.designation = user.designation or "Assistant Professor"
    faculty.role = FacultyRole.hod if user.role == UserRole.hod else FacultyRole.faculty
    faculty.department_id = user.department_id
    return faculty


def _upsert_rooms_and_resources(session: Session, departments: dict[str, Department]) -> None:
    classrooms: dict[str, Classroom] = {}
    for item in CLASSROOMS:
        data = dict(item)
        department = departments.get(data.pop("department")) if item["department"] else None
        classroom = session.execute(select(Classroom).where(Classroom.name == data["name"])).scalars().first()
        if classroom is None:
            classroom = Classroom(features=[], **data)
            session.add(classroom)
        classroom.department_id = department.id if department else None
        classrooms[classroom.name] = classroom
    session.flush()

    for item in RESOURCES:
        department = departments.get(item["department"]) if item["department"] else None
        linked = classrooms.get(item["classroom"]) if item["classroom"] else None
        resource = session.execute(select(Resource).where(Resource.name == item["name"])).scalars().first()
        if resource is None:
            resource = Resource(name=item["name"], type=item["type"], equipment=[], facilities=[])
            session.add(resource)
        resource.department_id = department.id if department else None
        resource.classroom_id = linked.id if linked else None
        resource.capacity = linked.capacity if linked else None
        resource.building = linked.building if linked else None
        resource.is_shared = department is None
        resource.is_active = True


def _print_accounts(items: Iterable[tuple[str, User]]) -> None:
    print("\nPortal accounts ready:")
    for label, user in items:
        print(f"  - {label}: {user.email} | role={user.role.value}")
    print(f"\nPassword for all seeded accounts: {DEFAULT_PASSWORD}")


def main() -> None:
    ensure_runtime_schema_compatibility()
    with SessionLocal() as session:
        departments = _upsert_departments(session)
        users = _upsert_accounts(session, departments)
        _upsert_rooms_and_resources(session, departments)
        session.commit()
        _print_accounts(users.items())


if __name__ == "__main__":
    main()
