"""create portal schema

Revision ID: 20261019_0001
Revises: None
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


user_role_enum = sa.Enum("admin", "vc", "principal", "hod", "faculty", "student", name="user_role")
faculty_role_enum = sa.Enum("faculty", "hod", name="faculty_role")
room_type_enum = sa.Enum("lecture", "lab", "seminar", name="room_type")
subject_type_enum = sa.Enum("lecture", "practical", name="subject_type")
resource_type_enum = sa.Enum("classroom", "lab", "seminar_hall", "auditorium", "equipment", name="resource_type")
classroom_booking_status_enum = sa.Enum("pending", "confirmed", "cancelled", name="classroom_booking_status")
booking_request_status_enum = sa.Enum("pending", "approved", "rejected", "withdrawn", name="booking_request_status")
resource_request_status_enum = sa.Enum("pending", "approved", "rejected", "cancelled", name="resource_request_status")
resource_request_priority_enum = sa.Enum("low", "medium", "high", "urgent", name="resource_request_priority")


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        "departments",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("code", sa.String(length=20), nullable=False),
        sa.Column("hod_name", sa.String(length=200), nullable=True),
        sa.Column("hod_email", sa.String(length=255), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_departments_name", "departments", ["name"], unique=True)
    op.create_index("ix_departments_code", "departments", ["code"], unique=True)

    op.create_table(
        "users",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("hashed_password", sa.String(length=255), nullable=False),
        sa.Column("role", user_role_enum, nullable=False),
        sa.Column("designation", sa.String(length=200), nullable=True),
        sa.Column("department_id", sa.String(length=36), sa.ForeignKey("departments.id"), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        *_timestamps(),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_department_id", "users", ["department_id"])

    op.create_table(
        "faculty",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("designation", sa.String(length=200), nullable=False),
        sa.Column("role", faculty_role_enum, nullable=False, server_default="faculty"),
        sa.Column("department_id", sa.String(length=36), sa.ForeignKey("departments.id"), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_faculty_email", "faculty", ["email"], unique=True)
    op.create_index("ix_faculty_department_id", "faculty", ["department_id"])

    op.create_table(
        "classrooms",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("room_number", sa.String(length=50), nullable=False),
        sa.Column("building", sa.String(length=200), nullable=False),
        sa.Column("floor", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("capacity", sa.Integer(), nullable=False, server_default="30"),
        sa.Column("type", room_type_enum, nullable=False),
        sa.Column("features", sa.JSON(), nullable=False),
        sa.Column("department_id", sa.String(length=36), sa.ForeignKey("departments.id"), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        *_timestamps(),
    )
    op.create_index("ix_classrooms_department_id", "classrooms", ["department_id"])

    op.create_table(
        "subjects",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("code", sa.String(length=50), nullable=False),
        sa.Column("credits", sa.Integer(), nullable=False, server_default="3"),
        sa.Column("type", subject_type_enum, nullable=False, server_default="lecture"),
        sa.Column("department_id", sa.String(length=36), sa.ForeignKey("departments.id"), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_subjects_code", "subjects", ["code"], unique=True)
    op.create_index("ix_subjects_department_id", "subjects", ["department_id"])

    op.create_table(
        "resources",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("type", resource_type_enum, nullable=False),
        sa.Column("capacity", sa.Integer(), nullable=True),
        sa.Column("department_id", sa.String(length=36), sa.ForeignKey("departments.id"), nullable=True),
        sa.Column("classroom_id", sa.String(length=36), sa.ForeignKey("classrooms.id"), nullable=True),
        sa.Column("building", sa.String(length=200), nullable=True),
        sa.Column("floor", sa.Integer(), nullable=True),
        sa.Column("location", sa.String(length=200), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("equipment", sa.JSON(), nullable=False),
        sa.Column("facilities", sa.JSON(), nullable=False),
        sa.Column("is_shared", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        *_timestamps(),
    )
    op.create_index("ix_resources_department_id", "resources", ["department_id"])

    op.create_table(
        "timetables",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("semester", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("department_id", sa.String(length=36), sa.ForeignKey("departments.id"), nullable=True),
        sa.Column("section", sa.String(length=50), nullable=True),
        sa.Column("academic_year", sa.String(length=20), nullable=False),
        sa.Column("number_of_students", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        *_timestamps(),
    )
    op.create_index("ix_timetables_department_id", "timetables", ["department_id"])

    op.create_table(
        "timetable_entries",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("timetable_id", sa.String(length=36), sa.ForeignKey("timetables.id"), nullable=False),
        sa.Column("subject_id", sa.String(length=36), sa.ForeignKey("subjects.id"), nullable=False),
        sa.Column("faculty_id", sa.String(length=36), sa.ForeignKey("faculty.id"), nullable=False),
        sa.Column("classroom_id", sa.String(length=36), sa.ForeignKey("classrooms.id"), nullable=False),
        sa.Column("day_of_week", sa.Integer(), nullable=False),
        sa.Column("start_time", sa.String(length=5), nullable=False),
        sa.Column("end_time", sa.String(length=5), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_timetable_entries_timetable_id", "timetable_entries", ["timetable_id"])
    op.create_index("ix_timetable_entries_faculty_id", "timetable_entries", ["faculty_id"])
    op.create_index("ix_timetable_entries_classroom_id", "timetable_entries", ["classroom_id"])

    op.create_table(
        "classroom_bookings",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("classroom_id", sa.String(length=36), sa.ForeignKey("classrooms.id"), nullable=False),
        sa.Column("booking_date", sa.Date(), nullable=False),
        sa.Column("day_of_week", sa.Integer(), nullable=False),
        sa.Column("start_time", sa.String(length=5), nullable=False),
        sa.Column("end_time", sa.String(length=5), nullable=False),
        sa.Column("department_id", sa.String(length=36), sa.ForeignKey("departments.id"), nullable=True),
        sa.Column("course", sa.String(length=200), nullable=True),
        sa.Column("instructor", sa.String(length=200), nullable=True),
        sa.Column("status", classroom_booking_status_enum, nullable=False, server_default="confirmed"),
        sa.Column("booked_by_id", sa.String(length=36), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_classroom_bookings_classroom_id", "classroom_bookings", ["classroom_id"])
    op.create_index("ix_classroom_bookings_booking_date", "classroom_bookings", ["booking_date"])
    op.create_index("ix_classroom_bookings_department_id", "classroom_bookings", ["department_id"])

    op.create_table(
        "booking_requests",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("requester_id", sa.String(length=36), nullable=False),
        sa.Column("requester_name", sa.String(length=200), nullable=True),
        sa.Column("requester_department", sa.String(length=200), nullable=False),
        sa.Column("target_resource_id", sa.String(length=36), sa.ForeignKey("resources.id"), nullable=False),
        sa.Column("target_department", sa.String(length=200), nullable=False),
        sa.Column("time_slot_id", sa.String(length=20), nullable=False),
        sa.Column("day_of_week", sa.Integer(), nullable=False),
        sa.Column("start_time", sa.String(length=5), nullable=False),
        sa.Column("end_time", sa.String(length=5), nullable=False),
        sa.Column("course_name", sa.String(length=200), nullable=False),
        sa.Column("purpose", sa.Text(), nullable=True),
        sa.Column("expected_attendance", sa.Integer(), nullable=False),
        sa.Column("status", booking_request_status_enum, nullable=False, server_default="pending"),
        sa.Column("approved_by", sa.String(length=200), nullable=True),
        sa.Column("auto_approved", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("response_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("rejection_reason", sa.Text(), nullable=True),
        sa.Column("vc_approved", sa.Boolean(), nullable=True),
        sa.Column("vc_response_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("vc_notes", sa.Text(), nullable=True),
        sa.Column("timetable_entry_id", sa.String(length=36), nullable=True),
        sa.Column("request_metadata", sa.JSON(), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("request_date", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_booking_requests_requester_id", "booking_requests", ["requester_id"])
    op.create_index("ix_booking_requests_requester_department", "booking_requests", ["requester_department"])
    op.create_index("ix_booking_requests_target_resource_id", "booking_requests", ["target_resource_id"])
    op.create_index("ix_booking_requests_target_department", "booking_requests", ["target_department"])

    op.create_table(
        "resource_requests",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("requester_hod_id", sa.String(length=36), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("requester_department_id", sa.String(length=36), sa.ForeignKey("departments.id"), nullable=False),
        sa.Column("target_resource_id", sa.String(length=36), sa.ForeignKey("resources.id"), nullable=False),
        sa.Column("target_department_id", sa.String(length=36), sa.ForeignKey("departments.id"), nullable=True),
        sa.Column("requested_date", sa.Date(), nullable=False),
        sa.Column("start_time", sa.String(length=5), nullable=False),
        sa.Column("end_time", sa.String(length=5), nullable=False),
        sa.Column("purpose", sa.Text(), nullable=False),
        sa.Column("course_name", sa.String(length=200), nullable=True),
        sa.Column("expected_attendance", sa.Integer(), nullable=False),
        sa.Column("additional_requirements", sa.Text(), nullable=True),
        sa.Column("status", resource_request_status_enum, nullable=False, server_default="pending"),
        sa.Column("priority", resource_request_priority_enum, nullable=False, server_default="medium"),
        sa.Column("approved_by_hod_id", sa.String(length=36), nullable=True),
        sa.Column("approved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("auto_approved", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("rejection_reason", sa.Text(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("is_recurring", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("recurring_pattern", sa.JSON(), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        *_timestamps(),
    )
    op.create_index("ix_resource_requests_requester_hod_id", "resource_requests", ["requester_hod_id"])
    op.create_index("ix_resource_requests_target_resource_id", "resource_requests", ["target_resource_id"])
    op.create_index("ix_resource_requests_target_department_id", "resource_requests", ["target_department_id"])
    op.create_index("ix_resource_requests_requested_date", "resource_requests", ["requested_date"])

    op.create_table(
        "activity_logs",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("user_id", sa.String(length=36), nullable=True),
        sa.Column("actor_role", sa.String(length=50), nullable=True),
        sa.Column("action", sa.String(length=100), nullable=False),
        sa.Column("entity_type", sa.String(length=100), nullable=True),
        sa.Column("entity_id", sa.String(length=100), nullable=True),
        sa.Column("details", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_activity_logs_action", "activity_logs", ["action"])
    op.create_index("ix_activity_logs_entity_id", "activity_logs", ["entity_id"])


def downgrade() -> None:
    for table_name in (
        "activity_logs",
        "resource_requests",
        "booking_requests",
        "classroom_bookings",
        "timetable_entries",
        "timetables",
        "resources",
        "subjects",
        "classrooms",
        "faculty",
        "users",
        "departments",
    ):
        op.drop_table(table_name)

    bind = op.get_bind()
    for enum_type in (
        resource_request_priority_enum,
        resource_request_status_enum,
        booking_request_status_enum,
        classroom_booking_status_enum,
        resource_type_enum,
        subject_type_enum,
        room_type_enum,
        faculty_role_enum,
        user_role_enum,
    ):
        enum_type.drop(bind, checkfirst=True)
