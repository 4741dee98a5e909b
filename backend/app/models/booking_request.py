import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy import Boolean, DateTime, Enum as SAEnum, ForeignKey, Integer, JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from app.db.base import Base


class BookingRequestStatus(str, Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"
    withdrawn = "withdrawn"


def _booking_request_id() -> str:
    return f"req_{uuid.uuid4().hex[:16]}"


class BookingRequest(Base):
    __tablename__ = "booking_requests"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_booking_request_id)
    requester_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    requester_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    requester_department: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    target_resource_id: Mapped[str] = mapped_column(ForeignKey("resources.id"), nullable=False, index=True)
    target_department: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    time_slot_id: Mapped[str] = mapped_column(String(20), nullable=False)
    day_of_week: Mapped[int] = mapped_column(Integer, nullable=False)
    start_time: Mapped[str] = mapped_column(String(5), nullable=False)
    end_time: Mapped[str] = mapped_column(String(5), nullable=False)
    course_name: Mapped[str] = mapped_column(String(200), nullable=False)
    purpose: Mapped[str | None] = mapped_column(Text, nullable=True)
    expected_attendance: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[BookingRequestStatus] = mapped_column(
        SAEnum(BookingRequestStatus, name="booking_request_status"),
        nullable=False,
        default=BookingRequestStatus.pending,
    )
    approved_by: Mapped[str | None] = mapped_column(String(200), nullable=True)
    auto_approved: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    response_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    rejection_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    vc_approved: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    vc_response_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    vc_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    timetable_entry_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    request_metadata: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    version: Mapped[int] = mapped_column(Integer, nullable=False)
    request_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now())

    __mapper_args__ = {"version_id_col": version}
