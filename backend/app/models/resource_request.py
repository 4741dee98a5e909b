import uuid
from datetime import date, datetime
from enum import Enum

from sqlalchemy import Boolean, Date, DateTime, Enum as SAEnum, ForeignKey, Integer, JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from app.db.base import Base


class ResourceRequestStatus(str, Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"
    cancelled = "cancelled"


class ResourceRequestPriority(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"
    urgent = "urgent"


class ResourceRequest(Base):
    __tablename__ = "resource_requests"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    requester_hod_id: Mapped[str] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    requester_department_id: Mapped[str] = mapped_column(ForeignKey("departments.id"), nullable=False)
    target_resource_id: Mapped[str] = mapped_column(ForeignKey("resources.id"), nullable=False, index=True)
    target_department_id: Mapped[str | None] = mapped_column(ForeignKey("departments.id"), nullable=True, index=True)
    requested_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    start_time: Mapped[str] = mapped_column(String(5), nullable=False)
    end_time: Mapped[str] = mapped_column(String(5), nullable=False)
    purpose: Mapped[str] = mapped_column(Text, nullable=False)
    course_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    expected_attendance: Mapped[int] = mapped_column(Integer, nullable=False)
    additional_requirements: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[ResourceRequestStatus] = mapped_column(
        SAEnum(ResourceRequestStatus, name="resource_request_status"),
        nullable=False,
        default=ResourceRequestStatus.pending,
    )
    priority: Mapped[ResourceRequestPriority] = mapped_column(
        SAEnum(ResourceRequestPriority, name="resource_request_priority"),
        nullable=False,
        default=ResourceRequestPriority.medium,
    )
    approved_by_hod_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    approved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    auto_approved: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    rejection_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_recurring: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    recurring_pattern: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now())

    __mapper_args__ = {"version_id_col": version}
