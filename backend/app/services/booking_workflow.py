from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.core.config import Settings, get_settings
from app.core.exceptions import (
    ConflictError,
    PermissionDeniedError,
    ResourceNotFoundError,
    StateGuardViolation,
    ValidationError,
)
from app.db.locking import lock_reservation_target
from app.models.booking_request import BookingRequest, BookingRequestStatus
from app.models.classroom import Classroom, RoomType
from app.models.department import Department
from app.models.faculty import Faculty, FacultyRole
from app.models.resource import Resource, ResourceType
from app.models.subject import Subject, SubjectType
from app.models.timetable import Timetable, TimetableEntry
from app.models.user import User, UserRole
from app.schemas.booking_request import BookingRequestCreate, BookingRequestStatusUpdate, VcApprovalUpdate
from app.services.approvals import (
    AUTO_APPROVAL_NOTE,
    AUTO_APPROVED_BY_TEMPLATE,
    commit_or_conflict,
    guard_transition,
    qualifies_for_auto_approval,
    require_reason,
    utc_now,
)
from app.services.audit import log_activity
from app.services.conflict_checker import TimeInterval, find_conflicts
from app.services.time_slots import resolve_time_slot
from app.services.timetable_manager import TimetableEntryManager

logger = logging.getLogger(__name__)

SHARED_TARGET_DEPARTMENT = "University"
DECIDER_ROLES = {UserRole.admin, UserRole.principal, UserRole.vc}

ALLOWED_FROM = {
    BookingRequestStatus.approved: {BookingRequestStatus.pending},
    BookingRequestStatus.rejected: {BookingRequestStatus.pending},
    BookingRequestStatus.withdrawn: {BookingRequestStatus.pending, BookingRequestStatus.approved},
}

ROOM_TYPE_FOR_RESOURCE = {
    ResourceType.classroom: RoomType.lecture,
    ResourceType.lab: RoomType.lab,
    ResourceType.seminar_hall: RoomType.seminar,
    ResourceType.auditorium: RoomType.seminar,
}


def request_interval(item: BookingRequest) -> TimeInterval:
    return TimeInterval.from_stored(item.day_of_week, item.start_time, item.end_time)


def request_summary(item: BookingRequest) -> dict:
    return {
        "id": item.id,
        "requester_department": item.requester_department,
        "course_name": item.course_name,
        "day_of_week": item.day_of_week,
        "start_time": item.start_time,
        "end_time": item.end_time,
        "status": item.status.value,
    }


@dataclass
class WorkflowResult:
    request: BookingRequest
    message: str
    warnings: list[str] = field(default_factory=list)


class BookingRequestWorkflow:
    def __init__(self, db: Session, settings: Settings | None = None) -> None:
        self.db = db
        self.settings = settings or get_settings()

    def get(self, request_id: str) -> BookingRequest:
        item = self.db.get(BookingRequest, request_id)
        if item is None:
            raise ResourceNotFoundError("Booking request", request_id)
        return item

    def _department_by_name(self, name: str | None) -> Department | None:
        if not name:
            return None
        return self.db.execute(
            select(Department).where(func.lower(Department.name) == name.strip().lower())
        ).scalar_one_or_none()

    def _requester_department(self, requester: User, fallback: str | None) -> str:
        if requester.department_id:
            department = self.db.get(Department, requester.department_id)
            if department is not None:
                return department.name
        if fallback:
            return fallback
        raise ValidationError("requester_department is required", details={"field": "requester_department"})

    def _target_department(self, resource: Resource, claimed: str | None) -> str:
        if resource.department_id is None:
            if claimed and claimed.strip().casefold() != SHARED_TARGET_DEPARTMENT.casefold():
                raise ValidationError(
                    f"Resource {resource.name} is shared and not owned by {claimed}",
                    details={"target_department": SHARED_TARGET_DEPARTMENT},
                )
            return SHARED_TARGET_DEPARTMENT
        owner = self.db.get(Department, resource.department_id)
        if owner is None:
            raise ResourceNotFoundError("Department", resource.department_id)
        if claimed and claimed.strip().casefold() != owner.name.casefold():
            raise ValidationError(
                f"Resource {resource.name} belongs to {owner.name}, not {claimed}",
                details={"target_department": owner.name},
            )
        return owner.name

    def _lock_resource(self, resource_id: str) -> Resource:
        resource = lock_reservation_target(self.db, Resource, resource_id)
        if resource is None:
            raise ResourceNotFoundError("Resource", resource_id)
        return resource

    def find_conflicts(
        self,
        resource_id: str,
        interval: TimeInterval,
        exclude_request_id: str | None = None,
    ) -> list[BookingRequest]:
        rows = self.db.execute(
            select(BookingRequest).where(
                BookingRequest.target_resource_id == resource_id,
                BookingRequest.day_of_week == interval.day_of_week,
                BookingRequest.status == BookingRequestStatus.approved,
            )
        ).scalars()
        return find_conflicts(list(rows), interval, interval_of=request_interval, exclude_id=exclude_request_id)

    def _reject_conflicts(self, resource_id: str, interval: TimeInterval, exclude_request_id: str | None = None) -> None:
        conflicts = self.find_conflicts(resource_id, interval, exclude_request_id)
        if conflicts:
            logger.info("Resource %s already approved on %s", resource_id, interval.describe())
            raise ConflictError(
                "Time slot conflict detected",
                conflicts=[request_summary(item) for item in conflicts],
            )

    def create(self, payload: BookingRequestCreate, requester: User) -> WorkflowResult:
        resource = self._lock_resource(payload.target_resource_id)
        if not resource.is_active:
            raise ValidationError(f"Resource {resource.name} is not active")

        slot = resolve_time_slot(payload.time_slot_id)
        interval = TimeInterval.build(payload.day_of_week, slot.start_time, slot.end_time)
        requester_department = self._requester_department(requester, payload.requester_department)
        target_department = self._target_department(resource, payload.target_department)

        self._reject_conflicts(resource.id, interval)

        item = BookingRequest(
            requester_id=requester.id,
            requester_name=requester.name,
            requester_department=requester_department,
            target_resource_id=resource.id,
            target_department=target_department,
            time_slot_id=slot.id,
            day_of_week=interval.day_of_week,
            start_time=interval.start_time,
            end_time=interval.end_time,
            course_name=payload.course_name,
            purpose=payload.purpose,
            expected_attendance=payload.expected_attendance,
            notes=payload.notes,
            request_metadata=payload.request_metadata,
            status=BookingRequestStatus.pending,
        )
        self.db.add(item)
        self.db.flush()

        auto_approved = self.settings.auto_approve_same_department_hod and qualifies_for_auto_approval(
            requester, requester_department, target_department
        )
        if auto_approved:
            item.status = BookingRequestStatus.approved
            item.approved_by = AUTO_APPROVED_BY_TEMPLATE.format(requester_id=requester.id)
            item.auto_approved = True
            item.response_date = utc_now()
            item.notes = AUTO_APPROVAL_NOTE
            log_activity(
                self.db,
                user=requester,
                action="booking_request.auto_approved",
                entity_type="booking_request",
                entity_id=item.id,
                details={"department": requester_department, "resource_id": resource.id},
            )
        log_activity(
            self.db,
            user=requester,
            action="booking_request.created",
            entity_type="booking_request",
            entity_id=item.id,
            details={"status": item.status.value, "time_slot_id": slot.id},
        )
        self.db.commit()
        self.db.refresh(item)
        logger.info("Booking request %s created by %s as %s", item.id, requester.id, item.status.value)

        if not auto_approved:
            return WorkflowResult(item, "Booking request created successfully")
        warnings = self._materialize_best_effort(item, requester)
        return WorkflowResult(item, "Booking request auto-approved (same department HOD)", warnings)

    def _ensure_decider(self, item: BookingRequest, actor: User) -> None:
        if actor.role in DECIDER_ROLES:
            return
        if actor.role == UserRole.hod:
            department = self.db.get(Department, actor.department_id) if actor.department_id else None
            if department is not None and department.name.casefold() == item.target_department.casefold():
                return
        raise PermissionDeniedError("Only the HOD of the target department can decide on this booking request")

    def update_status(self, request_id: str, payload: BookingRequestStatusUpdate, actor: User) -> WorkflowResult:
        if payload.status == BookingRequestStatus.approved:
            return self.approve(request_id, actor, approved_by=payload.approved_by, notes=payload.notes)
        if payload.status == BookingRequestStatus.rejected:
            return self.reject(request_id, actor, rejection_reason=payload.rejection_reason, notes=payload.notes)
        return self.withdraw(request_id, actor, notes=payload.notes)

    def approve(
        self,
        request_id: str,
        actor: User,
        *,
        approved_by: str | None = None,
        notes: str | None = None,
    ) -> WorkflowResult:
        item = self.get(request_id)
        self._ensure_decider(item, actor)
        guard_transition(item.status, BookingRequestStatus.approved, ALLOWED_FROM)
        self._lock_resource(item.target_resource_id)
        self._reject_conflicts(item.target_resource_id, request_interval(item), exclude_request_id=item.id)

        item.status = BookingRequestStatus.approved
        item.approved_by = (approved_by or "").strip() or actor.name
        item.response_date = utc_now()
        if notes is not None:
            item.notes = notes
        log_activity(
            self.db,
            user=actor,
            action="booking_request.approved",
            entity_type="booking_request",
            entity_id=item.id,
        )
        commit_or_conflict(self.db, "Booking request")
        self.db.refresh(item)
        logger.info("Booking request %s approved by %s", item.id, actor.id)

        warnings = self._materialize_best_effort(item, actor)
        return WorkflowResult(item, "Booking request approved successfully", warnings)

    def reject(
        self,
        request_id: str,
        actor: User,
        *,
        rejection_reason: str | None,
        notes: str | None = None,
    ) -> WorkflowResult:
        item = self.get(request_id)
        self._ensure_decider(item, actor)
        guard_transition(item.status, BookingRequestStatus.rejected, ALLOWED_FROM)
        reason = require_reason(rejection_reason)

        item.status = BookingRequestStatus.rejected
        item.rejection_reason = reason
        item.response_date = utc_now()
        if notes is not None:
            item.notes = notes
        log_activity(
            self.db,
            user=actor,
            action="booking_request.rejected",
            entity_type="booking_request",
            entity_id=item.id,
            details={"reason": reason},
        )
        commit_or_conflict(self.db, "Booking request")
        self.db.refresh(item)
        logger.info("Booking request %s rejected by %s", item.id, actor.id)
        return WorkflowResult(item, "Booking request rejected successfully")

    def withdraw(self, request_id: str, actor: User, *, notes: str | None = None) -> WorkflowResult:
        item = self.get(request_id)
        if item.requester_id != actor.id:
            raise PermissionDeniedError("Only the requester can withdraw this booking request")
        guard_transition(item.status, BookingRequestStatus.withdrawn, ALLOWED_FROM)

        if item.timetable_entry_id:
            entry = self.db.get(TimetableEntry, item.timetable_entry_id)
            if entry is not None:
                self.db.delete(entry)
            item.timetable_entry_id = None
        item.status = BookingRequestStatus.withdrawn
        item.response_date = utc_now()
        if notes is not None:
            item.notes = notes
        log_activity(
            self.db,
            user=actor,
            action="booking_request.withdrawn",
            entity_type="booking_request",
            entity_id=item.id,
        )
        commit_or_conflict(self.db, "Booking request")
        self.db.refresh(item)
        logger.info("Booking request %s withdrawn", item.id)
        return WorkflowResult(item, "Booking request withdrawn successfully")

    def set_vc_approval(self, request_id: str, payload: VcApprovalUpdate, actor: User) -> WorkflowResult:
        item = self.get(request_id)
        if item.status != BookingRequestStatus.approved:
            raise StateGuardViolation(
                "VC approval is only possible for approved requests",
                details={"current_status": item.status.value},
            )
        if item.vc_approved is not None:
            raise StateGuardViolation("VC approval has already been recorded for this request")

        item.vc_approved = payload.vc_approved
        item.vc_response_date = utc_now()
        item.vc_notes = payload.notes
        log_activity(
            self.db,
            user=actor,
            action="booking_request.vc_decision",
            entity_type="booking_request",
            entity_id=item.id,
            details={"vc_approved": payload.vc_approved},
        )
        commit_or_conflict(self.db, "Booking request")
        self.db.refresh(item)
        verdict = "approved" if payload.vc_approved else "rejected"
        return WorkflowResult(item, f"VC {verdict} the booking request")

    def delete(self, request_id: str, actor: User) -> None:
        item = self.get(request_id)
        if item.requester_id != actor.id and actor.role != UserRole.admin:
            raise PermissionDeniedError("Only the requester or an admin can delete this booking request")
        if item.status != BookingRequestStatus.pending:
            raise StateGuardViolation(
                "Only pending booking requests can be deleted",
                details={"current_status": item.status.value},
            )
        self.db.delete(item)
        log_activity(
            self.db,
            user=actor,
            action="booking_request.deleted",
            entity_type="booking_request",
            entity_id=request_id,
        )
        self.db.commit()

    def _materialize_best_effort(self, item: BookingRequest, actor: User) -> list[str]:
        request_id = item.id
        try:
            entry = self.materialize_entry(item)
            if entry is None:
                return ["Equipment bookings are not placed on a timetable"]
            self.db.commit()
        except Exception as exc:
            self.db.rollback()
            logger.exception("Timetable entry materialization failed for booking request %s", request_id)
            log_activity(
                self.db,
                user=actor,
                action="booking_request.materialization_failed",
                entity_type="booking_request",
                entity_id=request_id,
                details={"error": str(exc)},
            )
            self.db.commit()
            self.db.refresh(item)
            return [f"Approved, but the timetable entry could not be created: {exc}"]
        self.db.refresh(item)
        return []

    def materialize_entry(self, item: BookingRequest) -> TimetableEntry | None:
        """Place an approved request into the requester department's booking timetable.

        Missing timetable, subject, faculty or classroom rows are created on the
        fly. Equipment has no room to occupy and yields ``None``.
        """
        resource = self.db.get(Resource, item.target_resource_id)
        if resource is None:
            raise ResourceNotFoundError("Resource", item.target_resource_id)
        if resource.type not in ROOM_TYPE_FOR_RESOURCE:
            return None

        department = self._department_by_name(item.requester_department)
        if department is None:
            raise ValidationError(f"Department {item.requester_department} is not registered")

        timetable = self._booking_timetable(department)
        subject = self._subject_for(item.course_name, department)
        faculty = self._faculty_for(item.requester_id, department)
        classroom = self._classroom_for(resource)

        entry = TimetableEntryManager(self.db).add_entry(
            timetable.id,
            subject_id=subject.id,
            faculty_id=faculty.id,
            classroom_id=classroom.id,
            day_of_week=item.day_of_week,
            start_time=item.start_time,
            end_time=item.end_time,
        )
        item.timetable_entry_id = entry.id
        self.db.flush()
        logger.info("Booking request %s placed as timetable entry %s", item.id, entry.id)
        return entry

    def _booking_timetable(self, department: Department) -> Timetable:
        name = self.settings.booking_timetable_name
        timetable = self.db.execute(
            select(Timetable).where(Timetable.department_id == department.id, Timetable.name == name)
        ).scalars().first()
        if timetable is None:
            timetable = Timetable(
                name=name,
                semester=1,
                department_id=department.id,
                academic_year=self.settings.default_academic_year,
                number_of_students=0,
            )
            self.db.add(timetable)
            self.db.flush()
        return timetable

    def _subject_for(self, course_name: str, department: Department) -> Subject:
        subject = self.db.execute(
            select(Subject).where(
                Subject.department_id == department.id,
                func.lower(Subject.name) == course_name.lower(),
            )
        ).scalars().first()
        if subject is None:
            subject = Subject(
                name=course_name,
                code=f"{department.code}-BR-{uuid.uuid4().hex[:6].upper()}",
                credits=0,
                type=SubjectType.lecture,
                department_id=department.id,
            )
            self.db.add(subject)
            self.db.flush()
        return subject

    def _faculty_for(self, requester_id: str, department: Department) -> Faculty:
        requester = self.db.get(User, requester_id)
        if requester is None:
            raise ResourceNotFoundError("User", requester_id)
        faculty = self.db.execute(
            select(Faculty).where(func.lower(Faculty.email) == requester.email.lower())
        ).scalar_one_or_none()
        if faculty is None:
            faculty = Faculty(
                name=requester.name,
                email=requester.email,
                designation=requester.designation or "Faculty",
                role=FacultyRole.hod if requester.role == UserRole.hod else FacultyRole.faculty,
                department_id=department.id,
            )
            self.db.add(faculty)
            self.db.flush()
        return faculty

    def _classroom_for(self, resource: Resource) -> Classroom:
        if resource.classroom_id:
            classroom = self.db.get(Classroom, resource.classroom_id)
            if classroom is not None:
                return classroom
        classroom = self.db.execute(select(Classroom).where(Classroom.name == resource.name)).scalars().first()
        if classroom is None:
            classroom = Classroom(
                name=resource.name,
                room_number=resource.location or resource.name,
                building=resource.building or "Main",
                floor=resource.floor or 0,
                capacity=resource.capacity or 30,
                type=ROOM_TYPE_FOR_RESOURCE[resource.type],
                features=list(resource.facilities or []),
                department_id=resource.department_id,
            )
            self.db.add(classroom)
            self.db.flush()
        resource.classroom_id = classroom.id
        return classroom
