from __future__ import annotations

import logging

from sqlalchemy import select
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
from app.models.resource import Resource
from app.models.resource_request import ResourceRequest, ResourceRequestStatus
from app.models.user import User, UserRole
from app.schemas.resource_request import ResourceRequestCreate, ResourceRequestUpdate
from app.services.approvals import commit_or_conflict, guard_transition, require_reason, utc_now
from app.services.audit import log_activity
from app.services.conflict_checker import TimeInterval, find_conflicts

logger = logging.getLogger(__name__)

ALLOWED_FROM = {
    ResourceRequestStatus.approved: {ResourceRequestStatus.pending},
    ResourceRequestStatus.rejected: {ResourceRequestStatus.pending},
    ResourceRequestStatus.cancelled: {ResourceRequestStatus.pending, ResourceRequestStatus.approved},
}

UPDATABLE_FIELDS = (
    "target_resource_id",
    "requested_date",
    "start_time",
    "end_time",
    "purpose",
    "course_name",
    "expected_attendance",
    "additional_requirements",
    "priority",
    "is_recurring",
    "recurring_pattern",
    "notes",
)


def resource_request_interval(item: ResourceRequest) -> TimeInterval:
    return TimeInterval.from_stored(
        item.requested_date.isoweekday(),
        item.start_time,
        item.end_time,
        item.requested_date,
    )


def resource_request_summary(item: ResourceRequest) -> dict:
    return {
        "id": item.id,
        "requester_department_id": item.requester_department_id,
        "requested_date": item.requested_date.isoformat(),
        "start_time": item.start_time,
        "end_time": item.end_time,
        "status": item.status.value,
    }


class ResourceRequestWorkflow:
    """HOD-to-HOD requests for a dated slot on a bookable resource."""

    def __init__(self, db: Session, settings: Settings | None = None) -> None:
        self.db = db
        self.settings = settings or get_settings()

    def get(self, request_id: str) -> ResourceRequest:
        item = self.db.get(ResourceRequest, request_id)
        if item is None:
            raise ResourceNotFoundError("Resource request", request_id)
        return item

    def _require_hod(self, user: User, action: str) -> str:
        if user.role != UserRole.hod or not user.department_id:
            raise PermissionDeniedError(f"Only a department HOD can {action} resource requests")
        return user.department_id

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
    ) -> list[ResourceRequest]:
        rows = self.db.execute(
            select(ResourceRequest).where(
                ResourceRequest.target_resource_id == resource_id,
                ResourceRequest.requested_date == interval.date,
                ResourceRequest.status == ResourceRequestStatus.approved,
            )
        ).scalars()
        return find_conflicts(
            list(rows),
            interval,
            interval_of=resource_request_interval,
            exclude_id=exclude_request_id,
        )

    def _reject_conflicts(self, resource_id: str, interval: TimeInterval, exclude_request_id: str | None = None) -> None:
        conflicts = self.find_conflicts(resource_id, interval, exclude_request_id)
        if conflicts:
            raise ConflictError(
                "Resource is already booked for the requested time",
                conflicts=[resource_request_summary(item) for item in conflicts],
            )

    def create(self, payload: ResourceRequestCreate, requester: User) -> tuple[ResourceRequest, str]:
        department_id = self._require_hod(requester, "create")
        resource = self._lock_resource(payload.target_resource_id)
        if not resource.is_active:
            raise ValidationError(f"Resource {resource.name} is not active")
        interval = TimeInterval.build(
            payload.requested_date.isoweekday(),
            payload.start_time,
            payload.end_time,
            payload.requested_date,
        )
        self._reject_conflicts(resource.id, interval)

        item = ResourceRequest(
            requester_hod_id=requester.id,
            requester_department_id=department_id,
            target_resource_id=resource.id,
            target_department_id=resource.department_id,
            status=ResourceRequestStatus.pending,
            auto_approved=False,
            **payload.model_dump(exclude={"target_resource_id"}),
        )
        same_department = resource.department_id == department_id
        if self.settings.auto_approve_same_department_hod and same_department:
            item.status = ResourceRequestStatus.approved
            item.approved_by_hod_id = requester.id
            item.approved_at = utc_now()
            item.auto_approved = True
        self.db.add(item)
        self.db.flush()

        if item.auto_approved:
            log_activity(
                self.db,
                user=requester,
                action="resource_request.auto_approved",
                entity_type="resource_request",
                entity_id=item.id,
                details={"department_id": department_id, "resource_id": resource.id},
            )
        log_activity(
            self.db,
            user=requester,
            action="resource_request.created",
            entity_type="resource_request",
            entity_id=item.id,
            details={"status": item.status.value},
        )
        self.db.commit()
        self.db.refresh(item)
        logger.info("Resource request %s created by %s as %s", item.id, requester.id, item.status.value)
        if item.auto_approved:
            return item, "Resource request auto-approved (same department HOD)"
        return item, "Resource request created successfully"

    def _ensure_approver(self, item: ResourceRequest, approver: User, action: str) -> None:
        # Shared resources have no owning HOD; admins and any HOD may decide.
        if item.target_department_id is None:
            if approver.role not in (UserRole.admin, UserRole.hod):
                raise PermissionDeniedError(f"Only an HOD or admin can {action} requests for shared resources")
            return
        if self._require_hod(approver, action) != item.target_department_id:
            raise PermissionDeniedError(f"You can only {action} requests for resources owned by your department")

    def approve(self, request_id: str, approver: User, notes: str | None = None) -> ResourceRequest:
        item = self.get(request_id)
        self._ensure_approver(item, approver, "approve")
        guard_transition(item.status, ResourceRequestStatus.approved, ALLOWED_FROM)

        self._lock_resource(item.target_resource_id)
        self._reject_conflicts(item.target_resource_id, resource_request_interval(item), exclude_request_id=item.id)

        item.status = ResourceRequestStatus.approved
        item.approved_by_hod_id = approver.id
        item.approved_at = utc_now()
        if notes is not None:
            item.notes = notes
        log_activity(
            self.db,
            user=approver,
            action="resource_request.approved",
            entity_type="resource_request",
            entity_id=item.id,
        )
        commit_or_conflict(self.db, "Resource request")
        self.db.refresh(item)
        logger.info("Resource request %s approved by %s", item.id, approver.id)
        return item

    def reject(self, request_id: str, approver: User, rejection_reason: str | None) -> ResourceRequest:
        item = self.get(request_id)
        self._ensure_approver(item, approver, "reject")
        guard_transition(item.status, ResourceRequestStatus.rejected, ALLOWED_FROM)
        reason = require_reason(rejection_reason)

        item.status = ResourceRequestStatus.rejected
        item.rejection_reason = reason
        item.approved_by_hod_id = approver.id
        item.approved_at = utc_now()
        log_activity(
            self.db,
            user=approver,
            action="resource_request.rejected",
            entity_type="resource_request",
            entity_id=item.id,
            details={"reason": reason},
        )
        commit_or_conflict(self.db, "Resource request")
        self.db.refresh(item)
        return item

    def cancel(self, request_id: str, requester: User) -> ResourceRequest:
        item = self.get(request_id)
        if item.requester_hod_id != requester.id:
            raise PermissionDeniedError("You can only cancel your own requests")
        guard_transition(item.status, ResourceRequestStatus.cancelled, ALLOWED_FROM)

        item.status = ResourceRequestStatus.cancelled
        log_activity(
            self.db,
            user=requester,
            action="resource_request.cancelled",
            entity_type="resource_request",
            entity_id=item.id,
        )
        commit_or_conflict(self.db, "Resource request")
        self.db.refresh(item)
        return item

    def update(self, request_id: str, patch: ResourceRequestUpdate, requester: User) -> ResourceRequest:
        item = self.get(request_id)
        if item.requester_hod_id != requester.id:
            raise PermissionDeniedError("You can only update your own requests")
        if item.status != ResourceRequestStatus.pending:
            raise StateGuardViolation(
                "Only pending requests can be updated",
                details={"current_status": item.status.value},
            )

        changes = patch.model_dump(exclude_unset=True)
        merged = {name: getattr(item, name) for name in UPDATABLE_FIELDS}
        merged.update({key: value for key, value in changes.items() if key in UPDATABLE_FIELDS})
        for required in ("target_resource_id", "requested_date", "start_time", "end_time", "purpose"):
            if merged.get(required) is None:
                raise ValidationError(f"{required} cannot be cleared", details={"field": required})

        resource = self._lock_resource(merged["target_resource_id"])
        interval = TimeInterval.build(
            merged["requested_date"].isoweekday(),
            merged["start_time"],
            merged["end_time"],
            merged["requested_date"],
        )
        self._reject_conflicts(resource.id, interval, exclude_request_id=item.id)

        for key, value in merged.items():
            setattr(item, key, value)
        item.target_department_id = resource.department_id
        log_activity(
            self.db,
            user=requester,
            action="resource_request.updated",
            entity_type="resource_request",
            entity_id=item.id,
            details={"fields": sorted(changes)},
        )
        commit_or_conflict(self.db, "Resource request")
        self.db.refresh(item)
        return item

    def delete(self, request_id: str, actor: User) -> None:
        item = self.get(request_id)
        if item.requester_hod_id != actor.id and actor.role != UserRole.admin:
            raise PermissionDeniedError("Only the requester or an admin can delete this resource request")
        self.db.delete(item)
        log_activity(
            self.db,
            user=actor,
            action="resource_request.deleted",
            entity_type="resource_request",
            entity_id=request_id,
        )
        self.db.commit()
