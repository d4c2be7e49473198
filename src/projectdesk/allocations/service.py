"""
Allocation Service - create, update and delete resource allocations.

Every create and update runs the same sequence inside one transaction:

1. Serialize on the target user (Postgres advisory lock, if enabled)
2. Resolve the user's allocations overlapping the candidate period
3. Read the user's capacity (40 h/week when none is recorded)
4. Sum and compare; reject before writing anything
5. Write, commit, release the lock

Deletes skip steps 2-4: removing load cannot exceed capacity.
"""

from typing import List, Optional
from uuid import uuid4

from sqlalchemy import text
from sqlalchemy.orm import Session

from projectdesk.allocations.capacity import (
    CapacityCheck,
    ensure_within_capacity,
    evaluate_capacity,
    format_hours,
    to_hours,
)
from projectdesk.allocations.overlap import resolve_overlaps
from projectdesk.allocations.patch import AllocationDraft, apply_patch
from projectdesk.allocations.schemas import (
    AllocationCreate,
    AllocationPatch,
    CapacityResponse,
    CapacityUpdate,
)
from projectdesk.errors import NotFoundError, ValidationError
from projectdesk.platform.config import Settings, get_settings
from projectdesk.platform.logging import get_logger
from projectdesk.platform.metrics import record_allocation_decision
from projectdesk.storage.models import ResourceAllocationModel
from projectdesk.storage.repositories import (
    AllocationRepository,
    CapacityRepository,
    ProjectRepository,
    UserRepository,
)

logger = get_logger(__name__)


class AllocationService:
    """
    Service layer for project resource allocations.

    Repositories only flush; this service owns the commit so the capacity
    check and the write share a transaction.
    """

    def __init__(
        self,
        allocation_repo: AllocationRepository,
        capacity_repo: CapacityRepository,
        user_repo: UserRepository,
        project_repo: ProjectRepository,
        settings: Optional[Settings] = None,
    ):
        self.allocation_repo = allocation_repo
        self.capacity_repo = capacity_repo
        self.user_repo = user_repo
        self.project_repo = project_repo
        self.settings = settings or get_settings()

    # --- Reads ---

    def get_project(self, session: Session, project_id: str):
        project = self.project_repo.get(session, project_id)
        if not project:
            raise NotFoundError("Project not found")
        return project

    def list_allocations(self, session: Session, project_id: str) -> List[ResourceAllocationModel]:
        return self.allocation_repo.list_by_project(session, project_id)

    def get_allocation(self, session: Session, project_id: str, allocation_id: str) -> ResourceAllocationModel:
        allocation = self.allocation_repo.get_in_project(session, project_id, allocation_id)
        if not allocation:
            raise NotFoundError("Resource allocation not found")
        return allocation

    def max_hours_for(self, session: Session, user_id: str):
        capacity = self.capacity_repo.get_active(session, user_id)
        if capacity is None or capacity.max_hours_per_week is None:
            return to_hours(self.settings.DEFAULT_MAX_HOURS_PER_WEEK, "max_hours_per_week")
        return to_hours(capacity.max_hours_per_week, "max_hours_per_week")

    # --- Capacity ---

    def lock_user(self, session: Session, user_id: str) -> None:
        """
        Take a transaction-scoped advisory lock on the user so concurrent
        allocation writes for the same user run one after another.
        """
        if not self.settings.ALLOCATION_ADVISORY_LOCKS:
            return
        if session.get_bind().dialect.name != "postgresql":
            return
        session.execute(
            text("SELECT pg_advisory_xact_lock(hashtext(:key))"),
            {"key": f"allocation:{user_id}"},
        )

    def check_capacity(
        self,
        session: Session,
        user_id: str,
        draft: AllocationDraft,
        exclude_allocation_id: Optional[str] = None,
    ) -> CapacityCheck:
        """Evaluate ``draft`` against the user's other overlapping allocations."""
        period = draft.period
        candidates = self.allocation_repo.list_for_user(
            session, user_id, period=period, exclude_allocation_id=exclude_allocation_id
        )
        overlapping = resolve_overlaps(period, candidates, exclude_allocation_id=exclude_allocation_id)
        return evaluate_capacity(
            draft.allocated_hours_per_week,
            overlapping,
            self.max_hours_for(session, user_id),
        )

    def _enforce(self, check: CapacityCheck, operation: str, user_id: str, project_id: str) -> None:
        record_allocation_decision(operation, check.accepted)
        log_fields = dict(
            operation=operation,
            user_id=user_id,
            project_id=project_id,
            max_hours=format_hours(check.max_hours),
            existing_hours=format_hours(check.existing_hours),
            requested_hours=format_hours(check.requested_hours),
            total_hours=format_hours(check.total_hours),
        )
        logger.info("allocation.accepted" if check.accepted else "allocation.rejected", **log_fields)
        ensure_within_capacity(check)

    # --- Mutations ---

    def create_allocation(
        self,
        session: Session,
        project_id: str,
        payload: AllocationCreate,
    ) -> ResourceAllocationModel:
        """
        Create an allocation for ``payload.user_id`` on the project.

        Raises:
            ValidationError: missing/invalid fields or dates out of order
            CapacityExceededError: total overlapping hours would exceed capacity
            NotFoundError: the target user does not exist
        """
        if not payload.user_id or payload.allocated_hours_per_week is None:
            raise ValidationError("user_id and allocated_hours_per_week are required")

        hours = to_hours(payload.allocated_hours_per_week)
        if hours <= 0:
            raise ValidationError("allocated_hours_per_week must be greater than 0")

        draft = AllocationDraft(
            allocated_hours_per_week=hours,
            start_date=payload.start_date,
            end_date=payload.end_date,
            notes=payload.notes or None,
        )
        if not draft.period.is_ordered:
            raise ValidationError("end_date must be on or after start_date")

        if not self.user_repo.get(session, payload.user_id):
            raise NotFoundError("User not found")

        self.lock_user(session, payload.user_id)
        check = self.check_capacity(session, payload.user_id, draft)
        self._enforce(check, "create", payload.user_id, project_id)

        allocation = ResourceAllocationModel(
            id=str(uuid4()),
            project_id=project_id,
            user_id=payload.user_id,
            allocated_hours_per_week=draft.allocated_hours_per_week,
            start_date=draft.start_date,
            end_date=draft.end_date,
            notes=draft.notes,
        )
        created = self.allocation_repo.create(session, allocation)
        session.commit()
        session.refresh(created)
        return created

    def update_allocation(
        self,
        session: Session,
        project_id: str,
        allocation_id: str,
        patch: AllocationPatch,
    ) -> ResourceAllocationModel:
        """
        Apply a partial update. Capacity is re-checked against the user's
        other allocations only when hours or dates actually change.
        """
        allocation = self.get_allocation(session, project_id, allocation_id)
        changes = patch.changes()
        if not changes:
            return allocation

        self.lock_user(session, allocation.user_id)
        current = AllocationDraft.from_model(allocation)
        merged = apply_patch(current, patch)

        if merged.capacity_changed(current):
            check = self.check_capacity(
                session, allocation.user_id, merged, exclude_allocation_id=allocation.id
            )
            self._enforce(check, "update", allocation.user_id, project_id)

        updated = self.allocation_repo.update(
            session,
            allocation.id,
            {key: getattr(merged, key) for key in changes},
        )
        session.commit()
        session.refresh(updated)
        return updated

    def delete_allocation(self, session: Session, project_id: str, allocation_id: str) -> bool:
        allocation = self.get_allocation(session, project_id, allocation_id)
        self.allocation_repo.delete(session, allocation.id)
        session.commit()
        logger.info("allocation.deleted", allocation_id=allocation_id, project_id=project_id)
        return True


class CapacityService:
    """Reads and maintains the active weekly capacity of users."""

    def __init__(self, capacity_repo: CapacityRepository, settings: Optional[Settings] = None):
        self.capacity_repo = capacity_repo
        self.settings = settings or get_settings()

    def get_capacity(self, session: Session, user_id: str) -> CapacityResponse:
        capacity = self.capacity_repo.get_active(session, user_id)
        if capacity is None:
            default = float(self.settings.DEFAULT_MAX_HOURS_PER_WEEK)
            return CapacityResponse(
                user_id=user_id,
                max_hours_per_week=default,
                default_hours_per_week=default,
                is_default=True,
            )
        return CapacityResponse(
            user_id=user_id,
            max_hours_per_week=float(capacity.max_hours_per_week),
            default_hours_per_week=float(capacity.default_hours_per_week),
        )

    def set_capacity(self, session: Session, user_id: str, update: CapacityUpdate) -> CapacityResponse:
        """
        Upsert the active capacity record. Existing allocations are left
        untouched even if they now exceed the new maximum.
        """
        changes = update.model_dump(exclude_unset=True, exclude_none=True)
        if not changes:
            raise ValidationError("No fields to update")

        values = {}
        for field_name, value in changes.items():
            hours = to_hours(value, field_name)
            if hours <= 0:
                raise ValidationError(f"{field_name} must be greater than 0")
            values[field_name] = hours

        self.capacity_repo.upsert_active(session, user_id, **values)
        session.commit()
        logger.info("capacity.updated", user_id=user_id, **{k: format_hours(v) for k, v in values.items()})
        return self.get_capacity(session, user_id)
