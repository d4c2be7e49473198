from typing import List, Optional, Dict, Any
from sqlalchemy.orm import Session
from sqlalchemy import select, or_, and_

from projectdesk.allocations.overlap import DateRange
from projectdesk.storage.models import ResourceAllocationModel
from .base import BaseRepository

class AllocationRepository(BaseRepository[ResourceAllocationModel]):
    """Repository for project resource allocations."""

    def create(self, session: Session, entity: ResourceAllocationModel) -> ResourceAllocationModel:
        session.add(entity)
        session.flush()
        return entity

    def get(self, session: Session, id: str) -> Optional[ResourceAllocationModel]:
        return session.get(ResourceAllocationModel, id)

    def update(self, session: Session, id: str, updates: Dict[str, Any]) -> Optional[ResourceAllocationModel]:
        allocation = self.get(session, id)
        if not allocation:
            return None

        for key, value in updates.items():
            if hasattr(allocation, key):
                setattr(allocation, key, value)

        session.flush()
        return allocation

    def delete(self, session: Session, id: str) -> bool:
        allocation = self.get(session, id)
        if not allocation:
            return False
        session.delete(allocation)
        session.flush()
        return True

    def list(self, session: Session, limit: int = 100, offset: int = 0) -> List[ResourceAllocationModel]:
        stmt = select(ResourceAllocationModel).limit(limit).offset(offset)
        return list(session.scalars(stmt).all())

    # --- Project scoped ---

    def get_in_project(self, session: Session, project_id: str, allocation_id: str) -> Optional[ResourceAllocationModel]:
        """Fetch an allocation only if it belongs to the given project."""
        stmt = select(ResourceAllocationModel).where(
            ResourceAllocationModel.id == allocation_id,
            ResourceAllocationModel.project_id == project_id,
        )
        return session.scalars(stmt).first()

    def list_by_project(self, session: Session, project_id: str) -> List[ResourceAllocationModel]:
        """All allocations of a project, earliest start first, ongoing rows last."""
        stmt = (
            select(ResourceAllocationModel)
            .where(ResourceAllocationModel.project_id == project_id)
            .order_by(
                ResourceAllocationModel.start_date.asc().nulls_last(),
                ResourceAllocationModel.created_at.asc(),
            )
        )
        return list(session.scalars(stmt).unique().all())

    # --- User scoped ---

    def list_for_user(
        self,
        session: Session,
        user_id: str,
        period: Optional[DateRange] = None,
        exclude_allocation_id: Optional[str] = None,
    ) -> List[ResourceAllocationModel]:
        """
        Allocations of a user that may overlap ``period``.

        Ongoing rows are always returned. Dated rows are narrowed to the
        period only when the period itself is dated; an open-ended period
        overlaps every row. Callers still apply the overlap rule in memory.
        """
        stmt = select(ResourceAllocationModel).where(ResourceAllocationModel.user_id == user_id)

        if exclude_allocation_id:
            stmt = stmt.where(ResourceAllocationModel.id != exclude_allocation_id)

        if period is not None and not period.is_open_ended:
            stmt = stmt.where(
                or_(
                    ResourceAllocationModel.start_date.is_(None),
                    ResourceAllocationModel.end_date.is_(None),
                    and_(
                        ResourceAllocationModel.start_date <= period.end,
                        ResourceAllocationModel.end_date >= period.start,
                    ),
                )
            )

        return list(session.scalars(stmt).unique().all())
