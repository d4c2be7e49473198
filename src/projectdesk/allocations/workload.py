"""
Workload summaries: how much of a user's weekly capacity is committed over a
window, and to which projects.
"""

from datetime import date, timedelta
from decimal import Decimal
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from projectdesk.allocations.capacity import to_hours
from projectdesk.allocations.overlap import DateRange, resolve_overlaps
from projectdesk.allocations.schemas import ProjectWorkload, WorkloadSummary
from projectdesk.allocations.service import AllocationService
from projectdesk.errors import ValidationError


def default_window(days: int, today: Optional[date] = None) -> DateRange:
    start = today or date.today()
    return DateRange(start, start + timedelta(days=days))


class WorkloadService:
    """Builds workload summaries on top of AllocationService's lookups."""

    def __init__(self, allocations: AllocationService):
        self.allocations = allocations

    def resolve_window(self, start_date: Optional[date], end_date: Optional[date]) -> DateRange:
        window = default_window(self.allocations.settings.WORKLOAD_WINDOW_DAYS)
        resolved = DateRange(start_date or window.start, end_date or window.end)
        if not resolved.is_ordered:
            raise ValidationError("end_date must be on or after start_date")
        return resolved

    def summarize(self, session: Session, user_id: str, window: DateRange) -> WorkloadSummary:
        """
        Sum the user's allocations overlapping ``window`` against capacity.

        Ongoing allocations always count, as they do for capacity checks.
        """
        candidates = self.allocations.allocation_repo.list_for_user(session, user_id, period=window)
        overlapping = resolve_overlaps(window, candidates)
        total = self.allocations.max_hours_for(session, user_id)
        allocated = sum((to_hours(a.allocated_hours_per_week) for a in overlapping), Decimal("0"))

        projects = [
            ProjectWorkload(
                project_id=a.project_id,
                project_name=a.project.name if a.project else "Unknown Project",
                allocated_hours_per_week=float(a.allocated_hours_per_week),
                start_date=a.start_date,
                end_date=a.end_date,
            )
            for a in overlapping
        ]

        return WorkloadSummary(
            user_id=user_id,
            start_date=window.start,
            end_date=window.end,
            total_hours=float(total),
            allocated_hours=float(allocated),
            available_hours=float(max(total - allocated, Decimal("0"))),
            projects_count=len({a.project_id for a in overlapping}),
            is_over_allocated=allocated > total,
            projects=projects,
        )

    def summarize_many(self, session: Session, user_ids: Iterable[str], window: DateRange) -> List[WorkloadSummary]:
        return [self.summarize(session, user_id, window) for user_id in sorted(set(user_ids))]

    def project_user_ids(self, session: Session, project_id: str, allocations: Iterable) -> List[str]:
        """Members of the project plus everyone allocated to it."""
        ids = set(self.allocations.project_repo.list_member_ids(session, project_id))
        ids.update(a.user_id for a in allocations)
        return sorted(ids)
