"""
Overlap Resolver

Decides which of a user's existing allocations share at least one day with a
candidate period. An allocation without a start or end date is ongoing and
overlaps everything; an ongoing candidate likewise overlaps every existing
allocation.

Usage:
    period = DateRange(date(2024, 3, 15), date(2024, 5, 1))
    overlapping = resolve_overlaps(period, user_allocations, exclude_allocation_id=alloc_id)
"""

from dataclasses import dataclass
from datetime import date
from typing import Any, Iterable, List, Optional


@dataclass(frozen=True)
class DateRange:
    """Inclusive calendar range; either bound may be missing."""
    start: Optional[date] = None
    end: Optional[date] = None

    @property
    def is_open_ended(self) -> bool:
        return self.start is None or self.end is None

    @property
    def is_ordered(self) -> bool:
        """False only when both bounds are set and end precedes start."""
        if self.start is None or self.end is None:
            return True
        return self.end >= self.start

    @classmethod
    def of(cls, allocation: Any) -> "DateRange":
        """Period of anything with start_date/end_date attributes."""
        return cls(allocation.start_date, allocation.end_date)


def ranges_overlap(candidate: DateRange, existing: DateRange) -> bool:
    """Two periods overlap unless one ends strictly before the other starts."""
    if existing.is_open_ended:
        return True
    if candidate.is_open_ended:
        return True
    return existing.start <= candidate.end and existing.end >= candidate.start


def resolve_overlaps(
    candidate: DateRange,
    allocations: Iterable[Any],
    exclude_allocation_id: Optional[str] = None,
) -> List[Any]:
    """
    Filter allocations down to those overlapping the candidate period.

    Args:
        candidate: Period of the new or edited allocation
        allocations: Existing allocations of the same user (id, start_date, end_date)
        exclude_allocation_id: Allocation being edited, never compared with itself

    Returns:
        Overlapping allocations in input order
    """
    return [
        allocation
        for allocation in allocations
        if allocation.id != exclude_allocation_id
        and ranges_overlap(candidate, DateRange.of(allocation))
    ]
