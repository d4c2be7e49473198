"""
Typed merge of an AllocationPatch onto the current allocation values.
"""

from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal
from typing import Optional

from projectdesk.allocations.capacity import to_hours
from projectdesk.allocations.overlap import DateRange
from projectdesk.allocations.schemas import AllocationPatch
from projectdesk.errors import ValidationError


@dataclass(frozen=True)
class AllocationDraft:
    """The values an allocation has, or would have after a patch."""
    allocated_hours_per_week: Decimal
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    notes: Optional[str] = None

    @property
    def period(self) -> DateRange:
        return DateRange(self.start_date, self.end_date)

    @classmethod
    def from_model(cls, allocation) -> "AllocationDraft":
        return cls(
            allocated_hours_per_week=to_hours(allocation.allocated_hours_per_week),
            start_date=allocation.start_date,
            end_date=allocation.end_date,
            notes=allocation.notes,
        )

    def capacity_changed(self, other: "AllocationDraft") -> bool:
        """True when hours or either date differ from ``other``."""
        return (
            self.allocated_hours_per_week != other.allocated_hours_per_week
            or self.start_date != other.start_date
            or self.end_date != other.end_date
        )


def apply_patch(current: AllocationDraft, patch: AllocationPatch) -> AllocationDraft:
    """
    Merge the fields set on ``patch`` into ``current``.

    Raises:
        ValidationError: hours not positive, or merged dates out of order
    """
    changes = patch.changes()
    if "allocated_hours_per_week" in changes:
        hours = to_hours(changes["allocated_hours_per_week"])
        if hours <= 0:
            raise ValidationError("allocated_hours_per_week must be greater than 0")
        changes["allocated_hours_per_week"] = hours

    merged = replace(current, **changes)
    if not merged.period.is_ordered:
        raise ValidationError("end_date must be on or after start_date")
    return merged
