"""
Capacity Validator

Sums the hours of overlapping allocations plus the requested hours and compares
the total against the user's weekly maximum. Equality is accepted.

This is an API-level business rule; the database does not enforce it.
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Optional, Union

from projectdesk.errors import CapacityExceededError, ValidationError

DEFAULT_MAX_HOURS_PER_WEEK = Decimal("40")
# Hours in a week; any allocation or capacity above it is malformed
MAX_HOURS_PER_WEEK = Decimal("168")

_CENTS = Decimal("0.01")

Hours = Union[Decimal, float, int, str]


def to_hours(value: Optional[Hours], field: str = "allocated_hours_per_week") -> Decimal:
    """
    Coerce an hours value to a Decimal without rounding.

    Raises:
        ValidationError: not a number, more than two decimal places, or
            above MAX_HOURS_PER_WEEK
    """
    if value is None:
        raise ValidationError(f"{field} is required")
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be a number")
    try:
        # str() first so floats like 0.1 keep their printed value
        hours = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{field} must be a number")
    if not hours.is_finite():
        raise ValidationError(f"{field} must be a number")
    if hours != hours.quantize(_CENTS):
        raise ValidationError(f"{field} must have at most two decimal places")
    if hours > MAX_HOURS_PER_WEEK:
        raise ValidationError(f"{field} cannot exceed {format_hours(MAX_HOURS_PER_WEEK)} hours/week")
    return hours


def format_hours(value: Decimal) -> str:
    """Render hours without trailing zeros: 40.00 -> '40', 12.50 -> '12.5'."""
    text = format(value.quantize(_CENTS), "f")
    return text.rstrip("0").rstrip(".")


@dataclass(frozen=True)
class CapacityCheck:
    """Outcome of a capacity evaluation."""
    max_hours: Decimal
    existing_hours: Decimal
    requested_hours: Decimal

    @property
    def total_hours(self) -> Decimal:
        return self.existing_hours + self.requested_hours

    @property
    def accepted(self) -> bool:
        return self.total_hours <= self.max_hours

    @property
    def available_hours(self) -> Decimal:
        """Hours still free before the request is applied."""
        return max(self.max_hours - self.existing_hours, Decimal("0"))

    def describe(self) -> str:
        return (
            f"Allocation would exceed user's maximum capacity of {format_hours(self.max_hours)} hours/week. "
            f"Current allocation: {format_hours(self.existing_hours)} hours/week, "
            f"Requested: {format_hours(self.requested_hours)} hours/week, "
            f"Total: {format_hours(self.total_hours)} hours/week"
        )


def evaluate_capacity(
    requested_hours: Hours,
    overlapping: Iterable[Any],
    max_hours: Optional[Hours] = None,
) -> CapacityCheck:
    """
    Compute the capacity arithmetic for a candidate allocation.

    Args:
        requested_hours: Hours per week of the new or edited allocation
        overlapping: Other allocations overlapping the candidate period
        max_hours: User's weekly maximum; defaults to 40 when unknown
    """
    ceiling = DEFAULT_MAX_HOURS_PER_WEEK if max_hours is None else to_hours(max_hours, "max_hours_per_week")
    existing = sum(
        (to_hours(a.allocated_hours_per_week) for a in overlapping),
        Decimal("0"),
    )
    return CapacityCheck(
        max_hours=ceiling,
        existing_hours=existing,
        requested_hours=to_hours(requested_hours),
    )


def ensure_within_capacity(check: CapacityCheck) -> CapacityCheck:
    """Raise CapacityExceededError when the check rejects."""
    if not check.accepted:
        raise CapacityExceededError(check.describe(), check=check)
    return check
