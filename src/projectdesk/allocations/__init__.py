"""Resource allocation rules: overlap resolution, capacity validation, workload."""

from .overlap import DateRange, ranges_overlap, resolve_overlaps
from .capacity import CapacityCheck, evaluate_capacity, ensure_within_capacity

__all__ = [
    "DateRange",
    "ranges_overlap",
    "resolve_overlaps",
    "CapacityCheck",
    "evaluate_capacity",
    "ensure_within_capacity",
]
