from datetime import date
from types import SimpleNamespace

import pytest

from projectdesk.allocations.overlap import DateRange, ranges_overlap, resolve_overlaps


def alloc(id, start=None, end=None, hours=10):
    return SimpleNamespace(id=id, start_date=start, end_date=end, allocated_hours_per_week=hours)


Q1 = DateRange(date(2024, 1, 1), date(2024, 3, 31))


class TestRangesOverlap:

    @pytest.mark.parametrize("existing", [
        DateRange(None, None),
        DateRange(date(2030, 1, 1), None),
        DateRange(None, date(2000, 1, 1)),
    ])
    def test_open_ended_existing_always_overlaps(self, existing):
        assert ranges_overlap(Q1, existing)

    def test_open_ended_candidate_always_overlaps(self):
        assert ranges_overlap(DateRange(None, None), Q1)
        assert ranges_overlap(DateRange(date(2030, 1, 1), None), Q1)

    def test_adjacent_ranges_do_not_overlap(self):
        assert not ranges_overlap(DateRange(date(2024, 4, 1), date(2024, 6, 30)), Q1)

    def test_shared_boundary_day_overlaps(self):
        assert ranges_overlap(DateRange(date(2024, 3, 31), date(2024, 4, 30)), Q1)
        assert ranges_overlap(DateRange(date(2023, 12, 1), date(2024, 1, 1)), Q1)

    def test_containment_overlaps(self):
        assert ranges_overlap(DateRange(date(2024, 2, 1), date(2024, 2, 1)), Q1)
        assert ranges_overlap(DateRange(date(2023, 1, 1), date(2025, 1, 1)), Q1)

    def test_overlap_is_symmetric(self):
        later = DateRange(date(2024, 3, 15), date(2024, 5, 1))
        assert ranges_overlap(later, Q1) == ranges_overlap(Q1, later)


class TestDateRange:

    def test_is_open_ended(self):
        assert DateRange().is_open_ended
        assert DateRange(date(2024, 1, 1), None).is_open_ended
        assert not Q1.is_open_ended

    def test_is_ordered(self):
        assert Q1.is_ordered
        assert DateRange(date(2024, 1, 1), date(2024, 1, 1)).is_ordered
        assert DateRange(date(2024, 2, 1), None).is_ordered
        assert not DateRange(date(2024, 2, 1), date(2024, 1, 1)).is_ordered

    def test_of_reads_allocation_dates(self):
        assert DateRange.of(alloc("a", date(2024, 1, 1), date(2024, 3, 31))) == Q1


class TestResolveOverlaps:

    def test_filters_non_overlapping_and_keeps_order(self):
        allocations = [
            alloc("ongoing"),
            alloc("before", date(2023, 1, 1), date(2023, 12, 31)),
            alloc("inside", date(2024, 2, 1), date(2024, 2, 28)),
            alloc("after", date(2024, 4, 1), None),
        ]

        result = resolve_overlaps(Q1, allocations)

        assert [a.id for a in result] == ["ongoing", "inside", "after"]

    def test_excludes_the_edited_allocation(self):
        allocations = [alloc("self"), alloc("other")]

        result = resolve_overlaps(Q1, allocations, exclude_allocation_id="self")

        assert [a.id for a in result] == ["other"]

    def test_open_ended_candidate_matches_everything(self):
        allocations = [
            alloc("a", date(2020, 1, 1), date(2020, 1, 31)),
            alloc("b", date(2030, 1, 1), date(2030, 1, 31)),
        ]
        assert len(resolve_overlaps(DateRange(), allocations)) == 2

    def test_empty_input(self):
        assert resolve_overlaps(Q1, []) == []
