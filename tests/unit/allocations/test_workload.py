from datetime import date, timedelta

import pytest

from projectdesk.allocations.overlap import DateRange
from projectdesk.allocations.service import AllocationService
from projectdesk.allocations.workload import WorkloadService, default_window
from projectdesk.errors import ValidationError
from projectdesk.platform.config import Settings
from projectdesk.storage.repositories import (
    AllocationRepository,
    CapacityRepository,
    ProjectRepository,
    UserRepository,
)

FEBRUARY = DateRange(date(2024, 2, 1), date(2024, 2, 29))


@pytest.fixture
def workload():
    allocations = AllocationService(
        AllocationRepository(), CapacityRepository(), UserRepository(), ProjectRepository(),
        settings=Settings(WORKLOAD_WINDOW_DAYS=14),
    )
    return WorkloadService(allocations)


def test_default_window():
    window = default_window(30, today=date(2024, 1, 1))
    assert window == DateRange(date(2024, 1, 1), date(2024, 1, 31))


def test_resolve_window_fills_missing_bounds(workload):
    window = workload.resolve_window(None, None)
    assert window.end - window.start == timedelta(days=14)

    window = workload.resolve_window(date(2024, 1, 1), date(2024, 1, 7))
    assert window == DateRange(date(2024, 1, 1), date(2024, 1, 7))


def test_resolve_window_rejects_reversed_bounds(workload):
    with pytest.raises(ValidationError):
        workload.resolve_window(date(2024, 2, 1), date(2024, 1, 1))


def test_summarize_counts_ongoing_and_overlapping(session, workload, org_data, make_allocation):
    make_allocation("u_dev", 10)
    make_allocation("u_dev", 20, date(2024, 1, 1), date(2024, 3, 31), project_id="proj_2")
    make_allocation("u_dev", 5, date(2025, 1, 1), date(2025, 1, 31))

    summary = workload.summarize(session, "u_dev", FEBRUARY)

    assert summary.total_hours == 40.0
    assert summary.allocated_hours == 30.0
    assert summary.available_hours == 10.0
    assert summary.projects_count == 2
    assert not summary.is_over_allocated
    assert {p.project_name for p in summary.projects} == {"Website Relaunch", "Mobile App"}


def test_summarize_flags_over_allocation(session, workload, org_data, make_allocation, set_capacity):
    set_capacity("u_dev", 20)
    make_allocation("u_dev", 15)
    make_allocation("u_dev", 10)

    summary = workload.summarize(session, "u_dev", FEBRUARY)

    assert summary.allocated_hours == 25.0
    assert summary.available_hours == 0.0
    assert summary.projects_count == 1
    assert summary.is_over_allocated


def test_summarize_user_without_allocations(session, workload, org_data):
    summary = workload.summarize(session, "u_pm", FEBRUARY)

    assert summary.allocated_hours == 0.0
    assert summary.available_hours == 40.0
    assert summary.projects == []


def test_project_user_ids_include_members_and_allocated(session, workload, org_data, make_allocation):
    make_allocation("u_pm", 5)
    allocations = workload.allocations.list_allocations(session, "proj_1")

    assert workload.project_user_ids(session, "proj_1", allocations) == ["u_dev", "u_pm"]


def test_summarize_many_is_sorted_and_unique(session, workload, org_data):
    summaries = workload.summarize_many(session, ["u_pm", "u_dev", "u_pm"], FEBRUARY)
    assert [s.user_id for s in summaries] == ["u_dev", "u_pm"]
