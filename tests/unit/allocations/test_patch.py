from datetime import date
from decimal import Decimal
from types import SimpleNamespace

import pytest

from projectdesk.allocations.patch import AllocationDraft, apply_patch
from projectdesk.allocations.schemas import AllocationPatch
from projectdesk.errors import ValidationError


@pytest.fixture
def current():
    return AllocationDraft(
        allocated_hours_per_week=Decimal("10.00"),
        start_date=date(2024, 1, 1),
        end_date=date(2024, 3, 31),
        notes="Design phase",
    )


def test_only_supplied_fields_change(current):
    merged = apply_patch(current, AllocationPatch(notes="Build phase"))

    assert merged.notes == "Build phase"
    assert merged.allocated_hours_per_week == current.allocated_hours_per_week
    assert merged.start_date == current.start_date
    assert merged.end_date == current.end_date
    assert not merged.capacity_changed(current)


def test_explicit_null_clears_a_date(current):
    patch = AllocationPatch.model_validate({"end_date": None})

    merged = apply_patch(current, patch)

    assert merged.end_date is None
    assert merged.period.is_open_ended
    assert merged.capacity_changed(current)


def test_blank_date_string_clears_a_date(current):
    merged = apply_patch(current, AllocationPatch.model_validate({"start_date": ""}))
    assert merged.start_date is None


def test_hours_are_coerced_to_decimal(current):
    merged = apply_patch(current, AllocationPatch(allocated_hours_per_week=7.5))

    assert merged.allocated_hours_per_week == Decimal("7.50")
    assert merged.capacity_changed(current)


@pytest.mark.parametrize("hours", [0, -5])
def test_non_positive_hours_rejected(current, hours):
    with pytest.raises(ValidationError, match="greater than 0"):
        apply_patch(current, AllocationPatch(allocated_hours_per_week=hours))


def test_merged_dates_must_be_ordered(current):
    # Only the end moves, but it lands before the stored start
    with pytest.raises(ValidationError, match="end_date must be on or after start_date"):
        apply_patch(current, AllocationPatch(end_date=date(2023, 12, 31)))


def test_empty_patch_has_no_changes():
    assert AllocationPatch().changes() == {}


def test_draft_from_model():
    model = SimpleNamespace(
        allocated_hours_per_week=Decimal("12.5"),
        start_date=None,
        end_date=None,
        notes=None,
    )

    draft = AllocationDraft.from_model(model)

    assert draft.allocated_hours_per_week == Decimal("12.50")
    assert draft.period.is_open_ended


def test_sub_cent_hours_rejected(current):
    with pytest.raises(ValidationError, match="at most two decimal places"):
        apply_patch(current, AllocationPatch(allocated_hours_per_week=10.004))
