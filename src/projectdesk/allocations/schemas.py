from datetime import date, datetime
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value

# --- Users ---

class UserSummary(BaseModel):
    id: str
    name: Optional[str] = None
    email: str
    avatar_url: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

# --- Allocations ---

class AllocationCreate(BaseModel):
    # Required fields are checked by the service so a missing value is a 400
    user_id: Optional[str] = Field(None, description="User being allocated")
    allocated_hours_per_week: Optional[float] = Field(None, description="Hours per week, must be > 0")
    start_date: Optional[date] = Field(None, description="Omit for an ongoing allocation")
    end_date: Optional[date] = Field(None, description="Omit for an ongoing allocation")
    notes: Optional[str] = None

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def blank_dates_to_none(cls, value: Any) -> Any:
        return _blank_to_none(value)


class AllocationPatch(BaseModel):
    """
    Partial update. Only fields present in the request body are applied;
    an explicit null clears a date or the notes.
    """
    allocated_hours_per_week: Optional[float] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    notes: Optional[str] = None

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def blank_dates_to_none(cls, value: Any) -> Any:
        return _blank_to_none(value)

    def changes(self) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class AllocationResponse(BaseModel):
    id: str
    project_id: str
    user_id: str
    allocated_hours_per_week: float
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    user: Optional[UserSummary] = None

    model_config = ConfigDict(from_attributes=True)


class AllocationListResponse(BaseModel):
    allocations: List[AllocationResponse]


class DeleteResponse(BaseModel):
    success: bool = True

# --- Capacity ---

class CapacityUpdate(BaseModel):
    max_hours_per_week: Optional[float] = None
    default_hours_per_week: Optional[float] = None


class CapacityResponse(BaseModel):
    user_id: str
    max_hours_per_week: float
    default_hours_per_week: float
    is_default: bool = Field(False, description="True when no capacity record exists")

# --- Workload ---

class ProjectWorkload(BaseModel):
    project_id: str
    project_name: str
    allocated_hours_per_week: float
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class WorkloadSummary(BaseModel):
    user_id: str
    start_date: date
    end_date: date
    total_hours: float
    allocated_hours: float
    available_hours: float
    projects_count: int
    is_over_allocated: bool
    projects: List[ProjectWorkload] = Field(default_factory=list)


class ProjectResourcesResponse(BaseModel):
    allocations: List[AllocationResponse]
    workloads: List[WorkloadSummary]
