from typing import Annotated
from fastapi import Depends

from projectdesk.api.database import get_db, get_postgres_adapter, close_postgres_adapter
from projectdesk.access_control.policy import AccessPolicy
from projectdesk.allocations.service import AllocationService, CapacityService
from projectdesk.allocations.workload import WorkloadService
from projectdesk.platform.config import Settings, get_settings
from projectdesk.storage.repositories import (
    AllocationRepository,
    CapacityRepository,
    ProjectRepository,
    UserRepository,
)

__all__ = [
    "get_db",
    "get_postgres_adapter",
    "init_resources",
    "close_resources",
    "get_access_policy",
    "get_allocation_service",
    "get_capacity_service",
    "get_workload_service",
]


async def init_resources() -> None:
    """Initialize all resources (DB)."""
    adapter = get_postgres_adapter()
    adapter.connect()


async def close_resources() -> None:
    """Close all resources."""
    close_postgres_adapter()


def get_access_policy() -> AccessPolicy:
    return AccessPolicy()


def get_allocation_service(
    settings: Annotated[Settings, Depends(get_settings)],
) -> AllocationService:
    return AllocationService(
        allocation_repo=AllocationRepository(),
        capacity_repo=CapacityRepository(),
        user_repo=UserRepository(),
        project_repo=ProjectRepository(),
        settings=settings,
    )


def get_capacity_service(
    settings: Annotated[Settings, Depends(get_settings)],
) -> CapacityService:
    return CapacityService(CapacityRepository(), settings=settings)


def get_workload_service(
    allocations: Annotated[AllocationService, Depends(get_allocation_service)],
) -> WorkloadService:
    return WorkloadService(allocations)
