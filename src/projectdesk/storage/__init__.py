"""ProjectDesk Storage Layer - Postgres adapter, models and repositories."""

from .base import StorageAdapter
from .postgres_adapter import PostgresAdapter, PostgresConfig
from .models import (
    Base,
    OrganizationModel,
    UserModel,
    ProjectModel,
    ProjectMemberModel,
    UserCapacityModel,
    ResourceAllocationModel,
)

__all__ = [
    "StorageAdapter",
    "PostgresAdapter",
    "PostgresConfig",
    "Base",
    "OrganizationModel",
    "UserModel",
    "ProjectModel",
    "ProjectMemberModel",
    "UserCapacityModel",
    "ResourceAllocationModel",
]
