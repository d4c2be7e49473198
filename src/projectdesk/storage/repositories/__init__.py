from .base import BaseRepository
from .user_repository import UserRepository
from .project_repository import ProjectRepository
from .capacity_repository import CapacityRepository
from .allocation_repository import AllocationRepository

__all__ = [
    "BaseRepository",
    "UserRepository",
    "ProjectRepository",
    "CapacityRepository",
    "AllocationRepository",
]
