"""
Router for per-user capacity and workload.
"""

from datetime import date
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from projectdesk.access_control.policy import AccessPolicy, user_resource
from projectdesk.allocations import schemas
from projectdesk.allocations.service import CapacityService
from projectdesk.allocations.workload import WorkloadService
from projectdesk.api.dependencies import (
    get_access_policy,
    get_capacity_service,
    get_db,
    get_workload_service,
)
from projectdesk.api.dependencies_auth import get_user_repository, require_current_user
from projectdesk.api.errors import internal_error, to_http_exception
from projectdesk.errors import NotFoundError, ProjectDeskError
from projectdesk.storage.models import UserModel
from projectdesk.storage.repositories import UserRepository

router = APIRouter()


def _load_user(user_repo: UserRepository, session: Session, user_id: str) -> UserModel:
    user = user_repo.get(session, user_id)
    if not user:
        raise NotFoundError("User not found")
    return user


@router.get("/{user_id}/capacity", response_model=schemas.CapacityResponse)
def get_user_capacity(
    user_id: str,
    service: Annotated[CapacityService, Depends(get_capacity_service)],
    user_repo: Annotated[UserRepository, Depends(get_user_repository)],
    policy: Annotated[AccessPolicy, Depends(get_access_policy)],
    session: Annotated[Session, Depends(get_db)],
    current_user: Annotated[UserModel, Depends(require_current_user)],
):
    """
    Active weekly capacity of a user, or the defaults when none is recorded.
    """
    try:
        target = _load_user(user_repo, session, user_id)
        policy.authorize(current_user, user_resource(target), "capacity.read", "You do not have access to this user")
        return service.get_capacity(session, user_id)
    except ProjectDeskError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise internal_error("Failed to load user capacity", e)


@router.put("/{user_id}/capacity", response_model=schemas.CapacityResponse)
def update_user_capacity(
    user_id: str,
    update: schemas.CapacityUpdate,
    service: Annotated[CapacityService, Depends(get_capacity_service)],
    user_repo: Annotated[UserRepository, Depends(get_user_repository)],
    policy: Annotated[AccessPolicy, Depends(get_access_policy)],
    session: Annotated[Session, Depends(get_db)],
    current_user: Annotated[UserModel, Depends(require_current_user)],
):
    """
    Set the user's weekly maximum and/or default hours.
    """
    try:
        target = _load_user(user_repo, session, user_id)
        policy.authorize(
            current_user, user_resource(target), "capacity.write",
            "Only admins or PMs can change user capacity",
        )
        return service.set_capacity(session, user_id, update)
    except ProjectDeskError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise internal_error("Failed to update user capacity", e)


@router.get("/{user_id}/workload", response_model=schemas.WorkloadSummary)
def get_user_workload(
    user_id: str,
    workload: Annotated[WorkloadService, Depends(get_workload_service)],
    user_repo: Annotated[UserRepository, Depends(get_user_repository)],
    policy: Annotated[AccessPolicy, Depends(get_access_policy)],
    session: Annotated[Session, Depends(get_db)],
    current_user: Annotated[UserModel, Depends(require_current_user)],
    start_date: Optional[date] = Query(None, description="Window start (default: today)"),
    end_date: Optional[date] = Query(None, description="Window end (default: today + 30 days)"),
):
    """
    Hours committed across all projects over the window, against capacity.
    """
    try:
        target = _load_user(user_repo, session, user_id)
        policy.authorize(current_user, user_resource(target), "capacity.read", "You do not have access to this user")
        window = workload.resolve_window(start_date, end_date)
        return workload.summarize(session, user_id, window)
    except ProjectDeskError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise internal_error("Failed to load user workload", e)
