"""
Router for project resource allocations.

Endpoints:
- GET    /projects/{project_id}/resource-allocations
- POST   /projects/{project_id}/resource-allocations
- PUT    /projects/{project_id}/resource-allocations/{allocation_id}
- DELETE /projects/{project_id}/resource-allocations/{allocation_id}
- GET    /projects/{project_id}/resources - allocations plus member workloads
"""

from datetime import date
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from projectdesk.access_control.policy import AccessPolicy, project_resource
from projectdesk.allocations import schemas
from projectdesk.allocations.service import AllocationService
from projectdesk.allocations.workload import WorkloadService
from projectdesk.api.dependencies import (
    get_access_policy,
    get_allocation_service,
    get_db,
    get_workload_service,
)
from projectdesk.api.dependencies_auth import require_current_user
from projectdesk.api.errors import internal_error, to_http_exception
from projectdesk.errors import ProjectDeskError, ValidationError
from projectdesk.storage.models import ProjectModel, UserModel

router = APIRouter()

WRITE_DENIED = "Only project owners, admins, or PMs can {verb} resource allocations"


def _authorize(policy: AccessPolicy, user: UserModel, project: ProjectModel, action: str, message: str) -> None:
    member_ids = [m.user_id for m in project.members]
    policy.authorize(user, project_resource(project, member_ids), action, message)


def _require_organization(user: UserModel) -> None:
    if not user.organization_id:
        raise ValidationError("User is not assigned to an organization")


@router.get("/{project_id}/resource-allocations", response_model=schemas.AllocationListResponse)
def list_resource_allocations(
    project_id: str,
    service: Annotated[AllocationService, Depends(get_allocation_service)],
    policy: Annotated[AccessPolicy, Depends(get_access_policy)],
    session: Annotated[Session, Depends(get_db)],
    current_user: Annotated[UserModel, Depends(require_current_user)],
):
    """
    List a project's allocations, earliest start first.
    """
    try:
        project = service.get_project(session, project_id)
        _authorize(policy, current_user, project, "allocation.read", "You do not have access to this project")
        allocations = service.list_allocations(session, project_id)
        return schemas.AllocationListResponse(
            allocations=[schemas.AllocationResponse.model_validate(a) for a in allocations]
        )
    except ProjectDeskError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise internal_error("Failed to load resource allocations", e)


@router.post(
    "/{project_id}/resource-allocations",
    response_model=schemas.AllocationResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_resource_allocation(
    project_id: str,
    payload: schemas.AllocationCreate,
    service: Annotated[AllocationService, Depends(get_allocation_service)],
    policy: Annotated[AccessPolicy, Depends(get_access_policy)],
    session: Annotated[Session, Depends(get_db)],
    current_user: Annotated[UserModel, Depends(require_current_user)],
):
    """
    Allocate a user to the project. Rejected with 400 when the user's
    overlapping allocations would exceed their weekly capacity.
    """
    try:
        _require_organization(current_user)
        project = service.get_project(session, project_id)
        _authorize(policy, current_user, project, "allocation.write", WRITE_DENIED.format(verb="create"))
        created = service.create_allocation(session, project_id, payload)
        return schemas.AllocationResponse.model_validate(created)
    except ProjectDeskError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise internal_error("Failed to create resource allocation", e)


@router.put("/{project_id}/resource-allocations/{allocation_id}", response_model=schemas.AllocationResponse)
def update_resource_allocation(
    project_id: str,
    allocation_id: str,
    patch: schemas.AllocationPatch,
    service: Annotated[AllocationService, Depends(get_allocation_service)],
    policy: Annotated[AccessPolicy, Depends(get_access_policy)],
    session: Annotated[Session, Depends(get_db)],
    current_user: Annotated[UserModel, Depends(require_current_user)],
):
    """
    Update hours, dates or notes. Only supplied fields change.
    """
    try:
        _require_organization(current_user)
        project = service.get_project(session, project_id)
        _authorize(policy, current_user, project, "allocation.write", WRITE_DENIED.format(verb="update"))
        updated = service.update_allocation(session, project_id, allocation_id, patch)
        return schemas.AllocationResponse.model_validate(updated)
    except ProjectDeskError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise internal_error("Failed to update resource allocation", e)


@router.delete("/{project_id}/resource-allocations/{allocation_id}", response_model=schemas.DeleteResponse)
def delete_resource_allocation(
    project_id: str,
    allocation_id: str,
    service: Annotated[AllocationService, Depends(get_allocation_service)],
    policy: Annotated[AccessPolicy, Depends(get_access_policy)],
    session: Annotated[Session, Depends(get_db)],
    current_user: Annotated[UserModel, Depends(require_current_user)],
):
    """
    Delete an allocation. Never capacity-checked.
    """
    try:
        project = service.get_project(session, project_id)
        _authorize(policy, current_user, project, "allocation.write", WRITE_DENIED.format(verb="delete"))
        service.delete_allocation(session, project_id, allocation_id)
        return schemas.DeleteResponse(success=True)
    except ProjectDeskError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise internal_error("Failed to delete resource allocation", e)


@router.get("/{project_id}/resources", response_model=schemas.ProjectResourcesResponse)
def get_project_resources(
    project_id: str,
    service: Annotated[AllocationService, Depends(get_allocation_service)],
    workload: Annotated[WorkloadService, Depends(get_workload_service)],
    policy: Annotated[AccessPolicy, Depends(get_access_policy)],
    session: Annotated[Session, Depends(get_db)],
    current_user: Annotated[UserModel, Depends(require_current_user)],
    start_date: Optional[date] = Query(None, description="Window start (default: today)"),
    end_date: Optional[date] = Query(None, description="Window end (default: today + 30 days)"),
):
    """
    Allocations of the project plus a workload summary for each member and
    allocated user, in one call.
    """
    try:
        project = service.get_project(session, project_id)
        _authorize(policy, current_user, project, "allocation.read", "You do not have access to this project")
        window = workload.resolve_window(start_date, end_date)
        allocations = service.list_allocations(session, project_id)
        user_ids = workload.project_user_ids(session, project_id, allocations)
        return schemas.ProjectResourcesResponse(
            allocations=[schemas.AllocationResponse.model_validate(a) for a in allocations],
            workloads=workload.summarize_many(session, user_ids, window),
        )
    except ProjectDeskError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise internal_error("Failed to load project resources", e)
