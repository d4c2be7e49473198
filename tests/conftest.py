"""
Pytest configuration and shared fixtures.
"""

import os
import sys
from datetime import date
from decimal import Decimal
from types import SimpleNamespace
from typing import Optional
from uuid import uuid4

import pytest

sys.path.append(os.path.join(os.getcwd(), "src"))

# Settings are read at import time, so the environment is set before any
# projectdesk import below.
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("ALLOCATION_ADVISORY_LOCKS", "true")

from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from projectdesk.storage.models import (  # noqa: E402
    Base,
    OrganizationModel,
    ProjectMemberModel,
    ProjectModel,
    ResourceAllocationModel,
    UserCapacityModel,
    UserModel,
)


# Use in-memory SQLite for unit testing without an external DB
@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def org_data(session):
    """
    Two organizations, a project in the first one and a cast of users:

    - owner: plain member who owns proj_1
    - pm: project manager in org_1
    - dev: member of proj_1, the usual allocation target
    - root: super admin in org_2
    - outsider: project manager in org_2
    - inactive: deactivated admin in org_1
    """
    acme = OrganizationModel(id="org_1", name="Acme")
    globex = OrganizationModel(id="org_2", name="Globex")

    owner = UserModel(id="u_owner", email="owner@acme.test", name="Olivia Owner", role="member", organization_id="org_1")
    pm = UserModel(id="u_pm", email="pm@acme.test", name="Pat Manager", role="pm", organization_id="org_1")
    dev = UserModel(id="u_dev", email="dev@acme.test", name="Dana Dev", role="member", organization_id="org_1")
    root = UserModel(
        id="u_root", email="root@globex.test", name="Root", role="admin",
        organization_id="org_2", is_super_admin=True,
    )
    outsider = UserModel(id="u_out", email="pm@globex.test", name="Other PM", role="pm", organization_id="org_2")
    inactive = UserModel(
        id="u_gone", email="gone@acme.test", name="Former Admin", role="admin",
        organization_id="org_1", is_active=False,
    )

    project = ProjectModel(id="proj_1", name="Website Relaunch", organization_id="org_1", owner_id="u_owner")
    other_project = ProjectModel(id="proj_2", name="Mobile App", organization_id="org_1", owner_id="u_owner")

    session.add_all([acme, globex, owner, pm, dev, root, outsider, inactive])
    session.flush()
    session.add_all([project, other_project])
    session.flush()
    session.add(ProjectMemberModel(id="pm_1", project_id="proj_1", user_id="u_dev", role="member"))
    session.commit()

    return SimpleNamespace(
        owner=owner, pm=pm, dev=dev, root=root, outsider=outsider, inactive=inactive,
        project=project, other_project=other_project,
    )


@pytest.fixture
def make_allocation(session):
    """Insert an allocation directly, bypassing the capacity check."""

    def _make(
        user_id: str,
        hours,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        project_id: str = "proj_1",
        notes: Optional[str] = None,
    ) -> ResourceAllocationModel:
        allocation = ResourceAllocationModel(
            id=str(uuid4()),
            project_id=project_id,
            user_id=user_id,
            allocated_hours_per_week=Decimal(str(hours)),
            start_date=start_date,
            end_date=end_date,
            notes=notes,
        )
        session.add(allocation)
        session.commit()
        return allocation

    return _make


@pytest.fixture
def set_capacity(session):
    def _set(user_id: str, max_hours, default_hours=None) -> UserCapacityModel:
        capacity = UserCapacityModel(
            id=str(uuid4()),
            user_id=user_id,
            max_hours_per_week=Decimal(str(max_hours)),
            default_hours_per_week=Decimal(str(default_hours if default_hours is not None else max_hours)),
            is_active=True,
        )
        session.add(capacity)
        session.commit()
        return capacity

    return _set
