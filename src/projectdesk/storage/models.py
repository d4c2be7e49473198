from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy import (
    String, Boolean, Text, Date, DateTime, Numeric, ForeignKey,
    CheckConstraint, Index, UniqueConstraint, func
)
from sqlalchemy.dialects.postgresql import TIMESTAMP

class Base(DeclarativeBase):
    pass

# Postgres TIMESTAMPTZ with a generic fallback (for SQLite tests)
TIMESTAMP_TYPE = DateTime(timezone=True).with_variant(TIMESTAMP(timezone=True), 'postgresql')
# Hours are decimal; two places is enough for quarter hours
HOURS_TYPE = Numeric(6, 2)

# --- Organizations ---

class OrganizationModel(Base):
    __tablename__ = "organizations"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    created_at: Mapped[datetime] = mapped_column(TIMESTAMP_TYPE, server_default=func.now())

# --- Users ---

class UserModel(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    email: Mapped[str] = mapped_column(String, unique=True, index=True, nullable=False)
    name: Mapped[Optional[str]] = mapped_column(String)
    avatar_url: Mapped[Optional[str]] = mapped_column(String)
    role: Mapped[str] = mapped_column(String, server_default='member')  # admin, pm, member
    organization_id: Mapped[Optional[str]] = mapped_column(ForeignKey("organizations.id"), index=True)
    is_super_admin: Mapped[bool] = mapped_column(Boolean, server_default='false', default=False)
    is_active: Mapped[bool] = mapped_column(Boolean, server_default='true', default=True)
    created_at: Mapped[datetime] = mapped_column(TIMESTAMP_TYPE, server_default=func.now())

# --- Projects ---

class ProjectModel(Base):
    __tablename__ = "projects"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    organization_id: Mapped[str] = mapped_column(ForeignKey("organizations.id"), nullable=False, index=True)
    owner_id: Mapped[Optional[str]] = mapped_column(ForeignKey("users.id"), index=True)
    created_at: Mapped[datetime] = mapped_column(TIMESTAMP_TYPE, server_default=func.now())

    members: Mapped[List["ProjectMemberModel"]] = relationship(
        back_populates="project",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

class ProjectMemberModel(Base):
    __tablename__ = "project_members"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    project_id: Mapped[str] = mapped_column(ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    role: Mapped[str] = mapped_column(String, server_default='member')
    created_at: Mapped[datetime] = mapped_column(TIMESTAMP_TYPE, server_default=func.now())

    project: Mapped["ProjectModel"] = relationship(back_populates="members")

    __table_args__ = (
        UniqueConstraint('project_id', 'user_id', name='uq_project_member'),
    )

# --- Capacity ---

class UserCapacityModel(Base):
    """Weekly hour ceiling for a user. Only the active row is consulted."""
    __tablename__ = "user_capacity"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    max_hours_per_week: Mapped[Decimal] = mapped_column(HOURS_TYPE, nullable=False, server_default='40')
    default_hours_per_week: Mapped[Decimal] = mapped_column(HOURS_TYPE, nullable=False, server_default='40')
    is_active: Mapped[bool] = mapped_column(Boolean, server_default='true', default=True)
    created_at: Mapped[datetime] = mapped_column(TIMESTAMP_TYPE, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(TIMESTAMP_TYPE, server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        CheckConstraint('max_hours_per_week > 0', name='ck_user_capacity_max_positive'),
    )

# --- Resource Allocations ---

class ResourceAllocationModel(Base):
    """
    Commitment of a user to a project for a number of hours per week.

    A missing start_date or end_date makes the allocation open-ended (ongoing).
    Multiple allocations for the same (project, user) pair are allowed and all
    count toward capacity.
    """
    __tablename__ = "project_member_allocations"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    project_id: Mapped[str] = mapped_column(ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    allocated_hours_per_week: Mapped[Decimal] = mapped_column(HOURS_TYPE, nullable=False)
    start_date: Mapped[Optional[date]] = mapped_column(Date)
    end_date: Mapped[Optional[date]] = mapped_column(Date)
    notes: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(TIMESTAMP_TYPE, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(TIMESTAMP_TYPE, server_default=func.now(), onupdate=func.now())

    # Relationships
    user: Mapped["UserModel"] = relationship(lazy="joined")
    project: Mapped["ProjectModel"] = relationship(lazy="joined")

    __table_args__ = (
        Index('ix_allocations_user_dates', 'user_id', 'start_date', 'end_date'),
        CheckConstraint('allocated_hours_per_week > 0', name='ck_allocations_hours_positive'),
        CheckConstraint(
            'start_date IS NULL OR end_date IS NULL OR end_date >= start_date',
            name='ck_allocations_dates_ordered',
        ),
    )
