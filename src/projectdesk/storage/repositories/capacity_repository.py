from decimal import Decimal
from typing import List, Optional, Dict, Any
from uuid import uuid4
from sqlalchemy.orm import Session
from sqlalchemy import select

from projectdesk.storage.models import UserCapacityModel
from .base import BaseRepository

class CapacityRepository(BaseRepository[UserCapacityModel]):
    """Per-user weekly capacity records."""

    def create(self, session: Session, entity: UserCapacityModel) -> UserCapacityModel:
        session.add(entity)
        session.flush()
        return entity

    def get(self, session: Session, id: str) -> Optional[UserCapacityModel]:
        return session.get(UserCapacityModel, id)

    def update(self, session: Session, id: str, updates: Dict[str, Any]) -> Optional[UserCapacityModel]:
        capacity = self.get(session, id)
        if not capacity:
            return None

        for key, value in updates.items():
            if hasattr(capacity, key):
                setattr(capacity, key, value)

        session.flush()
        return capacity

    def delete(self, session: Session, id: str) -> bool:
        capacity = self.get(session, id)
        if not capacity:
            return False
        session.delete(capacity)
        session.flush()
        return True

    def list(self, session: Session, limit: int = 100, offset: int = 0) -> List[UserCapacityModel]:
        stmt = select(UserCapacityModel).limit(limit).offset(offset)
        return list(session.scalars(stmt).all())

    def get_active(self, session: Session, user_id: str) -> Optional[UserCapacityModel]:
        """Return the active capacity record for a user, if one exists."""
        stmt = (
            select(UserCapacityModel)
            .where(
                UserCapacityModel.user_id == user_id,
                UserCapacityModel.is_active == True,
            )
            .order_by(UserCapacityModel.created_at.desc())
        )
        return session.scalars(stmt).first()

    def upsert_active(
        self,
        session: Session,
        user_id: str,
        max_hours_per_week: Optional[Decimal] = None,
        default_hours_per_week: Optional[Decimal] = None,
    ) -> UserCapacityModel:
        """Update the active record in place, or create one from the supplied values."""
        capacity = self.get_active(session, user_id)
        if capacity is None:
            capacity = UserCapacityModel(
                id=str(uuid4()),
                user_id=user_id,
                max_hours_per_week=max_hours_per_week if max_hours_per_week is not None else Decimal("40"),
                default_hours_per_week=default_hours_per_week if default_hours_per_week is not None else Decimal("40"),
                is_active=True,
            )
            return self.create(session, capacity)

        if max_hours_per_week is not None:
            capacity.max_hours_per_week = max_hours_per_week
        if default_hours_per_week is not None:
            capacity.default_hours_per_week = default_hours_per_week
        session.flush()
        return capacity
