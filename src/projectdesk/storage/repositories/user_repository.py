from typing import List, Optional
from sqlalchemy.orm import Session
from sqlalchemy import select

from projectdesk.storage.models import UserModel
from .base import BaseRepository

class UserRepository(BaseRepository[UserModel]):

    def create(self, session: Session, entity: UserModel) -> UserModel:
        session.add(entity)
        session.flush()
        return entity

    def get(self, session: Session, id: str) -> Optional[UserModel]:
        return session.get(UserModel, id)

    def update(self, session: Session, id: str, updates: dict) -> Optional[UserModel]:
        user = self.get(session, id)
        if not user:
            return None

        for key, value in updates.items():
            setattr(user, key, value)

        session.flush()
        return user

    def delete(self, session: Session, id: str) -> bool:
        user = self.get(session, id)
        if not user:
            return False
        session.delete(user)
        session.flush()
        return True

    def list(self, session: Session, limit: int = 100, offset: int = 0) -> List[UserModel]:
        stmt = select(UserModel).limit(limit).offset(offset)
        return list(session.scalars(stmt).all())
