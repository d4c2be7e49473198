from typing import List, Optional, Dict, Any
from sqlalchemy.orm import Session
from sqlalchemy import select

from projectdesk.storage.models import ProjectModel, ProjectMemberModel
from .base import BaseRepository

class ProjectRepository(BaseRepository[ProjectModel]):
    """Projects and their membership."""

    def create(self, session: Session, entity: ProjectModel) -> ProjectModel:
        session.add(entity)
        session.flush()
        return entity

    def get(self, session: Session, id: str) -> Optional[ProjectModel]:
        return session.get(ProjectModel, id)

    def update(self, session: Session, id: str, updates: Dict[str, Any]) -> Optional[ProjectModel]:
        project = self.get(session, id)
        if not project:
            return None

        for key, value in updates.items():
            if hasattr(project, key):
                setattr(project, key, value)

        session.flush()
        return project

    def delete(self, session: Session, id: str) -> bool:
        project = self.get(session, id)
        if not project:
            return False
        session.delete(project)
        session.flush()
        return True

    def list(self, session: Session, limit: int = 100, offset: int = 0) -> List[ProjectModel]:
        stmt = select(ProjectModel).limit(limit).offset(offset)
        return list(session.scalars(stmt).all())

    # --- Members ---

    def add_member(self, session: Session, member: ProjectMemberModel) -> ProjectMemberModel:
        session.add(member)
        session.flush()
        return member

    def list_member_ids(self, session: Session, project_id: str) -> List[str]:
        stmt = select(ProjectMemberModel.user_id).where(ProjectMemberModel.project_id == project_id)
        return list(session.scalars(stmt).all())
