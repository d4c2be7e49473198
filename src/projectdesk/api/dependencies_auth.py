from typing import Annotated, Optional
from fastapi import Depends, HTTPException, status, Header
from sqlalchemy.orm import Session

from projectdesk.api.database import get_db
from projectdesk.storage.models import UserModel
from projectdesk.storage.repositories import UserRepository

# Sessions are issued by the external auth provider; the gateway forwards the
# resolved user id in this header.
USER_ID_HEADER = "X-User-ID"

def get_user_repository() -> UserRepository:
    return UserRepository()

def get_current_user(
    x_user_id: Annotated[Optional[str], Header(alias=USER_ID_HEADER)] = None,
    db: Session = Depends(get_db),
    user_repo: UserRepository = Depends(get_user_repository)
) -> Optional[UserModel]:
    """
    Dependency to retrieve the current user based on the X-User-ID header.
    Returns None when the header is absent.
    """
    if not x_user_id:
        return None

    user = user_repo.get(db, x_user_id)
    if not user or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid User ID"
        )
    return user

def require_current_user(
    user: Annotated[Optional[UserModel], Depends(get_current_user)]
) -> UserModel:
    """Enforce that a user is authenticated."""
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required"
        )
    return user
