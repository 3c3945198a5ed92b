"""FastAPI dependencies for authentication and data access."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from taskboard.config import get_settings
from taskboard.data.direct import DirectConnector
from taskboard.data.records import UserProfile
from taskboard.data.tasks import TaskStore
from taskboard.data.users import UserStore
from taskboard.database import get_db
from taskboard.services.auth import decode_access_token

security = HTTPBearer()


def get_direct_connector(request: Request) -> DirectConnector:
    """Get the direct driver connector created at startup."""
    return request.app.state.direct_connector


def get_user_store(
    db: Annotated[Session, Depends(get_db)],
    connector: Annotated[DirectConnector, Depends(get_direct_connector)],
) -> UserStore:
    """Get user store for the current request."""
    return UserStore(db, connector, fallback_enabled=get_settings().direct_fallback_enabled)


def get_task_store(
    db: Annotated[Session, Depends(get_db)],
    connector: Annotated[DirectConnector, Depends(get_direct_connector)],
) -> TaskStore:
    """Get task store for the current request."""
    return TaskStore(db, connector, fallback_enabled=get_settings().direct_fallback_enabled)


def get_current_user_id(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(security)],
) -> str:
    """Get the authenticated user's ID from the JWT token."""
    payload = decode_access_token(credentials.credentials)

    if payload is None or payload.get("sub") is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return payload["sub"]


def get_current_user(
    user_id: Annotated[str, Depends(get_current_user_id)],
    users: Annotated[UserStore, Depends(get_user_store)],
) -> UserProfile:
    """Get the current authenticated user's profile."""
    user = users.find_by_id(user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user
