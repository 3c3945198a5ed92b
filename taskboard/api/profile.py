"""Profile API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from taskboard.api.dependencies import get_current_user_id, get_user_store
from taskboard.data.records import UserProfile
from taskboard.data.users import UserStore
from taskboard.schemas.profile import PasswordChange, ProfileUpdate
from taskboard.services.auth import get_password_hash, verify_password

router = APIRouter(prefix="/api/profile", tags=["profile"])


@router.get("", response_model=UserProfile)
async def get_profile(
    user_id: Annotated[str, Depends(get_current_user_id)],
    users: Annotated[UserStore, Depends(get_user_store)],
):
    """Get the current user's profile."""
    user = users.find_by_id(user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


@router.put("", response_model=UserProfile)
async def update_profile(
    profile_data: ProfileUpdate,
    user_id: Annotated[str, Depends(get_current_user_id)],
    users: Annotated[UserStore, Depends(get_user_store)],
):
    """Update profile fields; empty strings clear a field."""
    changes = {
        field: value or None for field, value in profile_data.model_dump(exclude_unset=True).items()
    }
    user = users.update_profile(user_id, changes)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


@router.post("/change-password")
async def change_password(
    password_data: PasswordChange,
    user_id: Annotated[str, Depends(get_current_user_id)],
    users: Annotated[UserStore, Depends(get_user_store)],
):
    """Change the current user's password."""
    user = users.find_credentials_by_id(user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    if not verify_password(password_data.current_password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Current password is incorrect",
        )

    if not users.update_password(user_id, get_password_hash(password_data.new_password)):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    return {"message": "Password changed successfully"}
