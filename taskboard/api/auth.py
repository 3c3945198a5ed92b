"""Authentication API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from taskboard.api.dependencies import get_current_user, get_user_store
from taskboard.data.records import UserProfile
from taskboard.data.users import UserStore
from taskboard.schemas.auth import (
    AuthResponse,
    RegisterResponse,
    UserLogin,
    UserRegister,
    UserSummary,
)
from taskboard.services.auth import authenticate_user, create_access_token, get_password_hash

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
async def register(
    user_data: UserRegister,
    users: Annotated[UserStore, Depends(get_user_store)],
):
    """Register a new user."""
    # Check if user already exists
    if users.find_by_username(user_data.username):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Username already exists",
        )

    # A concurrent registration still surfaces as UniqueConstraintError -> 400
    user = users.create(user_data.username, get_password_hash(user_data.password))

    return RegisterResponse(message="User registered successfully", user=user)


@router.post("/login", response_model=AuthResponse)
async def login(
    credentials: UserLogin,
    users: Annotated[UserStore, Depends(get_user_store)],
):
    """Login with username and password."""
    user = authenticate_user(users, credentials.username, credentials.password)

    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return AuthResponse(
        token=create_access_token(user.id, user.username),
        user=UserSummary(id=user.id, username=user.username),
    )


@router.get("/me", response_model=UserProfile)
async def get_me(
    current_user: Annotated[UserProfile, Depends(get_current_user)],
):
    """Get current user information."""
    return current_user
