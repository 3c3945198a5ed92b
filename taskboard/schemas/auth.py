"""Authentication schemas."""

from pydantic import BaseModel, Field

from taskboard.data.records import UserProfile


class UserRegister(BaseModel):
    """User registration request."""

    username: str = Field(..., min_length=3, max_length=30, pattern=r"^[a-zA-Z0-9_]+$")
    password: str = Field(..., min_length=6, max_length=100)


class UserLogin(BaseModel):
    """User login request."""

    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class UserSummary(BaseModel):
    """Minimal user information returned at login."""

    id: str
    username: str


class RegisterResponse(BaseModel):
    """Registration response."""

    message: str
    user: UserProfile


class AuthResponse(BaseModel):
    """Login response with token and user info."""

    token: str
    token_type: str = "bearer"  # noqa: S105
    user: UserSummary
