"""Profile schemas."""

from pydantic import BaseModel, Field


class ProfileUpdate(BaseModel):
    """Update profile fields; omitted fields are left unchanged."""

    email: str | None = Field(None, max_length=255)
    first_name: str | None = Field(None, max_length=100)
    last_name: str | None = Field(None, max_length=100)
    bio: str | None = Field(None, max_length=1000)
    avatar: str | None = Field(None, max_length=500)


class PasswordChange(BaseModel):
    """Change password request."""

    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=6, max_length=100)
