"""User API schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class AdminUserCreateRequest(BaseModel):
    """Request body for POST /users (admin). The user sets their own password via email link."""

    email: EmailStr
    full_name: str = Field(..., min_length=1, max_length=200)
    user_name: str | None = Field(default=None, max_length=100)
    role: str | None = Field(default=None, max_length=50)


class UserUpdate(BaseModel):
    """Request body for updating current user (partial)."""

    full_name: str | None = Field(default=None, min_length=1, max_length=200)
    user_name: str | None = Field(default=None, max_length=100)
    email: EmailStr | None = None
    password: str | None = Field(default=None, min_length=8)


class UserResponse(BaseModel):
    """User response (no password)."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    full_name: str
    user_name: str | None = None
    role: str | None = None
    is_verified: bool
    is_active: bool
    created_by_id: str | None = None
    created_at: datetime | None = None
