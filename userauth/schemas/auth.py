"""Auth API schemas."""

from pydantic import BaseModel, EmailStr, Field

from userauth.schemas.user import UserResponse

PASSWORD_MIN_LENGTH = 8


class RegisterRequest(BaseModel):
    """Request body for public registration."""

    email: EmailStr
    password: str = Field(
        ..., min_length=PASSWORD_MIN_LENGTH, description="Password (min 8 characters)"
    )
    full_name: str = Field(..., min_length=1, max_length=200)
    user_name: str | None = Field(default=None, max_length=100)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class RefreshRequest(BaseModel):
    refresh_token: str = Field(..., min_length=1)


class LogoutRequest(BaseModel):
    refresh_token: str = Field(..., min_length=1)


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    """Request body for POST /auth/reset-password.

    Mismatched passwords are rejected by the service (400), not here.
    """

    token: str = Field(..., min_length=1, description="Token from the reset or set-password link")
    password: str = Field(
        ..., min_length=PASSWORD_MIN_LENGTH, description="New password (min 8 characters)"
    )
    confirm_password: str = Field(..., min_length=1)


class TokenResponse(BaseModel):
    """Access/refresh token pair."""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class LoginResponse(TokenResponse):
    user: UserResponse


class MessageResponse(BaseModel):
    message: str


class VerifyResetTokenResponse(BaseModel):
    message: str
    verified: bool = True


class SessionResponse(BaseModel):
    """Response for GET /auth/session (optional authentication)."""

    authenticated: bool
    user: UserResponse | None = None
