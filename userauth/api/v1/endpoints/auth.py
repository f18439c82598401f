"""Auth API: registration, login, token refresh, logout and password reset.

Thin layer: request bodies are validated here, everything else is delegated
to the injected services. Domain exceptions map to status codes in
core.exception_handlers.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from userauth.api.v1.dependencies import (
    get_credential_service,
    get_current_user,
    get_current_user_optional,
    get_password_reset_service,
    get_user_service,
)
from userauth.application.dtos.user import UserResult
from userauth.application.services import (
    CredentialService,
    PasswordResetService,
    UserService,
)
from userauth.core.limiter import (
    limit_auth,
    limit_forgot_password,
    limit_reset_password,
)
from userauth.schemas.auth import (
    ForgotPasswordRequest,
    LoginRequest,
    LoginResponse,
    LogoutRequest,
    MessageResponse,
    RefreshRequest,
    RegisterRequest,
    ResetPasswordRequest,
    SessionResponse,
    TokenResponse,
    VerifyResetTokenResponse,
)
from userauth.schemas.user import UserResponse

router = APIRouter()


@router.post("/register", response_model=UserResponse, status_code=201)
@limit_auth
async def register(
    request: Request,
    body: RegisterRequest,
    user_service: Annotated[UserService, Depends(get_user_service)],
):
    """Register a new account (public endpoint). 409 when the email is taken."""
    user = await user_service.register(
        email=body.email,
        password=body.password,
        full_name=body.full_name,
        user_name=body.user_name,
    )
    return UserResponse.model_validate(user)


@router.post("/login", response_model=LoginResponse)
@limit_auth
async def login(
    request: Request,
    body: LoginRequest,
    credentials: Annotated[CredentialService, Depends(get_credential_service)],
):
    """Authenticate with email and password; return user plus access/refresh tokens."""
    result = await credentials.login(body.email, body.password)
    return LoginResponse(
        user=UserResponse.model_validate(result.user),
        access_token=result.access_token,
        refresh_token=result.refresh_token,
    )


@router.post("/refresh", response_model=TokenResponse)
async def refresh(
    body: RefreshRequest,
    credentials: Annotated[CredentialService, Depends(get_credential_service)],
):
    """Exchange a live refresh token for a new access token (refresh token unchanged)."""
    result = await credentials.refresh(body.refresh_token)
    return TokenResponse(
        access_token=result.access_token,
        refresh_token=result.refresh_token,
    )


@router.post("/logout", response_model=MessageResponse)
async def logout(
    body: LogoutRequest,
    credentials: Annotated[CredentialService, Depends(get_credential_service)],
):
    """Revoke the refresh token. Always succeeds."""
    result = await credentials.logout(body.refresh_token)
    return MessageResponse(message=result.message)


@router.post("/logout-all", response_model=MessageResponse)
async def logout_all(
    current_user: Annotated[UserResult, Depends(get_current_user)],
    credentials: Annotated[CredentialService, Depends(get_credential_service)],
):
    """Revoke every refresh token of the current user. Requires Authorization."""
    result = await credentials.logout_all(current_user.id)
    return MessageResponse(message=result.message)


@router.get("/session", response_model=SessionResponse)
async def session(
    current_user: Annotated[UserResult | None, Depends(get_current_user_optional)],
):
    """Report whether the request carries a valid access token (never 401)."""
    if current_user is None:
        return SessionResponse(authenticated=False)
    return SessionResponse(authenticated=True, user=UserResponse.model_validate(current_user))


@router.post("/forgot-password", response_model=MessageResponse)
@limit_forgot_password
async def forgot_password(
    request: Request,
    body: ForgotPasswordRequest,
    reset_service: Annotated[PasswordResetService, Depends(get_password_reset_service)],
):
    """Email a reset link when the account is eligible. Same response either way."""
    result = await reset_service.forgot_password(body.email)
    return MessageResponse(message=result.message)


@router.get("/verify-reset-password-token", response_model=VerifyResetTokenResponse)
@limit_reset_password
async def verify_reset_password_token(
    request: Request,
    token: Annotated[str, Query(min_length=1)],
    reset_service: Annotated[PasswordResetService, Depends(get_password_reset_service)],
):
    """Verify a reset or set-password token (first step; succeeds once per link)."""
    result = await reset_service.verify_reset_token(token)
    return VerifyResetTokenResponse(message=result.message, verified=result.verified)


@router.post("/reset-password", response_model=MessageResponse)
@limit_reset_password
async def reset_password(
    request: Request,
    body: ResetPasswordRequest,
    reset_service: Annotated[PasswordResetService, Depends(get_password_reset_service)],
):
    """Set a new password with a verified token (second step)."""
    result = await reset_service.reset_password(
        body.token, body.password, body.confirm_password
    )
    return MessageResponse(message=result.message)
