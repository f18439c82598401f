"""Users API: current-user profile and admin account management."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from userauth.api.v1.dependencies import get_current_user, get_user_service, require_admin
from userauth.application.dtos.user import UserResult
from userauth.application.services import UserService
from userauth.core.limiter import limit_writes
from userauth.schemas.auth import MessageResponse
from userauth.schemas.user import AdminUserCreateRequest, UserResponse, UserUpdate

router = APIRouter()


@router.get("/me", response_model=UserResponse)
async def get_me(
    current_user: Annotated[UserResult, Depends(get_current_user)],
):
    """Return the currently authenticated user. Requires Authorization: Bearer <token>."""
    return UserResponse.model_validate(current_user)


@router.patch("/me", response_model=UserResponse)
@limit_writes
async def update_me(
    request: Request,
    body: UserUpdate,
    current_user: Annotated[UserResult, Depends(get_current_user)],
    user_service: Annotated[UserService, Depends(get_user_service)],
):
    """Update current user. A password change signs out every session."""
    updated = await user_service.update_profile(
        current_user.id,
        full_name=body.full_name,
        user_name=body.user_name,
        email=body.email,
        password=body.password,
    )
    return UserResponse.model_validate(updated)


@router.post("", response_model=UserResponse, status_code=201)
@limit_writes
async def create_user(
    request: Request,
    body: AdminUserCreateRequest,
    admin: Annotated[UserResult, Depends(require_admin)],
    user_service: Annotated[UserService, Depends(get_user_service)],
):
    """Create an account and email it a set-password link (admin only)."""
    created = await user_service.admin_create_user(
        admin,
        email=body.email,
        full_name=body.full_name,
        user_name=body.user_name,
        role=body.role,
    )
    return UserResponse.model_validate(created)


@router.get("", response_model=list[UserResponse])
async def list_users(
    admin: Annotated[UserResult, Depends(require_admin)],
    user_service: Annotated[UserService, Depends(get_user_service)],
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
):
    """List active and suspended users, oldest first (admin only, paginated)."""
    users = await user_service.list_users(limit=limit, offset=offset)
    return [UserResponse.model_validate(u) for u in users]


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: str,
    admin: Annotated[UserResult, Depends(require_admin)],
    user_service: Annotated[UserService, Depends(get_user_service)],
):
    return UserResponse.model_validate(await user_service.get_user(user_id))


@router.post("/{user_id}/resend-set-password", response_model=MessageResponse)
@limit_writes
async def resend_set_password(
    request: Request,
    user_id: str,
    admin: Annotated[UserResult, Depends(require_admin)],
    user_service: Annotated[UserService, Depends(get_user_service)],
):
    """Send a fresh set-password link; earlier links stop working (admin only)."""
    result = await user_service.resend_admin_password_email(user_id)
    return MessageResponse(message=result.message)


@router.post("/{user_id}/suspend", response_model=UserResponse)
@limit_writes
async def suspend_user(
    request: Request,
    user_id: str,
    admin: Annotated[UserResult, Depends(require_admin)],
    user_service: Annotated[UserService, Depends(get_user_service)],
):
    suspended = await user_service.suspend_user(user_id, actor_id=admin.id)
    return UserResponse.model_validate(suspended)


@router.delete("/{user_id}", response_model=MessageResponse)
@limit_writes
async def delete_user(
    request: Request,
    user_id: str,
    admin: Annotated[UserResult, Depends(require_admin)],
    user_service: Annotated[UserService, Depends(get_user_service)],
):
    """Soft-delete the account (admin only)."""
    result = await user_service.delete_user(user_id, actor_id=admin.id)
    return MessageResponse(message=result.message)
