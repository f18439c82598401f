"""Auth gate: bearer access token -> current user.

A missing or non-Bearer Authorization header is rejected before any token
work. A present token must verify as an ACCESS token and its subject must
resolve to an active user. The resolved user is attached to request.state.user.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from userauth.api.v1.dependencies.security import get_token_codec
from userauth.api.v1.dependencies.services import get_user_repo
from userauth.application.dtos.user import UserResult, user_to_result
from userauth.domain.enums import TokenPurpose, UserRole
from userauth.domain.exceptions import (
    INVALID_TOKEN_MESSAGE,
    AuthenticationException,
    AuthorizationException,
    InvalidTokenError,
)
from userauth.infrastructure.persistence.repositories import UserRepository
from userauth.infrastructure.security import TokenCodec
from userauth.shared.logging import get_logger

logger = get_logger(__name__)

_http_bearer = HTTPBearer(auto_error=False)


async def authenticate_access_token(
    token: str, codec: TokenCodec, user_repo: UserRepository
) -> UserResult:
    """Resolve an access token to its user or raise AuthenticationException."""
    try:
        payload = codec.verify(TokenPurpose.ACCESS, token)
    except InvalidTokenError as e:
        logger.info("Access token rejected: %s", e.reason)
        raise AuthenticationException(INVALID_TOKEN_MESSAGE) from None
    user = await user_repo.get_by_id(payload["sub"])
    if user is None or not user.is_active:
        logger.info("Access token rejected: user %s missing or inactive", payload["sub"])
        raise AuthenticationException(INVALID_TOKEN_MESSAGE)
    return user_to_result(user)


async def get_current_user_optional(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_http_bearer)],
    codec: Annotated[TokenCodec, Depends(get_token_codec)],
    user_repo: Annotated[UserRepository, Depends(get_user_repo)],
) -> UserResult | None:
    """Return current user from the bearer token if present and valid; else None."""
    if not credentials:
        return None
    try:
        user = await authenticate_access_token(credentials.credentials, codec, user_repo)
    except AuthenticationException:
        return None
    request.state.user = user
    return user


async def get_current_user(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_http_bearer)],
    codec: Annotated[TokenCodec, Depends(get_token_codec)],
    user_repo: Annotated[UserRepository, Depends(get_user_repo)],
) -> UserResult:
    """Return current user from the bearer token; raise 401 if missing or invalid."""
    if not credentials:
        raise AuthenticationException("Not authenticated")
    user = await authenticate_access_token(credentials.credentials, codec, user_repo)
    request.state.user = user
    return user


async def require_admin(
    current_user: Annotated[UserResult, Depends(get_current_user)],
) -> UserResult:
    """Current user, who must hold an administrative role (403 otherwise)."""
    if not UserRole.is_admin(current_user.role):
        raise AuthorizationException("user", "manage")
    return current_user
