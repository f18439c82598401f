"""Credential service: login, access-token refresh and logout.

Session states: unauthenticated -> authenticated(access, refresh) ->
refreshed(new access, same refresh) -> revoked. Each user holds at most one
refresh token; logging in again replaces it, so an older refresh token stops
working immediately.
"""

from __future__ import annotations

import asyncio
from datetime import timedelta
from typing import Any

from userauth.application.dtos.auth import LoginResult, MessageResult, RefreshResult
from userauth.application.dtos.user import user_to_result
from userauth.application.interfaces.repositories import ITokenLedger, IUserRepository
from userauth.application.interfaces.services import IPasswordHasher, ITokenCodec
from userauth.domain.enums import TokenPurpose
from userauth.domain.exceptions import (
    INVALID_TOKEN_MESSAGE,
    AuthenticationException,
    InvalidTokenError,
)
from userauth.shared.logging import get_logger
from userauth.shared.utils.datetime import utc_now

logger = get_logger(__name__)

INVALID_CREDENTIALS_MESSAGE = "Invalid email or password"
INACTIVE_ACCOUNT_MESSAGE = "Account is not verified or has been suspended"

# Lazy dummy hash for constant-time comparison when user is not found (timing-attack mitigation).
_dummy_hash_cache: str | None = None


async def _get_dummy_hash(hasher: IPasswordHasher) -> str:
    """Return a valid hash for dummy comparison; computed once in thread pool."""
    global _dummy_hash_cache
    if _dummy_hash_cache is None:
        _dummy_hash_cache = await asyncio.to_thread(hasher.hash, "not-a-real-password")
    return _dummy_hash_cache


def build_token_claims(user: Any) -> dict[str, Any]:
    """Claims shared by access and refresh tokens."""
    return {
        "sub": user.id,
        "email": user.email,
        "name": user.full_name,
        "role": user.role,
    }


class CredentialService:
    """Issues, refreshes and revokes session tokens."""

    def __init__(
        self,
        user_repo: IUserRepository,
        ledger: ITokenLedger,
        codec: ITokenCodec,
        hasher: IPasswordHasher,
        *,
        access_ttl: timedelta = timedelta(hours=24),
        refresh_ttl: timedelta = timedelta(days=90),
    ) -> None:
        self.user_repo = user_repo
        self.ledger = ledger
        self.codec = codec
        self.hasher = hasher
        self.access_ttl = access_ttl
        self.refresh_ttl = refresh_ttl

    def _issue_access(self, user: Any) -> str:
        return self.codec.issue(TokenPurpose.ACCESS, build_token_claims(user), self.access_ttl)

    async def login(self, email: str, password: str) -> LoginResult:
        """Check credentials, issue an access/refresh pair and persist the refresh token.

        Raises:
            AuthenticationException: Unknown email, wrong password, or an
                unverified / suspended account.
        """
        user = await self.user_repo.get_by_email(email)
        if user is None:
            await asyncio.to_thread(
                self.hasher.compare, password, await _get_dummy_hash(self.hasher)
            )
            raise AuthenticationException(INVALID_CREDENTIALS_MESSAGE)
        matches = await asyncio.to_thread(
            self.hasher.compare, password, user.hashed_password
        )
        if not matches:
            logger.info("Login failed for user %s: wrong password", user.id)
            raise AuthenticationException(INVALID_CREDENTIALS_MESSAGE)
        if not user.is_verified or not user.is_active:
            logger.info("Login refused for user %s: account inactive", user.id)
            raise AuthenticationException(INACTIVE_ACCOUNT_MESSAGE)

        claims = build_token_claims(user)
        access_token = self.codec.issue(TokenPurpose.ACCESS, claims, self.access_ttl)
        refresh_token = self.codec.issue(TokenPurpose.REFRESH, claims, self.refresh_ttl)
        await self.ledger.store_refresh(
            user.id, refresh_token, utc_now() + self.refresh_ttl
        )
        logger.info("User %s logged in", user.id)
        return LoginResult(
            user=user_to_result(user),
            access_token=access_token,
            refresh_token=refresh_token,
        )

    async def refresh(self, refresh_token: str) -> RefreshResult:
        """Issue a new access token for a signed, unexpired refresh token still on the ledger.

        The refresh token itself is not rotated. The user is re-read so role
        changes since issuance show up in the new access token.
        """
        try:
            payload = self.codec.verify(TokenPurpose.REFRESH, refresh_token)
        except InvalidTokenError as e:
            logger.info("Refresh rejected: %s", e.reason)
            raise AuthenticationException(INVALID_TOKEN_MESSAGE) from None

        row = await self.ledger.find_refresh(refresh_token)
        if row is None:
            logger.info("Refresh rejected: token not on ledger (revoked or replaced)")
            raise AuthenticationException(INVALID_TOKEN_MESSAGE)
        if row.user_id != payload["sub"]:
            logger.warning("Refresh rejected: ledger owner does not match token subject")
            raise AuthenticationException(INVALID_TOKEN_MESSAGE)

        user = await self.user_repo.get_by_id(payload["sub"])
        if user is None or not user.is_active:
            logger.info("Refresh rejected: user %s missing or inactive", payload["sub"])
            raise AuthenticationException(INVALID_TOKEN_MESSAGE)

        return RefreshResult(
            access_token=self._issue_access(user),
            refresh_token=refresh_token,
        )

    async def logout(self, refresh_token: str) -> MessageResult:
        """Revoke the refresh token. Unknown or already revoked tokens are not an error."""
        removed = await self.ledger.invalidate_refresh(refresh_token)
        if not removed:
            logger.debug("Logout: no ledger row for presented refresh token")
        return MessageResult(message="Logged out successfully")

    async def logout_all(self, user_id: str) -> MessageResult:
        """Revoke every refresh token of the user."""
        await self.ledger.invalidate_all_refresh(user_id)
        logger.info("All sessions revoked for user %s", user_id)
        return MessageResult(message="Logged out from all sessions")
