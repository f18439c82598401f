"""User application service: registration, profile, and admin account management."""

from __future__ import annotations

import asyncio
from typing import Any

from userauth.application.dtos.auth import MessageResult
from userauth.application.dtos.user import UserResult, user_to_result
from userauth.application.interfaces.repositories import ITokenLedger, IUserRepository
from userauth.application.interfaces.services import IPasswordHasher
from userauth.application.services.password_reset_service import PasswordResetService
from userauth.domain.enums import TokenType
from userauth.domain.exceptions import (
    ResourceNotFoundException,
    UserAlreadyExistsException,
    ValidationException,
)
from userauth.shared.logging import get_logger
from userauth.shared.utils.datetime import utc_now

logger = get_logger(__name__)


class UserService:
    """Registration, current-user profile and admin operations on other users."""

    def __init__(
        self,
        user_repo: IUserRepository,
        ledger: ITokenLedger,
        hasher: IPasswordHasher,
        reset_service: PasswordResetService,
    ) -> None:
        self.user_repo = user_repo
        self.ledger = ledger
        self.hasher = hasher
        self.reset_service = reset_service

    async def _require_user(self, user_id: str) -> Any:
        user = await self.user_repo.get_by_id(user_id)
        if user is None:
            raise ResourceNotFoundException("user", user_id)
        return user

    async def _revoke_tokens(self, user_id: str) -> None:
        """Drop the refresh token and any outstanding reset or set-password link."""
        await self.ledger.invalidate_all_refresh(user_id)
        for kind in (TokenType.RESET_PASSWORD, TokenType.ADMIN_SET_PASSWORD):
            await self.ledger.invalidate_reset(user_id, kind)

    async def register(
        self,
        email: str,
        password: str,
        full_name: str,
        user_name: str | None = None,
    ) -> UserResult:
        """Create a self-registered (verified) account.

        Raises:
            UserAlreadyExistsException: Email already used, soft-deleted rows included.
        """
        if await self.user_repo.is_email_taken(email):
            raise UserAlreadyExistsException()
        hashed = await asyncio.to_thread(self.hasher.hash, password)
        user = await self.user_repo.create_user(
            email=email,
            hashed_password=hashed,
            full_name=full_name,
            user_name=user_name,
            is_verified=True,
        )
        logger.info("User %s registered", user.id)
        return user_to_result(user)

    async def get_profile(self, user_id: str) -> UserResult:
        return user_to_result(await self._require_user(user_id))

    async def update_profile(
        self,
        user_id: str,
        *,
        full_name: str | None = None,
        user_name: str | None = None,
        email: str | None = None,
        password: str | None = None,
    ) -> UserResult:
        """Partial update of the current user.

        A password change is hashed here and revokes the user's refresh token.
        """
        if all(v is None for v in (full_name, user_name, email, password)):
            raise ValidationException("At least one field is required")
        user = await self._require_user(user_id)
        fields: dict[str, Any] = {}
        if full_name is not None:
            fields["full_name"] = full_name
        if user_name is not None:
            fields["user_name"] = user_name
        if email is not None and email.strip().lower() != user.email:
            if await self.user_repo.is_email_taken(email):
                raise UserAlreadyExistsException()
            fields["email"] = email
        if password is not None:
            fields["hashed_password"] = await asyncio.to_thread(self.hasher.hash, password)
        updated = await self.user_repo.update_fields(user_id, fields) if fields else user
        if updated is None:
            raise ResourceNotFoundException("user", user_id)
        if password is not None:
            await self.ledger.invalidate_all_refresh(user_id)
            logger.info("Password changed for user %s; sessions revoked", user_id)
        return user_to_result(updated)

    async def admin_create_user(
        self,
        admin: Any,
        email: str,
        full_name: str,
        user_name: str | None = None,
        role: str | None = None,
    ) -> UserResult:
        """Create an unverified account owned by admin and mail it a set-password link.

        The account gets an unusable password until the link is consumed.
        """
        if await self.user_repo.is_email_taken(email):
            raise UserAlreadyExistsException()
        placeholder = await asyncio.to_thread(self.hasher.unusable_hash)
        user = await self.user_repo.create_user(
            email=email,
            hashed_password=placeholder,
            full_name=full_name,
            user_name=user_name,
            role=role,
            is_verified=False,
            created_by_id=admin.id,
        )
        await self.reset_service.issue_admin_password_set(user)
        logger.info("User %s created by admin %s", user.id, admin.id)
        return user_to_result(user)

    async def resend_admin_password_email(self, user_id: str) -> MessageResult:
        """Issue a fresh set-password link; the previous one stops working."""
        user = await self._require_user(user_id)
        if user.is_verified:
            raise ValidationException("User has already set a password")
        await self.reset_service.issue_admin_password_set(user)
        return MessageResult(message="Set-password email sent")

    async def get_user(self, user_id: str) -> UserResult:
        return user_to_result(await self._require_user(user_id))

    async def list_users(self, *, limit: int = 100, offset: int = 0) -> list[UserResult]:
        users = await self.user_repo.list(limit=limit, offset=offset)
        return [user_to_result(u) for u in users]

    async def suspend_user(self, user_id: str, *, actor_id: str | None = None) -> UserResult:
        """Suspend the account and revoke its refresh token and pending reset links."""
        if actor_id is not None and actor_id == user_id:
            raise ValidationException("You cannot suspend your own account")
        await self._require_user(user_id)
        updated = await self.user_repo.update_fields(user_id, {"suspended_at": utc_now()})
        if updated is None:
            raise ResourceNotFoundException("user", user_id)
        await self._revoke_tokens(user_id)
        logger.info("User %s suspended", user_id)
        return user_to_result(updated)

    async def delete_user(self, user_id: str, *, actor_id: str | None = None) -> MessageResult:
        """Soft-delete the account and revoke its refresh token and pending reset links."""
        if actor_id is not None and actor_id == user_id:
            raise ValidationException("You cannot delete your own account")
        await self._require_user(user_id)
        await self.user_repo.update_fields(user_id, {"deleted_at": utc_now()})
        await self._revoke_tokens(user_id)
        logger.info("User %s deleted", user_id)
        return MessageResult(message="User deleted successfully")
