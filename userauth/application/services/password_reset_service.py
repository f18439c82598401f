"""Password reset orchestration: request -> verify -> consume.

The signed reset token carries ``sub`` (user id), a random ``jti`` and the
ledger ``kind``; only the jti is stored. A row is verified at most once per
issuance and consumed at most once after that. Every rejection reaches the
caller as the same generic message; the specific reason is only logged.

The admin set-password flow (ADMIN_SET_PASSWORD) runs through the same verify
and consume operations with its own ledger row and email template.
"""

from __future__ import annotations

import asyncio
from datetime import timedelta
from typing import Any

from userauth.application.dtos.auth import MessageResult, ResetVerification
from userauth.application.interfaces.repositories import ITokenLedger, IUserRepository
from userauth.application.interfaces.services import IMailer, IPasswordHasher, ITokenCodec
from userauth.domain.enums import TokenPurpose, TokenType
from userauth.domain.exceptions import (
    INVALID_TOKEN_MESSAGE,
    AuthenticationException,
    InvalidTokenError,
    ValidationException,
)
from userauth.shared.logging import get_logger
from userauth.shared.utils.datetime import utc_now
from userauth.shared.utils.generators import generate_jti

logger = get_logger(__name__)

FORGOT_PASSWORD_MESSAGE = "If the email exists, a password reset link has been sent."
RESET_VERIFIED_MESSAGE = "Token is valid"
PASSWORD_RESET_MESSAGE = "Password has been reset successfully"


class PasswordResetService:
    """Issues, verifies and consumes password reset tokens."""

    def __init__(
        self,
        user_repo: IUserRepository,
        ledger: ITokenLedger,
        codec: ITokenCodec,
        hasher: IPasswordHasher,
        mailer: IMailer,
        *,
        reset_ttl: timedelta = timedelta(hours=1),
    ) -> None:
        self.user_repo = user_repo
        self.ledger = ledger
        self.codec = codec
        self.hasher = hasher
        self.mailer = mailer
        self.reset_ttl = reset_ttl

    async def _issue(self, user: Any, kind: TokenType) -> str:
        """Sign a reset token and store its jti, replacing the user's prior row of this kind."""
        jti = generate_jti()
        token = self.codec.issue(
            TokenPurpose.RESET,
            {"sub": user.id, "jti": jti, "kind": kind.value},
            self.reset_ttl,
        )
        await self.ledger.store_reset(user.id, jti, utc_now() + self.reset_ttl, kind)
        return token

    def _decode(self, token: str) -> tuple[str, str, TokenType]:
        """Return (user_id, jti, kind) from a signed reset token.

        Raises:
            AuthenticationException: Bad signature, expired, wrong token type,
                or missing reset claims.
        """
        try:
            payload = self.codec.verify(TokenPurpose.RESET, token)
        except InvalidTokenError as e:
            logger.info("Reset token rejected: %s", e.reason)
            raise AuthenticationException(INVALID_TOKEN_MESSAGE) from None
        jti = payload.get("jti")
        try:
            kind = TokenType(payload.get("kind"))
        except ValueError:
            kind = None
        if not jti or kind is None or not kind.is_reset:
            logger.warning("Reset token rejected: missing jti or reset kind")
            raise AuthenticationException(INVALID_TOKEN_MESSAGE)
        return payload["sub"], jti, kind

    async def forgot_password(self, email: str) -> MessageResult:
        """Send a reset link when the account exists and is eligible.

        The same message is returned whether or not an email went out.
        Mail delivery failure propagates (MailDeliveryException).
        """
        user = await self.user_repo.get_by_email(email)
        if user is None or not user.is_verified or not user.is_active:
            logger.info("Password reset requested for unknown or ineligible account")
            return MessageResult(message=FORGOT_PASSWORD_MESSAGE)

        token = await self._issue(user, TokenType.RESET_PASSWORD)
        await self.mailer.send_password_reset(user.email, token, user.full_name)
        logger.info("Password reset issued for user %s", user.id)
        return MessageResult(message=FORGOT_PASSWORD_MESSAGE)

    async def issue_admin_password_set(self, user: Any) -> None:
        """Issue an ADMIN_SET_PASSWORD token and mail the set-password link."""
        token = await self._issue(user, TokenType.ADMIN_SET_PASSWORD)
        await self.mailer.send_admin_password_set(user, token)
        logger.info("Set-password link issued for user %s", user.id)

    async def verify_reset_token(self, token: str) -> ResetVerification:
        """Mark the token's ledger row verified. Succeeds once per issuance.

        Raises:
            AuthenticationException: Invalid token, no matching unexpired row
                for this user, or the row was already verified or consumed.
        """
        user_id, jti, kind = self._decode(token)
        row = await self.ledger.find_and_verify_reset(jti, user_id, kind)
        if row is None:
            logger.info("Reset verify rejected for user %s: no matching ledger row", user_id)
            raise AuthenticationException(INVALID_TOKEN_MESSAGE)
        if not await self.ledger.mark_verified(row.id):
            logger.info("Reset verify rejected for user %s: already verified or used", user_id)
            raise AuthenticationException(INVALID_TOKEN_MESSAGE)
        return ResetVerification(message=RESET_VERIFIED_MESSAGE)

    async def reset_password(
        self, token: str, new_password: str, confirm_password: str
    ) -> MessageResult:
        """Set a new password using a previously verified token.

        Raises:
            ValidationException: Passwords differ, or the token was never
                verified, is already consumed, or its row is gone.
            AuthenticationException: Invalid or expired signed token.
        """
        if new_password != confirm_password:
            raise ValidationException("Passwords do not match", field="confirm_password")

        user_id, jti, kind = self._decode(token)
        row = await self.ledger.find_and_verify_reset(jti, user_id, kind)
        if row is None or row.verified_at is None or row.used_at is not None:
            logger.info("Reset rejected for user %s: token not in verified state", user_id)
            raise ValidationException(INVALID_TOKEN_MESSAGE)
        user = await self.user_repo.get_by_id(user_id)
        if user is None:
            logger.info("Reset rejected: user %s no longer exists", user_id)
            raise ValidationException(INVALID_TOKEN_MESSAGE)
        if not await self.ledger.clear_verification(row.id):
            logger.info("Reset rejected for user %s: token consumed concurrently", user_id)
            raise ValidationException(INVALID_TOKEN_MESSAGE)

        fields: dict[str, Any] = {
            "hashed_password": await asyncio.to_thread(self.hasher.hash, new_password)
        }
        if kind is TokenType.ADMIN_SET_PASSWORD:
            fields["is_verified"] = True
        await self.user_repo.update_fields(user_id, fields)
        await self.ledger.invalidate_all_refresh(user_id)
        logger.info("Password reset completed for user %s (%s)", user_id, kind.value)
        return MessageResult(message=PASSWORD_RESET_MESSAGE)
