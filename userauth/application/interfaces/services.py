"""Service interfaces (ports) for the application layer.

Protocols define contracts for security and outbound-mail collaborators (DIP).
"""

from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from userauth.domain.enums import TokenPurpose


# Password hasher interface
class IPasswordHasher(Protocol):
    """Protocol for password hashing. Blocking; call through asyncio.to_thread."""

    def hash(self, plain: str) -> str:
        """Return a digest of plain."""

    def compare(self, plain: str, digest: str) -> bool:
        """True when plain matches digest."""

    def unusable_hash(self) -> str:
        """Digest of a random secret nobody knows."""


# Token codec interface
class ITokenCodec(Protocol):
    """Protocol for signing and verifying tokens."""

    def issue(
        self,
        purpose: TokenPurpose,
        payload: dict[str, Any],
        ttl: timedelta | None = None,
    ) -> str:
        """Sign payload; adds typ, iat, exp and (if absent) jti."""

    def verify(self, purpose: TokenPurpose, token: str) -> dict[str, Any]:
        """Return the payload or raise InvalidTokenError."""


# Mailer interface
class IMailer(Protocol):
    """Protocol for outbound email. Raises MailDeliveryException on failure."""

    async def send_password_reset(
        self, to_email: str, token: str, display_name: str
    ) -> None:
        """Send the password reset link."""

    async def send_admin_password_set(self, user: Any, token: str) -> None:
        """Send the set-password link to an administrator-created account."""
