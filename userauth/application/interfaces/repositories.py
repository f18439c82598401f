"""Repository interfaces (ports) for the application layer.

Protocols define contracts that infrastructure implementations must fulfill (DIP).
Entities are typed loosely (Any): services read attributes of the User and
Token rows but never import the ORM.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from userauth.domain.enums import TokenType


# User store interface
class IUserRepository(Protocol):
    """Protocol for the user store (DIP)."""

    async def get_by_email(self, email: str) -> Any | None:
        """Return the non-deleted user with this email, or None."""

    async def get_by_id(self, user_id: str) -> Any | None:
        """Return the non-deleted user with this id, or None."""

    async def list(self, *, limit: int = 100, offset: int = 0) -> Sequence[Any]:
        """Return a page of non-deleted users, oldest first."""

    async def is_email_taken(self, email: str) -> bool:
        """True when any row (soft-deleted included) holds this email."""

    async def create_user(
        self,
        *,
        email: str,
        hashed_password: str,
        full_name: str,
        user_name: str | None = None,
        role: str | None = None,
        is_verified: bool = False,
        created_by_id: str | None = None,
    ) -> Any:
        """Create a user; the password must already be hashed."""

    async def update_fields(self, user_id: str, fields: dict[str, Any]) -> Any | None:
        """Apply a partial update; None when the user does not exist."""


# Token ledger interface
class ITokenLedger(Protocol):
    """Protocol for refresh and reset-token bookkeeping."""

    async def store_refresh(self, user_id: str, token: str, expires_at: datetime) -> Any:
        """Store the user's refresh token, replacing the prior one."""

    async def find_refresh(self, token: str) -> Any | None:
        """Return the unexpired row for this refresh token."""

    async def invalidate_refresh(self, token: str) -> bool:
        """Delete the row for this refresh token."""

    async def invalidate_all_refresh(self, user_id: str) -> bool:
        """Delete every refresh row for the user."""

    async def store_reset(
        self, user_id: str, jti: str, expires_at: datetime, kind: TokenType = ...
    ) -> Any:
        """Store a reset jti, replacing the prior row of that kind."""

    async def find_and_verify_reset(
        self, jti: str, user_id: str, kind: TokenType = ...
    ) -> Any | None:
        """Return the unexpired row for jti owned by user_id."""

    async def mark_verified(self, row_id: str) -> bool:
        """Set verified_at on an unverified, unused row."""

    async def clear_verification(self, row_id: str) -> bool:
        """Spend a verified row (clear verified_at, stamp used_at)."""

    async def invalidate_reset(self, user_id: str, kind: TokenType = ...) -> bool:
        """Delete the user's reset row of the given kind."""

    async def cleanup_expired(self) -> int:
        """Delete expired rows; return the number removed."""
