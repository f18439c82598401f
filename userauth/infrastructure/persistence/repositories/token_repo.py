"""Token ledger: refresh and reset-token rows, one per (user, kind).

Every write is a single statement scoped by the unique (user_id, kind) pair
or by row id, so concurrent requests for the same user only race on which
write lands last. Expired rows are treated as absent by every lookup.
"""

from __future__ import annotations

import hashlib
from datetime import datetime

from sqlalchemy import delete, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import func

from userauth.domain.enums import TokenType
from userauth.infrastructure.persistence.models.token import Token
from userauth.infrastructure.persistence.repositories.base import BaseRepository
from userauth.shared.logging import get_logger
from userauth.shared.utils.datetime import utc_now
from userauth.shared.utils.generators import generate_cuid

logger = get_logger(__name__)

_UPSERT_INSERTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


class TokenLedger(BaseRepository[Token]):
    """Persistence for refresh tokens (SHA-256 of the token as subject) and reset tokens (jti as subject)."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Token)

    @staticmethod
    def _hash_token(token: str) -> str:
        return hashlib.sha256(token.encode()).hexdigest()

    async def _replace(
        self,
        user_id: str,
        kind: TokenType,
        subject: str,
        expires_at: datetime,
    ) -> Token:
        """Insert the row for (user_id, kind), replacing any existing one.

        The replacement gets a fresh id and cleared verified_at / used_at.
        Postgres and SQLite use INSERT .. ON CONFLICT DO UPDATE; other
        dialects delete then insert inside the caller's transaction.
        """
        values = {
            "id": generate_cuid(),
            "user_id": user_id,
            "kind": kind.value,
            "subject": subject,
            "expires_at": expires_at,
            "verified_at": None,
            "used_at": None,
        }
        insert = _UPSERT_INSERTS.get(self.db.get_bind().dialect.name)
        if insert is None:
            await self.db.execute(
                delete(Token)
                .where(Token.user_id == user_id, Token.kind == kind.value)
                .execution_options(synchronize_session=False)
            )
            return await self.create(Token(**values))

        stmt = insert(Token).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=[Token.user_id, Token.kind],
            set_={
                "id": stmt.excluded.id,
                "subject": stmt.excluded.subject,
                "expires_at": stmt.excluded.expires_at,
                "verified_at": None,
                "used_at": None,
                "updated_at": func.now(),
            },
        ).returning(Token)
        result = await self.db.execute(
            stmt, execution_options={"populate_existing": True}
        )
        return result.scalar_one()

    # ---- Refresh tokens ----

    async def store_refresh(self, user_id: str, token: str, expires_at: datetime) -> Token:
        """Store the user's refresh token; any previous one stops being valid.

        Only the token digest is persisted, so the row size does not depend
        on the claims the token carries.
        """
        return await self._replace(
            user_id, TokenType.REFRESH, self._hash_token(token), expires_at
        )

    async def find_refresh(self, token: str) -> Token | None:
        """Return the unexpired refresh row issued for this exact token string."""
        result = await self.db.execute(
            select(Token).where(
                Token.subject == self._hash_token(token),
                Token.kind == TokenType.REFRESH.value,
                Token.expires_at > utc_now(),
            )
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def invalidate_refresh(self, token: str) -> bool:
        """Delete the refresh row for this token. Returns True if a row was removed."""
        result = await self.db.execute(
            delete(Token).where(
                Token.subject == self._hash_token(token),
                Token.kind == TokenType.REFRESH.value,
            ).execution_options(synchronize_session=False)
        )
        return bool(result.rowcount)

    async def invalidate_all_refresh(self, user_id: str) -> bool:
        """Delete every refresh row for the user. Returns True if a row was removed."""
        result = await self.db.execute(
            delete(Token).where(
                Token.user_id == user_id,
                Token.kind == TokenType.REFRESH.value,
            ).execution_options(synchronize_session=False)
        )
        return bool(result.rowcount)

    # ---- Reset tokens ----

    async def store_reset(
        self,
        user_id: str,
        jti: str,
        expires_at: datetime,
        kind: TokenType = TokenType.RESET_PASSWORD,
    ) -> Token:
        """Store the jti of a freshly issued reset token, replacing the prior row of that kind."""
        if not kind.is_reset:
            raise ValueError(f"Not a reset token kind: {kind.value}")
        return await self._replace(user_id, kind, jti, expires_at)

    async def find_and_verify_reset(
        self,
        jti: str,
        user_id: str,
        kind: TokenType = TokenType.RESET_PASSWORD,
    ) -> Token | None:
        """Return the row only if it exists, belongs to user_id and is unexpired.

        Missing row and wrong owner are indistinguishable to the caller.
        """
        result = await self.db.execute(
            select(Token).where(
                Token.subject == jti,
                Token.kind == kind.value,
                Token.user_id == user_id,
                Token.expires_at > utc_now(),
            )
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def mark_verified(self, row_id: str) -> bool:
        """Set verified_at on a row that is neither verified nor used.

        Compare-and-set: returns False when another request got there first
        or the row was already consumed.
        """
        result = await self.db.execute(
            update(Token)
            .where(
                Token.id == row_id,
                Token.verified_at.is_(None),
                Token.used_at.is_(None),
            )
            .values(verified_at=utc_now())
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def clear_verification(self, row_id: str) -> bool:
        """Spend a verified row: clear verified_at and stamp used_at.

        Only succeeds on a verified, unused row, so a token is consumed at
        most once per issuance. Returns False otherwise.
        """
        result = await self.db.execute(
            update(Token)
            .where(
                Token.id == row_id,
                Token.verified_at.is_not(None),
                Token.used_at.is_(None),
            )
            .values(verified_at=None, used_at=utc_now())
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def invalidate_reset(
        self, user_id: str, kind: TokenType = TokenType.RESET_PASSWORD
    ) -> bool:
        """Delete the user's reset row of the given kind."""
        result = await self.db.execute(
            delete(Token)
            .where(Token.user_id == user_id, Token.kind == kind.value)
            .execution_options(synchronize_session=False)
        )
        return bool(result.rowcount)

    # ---- Maintenance ----

    async def cleanup_expired(self) -> int:
        """Delete rows whose expires_at has passed. Returns the number removed."""
        result = await self.db.execute(
            delete(Token)
            .where(Token.expires_at < utc_now())
            .execution_options(synchronize_session=False)
        )
        count = result.rowcount or 0
        logger.info("Token ledger cleanup removed %d expired row(s)", count)
        return count
