"""User store (Postgres / SQLite). Password hashing happens in the services, never here."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from userauth.domain.exceptions import UserAlreadyExistsException
from userauth.infrastructure.persistence.models.user import User
from userauth.infrastructure.persistence.repositories.base import BaseRepository

# Columns callers may change through update_fields.
UPDATABLE_FIELDS = frozenset(
    {
        "email",
        "hashed_password",
        "full_name",
        "user_name",
        "role",
        "is_verified",
        "suspended_at",
        "deleted_at",
    }
)


def normalize_email(email: str) -> str:
    return email.strip().lower()


class UserRepository(BaseRepository[User]):
    """User repository: lookups exclude soft-deleted rows; is_email_taken does not."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, User)

    async def get_by_email(self, email: str) -> User | None:
        result = await self.db.execute(
            select(User).where(
                User.email == normalize_email(email),
                User.deleted_at.is_(None),
            )
        )
        return result.scalar_one_or_none()

    async def get_by_id(self, user_id: str) -> User | None:
        result = await self.db.execute(
            select(User).where(User.id == user_id, User.deleted_at.is_(None))
        )
        return result.scalar_one_or_none()

    async def list(self, *, limit: int = 100, offset: int = 0) -> Sequence[User]:
        """Non-deleted users, oldest first."""
        result = await self.db.execute(
            select(User)
            .where(User.deleted_at.is_(None))
            .order_by(User.created_at, User.id)
            .offset(offset)
            .limit(limit)
        )
        return result.scalars().all()

    async def is_email_taken(self, email: str) -> bool:
        """True when any row (soft-deleted included) holds this email; the unique constraint still applies."""
        result = await self.db.execute(
            select(func.count())
            .select_from(User)
            .where(User.email == normalize_email(email))
        )
        return bool(result.scalar_one())

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
    ) -> User:
        """Create user; raise UserAlreadyExistsException on unique constraint violation."""
        user = User(
            email=normalize_email(email),
            hashed_password=hashed_password,
            full_name=full_name,
            user_name=user_name,
            role=role,
            is_verified=is_verified,
            created_by_id=created_by_id,
        )
        try:
            return await self.create(user)
        except IntegrityError:
            raise UserAlreadyExistsException() from None

    async def update_fields(self, user_id: str, fields: dict[str, Any]) -> User | None:
        """Apply a partial update; returns None when the user does not exist.

        Raises ValueError for unknown fields and UserAlreadyExistsException when
        the new email collides with another row.
        """
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update fields: {sorted(unknown)}")
        user = await self.get_by_id(user_id)
        if not user:
            return None
        for key, value in fields.items():
            if key == "email" and value is not None:
                value = normalize_email(value)
            setattr(user, key, value)
        try:
            return await self.update(user)
        except IntegrityError:
            raise UserAlreadyExistsException() from None
