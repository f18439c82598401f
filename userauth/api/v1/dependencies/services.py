"""Repositories and application services (composition root).

Write paths share one transactional session per request; routes depend only
on these providers, never on infrastructure directly.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from userauth.api.v1.dependencies.security import (
    get_mailer,
    get_password_hasher,
    get_token_codec,
)
from userauth.application.interfaces.services import IMailer
from userauth.application.services import (
    CredentialService,
    PasswordResetService,
    UserService,
)
from userauth.infrastructure.persistence.database import get_db, get_db_transactional
from userauth.infrastructure.persistence.repositories import TokenLedger, UserRepository
from userauth.infrastructure.security import BcryptPasswordHasher, TokenCodec


async def get_user_repo(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> UserRepository:
    """User repository for read operations."""
    return UserRepository(db)


async def get_credential_service(
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
    codec: Annotated[TokenCodec, Depends(get_token_codec)],
    hasher: Annotated[BcryptPasswordHasher, Depends(get_password_hasher)],
) -> CredentialService:
    return CredentialService(
        UserRepository(db),
        TokenLedger(db),
        codec,
        hasher,
        access_ttl=codec.ttls.access,
        refresh_ttl=codec.ttls.refresh,
    )


async def get_password_reset_service(
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
    codec: Annotated[TokenCodec, Depends(get_token_codec)],
    hasher: Annotated[BcryptPasswordHasher, Depends(get_password_hasher)],
    mailer: Annotated[IMailer, Depends(get_mailer)],
) -> PasswordResetService:
    return PasswordResetService(
        UserRepository(db),
        TokenLedger(db),
        codec,
        hasher,
        mailer,
        reset_ttl=codec.ttls.reset,
    )


async def get_user_service(
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
    hasher: Annotated[BcryptPasswordHasher, Depends(get_password_hasher)],
    reset_service: Annotated[PasswordResetService, Depends(get_password_reset_service)],
) -> UserService:
    """User service; shares the request's session with the reset service."""
    return UserService(UserRepository(db), TokenLedger(db), hasher, reset_service)
