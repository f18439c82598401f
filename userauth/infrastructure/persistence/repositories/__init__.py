"""Repositories: user store and token ledger."""

from userauth.infrastructure.persistence.repositories.base import BaseRepository
from userauth.infrastructure.persistence.repositories.token_repo import TokenLedger
from userauth.infrastructure.persistence.repositories.user_repo import UserRepository

__all__ = [
    "BaseRepository",
    "TokenLedger",
    "UserRepository",
]
