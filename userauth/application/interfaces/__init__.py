"""Application ports (Protocols) implemented by infrastructure."""

from userauth.application.interfaces.repositories import ITokenLedger, IUserRepository
from userauth.application.interfaces.services import (
    IMailer,
    IPasswordHasher,
    ITokenCodec,
)

__all__ = [
    "IMailer",
    "IPasswordHasher",
    "ITokenCodec",
    "ITokenLedger",
    "IUserRepository",
]
