"""Security: JWT token codec and password hashing."""

from userauth.infrastructure.security.jwt import InvalidTokenError, TokenCodec, TokenTTLs
from userauth.infrastructure.security.password import (
    BcryptPasswordHasher,
    get_password_hash,
    verify_password,
)

__all__ = [
    "BcryptPasswordHasher",
    "InvalidTokenError",
    "TokenCodec",
    "TokenTTLs",
    "get_password_hash",
    "verify_password",
]
