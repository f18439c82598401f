"""Domain layer: enums and exceptions.

No dependencies on infrastructure or presentation. Used by application
and infrastructure layers.
"""

from userauth.domain.enums import TokenPurpose, TokenType, UserRole
from userauth.domain.exceptions import (
    INVALID_TOKEN_MESSAGE,
    AuthenticationException,
    AuthorizationException,
    ConflictException,
    InvalidTokenError,
    ResourceNotFoundException,
    SqlNotConfiguredException,
    UserAlreadyExistsException,
    UserAuthException,
    ValidationException,
)

__all__ = [
    # Enums
    "TokenPurpose",
    "TokenType",
    "UserRole",
    # Exceptions
    "INVALID_TOKEN_MESSAGE",
    "AuthenticationException",
    "AuthorizationException",
    "ConflictException",
    "InvalidTokenError",
    "ResourceNotFoundException",
    "SqlNotConfiguredException",
    "UserAlreadyExistsException",
    "UserAuthException",
    "ValidationException",
]
