"""Domain enumerations for the user accounts service.

Enums represent fixed sets of domain values (token kinds, roles).
"""

from enum import Enum


class _ValuesMixin:
    """Mixin that adds a values() classmethod to str Enums."""

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid values as strings."""
        return [member.value for member in cls]


class TokenType(_ValuesMixin, str, Enum):
    """Kind of a persisted ledger row.

    Access tokens are never persisted, so they have no member here.
    """

    REFRESH = "refresh"
    RESET_PASSWORD = "password_reset"
    ADMIN_SET_PASSWORD = "admin_set_password"

    @property
    def is_reset(self) -> bool:
        """True for the kinds that run the verify / consume protocol."""
        return self in (TokenType.RESET_PASSWORD, TokenType.ADMIN_SET_PASSWORD)


class TokenPurpose(_ValuesMixin, str, Enum):
    """Kind of signed token handled by the token codec.

    Selects the signing secret, the TTL and the ``typ`` claim checked on decode.
    """

    ACCESS = "access"
    REFRESH = "refresh"
    RESET = "reset"


class UserRole(_ValuesMixin, str, Enum):
    """Role names that carry administrative rights."""

    ADMIN = "admin"
    SUPER_ADMIN = "super_admin"

    @classmethod
    def is_admin(cls, role: str | None) -> bool:
        return role in cls.values()
