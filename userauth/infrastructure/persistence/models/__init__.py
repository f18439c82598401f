"""ORM models. Import from here so Base.metadata sees every table."""

from userauth.infrastructure.persistence.models.token import Token
from userauth.infrastructure.persistence.models.user import User

__all__ = ["Token", "User"]
