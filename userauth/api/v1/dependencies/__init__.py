"""Presentation-layer dependency injection (composition root).

Provides FastAPI Depends() for DB-backed repositories, security collaborators,
application services and the auth gate.
"""

from userauth.api.v1.dependencies.auth import (
    authenticate_access_token,
    get_current_user,
    get_current_user_optional,
    require_admin,
)
from userauth.api.v1.dependencies.security import (
    get_mailer,
    get_password_hasher,
    get_token_codec,
)
from userauth.api.v1.dependencies.services import (
    get_credential_service,
    get_password_reset_service,
    get_user_repo,
    get_user_service,
)

__all__ = [
    "authenticate_access_token",
    "get_credential_service",
    "get_current_user",
    "get_current_user_optional",
    "get_mailer",
    "get_password_hasher",
    "get_password_reset_service",
    "get_token_codec",
    "get_user_repo",
    "get_user_service",
    "require_admin",
]
