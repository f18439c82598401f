"""Application services (use cases)."""

from userauth.application.services.credential_service import CredentialService
from userauth.application.services.password_reset_service import PasswordResetService
from userauth.application.services.user_service import UserService

__all__ = ["CredentialService", "PasswordResetService", "UserService"]
