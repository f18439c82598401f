"""Application DTOs: plain result objects returned by the services."""

from userauth.application.dtos.auth import (
    LoginResult,
    MessageResult,
    RefreshResult,
    ResetVerification,
)
from userauth.application.dtos.user import UserResult, user_to_result

__all__ = [
    "LoginResult",
    "MessageResult",
    "RefreshResult",
    "ResetVerification",
    "UserResult",
    "user_to_result",
]
