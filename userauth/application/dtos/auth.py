"""DTOs for credential and password-reset use cases."""

from dataclasses import dataclass

from userauth.application.dtos.user import UserResult


@dataclass(frozen=True)
class LoginResult:
    user: UserResult
    access_token: str
    refresh_token: str


@dataclass(frozen=True)
class RefreshResult:
    """New access token; the refresh token is returned unchanged."""

    access_token: str
    refresh_token: str


@dataclass(frozen=True)
class MessageResult:
    message: str


@dataclass(frozen=True)
class ResetVerification:
    """Outcome of a successful verify step."""

    message: str
    verified: bool = True
