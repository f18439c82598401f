"""Security and mail collaborators (composition root).

Built from Settings per request; tests swap them through app.dependency_overrides.
"""

from __future__ import annotations

from userauth.application.interfaces.services import IMailer
from userauth.core.config import get_settings
from userauth.infrastructure.external.email import build_mailer
from userauth.infrastructure.security import BcryptPasswordHasher, TokenCodec


def get_token_codec() -> TokenCodec:
    """Token codec with secrets and TTLs from settings."""
    return TokenCodec.from_settings(get_settings())


def get_password_hasher() -> BcryptPasswordHasher:
    """Password hasher with the configured bcrypt cost."""
    return BcryptPasswordHasher(rounds=get_settings().bcrypt_rounds)


def get_mailer() -> IMailer:
    """SMTP mailer when configured, otherwise the log-only mailer."""
    return build_mailer(get_settings())
