"""Outbound email: mailers and message templates."""

from userauth.infrastructure.external.email.mailer import (
    LogOnlyMailer,
    SmtpMailer,
    build_mailer,
)

__all__ = ["LogOnlyMailer", "SmtpMailer", "build_mailer"]
