"""Outbound mail: SMTP sender and a log-only sender for unconfigured environments.

Both render the same templates. Failures are logged and re-raised as
MailDeliveryException so the request that triggered the email sees a 503.
"""

from __future__ import annotations

import asyncio
import smtplib
import ssl
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Any

from userauth.core.config import Settings
from userauth.infrastructure.exceptions import MailDeliveryException
from userauth.infrastructure.external.email.templates import (
    EmailMessage,
    admin_password_set_email,
    password_reset_email,
)
from userauth.shared.logging import get_logger, redact_email

logger = get_logger(__name__)

SMTP_TIMEOUT_SECONDS = 30


class _TemplateMailer:
    """Renders messages; subclasses implement _deliver."""

    def __init__(self, *, app_name: str, frontend_url: str, expires_minutes: int) -> None:
        self.app_name = app_name
        self.frontend_url = frontend_url
        self.expires_minutes = expires_minutes

    async def _deliver(self, to_email: str, message: EmailMessage) -> None:
        raise NotImplementedError

    async def send_password_reset(
        self, to_email: str, token: str, display_name: str
    ) -> None:
        message = password_reset_email(
            app_name=self.app_name,
            frontend_url=self.frontend_url,
            token=token,
            display_name=display_name,
            expires_minutes=self.expires_minutes,
        )
        await self._deliver(to_email, message)

    async def send_admin_password_set(self, user: Any, token: str) -> None:
        message = admin_password_set_email(
            app_name=self.app_name,
            frontend_url=self.frontend_url,
            token=token,
            display_name=user.full_name,
            expires_minutes=self.expires_minutes,
        )
        await self._deliver(user.email, message)


class LogOnlyMailer(_TemplateMailer):
    """Mailer that logs instead of sending. Used when SMTP is not configured."""

    async def _deliver(self, to_email: str, message: EmailMessage) -> None:
        logger.info(
            "Mail (log only): would send to %s (subject=%r)",
            redact_email(to_email),
            message.subject,
        )


class SmtpMailer(_TemplateMailer):
    """Mailer over SMTP (STARTTLS when use_tls, implicit SSL otherwise).

    smtplib is blocking, so each send runs in a worker thread.
    """

    def __init__(
        self,
        *,
        host: str,
        port: int = 587,
        user: str | None = None,
        password: str | None = None,
        use_tls: bool = True,
        from_email: str,
        from_name: str,
        app_name: str,
        frontend_url: str,
        expires_minutes: int,
    ) -> None:
        super().__init__(
            app_name=app_name, frontend_url=frontend_url, expires_minutes=expires_minutes
        )
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.use_tls = use_tls
        self.from_email = from_email
        self.from_name = from_name

    def _build(self, to_email: str, message: EmailMessage) -> MIMEMultipart:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = message.subject
        msg["From"] = f"{self.from_name} <{self.from_email}>"
        msg["To"] = to_email
        msg.attach(MIMEText(message.text_body, "plain"))
        msg.attach(MIMEText(message.html_body, "html"))
        return msg

    def _send_sync(self, to_email: str, message: EmailMessage) -> None:
        msg = self._build(to_email, message)
        context = ssl.create_default_context()
        if self.use_tls:
            with smtplib.SMTP(self.host, self.port, timeout=SMTP_TIMEOUT_SECONDS) as server:
                server.starttls(context=context)
                if self.user and self.password:
                    server.login(self.user, self.password)
                server.sendmail(self.from_email, to_email, msg.as_string())
        else:
            with smtplib.SMTP_SSL(
                self.host, self.port, context=context, timeout=SMTP_TIMEOUT_SECONDS
            ) as server:
                if self.user and self.password:
                    server.login(self.user, self.password)
                server.sendmail(self.from_email, to_email, msg.as_string())

    async def _deliver(self, to_email: str, message: EmailMessage) -> None:
        try:
            await asyncio.to_thread(self._send_sync, to_email, message)
        except (smtplib.SMTPException, ssl.SSLError, OSError) as e:
            logger.error(
                "Mail delivery to %s failed (%s): %s",
                redact_email(to_email),
                type(e).__name__,
                e,
            )
            raise MailDeliveryException(type(e).__name__) from e
        logger.info("Mail sent to %s (subject=%r)", redact_email(to_email), message.subject)


def build_mailer(settings: Settings) -> SmtpMailer | LogOnlyMailer:
    """SmtpMailer when SMTP is configured, else LogOnlyMailer."""
    common = {
        "app_name": settings.app_name,
        "frontend_url": settings.frontend_url,
        "expires_minutes": settings.reset_token_expire_minutes,
    }
    if not settings.smtp_configured or settings.smtp_host is None:
        return LogOnlyMailer(**common)
    return SmtpMailer(
        host=settings.smtp_host,
        port=settings.smtp_port,
        user=settings.smtp_user,
        password=(
            settings.smtp_password.get_secret_value() if settings.smtp_password else None
        ),
        use_tls=settings.smtp_use_tls,
        from_email=settings.mail_from or settings.smtp_user or "",
        from_name=settings.mail_from_name,
        **common,
    )
