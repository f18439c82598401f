"""Mailer tests: templates, SMTP delivery and failure mapping, factory selection."""

import logging
import smtplib
from types import SimpleNamespace

import pytest

from userauth.core.config import Settings
from userauth.infrastructure.exceptions import MailDeliveryException
from userauth.infrastructure.external.email import LogOnlyMailer, SmtpMailer, build_mailer
from userauth.infrastructure.external.email.templates import (
    admin_password_set_email,
    password_reset_email,
)
from userauth.shared.logging import redact_email

TEMPLATE_ARGS = {
    "app_name": "userauth",
    "frontend_url": "https://app.acme.io/",
    "expires_minutes": 60,
}


class FakeSMTP:
    """Stands in for smtplib.SMTP; records what would be sent."""

    instances: list["FakeSMTP"] = []

    def __init__(self, host, port, timeout=None):
        self.host = host
        self.port = port
        self.logged_in = None
        self.sent = []
        FakeSMTP.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def starttls(self, context=None):
        pass

    def login(self, user, password):
        self.logged_in = (user, password)

    def sendmail(self, from_addr, to_addr, body):
        self.sent.append((from_addr, to_addr, body))


def smtp_mailer(**overrides) -> SmtpMailer:
    values = {
        "host": "smtp.acme.io",
        "user": "mailer",
        "password": "secret",
        "from_email": "no-reply@acme.io",
        "from_name": "User Accounts",
        **TEMPLATE_ARGS,
    }
    values.update(overrides)
    return SmtpMailer(**values)


def test_password_reset_email_links_to_reset_page() -> None:
    message = password_reset_email(token="a.b+c", display_name="Ada", **TEMPLATE_ARGS)
    assert "https://app.acme.io/reset-password?token=a.b%2Bc" in message.text_body
    assert "Hello Ada" in message.text_body
    assert "60 minutes" in message.html_body


def test_admin_password_set_email_links_to_set_password_page() -> None:
    message = admin_password_set_email(token="tok", display_name="Grace", **TEMPLATE_ARGS)
    assert "https://app.acme.io/set-password?token=tok" in message.text_body
    assert message.subject == "Your userauth account is ready"


def test_html_body_escapes_display_name() -> None:
    message = password_reset_email(
        token="tok", display_name="<script>x</script>", **TEMPLATE_ARGS
    )
    assert "<script>" not in message.html_body


async def test_log_only_mailer_does_not_raise() -> None:
    mailer = LogOnlyMailer(**TEMPLATE_ARGS)
    await mailer.send_password_reset("ada@acme.io", "tok", "Ada")
    await mailer.send_admin_password_set(
        SimpleNamespace(email="grace@acme.io", full_name="Grace"), "tok"
    )


async def test_log_only_mailer_never_logs_token(caplog) -> None:
    caplog.set_level(logging.DEBUG, logger="userauth")
    mailer = LogOnlyMailer(**TEMPLATE_ARGS)
    await mailer.send_password_reset("ada@acme.io", "secret-reset-token", "Ada")

    assert caplog.records
    assert "secret-reset-token" not in caplog.text
    assert "ada@acme.io" not in caplog.text


async def test_smtp_mailer_sends_over_starttls(monkeypatch) -> None:
    FakeSMTP.instances.clear()
    monkeypatch.setattr(smtplib, "SMTP", FakeSMTP)

    await smtp_mailer().send_password_reset("ada@acme.io", "tok", "Ada")

    (server,) = FakeSMTP.instances
    assert server.logged_in == ("mailer", "secret")
    from_addr, to_addr, body = server.sent[0]
    assert (from_addr, to_addr) == ("no-reply@acme.io", "ada@acme.io")
    assert "Password reset request" in body


async def test_smtp_failure_raises_mail_delivery_exception(monkeypatch) -> None:
    def refuse(*args, **kwargs):
        raise ConnectionRefusedError("connection refused")

    monkeypatch.setattr(smtplib, "SMTP", refuse)
    with pytest.raises(MailDeliveryException) as exc_info:
        await smtp_mailer().send_password_reset("ada@acme.io", "tok", "Ada")
    assert exc_info.value.details == {"reason": "ConnectionRefusedError"}


def test_build_mailer_selects_implementation() -> None:
    assert isinstance(build_mailer(Settings()), LogOnlyMailer)
    configured = Settings(smtp_host="smtp.acme.io", mail_from="no-reply@acme.io")
    mailer = build_mailer(configured)
    assert isinstance(mailer, SmtpMailer)
    assert mailer.from_email == "no-reply@acme.io"


def test_redact_email() -> None:
    assert redact_email("ada.lovelace@acme.io") == "ad***@acme.io"
    assert redact_email("not-an-email") == "redacted"
