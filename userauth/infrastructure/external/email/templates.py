"""Email bodies for the password reset and admin set-password messages."""

from dataclasses import dataclass
from html import escape
from urllib.parse import quote


@dataclass(frozen=True)
class EmailMessage:
    subject: str
    html_body: str
    text_body: str


_HTML_LAYOUT = """<!DOCTYPE html>
<html>
<head><meta charset="utf-8"></head>
<body style="font-family: -apple-system, 'Segoe UI', Roboto, sans-serif; line-height: 1.6; color: #1f2933;">
  <div style="max-width: 560px; margin: 0 auto; padding: 24px;">
    <h2>{heading}</h2>
    <p>Hello {name},</p>
    <p>{intro}</p>
    <p><a href="{link}" style="display: inline-block; padding: 10px 20px; background: #2563eb; color: #ffffff; text-decoration: none; border-radius: 4px;">{action}</a></p>
    <p>If the button does not work, copy this link into your browser:</p>
    <p><a href="{link}">{link}</a></p>
    <p>This link expires in {expires_minutes} minutes. {footer}</p>
  </div>
</body>
</html>
"""


def _link(frontend_url: str, path: str, token: str) -> str:
    return f"{frontend_url.rstrip('/')}/{path}?token={quote(token, safe='')}"


def _render(
    *,
    subject: str,
    heading: str,
    name: str,
    intro: str,
    action: str,
    link: str,
    expires_minutes: int,
    footer: str,
) -> EmailMessage:
    html_body = _HTML_LAYOUT.format(
        heading=escape(heading),
        name=escape(name),
        intro=escape(intro),
        action=escape(action),
        link=escape(link, quote=True),
        expires_minutes=expires_minutes,
        footer=escape(footer),
    )
    text_body = (
        f"Hello {name},\n\n{intro}\n\n{action}: {link}\n\n"
        f"This link expires in {expires_minutes} minutes. {footer}\n"
    )
    return EmailMessage(subject=subject, html_body=html_body, text_body=text_body)


def password_reset_email(
    *,
    app_name: str,
    frontend_url: str,
    token: str,
    display_name: str,
    expires_minutes: int,
) -> EmailMessage:
    """Link to {frontend_url}/reset-password?token=..."""
    return _render(
        subject=f"Password reset request - {app_name}",
        heading="Reset your password",
        name=display_name,
        intro="We received a request to reset the password for your account.",
        action="Reset password",
        link=_link(frontend_url, "reset-password", token),
        expires_minutes=expires_minutes,
        footer="If you did not request a reset, you can ignore this email.",
    )


def admin_password_set_email(
    *,
    app_name: str,
    frontend_url: str,
    token: str,
    display_name: str,
    expires_minutes: int,
) -> EmailMessage:
    """Link to {frontend_url}/set-password?token=..."""
    return _render(
        subject=f"Your {app_name} account is ready",
        heading="Set your password",
        name=display_name,
        intro="An administrator created an account for you. Choose a password to sign in.",
        action="Set password",
        link=_link(frontend_url, "set-password", token),
        expires_minutes=expires_minutes,
        footer="Ask your administrator for a new link if this one has expired.",
    )
