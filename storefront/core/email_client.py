# storefront/core/email_client.py
"""
Outgoing email over SMTP.

Configured from Settings (SMTP_* keys). Port 465 setups usually want
SMTP_USE_SSL=true; port 587 wants SMTP_USE_TLS=true (STARTTLS).
"""

import smtplib
from email.message import EmailMessage

from storefront.core.config import Settings, get_settings


def smtp_configured() -> bool:
    settings = get_settings()
    return bool(settings.SMTP_HOST and settings.SMTP_USERNAME and settings.SMTP_PASSWORD)


def build_message(
    settings: Settings,
    to_email: str,
    subject: str,
    text_body: str,
    html_body: str | None = None,
) -> EmailMessage:
    """Plain-text message, with an HTML alternative when `html_body` is given."""
    sender = settings.SMTP_FROM_EMAIL or settings.SMTP_USERNAME

    msg = EmailMessage()
    msg["From"] = f"{settings.SMTP_FROM_NAME} <{sender}>"
    msg["To"] = to_email
    msg["Subject"] = subject
    msg.set_content(text_body)
    if html_body:
        msg.add_alternative(html_body, subtype="html")
    return msg


def _connect(settings: Settings) -> smtplib.SMTP:
    if settings.SMTP_USE_SSL:
        return smtplib.SMTP_SSL(settings.SMTP_HOST, settings.SMTP_PORT, timeout=30)

    server = smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT, timeout=30)
    if settings.SMTP_USE_TLS:
        server.starttls()
    return server


def send_email(
    to_email: str,
    subject: str,
    text_body: str,
    html_body: str | None = None,
) -> None:
    """
    Send one message to one recipient.

    Raises:
        RuntimeError: SMTP host or credentials are not configured.
        smtplib.SMTPException / OSError: the server refused or was unreachable.
    """
    settings = get_settings()
    if not smtp_configured():
        raise RuntimeError(
            "SMTP is not configured: set SMTP_HOST, SMTP_USERNAME and SMTP_PASSWORD"
        )

    msg = build_message(settings, to_email, subject, text_body, html_body)
    with _connect(settings) as server:
        server.login(settings.SMTP_USERNAME, settings.SMTP_PASSWORD)
        server.send_message(msg)
