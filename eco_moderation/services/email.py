"""Utility helpers for sending transactional emails."""

from __future__ import annotations

import asyncio
import smtplib
import ssl
from email.message import EmailMessage

from eco_moderation.config.settings import settings


class EmailServiceError(RuntimeError):
    """Raised when the email service cannot deliver a message."""


async def send_email(
    *,
    recipient: str,
    subject: str,
    body: str,
    html_body: str | None = None,
) -> None:
    """Send an email with the configured SMTP provider.

    ``body`` is the plain-text part; ``html_body`` is attached as the
    preferred alternative when given.
    """

    mail_settings = settings.mail
    if not mail_settings.is_configured():
        raise EmailServiceError("SMTP settings are not configured.")

    message = EmailMessage()
    message["From"] = mail_settings.sender
    message["To"] = recipient
    message["Subject"] = subject
    message.set_content(body)
    if html_body:
        message.add_alternative(html_body, subtype="html")

    password = (
        mail_settings.password.get_secret_value()
        if mail_settings.password is not None
        else None
    )
    timeout = mail_settings.timeout_seconds

    def _send_sync() -> None:
        context = ssl.create_default_context()
        if mail_settings.use_ssl:
            with smtplib.SMTP_SSL(
                mail_settings.host,
                mail_settings.port,
                context=context,
                timeout=timeout,
            ) as client:
                if mail_settings.username and password:
                    client.login(mail_settings.username, password)
                client.send_message(message)
            return

        with smtplib.SMTP(mail_settings.host, mail_settings.port, timeout=timeout) as client:
            if mail_settings.use_tls:
                client.starttls(context=context)
            if mail_settings.username and password:
                client.login(mail_settings.username, password)
            client.send_message(message)

    try:
        await asyncio.to_thread(_send_sync)
    except (smtplib.SMTPException, OSError) as exc:  # pragma: no cover - network errors
        raise EmailServiceError("Failed to send email.") from exc


__all__ = ["EmailServiceError", "send_email"]
