"""Email sending via SMTP."""

import logging
from email.message import EmailMessage

import aiosmtplib

from shelfbook.core.config import settings

logger = logging.getLogger(__name__)


async def send_email(to: str, subject: str, body: str) -> None:
    """Send a plain-text email via SMTP."""
    message = EmailMessage()
    message["From"] = f"{settings.app_name} <{settings.smtp_from}>"
    message["To"] = to
    message["Subject"] = subject
    message.set_content(body)

    await aiosmtplib.send(message, hostname=settings.smtp_host, port=settings.smtp_port)
    logger.info("Email '%s' sent to %s", subject, to)
