"""
SMTP mail transport using fastapi-mail.

The transport is built once at application startup and handed to routes as
a dependency; nothing here is cached at module level.
"""
import logging
from typing import List, Union

from fastapi import Request
from fastapi_mail import FastMail, MessageSchema, ConnectionConfig, MessageType

from crm import settings

logger = logging.getLogger(__name__)


def build_mail_config() -> ConnectionConfig:
    """Build ConnectionConfig from application settings."""
    return ConnectionConfig(
        MAIL_USERNAME=settings.MAIL_USERNAME,
        MAIL_PASSWORD=settings.MAIL_PASSWORD,
        MAIL_FROM=settings.MAIL_FROM,
        MAIL_PORT=settings.MAIL_PORT,
        MAIL_SERVER=settings.MAIL_SERVER,
        MAIL_STARTTLS=settings.MAIL_STARTTLS,
        MAIL_SSL_TLS=settings.MAIL_SSL_TLS,
        USE_CREDENTIALS=bool(settings.MAIL_USERNAME),
        SUPPRESS_SEND=1 if settings.MAIL_SUPPRESS_SEND else 0,
    )


class MailTransport:
    """Thin wrapper around FastMail bound to one connection config."""

    def __init__(self, config: ConnectionConfig):
        self._mailer = FastMail(config)

    async def send(
        self,
        recipients: Union[List[str], str],
        subject: str,
        body: str,
        *,
        subtype: MessageType = MessageType.html,
    ) -> None:
        """
        Send an email.

        Args:
            recipients: Email address(es) to send to (list or single string).
            subject: Email subject.
            body: Email body (plain text or HTML depending on subtype).
            subtype: MessageType.html or MessageType.plain (default: html).
        """
        if isinstance(recipients, str):
            recipients = [recipients]
        message = MessageSchema(
            subject=subject,
            recipients=recipients,
            body=body,
            subtype=subtype,
        )
        logger.info("Sending email to %s with subject %r", recipients, subject)
        await self._mailer.send_message(message)


def get_mail_transport(request: Request) -> MailTransport:
    """Dependency returning the transport created at startup."""
    return request.app.state.mail_transport
