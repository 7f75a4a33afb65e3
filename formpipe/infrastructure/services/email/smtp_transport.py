"""SMTP mail transport built on fastapi-mail.

Connection security follows the port: 465 uses implicit TLS, 587 STARTTLS, and
anything else (such as the local mailpit sink on 1025) plain SMTP.
Authentication is skipped for mailpit and whenever credentials are missing.
"""

from typing import Dict, Optional

import structlog
from fastapi_mail import ConnectionConfig, FastMail, MessageSchema, MessageType
from fastapi_mail.schemas import MultipartSubtypeEnum

from formpipe.core.config.settings import Settings
from formpipe.core.exceptions import MailTransportError
from formpipe.domain.interfaces.email import MailTransport
from formpipe.infrastructure.services.email.logging_transport import LoggingMailTransport, mask_email

logger = structlog.get_logger(__name__)


class SmtpMailTransport(MailTransport):
    """Delivers submissions over SMTP.

    One FastMail client is built per sender address and reused.
    """

    name = "smtp"

    def __init__(self, app_settings: Settings):
        self.settings = app_settings
        self._clients: Dict[str, FastMail] = {}

    def _connection_config(self, from_address: str) -> ConnectionConfig:
        cfg = self.settings
        password = cfg.EMAIL_SMTP_PASSWORD.get_secret_value() if cfg.EMAIL_SMTP_PASSWORD else ""
        return ConnectionConfig(
            MAIL_USERNAME=cfg.EMAIL_SMTP_USERNAME or "",
            MAIL_PASSWORD=password,
            MAIL_FROM=from_address,
            MAIL_FROM_NAME=cfg.EMAIL_FROM_NAME,
            MAIL_PORT=cfg.EMAIL_SMTP_PORT,
            MAIL_SERVER=cfg.EMAIL_SMTP_HOST,
            MAIL_STARTTLS=cfg.smtp_starttls,
            MAIL_SSL_TLS=cfg.smtp_implicit_tls,
            USE_CREDENTIALS=cfg.smtp_uses_credentials,
            VALIDATE_CERTS=cfg.smtp_starttls or cfg.smtp_implicit_tls,
        )

    def _client(self, from_address: str) -> FastMail:
        client = self._clients.get(from_address)
        if client is None:
            client = self._clients[from_address] = FastMail(self._connection_config(from_address))
        return client

    def build_message(
        self,
        to_address: str,
        reply_to: str,
        subject: str,
        html_body: str,
        plain_text_body: str,
    ) -> MessageSchema:
        return MessageSchema(
            subject=subject,
            recipients=[to_address],
            reply_to=[reply_to] if reply_to else [],
            body=html_body,
            alternative_body=plain_text_body,
            subtype=MessageType.html,
            multipart_subtype=MultipartSubtypeEnum.alternative,
        )

    async def send(
        self,
        from_address: str,
        to_address: str,
        reply_to: str,
        subject: str,
        html_body: str,
        plain_text_body: str,
    ) -> None:
        try:
            message = self.build_message(to_address, reply_to, subject, html_body, plain_text_body)
            await self._client(from_address).send_message(message)
        except Exception as e:
            logger.error(
                "Failed to send submission email",
                to_email=mask_email(to_address),
                smtp_host=self.settings.EMAIL_SMTP_HOST,
                error=str(e),
            )
            raise MailTransportError(f"Message could not be sent. Mailer Error: {e}") from e

        logger.info("Submission email sent", to_email=mask_email(to_address), subject=subject)


def create_mail_transport(app_settings: Settings, test_mode: Optional[bool] = None) -> MailTransport:
    """Pick the logging transport in test mode, SMTP otherwise."""
    use_test_mode = app_settings.EMAIL_TEST_MODE if test_mode is None else test_mode
    if use_test_mode:
        return LoggingMailTransport()
    return SmtpMailTransport(app_settings)
