"""Mail transport that logs messages instead of sending them.

Used when EMAIL_TEST_MODE is enabled (development and test environments).
Sent messages are also kept in memory so tests can inspect them.
"""

from typing import Dict, List

import structlog

from formpipe.domain.interfaces.email import MailTransport

logger = structlog.get_logger(__name__)


def mask_email(address: str) -> str:
    """Mask an email address for logs: ``jane@example.com`` -> ``jan***@example.com``."""
    if "@" not in address:
        return "***"
    local, domain = address.split("@", 1)
    return f"{local[:3]}***@{domain}"


class LoggingMailTransport(MailTransport):
    name = "logging"

    def __init__(self):
        self.sent: List[Dict[str, str]] = []

    async def send(
        self,
        from_address: str,
        to_address: str,
        reply_to: str,
        subject: str,
        html_body: str,
        plain_text_body: str,
    ) -> None:
        self.sent.append(
            {
                "from_address": from_address,
                "to_address": to_address,
                "reply_to": reply_to,
                "subject": subject,
                "html_body": html_body,
                "plain_text_body": plain_text_body,
            }
        )
        logger.info(
            "Submission email (test mode)",
            to_email=mask_email(to_address),
            reply_to=mask_email(reply_to),
            subject=subject,
            body_length=len(html_body),
        )
