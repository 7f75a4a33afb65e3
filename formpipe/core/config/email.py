"""Email configuration settings for the contact form gateway.

This module defines the SMTP connection and the envelope addresses used when a
vetted submission is handed to the mail transport.
"""

from typing import Optional

from pydantic import EmailStr, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class EmailSettings(BaseSettings):
    """Email configuration settings.

    Attributes:
        EMAIL_SMTP_HOST: SMTP server hostname
        EMAIL_SMTP_PORT: SMTP server port (587 for STARTTLS, 465 for implicit TLS)
        EMAIL_SMTP_USERNAME: SMTP authentication username
        EMAIL_SMTP_PASSWORD: SMTP authentication password (SecretStr)
        EMAIL_FROM_EMAIL: Envelope sender of submission emails
        EMAIL_FROM_NAME: Display name of the sender
        EMAIL_TO_EMAIL: Mailbox receiving submissions
        EMAIL_TEST_MODE: Log emails instead of sending them
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )

    EMAIL_SMTP_HOST: str = Field(default="mailpit", description="SMTP server hostname")
    EMAIL_SMTP_PORT: int = Field(default=1025, ge=1, le=65535, description="SMTP server port")
    EMAIL_SMTP_USERNAME: Optional[str] = Field(default=None)
    EMAIL_SMTP_PASSWORD: Optional[SecretStr] = Field(default=None)

    EMAIL_FROM_EMAIL: EmailStr = Field(default="noreply@example.com")
    EMAIL_FROM_NAME: str = Field(default="Contact Form")
    EMAIL_TO_EMAIL: EmailStr = Field(default="inbox@example.com")

    EMAIL_TEST_MODE: bool = Field(
        default=False,
        description="Enable test mode (emails logged instead of sent)"
    )

    @property
    def smtp_uses_credentials(self) -> bool:
        """Whether SMTP authentication should be attempted.

        The local mailpit sink on port 1025 never authenticates; otherwise auth is
        used only when both username and password are configured.
        """
        if self.EMAIL_SMTP_HOST == "mailpit" and self.EMAIL_SMTP_PORT == 1025:
            return False
        return bool(self.EMAIL_SMTP_USERNAME and self.EMAIL_SMTP_PASSWORD)

    @property
    def smtp_implicit_tls(self) -> bool:
        return self.EMAIL_SMTP_PORT == 465

    @property
    def smtp_starttls(self) -> bool:
        return self.EMAIL_SMTP_PORT == 587
