"""
Contact form settings: the field constraints and presentation defaults.
"""
from typing import Any, Dict

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from formpipe.domain.validation.constraints import ConstraintSet

DEFAULT_FORM_RULES: Dict[str, Dict[str, Any]] = {
    "replyTo": {"required": True, "isEmail": True, "maxLength": 254},
    "subject": {"required": True, "minLength": 3, "maxLength": 120},
    "message": {"required": True, "minLength": 10, "maxLength": 5000},
}


class FormSettings(BaseSettings):
    """
    Defines the constraints applied to submitted fields.

    FORM_RULES is read from the environment as JSON, keyed by field name, using
    the same vocabulary as the frontend form configuration::

        {"replyTo": {"required": true, "isEmail": true},
         "phoneNumber": {"phoneValidationMode": "e164"}}
    """
    FORM_RULES: Dict[str, Dict[str, Any]] = Field(default_factory=lambda: dict(DEFAULT_FORM_RULES))
    FORM_PHONE_FIELD: str = "phoneNumber"
    FORM_DEFAULT_SUBJECT: str = "New Contact Form Submission"
    FORM_ENDPOINT_PATH: str = "/contact"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )

    @field_validator("FORM_RULES")
    @classmethod
    def validate_form_rules(cls, value: Dict[str, Dict[str, Any]]) -> Dict[str, Dict[str, Any]]:
        """Rejects rule sets that cannot be turned into a ConstraintSet."""
        ConstraintSet.from_config(value)
        return value

    def build_constraint_set(self) -> ConstraintSet:
        return ConstraintSet.from_config(self.FORM_RULES)
