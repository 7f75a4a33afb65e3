"""Constraint validation for submitted contact form fields.

The validator walks the ConstraintSet in declaration order and reports every
violated rule. It never raises on bad input: failures are returned as data so
the caller can build an error response.
"""

from dataclasses import dataclass
from typing import Dict, List, Mapping

import structlog

from formpipe.domain.validation.constraints import ConstraintSet, InputRule, PhoneMode
from formpipe.domain.validation.validators import is_email, is_phone

logger = structlog.get_logger(__name__)

PHONE_MESSAGES: Dict[PhoneMode, str] = {
    PhoneMode.E164: "must be a valid E.164 phone number (e.g. +14155552671)",
    PhoneMode.STRICT: "must be a valid phone number of 8-15 digits (e.g. 14155552671)",
    PhoneMode.LOOSE: (
        "must be a valid phone number of at least 8 characters using digits, "
        "spaces, +, parentheses or hyphens (e.g. +1 (415) 555-2671)"
    ),
}


@dataclass(frozen=True)
class ValidationFailure:
    """One violated rule for one field."""
    field: str
    value: str
    message: str
    rule: InputRule

    def to_dict(self) -> Dict[str, object]:
        return {
            "field": self.field,
            "value": self.value,
            "rules": self.rule.to_config(),
            "message": self.message,
        }


def _label(field_name: str) -> str:
    return field_name[:1].upper() + field_name[1:]


class ConstraintValidator:
    """Evaluates submitted fields against a ConstraintSet.

    Rules per field, in order:
    1. `required` on an empty value reports "is required" and skips the rest.
    2. On a non-empty value, length bounds, email format and phone format are
       each checked independently, so one value can fail several of them.

    Phone checks only apply to the configured phone field (`phoneNumber` by
    default).
    """

    def __init__(self, constraints: ConstraintSet, phone_field: str = "phoneNumber"):
        self.constraints = constraints
        self.phone_field = phone_field

    def validate_all(self, fields: Mapping[str, str]) -> List[ValidationFailure]:
        """Validate every constrained field.

        Args:
            fields: Submitted values keyed by field name. Missing fields count as
                empty strings.

        Returns:
            List[ValidationFailure]: Empty iff every rule is satisfied.
        """
        failures: List[ValidationFailure] = []
        for field_name, rule in self.constraints.items():
            value = fields.get(field_name, "")
            failures.extend(self.validate_field(field_name, value, rule))

        if failures:
            logger.info(
                "Submission failed validation",
                failure_count=len(failures),
                fields=sorted({f.field for f in failures}),
            )
        return failures

    def validate_field(self, field_name: str, value: str, rule: InputRule) -> List[ValidationFailure]:
        label = _label(field_name)

        if not value:
            if rule.required:
                return [ValidationFailure(field_name, value, f"{label} is required", rule)]
            return []

        messages: List[str] = []

        if rule.min_length is not None and len(value) < rule.min_length:
            messages.append(f"{label} is too short (minimum length: {rule.min_length})")

        if rule.max_length is not None and len(value) > rule.max_length:
            messages.append(f"{label} is too long (maximum length: {rule.max_length})")

        if rule.is_email and not is_email(value):
            messages.append(f"{label} must be a valid email address")

        if (
            rule.phone_mode is not None
            and field_name == self.phone_field
            and not is_phone(value, rule.phone_mode)
        ):
            messages.append(f"{label} {PHONE_MESSAGES[rule.phone_mode]}")

        return [ValidationFailure(field_name, value, message, rule) for message in messages]
