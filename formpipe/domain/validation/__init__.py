"""Submission validation: constraints, format predicates, validator and sanitizer."""

from .constraint_validator import ConstraintValidator, ValidationFailure
from .constraints import ConstraintSet, InputRule, PhoneMode
from .sanitizer import escape_html, nl2br, sanitize_all, sanitize_field
from .validators import is_email, is_phone

__all__ = [
    "ConstraintSet",
    "InputRule",
    "PhoneMode",
    "ConstraintValidator",
    "ValidationFailure",
    "escape_html",
    "nl2br",
    "sanitize_all",
    "sanitize_field",
    "is_email",
    "is_phone",
]
