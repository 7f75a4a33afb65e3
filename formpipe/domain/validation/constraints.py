"""Field Constraint Value Objects

Immutable value objects describing what a submitted field must look like.

Value Objects:
- PhoneMode: Enumeration of supported phone number grammars
- InputRule: Constraints applied to a single field
- ConstraintSet: Read-only, ordered mapping of field name to InputRule

A ConstraintSet is built once from configuration and shared read-only by every
request; nothing mutates it after construction.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Iterator, Mapping, Optional


class PhoneMode(str, Enum):
    """
    Phone number grammars.

    - LOOSE: digits, spaces, '+', parentheses and hyphens, at least 8 characters
    - STRICT: digits only, 8 to 15 of them
    - E164: optional '+', then 8 to 15 digits, the first of which is not 0
    """
    LOOSE = "loose"
    STRICT = "strict"
    E164 = "e164"


@dataclass(frozen=True, slots=True)
class InputRule:
    """
    Immutable constraints for one field.

    Business Rules:
    - Length bounds are each optional and must be non-negative
    - min_length cannot exceed max_length
    - Format checks (email, phone) only run when explicitly enabled
    """
    required: bool = False
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    is_email: bool = False
    phone_mode: Optional[PhoneMode] = None

    def __post_init__(self):
        """Validate rule configuration at construction time"""
        for name in ("min_length", "max_length"):
            bound = getattr(self, name)
            if bound is not None and (not isinstance(bound, int) or isinstance(bound, bool) or bound < 0):
                raise ValueError(f"{name} must be a non-negative integer")

        if (
            self.min_length is not None
            and self.max_length is not None
            and self.min_length > self.max_length
        ):
            raise ValueError("min_length cannot exceed max_length")

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> InputRule:
        """
        Create a rule from the form configuration vocabulary.

        Accepts the keys used by the frontend configuration (`required`,
        `minLength`, `maxLength`, `isEmail`, `phoneValidationMode`). Flags must be
        explicitly true to take effect.
        """
        if not isinstance(config, Mapping):
            raise ValueError("Field rules must be a mapping")

        phone_mode = config.get("phoneValidationMode")
        try:
            mode = PhoneMode(phone_mode) if phone_mode is not None else None
        except ValueError as e:
            raise ValueError(f"Unsupported phone validation mode: {phone_mode}") from e

        return cls(
            required=config.get("required") is True,
            min_length=config.get("minLength"),
            max_length=config.get("maxLength"),
            is_email=config.get("isEmail") is True,
            phone_mode=mode,
        )

    def to_config(self) -> Dict[str, Any]:
        """Render the rule back into the configuration vocabulary (for error bodies)"""
        config: Dict[str, Any] = {"required": self.required}
        if self.min_length is not None:
            config["minLength"] = self.min_length
        if self.max_length is not None:
            config["maxLength"] = self.max_length
        if self.is_email:
            config["isEmail"] = True
        if self.phone_mode is not None:
            config["phoneValidationMode"] = self.phone_mode.value
        return config


class ConstraintSet(Mapping[str, InputRule]):
    """
    Ordered, read-only mapping from field name to InputRule.

    Iteration follows declaration order, which fixes the order in which
    validation failures are reported.
    """

    __slots__ = ("_rules",)

    def __init__(self, rules: Mapping[str, InputRule]):
        for field_name, rule in rules.items():
            if not isinstance(field_name, str) or not field_name:
                raise ValueError("Field names must be non-empty strings")
            if not isinstance(rule, InputRule):
                raise ValueError(f"Rule for {field_name} must be an InputRule instance")
        self._rules = MappingProxyType(dict(rules))

    def __getitem__(self, field_name: str) -> InputRule:
        return self._rules[field_name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def __repr__(self) -> str:
        return f"ConstraintSet({dict(self._rules)!r})"

    @classmethod
    def from_config(cls, config: Mapping[str, Mapping[str, Any]]) -> ConstraintSet:
        """Build a constraint set from `{field: {rule: value}}` configuration."""
        if not isinstance(config, Mapping):
            raise ValueError("Form rules must be a mapping of field name to rules")
        return cls({field_name: InputRule.from_config(rules) for field_name, rules in config.items()})
