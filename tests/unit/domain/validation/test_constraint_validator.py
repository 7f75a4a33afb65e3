"""Tests for ConstraintValidator rule evaluation and failure reporting."""

import pytest

from formpipe.domain.validation.constraint_validator import ConstraintValidator, ValidationFailure
from formpipe.domain.validation.constraints import ConstraintSet, InputRule, PhoneMode


pytestmark = pytest.mark.unit


def _validator(config, **kwargs):
    return ConstraintValidator(ConstraintSet.from_config(config), **kwargs)


class TestConstraintValidator:
    def test_empty_submission_reports_every_required_field(self):
        validator = _validator(
            {"replyTo": {"required": True}, "subject": {"required": True}, "message": {"required": True}}
        )
        failures = validator.validate_all({})
        assert [f.field for f in failures] == ["replyTo", "subject", "message"]
        assert all("is required" in f.message for f in failures)

    def test_invalid_email_yields_single_failure(self):
        validator = _validator({"replyTo": {"isEmail": True, "required": True}})
        failures = validator.validate_all({"replyTo": "not-an-email"})
        assert len(failures) == 1
        assert failures[0].field == "replyTo"
        assert "valid email" in failures[0].message

    def test_required_failure_skips_other_checks(self):
        validator = _validator({"replyTo": {"required": True, "isEmail": True, "minLength": 5}})
        failures = validator.validate_all({"replyTo": ""})
        assert [f.message for f in failures] == ["ReplyTo is required"]

    def test_optional_empty_field_is_not_checked(self):
        validator = _validator({"website": {"minLength": 5, "isEmail": True}})
        assert validator.validate_all({"website": ""}) == []

    def test_checks_accumulate_for_one_value(self):
        validator = _validator({"replyTo": {"minLength": 8, "isEmail": True}})
        failures = validator.validate_all({"replyTo": "a@b"})
        assert [f.message for f in failures] == [
            "ReplyTo is too short (minimum length: 8)",
            "ReplyTo must be a valid email address",
        ]

    def test_length_bounds_in_messages(self):
        validator = _validator({"subject": {"minLength": 3, "maxLength": 5}})
        assert validator.validate_all({"subject": "ab"})[0].message == "Subject is too short (minimum length: 3)"
        assert validator.validate_all({"subject": "abcdef"})[0].message == "Subject is too long (maximum length: 5)"
        assert validator.validate_all({"subject": "abcd"}) == []

    def test_length_counts_characters_not_bytes(self):
        validator = _validator({"subject": {"maxLength": 4}})
        assert validator.validate_all({"subject": "ñäöü"}) == []

    @pytest.mark.parametrize(
        "mode,value,example",
        [
            ("e164", "123", "+14155552671"),
            ("strict", "+1 415", "14155552671"),
            ("loose", "abc", "+1 (415) 555-2671"),
        ],
    )
    def test_phone_failure_message_includes_example(self, mode, value, example):
        validator = _validator({"phoneNumber": {"phoneValidationMode": mode}})
        failures = validator.validate_all({"phoneNumber": value})
        assert len(failures) == 1
        assert failures[0].message.startswith("PhoneNumber must be a valid")
        assert example in failures[0].message

    def test_phone_check_only_applies_to_phone_field(self):
        validator = _validator({"fax": {"phoneValidationMode": "strict"}})
        assert validator.validate_all({"fax": "not a number"}) == []

    def test_phone_field_name_is_configurable(self):
        validator = _validator({"mobile": {"phoneValidationMode": "strict"}}, phone_field="mobile")
        assert len(validator.validate_all({"mobile": "12"})) == 1

    def test_unconstrained_fields_are_ignored(self):
        validator = _validator({"subject": {"required": True}})
        assert validator.validate_all({"subject": "Hi there", "extra": ""}) == []

    def test_valid_submission_has_no_failures(self, constraint_set):
        validator = ConstraintValidator(constraint_set)
        fields = {
            "replyTo": "jane@example.com",
            "subject": "Hello",
            "message": "A long enough message",
            "phoneNumber": "+14155552671",
        }
        assert validator.validate_all(fields) == []


class TestValidationFailure:
    def test_to_dict_renders_rule_in_config_vocabulary(self):
        rule = InputRule(required=True, is_email=True, phone_mode=PhoneMode.E164)
        failure = ValidationFailure("replyTo", "x", "ReplyTo must be a valid email address", rule)
        assert failure.to_dict() == {
            "field": "replyTo",
            "value": "x",
            "rules": {"required": True, "isEmail": True, "phoneValidationMode": "e164"},
            "message": "ReplyTo must be a valid email address",
        }
