"""Tests for the email and phone format predicates."""

import pytest

from formpipe.domain.validation.constraints import PhoneMode
from formpipe.domain.validation.validators import is_email, is_phone


pytestmark = pytest.mark.unit


class TestIsEmail:
    @pytest.mark.parametrize(
        "value",
        ["jane@example.com", "john.doe+tag@mail.example.co", "a_b%c@sub-domain.org", "x@ab.io"],
    )
    def test_accepts_structurally_valid_addresses(self, value):
        assert is_email(value)

    @pytest.mark.parametrize(
        "value",
        [
            "",
            "not-an-email",
            "jane@example",
            "jane@example.c",
            ".jane@example.com",
            "jane.@example.com",
            "ja..ne@example.com",
            "jane@.example.com",
            "jane@example..com",
            "jane doe@example.com",
            "a@b.c",
            "x" * 65 + "@example.com",
            "jane@example.com\n",
        ],
    )
    def test_rejects_malformed_addresses(self, value):
        assert not is_email(value)

    def test_total_length_is_capped_at_254(self):
        domain = "a" * 62 + "." + "b" * 62 + "." + "c" * 62 + "." + "d" * 62 + ".com"
        assert len("me@" + domain) > 254
        assert not is_email("me@" + domain)


class TestIsPhone:
    def test_e164_examples(self):
        assert is_phone("+14155552671", PhoneMode.E164) is True
        assert is_phone("123", PhoneMode.E164) is False
        # The leading "+" is optional, so eleven digits starting with 1 match.
        assert is_phone("14155552671", PhoneMode.E164) is True

    @pytest.mark.parametrize("value", ["+04155552671", "+1415555", "+1234567890123456", "+1 415 555 2671"])
    def test_e164_rejects(self, value):
        assert not is_phone(value, "e164")

    def test_e164_is_default_mode(self):
        assert is_phone("+442071838750")
        assert not is_phone("(415) 555-2671")

    def test_strict_mode_wants_8_to_15_digits(self):
        assert is_phone("12345678", PhoneMode.STRICT)
        assert is_phone("012345678901234", PhoneMode.STRICT)
        assert not is_phone("1234567", PhoneMode.STRICT)
        assert not is_phone("+14155552671", PhoneMode.STRICT)
        assert not is_phone("1234567890123456", PhoneMode.STRICT)

    def test_loose_mode_allows_formatting_characters(self):
        assert is_phone("+1 (415) 555-2671", PhoneMode.LOOSE)
        assert is_phone("555 1234", PhoneMode.LOOSE)
        assert not is_phone("555-123", PhoneMode.LOOSE)
        assert not is_phone("555.123.4567", PhoneMode.LOOSE)

    def test_value_is_trimmed_first(self):
        assert is_phone("  +14155552671  ", PhoneMode.E164)

    def test_unknown_mode_falls_back_to_e164(self):
        assert is_phone("+14155552671", "unknown")
        assert not is_phone("(415) 555-2671", "unknown")

    def test_empty_value_is_never_a_phone(self):
        assert not is_phone("", PhoneMode.LOOSE)
