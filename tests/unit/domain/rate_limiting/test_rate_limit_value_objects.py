"""Tests for RateWindow, Decision, the shared window step and key derivation."""

import pytest

from formpipe.domain.rate_limiting.repositories import apply_window
from formpipe.domain.rate_limiting.value_objects import Decision, RateWindow, derive_client_key

NOW = 1_700_000_000


pytestmark = pytest.mark.unit


class TestRateWindow:
    def test_expiry_uses_greater_or_equal(self):
        window = RateWindow(window_start=NOW, count=1)
        assert not window.is_expired(NOW + 59, 60)
        assert window.is_expired(NOW + 60, 60)

    def test_count_must_be_positive(self):
        with pytest.raises(ValueError):
            RateWindow(window_start=NOW, count=0)

    def test_dict_round_trip_and_bad_data(self):
        window = RateWindow(window_start=NOW, count=3)
        assert RateWindow.from_dict(window.to_dict()) == window
        with pytest.raises(ValueError):
            RateWindow.from_dict({"start": NOW})
        with pytest.raises(ValueError):
            RateWindow.from_dict({"start": "soon", "count": 1})
        with pytest.raises(ValueError):
            RateWindow.from_dict({"start": float("inf"), "count": 1})


class TestDecision:
    def test_reset_is_clamped_to_one_second(self):
        assert Decision.block(0).reset_in_seconds == 1
        assert Decision.allow(2, -5).reset_in_seconds == 1

    def test_open_fallback(self):
        decision = Decision.open_fallback(limit=5, window_seconds=60)
        assert decision == Decision(allowed=True, remaining=5, reset_in_seconds=60, fail_open=True)

    def test_http_headers(self):
        assert Decision.allow(2, 30).to_http_headers() == {
            "X-RateLimit-Remaining": "2",
            "X-RateLimit-Reset": "30",
        }
        assert Decision.block(12).to_http_headers()["Retry-After"] == "12"


class TestApplyWindow:
    def test_absent_window_opens_fresh_one(self):
        stored, decision = apply_window(None, NOW, limit=3, window_seconds=60)
        assert stored == RateWindow(NOW, 1)
        assert decision == Decision(allowed=True, remaining=2, reset_in_seconds=60)

    def test_increment_within_window(self):
        stored, decision = apply_window(RateWindow(NOW, 1), NOW + 10, limit=3, window_seconds=60)
        assert stored == RateWindow(NOW, 2)
        assert decision == Decision(allowed=True, remaining=1, reset_in_seconds=50)

    def test_limit_reached_blocks_without_increment(self):
        stored, decision = apply_window(RateWindow(NOW, 3), NOW + 45, limit=3, window_seconds=60)
        assert stored is None
        assert decision == Decision(allowed=False, remaining=0, reset_in_seconds=15)

    def test_expired_window_is_replaced(self):
        stored, decision = apply_window(RateWindow(NOW, 3), NOW + 60, limit=3, window_seconds=60)
        assert stored == RateWindow(NOW + 60, 1)
        assert decision.allowed and decision.remaining == 2

    def test_clock_skew_keeps_reset_positive(self):
        _, decision = apply_window(RateWindow(NOW + 100, 3), NOW, limit=3, window_seconds=60)
        assert decision.reset_in_seconds >= 1


class TestDeriveClientKey:
    def test_is_deterministic_and_hides_address(self):
        key = derive_client_key("203.0.113.7", salt="s")
        assert key == derive_client_key("203.0.113.7", salt="s")
        assert "203.0.113.7" not in key
        assert key.startswith("s_") and len(key) == 2 + 64

    def test_distinct_addresses_and_salts_give_distinct_keys(self):
        assert derive_client_key("203.0.113.7") != derive_client_key("203.0.113.8")
        assert derive_client_key("203.0.113.7", salt="a") != derive_client_key("203.0.113.7", salt="b")
