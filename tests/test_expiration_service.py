from datetime import datetime, timedelta, timezone

import pytest

from splatbin.config import ExpiryPolicy
from splatbin.services.expiration_service import (
    REASON_CLAMPED,
    REASON_EVERLASTING,
    REASON_REQUESTED,
    REASON_SERVER_HORIZON,
    REASON_SERVER_UNLIMITED,
    compute_expiration,
    decide_expiration,
    parse_date_hour,
    parse_expiration_hint,
)

NOW = datetime(2026, 3, 1, 12, 30, tzinfo=timezone.utc)
BOUNDED = ExpiryPolicy(max_hours=168, allow_everlasting=True)
STRICT = ExpiryPolicy(max_hours=168, allow_everlasting=False)
UNLIMITED = ExpiryPolicy(max_hours=None, allow_everlasting=True)
UNLIMITED_STRICT = ExpiryPolicy(max_hours=None, allow_everlasting=False)


@pytest.mark.parametrize("hours", [1, 24, 167, 168, 169, 500, 10000, 100_000_000, 10**12])
def test_positive_hours_are_clamped_to_horizon(hours):
    assert compute_expiration(hours, NOW, BOUNDED) == NOW + timedelta(hours=min(hours, 168))


@pytest.mark.parametrize("hours", [0, -1])
def test_non_positive_hours_mean_never_when_everlasting_allowed(hours):
    assert compute_expiration(hours, NOW, BOUNDED) is None


@pytest.mark.parametrize("hours", [0, -1])
def test_non_positive_hours_fall_back_to_horizon_when_everlasting_disallowed(hours):
    assert compute_expiration(hours, NOW, STRICT) == NOW + timedelta(hours=168)


@pytest.mark.parametrize("hours", [0, -1])
def test_non_positive_hours_with_unlimited_horizon_and_no_everlasting(hours):
    assert decide_expiration(hours, NOW, UNLIMITED_STRICT) == (None, REASON_SERVER_UNLIMITED)


def test_missing_hint_defaults():
    assert decide_expiration(None, NOW, BOUNDED) == (None, REASON_EVERLASTING)
    assert decide_expiration(None, NOW, STRICT) == (NOW + timedelta(hours=168), REASON_SERVER_HORIZON)
    assert decide_expiration(None, NOW, UNLIMITED_STRICT) == (None, REASON_SERVER_UNLIMITED)


def test_unlimited_horizon_keeps_requested_hours():
    assert compute_expiration(10000, NOW, UNLIMITED) == NOW + timedelta(hours=10000)


def test_reason_distinguishes_clamping():
    assert decide_expiration(2, NOW, BOUNDED)[1] == REASON_REQUESTED
    assert decide_expiration(500, NOW, BOUNDED)[1] == REASON_CLAMPED


def test_absolute_date_hour_in_future():
    expected = datetime(2026, 3, 2, 15, tzinfo=timezone.utc)
    assert compute_expiration("2026-03-02 15", NOW, BOUNDED) == expected


def test_absolute_date_hour_beyond_horizon_is_clamped():
    assert compute_expiration("2027-01-01 0", NOW, BOUNDED) == NOW + timedelta(hours=168)


@pytest.mark.parametrize("value", ["2026-03-01 12", "2026-02-01 9", "2020-01-01 0"])
def test_absolute_date_not_in_future_is_treated_as_no_hint(value):
    assert compute_expiration(value, NOW, BOUNDED) is None
    assert compute_expiration(value, NOW, STRICT) == NOW + timedelta(hours=168)


@pytest.mark.parametrize("value", ["tomorrow", "2026-13-01 5", "2026-03-02 24", "2026-03-02"])
def test_malformed_absolute_date_is_ignored(value):
    assert parse_date_hour(value) is None
    assert compute_expiration(value, NOW, BOUNDED) is None


def test_naive_now_is_treated_as_utc():
    naive = NOW.replace(tzinfo=None)
    assert compute_expiration(1, naive, BOUNDED) == NOW + timedelta(hours=1)


def test_compute_is_deterministic():
    results = {compute_expiration(5, NOW, BOUNDED) for _ in range(5)}
    assert results == {NOW + timedelta(hours=5)}


@pytest.mark.parametrize(
    "expires_hours, expires, expected",
    [
        ("24", None, 24),
        (" -1 ", None, -1),
        ("abc", None, None),
        ("abc", "2026-03-02 15", "2026-03-02 15"),
        ("12", "2026-03-02 15", 12),
        (None, "  ", None),
        ("", "", None),
        (None, None, None),
    ],
)
def test_parse_expiration_hint(expires_hours, expires, expected):
    assert parse_expiration_hint(expires_hours, expires) == expected


@pytest.mark.parametrize("hours", [100_000_000, 10**12])
def test_huge_hours_are_clamped_not_everlasting(hours):
    assert decide_expiration(hours, NOW, BOUNDED) == (NOW + timedelta(hours=168), REASON_CLAMPED)
    assert decide_expiration(hours, NOW, STRICT) == (NOW + timedelta(hours=168), REASON_CLAMPED)


def test_unrepresentable_hours_with_unlimited_horizon_mean_never():
    assert decide_expiration(10**12, NOW, UNLIMITED) == (None, REASON_EVERLASTING)
