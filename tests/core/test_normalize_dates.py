"""Date Normalization — tests for timezone-stable calendar dates.

Tests cover:
    - Strict YYYY-MM-DD input anchored at 12:00 UTC
    - Calendar day preserved for every whole-hour offset from -12h to +11h
    - Impossible dates rejected rather than rolled over
    - Legacy fallback for full timestamps
"""

from datetime import date, datetime, timedelta, timezone

import pytest

from tripintake.core.errors import DateParseError
from tripintake.core.normalize_dates import calendar_day_in, is_calendar_date, normalize


def test_strict_date_anchored_at_noon_utc():
    assert normalize("2024-06-15") == datetime(2024, 6, 15, 12, tzinfo=timezone.utc)


@pytest.mark.parametrize("hours", range(-12, 12))
def test_calendar_day_survives_offset(hours):
    instant = normalize("2024-06-15")
    assert calendar_day_in(instant, timedelta(hours=hours)) == date(2024, 6, 15)


def test_offset_at_plus_twelve_crosses_midnight():
    assert calendar_day_in(normalize("2024-06-15"), timedelta(hours=12)) == date(2024, 6, 16)


def test_leap_day_accepted():
    assert normalize("2024-02-29").day == 29


@pytest.mark.parametrize("value", ["2024-13-01", "2023-02-29", "2024-02-30", "2024-00-10"])
def test_impossible_calendar_date_rejected(value):
    with pytest.raises(DateParseError) as exc:
        normalize(value)
    assert exc.value.value == value
    assert "not a calendar date" in exc.value.reason_text


def test_legacy_timestamp_with_z_suffix():
    assert normalize("2024-06-15T08:30:00Z") == datetime(2024, 6, 15, 8, 30, tzinfo=timezone.utc)


def test_legacy_timestamp_with_offset_converted_to_utc():
    result = normalize("2024-06-15T08:30:00+02:00")
    assert result == datetime(2024, 6, 15, 6, 30, tzinfo=timezone.utc)
    assert result.tzinfo == timezone.utc


def test_legacy_naive_timestamp_becomes_aware():
    assert normalize("2024-06-15T08:30:00").tzinfo is not None


@pytest.mark.parametrize("value", ["06/15/2024", "next tuesday", "", "   "])
def test_unparseable_string_rejected(value):
    with pytest.raises(DateParseError):
        normalize(value)


@pytest.mark.parametrize("value", ["0001-01-01T00:00:00+05:00", "9999-12-31T23:00:00-05:00"])
def test_timestamp_outside_utc_range_rejected(value):
    with pytest.raises(DateParseError):
        normalize(value)


@pytest.mark.parametrize("value", [None, 20240615, ["2024-06-15"]])
def test_non_string_rejected(value):
    with pytest.raises(DateParseError, match="expected a date string"):
        normalize(value)


def test_trailing_newline_not_strict():
    assert not is_calendar_date("2024-06-15\n")


@pytest.mark.parametrize("value, expected", [
    ("2024-06-15", True),
    ("2024-02-30", False),
    ("24-06-15", False),
    ("2024-6-15", False),
    (None, False),
])
def test_is_calendar_date(value, expected):
    assert is_calendar_date(value) is expected
