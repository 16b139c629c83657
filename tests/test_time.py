"""Tests for time helpers."""

from datetime import UTC, datetime, timedelta, timezone

from wtf_dial.db.time import to_utc, truncate_to_minute, utcnow

PLUS_TWO = timezone(timedelta(hours=2))


def test_truncate_to_minute_drops_seconds_and_microseconds() -> None:
    ts = datetime(2026, 10, 19, 12, 34, 56, 789, tzinfo=UTC)
    assert truncate_to_minute(ts) == datetime(2026, 10, 19, 12, 34, tzinfo=UTC)


def test_truncate_to_minute_keeps_boundaries() -> None:
    ts = datetime(2026, 10, 19, 12, 34, tzinfo=UTC)
    assert truncate_to_minute(ts) == ts


def test_truncate_to_minute_converts_offsets_to_utc() -> None:
    ts = datetime(2026, 10, 19, 14, 34, 56, tzinfo=PLUS_TWO)
    truncated = truncate_to_minute(ts)
    assert truncated.tzinfo is UTC
    assert truncated.hour == 12
    assert truncated.minute == 34


def test_to_utc_treats_naive_values_as_utc() -> None:
    assert to_utc(datetime(2026, 10, 19, 12, 0)) == datetime(2026, 10, 19, 12, 0, tzinfo=UTC)


def test_to_utc_converts_aware_values() -> None:
    converted = to_utc(datetime(2026, 10, 19, 13, 0, tzinfo=PLUS_TWO))
    assert converted.tzinfo is UTC
    assert converted.hour == 11


def test_utcnow_is_timezone_aware() -> None:
    assert utcnow().tzinfo is UTC
