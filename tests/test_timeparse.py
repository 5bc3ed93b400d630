from datetime import datetime, time, timedelta, timezone

import pytest

from bunkit.timeparse import parse_time

UTC = timezone.utc


def test_date():
    assert parse_time("2021-09-15") == datetime(2021, 9, 15, tzinfo=UTC)


def test_timestamp_without_zone_is_utc():
    result = parse_time("2021-09-15 10:20:30")
    assert result == datetime(2021, 9, 15, 10, 20, 30, tzinfo=UTC)
    assert result.utcoffset() == timedelta(0)


def test_timestamptz_hours_minutes():
    result = parse_time("2021-09-15 10:20:30.123456+03:00")
    assert result == datetime(
        2021, 9, 15, 10, 20, 30, 123456, tzinfo=timezone(timedelta(hours=3))
    )


def test_timestamptz_hours_only():
    result = parse_time("2021-09-15 10:20:30-07")
    assert result.utcoffset() == timedelta(hours=-7)
    assert (result.hour, result.minute, result.second) == (10, 20, 30)


def test_timestamptz_with_seconds_offset():
    result = parse_time("2021-09-15 10:20:30+05:30:15")
    assert result.utcoffset() == timedelta(hours=5, minutes=30, seconds=15)


def test_rfc3339_zulu():
    result = parse_time("2021-09-15T10:20:30.5Z")
    assert result == datetime(2021, 9, 15, 10, 20, 30, 500000, tzinfo=UTC)


def test_rfc3339_with_offset():
    result = parse_time("2021-09-15T10:20:30-02:00")
    assert result.utcoffset() == timedelta(hours=-2)


def test_nanoseconds_are_truncated():
    result = parse_time("2021-09-15 10:20:30.123456789")
    assert result.microsecond == 123456


def test_time_only():
    result = parse_time("10:20:30")
    assert result.timetz().replace(tzinfo=None) == time(10, 20, 30)
    assert result.tzinfo == UTC


def test_timetz_hours_only():
    result = parse_time("10:20:30+02")
    assert result.utcoffset() == timedelta(hours=2)
    assert (result.hour, result.minute, result.second) == (10, 20, 30)


def test_timetz_hours_minutes():
    result = parse_time("10:20:30.25-04:30")
    assert result.utcoffset() == -timedelta(hours=4, minutes=30)
    assert result.microsecond == 250000


@pytest.mark.parametrize(
    "text",
    ["", "1:2", "abcdefgh", "2021-13-45", "2021-09-15 25:00:00", "2021-09-15Tnope-ish"],
)
def test_invalid_values_raise(text):
    with pytest.raises(ValueError, match="can't parse time"):
        parse_time(text)


def test_round_trip_through_isoformat():
    original = datetime(2020, 2, 29, 23, 59, 58, 1234, tzinfo=timezone(timedelta(hours=-5)))
    text = original.isoformat(sep=" ")
    assert parse_time(text) == original