"""Parsing of the date and time text forms that SQL databases return."""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone

_DATE = r"(?P<year>\d{4})-(?P<month>\d{2})-(?P<day>\d{2})"
_CLOCK = (
    r"(?P<hour>\d{1,2}):(?P<minute>\d{2}):(?P<second>\d{2})"
    r"(?:\.(?P<frac>\d{1,9}))?"
)
_TZ_HMS = r"(?P<sign>[+-])(?P<tzh>\d{2}):(?P<tzm>\d{2}):(?P<tzs>\d{2})"
_TZ_HM = r"(?P<sign>[+-])(?P<tzh>\d{2}):(?P<tzm>\d{2})"
_TZ_H = r"(?P<sign>[+-])(?P<tzh>\d{2})"
_TZ_RFC = r"(?:(?P<zulu>Z)|(?P<sign>[+-])(?P<tzh>\d{2}):(?P<tzm>\d{2}))"

_DATE_ONLY = re.compile(_DATE)
_TIME = re.compile(_CLOCK)
_TIMETZ_HMS = re.compile(_CLOCK + _TZ_HMS)
_TIMETZ_HM = re.compile(_CLOCK + _TZ_HM)
_TIMETZ_H = re.compile(_CLOCK + _TZ_H)
_TIMESTAMP = re.compile(_DATE + " " + _CLOCK)
_TIMESTAMPTZ_HMS = re.compile(_DATE + " " + _CLOCK + _TZ_HMS)
_TIMESTAMPTZ_HM = re.compile(_DATE + " " + _CLOCK + _TZ_HM)
_TIMESTAMPTZ_H = re.compile(_DATE + " " + _CLOCK + _TZ_H)
_RFC3339 = re.compile(_DATE + "T" + _CLOCK + _TZ_RFC)


def _error(s: str) -> ValueError:
    return ValueError(f"can't parse time={s!r}")


def _parse(pattern: re.Pattern, s: str) -> datetime:
    match = pattern.fullmatch(s)
    if match is None:
        raise _error(s)
    g = match.groupdict()

    def num(name: str, default: int = 0) -> int:
        value = g.get(name)
        return int(value) if value else default

    frac = g.get("frac") or ""
    microsecond = int(frac.ljust(6, "0")[:6]) if frac else 0

    try:
        if g.get("sign"):
            offset = timedelta(hours=num("tzh"), minutes=num("tzm"), seconds=num("tzs"))
            if g["sign"] == "-":
                offset = -offset
            tz = timezone(offset)
        else:
            tz = timezone.utc
        return datetime(
            num("year", 1),
            num("month", 1),
            num("day", 1),
            num("hour"),
            num("minute"),
            num("second"),
            microsecond,
            tzinfo=tz,
        )
    except ValueError as exc:
        raise _error(s) from exc


def parse_time(s: str) -> datetime:
    """Parse a date, time, timestamp or RFC 3339 string into an aware datetime.

    Values without an offset are taken as UTC; time-only values fall on
    0001-01-01. Fractions finer than a microsecond are truncated.
    """
    n = len(s)

    if n >= len("2006-01-02 15:04:05"):
        sep = s[10]
        if sep == " ":
            if s[n - 6] in "+-":
                return _parse(_TIMESTAMPTZ_HM, s)
            if s[n - 3] in "+-":
                return _parse(_TIMESTAMPTZ_H, s)
            if s[n - 9] in "+-":
                return _parse(_TIMESTAMPTZ_HMS, s)
            return _parse(_TIMESTAMP, s)
        if sep == "T":
            return _parse(_RFC3339, s)

    if n >= len("15:04:05-07"):
        if s[n - 6] in "+-":
            return _parse(_TIMETZ_HM, s)
        if s[n - 3] in "+-":
            return _parse(_TIMETZ_H, s)
        if s[n - 9] in "+-":
            return _parse(_TIMETZ_HMS, s)

    if n < len("15:04:05"):
        raise _error(s)

    if s[2] == ":":
        return _parse(_TIME, s)
    return _parse(_DATE_ONLY, s)