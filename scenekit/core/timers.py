#!/usr/bin/env python3
"""
Time-window helpers for scene conditions.

Times are given as "HH", "HH:MM" or "HH:MM:SS" strings and refer to *today*
in the configured local timezone, which makes them convenient to combine
with controller values such as the sunset hour::

    if is_time("08:10", 0, 20) and before_time(sunset_hour):
        ...

Every function accepts an optional aware ``reference`` datetime that stands
in for "now".
"""

from __future__ import annotations

import datetime
import re
import time
from collections.abc import Iterable
from typing import Any, Mapping, Optional, Tuple

from ..utils.timezone import get_local_timezone

_TIME_PART = re.compile(r"\d+")

# (temperature upper bound in C, hours of pre-heating)
ECO_LEAD_HOURS: Tuple[Tuple[float, float], ...] = ((-15, 2.0), (-10, 1.0), (0, 1.0), (10, 0.5))
COMFORT_LEAD_HOURS: Tuple[Tuple[float, float], ...] = ((-20, 3.0), (-10, 2.0), (0, 1.0), (10, 1.0))


def _now(reference: Optional[datetime.datetime] = None) -> datetime.datetime:
    tz = get_local_timezone()
    if reference is not None:
        return reference.astimezone(tz)
    return datetime.datetime.now(tz=tz)


def _normalize(target: datetime.datetime) -> datetime.datetime:
    """Adjust for DST gaps/overlaps by round-tripping through UTC."""
    roundtrip = target.astimezone(datetime.timezone.utc).astimezone(target.tzinfo)
    if (
        roundtrip.hour != target.hour
        or roundtrip.minute != target.minute
        or roundtrip.second != target.second
        or roundtrip.fold != target.fold
    ):
        return roundtrip
    return target


def parse_time_string(time_str: str) -> Tuple[int, int, int]:
    """Parse "HH", "HH:MM" or "HH:MM:SS" into ``(hour, minute, second)``.

    Missing minutes and seconds default to zero, so "08" equals "08:00:00".

    Raises:
        ValueError: If the string holds no hour or a component is out of range.
    """
    parts = [int(p) for p in _TIME_PART.findall(str(time_str))]
    if not parts or len(parts) > 3:
        raise ValueError(f"Invalid time specification: {time_str!r}")
    hour, minute, second = (parts + [0, 0])[:3]
    if not (0 <= hour <= 23 and 0 <= minute <= 59 and 0 <= second <= 59):
        raise ValueError(f"Time out of range: {time_str!r}")
    return hour, minute, second


def _at(day: datetime.date, time_str: str) -> datetime.datetime:
    hour, minute, second = parse_time_string(time_str)
    target = datetime.datetime(day.year, day.month, day.day, hour, minute, second,
                               tzinfo=get_local_timezone())
    return _normalize(target)


def time_today(time_str: str, reference: Optional[datetime.datetime] = None) -> datetime.datetime:
    """Return ``time_str`` on the current (or reference) day as an aware datetime."""
    return _at(_now(reference).date(), time_str)


def is_time(
    time_str: str,
    offset_minutes: float = 0,
    seconds_window: float = 0,
    reference: Optional[datetime.datetime] = None,
) -> bool:
    """True when now is within ``seconds_window`` of ``time_str`` + ``offset_minutes``.

    ``is_time("08:10", 0, 10)`` holds from 08:09:50 to 08:10:10. The check is
    true on every call inside the window, so callers need to pause between
    checks (see ``run_if``).
    """
    target = time_today(time_str, reference).timestamp() + offset_minutes * 60
    return abs(target - _now(reference).timestamp()) <= seconds_window


def time_is_in_range(
    start_time: str,
    end_time: str,
    reference: Optional[datetime.datetime] = None,
) -> bool:
    """True when now lies between two "HH:MM" times (inclusive).

    An end time earlier than the start time refers to the following day, so
    ``time_is_in_range("22:00", "06:00")`` covers the night. Both ends are
    wall-clock times; a DST change in between shifts the span accordingly.
    """
    now = _now(reference)
    start = _at(now.date(), start_time)
    end = _at(now.date(), end_time)
    if end.timestamp() < start.timestamp():
        end = _at(now.date() + datetime.timedelta(days=1), end_time)
    return start.timestamp() <= now.timestamp() <= end.timestamp()


def before_time(
    time_str: str,
    offset_seconds: float = 0,
    reference: Optional[datetime.datetime] = None,
) -> bool:
    """True from midnight up to (not including) ``time_str`` + ``offset_seconds``.

    "08:10" is "08:10:00", so the check is true until 08:09:59.
    """
    now = _now(reference)
    limit = _at(now.date(), time_str).timestamp() + offset_seconds
    start_of_day = _at(now.date(), "00:00").timestamp()
    return start_of_day <= now.timestamp() < limit


def after_time(
    time_str: str,
    offset_seconds: float = 0,
    reference: Optional[datetime.datetime] = None,
) -> bool:
    """True after ``time_str`` + ``offset_seconds`` and until 23:59:59."""
    now = _now(reference)
    limit = _at(now.date(), time_str).timestamp() + offset_seconds
    end_of_day = _at(now.date(), "23:59:59").timestamp()
    return limit < now.timestamp() <= end_of_day


def earliest(*times: str) -> Optional[str]:
    """Return whichever time string occurs first in the day.

    >>> earliest("22", "20:30:01", "21", "20:30")
    '20:30'
    """
    result: Optional[str] = None
    for candidate in times:
        if result is None or parse_time_string(candidate) < parse_time_string(result):
            result = candidate
    return result


def latest(*times: str) -> Optional[str]:
    """Return whichever time string occurs last in the day."""
    result: Optional[str] = None
    for candidate in times:
        if result is None or parse_time_string(candidate) > parse_time_string(result):
            result = candidate
    return result


def _calendar_fields(now: datetime.datetime) -> dict:
    return {
        "year": now.year,
        "month": now.month,
        "day": now.day,
        "hour": now.hour,
        "min": now.minute,
        "sec": now.second,
        "wday": now.isoweekday() % 7 + 1,  # Sunday is 1
        "yday": now.timetuple().tm_yday,
    }


def datetime_matches(spec: Mapping[str, Any], reference: Optional[datetime.datetime] = None) -> bool:
    """Match the current date and time against a field specification.

    Fields are ``year, month, day, hour, min, sec``, ``wday`` (1-7, Sunday
    is 1) and ``yday``. Each value is an int, or an iterable of ints of
    which any may match::

        datetime_matches({"month": 1, "day": [14, 15, 16], "hour": 6, "min": [0, 30]})

    Raises:
        KeyError: For an unknown field name.
        TypeError: For a value that is neither an int nor an iterable of ints.
    """
    current = _calendar_fields(_now(reference))
    for name, expected in spec.items():
        if name not in current:
            raise KeyError(f"Unknown date/time field: {name}")
        actual = current[name]
        if isinstance(expected, int) and not isinstance(expected, bool):
            if actual != expected:
                return False
        elif isinstance(expected, Iterable) and not isinstance(expected, (str, bytes)):
            options = list(expected)
            if any(isinstance(o, bool) or not isinstance(o, int) for o in options):
                raise TypeError("List of options in a field should only contain numbers")
            if actual not in options:
                return False
        else:
            raise TypeError(f"Field '{name}' must be a number or a list of numbers")
    return True


def string_time_adjust(
    time_str: str,
    adjustment_minutes: float,
    extra_seconds: float = 0,
    reference: Optional[datetime.datetime] = None,
) -> str:
    """Shift a time string by minutes (and optional seconds); returns "HH:MM:SS".

    The shift is applied to today's timestamp, so crossing midnight wraps.
    """
    shifted = time_today(time_str, reference).timestamp() + float(adjustment_minutes) * 60 + float(extra_seconds)
    return datetime.datetime.fromtimestamp(shifted, tz=get_local_timezone()).strftime("%H:%M:%S")


def should_stop_heater(
    heater_on_time: float,
    auto_off_hours: float,
    blocked: bool = False,
    now: Optional[float] = None,
) -> bool:
    """True when a heater switched on at ``heater_on_time`` is due for auto-off.

    ``blocked`` (typically an outside-temperature condition) keeps the heater
    running regardless of how long it has been on.
    """
    if blocked:
        return False
    current = time.time() if now is None else now
    return (current - float(heater_on_time)) >= 3600 * float(auto_off_hours)


def iso8601_datetime(timestamp: float) -> str:
    """Format an epoch timestamp as "YYYY-MM-DD HH:MM:SS" in local time."""
    return datetime.datetime.fromtimestamp(float(timestamp), tz=get_local_timezone()).strftime("%Y-%m-%d %H:%M:%S")


def heater_lead_hours(temp_outside: float, eco: bool = True) -> Optional[float]:
    """Pre-heating time for an outside temperature, or None above 10 C."""
    table = ECO_LEAD_HOURS if eco else COMFORT_LEAD_HOURS
    for upper_bound, hours in table:
        if temp_outside <= upper_bound:
            return hours
    return None


def time_to_start_car_heater(
    ready_time: str,
    temp_outside: float,
    eco: bool = True,
    manual_minutes_offset: float = 0,
    reference: Optional[datetime.datetime] = None,
) -> bool:
    """True while a car heater should be running to be ready at ``ready_time``.

    The lead time grows as it gets colder (see ``heater_lead_hours``);
    ``manual_minutes_offset`` moves the start (negative starts earlier).
    """
    lead = heater_lead_hours(temp_outside, eco)
    if lead is None:
        return False
    ready = time_today(ready_time, reference).timestamp()
    start = ready - lead * 3600 + manual_minutes_offset * 60
    now = _now(reference).timestamp()
    return start <= now <= ready
