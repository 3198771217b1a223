"""
Time utility functions

Conversions between stored UTC datetimes and the organization's local
wall-clock, expressed as (date, minute-of-day) pairs.
"""
from datetime import datetime, date, time, timedelta
from typing import Tuple

import pytz


def get_timezone(tz_name: str):
    """Resolve an IANA timezone name, raising ValueError for unknown names"""
    try:
        return pytz.timezone(tz_name)
    except pytz.UnknownTimeZoneError:
        raise ValueError(f"Unknown timezone: {tz_name}")


def is_valid_timezone(tz_name: str) -> bool:
    return tz_name in pytz.all_timezones_set


def local_now(tz_name: str, now_utc: datetime = None) -> datetime:
    """
    Current wall-clock time in the given timezone, returned naive

    Args:
        tz_name: IANA timezone of the organization
        now_utc: naive UTC instant to convert (default: datetime.utcnow())
    """
    if now_utc is None:
        now_utc = datetime.utcnow()
    return to_local(now_utc, tz_name)


def to_local(dt_utc: datetime, tz_name: str) -> datetime:
    """Convert a naive UTC datetime to a naive local datetime"""
    tz = get_timezone(tz_name)
    if dt_utc.tzinfo is None:
        dt_utc = pytz.utc.localize(dt_utc)
    return dt_utc.astimezone(tz).replace(tzinfo=None)


def to_utc(local_dt: datetime, tz_name: str) -> datetime:
    """Convert a naive local datetime to a naive UTC datetime"""
    tz = get_timezone(tz_name)
    aware = tz.localize(local_dt) if local_dt.tzinfo is None else local_dt
    return aware.astimezone(pytz.utc).replace(tzinfo=None)


def split_local(local_dt: datetime) -> Tuple[date, int]:
    """Split a local datetime into its date and minute of day"""
    return local_dt.date(), local_dt.hour * 60 + local_dt.minute


def combine_local(day: date, minute_of_day: int) -> datetime:
    """Inverse of split_local; minute 1440 rolls over to the next midnight"""
    return datetime.combine(day, time(0, 0)) + timedelta(minutes=minute_of_day)


def month_bounds_utc(local_day: date, tz_name: str) -> Tuple[datetime, datetime]:
    """
    UTC instants bounding the local calendar month containing local_day

    Returns:
        (start, end) with end exclusive
    """
    first = local_day.replace(day=1)
    if first.month == 12:
        next_first = first.replace(year=first.year + 1, month=1)
    else:
        next_first = first.replace(month=first.month + 1)
    start = to_utc(datetime.combine(first, time(0, 0)), tz_name)
    end = to_utc(datetime.combine(next_first, time(0, 0)), tz_name)
    return start, end
