"""
Business hours normalization

Turns the "HH:MM" based BusinessHours schema into integer minute-of-day
intervals and rejects schedules the slot calculator cannot work with.
"""
from datetime import date
from typing import Dict, Tuple, Union

from pydantic import BaseModel

from bookflow.core.exceptions import ValidationError
from bookflow.schemas.organization import BusinessHours, DaySchedule, WEEKDAYS

MINUTES_PER_DAY = 24 * 60


class Interval(BaseModel):
    """Half-open [start, end) in minutes since local midnight"""
    start: int
    end: int

    class Config:
        frozen = True

    def overlaps(self, start: int, end: int) -> bool:
        return start < self.end and end > self.start


class NormalizedDay(BaseModel):
    isOpen: bool
    open: int = 0
    close: int = 0
    breaks: Tuple[Interval, ...] = ()

    class Config:
        frozen = True


class NormalizedBusinessHours(BaseModel):
    days: Dict[str, NormalizedDay]

    class Config:
        frozen = True

    def for_date(self, day: date) -> NormalizedDay:
        return self.days[WEEKDAYS[day.weekday()]]


def parse_time(value: str) -> int:
    """
    Parse "HH:MM" into minutes since midnight

    "24:00" is accepted as end of day.

    Raises:
        ValidationError: if the string is not a valid wall-clock time
    """
    if not isinstance(value, str):
        raise ValidationError(f"Invalid time value: {value!r}")
    parts = value.strip().split(":")
    if len(parts) != 2 or not parts[0].isdigit() or not parts[1].isdigit():
        raise ValidationError(f"Invalid time format '{value}', expected HH:MM")

    hours, minutes = int(parts[0]), int(parts[1])
    if minutes > 59 or hours > 24 or (hours == 24 and minutes != 0):
        raise ValidationError(f"Time out of range: '{value}'")
    return hours * 60 + minutes


def format_minutes(minutes: int) -> str:
    """Format minutes since midnight as "HH:MM" """
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def _normalize_day(name: str, schedule: DaySchedule) -> NormalizedDay:
    if not schedule.isOpen:
        return NormalizedDay(isOpen=False)

    open_minute = parse_time(schedule.openTime)
    close_minute = parse_time(schedule.closeTime)
    if open_minute >= close_minute:
        raise ValidationError(
            f"{name}: openTime must be before closeTime",
            {"day": name, "openTime": schedule.openTime, "closeTime": schedule.closeTime},
        )

    breaks = []
    for item in schedule.breaks or []:
        start = parse_time(item.startTime)
        end = parse_time(item.endTime)
        if start >= end:
            raise ValidationError(
                f"{name}: break {item.startTime}-{item.endTime} must start before it ends",
                {"day": name},
            )
        if start < open_minute or end > close_minute:
            raise ValidationError(
                f"{name}: break {item.startTime}-{item.endTime} is outside business hours",
                {"day": name},
            )
        breaks.append(Interval(start=start, end=end))

    breaks.sort(key=lambda b: b.start)
    for previous, current in zip(breaks, breaks[1:]):
        if current.start < previous.end:
            raise ValidationError(
                f"{name}: breaks {format_minutes(previous.start)}-{format_minutes(previous.end)} "
                f"and {format_minutes(current.start)}-{format_minutes(current.end)} overlap",
                {"day": name},
            )

    return NormalizedDay(isOpen=True, open=open_minute, close=close_minute, breaks=tuple(breaks))


def validate_business_hours(
    hours: Union[BusinessHours, NormalizedBusinessHours]
) -> NormalizedBusinessHours:
    """
    Validate a weekly schedule and return it in minute-of-day form

    Breaks come back sorted ascending. Already-normalized input is returned as is.

    Raises:
        ValidationError: open day with openTime >= closeTime, malformed times,
            or breaks that are inverted, out of range or overlapping
    """
    if isinstance(hours, NormalizedBusinessHours):
        return hours
    return NormalizedBusinessHours(
        days={name: _normalize_day(name, getattr(hours, name)) for name in WEEKDAYS}
    )
