"""
Availability Service

Generates bookable slots per resource from a weekly schedule, a service
duration, buffer minutes and the appointments already on the books.

All arithmetic is in integer minutes since midnight of the organization's
local timezone. The functions here are pure: callers fetch appointments and
settings beforehand and convert datetimes with bookflow.utils.time.
"""
from collections import defaultdict
from datetime import date, datetime
from typing import Dict, Iterable, List, Optional, Sequence, Union

from bookflow.core.exceptions import ValidationError
from bookflow.schemas.availability import BookedInterval, DateRange, Slot
from bookflow.schemas.organization import BufferPolicy, BusinessHours
from bookflow.services.business_hours import (
    NormalizedBusinessHours,
    NormalizedDay,
    validate_business_hours,
)


def default_granularity(service_duration_minutes: int, buffer_minutes: int) -> int:
    """
    Step used by public booking pages: one service plus its buffer

    With this step consecutive slots of a resource never overlap and keep
    `buffer_minutes` of idle time between them.
    """
    return service_duration_minutes + buffer_minutes


def _blocked_window(appointment: BookedInterval, buffer_minutes: int, policy: BufferPolicy):
    start = appointment.start
    if policy == BufferPolicy.SYMMETRIC:
        start -= buffer_minutes
    return start, appointment.end + buffer_minutes


def _candidate_starts(day: NormalizedDay, duration: int, granularity: int) -> Iterable[int]:
    start = day.open
    last_start = day.close - duration
    while start <= last_start:
        end = start + duration
        if not any(b.overlaps(start, end) for b in day.breaks):
            yield start
        start += granularity


def conflicts_with(
    start: int,
    end: int,
    appointments: Iterable[BookedInterval],
    buffer_minutes: int,
    buffer_policy: BufferPolicy = BufferPolicy.AFTER,
) -> bool:
    """True when [start, end) falls into the blocked window of any appointment"""
    for appointment in appointments:
        blocked_start, blocked_end = _blocked_window(appointment, buffer_minutes, buffer_policy)
        if start < blocked_end and end > blocked_start:
            return True
    return False


def compute_slots(
    business_hours: Union[BusinessHours, NormalizedBusinessHours],
    service_duration_minutes: int,
    buffer_minutes: int,
    existing_appointments: Sequence[BookedInterval],
    date_range: DateRange,
    slot_granularity_minutes: int,
    resource_ids: Sequence[str],
    include_past: bool = True,
    now: Optional[datetime] = None,
    buffer_policy: BufferPolicy = BufferPolicy.AFTER,
) -> List[Slot]:
    """
    Compute bookable slots for every resource over a date range

    Args:
        business_hours: weekly schedule (validated here if not normalized yet)
        service_duration_minutes: length of the service being booked
        buffer_minutes: idle time required after each existing appointment
        existing_appointments: booked intervals, any resource, any date
        date_range: local dates, end excluded
        slot_granularity_minutes: distance between candidate start times
        resource_ids: resources to generate slots for
        include_past: False for public queries; slots starting before `now`
            are then dropped
        now: local wall-clock time, required when include_past is False
        buffer_policy: AFTER blocks [start, end + buffer) of each appointment,
            SYMMETRIC blocks [start - buffer, end + buffer)

    Returns:
        list[Slot] ordered by date, start time, then resource id

    Raises:
        ValidationError: non-positive duration or granularity, negative
            buffer, invalid hours, or include_past=False without `now`
    """
    if service_duration_minutes <= 0:
        raise ValidationError("serviceDurationMinutes must be greater than zero")
    if slot_granularity_minutes <= 0:
        raise ValidationError("slotGranularityMinutes must be greater than zero")
    if buffer_minutes < 0:
        raise ValidationError("bufferMinutes cannot be negative")
    if not include_past and now is None:
        raise ValidationError("`now` is required when past slots are excluded")

    hours = validate_business_hours(business_hours)

    booked: Dict[tuple, List[BookedInterval]] = defaultdict(list)
    for appointment in existing_appointments:
        booked[(appointment.resourceId, appointment.date)].append(appointment)

    cutoff = None
    if not include_past:
        cutoff = (now.date(), now.hour * 60 + now.minute)

    slots: List[Slot] = []
    for day in date_range.days():
        schedule = hours.for_date(day)
        if not schedule.isOpen:
            continue
        if cutoff and day < cutoff[0]:
            continue

        starts = list(_candidate_starts(schedule, service_duration_minutes, slot_granularity_minutes))
        for resource_id in resource_ids:
            taken = booked.get((resource_id, day), ())
            for start in starts:
                end = start + service_duration_minutes
                if cutoff and day == cutoff[0] and start < cutoff[1]:
                    continue
                if conflicts_with(start, end, taken, buffer_minutes, buffer_policy):
                    continue
                slots.append(Slot(resourceId=resource_id, date=day, start=start, end=end))

    slots.sort(key=lambda s: (s.date, s.start, s.resourceId))
    return slots


def count_slots_by_date(slots: Iterable[Slot]) -> Dict[date, int]:
    """Number of slots per date, for the booking calendar's day badges"""
    counts: Dict[date, int] = defaultdict(int)
    for slot in slots:
        counts[slot.date] += 1
    return dict(counts)
