"""
Availability Tests
Slot generation for one or more resources over a date range
"""
import pytest
from datetime import date, datetime

from bookflow.core.exceptions import ValidationError
from bookflow.schemas.availability import BookedInterval, DateRange
from bookflow.schemas.organization import BreakInterval, BufferPolicy, BusinessHours, DaySchedule
from bookflow.services.availability import compute_slots, count_slots_by_date, default_granularity

MONDAY = date(2026, 11, 2)
SUNDAY = date(2026, 11, 8)


def nine_to_five(**overrides) -> BusinessHours:
    days = {
        name: DaySchedule(isOpen=True, openTime="09:00", closeTime="17:00")
        for name in ("monday", "tuesday", "wednesday", "thursday", "friday")
    }
    days.update(overrides)
    return BusinessHours(**days)


def slots_for(hours=None, duration=60, buffer=15, appointments=(), granularity=30,
              resources=("res-1",), day=MONDAY, **kwargs):
    return compute_slots(
        business_hours=hours or nine_to_five(),
        service_duration_minutes=duration,
        buffer_minutes=buffer,
        existing_appointments=list(appointments),
        date_range=DateRange.single(day),
        slot_granularity_minutes=granularity,
        resource_ids=list(resources),
        **kwargs,
    )


def booked(start, end, resource="res-1", day=MONDAY):
    return BookedInterval(resourceId=resource, date=day, start=start, end=end)


class TestEmptyDay:

    def test_first_and_last_slot(self):
        """
        Test: 09:00-17:00, 60 min service, 15 min buffer, 30 min grid, no bookings
        Expected: First slot 09:00-10:00, last 16:00-17:00
        """
        slots = slots_for()

        assert (slots[0].startTime, slots[0].endTime) == ("09:00", "10:00")
        assert (slots[-1].startTime, slots[-1].endTime) == ("16:00", "17:00")
        assert len(slots) == 15

    def test_slots_stay_inside_hours(self):
        for slot in slots_for(duration=45, granularity=20):
            assert slot.start >= 540
            assert slot.end <= 1020

    def test_closed_day_has_no_slots(self):
        assert slots_for(day=SUNDAY) == []

    def test_service_longer_than_day(self):
        hours = nine_to_five(monday=DaySchedule(isOpen=True, openTime="09:00", closeTime="10:00"))
        assert slots_for(hours=hours, duration=90) == []


class TestBuffer:

    def test_buffer_after_existing_appointment(self):
        """
        Test: Appointment 10:00-11:00 with 15 min buffer on a 15 min grid
        Expected: 09:00-10:00 free, 09:15-10:15 taken, next free start 11:15
        """
        slots = slots_for(appointments=[booked(600, 660)], granularity=15)
        starts = [s.startTime for s in slots]

        assert "09:00" in starts
        assert "09:15" not in starts
        assert "11:00" not in starts
        after = [s for s in slots if s.start >= 600]
        assert after[0].startTime == "11:15"

    def test_symmetric_buffer_blocks_before(self):
        """
        Test: Same appointment with the symmetric policy
        Expected: 09:00-10:00 no longer free (ends inside the leading buffer)
        """
        slots = slots_for(
            appointments=[booked(600, 660)], granularity=15, buffer_policy=BufferPolicy.SYMMETRIC
        )
        starts = [s.startTime for s in slots]

        assert "09:00" not in starts
        assert "11:15" in starts

    def test_every_slot_respects_buffer(self):
        appointments = [booked(600, 660), booked(840, 900)]
        for slot in slots_for(appointments=appointments, granularity=5):
            for a in appointments:
                assert slot.end <= a.start or slot.start >= a.end + 15

    def test_packed_grid_never_overlaps(self):
        """
        Test: Default public grid (duration + buffer)
        Expected: Consecutive slots keep the buffer between them
        """
        granularity = default_granularity(60, 15)
        slots = slots_for(granularity=granularity)

        assert granularity == 75
        for previous, current in zip(slots, slots[1:]):
            assert previous.end + 15 <= current.start

    def test_zero_buffer(self):
        slots = slots_for(appointments=[booked(600, 660)], buffer=0, granularity=60)
        assert [s.startTime for s in slots] == [
            "09:00", "11:00", "12:00", "13:00", "14:00", "15:00", "16:00"
        ]


class TestBreaks:

    def test_slots_skip_breaks(self):
        """
        Test: Lunch break 13:00-14:00
        Expected: No slot touches the break; 12:00 and 14:00 starts remain
        """
        hours = nine_to_five(monday=DaySchedule(
            isOpen=True, openTime="09:00", closeTime="17:00",
            breaks=[BreakInterval(startTime="13:00", endTime="14:00")],
        ))
        slots = slots_for(hours=hours)
        starts = [s.startTime for s in slots]

        assert "12:00" in starts
        assert "12:30" not in starts
        assert "13:00" not in starts
        assert "14:00" in starts
        for slot in slots:
            assert slot.end <= 780 or slot.start >= 840


class TestResources:

    def test_appointment_blocks_only_its_resource(self):
        slots = slots_for(appointments=[booked(540, 600, resource="res-1")],
                          resources=("res-1", "res-2"), granularity=60)

        nine = [s.resourceId for s in slots if s.startTime == "09:00"]
        assert nine == ["res-2"]

    def test_ordering(self):
        """
        Test: Two resources over two days
        Expected: Sorted by date, start, then resource id
        """
        slots = compute_slots(
            business_hours=nine_to_five(),
            service_duration_minutes=60,
            buffer_minutes=0,
            existing_appointments=[],
            date_range=DateRange(start=MONDAY, end=date(2026, 11, 4)),
            slot_granularity_minutes=60,
            resource_ids=["res-b", "res-a"],
        )
        keys = [(s.date, s.start, s.resourceId) for s in slots]

        assert keys == sorted(keys)
        assert keys[0] == (MONDAY, 540, "res-a")
        assert {s.date for s in slots} == {MONDAY, date(2026, 11, 3)}

    def test_appointments_on_other_dates_ignored(self):
        slots = slots_for(appointments=[booked(540, 1020, day=date(2026, 11, 3))])
        assert len(slots) == 15

    def test_count_slots_by_date(self):
        slots = compute_slots(
            business_hours=nine_to_five(),
            service_duration_minutes=60,
            buffer_minutes=0,
            existing_appointments=[],
            date_range=DateRange(start=MONDAY, end=date(2026, 11, 9)),
            slot_granularity_minutes=60,
            resource_ids=["res-1"],
        )
        counts = count_slots_by_date(slots)

        assert counts[MONDAY] == 8
        assert counts[date(2026, 11, 7)] == 5   # Saturday 09-14
        assert SUNDAY not in counts
        assert len(counts) == 6


class TestPastSlots:

    def test_past_slots_excluded(self):
        """
        Test: include_past=False at 12:10 local time
        Expected: First slot of the day is 12:30
        """
        slots = slots_for(include_past=False, now=datetime(2026, 11, 2, 12, 10))
        assert slots[0].startTime == "12:30"

    def test_past_days_excluded(self):
        slots = slots_for(include_past=False, now=datetime(2026, 11, 3, 8, 0))
        assert slots == []

    def test_past_included_by_default(self):
        slots = slots_for(now=datetime(2026, 11, 2, 12, 10))
        assert slots[0].startTime == "09:00"

    def test_now_required(self):
        with pytest.raises(ValidationError):
            slots_for(include_past=False)


class TestInvalidInput:

    @pytest.mark.parametrize("kwargs", [
        {"duration": 0},
        {"duration": -30},
        {"granularity": 0},
        {"buffer": -5},
    ])
    def test_rejected(self, kwargs):
        with pytest.raises(ValidationError):
            slots_for(**kwargs)

    def test_invalid_hours_rejected(self):
        hours = nine_to_five(monday=DaySchedule(isOpen=True, openTime="17:00", closeTime="09:00"))
        with pytest.raises(ValidationError):
            slots_for(hours=hours)
