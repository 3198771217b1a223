"""
Business Hours Tests
Parsing and normalization of weekly schedules
"""
import pytest
from datetime import date

from bookflow.core.exceptions import ValidationError
from bookflow.schemas.organization import BreakInterval, BusinessHours, DaySchedule
from bookflow.services.business_hours import (
    NormalizedBusinessHours,
    format_minutes,
    parse_time,
    validate_business_hours,
)


class TestParseTime:

    @pytest.mark.parametrize("value,expected", [
        ("00:00", 0),
        ("09:00", 540),
        ("13:45", 825),
        ("24:00", 1440),
    ])
    def test_valid_times(self, value, expected):
        assert parse_time(value) == expected

    @pytest.mark.parametrize("value", ["9", "25:00", "12:60", "24:30", "ab:cd", "", "10:00:00"])
    def test_invalid_times(self, value):
        with pytest.raises(ValidationError):
            parse_time(value)

    def test_format_minutes(self):
        assert format_minutes(540) == "09:00"
        assert format_minutes(1005) == "16:45"


class TestValidateBusinessHours:

    def test_default_week(self):
        """
        Test: Default schedule
        Expected: Weekdays 09-18, Saturday 09-14, Sunday closed
        """
        hours = validate_business_hours(BusinessHours())

        assert hours.days["monday"].isOpen
        assert (hours.days["monday"].open, hours.days["monday"].close) == (540, 1080)
        assert hours.days["saturday"].close == 840
        assert not hours.days["sunday"].isOpen

    def test_for_date_uses_weekday(self):
        hours = validate_business_hours(BusinessHours())
        assert hours.for_date(date(2026, 11, 2)).open == 540   # Monday
        assert not hours.for_date(date(2026, 11, 8)).isOpen     # Sunday

    def test_open_after_close_rejected(self):
        """
        Test: openTime later than closeTime
        Expected: ValidationError naming the day
        """
        hours = BusinessHours(monday=DaySchedule(isOpen=True, openTime="18:00", closeTime="09:00"))

        with pytest.raises(ValidationError) as exc:
            validate_business_hours(hours)
        assert "monday" in exc.value.message

    def test_open_equal_close_rejected(self):
        hours = BusinessHours(tuesday=DaySchedule(isOpen=True, openTime="09:00", closeTime="09:00"))
        with pytest.raises(ValidationError):
            validate_business_hours(hours)

    def test_closed_day_with_bad_times_is_ignored(self):
        hours = BusinessHours(sunday=DaySchedule(isOpen=False, openTime="18:00", closeTime="09:00"))
        assert not validate_business_hours(hours).days["sunday"].isOpen

    def test_breaks_are_sorted(self):
        hours = BusinessHours(monday=DaySchedule(
            isOpen=True, openTime="08:00", closeTime="20:00",
            breaks=[
                BreakInterval(startTime="16:00", endTime="16:30"),
                BreakInterval(startTime="13:00", endTime="14:00"),
            ],
        ))

        breaks = validate_business_hours(hours).days["monday"].breaks
        assert [(b.start, b.end) for b in breaks] == [(780, 840), (960, 990)]

    def test_break_outside_hours_rejected(self):
        hours = BusinessHours(monday=DaySchedule(
            isOpen=True, openTime="09:00", closeTime="18:00",
            breaks=[BreakInterval(startTime="08:00", endTime="09:30")],
        ))
        with pytest.raises(ValidationError):
            validate_business_hours(hours)

    def test_inverted_break_rejected(self):
        hours = BusinessHours(monday=DaySchedule(
            isOpen=True, openTime="09:00", closeTime="18:00",
            breaks=[BreakInterval(startTime="14:00", endTime="13:00")],
        ))
        with pytest.raises(ValidationError):
            validate_business_hours(hours)

    def test_overlapping_breaks_rejected(self):
        """
        Test: Two breaks sharing time
        Expected: ValidationError
        """
        hours = BusinessHours(monday=DaySchedule(
            isOpen=True, openTime="09:00", closeTime="18:00",
            breaks=[
                BreakInterval(startTime="12:00", endTime="13:30"),
                BreakInterval(startTime="13:00", endTime="14:00"),
            ],
        ))
        with pytest.raises(ValidationError):
            validate_business_hours(hours)

    def test_adjacent_breaks_allowed(self):
        hours = BusinessHours(monday=DaySchedule(
            isOpen=True, openTime="09:00", closeTime="18:00",
            breaks=[
                BreakInterval(startTime="12:00", endTime="13:00"),
                BreakInterval(startTime="13:00", endTime="14:00"),
            ],
        ))
        assert len(validate_business_hours(hours).days["monday"].breaks) == 2

    def test_normalized_input_returned_as_is(self):
        normalized = validate_business_hours(BusinessHours())
        assert isinstance(normalized, NormalizedBusinessHours)
        assert validate_business_hours(normalized) is normalized
