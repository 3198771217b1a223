"""
Availability Pydantic Schemas
Slots, booked intervals and date ranges used by the slot calculator
"""
from datetime import date, timedelta
from typing import Iterator, List, Optional
from pydantic import BaseModel, Field


def _hhmm(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


class DateRange(BaseModel):
    """Half-open range of local dates: start included, end excluded"""
    start: date
    end: date

    @classmethod
    def single(cls, day: date) -> "DateRange":
        return cls(start=day, end=day + timedelta(days=1))

    def days(self) -> Iterator[date]:
        current = self.start
        while current < self.end:
            yield current
            current += timedelta(days=1)


class Slot(BaseModel):
    """Bookable interval for one resource, in minutes since local midnight"""
    resourceId: str
    date: date
    start: int
    end: int

    class Config:
        frozen = True

    @property
    def startTime(self) -> str:
        return _hhmm(self.start)

    @property
    def endTime(self) -> str:
        return _hhmm(self.end)


class BookedInterval(BaseModel):
    """An existing appointment occupying a resource"""
    resourceId: str
    date: date
    start: int
    end: int

    class Config:
        frozen = True


class SlotResponse(BaseModel):
    resourceId: str
    date: date
    startTime: str
    endTime: str

    @classmethod
    def from_slot(cls, slot: Slot) -> "SlotResponse":
        return cls(
            resourceId=slot.resourceId,
            date=slot.date,
            startTime=slot.startTime,
            endTime=slot.endTime,
        )


class AvailabilityResponse(BaseModel):
    date: date
    serviceDuration: int
    professionalId: Optional[str] = None
    slots: List[SlotResponse] = Field(default_factory=list)


class DailyCount(BaseModel):
    date: date
    availableSlots: int
