"""
Appointment Pydantic Schemas
"""
from datetime import date
from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, EmailStr, Field, field_validator

from bookflow.core.exceptions import RejectionReason, REJECTION_ERRORS


class AppointmentStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


ACTIVE_STATUSES = (AppointmentStatus.PENDING.value, AppointmentStatus.CONFIRMED.value)
TERMINAL_STATUSES = (AppointmentStatus.CANCELLED.value, AppointmentStatus.COMPLETED.value)


class CandidateAppointment(BaseModel):
    """Proposed booking in local minute-of-day form"""
    organizationId: str
    resourceId: str
    date: date
    start: int = Field(..., ge=0, le=24 * 60)
    durationMinutes: int = Field(..., gt=0)

    @property
    def end(self) -> int:
        return self.start + self.durationMinutes


class BookingDecision(BaseModel):
    """Outcome of BookingValidator.validate"""
    accepted: bool
    reason: Optional[RejectionReason] = None
    message: Optional[str] = None

    @classmethod
    def accept(cls) -> "BookingDecision":
        return cls(accepted=True)

    @classmethod
    def reject(cls, reason: RejectionReason, message: str) -> "BookingDecision":
        return cls(accepted=False, reason=reason, message=message)

    def raise_for_rejection(self) -> None:
        """Raise the domain error matching the rejection reason, if any"""
        if self.accepted:
            return
        raise REJECTION_ERRORS[self.reason](self.message or self.reason.value)


# ============================================================================
# API SCHEMAS
# ============================================================================

class PublicBookingRequest(BaseModel):
    """Booking request coming from the public booking page"""
    serviceId: str = Field(..., min_length=1)
    professionalId: Optional[str] = None
    date: date
    time: str = Field(..., description="HH:MM local time")
    clientName: str = Field(..., min_length=1, max_length=255)
    clientPhone: str = Field(..., min_length=6, max_length=30)
    clientEmail: EmailStr
    notes: Optional[str] = Field(None, max_length=1000)

    @field_validator("time")
    @classmethod
    def validate_time(cls, v: str) -> str:
        parts = v.split(":")
        if len(parts) != 2 or not all(p.isdigit() for p in parts):
            raise ValueError("time must be in HH:MM format")
        return v

    class Config:
        json_schema_extra = {
            "example": {
                "serviceId": "svc-haircut",
                "professionalId": "6f1c...",
                "date": "2026-11-02",
                "time": "10:00",
                "clientName": "Ana Pérez",
                "clientPhone": "+56912345678",
                "clientEmail": "ana@example.com",
                "notes": ""
            }
        }


class AppointmentResponse(BaseModel):
    id: str
    organizationId: str
    resourceId: str
    serviceId: Optional[str] = None
    serviceName: Optional[str] = None
    servicePrice: Optional[float] = None
    date: str
    time: str
    duration: int
    startAt: str
    clientName: str
    clientEmail: str
    clientPhone: Optional[str] = None
    notes: Optional[str] = None
    status: AppointmentStatus
    createdAt: Optional[str] = None


class AppointmentListResponse(BaseModel):
    data: List[AppointmentResponse]
    total: int


class CancelRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=500)
