"""
Organization Pydantic Schemas
Organization settings, business hours, services and subscription shapes
"""
from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator

from bookflow.utils.time import is_valid_timezone


WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


class Plan(str, Enum):
    FREE = "free"
    BASIC = "basic"
    PREMIUM = "premium"


class TemplateType(str, Enum):
    BEAUTY_SALON = "beauty_salon"
    HYPERBARIC_CENTER = "hyperbaric_center"


class AppointmentModel(str, Enum):
    PROFESSIONAL_BASED = "professional_based"
    RESOURCE_BASED = "resource_based"
    HYBRID = "hybrid"


class BufferPolicy(str, Enum):
    """Where buffer minutes are enforced around an existing appointment"""
    AFTER = "after"
    SYMMETRIC = "symmetric"


class ResourceKind(str, Enum):
    PROFESSIONAL = "professional"
    RESOURCE = "resource"


# ============================================================================
# BUSINESS HOURS
# ============================================================================

class BreakInterval(BaseModel):
    startTime: str = Field(..., description="HH:MM")
    endTime: str = Field(..., description="HH:MM")


class DaySchedule(BaseModel):
    isOpen: bool = False
    openTime: str = "09:00"
    closeTime: str = "18:00"
    breaks: Optional[List[BreakInterval]] = None


def _open_day(open_time: str = "09:00", close_time: str = "18:00") -> DaySchedule:
    return DaySchedule(isOpen=True, openTime=open_time, closeTime=close_time)


class BusinessHours(BaseModel):
    """Weekly schedule with one entry per weekday"""
    monday: DaySchedule = Field(default_factory=_open_day)
    tuesday: DaySchedule = Field(default_factory=_open_day)
    wednesday: DaySchedule = Field(default_factory=_open_day)
    thursday: DaySchedule = Field(default_factory=_open_day)
    friday: DaySchedule = Field(default_factory=_open_day)
    saturday: DaySchedule = Field(default_factory=lambda: _open_day("09:00", "14:00"))
    sunday: DaySchedule = Field(default_factory=DaySchedule)

    class Config:
        json_schema_extra = {
            "example": {
                "monday": {
                    "isOpen": True,
                    "openTime": "09:00",
                    "closeTime": "18:00",
                    "breaks": [{"startTime": "13:00", "endTime": "14:00"}]
                },
                "sunday": {"isOpen": False, "openTime": "09:00", "closeTime": "18:00"}
            }
        }


# ============================================================================
# SETTINGS
# ============================================================================

class NotificationSettings(BaseModel):
    emailReminders: bool = True
    smsReminders: bool = False
    autoConfirmation: bool = True
    reminderHours: int = Field(default=24, ge=0)


class Service(BaseModel):
    id: Optional[str] = None
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    duration: int = Field(..., gt=0, description="Minutes")
    price: float = Field(..., ge=0)
    isActive: bool = True


class AppointmentSystemSettings(BaseModel):
    appointmentModel: AppointmentModel = AppointmentModel.RESOURCE_BASED
    allowClientSelection: bool = False
    bufferBetweenAppointments: int = Field(default=15, ge=0)
    maxAdvanceBookingDays: int = Field(default=30, ge=1)
    bufferPolicy: BufferPolicy = BufferPolicy.AFTER


class OrganizationSettings(BaseModel):
    timezone: str = "America/Santiago"
    currency: str = "CLP"
    businessHours: BusinessHours = Field(default_factory=BusinessHours)
    notifications: NotificationSettings = Field(default_factory=NotificationSettings)
    appointmentSystem: AppointmentSystemSettings = Field(default_factory=AppointmentSystemSettings)
    services: List[Service] = Field(default_factory=list)

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        if not is_valid_timezone(v):
            raise ValueError(f"Unknown timezone: {v}")
        return v


# ============================================================================
# SUBSCRIPTION
# ============================================================================

class ResourceLimits(BaseModel):
    """Plan-derived caps; never edited independently of the plan"""
    maxResources: int
    maxAppointmentsPerMonth: int
    maxUsers: int

    class Config:
        frozen = True


class Trial(BaseModel):
    isActive: bool
    startDate: str
    endDate: str
    daysTotal: int


class Subscription(BaseModel):
    plan: Plan = Plan.FREE
    limits: ResourceLimits
    trial: Optional[Trial] = None


class BookableResource(BaseModel):
    """A professional or a piece of equipment/room that appointments are booked against"""
    id: str
    name: str
    kind: ResourceKind = ResourceKind.PROFESSIONAL
    isActive: bool = True


class Organization(BaseModel):
    """
    Organization snapshot handed to the booking core
    Built from the database row right before each validation
    """
    id: str
    name: str
    templateType: TemplateType = TemplateType.BEAUTY_SALON
    settings: OrganizationSettings = Field(default_factory=OrganizationSettings)
    subscription: Subscription
    resources: List[BookableResource] = Field(default_factory=list)
    isArchived: bool = False

    def find_resource(self, resource_id: str) -> Optional[BookableResource]:
        for resource in self.resources:
            if resource.id == resource_id:
                return resource
        return None

    def find_service(self, service_id: str) -> Optional[Service]:
        for service in self.settings.services:
            if service.id == service_id:
                return service
        return None


# ============================================================================
# REQUESTS / RESPONSES
# ============================================================================

class OrganizationSettingsUpdate(BaseModel):
    """
    Partial settings update. Subscription and limits are intentionally absent:
    they change only through plan selection.
    """
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    templateType: Optional[TemplateType] = None
    timezone: Optional[str] = None
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    businessHours: Optional[BusinessHours] = None
    notifications: Optional[NotificationSettings] = None
    appointmentSystem: Optional[AppointmentSystemSettings] = None
    services: Optional[List[Service]] = None

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not is_valid_timezone(v):
            raise ValueError(f"Unknown timezone: {v}")
        return v

    class Config:
        extra = "forbid"


class ResourceCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    kind: ResourceKind = ResourceKind.PROFESSIONAL


class PublicOrganization(BaseModel):
    id: str
    name: str
    currency: str
    timezone: str
    businessHours: BusinessHours
    appointmentSystem: AppointmentSystemSettings
