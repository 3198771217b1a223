"""
Public Booking API Endpoints
Unauthenticated routes used by an organization's booking page
"""
from datetime import date
from typing import Optional
from fastapi import APIRouter, BackgroundTasks, Depends, Query
from sqlalchemy.orm import Session

from bookflow.core.database import get_db
from bookflow.core.dependencies import get_booking_validator, get_plan_limits
from bookflow.core.exceptions import ValidationError
from bookflow.crud.organization import OrganizationCRUD
from bookflow.schemas.appointment import PublicBookingRequest
from bookflow.schemas.availability import AvailabilityResponse, SlotResponse
from bookflow.schemas.common import ok
from bookflow.schemas.organization import PublicOrganization
from bookflow.services.booking import BookingService
from bookflow.services.booking_validator import BookingValidator
from bookflow.services.notifications import send_booking_confirmation
from bookflow.services.plans import PlanLimitsTable

router = APIRouter(prefix="/public/organization", tags=["public"])


@router.get("/{organization_id}")
def get_public_organization(
    organization_id: str,
    db: Session = Depends(get_db),
    plan_limits: PlanLimitsTable = Depends(get_plan_limits)
):
    """Public profile: name, currency, timezone, hours and appointment settings"""
    row = BookingService.get_organization(db, organization_id)
    organization = OrganizationCRUD.to_snapshot(db, row, plan_limits)
    profile = PublicOrganization(
        id=organization.id,
        name=organization.name,
        currency=organization.settings.currency,
        timezone=organization.settings.timezone,
        businessHours=organization.settings.businessHours,
        appointmentSystem=organization.settings.appointmentSystem,
    )
    return ok(profile.model_dump(mode="json"))


@router.get("/{organization_id}/services")
def get_public_services(
    organization_id: str,
    db: Session = Depends(get_db),
    plan_limits: PlanLimitsTable = Depends(get_plan_limits)
):
    row = BookingService.get_organization(db, organization_id)
    organization = OrganizationCRUD.to_snapshot(db, row, plan_limits)
    services = [s.model_dump(mode="json") for s in organization.settings.services if s.isActive]
    return ok(services)


@router.get("/{organization_id}/professionals")
def get_public_professionals(
    organization_id: str,
    db: Session = Depends(get_db),
    plan_limits: PlanLimitsTable = Depends(get_plan_limits)
):
    row = BookingService.get_organization(db, organization_id)
    organization = OrganizationCRUD.to_snapshot(db, row, plan_limits)
    professionals = [r.model_dump(mode="json") for r in organization.resources if r.isActive]
    return ok(professionals)


@router.get("/{organization_id}/availability")
def get_public_availability(
    organization_id: str,
    day: date = Query(..., alias="date", description="Local date, YYYY-MM-DD"),
    serviceId: Optional[str] = Query(None),
    serviceDuration: Optional[int] = Query(None, gt=0, description="Minutes, when no serviceId"),
    professionalId: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    plan_limits: PlanLimitsTable = Depends(get_plan_limits)
):
    """
    Bookable future slots for one date

    **Query Parameters:**
    - serviceId or serviceDuration: decides the slot length
    - professionalId: restrict to one professional (default: all active)
    """
    duration, slots = BookingService.public_availability(
        db, organization_id, plan_limits, day,
        service_id=serviceId, service_duration=serviceDuration, professional_id=professionalId,
    )
    response = AvailabilityResponse(
        date=day,
        serviceDuration=duration,
        professionalId=professionalId,
        slots=[SlotResponse.from_slot(s) for s in slots],
    )
    return ok(response.model_dump(mode="json"))


@router.get("/{organization_id}/availability/daily-counts")
def get_daily_counts(
    organization_id: str,
    dates: str = Query(..., description="Comma separated YYYY-MM-DD dates"),
    serviceId: Optional[str] = Query(None),
    serviceDuration: Optional[int] = Query(None, gt=0),
    db: Session = Depends(get_db),
    plan_limits: PlanLimitsTable = Depends(get_plan_limits)
):
    """Slot counts per date for the booking calendar"""
    try:
        parsed = [date.fromisoformat(d.strip()) for d in dates.split(",") if d.strip()]
    except ValueError:
        raise ValidationError("dates must be comma separated YYYY-MM-DD values")
    if len(parsed) > 62:
        raise ValidationError("At most 62 dates per request")

    counts = BookingService.daily_counts(
        db, organization_id, plan_limits, parsed,
        service_id=serviceId, service_duration=serviceDuration,
    )
    return ok([c.model_dump(mode="json") for c in counts])


@router.post("/{organization_id}/appointments", status_code=201)
def create_public_appointment(
    organization_id: str,
    request: PublicBookingRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    validator: BookingValidator = Depends(get_booking_validator)
):
    """
    Book an appointment from the public page

    Errors:
    - 404 NOT_FOUND: unknown organization, service or professional
    - 409 SLOT_UNAVAILABLE: time not offered or just taken
    - 403 QUOTA_EXCEEDED: monthly appointment limit of the plan reached
    """
    appointment, organization = BookingService.create_public_booking(
        db, organization_id, validator, request
    )
    response = BookingService.to_response(appointment, organization.settings.timezone)

    if organization.settings.notifications.emailReminders:
        background_tasks.add_task(
            send_booking_confirmation,
            response.clientEmail,
            {**response.model_dump(mode="json"), "organizationName": organization.name},
        )

    return ok(response.model_dump(mode="json"), "Appointment booked")
