"""
Appointment API Endpoints
Staff views and status transitions; available once onboarding is complete
"""
from datetime import date, timedelta
from typing import Optional
from fastapi import APIRouter, BackgroundTasks, Depends, Query
from sqlalchemy.orm import Session

from bookflow.core.config import settings
from bookflow.core.database import get_db
from bookflow.core.dependencies import (
    get_current_organization,
    get_plan_limits,
    require_onboarding_complete,
)
from bookflow.core.exceptions import ValidationError
from bookflow.models.organization import Organization
from bookflow.schemas.appointment import AppointmentListResponse, AppointmentStatus, CancelRequest
from bookflow.schemas.availability import DateRange, SlotResponse
from bookflow.schemas.common import ok
from bookflow.services.booking import BookingService
from bookflow.services.notifications import send_booking_cancellation
from bookflow.services.plans import PlanLimitsTable

router = APIRouter(
    prefix="/appointments",
    tags=["appointments"],
    dependencies=[Depends(require_onboarding_complete)],
)


def _timezone(organization: Organization) -> str:
    return (organization.settings or {}).get("timezone", settings.DEFAULT_TIMEZONE)


def _date_range(start: date, end: Optional[date]) -> DateRange:
    end = end or start
    if end < start:
        raise ValidationError("endDate must not be before startDate")
    if (end - start).days > 92:
        raise ValidationError("Date range cannot exceed 92 days")
    return DateRange(start=start, end=end + timedelta(days=1))


@router.get("")
def list_appointments(
    startDate: date = Query(...),
    endDate: Optional[date] = Query(None, description="Inclusive, defaults to startDate"),
    status: Optional[AppointmentStatus] = Query(None),
    resourceId: Optional[str] = Query(None),
    organization: Organization = Depends(get_current_organization),
    db: Session = Depends(get_db)
):
    appointments = BookingService.list_appointments(
        db, organization, _date_range(startDate, endDate), status, resourceId
    )
    tz = _timezone(organization)
    data = [BookingService.to_response(a, tz) for a in appointments]
    return ok(AppointmentListResponse(data=data, total=len(data)).model_dump(mode="json"))


@router.get("/availability")
def get_admin_availability(
    startDate: date = Query(...),
    endDate: Optional[date] = Query(None, description="Inclusive, defaults to startDate"),
    serviceId: Optional[str] = Query(None),
    serviceDuration: Optional[int] = Query(None, gt=0),
    professionalId: Optional[str] = Query(None),
    granularity: Optional[int] = Query(None, gt=0, description="Minutes between slot starts"),
    organization: Organization = Depends(get_current_organization),
    db: Session = Depends(get_db),
    plan_limits: PlanLimitsTable = Depends(get_plan_limits)
):
    """Free slots including past ones, for the staff calendar"""
    duration, slots = BookingService.admin_availability(
        db, organization, plan_limits, _date_range(startDate, endDate),
        service_id=serviceId, service_duration=serviceDuration,
        professional_id=professionalId, granularity=granularity,
    )
    return ok({
        "serviceDuration": duration,
        "slots": [SlotResponse.from_slot(s).model_dump(mode="json") for s in slots],
    })


@router.post("/{appointment_id}/cancel")
def cancel_appointment(
    appointment_id: str,
    background_tasks: BackgroundTasks,
    request: Optional[CancelRequest] = None,
    organization: Organization = Depends(get_current_organization),
    db: Session = Depends(get_db)
):
    reason = request.reason if request else None
    appointment = BookingService.cancel(db, organization.id, appointment_id, reason)
    response = BookingService.to_response(appointment, _timezone(organization))

    if (organization.settings or {}).get("notifications", {}).get("emailReminders", True):
        background_tasks.add_task(
            send_booking_cancellation,
            response.clientEmail,
            {**response.model_dump(mode="json"), "organizationName": organization.name, "reason": reason},
        )
    return ok(response.model_dump(mode="json"), "Appointment cancelled")


@router.post("/{appointment_id}/complete")
def complete_appointment(
    appointment_id: str,
    organization: Organization = Depends(get_current_organization),
    db: Session = Depends(get_db)
):
    appointment = BookingService.complete(db, organization.id, appointment_id)
    response = BookingService.to_response(appointment, _timezone(organization))
    return ok(response.model_dump(mode="json"), "Appointment completed")
