"""
Booking Service Layer
Glue between the HTTP layer, the database and the pure booking core

Every call rebuilds the organization snapshot from the database so the
validator always sees current settings, resources and plan.
"""
import logging
from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional, Tuple
from sqlalchemy.orm import Session

from bookflow.core.config import settings
from bookflow.core.exceptions import NotFoundError, ValidationError
from bookflow.crud.appointment import AppointmentCRUD
from bookflow.crud.organization import OrganizationCRUD
from bookflow.models.appointment import Appointment
from bookflow.models.organization import Organization as OrganizationRow
from bookflow.schemas.appointment import (
    AppointmentResponse,
    AppointmentStatus,
    CandidateAppointment,
    PublicBookingRequest,
    TERMINAL_STATUSES,
)
from bookflow.schemas.availability import DailyCount, DateRange, Slot
from bookflow.schemas.organization import Organization, Service
from bookflow.services.availability import compute_slots, count_slots_by_date, default_granularity
from bookflow.services.booking_validator import BookingValidator
from bookflow.services.business_hours import format_minutes, parse_time
from bookflow.services.plans import PlanLimitsTable
from bookflow.utils.time import combine_local, local_now, split_local, to_local, to_utc

logger = logging.getLogger(__name__)


class BookingService:
    """Availability queries, public bookings and appointment transitions"""

    # -------------------------
    # LOOKUPS
    # -------------------------
    @staticmethod
    def get_organization(db: Session, organization_id: str) -> OrganizationRow:
        """
        Raises:
            NotFoundError: unknown or archived organization
        """
        row = OrganizationCRUD.get(db, organization_id)
        if row is None:
            raise NotFoundError(f"Organization {organization_id} not found")
        return row

    @staticmethod
    def resolve_service(
        organization: Organization,
        service_id: Optional[str] = None,
        service_duration: Optional[int] = None,
    ) -> Tuple[Optional[Service], int]:
        """Service (if any) and the duration to book it for"""
        if service_id:
            service = organization.find_service(service_id)
            if service is None or not service.isActive:
                raise NotFoundError(f"Service {service_id} not found")
            return service, service.duration
        if service_duration is not None:
            return None, service_duration
        return None, settings.DEFAULT_SERVICE_DURATION_MINUTES

    @staticmethod
    def resolve_resources(organization: Organization, professional_id: Optional[str] = None) -> List[str]:
        """Active resource ids to search; a single one when a professional is requested"""
        if professional_id:
            resource = organization.find_resource(professional_id)
            if resource is None or not resource.isActive:
                raise NotFoundError(f"Professional {professional_id} not found")
            return [resource.id]
        return [r.id for r in organization.resources if r.isActive]

    # -------------------------
    # AVAILABILITY
    # -------------------------
    @staticmethod
    def compute_for_organization(
        db: Session,
        organization: Organization,
        date_range: DateRange,
        duration: int,
        resource_ids: List[str],
        include_past: bool,
        now_local: Optional[datetime] = None,
        granularity: Optional[int] = None,
    ) -> List[Slot]:
        system = organization.settings.appointmentSystem
        buffer = system.bufferBetweenAppointments
        booked = AppointmentCRUD.booked_intervals(
            db, organization.id, date_range, organization.settings.timezone, resource_ids
        )
        return compute_slots(
            business_hours=organization.settings.businessHours,
            service_duration_minutes=duration,
            buffer_minutes=buffer,
            existing_appointments=booked,
            date_range=date_range,
            slot_granularity_minutes=granularity or default_granularity(duration, buffer),
            resource_ids=resource_ids,
            include_past=include_past,
            now=now_local,
            buffer_policy=system.bufferPolicy,
        )

    @staticmethod
    def _within_booking_window(organization: Organization, day: date, now_local: datetime) -> bool:
        today = now_local.date()
        horizon = today + timedelta(days=organization.settings.appointmentSystem.maxAdvanceBookingDays)
        return today <= day <= horizon

    @staticmethod
    def public_availability(
        db: Session,
        organization_id: str,
        plan_limits: PlanLimitsTable,
        day: date,
        service_id: Optional[str] = None,
        service_duration: Optional[int] = None,
        professional_id: Optional[str] = None,
        now_utc: Optional[datetime] = None,
    ) -> Tuple[int, List[Slot]]:
        """
        Future slots for one date as shown on the public booking page

        Returns:
            (duration used, slots)
        """
        row = BookingService.get_organization(db, organization_id)
        organization = OrganizationCRUD.to_snapshot(db, row, plan_limits)
        _, duration = BookingService.resolve_service(organization, service_id, service_duration)
        resource_ids = BookingService.resolve_resources(organization, professional_id)

        now_local = local_now(organization.settings.timezone, now_utc)
        if not BookingService._within_booking_window(organization, day, now_local):
            return duration, []

        slots = BookingService.compute_for_organization(
            db, organization, DateRange.single(day), duration, resource_ids,
            include_past=False, now_local=now_local,
        )
        return duration, slots

    @staticmethod
    def daily_counts(
        db: Session,
        organization_id: str,
        plan_limits: PlanLimitsTable,
        dates: Iterable[date],
        service_id: Optional[str] = None,
        service_duration: Optional[int] = None,
        now_utc: Optional[datetime] = None,
    ) -> List[DailyCount]:
        """Number of public slots for each requested date"""
        wanted = sorted(set(dates))
        if not wanted:
            return []

        row = BookingService.get_organization(db, organization_id)
        organization = OrganizationCRUD.to_snapshot(db, row, plan_limits)
        _, duration = BookingService.resolve_service(organization, service_id, service_duration)
        resource_ids = BookingService.resolve_resources(organization)
        now_local = local_now(organization.settings.timezone, now_utc)

        slots = BookingService.compute_for_organization(
            db, organization, DateRange(start=wanted[0], end=wanted[-1] + timedelta(days=1)),
            duration, resource_ids, include_past=False, now_local=now_local,
        )
        counts = count_slots_by_date(slots)
        return [
            DailyCount(
                date=day,
                availableSlots=counts.get(day, 0)
                if BookingService._within_booking_window(organization, day, now_local) else 0,
            )
            for day in wanted
        ]

    @staticmethod
    def admin_availability(
        db: Session,
        organization_row: OrganizationRow,
        plan_limits: PlanLimitsTable,
        date_range: DateRange,
        service_id: Optional[str] = None,
        service_duration: Optional[int] = None,
        professional_id: Optional[str] = None,
        granularity: Optional[int] = None,
    ) -> Tuple[int, List[Slot]]:
        """Slots for staff views: past slots and any horizon included"""
        organization = OrganizationCRUD.to_snapshot(db, organization_row, plan_limits)
        _, duration = BookingService.resolve_service(organization, service_id, service_duration)
        resource_ids = BookingService.resolve_resources(organization, professional_id)
        slots = BookingService.compute_for_organization(
            db, organization, date_range, duration, resource_ids,
            include_past=True, granularity=granularity,
        )
        return duration, slots

    # -------------------------
    # BOOKING
    # -------------------------
    @staticmethod
    def create_public_booking(
        db: Session,
        organization_id: str,
        validator: BookingValidator,
        request: PublicBookingRequest,
        now_utc: Optional[datetime] = None,
    ) -> Tuple[Appointment, Organization]:
        """
        Compute, validate, then atomically insert a booking from the public page

        Raises:
            NotFoundError, SlotUnavailableError, QuotaExceededError, ValidationError
        """
        row = BookingService.get_organization(db, organization_id)
        organization = OrganizationCRUD.to_snapshot(db, row, validator.plan_limits)
        service, duration = BookingService.resolve_service(organization, request.serviceId)
        resource_ids = BookingService.resolve_resources(organization, request.professionalId)
        if not resource_ids:
            raise NotFoundError("Organization has no active professionals")

        tz = organization.settings.timezone
        start = parse_time(request.time)
        now_local = local_now(tz, now_utc)

        slots: List[Slot] = []
        if BookingService._within_booking_window(organization, request.date, now_local):
            slots = BookingService.compute_for_organization(
                db, organization, DateRange.single(request.date), duration, resource_ids,
                include_past=False, now_local=now_local,
            )

        # Without a requested professional, take the first one free at that time
        resource_id = resource_ids[0]
        if not request.professionalId:
            for slot in slots:
                if slot.date == request.date and slot.start == start:
                    resource_id = slot.resourceId
                    break

        candidate = CandidateAppointment(
            organizationId=organization.id,
            resourceId=resource_id,
            date=request.date,
            start=start,
            durationMinutes=duration,
        )
        month_count = AppointmentCRUD.count_for_month(db, organization.id, request.date, tz)
        decision = validator.validate(candidate, slots, organization, month_count)
        if not decision.accepted:
            logger.info(
                f"Booking rejected for organization {organization.id}: "
                f"{decision.reason.value} ({decision.message})"
            )
        decision.raise_for_rejection()

        notifications = organization.settings.notifications
        status = AppointmentStatus.CONFIRMED if notifications.autoConfirmation else AppointmentStatus.PENDING
        appointment = Appointment(
            organization_id=organization.id,
            resource_id=resource_id,
            service_id=service.id if service else None,
            service_name=service.name if service else None,
            service_price=service.price if service else None,
            start_at=to_utc(combine_local(request.date, start), tz),
            duration_minutes=duration,
            status=status.value,
            client_name=request.clientName,
            client_email=request.clientEmail,
            client_phone=request.clientPhone,
            notes=request.notes,
        )

        system = organization.settings.appointmentSystem
        appointment = AppointmentCRUD.insert_if_free(
            db, appointment, system.bufferBetweenAppointments, system.bufferPolicy
        )
        logger.info(
            f"Appointment {appointment.id} booked for resource {resource_id} "
            f"on {request.date} {request.time} ({status.value})"
        )
        return appointment, organization

    # -------------------------
    # ADMINISTRATION
    # -------------------------
    @staticmethod
    def list_appointments(
        db: Session,
        organization_row: OrganizationRow,
        date_range: DateRange,
        status: Optional[AppointmentStatus] = None,
        resource_id: Optional[str] = None,
    ) -> List[Appointment]:
        tz = (organization_row.settings or {}).get("timezone", settings.DEFAULT_TIMEZONE)
        appointments = AppointmentCRUD.list_in_range(
            db, organization_row.id, date_range, tz,
            resource_ids=[resource_id] if resource_id else None,
            active_only=False,
        )
        if status is not None:
            appointments = [a for a in appointments if a.status == status.value]
        return appointments

    @staticmethod
    def _get_active(db: Session, organization_id: str, appointment_id: str) -> Appointment:
        appointment = AppointmentCRUD.get(db, organization_id, appointment_id)
        if appointment is None:
            raise NotFoundError(f"Appointment {appointment_id} not found")
        if appointment.status in TERMINAL_STATUSES:
            raise ValidationError(f"Appointment is already {appointment.status}")
        return appointment

    @staticmethod
    def cancel(db: Session, organization_id: str, appointment_id: str, reason: Optional[str] = None) -> Appointment:
        appointment = BookingService._get_active(db, organization_id, appointment_id)
        appointment = AppointmentCRUD.transition(db, appointment, AppointmentStatus.CANCELLED, reason)
        logger.info(f"Appointment {appointment_id} cancelled")
        return appointment

    @staticmethod
    def complete(db: Session, organization_id: str, appointment_id: str) -> Appointment:
        appointment = BookingService._get_active(db, organization_id, appointment_id)
        return AppointmentCRUD.transition(db, appointment, AppointmentStatus.COMPLETED)

    @staticmethod
    def to_response(appointment: Appointment, tz_name: str) -> AppointmentResponse:
        """Appointment row as local date/time for API consumers"""
        local_day, minute = split_local(to_local(appointment.start_at, tz_name))
        return AppointmentResponse(
            id=appointment.id,
            organizationId=appointment.organization_id,
            resourceId=appointment.resource_id,
            serviceId=appointment.service_id,
            serviceName=appointment.service_name,
            servicePrice=appointment.service_price,
            date=local_day.isoformat(),
            time=format_minutes(minute),
            duration=appointment.duration_minutes,
            startAt=appointment.start_at.isoformat(),
            clientName=appointment.client_name,
            clientEmail=appointment.client_email,
            clientPhone=appointment.client_phone,
            notes=appointment.notes,
            status=appointment.status,
            createdAt=appointment.created_at.isoformat() if appointment.created_at else None,
        )
