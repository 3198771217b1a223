"""
Appointment CRUD Operations

insert_if_free is the storage side of the booking contract: the validator's
answer is point-in-time, so the insert re-checks for a conflicting interval
while holding a lock on the resource row.
"""
import logging
from datetime import date, datetime, timedelta
from typing import List, Optional, Sequence
from sqlalchemy import and_
from sqlalchemy.orm import Session

from bookflow.core.exceptions import NotFoundError, SlotUnavailableError
from bookflow.models.appointment import Appointment
from bookflow.models.resource import Resource
from bookflow.schemas.appointment import ACTIVE_STATUSES, AppointmentStatus
from bookflow.schemas.availability import BookedInterval, DateRange
from bookflow.schemas.organization import BufferPolicy
from bookflow.utils.time import combine_local, month_bounds_utc, split_local, to_local, to_utc

logger = logging.getLogger(__name__)


class AppointmentCRUD:
    """Appointment table access"""

    @staticmethod
    def get(db: Session, organization_id: str, appointment_id: str) -> Optional[Appointment]:
        return db.query(Appointment).filter(
            Appointment.organization_id == organization_id,
            Appointment.id == appointment_id,
        ).first()

    @staticmethod
    def list_in_range(
        db: Session,
        organization_id: str,
        date_range: DateRange,
        tz_name: str,
        resource_ids: Optional[Sequence[str]] = None,
        active_only: bool = True,
    ) -> List[Appointment]:
        """Appointments starting inside the local date range"""
        start_utc = to_utc(combine_local(date_range.start, 0), tz_name)
        end_utc = to_utc(combine_local(date_range.end, 0), tz_name)

        query = db.query(Appointment).filter(
            and_(
                Appointment.organization_id == organization_id,
                Appointment.start_at >= start_utc,
                Appointment.start_at < end_utc,
            )
        )
        if resource_ids is not None:
            query = query.filter(Appointment.resource_id.in_(list(resource_ids)))
        if active_only:
            query = query.filter(Appointment.status.in_(ACTIVE_STATUSES))
        return query.order_by(Appointment.start_at.asc()).all()

    @staticmethod
    def booked_intervals(
        db: Session,
        organization_id: str,
        date_range: DateRange,
        tz_name: str,
        resource_ids: Optional[Sequence[str]] = None,
    ) -> List[BookedInterval]:
        """Active appointments converted to local minute-of-day intervals"""
        intervals = []
        for appointment in AppointmentCRUD.list_in_range(
            db, organization_id, date_range, tz_name, resource_ids
        ):
            local_day, start_minute = split_local(to_local(appointment.start_at, tz_name))
            intervals.append(
                BookedInterval(
                    resourceId=appointment.resource_id,
                    date=local_day,
                    start=start_minute,
                    end=start_minute + appointment.duration_minutes,
                )
            )
        return intervals

    @staticmethod
    def count_for_month(db: Session, organization_id: str, local_day: date, tz_name: str) -> int:
        """Non-cancelled appointments in the organization's local month"""
        start_utc, end_utc = month_bounds_utc(local_day, tz_name)
        return db.query(Appointment).filter(
            and_(
                Appointment.organization_id == organization_id,
                Appointment.start_at >= start_utc,
                Appointment.start_at < end_utc,
                Appointment.status != AppointmentStatus.CANCELLED.value,
            )
        ).count()

    @staticmethod
    def insert_if_free(
        db: Session,
        appointment: Appointment,
        buffer_minutes: int,
        buffer_policy: BufferPolicy = BufferPolicy.AFTER,
    ) -> Appointment:
        """
        Insert the appointment only if no active appointment conflicts with it

        Raises:
            NotFoundError: resource row vanished
            SlotUnavailableError: a conflicting appointment exists
        """
        resource = db.query(Resource).filter(
            Resource.id == appointment.resource_id,
            Resource.organization_id == appointment.organization_id,
        ).with_for_update().first()
        if resource is None:
            db.rollback()
            raise NotFoundError(f"Resource {appointment.resource_id} not found")

        buffer = timedelta(minutes=buffer_minutes)
        start = appointment.start_at
        end = start + timedelta(minutes=appointment.duration_minutes)

        nearby = db.query(Appointment).filter(
            Appointment.resource_id == appointment.resource_id,
            Appointment.status.in_(ACTIVE_STATUSES),
            Appointment.start_at < end + buffer,
            Appointment.start_at > start - timedelta(days=1),
        ).all()

        for other in nearby:
            blocked_start = other.start_at
            if buffer_policy == BufferPolicy.SYMMETRIC:
                blocked_start -= buffer
            blocked_end = other.end_at + buffer
            if start < blocked_end and end > blocked_start:
                db.rollback()
                logger.info(
                    f"Conflicting write for resource {appointment.resource_id} at {start}: "
                    f"appointment {other.id} already holds it"
                )
                raise SlotUnavailableError("Requested time was just booked by someone else")

        db.add(appointment)
        db.commit()
        db.refresh(appointment)
        return appointment

    @staticmethod
    def transition(db: Session, appointment: Appointment, status: AppointmentStatus, reason: str = None) -> Appointment:
        now = datetime.utcnow()
        appointment.status = status.value
        if status == AppointmentStatus.CANCELLED:
            appointment.cancelled_at = now
            appointment.cancellation_reason = reason
        elif status == AppointmentStatus.COMPLETED:
            appointment.completed_at = now
        appointment.updated_at = now
        db.commit()
        db.refresh(appointment)
        return appointment
