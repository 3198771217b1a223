"""
Organization CRUD Operations
Rows <-> Organization snapshots consumed by the booking core
"""
from datetime import datetime
from typing import List, Optional
from sqlalchemy.orm import Session

from bookflow.core.config import settings as app_settings
from bookflow.models.organization import Organization as OrganizationRow
from bookflow.models.resource import Resource
from bookflow.schemas.organization import (
    AppointmentSystemSettings,
    BookableResource,
    Organization,
    OrganizationSettings,
    Trial,
)
from bookflow.services.plans import PlanLimitsTable


def default_settings() -> OrganizationSettings:
    """Settings for a brand new organization, from the configured defaults"""
    return OrganizationSettings(
        timezone=app_settings.DEFAULT_TIMEZONE,
        appointmentSystem=AppointmentSystemSettings(
            bufferBetweenAppointments=app_settings.DEFAULT_BUFFER_MINUTES,
            maxAdvanceBookingDays=app_settings.DEFAULT_MAX_ADVANCE_BOOKING_DAYS,
            bufferPolicy=app_settings.DEFAULT_BUFFER_POLICY,
        ),
    )


class OrganizationCRUD:
    """Organization table access"""

    @staticmethod
    def get(db: Session, organization_id: str, include_archived: bool = False) -> Optional[OrganizationRow]:
        query = db.query(OrganizationRow).filter(OrganizationRow.id == organization_id)
        if not include_archived:
            query = query.filter(OrganizationRow.is_archived == False)  # noqa: E712
        return query.first()

    @staticmethod
    def create(
        db: Session,
        name: str,
        settings: Optional[OrganizationSettings] = None,
        plan: str = "free",
        template_type: str = "beauty_salon",
    ) -> OrganizationRow:
        row = OrganizationRow(
            name=name,
            template_type=template_type,
            settings=(settings or default_settings()).model_dump(mode="json"),
            plan=plan,
        )
        db.add(row)
        db.commit()
        db.refresh(row)
        return row

    @staticmethod
    def list_resources(db: Session, organization_id: str, active_only: bool = False) -> List[Resource]:
        query = db.query(Resource).filter(Resource.organization_id == organization_id)
        if active_only:
            query = query.filter(Resource.is_active == True)  # noqa: E712
        return query.order_by(Resource.created_at.asc(), Resource.id.asc()).all()

    @staticmethod
    def to_snapshot(db: Session, row: OrganizationRow, plan_limits: PlanLimitsTable) -> Organization:
        """Build the read-only Organization value the booking core works on"""
        trial_days = row.trial_days if row.trial_start_date and row.trial_end_date else None
        subscription = plan_limits.subscription_for(row.plan)
        if trial_days:
            subscription.trial = Trial(
                isActive=row.trial_end_date > datetime.utcnow(),
                startDate=row.trial_start_date.isoformat(),
                endDate=row.trial_end_date.isoformat(),
                daysTotal=trial_days,
            )

        resources = [
            BookableResource(id=r.id, name=r.name, kind=r.kind, isActive=r.is_active)
            for r in OrganizationCRUD.list_resources(db, row.id)
        ]

        return Organization(
            id=row.id,
            name=row.name,
            templateType=row.template_type,
            settings=OrganizationSettings(**(row.settings or {})),
            subscription=subscription,
            resources=resources,
            isArchived=row.is_archived,
        )

    @staticmethod
    def save_snapshot(
        db: Session,
        row: OrganizationRow,
        snapshot: Organization,
        plan_limits: PlanLimitsTable,
    ) -> OrganizationRow:
        """
        Persist name, template, settings and subscription of a snapshot

        Raises:
            ValidationError: subscription limits do not match its plan
        """
        plan_limits.verify(snapshot.subscription)

        row.name = snapshot.name
        row.template_type = snapshot.templateType.value
        row.settings = snapshot.settings.model_dump(mode="json")
        row.plan = snapshot.subscription.plan.value

        trial = snapshot.subscription.trial
        if trial is not None:
            row.trial_start_date = datetime.fromisoformat(trial.startDate)
            row.trial_end_date = datetime.fromisoformat(trial.endDate)
            row.trial_days = trial.daysTotal
        else:
            row.trial_start_date = None
            row.trial_end_date = None
            row.trial_days = None

        row.updated_at = datetime.utcnow()
        db.commit()
        db.refresh(row)
        return row
