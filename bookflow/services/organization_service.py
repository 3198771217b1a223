"""
Organization Service Layer
Settings updates, archiving and bookable resources
"""
import logging
import uuid
from datetime import datetime
from sqlalchemy.orm import Session

from bookflow.crud.organization import OrganizationCRUD
from bookflow.models.organization import Organization as OrganizationRow
from bookflow.models.resource import Resource
from bookflow.schemas.organization import (
    Organization,
    OrganizationSettings,
    OrganizationSettingsUpdate,
    ResourceCreate,
)
from bookflow.services.booking_validator import BookingValidator
from bookflow.services.business_hours import validate_business_hours
from bookflow.services.plans import PlanLimitsTable

logger = logging.getLogger(__name__)


class OrganizationService:

    @staticmethod
    def update_settings(
        db: Session,
        row: OrganizationRow,
        update: OrganizationSettingsUpdate,
        plan_limits: PlanLimitsTable,
    ) -> Organization:
        """
        Apply a partial settings update

        Raises:
            ValidationError: invalid business hours
        """
        snapshot = OrganizationCRUD.to_snapshot(db, row, plan_limits)
        changes = update.model_dump(exclude_unset=True)

        if "name" in changes:
            snapshot.name = changes.pop("name")
        if "templateType" in changes:
            snapshot.templateType = changes.pop("templateType")

        if update.businessHours is not None:
            validate_business_hours(update.businessHours)
        if update.services is not None:
            changes["services"] = [
                s if s.id else s.model_copy(update={"id": f"svc-{uuid.uuid4().hex[:8]}"})
                for s in update.services
            ]

        # Rebuilt through the model so the timezone validator runs on changes
        merged = {**snapshot.settings.model_dump(), **changes}
        snapshot.settings = OrganizationSettings(**merged)

        OrganizationCRUD.save_snapshot(db, row, snapshot, plan_limits)
        logger.info(f"Settings updated for organization {row.id}: {', '.join(update.model_fields_set)}")
        return OrganizationCRUD.to_snapshot(db, row, plan_limits)

    @staticmethod
    def archive(db: Session, row: OrganizationRow) -> OrganizationRow:
        row.is_archived = True
        row.archived_at = datetime.utcnow()
        db.commit()
        db.refresh(row)
        logger.info(f"Organization {row.id} archived")
        return row

    @staticmethod
    def add_resource(
        db: Session,
        row: OrganizationRow,
        payload: ResourceCreate,
        validator: BookingValidator,
    ) -> Resource:
        """
        Raises:
            QuotaExceededError: plan's maxResources already reached
        """
        snapshot = OrganizationCRUD.to_snapshot(db, row, validator.plan_limits)
        active = [r for r in snapshot.resources if r.isActive]
        validator.check_resource_quota(snapshot, len(active))

        resource = Resource(organization_id=row.id, name=payload.name, kind=payload.kind.value)
        db.add(resource)
        db.commit()
        db.refresh(resource)
        return resource
