"""
Onboarding Service Layer
Loads and stores the per-user onboarding record and pushes the collected
answers into the organization once every step is done.
"""
import logging
from datetime import datetime
from typing import Optional
from sqlalchemy.orm import Session

from bookflow.core.config import settings
from bookflow.core.exceptions import ValidationError
from bookflow.crud.organization import OrganizationCRUD
from bookflow.models.user import User
from bookflow.schemas.onboarding import OnboardingStatus, OnboardingUpdateRequest, OrganizationSetupData
from bookflow.schemas.organization import Organization
from bookflow.services import onboarding
from bookflow.services.plans import PlanLimitsTable

logger = logging.getLogger(__name__)


class OnboardingService:

    @staticmethod
    def load(user: User) -> OnboardingStatus:
        if not user.onboarding_status:
            return onboarding.new_onboarding_status()
        return OnboardingStatus(**user.onboarding_status)

    @staticmethod
    def save(db: Session, user: User, status: OnboardingStatus) -> OnboardingStatus:
        user.onboarding_status = status.model_dump(mode="json")
        db.commit()
        db.refresh(user)
        return status

    @staticmethod
    def submit_step(
        db: Session,
        user: User,
        request: OnboardingUpdateRequest,
        plan_limits: PlanLimitsTable,
        now: Optional[datetime] = None,
    ) -> OnboardingStatus:
        """
        Record one step; finishing the last step syncs the organization

        Raises:
            ValidationError: see onboarding.complete_step
        """
        current = OnboardingService.load(user)
        updated = onboarding.complete_step(current, request.stepNumber, request.stepData, now)
        if updated is current:
            return current

        # The organization is updated first so a failed sync leaves the last step open
        if updated.isCompleted and not current.isCompleted:
            OnboardingService.sync(db, user, plan_limits, now, status=updated)

        OnboardingService.save(db, user, updated)
        logger.info(f"User {user.id} completed onboarding step {request.stepNumber}")
        return updated

    @staticmethod
    def reset(db: Session, user: User) -> OnboardingStatus:
        logger.info(f"Onboarding reset for user {user.id}")
        return OnboardingService.save(db, user, onboarding.reset())

    @staticmethod
    def sync(
        db: Session,
        user: User,
        plan_limits: PlanLimitsTable,
        now: Optional[datetime] = None,
        status: Optional[OnboardingStatus] = None,
    ) -> Organization:
        """
        Fold completed steps into the user's organization, creating it when
        the user does not have one yet

        Args:
            status: onboarding record to apply (default: the stored one)
        """
        status = status or OnboardingService.load(user)
        if not status.completedSteps:
            raise ValidationError("No onboarding steps completed yet")

        row = OrganizationCRUD.get(db, user.organization_id) if user.organization_id else None
        if row is None:
            setup = onboarding.find_step(status, 2)
            name = setup.data.businessName if setup and isinstance(setup.data, OrganizationSetupData) else user.full_name
            row = OrganizationCRUD.create(db, name=name)
            user.organization_id = row.id
            user.role = "owner"
            db.commit()
            logger.info(f"Organization {row.id} created for user {user.id}")

        snapshot = OrganizationCRUD.to_snapshot(db, row, plan_limits)
        updated = onboarding.apply_onboarding_to_organization(
            status, snapshot, plan_limits, settings.TRIAL_DAYS, now
        )
        OrganizationCRUD.save_snapshot(db, row, updated, plan_limits)
        return OrganizationCRUD.to_snapshot(db, row, plan_limits)
