from functools import lru_cache
from fastapi import Depends, HTTPException, status
from sqlalchemy.orm import Session

from bookflow.core.database import get_db
from bookflow.core.security import get_current_user
from bookflow.crud.organization import OrganizationCRUD
from bookflow.models.organization import Organization
from bookflow.models.user import User
from bookflow.schemas.onboarding import OnboardingStatus
from bookflow.services.booking_validator import BookingValidator
from bookflow.services.plans import PlanLimitsTable


# -------------------------
# BOOKING CORE DEPENDENCIES
# -------------------------
@lru_cache()
def get_plan_limits() -> PlanLimitsTable:
    """The one plan table of the process"""
    return PlanLimitsTable()


def get_booking_validator(
    plan_limits: PlanLimitsTable = Depends(get_plan_limits)
) -> BookingValidator:
    return BookingValidator(plan_limits)


# -------------------------
# ORGANIZATION DEPENDENCIES
# -------------------------
def get_current_organization(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Organization:
    """
    Get current user's organization row

    Raises:
        HTTPException: If user has no organization or it is archived
    """
    if not current_user.organization_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User not associated with any organization"
        )

    organization = OrganizationCRUD.get(db, current_user.organization_id)
    if not organization:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Organization not found"
        )
    return organization


def require_onboarding_complete(
    current_user: User = Depends(get_current_user)
) -> User:
    """
    Gate for organization features that need a finished onboarding
    """
    onboarding = OnboardingStatus(**(current_user.onboarding_status or {}))
    if not onboarding.isCompleted:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={
                "error": "ONBOARDING_REQUIRED",
                "message": "Complete onboarding before using this feature",
                "currentStep": onboarding.currentStep,
            }
        )
    return current_user
