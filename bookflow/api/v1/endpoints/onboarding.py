"""
Onboarding API Endpoints
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from bookflow.core.database import get_db
from bookflow.core.dependencies import get_plan_limits
from bookflow.core.security import get_current_user, require_role
from bookflow.models.user import User
from bookflow.schemas.common import ok
from bookflow.schemas.onboarding import OnboardingUpdateRequest
from bookflow.services.onboarding_service import OnboardingService
from bookflow.services.plans import PlanLimitsTable

router = APIRouter(prefix="/onboarding", tags=["onboarding"])


@router.get("/status")
def get_onboarding_status(current_user: User = Depends(get_current_user)):
    status = OnboardingService.load(current_user)
    return ok(status.model_dump(mode="json"))


@router.put("/step")
def update_onboarding_step(
    request: OnboardingUpdateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    plan_limits: PlanLimitsTable = Depends(get_plan_limits)
):
    """
    Complete (or re-submit) one onboarding step

    Steps are taken in order; after the last one the organization is updated
    with the collected data.
    """
    status = OnboardingService.submit_step(db, current_user, request, plan_limits)
    return ok(status.model_dump(mode="json"), f"Step {request.stepNumber} saved")


@router.post("/reset")
def reset_onboarding(
    current_user: User = Depends(require_role("owner")),
    db: Session = Depends(get_db)
):
    status = OnboardingService.reset(db, current_user)
    return ok(status.model_dump(mode="json"), "Onboarding reset")


@router.post("/sync")
def sync_onboarding(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    plan_limits: PlanLimitsTable = Depends(get_plan_limits)
):
    """Re-apply completed onboarding answers to the organization"""
    organization = OnboardingService.sync(db, current_user, plan_limits)
    return ok(organization.model_dump(mode="json"), "Organization synchronized")
