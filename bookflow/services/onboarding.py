"""
Onboarding state machine

Tenants walk through a fixed sequence of setup steps. Steps must be completed
in order; an already-completed step may be re-submitted to change its data.
Functions return new OnboardingStatus objects and never mutate their input.
"""
from datetime import datetime
from typing import Optional

from bookflow.core.exceptions import ValidationError
from bookflow.schemas.onboarding import (
    ONBOARDING_STEPS,
    BusinessConfigurationData,
    IndustrySelectionData,
    IndustryType,
    OnboardingStatus,
    OnboardingStep,
    OrganizationSetupData,
    PlanSelectionData,
    StepData,
)
from bookflow.schemas.organization import Organization, Plan, TemplateType
from bookflow.services.business_hours import validate_business_hours
from bookflow.services.plans import PlanLimitsTable

TOTAL_STEPS = len(ONBOARDING_STEPS)


def new_onboarding_status(now: Optional[datetime] = None) -> OnboardingStatus:
    return OnboardingStatus(startedAt=now or datetime.utcnow())


def reset(now: Optional[datetime] = None) -> OnboardingStatus:
    """Administrative reset: back to step 1 with nothing completed"""
    return new_onboarding_status(now)


def find_step(status: OnboardingStatus, step_number: int) -> Optional[OnboardingStep]:
    for step in status.completedSteps:
        if step.stepNumber == step_number:
            return step
    return None


def complete_step(
    status: OnboardingStatus,
    step_number: int,
    data: StepData,
    now: Optional[datetime] = None,
) -> OnboardingStatus:
    """
    Record a completed step

    Args:
        status: current onboarding record
        step_number: 1-based step being submitted
        data: payload; its stepName must match the step
        now: completion timestamp (default: datetime.utcnow())

    Returns:
        Updated status. Re-submitting identical data returns `status` unchanged.

    Raises:
        ValidationError: step out of range, payload for another step, invalid
            business hours, a skipped step, or a change after onboarding is completed
    """
    if not 1 <= step_number <= TOTAL_STEPS:
        raise ValidationError(f"stepNumber must be between 1 and {TOTAL_STEPS}")

    step_name = ONBOARDING_STEPS[step_number - 1]
    if data.stepName != step_name.value:
        raise ValidationError(
            f"Step {step_number} expects '{step_name.value}' data, got '{data.stepName}'"
        )

    if isinstance(data, OrganizationSetupData) and data.businessHours is not None:
        validate_business_hours(data.businessHours)

    existing = find_step(status, step_number)
    if existing is not None and existing.data == data:
        return status

    if status.isCompleted:
        raise ValidationError("Onboarding is already completed; reset it to make changes")

    if existing is None and step_number != status.currentStep:
        raise ValidationError(
            f"Step {step_number} cannot be completed before step {status.currentStep}",
            {"currentStep": status.currentStep},
        )

    now = now or datetime.utcnow()
    record = OnboardingStep(
        stepNumber=step_number,
        stepName=step_name,
        isCompleted=True,
        completedAt=now,
        data=data,
    )
    steps = [s for s in status.completedSteps if s.stepNumber != step_number]
    steps.append(record)
    steps.sort(key=lambda s: s.stepNumber)

    current_step = max(status.currentStep, step_number + 1)
    is_completed = current_step > TOTAL_STEPS

    industry = status.industry
    if isinstance(data, IndustrySelectionData):
        industry = data.industryType

    return status.model_copy(
        update={
            "completedSteps": steps,
            "currentStep": current_step,
            "isCompleted": is_completed,
            "industry": industry,
            "startedAt": status.startedAt or now,
            "completedAt": now if is_completed else None,
        }
    )


def apply_onboarding_to_organization(
    status: OnboardingStatus,
    organization: Organization,
    plan_limits: PlanLimitsTable,
    default_trial_days: int = 30,
    now: Optional[datetime] = None,
) -> Organization:
    """
    Fold the completed step payloads into organization settings

    Plan selection replaces the subscription with the table's limits; the
    basic plan starts a trial.
    """
    org = organization.model_copy(deep=True)
    settings = org.settings

    for step in status.completedSteps:
        data = step.data
        if isinstance(data, IndustrySelectionData):
            if data.industryType == IndustryType.HYPERBARIC_CENTER:
                org.templateType = TemplateType.HYPERBARIC_CENTER
            else:
                org.templateType = TemplateType.BEAUTY_SALON

        elif isinstance(data, OrganizationSetupData):
            org.name = data.businessName
            settings.timezone = data.timezone
            settings.currency = data.currency.upper()
            if data.businessHours is not None:
                validate_business_hours(data.businessHours)
                settings.businessHours = data.businessHours

        elif isinstance(data, BusinessConfigurationData):
            system = settings.appointmentSystem
            system.appointmentModel = data.appointmentModel
            system.allowClientSelection = data.allowClientSelection
            system.bufferBetweenAppointments = data.bufferBetweenAppointments
            system.maxAdvanceBookingDays = data.maxAdvanceBookingDays
            system.bufferPolicy = data.bufferPolicy
            if data.services:
                settings.services = [
                    s if s.id else s.model_copy(update={"id": f"svc-{i + 1}"})
                    for i, s in enumerate(data.services)
                ]

        elif isinstance(data, PlanSelectionData):
            trial_days = None
            if data.planId == Plan.BASIC:
                trial_days = data.trialDays or default_trial_days
            org.subscription = plan_limits.subscription_for(data.planId, trial_days, now)

    return org
