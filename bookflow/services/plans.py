"""
Plan limit table

An immutable mapping from plan to ResourceLimits. One instance is built at
startup and handed to whatever needs it (BookingValidator, onboarding sync);
nothing reads it as a global.
"""
from datetime import datetime, timedelta
from types import MappingProxyType
from typing import Mapping, Optional

from bookflow.core.exceptions import ValidationError
from bookflow.schemas.organization import Plan, ResourceLimits, Subscription, Trial


DEFAULT_PLAN_LIMITS = {
    Plan.FREE: ResourceLimits(maxResources=1, maxAppointmentsPerMonth=100, maxUsers=1),
    Plan.BASIC: ResourceLimits(maxResources=5, maxAppointmentsPerMonth=1000, maxUsers=2),
    Plan.PREMIUM: ResourceLimits(maxResources=10, maxAppointmentsPerMonth=2500, maxUsers=10),
}


class PlanLimitsTable:
    """Read-only plan → limits lookup"""

    def __init__(self, limits: Optional[Mapping[Plan, ResourceLimits]] = None):
        source = DEFAULT_PLAN_LIMITS if limits is None else limits
        missing = [plan.value for plan in Plan if plan not in source]
        if missing:
            raise ValidationError(f"Plan table is missing limits for: {', '.join(missing)}")
        self._limits = MappingProxyType({Plan(k): v for k, v in source.items()})

    def __getitem__(self, plan) -> ResourceLimits:
        return self.limits_for(plan)

    def limits_for(self, plan) -> ResourceLimits:
        try:
            return self._limits[Plan(plan)]
        except ValueError:
            raise ValidationError(f"Unknown plan: {plan}")

    def subscription_for(
        self,
        plan,
        trial_days: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> Subscription:
        """
        Build a subscription whose limits come from the table

        Args:
            plan: free, basic or premium
            trial_days: when given, a trial starting at `now` is attached
            now: start of the trial (default: datetime.utcnow())
        """
        trial = None
        if trial_days:
            start = now or datetime.utcnow()
            trial = Trial(
                isActive=True,
                startDate=start.isoformat(),
                endDate=(start + timedelta(days=trial_days)).isoformat(),
                daysTotal=trial_days,
            )
        return Subscription(plan=Plan(plan), limits=self.limits_for(plan), trial=trial)

    def verify(self, subscription: Subscription) -> None:
        """
        Raises:
            ValidationError: when subscription.limits differ from the plan's row
        """
        expected = self.limits_for(subscription.plan)
        if subscription.limits != expected:
            raise ValidationError(
                f"Limits do not match the '{subscription.plan.value}' plan",
                {"expected": expected.model_dump(), "actual": subscription.limits.model_dump()},
            )
