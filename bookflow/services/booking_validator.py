"""
Booking validation

Pure accept/reject decision for a proposed appointment. The caller supplies
fresh organization state, the slots computed for the candidate's date and the
month's appointment count; nothing here touches the database. The result is
advisory: the atomic insert in AppointmentCRUD.insert_if_free has the final word.
"""
from typing import Iterable

from bookflow.core.exceptions import QuotaExceededError, RejectionReason
from bookflow.schemas.appointment import BookingDecision, CandidateAppointment
from bookflow.schemas.availability import Slot
from bookflow.schemas.organization import Organization
from bookflow.services.plans import PlanLimitsTable


class BookingValidator:
    """
    Checks, first failure wins:
        1. resource exists, is active and belongs to the organization
        2. candidate interval equals one computed slot
        3. monthly appointment count is below the plan's cap
    """

    def __init__(self, plan_limits: PlanLimitsTable):
        self.plan_limits = plan_limits

    def validate(
        self,
        candidate: CandidateAppointment,
        computed_slots: Iterable[Slot],
        organization: Organization,
        current_month_appointment_count: int,
    ) -> BookingDecision:
        resource = organization.find_resource(candidate.resourceId)
        if (
            candidate.organizationId != organization.id
            or resource is None
            or not resource.isActive
        ):
            return BookingDecision.reject(
                RejectionReason.NOT_FOUND,
                f"Resource {candidate.resourceId} not found in organization {organization.id}",
            )

        wanted = (candidate.resourceId, candidate.date, candidate.start, candidate.end)
        if not any((s.resourceId, s.date, s.start, s.end) == wanted for s in computed_slots):
            return BookingDecision.reject(
                RejectionReason.SLOT_UNAVAILABLE,
                "Requested time is not available",
            )

        limits = self.plan_limits.limits_for(organization.subscription.plan)
        if current_month_appointment_count >= limits.maxAppointmentsPerMonth:
            return BookingDecision.reject(
                RejectionReason.QUOTA_EXCEEDED,
                f"Monthly appointment limit reached ({limits.maxAppointmentsPerMonth})",
            )

        return BookingDecision.accept()

    def check_resource_quota(self, organization: Organization, current_resource_count: int) -> None:
        """
        Raises:
            QuotaExceededError: when adding one more resource would pass maxResources
        """
        limits = self.plan_limits.limits_for(organization.subscription.plan)
        if current_resource_count >= limits.maxResources:
            raise QuotaExceededError(
                f"Resource limit reached ({limits.maxResources}) for the "
                f"'{organization.subscription.plan.value}' plan"
            )
