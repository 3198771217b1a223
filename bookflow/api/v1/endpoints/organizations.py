"""
Organization API Endpoints
Settings, archiving and bookable resources of the caller's organization
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from bookflow.core.database import get_db
from bookflow.core.dependencies import (
    get_booking_validator,
    get_current_organization,
    get_plan_limits,
)
from bookflow.core.security import require_role
from bookflow.crud.organization import OrganizationCRUD
from bookflow.models.organization import Organization
from bookflow.schemas.common import ok
from bookflow.schemas.organization import BookableResource, OrganizationSettingsUpdate, ResourceCreate
from bookflow.services.booking_validator import BookingValidator
from bookflow.services.organization_service import OrganizationService
from bookflow.services.plans import PlanLimitsTable

router = APIRouter(prefix="/organizations", tags=["organizations"])


@router.get("/me")
def get_my_organization(
    organization: Organization = Depends(get_current_organization),
    db: Session = Depends(get_db),
    plan_limits: PlanLimitsTable = Depends(get_plan_limits)
):
    snapshot = OrganizationCRUD.to_snapshot(db, organization, plan_limits)
    return ok(snapshot.model_dump(mode="json"))


@router.put("/me/settings", dependencies=[Depends(require_role("owner", "admin"))])
def update_my_settings(
    update: OrganizationSettingsUpdate,
    organization: Organization = Depends(get_current_organization),
    db: Session = Depends(get_db),
    plan_limits: PlanLimitsTable = Depends(get_plan_limits)
):
    """
    Partial update of organization settings

    Subscription and limits are not accepted here; unknown fields are rejected.
    """
    snapshot = OrganizationService.update_settings(db, organization, update, plan_limits)
    return ok(snapshot.model_dump(mode="json"), "Settings updated")


@router.post("/me/archive", dependencies=[Depends(require_role("owner"))])
def archive_my_organization(
    organization: Organization = Depends(get_current_organization),
    db: Session = Depends(get_db)
):
    OrganizationService.archive(db, organization)
    return ok({"id": organization.id, "isArchived": True}, "Organization archived")


@router.get("/me/resources")
def list_my_resources(
    organization: Organization = Depends(get_current_organization),
    db: Session = Depends(get_db)
):
    resources = [
        BookableResource(id=r.id, name=r.name, kind=r.kind, isActive=r.is_active).model_dump(mode="json")
        for r in OrganizationCRUD.list_resources(db, organization.id)
    ]
    return ok(resources)


@router.post("/me/resources", status_code=201, dependencies=[Depends(require_role("owner", "admin"))])
def create_my_resource(
    payload: ResourceCreate,
    organization: Organization = Depends(get_current_organization),
    db: Session = Depends(get_db),
    validator: BookingValidator = Depends(get_booking_validator)
):
    """Add a professional or resource; limited by the plan's maxResources"""
    resource = OrganizationService.add_resource(db, organization, payload, validator)
    created = BookableResource(id=resource.id, name=resource.name, kind=resource.kind, isActive=resource.is_active)
    return ok(created.model_dump(mode="json"), "Resource created")
