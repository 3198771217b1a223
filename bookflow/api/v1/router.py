# bookflow/api/v1/router.py
from fastapi import APIRouter

from bookflow.api.v1.endpoints import (
    public_booking,
    organizations,
    appointments,
    onboarding,
)

api_router = APIRouter()
api_router.include_router(public_booking.router)
api_router.include_router(organizations.router)
api_router.include_router(appointments.router)
api_router.include_router(onboarding.router)
