"""
SQLAlchemy models for the application
"""
from bookflow.models.base import Base, TimestampMixin, OrganizationMixin
from bookflow.models.organization import Organization
from bookflow.models.resource import Resource
from bookflow.models.appointment import Appointment
from bookflow.models.user import User

__all__ = [
    "Base",
    "TimestampMixin",
    "OrganizationMixin",
    "Organization",
    "Resource",
    "Appointment",
    "User",
]
