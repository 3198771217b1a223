"""
Organization model
"""
from sqlalchemy import Column, String, Boolean, Integer, DateTime, JSON
from sqlalchemy.orm import relationship

from bookflow.core.database import Base
from bookflow.models.base import TimestampMixin, new_id


class Organization(Base, TimestampMixin):
    """
    Tenant of the booking platform (salon, clinic, hyperbaric center...)
    Limits are not stored: they are derived from `plan` on every read.
    Organizations are archived, never deleted.
    """

    __tablename__ = "organizations"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(255), nullable=False)
    template_type = Column(String(50), default="beauty_salon", nullable=False)

    # OrganizationSettings as JSON (timezone, hours, notifications, services...)
    settings = Column(JSON, nullable=True)

    # Subscription
    plan = Column(String(20), default="free", nullable=False)  # free, basic, premium
    trial_start_date = Column(DateTime, nullable=True)
    trial_end_date = Column(DateTime, nullable=True)
    trial_days = Column(Integer, nullable=True)

    # Soft archive
    is_archived = Column(Boolean, default=False, nullable=False)
    archived_at = Column(DateTime, nullable=True)

    # Relationships
    resources = relationship("Resource", back_populates="organization", cascade="all, delete-orphan")
    appointments = relationship("Appointment", back_populates="organization", cascade="all, delete-orphan")
    users = relationship("User", back_populates="organization")

    def __repr__(self):
        return f"<Organization {self.name} ({self.plan})>"
