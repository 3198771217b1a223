"""
Appointment model
"""
from datetime import timedelta
from sqlalchemy import Column, String, Integer, DateTime, Float, Text, ForeignKey, Index
from sqlalchemy.orm import relationship

from bookflow.core.database import Base
from bookflow.models.base import TimestampMixin, OrganizationMixin, new_id


class Appointment(Base, TimestampMixin, OrganizationMixin):
    """
    A booked interval on one resource
    start_at is stored as naive UTC; local dates are derived with the
    organization's timezone.
    """

    __tablename__ = "appointments"

    id = Column(String(36), primary_key=True, default=new_id)
    resource_id = Column(
        String(36), ForeignKey("resources.id", ondelete="CASCADE"), nullable=False, index=True
    )

    # Service snapshot at booking time
    service_id = Column(String(100), nullable=True)
    service_name = Column(String(255), nullable=True)
    service_price = Column(Float, nullable=True)

    start_at = Column(DateTime, nullable=False)
    duration_minutes = Column(Integer, nullable=False)

    # pending, confirmed, cancelled, completed
    status = Column(String(20), default="pending", nullable=False)

    # Client
    client_name = Column(String(255), nullable=False)
    client_email = Column(String(255), nullable=False)
    client_phone = Column(String(30), nullable=True)
    notes = Column(Text, nullable=True)

    # Terminal transitions
    cancelled_at = Column(DateTime, nullable=True)
    cancellation_reason = Column(Text, nullable=True)
    completed_at = Column(DateTime, nullable=True)

    organization = relationship("Organization", back_populates="appointments")
    resource = relationship("Resource", back_populates="appointments")

    __table_args__ = (
        Index("ix_appointments_resource_start", "resource_id", "start_at"),
    )

    @property
    def end_at(self):
        return self.start_at + timedelta(minutes=self.duration_minutes)

    def __repr__(self):
        return f"<Appointment {self.id} {self.start_at} ({self.status})>"
