"""
Bookable resource model (professionals, rooms, equipment)
"""
from sqlalchemy import Column, String, Boolean
from sqlalchemy.orm import relationship

from bookflow.core.database import Base
from bookflow.models.base import TimestampMixin, OrganizationMixin, new_id


class Resource(Base, TimestampMixin, OrganizationMixin):
    __tablename__ = "resources"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(255), nullable=False)
    kind = Column(String(20), default="professional", nullable=False)  # professional, resource
    is_active = Column(Boolean, default=True, nullable=False)

    organization = relationship("Organization", back_populates="resources")
    appointments = relationship("Appointment", back_populates="resource")

    def __repr__(self):
        return f"<Resource {self.name} ({self.kind})>"
