"""
User model
Authentication lives in the identity provider; this row links the provider
subject to an organization, a role and the onboarding record.
"""
from sqlalchemy import Column, String, Boolean, JSON, ForeignKey
from sqlalchemy.orm import relationship

from bookflow.core.database import Base
from bookflow.models.base import TimestampMixin, new_id


class User(Base, TimestampMixin):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=new_id)
    email = Column(String(255), nullable=False, unique=True, index=True)
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)

    # Role within organization (owner, admin, staff)
    role = Column(String(20), nullable=False, default="owner")

    organization_id = Column(
        String(36), ForeignKey("organizations.id", ondelete="SET NULL"), nullable=True, index=True
    )

    # OnboardingStatus as JSON
    onboarding_status = Column(JSON, nullable=True)

    is_active = Column(Boolean, default=True, nullable=False)

    organization = relationship("Organization", back_populates="users")

    def __repr__(self):
        return f"<User {self.email} ({self.role})>"

    @property
    def full_name(self):
        if self.first_name and self.last_name:
            return f"{self.first_name} {self.last_name}"
        return self.first_name or self.last_name or self.email
