"""
Shared fixtures: in-memory database, seeded organization and auth headers
"""
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"
for _key in ("MAIL_USERNAME", "MAIL_PASSWORD", "MAIL_FROM"):
    os.environ.pop(_key, None)

import pytest
from datetime import datetime, timedelta
from fastapi.testclient import TestClient

from bookflow.core.database import Base, SessionLocal, engine, get_db
from bookflow.core.security import create_access_token
from bookflow.models import Organization, Resource, User
from bookflow.schemas.organization import OrganizationSettings, Service
from main import app


def next_monday(min_days: int = 2):
    """First Monday at least `min_days` after today (UTC)"""
    day = datetime.utcnow().date() + timedelta(days=min_days)
    while day.weekday() != 0:
        day += timedelta(days=1)
    return day


def headers_for(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token({'sub': user.id})}"}


@pytest.fixture
def db_session():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def test_client(db_session):
    """Test client sharing the test session"""
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def organization(db_session):
    """Basic plan salon in UTC with default hours (Mon-Fri 09-18) and 15 min buffer"""
    settings = OrganizationSettings(
        timezone="UTC",
        services=[
            Service(id="svc-cut", name="Haircut", duration=60, price=15000),
            Service(id="svc-old", name="Retired", duration=30, price=1000, isActive=False),
        ],
    )
    row = Organization(name="Salon Bella", settings=settings.model_dump(mode="json"), plan="basic")
    db_session.add(row)
    db_session.commit()
    db_session.refresh(row)
    return row


@pytest.fixture
def professionals(db_session, organization):
    ana = Resource(organization_id=organization.id, name="Ana")
    luis = Resource(organization_id=organization.id, name="Luis")
    db_session.add_all([ana, luis])
    db_session.commit()
    db_session.refresh(ana)
    db_session.refresh(luis)
    return ana, luis


@pytest.fixture
def owner(db_session, organization):
    user = User(
        email="owner@salonbella.cl",
        first_name="Carla",
        role="owner",
        organization_id=organization.id,
        onboarding_status={"isCompleted": True, "currentStep": 5, "completedSteps": []},
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def auth_headers(owner):
    return headers_for(owner)


@pytest.fixture
def new_user(db_session):
    """Freshly signed-up user without organization or onboarding"""
    user = User(email="new@clinicasur.cl", first_name="Pablo", role="owner")
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def new_user_headers(new_user):
    return headers_for(new_user)


@pytest.fixture
def booking_day():
    return next_monday()


@pytest.fixture
def token_headers():
    """Build auth headers for any user created inside a test"""
    return headers_for
