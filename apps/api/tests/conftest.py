"""
Test configuration and fixtures.

Provides:
- In-memory SQLite database, rebuilt for each test
- Resident, flat and event factories
- Session cookie minting for authenticated tests
- HTTPX AsyncClient with the CSRF header
"""
import os
import uuid
from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator, Generator

# Must be set before the app (and its settings) are imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["TESTING"] = "1"
os.environ["ENV"] = "dev"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["DEV_SECRET"] = "test-dev-secret"
os.environ["RESEND_API_KEY"] = ""
os.environ["TWILIO_ACCOUNT_SID"] = ""
os.environ["TWILIO_AUTH_TOKEN"] = ""

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.orm import Session

from app.core.deps import COOKIE_NAME, CSRF_HEADER, CSRF_HEADER_VALUE, get_db
from app.core.security import create_session_token
from app.db.base import Base
from app.db.enums import ResidentType, Role
from app.db.models import Resident
from app.db.session import SessionLocal, engine
from app.main import app
from app.schemas.announcement import (
    AnnouncementCreate,
    CustomFieldIn,
    EventConfigIn,
    MenuItemIn,
    SportItemIn,
    SportsConfigIn,
)
from app.services import announcement_service, flat_service, resident_service

FLATS = [(1, "101"), (1, "102"), (2, "201"), (3, "301")]


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """
    Fresh schema per test.

    Services commit on their own, so isolation comes from dropping every
    table afterwards rather than from a rolled-back transaction.
    """
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    resident_service.ensure_roles(session)
    flat_service.seed_flats(session, FLATS)

    yield session

    session.close()
    Base.metadata.drop_all(bind=engine)


# =============================================================================
# Factories
# =============================================================================

def create_resident(
    db: Session,
    *,
    role: Role = Role.RESIDENT,
    approved: bool = True,
    block: int = 1,
    flat_number: str = "101",
    name: str = "Test Resident",
    email: str | None = None,
) -> Resident:
    resident = Resident(
        email=email or f"resident-{uuid.uuid4().hex[:8]}@example.com",
        name=name,
        phone="9876543210",
        block=block,
        flat_number=flat_number,
        resident_type=ResidentType.OWNER.value,
        is_approved=approved,
        role=resident_service.get_role(db, role),
    )
    db.add(resident)
    db.commit()
    db.refresh(resident)
    return resident


def create_event(
    db: Session,
    *,
    deadline: datetime | None = None,
    date: datetime | None = None,
    with_menu: bool = True,
    custom_fields: list[CustomFieldIn] | None = None,
    sports: list[str] | None = None,
    published: bool = True,
):
    """Announcement with an RSVP config (and optionally a sports config)."""
    now = datetime.now(timezone.utc)
    deadline = deadline or now + timedelta(days=2)
    menu = (
        [
            MenuItemIn(name="Veg Thali", price_per_plate=150),
            MenuItemIn(name="Sweet Box", price_per_plate=80.5),
        ]
        if with_menu
        else []
    )
    data = AnnouncementCreate(
        title="Diwali Dinner",
        date=date or now + timedelta(days=5),
        summary="Community dinner",
        body="Join us on the lawn.",
        author="Committee",
        published=published,
        event_config=EventConfigIn(
            meal_type="dinner" if with_menu else None,
            rsvp_deadline=deadline,
            menu_items=menu,
            custom_fields=custom_fields or [],
        ),
        sports_config=(
            SportsConfigIn(
                registration_deadline=deadline,
                sport_items=[SportItemIn(name=name) for name in sports],
            )
            if sports
            else None
        ),
    )
    return announcement_service.create_announcement(db, data)


@pytest.fixture
def resident(db: Session) -> Resident:
    return create_resident(db, name="Asha Rao")


@pytest.fixture
def admin(db: Session) -> Resident:
    return create_resident(db, role=Role.ADMIN, name="Admin User", block=2, flat_number="201")


@pytest.fixture
def superadmin(db: Session) -> Resident:
    return create_resident(db, role=Role.SUPERADMIN, name="Super Admin", block=3, flat_number="301")


@pytest.fixture
def facility_manager(db: Session) -> Resident:
    return create_resident(
        db, role=Role.FACILITY_MANAGER, name="Fixit Manager", block=1, flat_number="102"
    )


@pytest.fixture
def security_guard(db: Session) -> Resident:
    return create_resident(db, role=Role.SECURITY, name="Gate Guard", block=2, flat_number="201")


# =============================================================================
# Auth Helpers
# =============================================================================

def session_token_for(resident: Resident) -> str:
    return create_session_token(
        email=resident.email,
        name=resident.name,
        is_registered=True,
        is_approved=resident.is_approved,
        role=resident.role.name,
    )


def login_as(client: AsyncClient, resident: Resident) -> AsyncClient:
    """Point the client's session cookie at `resident`."""
    client.cookies.clear()
    client.cookies.set(COOKIE_NAME, session_token_for(resident))
    return client


# =============================================================================
# Client Fixtures
# =============================================================================

@pytest.fixture(scope="function")
async def client(db: Session) -> AsyncGenerator[AsyncClient, None]:
    """
    AsyncClient sharing the test database session.

    Sends the CSRF header on every request; use the login fixture to authenticate.
    """
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        headers={CSRF_HEADER: CSRF_HEADER_VALUE},
    ) as c:
        yield c

    app.dependency_overrides.clear()


@pytest.fixture
def make_resident(db: Session):
    def factory(**kwargs) -> Resident:
        return create_resident(db, **kwargs)
    return factory


@pytest.fixture
def make_event(db: Session):
    def factory(**kwargs):
        return create_event(db, **kwargs)
    return factory


@pytest.fixture
def login():
    return login_as
