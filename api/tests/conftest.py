"""Shared test fixtures.

Tests run against a fresh in-memory SQLite database per test (one connection
shared through StaticPool). Celery and SMTP are never reached: the scheduler
and ``send_email`` are patched by the ``scheduler_mock`` and ``email_mock``
fixtures.
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from shelfbook.models import (
    Asset,
    AssetStatus,
    Base,
    Category,
    Custody,
    Location,
    Organization,
    TeamMember,
    User,
)
from shelfbook.schemas import ClientHint


@pytest.fixture
async def db_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def hints():
    return ClientHint(time_zone="Europe/Amsterdam", locale="en-GB")


@pytest.fixture
def scheduler_mock():
    """Replace the Celery-backed scheduler. Job ids run job-1, job-2, ..."""
    with patch("shelfbook.services.booking.scheduler") as mock:
        mock.new_job_id.side_effect = lambda: f"job-{mock.new_job_id.call_count}"
        mock.send_after.side_effect = lambda key, data, when, job_id=None: job_id
        yield mock


@pytest.fixture
def email_mock():
    with patch("shelfbook.services.booking_emails.send_email", new_callable=AsyncMock) as mock:
        yield mock


@pytest.fixture
async def seed(db):
    """Two organizations, three people and a handful of assets.

    - alice: user + team member of ``org`` (creator in most tests)
    - bob: user + team member of ``org`` with an email (custodian)
    - carol: team member of ``org`` without a login
    """
    org = Organization(name="Acme Rentals")
    other_org = Organization(name="Other Org")
    db.add_all([org, other_org])
    await db.flush()

    alice = User(email="alice@example.com", first_name="Alice", last_name="Admin")
    bob = User(email="bob@example.com", first_name="Bob", last_name="Builder")
    db.add_all([alice, bob])
    await db.flush()

    alice_member = TeamMember(organization_id=org.id, user_id=alice.id, name="Alice Admin")
    bob_member = TeamMember(organization_id=org.id, user_id=bob.id, name="Bob Builder")
    carol_member = TeamMember(organization_id=org.id, user_id=None, name="Carol Contractor")
    db.add_all([alice_member, bob_member, carol_member])
    await db.flush()

    category = Category(organization_id=org.id, name="Cameras", color="#ff0000")
    location = Location(organization_id=org.id, name="Warehouse", address="1 Dock Road, London")
    db.add_all([category, location])
    await db.flush()

    camera = Asset(organization_id=org.id, title="Camera", category_id=category.id, location_id=location.id)
    tripod = Asset(organization_id=org.id, title="Tripod")
    drone = Asset(organization_id=org.id, title="Drone", status=AssetStatus.IN_CUSTODY)
    foreign = Asset(organization_id=other_org.id, title="Someone else's laptop")
    db.add_all([camera, tripod, drone, foreign])
    await db.flush()

    custody = Custody(asset_id=drone.id, team_member_id=carol_member.id)
    db.add(custody)
    await db.flush()

    return SimpleNamespace(
        org=org,
        other_org=other_org,
        alice=alice,
        bob=bob,
        alice_member=alice_member,
        bob_member=bob_member,
        carol_member=carol_member,
        category=category,
        location=location,
        camera=camera,
        tripod=tripod,
        drone=drone,
        foreign=foreign,
    )
