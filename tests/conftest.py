"""
Pytest configuration and fixtures for testing.
"""
import os

# Settings are read at import time, so the test environment must be in
# place before anything from campus_connect is imported.
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test_campusconnect.db")
os.environ["CACHE_ENABLED"] = "false"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["RUN_EMBEDDED_WORKER"] = "false"
os.environ["EMAIL_USER"] = ""
os.environ["EMAIL_PASSWORD"] = ""
os.environ["ENVIRONMENT"] = "test"

import pytest
import pytest_asyncio
from typing import AsyncGenerator
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import NullPool
from sqlalchemy import func, select

from campus_connect.main import app
from campus_connect.db.session import Base, get_session
from campus_connect.core.security import hash_password
from campus_connect.db.models.user import User, RoleEnum
from campus_connect.db.models.event import Event, EventCategory
from campus_connect.db.models.rsvp import RSVP
from datetime import datetime, timedelta


# Test database URL - use environment variable if available (for Docker)
TEST_DATABASE_URL = os.getenv(
    "TEST_DATABASE_URL",
    "sqlite+aiosqlite:///./test_campusconnect.db"
)

test_engine = create_async_engine(
    TEST_DATABASE_URL,
    poolclass=NullPool,  # Disable connection pooling for tests
    echo=False,
)

TestSessionLocal = async_sessionmaker(
    test_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

PASSWORD = "Test123!@#"


@pytest_asyncio.fixture(scope="function")
async def db_engine():
    """Fresh schema for every test."""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture(scope="function")
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    async with TestSessionLocal() as session:
        yield session


@pytest.fixture
def session_factory(db_engine):
    """Factory for independent sessions, e.g. to play a competing request."""
    return TestSessionLocal


@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """
    Async HTTP client for the API.
    Overrides the database session dependency.
    """
    async def override_get_session():
        yield db_session

    app.dependency_overrides[get_session] = override_get_session

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


async def _make_user(session: AsyncSession, email: str, full_name: str, role: RoleEnum) -> User:
    user = User(
        email=email,
        hashed_password=hash_password(PASSWORD),
        full_name=full_name,
        role=role,
    )
    session.add(user)
    await session.commit()
    await session.refresh(user)
    return user


@pytest_asyncio.fixture
async def test_admin(db_session: AsyncSession) -> User:
    """Create a test user with 'admin' role."""
    return await _make_user(db_session, "admin@example.com", "Test Admin", RoleEnum.admin)


@pytest_asyncio.fixture
async def test_student(db_session: AsyncSession) -> User:
    """Create a test user with 'student' role."""
    return await _make_user(db_session, "student@example.com", "Test Student", RoleEnum.student)


@pytest_asyncio.fixture
async def other_students(db_session: AsyncSession) -> list:
    return [
        await _make_user(db_session, f"student{i}@example.com", f"Student {i}", RoleEnum.student)
        for i in range(1, 3)
    ]


@pytest_asyncio.fixture
async def test_event(db_session: AsyncSession, test_admin: User) -> Event:
    event = Event(
        title="Hack Night",
        description="An evening of building things",
        detailed_description="Bring a laptop and an idea.",
        date=datetime(2030, 3, 4, 18, 30),
        location="Engineering Hall",
        category=EventCategory.tech,
        tags=["coding", "pizza"],
        created_by=test_admin.id,
        attendee_count=0,
    )
    db_session.add(event)
    await db_session.commit()
    await db_session.refresh(event)
    return event


@pytest_asyncio.fixture
async def test_events(db_session: AsyncSession, test_admin: User) -> list:
    categories = [EventCategory.tech, EventCategory.sports, EventCategory.tech, EventCategory.social]
    events = []
    for i, category in enumerate(categories):
        event = Event(
            title=f"Event {i + 1}",
            description=f"Description for event {i + 1}",
            date=datetime.now() + timedelta(days=i + 1),
            location=f"Location {i + 1}",
            category=category,
            tags=[],
            created_by=test_admin.id,
            attendee_count=0,
        )
        db_session.add(event)
        events.append(event)

    await db_session.commit()
    for event in events:
        await db_session.refresh(event)
    return events


@pytest.fixture(autouse=True)
def mock_password_hashing(monkeypatch):
    """
    Replace bcrypt with a cheap deterministic scheme so tests stay fast.
    """
    class MockPasswordContext:
        def hash(self, password: str) -> str:
            return f"$2b$12$mockedhash{password}"

        def verify(self, plain: str, hashed: str) -> bool:
            return hashed == f"$2b$12$mockedhash{plain}"

    from campus_connect.core import security
    monkeypatch.setattr(security, "pwd_context", MockPasswordContext())


@pytest.fixture(autouse=True)
def published_messages(monkeypatch) -> list:
    """Capture event publishing instead of talking to RabbitMQ."""
    messages = []

    async def mock_publish(routing_key: str, payload: dict):
        messages.append((routing_key, payload))

    from campus_connect.events import publisher
    monkeypatch.setattr(publisher, "publish_event", mock_publish)
    return messages


@pytest.fixture
def rsvp_count():
    """Count RSVP rows for an event, to check against Event.attendee_count."""
    async def count(session: AsyncSession, event_id) -> int:
        res = await session.execute(select(func.count(RSVP.id)).where(RSVP.event_id == event_id))
        return res.scalar() or 0
    return count
