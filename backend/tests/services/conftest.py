"""Service test fixtures — async DB + FastAPI test client + recording mailer.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db dependency overridden to use test DB session
    - get_mailer dependency overridden with a RecordingMailer (no network)
    - db_manager patched for code paths that bypass get_db (readiness probe)

Design Decisions:
    - SQLite in-memory: fast, no external dependency, sufficient for route tests
    - raise_app_exceptions=False: catch-all 500 handler is observable from tests
"""

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from httpx import ASGITransport, AsyncClient

from enrollment.core.errors import MailError
from enrollment.db.base import Base
from enrollment.infrastructure.database import get_db, DatabaseSessionManager
from enrollment.infrastructure.mailer import get_mailer
from enrollment.models.registration_code import RegistrationCode
import enrollment.infrastructure.database as db_module
import enrollment.models  # noqa: F401
from enrollment.main import app


class RecordingMailer:
    """Mailer double: records every message, optionally fails."""

    def __init__(self):
        self.sent: list[dict] = []
        self.fail = False

    def send(self, to: str, subject: str, html: str) -> None:
        if self.fail:
            raise MailError(to, "simulated outage")
        self.sent.append({"to": to, "subject": subject, "html": html})


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
def mailer():
    return RecordingMailer()


@pytest.fixture
async def client(test_engine, test_session_factory, mailer):
    """FastAPI test client with DB and mailer dependencies overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_mailer] = lambda: mailer

    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app, raise_app_exceptions=False),
        base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager


@pytest.fixture
async def seed_code(test_db):
    """Insert an unused registration code ABC123."""
    code = RegistrationCode(code="ABC123", is_used=False)
    test_db.add(code)
    await test_db.commit()
    return code


@pytest.fixture
async def used_code(test_db):
    code = RegistrationCode(code="USED01", is_used=True)
    test_db.add(code)
    await test_db.commit()
    return code
