"""Service test fixtures — async DB, FastAPI test client, seeded team and board.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db dependency overridden to use the test session factory
    - db_manager patched so the readiness check sees the test engine
    - Seed fixtures go through the services, so seeded rows obey the same invariants

Design Decisions:
    - SQLite in-memory: fast, no external dependency; the partial unique index and
      version counter both work on SQLite (sqlite_where, version_id_col)
"""

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from httpx import ASGITransport, AsyncClient

from app.db.base import Base
from app.infrastructure.database import get_db, DatabaseSessionManager
import app.infrastructure.database as db_module
from app.main import app
from app.services.board_ordering import BoardOrderingService
from app.services.team_membership import TeamService
from app.services.user_directory import UserDirectory


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
async def client(test_engine, test_session_factory):
    """FastAPI test client with DB dependency overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager


# ─── Seed data ───────────────────────────────────────────────────

@pytest.fixture
async def owner(test_db):
    return await UserDirectory(test_db).create_user("Olivia Owner", "owner@example.com")


@pytest.fixture
async def invitee(test_db):
    return await UserDirectory(test_db).create_user("Ivan Invitee", "invitee@example.com")


@pytest.fixture
async def outsider(test_db):
    return await UserDirectory(test_db).create_user("Oscar Outsider", "outsider@example.com")


@pytest.fixture
async def team(test_db, owner):
    return await TeamService(test_db).create_team("Platform", "Core platform team", owner.id)


@pytest.fixture
async def board(test_db, team):
    return await BoardOrderingService(test_db).create_board(team.id, "Sprint 12", None)


@pytest.fixture
def board_service(test_db):
    return BoardOrderingService(test_db)
