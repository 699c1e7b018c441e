"""Pytest configuration and fixtures."""
import os
from pathlib import Path
from uuid import uuid4

import pytest
from alembic import command
from alembic.config import Config as AlembicConfig
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

# Ensure the application uses a dedicated SQLite database during tests
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["ENVIRONMENT"] = "test"
# In-process locks only
os.environ["REDIS_URL"] = ""
os.environ["ADMIN_USERNAME"] = "admin"
os.environ["ADMIN_PASSWORD"] = "ChangeMe123!"

from ladders.config import get_settings
from ladders.models import PlayerRecord


BASE_DIR = Path(__file__).resolve().parent.parent
TEST_DB_PATH = BASE_DIR / "test.db"
settings = get_settings()


class ScriptedRng:
    """Stand-in for ``random.Random`` that replays scripted values."""

    def __init__(self, dice=(), randoms=()):
        self.dice = list(dice)
        self.randoms = list(randoms)

    def randint(self, a, b):
        value = self.dice.pop(0)
        assert a <= value <= b
        return value

    def random(self):
        return self.randoms.pop(0)


@pytest.fixture(scope="session", autouse=True)
def apply_migrations():
    """Apply database migrations against the test database."""
    if TEST_DB_PATH.exists():
        TEST_DB_PATH.unlink()

    alembic_cfg = AlembicConfig(str(BASE_DIR / "alembic.ini"))
    alembic_cfg.set_main_option("sqlalchemy.url", settings.database_url)
    command.upgrade(alembic_cfg, "head")

    yield

    if TEST_DB_PATH.exists():
        try:
            TEST_DB_PATH.unlink()
        except PermissionError:
            # Still open on Windows; removed on the next run
            pass


@pytest.fixture
async def test_engine():
    """Create test database engine using the same database as migrations."""
    engine = create_async_engine(
        settings.database_url,
        echo=False,
        pool_pre_ping=True,
    )

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    """Session factory for tests that need several independent sessions."""
    return async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture
async def db_session(session_factory):
    """Create test database session."""
    async with session_factory() as session:
        yield session
        await session.rollback()
        await session.close()


@pytest.fixture
async def test_app(session_factory):
    """Create test app with database override."""
    from ladders.main import app
    from ladders.database import get_db

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
            finally:
                await session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def area():
    """Fresh area code so tests never share players or prize caps."""
    return f"T{uuid4().hex[:8]}".upper()


@pytest.fixture
def player_factory(db_session):
    """Insert a player row directly in any state."""

    async def _create_player(
        area: str,
        email: str | None = None,
        position: int = 0,
        rolls_used: int = 0,
        rolls_granted: int = 6,
        completed: bool = False,
        reward: int | None = None,
        high_tier: bool = False,
    ) -> PlayerRecord:
        if email is None:
            email = f"player_{uuid4().hex[:8]}@example.com"

        player = PlayerRecord(
            email=email,
            area=area,
            position=position,
            rolls_used=rolls_used,
            rolls_granted=rolls_granted,
            completed=completed,
            reward=reward,
            high_tier=high_tier,
        )
        db_session.add(player)
        await db_session.commit()
        return player

    return _create_player


@pytest.fixture
def scripted_rng():
    """Build a ``ScriptedRng`` with the given die values and random() draws."""

    def _make(dice=(), randoms=()):
        return ScriptedRng(dice=dice, randoms=randoms)

    return _make
