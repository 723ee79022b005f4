"""
Pokédex API: Test Configuration (conftest.py)
==============================================

What:  Shared pytest fixtures for the entire test suite.
How:   Database tests run against in-memory SQLite (aiosqlite) with foreign
       keys enforced; the API's session and object-storage dependencies are
       overridden so no PostgreSQL or S3 is needed.

Fixture Hierarchy (all function-scoped):
    ├── db_engine:        fresh in-memory database with every table created
    ├── session_factory:  async_sessionmaker bound to db_engine
    ├── fake_storage:     in-memory ObjectStorage recording uploads/deletes
    ├── seed:             one species, three types, three moves
    ├── test_client:      HTTPX AsyncClient wired to the app
    ├── mock_db_session:  AsyncMock session for pure unit tests
    └── sample_png_bytes: tiny PNG payload for upload tests
"""

import os
import tempfile

# Must run before anything imports pokedex.config.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["S3_BUCKET"] = "pokedex-test"
os.environ["UPLOAD_TMP_DIR"] = tempfile.mkdtemp(prefix="pokedex_test_")
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["STORAGE_RETRY_MIN_WAIT"] = "0"
os.environ["STORAGE_RETRY_MAX_WAIT"] = "0"
os.environ["STORAGE_RETRY_JITTER"] = "0"

from typing import Dict, List
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from pokedex.database import Base, get_db_session
from pokedex.exceptions import StorageError
from pokedex.models import Move, Species, Type
from pokedex.routes.dependencies import current_object_storage, get_object_storage
from pokedex.services.storage_base import ObjectStorage


# ══════════════════════════════════════════════════════════════════════════
# Test Doubles
# ══════════════════════════════════════════════════════════════════════════


class FakeObjectStorage(ObjectStorage):
    """
    ObjectStorage that keeps objects in a dict.

    Set `fail_uploads = True` to make every upload raise StorageError.
    """

    def __init__(self):
        self.objects: Dict[str, bytes] = {}
        self.content_types: Dict[str, str] = {}
        self.uploaded_paths: List[str] = []
        self.deleted: List[str] = []
        self.fail_uploads = False
        self.healthy = True

    async def upload_file(self, path: str, key: str, content_type: str) -> str:
        self.uploaded_paths.append(path)
        if self.fail_uploads:
            raise StorageError(context={"key": key})
        with open(path, "rb") as f:
            self.objects[key] = f.read()
        self.content_types[key] = content_type
        return self.public_url(key)

    async def delete_object(self, key: str) -> None:
        self.deleted.append(key)
        self.objects.pop(key, None)

    def public_url(self, key: str) -> str:
        return f"https://images.test/{key}"

    async def health_check(self) -> bool:
        return self.healthy


# ══════════════════════════════════════════════════════════════════════════
# Database Fixtures
# ══════════════════════════════════════════════════════════════════════════


@pytest_asyncio.fixture
async def db_engine():
    """
    In-memory SQLite shared by every session of one test.

    StaticPool keeps the single connection alive (the database lives in it);
    the connect hook turns on foreign key enforcement so constraint
    violations behave as they do on PostgreSQL.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def seed(session_factory):
    """
    Reference rows most Pokémon tests need.

    Returns a dict of ids:
        species: Seed Pokémon
        grass, poison, fire: types
        tackle (no type), vine_whip (grass), ember (fire): moves
    """
    async with session_factory() as session:
        async with session.begin():
            species = Species(name="Seed Pokémon")
            grass = Type(name="Grass", color="#78C850")
            poison = Type(name="Poison", color="#A040A0")
            fire = Type(name="Fire", color="#F08030")
            session.add_all([species, grass, poison, fire])
            await session.flush()

            tackle = Move(name="Tackle", power=40, accuracy=100, power_point=35)
            vine_whip = Move(
                name="Vine Whip", types_id=grass.id, power=45, accuracy=100, power_point=25
            )
            ember = Move(name="Ember", types_id=fire.id, power=40, accuracy=100, power_point=25)
            session.add_all([tackle, vine_whip, ember])
            await session.flush()

            return {
                "species": species.id,
                "grass": grass.id,
                "poison": poison.id,
                "fire": fire.id,
                "tackle": tackle.id,
                "vine_whip": vine_whip.id,
                "ember": ember.id,
            }


# ══════════════════════════════════════════════════════════════════════════
# API Fixtures
# ══════════════════════════════════════════════════════════════════════════


@pytest.fixture
def fake_storage():
    return FakeObjectStorage()


@pytest_asyncio.fixture
async def test_client(session_factory, fake_storage):
    """
    HTTPX AsyncClient talking to the FastAPI app in-process.

    Usage:
        async def test_list_types(test_client):
            response = await test_client.get("/types")
            assert response.status_code == 200
    """
    from pokedex.main import app

    async def override_db_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db_session] = override_db_session
    app.dependency_overrides[get_object_storage] = lambda: fake_storage
    app.dependency_overrides[current_object_storage] = lambda: fake_storage

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


# ══════════════════════════════════════════════════════════════════════════
# Unit-Test Fixtures
# ══════════════════════════════════════════════════════════════════════════


@pytest.fixture
def mock_db_session():
    """
    A mock AsyncSession for tests that must prove no SQL was issued.

    Usage:
        await service.update_pokemon(mock_db_session, None, payload, storage)
        mock_db_session.execute.assert_not_called()
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.get = AsyncMock()
    session.begin = MagicMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def sample_png_bytes():
    """The 8-byte PNG signature plus filler; enough for the extension/size checks."""
    return b"\x89PNG\r\n\x1a\n" + b"\x00" * 64
