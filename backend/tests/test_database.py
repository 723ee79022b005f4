"""
Pokédex API: Transaction Scope Tests
=====================================

What:  Tests for pokedex.database.transaction() on in-memory SQLite.

What we test:
    ✅ Commit on normal exit
    ✅ Rollback on application errors, which propagate unchanged
    ✅ Driver errors become DatabaseError
    ✅ Timeout cancels the block, rolls back and raises RequestTimeoutError
"""

import asyncio

import pytest
from sqlalchemy import func, select, text

from pokedex.config import settings
from pokedex.database import transaction
from pokedex.exceptions import DatabaseError, NotFoundError, RequestTimeoutError
from pokedex.models import Species


async def species_count(session_factory):
    async with session_factory() as session:
        return (await session.execute(select(func.count()).select_from(Species))).scalar_one()


class TestTransaction:

    @pytest.mark.asyncio
    async def test_commits_on_success(self, session_factory):
        async with session_factory() as session:
            async with transaction(session, "test_commit"):
                session.add(Species(name="Seed Pokémon"))

        assert await species_count(session_factory) == 1

    @pytest.mark.asyncio
    async def test_rolls_back_and_reraises_application_errors(self, session_factory):
        async with session_factory() as session:
            with pytest.raises(NotFoundError):
                async with transaction(session, "test_rollback"):
                    session.add(Species(name="Seed Pokémon"))
                    await session.flush()
                    raise NotFoundError(resource="Species", resource_id=1)

        assert await species_count(session_factory) == 0

    @pytest.mark.asyncio
    async def test_driver_error_becomes_database_error(self, session_factory):
        async with session_factory() as session:
            with pytest.raises(DatabaseError) as exc_info:
                async with transaction(session, "test_bad_sql", marker="x"):
                    await session.execute(text("SELECT * FROM no_such_table"))

        assert exc_info.value.message == "Internal server error"
        assert exc_info.value.context["operation"] == "test_bad_sql"
        assert exc_info.value.context["marker"] == "x"

    @pytest.mark.asyncio
    async def test_timeout_rolls_back(self, session_factory, monkeypatch):
        monkeypatch.setattr(settings, "request_timeout_seconds", 0.05)

        async with session_factory() as session:
            with pytest.raises(RequestTimeoutError) as exc_info:
                async with transaction(session, "test_slow"):
                    session.add(Species(name="Seed Pokémon"))
                    await session.flush()
                    await asyncio.sleep(5)

        assert exc_info.value.context["operation"] == "test_slow"
        assert await species_count(session_factory) == 0
