"""
Pokédex API: Database Session & Transaction Management
=======================================================

What:  Async SQLAlchemy engine, session factory, FastAPI session dependency
       and the `transaction()` scope every service uses.
How:   One process-wide engine owns the connection pool. Each request gets
       its own AsyncSession; each unit of work inside a request runs in
       `transaction()`, which pins the session's single connection for the
       duration, commits on success, rolls back on any exception and bounds
       the whole block with REQUEST_TIMEOUT_SECONDS.
Who:   Routes depend on `get_db_session`; services open `transaction()`.
When:  Engine is created at module import; sessions are created per-request.

Connection Pooling Strategy (PostgreSQL):
    pool_size=20:      Persistent connections for normal load
    max_overflow=10:   Temporary connections for spikes (total max = 30)
    pool_pre_ping:     Validates connections before use
    pool_recycle=3600: Recycles connections every hour

SQLite URLs (used by the test-suite) get the driver's default pool and no
pool sizing arguments.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict

from sqlalchemy.engine import URL
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from pokedex.config import settings
from pokedex.exceptions import DatabaseError, RequestTimeoutError

logger = logging.getLogger(__name__)


def _engine_options(url: URL) -> Dict[str, Any]:
    """Pool and driver options appropriate for the configured backend."""
    options: Dict[str, Any] = {
        "echo": settings.log_level == "DEBUG",
        "pool_pre_ping": settings.db_pool_pre_ping,
    }
    if url.get_backend_name() != "sqlite":
        options.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_recycle=3600,
            connect_args=settings.db_connect_args,
        )
    return options


def build_engine(url: URL) -> AsyncEngine:
    """Create an async engine for `url` with the configured pool options."""
    return create_async_engine(url, **_engine_options(url))


# ── Engine Configuration ──────────────────────────────────────────────────
engine = build_engine(settings.sqlalchemy_url)

# ── Session Factory ───────────────────────────────────────────────────────
# expire_on_commit=False: ORM objects stay readable after the transaction
# commits, which the services rely on when building responses.
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


# ── Base Model ────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Registers every table with the shared metadata used by Alembic and by
    the test-suite's `create_all`.
    """
    pass


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    The session is not committed here: services decide their transaction
    boundaries with `transaction()`. Anything left open when the handler
    fails is rolled back, and the connection is always returned to the pool.

    Example usage in a route:
        @router.get("/species")
        async def list_species(db: AsyncSession = Depends(get_db_session)):
            return await species_service.list_species(db)
    """
    async with async_session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# ── Transaction Scope ─────────────────────────────────────────────────────
@asynccontextmanager
async def transaction(
    session: AsyncSession,
    operation: str,
    **context: Any,
) -> AsyncGenerator[AsyncSession, None]:
    """
    Run a block of statements as one atomic unit on one connection.

    Usage:
        async with transaction(db, "delete_pokemon", pokemon_id=pokemon_id):
            await db.execute(delete(PokemonMove).where(...))
            await db.execute(delete(Pokemon).where(...))

    Behaviour on exit:
        - normal exit        → COMMIT
        - application error  → ROLLBACK, error re-raised unchanged
        - SQLAlchemyError    → ROLLBACK, re-raised as DatabaseError (500)
        - timeout expiry     → pending statement cancelled, ROLLBACK,
                               RequestTimeoutError (504)

    Args:
        session:   The request's AsyncSession (must not have a transaction
                   in progress).
        operation: Name used in log lines and error context.
        context:   Extra identifiers (ids, names) for the error log.
    """
    timeout = settings.request_timeout_seconds
    try:
        async with asyncio.timeout(timeout):
            async with session.begin():
                yield session
    except TimeoutError:
        logger.error(
            "Transaction %s timed out after %.1fs | Context: %s",
            operation,
            timeout,
            context,
        )
        raise RequestTimeoutError(operation=operation, timeout=timeout, context=dict(context))
    except SQLAlchemyError as e:
        logger.error(
            "Database error during %s: %s | Context: %s",
            operation,
            str(e),
            context,
        )
        raise DatabaseError(
            context={"operation": operation, "error_type": type(e).__name__, **context},
        ) from e


# ── Lifecycle Helpers ─────────────────────────────────────────────────────
async def dispose_engine() -> None:
    """Closes all pooled connections. Called from the application lifespan."""
    await engine.dispose()
