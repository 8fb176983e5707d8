"""
Murmur Backend — Database Session Management
==============================================

What:  Async SQLAlchemy engine, session factory, and FastAPI dependency.
How:   Creates an async engine with connection pooling, provides a session
       dependency that commits on success and rolls back on error.
Who:   Used by route handlers and the session dependency via Depends().
When:  Engine is created at module import; sessions are created per-request.

Transactions:
    One request = one session = one transaction. Multi-table mutations
    (follow/unfollow, like + notification, post delete with its comments and
    likes) therefore either land together or not at all: any exception raised
    while handling the request rolls the whole unit back.

    Side effects outside the database (removing images from the media host)
    are queued on the session with after_commit() / after_rollback() and run
    only once the transaction outcome is known.
"""

from typing import Any, AsyncGenerator, Awaitable, Callable, Dict

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from murmur.config import settings


def _engine_options(url: str) -> Dict[str, Any]:
    """
    Pool options for the configured driver.

    SQLite (tests, local tinkering) does not use a sized queue pool, so the
    pool knobs are only passed for server databases.
    """
    options: Dict[str, Any] = {"echo": settings.log_level == "DEBUG"}
    if url.startswith("sqlite"):
        return options
    options.update(
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_pre_ping=settings.db_pool_pre_ping,
        pool_recycle=3600,
    )
    return options


# ── Engine Configuration ──────────────────────────────────────────────────
engine = create_async_engine(settings.database_url, **_engine_options(settings.database_url))

# ── Session Factory ───────────────────────────────────────────────────────
# expire_on_commit=False: objects stay readable after commit without a
# round-trip (responses are serialized after the handler returns)
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


# ── Base Model ────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares a single metadata object, which Alembic reads for migrations.
    """
    pass


# ── Transaction Hooks ─────────────────────────────────────────────────────
SessionCallback = Callable[[], Awaitable[Any]]

_AFTER_COMMIT = "murmur.after_commit"
_AFTER_ROLLBACK = "murmur.after_rollback"


def after_commit(session: AsyncSession, callback: SessionCallback) -> None:
    """Queue `callback` to be awaited once the session's transaction commits."""
    session.info.setdefault(_AFTER_COMMIT, []).append(callback)


def after_rollback(session: AsyncSession, callback: SessionCallback) -> None:
    """Queue `callback` to be awaited if the session's transaction rolls back."""
    session.info.setdefault(_AFTER_ROLLBACK, []).append(callback)


async def commit_session(session: AsyncSession) -> None:
    """Commit, then run the after_commit callbacks. Rollback callbacks are dropped."""
    await session.commit()
    session.info.pop(_AFTER_ROLLBACK, None)
    for callback in session.info.pop(_AFTER_COMMIT, []):
        await callback()


async def rollback_session(session: AsyncSession) -> None:
    """Roll back, then run the after_rollback callbacks. Commit callbacks are dropped."""
    session.info.pop(_AFTER_COMMIT, None)
    await session.rollback()
    for callback in session.info.pop(_AFTER_ROLLBACK, []):
        await callback()


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a new session from the factory
        2. Yields it to the route handler
        3. On success: commits, then runs after_commit callbacks
        4. On error: rolls back, runs after_rollback callbacks, re-raises
        5. Always: closes the session (returns connection to pool)

    Example usage in a route:
        @router.get("/posts/all")
        async def get_all_posts(db: AsyncSession = Depends(get_db_session)):
            ...
    """
    async with async_session_factory() as session:
        try:
            yield session
            await commit_session(session)
        except Exception:
            await rollback_session(session)
            raise  # Re-raise so the global error handler can respond
        finally:
            await session.close()


# ── Lifecycle Helpers ─────────────────────────────────────────────────────
async def dispose_engine() -> None:
    """Closes all pooled connections. Called from the lifespan shutdown."""
    await engine.dispose()
