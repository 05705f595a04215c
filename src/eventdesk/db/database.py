"""Database connection and session management.

Transaction Model
-----------------
Each API request gets a single database session via get_session(). The
session wraps the request in one transaction that rolls back on any
exception and is always returned to the pool when the request ends.

Archive, restore and purge handlers commit explicitly once their service
call has finished, so that the audit trail can be written after the commit
on a separate session (see eventdesk.services.audit). Service functions
never commit: they receive the session as an explicit argument and run on
the caller's transaction.

Database Support
----------------
- **PostgreSQL** (asyncpg): production target, full row-level locking.
- **SQLite** (aiosqlite): supported for tests via in-memory databases
  (DATABASE_URL=sqlite+aiosqlite:///:memory:). SQLite ignores
  ``SELECT ... FOR UPDATE``.
"""

from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from eventdesk.config import settings
from eventdesk.db.models import Base


def _engine_options(database_url: str) -> dict[str, Any]:
    """Pool options for the configured backend (SQLite manages its own pool)."""
    if database_url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_size": settings.db_pool_size,
        "max_overflow": settings.db_max_overflow,
        "pool_timeout": settings.db_pool_timeout,
        "pool_recycle": settings.db_pool_recycle,
        "pool_pre_ping": True,
    }


engine = create_async_engine(
    settings.database_url, echo=False, **_engine_options(settings.database_url)
)
async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def init_db() -> None:
    """Create live and archive tables that do not exist yet."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def dispose_engine() -> None:
    """Close all pooled connections."""
    await engine.dispose()


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Get a database session for a single request.

    The session wraps the request in a transaction:
    - Commits on successful completion (a no-op if the endpoint already committed)
    - Rolls back on any exception
    """
    async with async_session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


def get_session_maker() -> async_sessionmaker[AsyncSession]:
    """Session factory used by collaborators that need their own transaction."""
    return async_session
