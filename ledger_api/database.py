"""
Database engine, session management, and base model class.

This module sets up SQLAlchemy 2.0 with async support. Key components:

  - engine: The async database engine (connection pool for production DBs)
  - AsyncSessionLocal: Factory for creating async database sessions
  - Base: Declarative base class that all ORM models inherit from
  - get_db(): FastAPI dependency that provides a session per request

Storage is a collaborator: nothing outside ledger_api.repositories issues
queries, and the rest of the code only sees the AccountRepository protocol.
Switching to PostgreSQL means changing DATABASE_URL (asyncpg driver).

Session lifecycle:
  Each API request gets its own session via get_db(). The session commits
  on success and rolls back on exception.
"""

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase

from ledger_api.config import settings


# echo=True in debug mode logs all SQL statements
engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
)

# expire_on_commit=False keeps attributes readable after commit without
# triggering a lazy (synchronous) reload in async context.
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy ORM models."""
    pass


async def get_db():
    """
    FastAPI dependency that provides a database session.

    Usage in a route:
        @router.get("/items")
        async def list_items(db: AsyncSession = Depends(get_db)):
            ...

    The session is committed on success and rolled back on any exception,
    then closed when the request completes.

    Domain errors are turned into responses by the route's executor, so on
    recent FastAPI releases they never reach this generator. A failed
    statement is rolled back by the repository itself, which leaves the
    commit here with nothing to write.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def reset_tables() -> None:
    """Drop and recreate every table. Used by the demo seeding script."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
