"""
Sandbox database engine, session management, and base model class.

  - engine: async engine for SANDBOX_DATABASE_URL (SQLite via aiosqlite)
  - AsyncSessionLocal: session factory
  - Base: declarative base for the sandbox ORM models
  - get_db(): FastAPI dependency providing one session per request

Each request's session commits on success and rolls back on any exception,
which keeps bulk enrolment all-or-nothing.
"""

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase

from carbon_calculator.config import settings


# echo=True in debug mode logs all SQL statements
engine = create_async_engine(
    settings.SANDBOX_DATABASE_URL,
    echo=settings.DEBUG,
)

# expire_on_commit=False prevents lazy-load errors after commit in async context
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    pass


async def get_db():
    """FastAPI dependency that provides a database session."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
