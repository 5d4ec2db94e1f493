"""Async database engine and session factory."""

from __future__ import annotations

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from .config import settings


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def make_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """Create an async engine; SQLite connections get FK enforcement (ON DELETE rules)."""
    eng = create_async_engine(database_url, echo=echo)
    if eng.dialect.name == "sqlite":
        event.listen(eng.sync_engine, "connect", _enable_sqlite_foreign_keys)
    return eng


def make_session_factory(eng: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(eng, class_=AsyncSession, expire_on_commit=False)


engine = make_engine(settings.database_url, echo=settings.echo_sql)
async_session_factory = make_session_factory(engine)


async def get_db():
    """FastAPI dependency that yields an async session."""
    async with async_session_factory() as session:
        yield session
