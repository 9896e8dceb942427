"""
Database engine, session factory and FastAPI session dependency
"""
from typing import AsyncGenerator

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import declarative_base

from app.core.config import settings

Base = declarative_base()


def build_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """Create an async engine.

    For SQLite the driver's own transaction handling is switched off and
    BEGIN is emitted by SQLAlchemy instead, otherwise SAVEPOINTs (used by
    template application and bulk updates) do not behave. Foreign keys are
    enabled on every new connection.
    """
    engine = create_async_engine(database_url, echo=echo)

    if engine.dialect.name == "sqlite":
        @event.listens_for(engine.sync_engine, "connect")
        def _on_connect(dbapi_connection, connection_record):
            dbapi_connection.isolation_level = None
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        @event.listens_for(engine.sync_engine, "begin")
        def _on_begin(conn):
            conn.exec_driver_sql("BEGIN")

    return engine


def build_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind, expire_on_commit=False)


engine = build_engine(settings.DATABASE_URL, echo=settings.SQL_ECHO)
AsyncSessionLocal = build_session_factory(engine)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield a request-scoped session; commit on success, roll back on error."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
