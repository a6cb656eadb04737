"""Async SQLAlchemy engine and session creation."""

import logging

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from specstore.config import settings
from specstore.logging_config import configure_logging

logger = logging.getLogger(__name__)


def _enable_sqlite_savepoints(engine: AsyncEngine) -> None:
    """Let SQLAlchemy emit BEGIN itself so SAVEPOINT nests inside it."""

    @event.listens_for(engine.sync_engine, "connect")
    def _disable_driver_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")


def create_db_engine(url: str | None = None) -> AsyncEngine:
    """Create an async SQLAlchemy engine."""
    db_url = url or settings.effective_database_url
    engine_kwargs: dict = {"echo": False}

    # SQLite does not support pool_size / max_overflow
    if "sqlite" not in db_url:
        engine_kwargs.update(pool_size=settings.pool_size, max_overflow=settings.max_overflow)

    engine = create_async_engine(db_url, **engine_kwargs)
    if engine.dialect.name == "sqlite":
        _enable_sqlite_savepoints(engine)
    return engine


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create an async session factory."""
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def create_schema(engine: AsyncEngine) -> None:
    """Create all tables on the engine (local dev and tests, no migrations)."""
    from specstore.db.base import Base
    import specstore.db.models  # noqa: F401 - register all ORM models

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Tables created (dialect=%s)", engine.dialect.name)


async def bootstrap(url: str | None = None) -> tuple[AsyncEngine, async_sessionmaker[AsyncSession]]:
    """Configure logging and open the database for an owning service.

    Tables are only auto-created on SQLite; PostgreSQL schemas come from
    the owning service's migrations.
    """
    configure_logging(log_level=settings.log_level, json_output=settings.json_logs)

    engine = create_db_engine(url)
    if engine.dialect.name == "sqlite":
        await create_schema(engine)

    logger.info("specstore ready (db=%s)", engine.dialect.name)
    return engine, create_session_factory(engine)
