"""Tests for settings, engine helpers and logging setup."""

import logging

import pytest
from sqlalchemy import text

from specstore.config import Settings
from specstore.db.engine import bootstrap, create_db_engine
from specstore.logging_config import bind_context, clear_context, configure_logging


class TestSettings:
    def test_defaults(self):
        s = Settings(_env_file=None)
        assert s.database_url.startswith("postgresql+asyncpg://")
        assert s.lob_chunk_size == 65536
        assert s.effective_database_url == s.database_url

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("SPECSTORE_LOB_CHUNK_SIZE", "1024")
        monkeypatch.setenv("SPECSTORE_LOG_LEVEL", "debug")
        s = Settings(_env_file=None)
        assert s.lob_chunk_size == 1024
        assert s.log_level == "debug"

    def test_local_mode_uses_sqlite(self, monkeypatch):
        monkeypatch.setenv("SPECSTORE_LOCAL_MODE", "1")
        s = Settings(_env_file=None)
        assert s.effective_database_url.startswith("sqlite+aiosqlite://")


@pytest.mark.asyncio
async def test_sqlite_engine_skips_pool_sizing():
    engine = create_db_engine("sqlite+aiosqlite:///")
    try:
        assert engine.dialect.name == "sqlite"
    finally:
        await engine.dispose()


def test_configure_logging_sets_level():
    configure_logging(log_level="warning", json_output=True)
    root = logging.getLogger()
    assert root.level == logging.WARNING
    assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING


def test_bind_and_clear_context():
    import structlog

    bind_context(event_definition_id="3fa85f64-5717-4562-b3fc-2c963f66afa6", tenant="t1")
    ctx = structlog.contextvars.get_contextvars()
    assert ctx["event_definition_id"] == "3fa85f64-5717-4562-b3fc-2c963f66afa6"
    assert ctx["tenant"] == "t1"
    clear_context()
    assert structlog.contextvars.get_contextvars() == {}


@pytest.mark.asyncio
async def test_bootstrap_configures_logging_and_sqlite_schema(monkeypatch):
    from specstore.config import settings

    monkeypatch.setattr(settings, "log_level", "error")
    monkeypatch.setattr(settings, "json_logs", False)
    engine, session_factory = await bootstrap("sqlite+aiosqlite:///")
    try:
        assert logging.getLogger().level == logging.ERROR
        async with session_factory() as session:
            count = (await session.execute(text("SELECT COUNT(*) FROM event_api_definitions"))).scalar_one()
        assert count == 0
    finally:
        await engine.dispose()


@pytest.mark.asyncio
async def test_sqlite_engine_supports_savepoints():
    engine = create_db_engine("sqlite+aiosqlite:///")
    try:
        async with engine.connect() as conn:
            await conn.execute(text("CREATE TABLE t (x INTEGER)"))
            await conn.execute(text("INSERT INTO t VALUES (1)"))
            nested = await conn.begin_nested()
            await conn.execute(text("INSERT INTO t VALUES (2)"))
            await nested.rollback()
            assert (await conn.execute(text("SELECT COUNT(*) FROM t"))).scalar_one() == 1
    finally:
        await engine.dispose()
