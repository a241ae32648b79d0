# app/database.py
"""
Database connection, session management, and table creation.
Uses SQLAlchemy's asyncio extension (asyncpg for PostgreSQL, aiosqlite for
local runs and tests). All models are auto-imported here so create_tables()
creates every table in one call.
"""

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base
from app.config import settings

Base = declarative_base()


def build_engine(url: str, echo: bool = False) -> AsyncEngine:
    """Create an async engine. SQLite gets foreign keys switched on so cascades apply."""
    if url.startswith("sqlite"):
        new_engine = create_async_engine(url, echo=echo)

        @event.listens_for(new_engine.sync_engine, "connect")
        def _enable_sqlite_fks(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return new_engine

    return create_async_engine(
        url,
        pool_pre_ping=True,          # Auto-reconnect if DB connection drops
        pool_size=10,
        max_overflow=20,
        echo=echo,                   # Set True to log all SQL queries (debug only)
    )


def build_sessionmaker(bind: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(bind=bind, autoflush=False, expire_on_commit=False)


engine = build_engine(settings.DATABASE_URL)

SessionLocal = build_sessionmaker(engine)


async def create_tables(bind: AsyncEngine = None):
    """
    Creates all DB tables on startup. Safe to call multiple times.
    Import all models here so SQLAlchemy knows about them.
    """
    from app.models.device import Device             # noqa
    from app.models.transaction import Transaction   # noqa

    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_engine(bind: AsyncEngine = None):
    """Dispose the connection pool. Called last during shutdown."""
    await (bind or engine).dispose()
