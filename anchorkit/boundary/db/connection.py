"""
Database connection management.

Provides the async SQLAlchemy engine and session factory used by the
record store. In-memory SQLite gets a single shared connection so every
session sees the same database.

Dependencies: sqlalchemy, aiosqlite, anchorkit.configs
System role: Database connection lifecycle management
"""

from typing import Any

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from anchorkit.configs.database import DatabaseSettings


def get_async_engine(db_config: DatabaseSettings) -> AsyncEngine:
    """
    Create async SQLAlchemy engine for the configured database.

    SQLite files use the default pool; ``:memory:`` databases use
    StaticPool so the schema survives across sessions. Server databases
    get sized pools with pre-ping health checks.

    Args:
        db_config: Database settings

    Returns:
        AsyncEngine: Configured async SQLAlchemy engine

    Raises:
        ArgumentError: If database URL is invalid or engine creation fails

    Usage:
        engine = get_async_engine(settings.database)
        async with engine.connect() as conn:
            result = await conn.execute(text("SELECT 1"))
    """
    options: dict[str, Any] = {"echo": db_config.echo_sql}

    if db_config.is_memory:
        options["poolclass"] = StaticPool
        options["connect_args"] = {"check_same_thread": False}
    elif not db_config.is_sqlite:
        options.update(
            pool_size=db_config.pool_size,
            max_overflow=db_config.max_overflow,
            pool_timeout=db_config.pool_timeout,
            pool_pre_ping=True,
        )

    return create_async_engine(db_config.url, **options)


def get_async_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """
    Create async session factory for database operations.

    Returns async_sessionmaker bound to engine with autoflush=False for
    explicit transaction control. expire_on_commit=False keeps loaded
    rows readable after the transaction closes.

    Args:
        engine: Async engine to bind

    Returns:
        async_sessionmaker: Async session factory

    Usage:
        SessionFactory = get_async_session_factory(engine)
        async with SessionFactory() as session:
            async with session.begin():
                session.add(obj)
    """
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        autoflush=False,
        expire_on_commit=False,
    )
