import logging
from typing import Any

from sqlalchemy import event, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from config import settings

logger = logging.getLogger(__name__)


def is_sqlite_url(database_url: str) -> bool:
    return "sqlite" in database_url.split(":")[0].lower()


def _get_engine_kwargs(database_url: str) -> dict[str, Any]:
    """Return dialect-specific engine options for SQLite vs PostgreSQL."""
    kwargs: dict[str, Any] = {"echo": settings.debug}
    if is_sqlite_url(database_url):
        kwargs["connect_args"] = {"check_same_thread": False}
    else:
        kwargs["pool_pre_ping"] = True
    return kwargs


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(database_url: str, **overrides: Any) -> AsyncEngine:
    """Create an async engine; SQLite connections get foreign key enforcement."""
    kwargs = _get_engine_kwargs(database_url)
    kwargs.update(overrides)
    new_engine = create_async_engine(database_url, **kwargs)
    if is_sqlite_url(database_url):
        event.listen(new_engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
    return new_engine


def build_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


engine = build_engine(settings.database_url)

AsyncSessionLocal = build_session_factory(engine)


class Base(DeclarativeBase):
    pass


async def init_db(bind: AsyncEngine | None = None) -> None:
    # Register tables on Base.metadata before create_all
    import models  # noqa: F401

    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def check_database(bind: AsyncEngine | None = None) -> bool:
    """Round-trip a trivial statement; False when the database is unreachable."""
    try:
        async with (bind or engine).connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as exc:
        logger.warning("Database health check failed: %s", exc)
        return False
    return True
