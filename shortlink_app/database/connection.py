"""
Async SQLAlchemy engine and session setup.

The engine is created once per application (in the lifespan) and handed to
the store explicitly; nothing here holds a module-level connection pool.
"""

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from shortlink_app.config import Settings


class Base(DeclarativeBase):
    pass


def create_engine(settings: Settings) -> AsyncEngine:
    kwargs = {"echo": settings.debug, "pool_pre_ping": True}
    if settings.database_url.startswith("sqlite"):
        # aiosqlite runs each connection in its own thread
        kwargs["connect_args"] = {"check_same_thread": False}
    return create_async_engine(settings.database_url, **kwargs)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def init_db(engine: AsyncEngine) -> None:
    """Create tables if they don't exist"""
    # Import models so they register with Base.metadata
    from shortlink_app import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
