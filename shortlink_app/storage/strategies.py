"""
Durable store for url mappings and click events.

UrlStore is the interface the services depend on; SQLAlchemyUrlStore is the
implementation over an async SQLAlchemy engine (SQLite via aiosqlite in
development, any async driver in production).

Every driver failure is re-raised as StoreError. The one exception is a
primary-key violation on insert, which becomes CodeCollisionError so that
ShortenService can retry with a fresh code.
"""

from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncIterator, Dict, List, Optional, Tuple

from sqlalchemy import delete, func, select, text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from shortlink_app.database.connection import create_session_factory
from shortlink_app.exceptions import CodeCollisionError, StoreError
from shortlink_app.hit_processor.models import ClickEvent
from shortlink_app.models import Click, UrlMapping


class UrlStore(ABC):
    """
    Abstract base class for the durable store.

    Uniqueness is guaranteed on `code` only. Implementations must make
    `insert` atomic: it either creates the row or raises, never both.
    """

    @abstractmethod
    async def find_url(self, code: str) -> Optional[str]:
        """Target URL for `code`, or None"""
        pass

    @abstractmethod
    async def find_code(self, url: str) -> Optional[str]:
        """
        Existing code for an exact-string `url`, or None.

        When a concurrent race left several codes for one URL, the oldest
        mapping wins.
        """
        pass

    @abstractmethod
    async def insert(self, code: str, url: str) -> None:
        """
        Atomically insert a new mapping.

        Raises:
            CodeCollisionError: `code` is already taken
            StoreError: any other failure
        """
        pass

    @abstractmethod
    async def list_all(self) -> Dict[str, str]:
        pass

    @abstractmethod
    async def delete(self, code: str) -> Optional[str]:
        """Delete the mapping and its clicks, returning the URL it pointed to"""
        pass

    @abstractmethod
    async def delete_all(self) -> int:
        """Delete every mapping (and all clicks); returns mappings removed"""
        pass

    @abstractmethod
    async def delete_created_before(self, cutoff: datetime) -> List[str]:
        """Delete mappings created before `cutoff`; returns their codes"""
        pass

    @abstractmethod
    async def record_clicks(self, events: List[ClickEvent]) -> None:
        """Append click events in one batch"""
        pass

    @abstractmethod
    async def total_clicks(self, code: str) -> int:
        pass

    @abstractmethod
    async def daily_clicks(self, code: str) -> List[Dict]:
        """Clicks per calendar day, oldest first: [{"date": ..., "count": ...}]"""
        pass

    @abstractmethod
    async def totals(self) -> Tuple[int, int]:
        """(number of mappings, number of clicks)"""
        pass

    @abstractmethod
    async def ping(self) -> bool:
        pass

    async def close(self) -> None:
        pass


class SQLAlchemyUrlStore(UrlStore):
    """
    Store backed by the `urls` and `clicks` tables.

    Each operation opens its own session from the shared pool, so the store
    is safe to share across concurrent requests.
    """

    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        self._sessions = create_session_factory(engine)

    @asynccontextmanager
    async def _session(self, write: bool = False) -> AsyncIterator[AsyncSession]:
        """Session scope that maps driver errors to StoreError"""
        try:
            async with self._sessions() as session:
                if write:
                    async with session.begin():
                        yield session
                else:
                    yield session
        except (SQLAlchemyError, OSError) as e:
            raise StoreError(str(e)) from e

    async def find_url(self, code: str) -> Optional[str]:
        async with self._session() as session:
            result = await session.execute(
                select(UrlMapping.url).where(UrlMapping.code == code)
            )
            return result.scalar_one_or_none()

    async def find_code(self, url: str) -> Optional[str]:
        async with self._session() as session:
            result = await session.execute(
                select(UrlMapping.code)
                .where(UrlMapping.url == url)
                .order_by(UrlMapping.created_at)
                .limit(1)
            )
            return result.scalar_one_or_none()

    async def insert(self, code: str, url: str) -> None:
        try:
            async with self._sessions() as session:
                async with session.begin():
                    session.add(UrlMapping(code=code, url=url))
        except IntegrityError as e:
            raise CodeCollisionError(code) from e
        except (SQLAlchemyError, OSError) as e:
            raise StoreError(str(e)) from e

    async def list_all(self) -> Dict[str, str]:
        async with self._session() as session:
            result = await session.execute(select(UrlMapping.code, UrlMapping.url))
            return {code: url for code, url in result.all()}

    async def delete(self, code: str) -> Optional[str]:
        async with self._session(write=True) as session:
            result = await session.execute(
                select(UrlMapping.url).where(UrlMapping.code == code)
            )
            url = result.scalar_one_or_none()
            if url is None:
                return None

            await session.execute(delete(Click).where(Click.code == code))
            await session.execute(delete(UrlMapping).where(UrlMapping.code == code))
            return url

    async def delete_all(self) -> int:
        async with self._session(write=True) as session:
            await session.execute(delete(Click))
            result = await session.execute(delete(UrlMapping))
            return result.rowcount or 0

    async def delete_created_before(self, cutoff: datetime) -> List[str]:
        async with self._session(write=True) as session:
            result = await session.execute(
                select(UrlMapping.code).where(UrlMapping.created_at < cutoff)
            )
            codes = list(result.scalars().all())
            if not codes:
                return []

            await session.execute(delete(Click).where(Click.code.in_(codes)))
            await session.execute(delete(UrlMapping).where(UrlMapping.code.in_(codes)))
            return codes

    async def record_clicks(self, events: List[ClickEvent]) -> None:
        if not events:
            return
        async with self._session(write=True) as session:
            session.add_all(
                [Click(code=event.code, timestamp=event.timestamp) for event in events]
            )

    async def total_clicks(self, code: str) -> int:
        async with self._session() as session:
            result = await session.execute(
                select(func.count(Click.id)).where(Click.code == code)
            )
            return result.scalar_one()

    async def daily_clicks(self, code: str) -> List[Dict]:
        day = func.date(Click.timestamp)
        async with self._session() as session:
            result = await session.execute(
                select(day.label("date"), func.count(Click.id).label("count"))
                .where(Click.code == code)
                .group_by(day)
                .order_by(day)
            )
            return [{"date": date, "count": count} for date, count in result.all()]

    async def totals(self) -> Tuple[int, int]:
        async with self._session() as session:
            urls = await session.execute(select(func.count()).select_from(UrlMapping))
            clicks = await session.execute(select(func.count()).select_from(Click))
            return urls.scalar_one(), clicks.scalar_one()

    async def ping(self) -> bool:
        try:
            async with self._session() as session:
                await session.execute(text("SELECT 1"))
            return True
        except StoreError:
            return False

    async def close(self) -> None:
        await self.engine.dispose()
