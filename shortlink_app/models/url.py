from datetime import datetime, timezone

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from shortlink_app.database.connection import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UrlMapping(Base):
    """
    Code -> target URL mapping.

    The primary key on `code` is the only uniqueness guarantee; collision
    handling in ShortenService relies on it. `url` is indexed but NOT unique,
    so two concurrent shortens of the same URL may both succeed.
    """
    __tablename__ = "urls"

    code: Mapped[str] = mapped_column(String(16), primary_key=True)
    url: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False, index=True
    )

    def __repr__(self) -> str:
        return f"<UrlMapping(code='{self.code}', url='{self.url}')>"
