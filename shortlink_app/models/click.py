from datetime import datetime

from sqlalchemy import DateTime, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from shortlink_app.database.connection import Base
from shortlink_app.models.url import utcnow


class Click(Base):
    """One redirect served for `code`. Rows are only ever inserted or purged."""
    __tablename__ = "clicks"
    __table_args__ = (
        Index("ix_clicks_code_timestamp", "code", "timestamp"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    code: Mapped[str] = mapped_column(String(16), nullable=False)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
