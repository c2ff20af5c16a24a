"""
Data models for click events.
"""

from datetime import datetime, timezone

from pydantic import BaseModel, Field


class ClickEvent(BaseModel):
    """
    One served redirect, queued by RedirectService and written to the
    store in batches by ClickRecorder.
    """

    code: str = Field(..., description="The short code that was accessed")
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the redirect was served"
    )
