import datetime
from typing import List

from pydantic import BaseModel, Field


class ShortenRequest(BaseModel):
    # Plain str: validation happens in ShortenService so bad URLs map to 400
    url: str = Field(..., description="The original URL to be shortened")


class ShortenResponse(BaseModel):
    code: str
    short_url: str


class DeletedMapping(BaseModel):
    code: str
    url: str


class DeleteAllResponse(BaseModel):
    deleted: int


class DailyClicks(BaseModel):
    date: datetime.date
    count: int


class CodeStats(BaseModel):
    code: str
    total_clicks: int
    daily_clicks: List[DailyClicks]


class GlobalStats(BaseModel):
    total_urls: int
    total_clicks: int


class ErrorResponse(BaseModel):
    error: str
