"""
Review model and rating aggregate value object
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field


def utc_now():
    """Helper function for Pydantic default_factory to get current UTC time"""
    return datetime.now(timezone.utc)


class Review(BaseModel):
    """A user's rating and comment on one tour"""
    id: Optional[str] = None
    review: str
    rating: int = Field(..., ge=1, le=5)
    created_at: datetime = Field(default_factory=utc_now)
    tour: str
    user: str


class RatingStats(BaseModel):
    """Count and mean rating of the live reviews of one tour"""
    count: int = 0
    average: Optional[float] = None
