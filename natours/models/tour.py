"""
Tour model with GeoJSON locations and derived rating fields
"""

from datetime import datetime, timezone
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from natours.core.config import DEFAULT_RATINGS_AVERAGE


def utc_now():
    """Helper function for Pydantic default_factory to get current UTC time"""
    return datetime.now(timezone.utc)


Difficulty = Literal["easy", "medium", "difficult"]


class GeoPoint(BaseModel):
    """GeoJSON point; coordinates are [longitude, latitude]"""
    type: Literal["Point"] = "Point"
    coordinates: List[float] = Field(..., min_length=2, max_length=2)
    address: Optional[str] = None
    description: Optional[str] = None


class TourLocation(GeoPoint):
    """A stop on the tour itinerary"""
    day: Optional[int] = Field(None, ge=1)


class TourBase(BaseModel):
    """Base Tour model with all stored fields"""

    name: str
    slug: Optional[str] = None
    duration: int
    max_group_size: int
    difficulty: Difficulty
    price: float
    price_discount: Optional[float] = None
    summary: str
    description: Optional[str] = None
    image_cover: str
    images: List[str] = []
    start_dates: List[datetime] = []
    secret_tour: bool = False
    start_location: Optional[GeoPoint] = None
    locations: List[TourLocation] = []
    guides: List[str] = []

    # Derived from the tour's reviews, never set by user-facing writes
    ratings_average: float = DEFAULT_RATINGS_AVERAGE
    ratings_quantity: int = 0

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: Optional[datetime] = None


class Tour(TourBase):
    """Tour model with ID for database operations"""
    id: Optional[str] = None
