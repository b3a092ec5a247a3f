"""
API schemas for Tour endpoints
"""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field, computed_field, field_serializer

from natours.models.tour import Difficulty, GeoPoint, TourBase, TourLocation
from natours.validators import TourValidatorMixin


class TourCreate(TourValidatorMixin, BaseModel):
    """
    Schema for creating a tour.
    ratings_average / ratings_quantity are deliberately absent: unknown
    fields are dropped, so clients cannot seed the derived rating fields.
    """
    name: str
    duration: int = Field(..., gt=0)
    max_group_size: int = Field(..., gt=0)
    difficulty: Difficulty
    price: float = Field(..., gt=0)
    price_discount: Optional[float] = Field(None, ge=0)
    summary: str
    description: Optional[str] = None
    image_cover: str
    images: List[str] = []
    start_dates: List[datetime] = []
    secret_tour: bool = False
    start_location: Optional[GeoPoint] = None
    locations: List[TourLocation] = []
    guides: List[str] = []


class TourUpdate(TourValidatorMixin, BaseModel):
    """Schema for partially updating a tour; rating fields are not accepted"""
    name: Optional[str] = None
    duration: Optional[int] = Field(None, gt=0)
    max_group_size: Optional[int] = Field(None, gt=0)
    difficulty: Optional[Difficulty] = None
    price: Optional[float] = Field(None, gt=0)
    price_discount: Optional[float] = Field(None, ge=0)
    summary: Optional[str] = None
    description: Optional[str] = None
    image_cover: Optional[str] = None
    images: Optional[List[str]] = None
    start_dates: Optional[List[datetime]] = None
    secret_tour: Optional[bool] = None
    start_location: Optional[GeoPoint] = None
    locations: Optional[List[TourLocation]] = None
    guides: Optional[List[str]] = None


class TourResponse(TourBase):
    """Schema for tour responses including all fields"""
    id: str

    @computed_field
    @property
    def duration_weeks(self) -> float:
        return self.duration / 7

    @field_serializer('ratings_average')
    def round_rating(self, value: float) -> float:
        return round(value * 10) / 10


class TourStats(BaseModel):
    """Per-difficulty statistics over well-rated tours"""
    difficulty: str
    num_tours: int
    num_ratings: int
    avg_rating: float
    avg_price: float
    min_price: float
    max_price: float


class MonthlyPlanEntry(BaseModel):
    month: int
    num_tour_starts: int
    tours: List[str]


class TourDistance(BaseModel):
    id: str
    name: str
    distance: float
