"""
API schemas for Review endpoints
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

from natours.validators import ReviewValidatorMixin


class ReviewCreate(ReviewValidatorMixin, BaseModel):
    """Schema for creating a review. The author always comes from the token."""
    review: str = Field(..., min_length=1)
    rating: int
    # Supplied by the path on /tours/{tour_id}/reviews
    tour: Optional[str] = None


class ReviewUpdate(ReviewValidatorMixin, BaseModel):
    """Only the body and the rating of a review can change"""
    review: Optional[str] = None
    rating: Optional[int] = None


class ReviewAuthor(BaseModel):
    id: str
    name: Optional[str] = None
    photo: Optional[str] = None


class ReviewResponse(BaseModel):
    """Schema for review responses with the author populated"""
    id: str
    review: str
    rating: int
    created_at: datetime
    tour: str
    user: ReviewAuthor
