"""
Models module initialization
"""

from .review import RatingStats, Review
from .tour import GeoPoint, Tour, TourBase, TourLocation
from .user import User

__all__ = [
    "GeoPoint",
    "RatingStats",
    "Review",
    "Tour",
    "TourBase",
    "TourLocation",
    "User",
]
