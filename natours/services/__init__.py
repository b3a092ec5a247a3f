"""
Services module initialization
"""

from .rating_aggregator import calc_average_ratings
from .review import ReviewService
from .review_trigger import ReviewConsistencyTrigger
from .tour import TourService
from .user import UserService

__all__ = [
    "calc_average_ratings",
    "ReviewConsistencyTrigger",
    "ReviewService",
    "TourService",
    "UserService",
]
