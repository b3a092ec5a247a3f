"""
Repositories module initialization
"""

from .review import ReviewRepository
from .tour import TourRepository
from .user import UserRepository

__all__ = [
    "ReviewRepository",
    "TourRepository",
    "UserRepository",
]
