"""
Dependencies module initialization
"""

from .auth import get_current_user, restrict_to
from .services import get_review_service, get_tour_service, get_user_service

__all__ = [
    "get_current_user",
    "restrict_to",
    "get_review_service",
    "get_tour_service",
    "get_user_service",
]
