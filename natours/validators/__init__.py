"""
Reusable pydantic validator mixins
"""

from .review_validators import ReviewValidatorMixin
from .tour_validators import TourValidatorMixin
from .user_validators import UserValidatorMixin

__all__ = ["ReviewValidatorMixin", "TourValidatorMixin", "UserValidatorMixin"]
