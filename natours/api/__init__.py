"""
API module initialization
"""

from . import health, reviews, tours, users

__all__ = ["health", "reviews", "tours", "users"]
