"""
Database module initialization
"""

from .indexes import create_indexes
from .mongodb import (
    db,
    connect_to_mongo,
    close_mongo_connection,
    get_database,
    get_review_collection,
    get_tour_collection,
    get_user_collection,
)

__all__ = [
    "db",
    "connect_to_mongo",
    "close_mongo_connection",
    "create_indexes",
    "get_database",
    "get_review_collection",
    "get_tour_collection",
    "get_user_collection",
]
