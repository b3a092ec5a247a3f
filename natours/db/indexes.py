"""
Database index management for MongoDB.

Indexes are created at application startup. The unique (tour, user) index on
reviews is what enforces "one review per user per tour".
"""

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING, GEOSPHERE, IndexModel

from natours.core.logger import logger
from natours.db.mongodb import REVIEWS_COLLECTION, TOURS_COLLECTION, USERS_COLLECTION


TOUR_INDEXES = [
    IndexModel([("name", ASCENDING)], unique=True, name="idx_name_unique"),
    IndexModel([("slug", ASCENDING)], name="idx_slug"),
    IndexModel([("price", ASCENDING), ("ratings_average", DESCENDING)], name="idx_price_rating"),
    IndexModel([("start_location", GEOSPHERE)], name="idx_start_location_2dsphere"),
]

REVIEW_INDEXES = [
    IndexModel([("tour", ASCENDING), ("user", ASCENDING)], unique=True, name="idx_tour_user_unique"),
]

USER_INDEXES = [
    IndexModel([("email", ASCENDING)], unique=True, name="idx_email_unique"),
]


async def create_indexes(db: AsyncIOMotorDatabase) -> None:
    """
    Create the MongoDB indexes of every collection the service uses.

    Args:
        db: MongoDB database instance
    """
    try:
        names = await db[TOURS_COLLECTION].create_indexes(TOUR_INDEXES)
        logger.info(
            "Created tour indexes",
            metadata={"event": "indexes_created", "collection": TOURS_COLLECTION, "indexes": names}
        )

        names = await db[REVIEWS_COLLECTION].create_indexes(REVIEW_INDEXES)
        logger.info(
            "Created review indexes",
            metadata={"event": "indexes_created", "collection": REVIEWS_COLLECTION, "indexes": names}
        )

        names = await db[USERS_COLLECTION].create_indexes(USER_INDEXES)
        logger.info(
            "Created user indexes",
            metadata={"event": "indexes_created", "collection": USERS_COLLECTION, "indexes": names}
        )
    except Exception as e:
        logger.error("Failed to create indexes", error=e, metadata={"event": "indexes_error"})
        raise
