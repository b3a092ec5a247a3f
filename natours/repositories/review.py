"""
Review repository: the review store and its rating aggregation query
"""

from typing import Any, Dict, List, Optional, Union
from bson import ObjectId

from pymongo import DESCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError, PyMongoError
from motor.motor_asyncio import AsyncIOMotorCollection

from natours.core.errors import ErrorResponse
from natours.core.logger import logger
from natours.db.mongodb import USERS_COLLECTION
from natours.models.review import RatingStats, Review
from natours.schemas.review import ReviewAuthor, ReviewResponse


def to_object_id(value: Optional[str]) -> Optional[ObjectId]:
    """Parse an id string; None when it is not a valid ObjectId"""
    if isinstance(value, ObjectId):
        return value
    if value and ObjectId.is_valid(value):
        return ObjectId(value)
    return None


def to_reference(value: str) -> Union[ObjectId, str]:
    """Store references as ObjectIds when they look like one"""
    return to_object_id(value) or value


class ReviewRepository:
    """Repository for review data access operations"""

    def __init__(self, collection: AsyncIOMotorCollection):
        self.collection = collection

    @staticmethod
    def _doc_to_review(doc: dict) -> Optional[Review]:
        """Convert MongoDB document to Review model"""
        if not doc:
            return None
        return Review(
            id=str(doc["_id"]),
            review=doc["review"],
            rating=doc["rating"],
            created_at=doc["created_at"],
            tour=str(doc["tour"]),
            user=str(doc["user"]),
        )

    @staticmethod
    def _doc_to_response(doc: dict) -> ReviewResponse:
        """Convert an aggregated document (with its author looked up) to a response"""
        author = doc.get("author") or {}
        return ReviewResponse(
            id=str(doc["_id"]),
            review=doc["review"],
            rating=doc["rating"],
            created_at=doc["created_at"],
            tour=str(doc["tour"]),
            user=ReviewAuthor(
                id=str(doc["user"]),
                name=author.get("name"),
                photo=author.get("photo"),
            ),
        )

    @staticmethod
    def _with_author(match: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Pipeline that populates the review author's public fields"""
        return [
            {"$match": match},
            {"$sort": {"created_at": DESCENDING}},
            {"$lookup": {
                "from": USERS_COLLECTION,
                "localField": "user",
                "foreignField": "_id",
                "as": "author",
            }},
            {"$addFields": {"author": {"$arrayElemAt": ["$author", 0]}}},
            {"$project": {
                "review": 1,
                "rating": 1,
                "created_at": 1,
                "tour": 1,
                "user": 1,
                "author.name": 1,
                "author.photo": 1,
            }},
        ]

    async def create(self, review: Review) -> Review:
        """Insert a review; one review per (tour, user) pair"""
        doc = {
            "review": review.review,
            "rating": review.rating,
            "created_at": review.created_at,
            "tour": to_reference(review.tour),
            "user": to_reference(review.user),
        }
        try:
            result = await self.collection.insert_one(doc)
        except DuplicateKeyError:
            raise ErrorResponse(
                "You have already reviewed this tour",
                status_code=400,
                details={"tour": review.tour, "user": review.user},
            )
        except PyMongoError as e:
            logger.error("MongoDB error creating review", error=e)
            raise ErrorResponse("Database error during review creation", status_code=503)

        doc["_id"] = result.inserted_id
        return self._doc_to_review(doc)

    async def get_by_id(self, review_id: str) -> Optional[Review]:
        """Get review by ID"""
        oid = to_object_id(review_id)
        if oid is None:
            return None
        try:
            doc = await self.collection.find_one({"_id": oid})
            return self._doc_to_review(doc)
        except PyMongoError as e:
            logger.error("MongoDB error getting review", error=e)
            raise ErrorResponse("Database error during review retrieval", status_code=503)

    async def find_tour_ref(self, review_id: str) -> Optional[str]:
        """Read-only lookup of the tour a review belongs to"""
        oid = to_object_id(review_id)
        if oid is None:
            return None
        try:
            doc = await self.collection.find_one({"_id": oid}, {"tour": 1})
        except PyMongoError as e:
            logger.error("MongoDB error looking up review tour", error=e)
            raise ErrorResponse("Database error during review retrieval", status_code=503)
        return str(doc["tour"]) if doc else None

    async def get_with_author(self, review_id: str) -> Optional[ReviewResponse]:
        oid = to_object_id(review_id)
        if oid is None:
            return None
        try:
            docs = await self.collection.aggregate(self._with_author({"_id": oid})).to_list(length=1)
        except PyMongoError as e:
            logger.error("MongoDB error getting review", error=e)
            raise ErrorResponse("Database error during review retrieval", status_code=503)
        return self._doc_to_response(docs[0]) if docs else None

    async def list_reviews(self, tour_id: Optional[str] = None) -> List[ReviewResponse]:
        """List reviews, optionally only those of one tour, newest first"""
        match = {}
        if tour_id is not None:
            match["tour"] = to_reference(tour_id)
        try:
            docs = await self.collection.aggregate(self._with_author(match)).to_list(length=None)
        except PyMongoError as e:
            logger.error("MongoDB error listing reviews", error=e)
            raise ErrorResponse("Database error during review listing", status_code=503)
        return [self._doc_to_response(doc) for doc in docs]

    async def update(self, review_id: str, changes: Dict[str, Any]) -> Optional[Review]:
        """Update body and/or rating; returns the updated review or None"""
        oid = to_object_id(review_id)
        if oid is None:
            return None
        if not changes:
            return await self.get_by_id(review_id)
        try:
            doc = await self.collection.find_one_and_update(
                {"_id": oid},
                {"$set": changes},
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as e:
            logger.error("MongoDB error updating review", error=e)
            raise ErrorResponse("Database error during review update", status_code=503)
        return self._doc_to_review(doc)

    async def delete(self, review_id: str) -> Optional[Review]:
        """Delete a review; returns the deleted review or None"""
        oid = to_object_id(review_id)
        if oid is None:
            return None
        try:
            doc = await self.collection.find_one_and_delete({"_id": oid})
        except PyMongoError as e:
            logger.error("MongoDB error deleting review", error=e)
            raise ErrorResponse("Database error during review deletion", status_code=503)
        return self._doc_to_review(doc)

    async def rating_stats(self, tour_id: str) -> RatingStats:
        """Count and average rating over every review of a tour"""
        pipeline = [
            {"$match": {"tour": to_reference(tour_id)}},
            {"$group": {
                "_id": "$tour",
                "n_rating": {"$sum": 1},
                "avg_rating": {"$avg": "$rating"},
            }},
        ]
        try:
            stats = await self.collection.aggregate(pipeline).to_list(length=1)
        except PyMongoError as e:
            logger.error("MongoDB error aggregating ratings", error=e, metadata={"tour_id": tour_id})
            raise ErrorResponse("Database error during rating aggregation", status_code=503)

        if not stats:
            return RatingStats(count=0, average=None)
        return RatingStats(count=stats[0]["n_rating"], average=stats[0]["avg_rating"])
