"""
Tour repository for data access layer following Repository pattern
"""

import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError, PyMongoError
from motor.motor_asyncio import AsyncIOMotorCollection

from natours.core.config import DEFAULT_RATINGS_AVERAGE
from natours.core.errors import ErrorResponse
from natours.core.logger import logger
from natours.repositories.review import to_object_id, to_reference
from natours.schemas.tour import (
    MonthlyPlanEntry,
    TourCreate,
    TourDistance,
    TourResponse,
    TourStats,
    TourUpdate,
)
from natours.utils.query_features import ListQuery

# Secret tours never show up in reads or aggregations
NOT_SECRET = {"secret_tour": {"$ne": True}}

# Fields a client may filter the tour list on, with their value converters
FILTERABLE_FIELDS = {
    "duration": int,
    "max_group_size": int,
    "difficulty": str,
    "price": float,
    "ratings_average": float,
    "ratings_quantity": int,
}

WELL_RATED_THRESHOLD = 4.5


def slugify(name: str) -> str:
    """'The Forest Hiker' -> 'the-forest-hiker'"""
    return re.sub(r'[^a-z0-9]+', '-', name.lower()).strip('-')


class TourRepository:
    """Repository for tour data access operations"""

    def __init__(self, collection: AsyncIOMotorCollection):
        self.collection = collection

    @staticmethod
    def _doc_to_dict(doc: dict) -> dict:
        """Replace ObjectIds with strings and _id with id"""
        doc = dict(doc)
        if "_id" in doc:
            doc["id"] = str(doc.pop("_id"))
        if "guides" in doc:
            doc["guides"] = [str(g) for g in doc["guides"]]
        return doc

    def _doc_to_response(self, doc: dict) -> Optional[TourResponse]:
        """Convert MongoDB document to TourResponse schema"""
        if not doc:
            return None
        return TourResponse(**self._doc_to_dict(doc))

    async def create(self, tour_data: TourCreate) -> TourResponse:
        """Create a new tour with default rating fields"""
        doc = tour_data.model_dump(exclude_none=True)
        doc.update({
            "slug": slugify(tour_data.name),
            "guides": [to_reference(g) for g in tour_data.guides],
            "ratings_average": DEFAULT_RATINGS_AVERAGE,
            "ratings_quantity": 0,
            "created_at": datetime.now(timezone.utc),
        })

        try:
            result = await self.collection.insert_one(doc)
        except DuplicateKeyError:
            raise ErrorResponse(
                f"Duplicate field value: {tour_data.name}. Please use another value!",
                status_code=400,
            )
        except PyMongoError as e:
            logger.error("MongoDB error creating tour", error=e)
            raise ErrorResponse("Database error during tour creation", status_code=503)

        doc["_id"] = result.inserted_id
        return self._doc_to_response(doc)

    async def get_by_id(self, tour_id: str) -> Optional[TourResponse]:
        """Get a (non-secret) tour by ID"""
        oid = to_object_id(tour_id)
        if oid is None:
            return None
        try:
            doc = await self.collection.find_one({"_id": oid, **NOT_SECRET})
            return self._doc_to_response(doc)
        except PyMongoError as e:
            logger.error("MongoDB error getting tour", error=e)
            raise ErrorResponse("Database error during tour retrieval", status_code=503)

    async def exists(self, tour_id: str) -> bool:
        """Check whether a tour exists, secret or not"""
        oid = to_object_id(tour_id)
        if oid is None:
            return False
        try:
            return await self.collection.count_documents({"_id": oid}, limit=1) > 0
        except PyMongoError as e:
            logger.error("MongoDB error checking tour existence", error=e)
            raise ErrorResponse("Database error during tour retrieval", status_code=503)

    async def update(self, tour_id: str, tour_data: TourUpdate) -> Optional[TourResponse]:
        """Partially update a tour; rating fields are not part of TourUpdate"""
        oid = to_object_id(tour_id)
        if oid is None:
            return None

        # An explicit null leaves the stored value in place
        changes = tour_data.model_dump(exclude_unset=True, exclude_none=True)
        if "name" in changes:
            changes["slug"] = slugify(changes["name"])
        if "guides" in changes:
            changes["guides"] = [to_reference(g) for g in changes["guides"]]
        changes["updated_at"] = datetime.now(timezone.utc)

        try:
            doc = await self.collection.find_one_and_update(
                {"_id": oid},
                {"$set": changes},
                return_document=ReturnDocument.AFTER,
            )
        except DuplicateKeyError:
            raise ErrorResponse(
                f"Duplicate field value: {changes.get('name')}. Please use another value!",
                status_code=400,
            )
        except PyMongoError as e:
            logger.error("MongoDB error updating tour", error=e)
            raise ErrorResponse("Database error during tour update", status_code=503)
        return self._doc_to_response(doc)

    async def delete(self, tour_id: str) -> bool:
        """Delete a tour"""
        oid = to_object_id(tour_id)
        if oid is None:
            return False
        try:
            result = await self.collection.delete_one({"_id": oid})
            return result.deleted_count > 0
        except PyMongoError as e:
            logger.error("MongoDB error deleting tour", error=e)
            raise ErrorResponse("Database error during tour deletion", status_code=503)

    async def list_tours(self, query: ListQuery) -> List[dict]:
        """List tours with filtering, sorting, field limiting and pagination"""
        try:
            cursor = self.collection.find({**query.filter, **NOT_SECRET}, query.projection)
            cursor = cursor.sort(query.sort).skip(query.skip).limit(query.limit)
            docs = await cursor.to_list(length=query.limit)
        except PyMongoError as e:
            logger.error("MongoDB error listing tours", error=e)
            raise ErrorResponse("Database error during tour listing", status_code=503)

        if query.projection is None:
            return [self._doc_to_response(doc).model_dump(mode="json") for doc in docs]
        tours = [self._doc_to_dict(doc) for doc in docs]
        for tour in tours:
            if "ratings_average" in tour:
                tour["ratings_average"] = round(tour["ratings_average"] * 10) / 10
        return tours

    async def set_rating_aggregates(self, tour_id: str, quantity: int, average: float) -> bool:
        """
        Write the derived rating fields of a tour.

        Never upserts: a tour that no longer exists is left absent and
        False is returned.
        """
        oid = to_object_id(tour_id)
        if oid is None:
            return False
        try:
            result = await self.collection.update_one(
                {"_id": oid},
                {"$set": {"ratings_quantity": quantity, "ratings_average": average}},
                upsert=False,
            )
        except PyMongoError as e:
            logger.error("MongoDB error writing rating aggregates", error=e, metadata={"tour_id": tour_id})
            raise ErrorResponse("Database error during rating update", status_code=503)
        return result.matched_count > 0

    async def tour_stats(self) -> List[TourStats]:
        """Statistics of well-rated tours grouped by difficulty, cheapest first"""
        pipeline = [
            {"$match": {**NOT_SECRET, "ratings_average": {"$gte": WELL_RATED_THRESHOLD}}},
            {"$group": {
                "_id": {"$toUpper": "$difficulty"},
                "num_tours": {"$sum": 1},
                "num_ratings": {"$sum": "$ratings_quantity"},
                "avg_rating": {"$avg": "$ratings_average"},
                "avg_price": {"$avg": "$price"},
                "min_price": {"$min": "$price"},
                "max_price": {"$max": "$price"},
            }},
            {"$sort": {"avg_price": 1}},
        ]
        try:
            docs = await self.collection.aggregate(pipeline).to_list(length=None)
        except PyMongoError as e:
            logger.error("MongoDB error computing tour stats", error=e)
            raise ErrorResponse("Database error during tour statistics", status_code=503)
        return [TourStats(difficulty=doc.pop("_id"), **doc) for doc in docs]

    async def monthly_plan(self, year: int) -> List[MonthlyPlanEntry]:
        """Number of tour starts per month of the given year, busiest first"""
        pipeline = [
            {"$match": NOT_SECRET},
            {"$unwind": "$start_dates"},
            {"$match": {"start_dates": {
                "$gte": datetime(year, 1, 1, tzinfo=timezone.utc),
                "$lt": datetime(year + 1, 1, 1, tzinfo=timezone.utc),
            }}},
            {"$group": {
                "_id": {"$month": "$start_dates"},
                "num_tour_starts": {"$sum": 1},
                "tours": {"$push": "$name"},
            }},
            {"$addFields": {"month": "$_id"}},
            {"$project": {"_id": 0}},
            {"$sort": {"num_tour_starts": -1}},
            {"$limit": 12},
        ]
        try:
            docs = await self.collection.aggregate(pipeline).to_list(length=12)
        except PyMongoError as e:
            logger.error("MongoDB error computing monthly plan", error=e)
            raise ErrorResponse("Database error during monthly plan", status_code=503)
        return [MonthlyPlanEntry(**doc) for doc in docs]

    async def tours_within(self, lat: float, lng: float, radius: float) -> List[TourResponse]:
        """Tours starting within `radius` (radians) of the given point"""
        query: Dict[str, Any] = {
            **NOT_SECRET,
            "start_location": {"$geoWithin": {"$centerSphere": [[lng, lat], radius]}},
        }
        try:
            docs = await self.collection.find(query).to_list(length=None)
        except PyMongoError as e:
            logger.error("MongoDB error querying tours within radius", error=e)
            raise ErrorResponse("Database error during geospatial query", status_code=503)
        return [self._doc_to_response(doc) for doc in docs]

    async def distances(self, lat: float, lng: float, multiplier: float) -> List[TourDistance]:
        """Distance from the given point to every tour's start, nearest first"""
        pipeline = [
            # $geoNear has to be the first stage, so the secret filter goes in its query
            {"$geoNear": {
                "near": {"type": "Point", "coordinates": [lng, lat]},
                "distanceField": "distance",
                "distanceMultiplier": multiplier,
                "query": NOT_SECRET,
            }},
            {"$project": {"distance": 1, "name": 1}},
        ]
        try:
            docs = await self.collection.aggregate(pipeline).to_list(length=None)
        except PyMongoError as e:
            logger.error("MongoDB error computing distances", error=e)
            raise ErrorResponse("Database error during geospatial query", status_code=503)
        return [TourDistance(id=str(doc["_id"]), name=doc["name"], distance=doc["distance"]) for doc in docs]
