"""Shared test fixtures"""
import pytest
from datetime import datetime, timezone
from typing import Dict, List, Optional
from unittest.mock import AsyncMock, MagicMock
from bson import ObjectId

from natours.core.config import DEFAULT_RATINGS_AVERAGE
from natours.core.errors import ErrorResponse
from natours.models.review import RatingStats, Review
from natours.models.user import User

TOUR_ID = "5c88fa8cf4afda39709c2951"
OTHER_TOUR_ID = "5c88fa8cf4afda39709c2955"
REVIEW_ID = "5c8a34ed14eb5c17645c9108"
USER_ID = "5c8a1dfa2f8fb814b56fa181"
ADMIN_ID = "5c8a1d5b0190b214360dc057"


def make_cursor(docs):
    """Motor-like cursor: chainable sort/skip/limit, async to_list"""
    cursor = MagicMock()
    cursor.sort.return_value = cursor
    cursor.skip.return_value = cursor
    cursor.limit.return_value = cursor
    cursor.to_list = AsyncMock(return_value=docs)
    return cursor


@pytest.fixture
def mock_collection():
    """Mock MongoDB collection for testing"""
    collection = AsyncMock()
    # find() and aggregate() are synchronous in Motor and return cursors
    collection.find = MagicMock(return_value=make_cursor([]))
    collection.aggregate = MagicMock(return_value=make_cursor([]))
    return collection


@pytest.fixture
def regular_user():
    return User(id=USER_ID, email="laura@example.com", name="Laura Wilson", role="user")


@pytest.fixture
def other_user():
    return User(id="5c8a1e1a2f8fb814b56fa182", email="ben@example.com", name="Ben Hadley", role="user")


@pytest.fixture
def admin_user():
    return User(id=ADMIN_ID, email="admin@example.com", name="Jonas Schmedtmann", role="admin")


@pytest.fixture
def guide_user():
    return User(id="5c8a22c62f8fb814b56fa18b", email="guide@example.com", name="Miyah Myles", role="lead-guide")


@pytest.fixture
def review_doc():
    """Review document as stored in MongoDB"""
    return {
        "_id": ObjectId(REVIEW_ID),
        "review": "Cras mollis nisi parturient mi nec aliquet suspendisse sagittis eros",
        "rating": 4,
        "created_at": datetime(2024, 3, 1, tzinfo=timezone.utc),
        "tour": ObjectId(TOUR_ID),
        "user": ObjectId(USER_ID),
    }


@pytest.fixture
def tour_doc():
    """Tour document as stored in MongoDB"""
    return {
        "_id": ObjectId(TOUR_ID),
        "name": "The Forest Hiker",
        "slug": "the-forest-hiker",
        "duration": 7,
        "max_group_size": 15,
        "difficulty": "easy",
        "price": 397,
        "summary": "Breathtaking hike through the Canadian Banff National Park",
        "image_cover": "tour-1-cover.jpg",
        "ratings_average": 4.666666,
        "ratings_quantity": 3,
        "secret_tour": False,
        "start_location": {"type": "Point", "coordinates": [-115.570154, 51.178456]},
        "guides": [ObjectId(ADMIN_ID)],
        "created_at": datetime(2024, 1, 1, tzinfo=timezone.utc),
    }


class InMemoryReviewRepository:
    """Review store keeping committed reviews in a dict"""

    def __init__(self):
        self.reviews: Dict[str, Review] = {}

    async def create(self, review: Review) -> Review:
        for existing in self.reviews.values():
            if existing.tour == review.tour and existing.user == review.user:
                raise ErrorResponse("You have already reviewed this tour", status_code=400)
        stored = review.model_copy(update={"id": str(ObjectId())})
        self.reviews[stored.id] = stored
        return stored

    async def get_by_id(self, review_id: str) -> Optional[Review]:
        return self.reviews.get(review_id)

    async def find_tour_ref(self, review_id: str) -> Optional[str]:
        review = self.reviews.get(review_id)
        return review.tour if review else None

    async def update(self, review_id: str, changes: dict) -> Optional[Review]:
        review = self.reviews.get(review_id)
        if review is None:
            return None
        updated = review.model_copy(update=changes)
        self.reviews[review_id] = updated
        return updated

    async def delete(self, review_id: str) -> Optional[Review]:
        return self.reviews.pop(review_id, None)

    async def rating_stats(self, tour_id: str) -> RatingStats:
        ratings = [r.rating for r in self.reviews.values() if r.tour == tour_id]
        if not ratings:
            return RatingStats(count=0, average=None)
        return RatingStats(count=len(ratings), average=sum(ratings) / len(ratings))

    async def list_reviews(self, tour_id: Optional[str] = None) -> List[Review]:
        return [r for r in self.reviews.values() if tour_id is None or r.tour == tour_id]


class InMemoryTourRepository:
    """Tour store holding only the rating aggregate fields"""

    def __init__(self, *tour_ids: str):
        self.tours: Dict[str, dict] = {
            tour_id: {"ratings_quantity": 0, "ratings_average": DEFAULT_RATINGS_AVERAGE}
            for tour_id in tour_ids
        }
        self.writes: List[tuple] = []

    async def exists(self, tour_id: str) -> bool:
        return tour_id in self.tours

    async def set_rating_aggregates(self, tour_id: str, quantity: int, average: float) -> bool:
        self.writes.append((tour_id, quantity, average))
        if tour_id not in self.tours:
            return False
        self.tours[tour_id] = {"ratings_quantity": quantity, "ratings_average": average}
        return True


@pytest.fixture
def review_store():
    return InMemoryReviewRepository()


@pytest.fixture
def tour_store():
    return InMemoryTourRepository(TOUR_ID, OTHER_TOUR_ID)
