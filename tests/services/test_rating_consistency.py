"""
End-to-end rating consistency: ReviewService and its trigger over in-memory
stores, checking the tour aggregates after every kind of review mutation.
"""
import asyncio
import pytest

from natours.core.errors import ErrorResponse
from natours.models.user import User
from natours.schemas.review import ReviewCreate, ReviewUpdate
from natours.services.review import ReviewService
from natours.services.review_trigger import wait_idle
from tests.conftest import OTHER_TOUR_ID, TOUR_ID


def reviewer(n):
    return User(id=f"user-{n}", role="user")


@pytest.fixture
def service(review_store, tour_store):
    return ReviewService(review_store, tour_store)


def aggregates(tour_store, tour_id=TOUR_ID):
    tour = tour_store.tours[tour_id]
    return tour["ratings_quantity"], tour["ratings_average"]


class TestRatingConsistency:

    @pytest.mark.asyncio
    async def test_create_update_delete_sequence(self, service, tour_store):
        first = await service.create_review(TOUR_ID, ReviewCreate(review="Superb", rating=5), reviewer(1))
        second = await service.create_review(TOUR_ID, ReviewCreate(review="Fine", rating=3), reviewer(2))
        await wait_idle()
        assert aggregates(tour_store) == (2, 4)

        await service.update_review(second.id, ReviewUpdate(rating=1), reviewer(2))
        assert aggregates(tour_store) == (2, 3)

        await service.delete_review(first.id, reviewer(1))
        assert aggregates(tour_store) == (1, 1)

        await service.delete_review(second.id, reviewer(2))
        assert aggregates(tour_store) == (0, 4.5)

    @pytest.mark.asyncio
    async def test_delete_uses_prefetched_tour(self, service, tour_store):
        keep = await service.create_review(TOUR_ID, ReviewCreate(review="Okay", rating=3), reviewer(1))
        drop = await service.create_review(TOUR_ID, ReviewCreate(review="Superb", rating=5), reviewer(2))
        await wait_idle()
        assert aggregates(tour_store) == (2, 4)

        await service.delete_review(drop.id, reviewer(2))

        assert aggregates(tour_store) == (1, 3)
        assert keep.id is not None

    @pytest.mark.asyncio
    async def test_concurrent_creates_converge(self, service, tour_store):
        ratings = [5, 4, 4, 3, 1, 2, 5, 5]

        await asyncio.gather(*(
            service.create_review(TOUR_ID, ReviewCreate(review=f"Review {n}", rating=rating), reviewer(n))
            for n, rating in enumerate(ratings)
        ))
        await wait_idle()

        assert aggregates(tour_store) == (len(ratings), sum(ratings) / len(ratings))

    @pytest.mark.asyncio
    async def test_tours_are_independent(self, service, tour_store):
        await service.create_review(TOUR_ID, ReviewCreate(review="Great", rating=5), reviewer(1))
        await service.create_review(OTHER_TOUR_ID, ReviewCreate(review="Bad", rating=1), reviewer(1))
        await wait_idle()

        assert aggregates(tour_store, TOUR_ID) == (1, 5)
        assert aggregates(tour_store, OTHER_TOUR_ID) == (1, 1)

    @pytest.mark.asyncio
    async def test_one_review_per_user_per_tour(self, service, review_store, tour_store):
        await service.create_review(TOUR_ID, ReviewCreate(review="Great", rating=5), reviewer(1))

        with pytest.raises(ErrorResponse) as exc_info:
            await service.create_review(TOUR_ID, ReviewCreate(review="Again", rating=1), reviewer(1))
        await wait_idle()

        assert exc_info.value.message == "You have already reviewed this tour"
        assert len(review_store.reviews) == 1
        assert aggregates(tour_store) == (1, 5)

    @pytest.mark.asyncio
    async def test_deleting_unknown_review_writes_nothing(self, service, tour_store):
        with pytest.raises(ErrorResponse):
            await service.delete_review("5c8a34ed14eb5c17645c0000", reviewer(1))
        assert tour_store.writes == []
