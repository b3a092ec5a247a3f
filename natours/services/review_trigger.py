"""
Review Consistency Trigger

Keeps Tour rating aggregates in step with review mutations:

* after a create, the tour's ratings are recomputed in the background;
* around an update or delete by id, the review's tour is looked up *before*
  the mutation (a delete leaves nothing to read afterwards), the mutation
  runs, then the ratings of the captured tour are recomputed inline.

Recomputation failures never fail the review mutation that triggered them:
they are logged and the aggregates stay stale until the next mutation of a
review of that tour.
"""

import asyncio
from typing import Awaitable, Callable, Optional, Set, TypeVar

from pymongo.errors import PyMongoError

from natours.core.errors import ErrorResponse
from natours.core.logger import logger
from natours.middleware.request_context import get_correlation_id
from natours.models.review import RatingStats, Review
from natours.repositories.review import ReviewRepository
from natours.repositories.tour import TourRepository
from natours.services.rating_aggregator import calc_average_ratings

T = TypeVar("T")

# Background recomputations scheduled by after_create, shared by every
# trigger instance so the application can drain them on shutdown.
_pending: Set[asyncio.Task] = set()


class ReviewConsistencyTrigger:
    """Explicit before/after hooks around review mutations"""

    def __init__(self, review_repository: ReviewRepository, tour_repository: TourRepository):
        self.review_repository = review_repository
        self.tour_repository = tour_repository

    async def capture_context(self, review_id: str) -> Optional[str]:
        """
        Look up the tour of a review before it is mutated.

        Returns None when the review does not exist (or the id is malformed).
        """
        return await self.review_repository.find_tour_ref(review_id)

    async def recompute(self, tour_id: Optional[str]) -> Optional[RatingStats]:
        """
        Recompute the aggregates of a tour, swallowing store failures.

        Returns the written stats, or None when skipped or failed.
        """
        correlation_id = get_correlation_id()

        if tour_id is None:
            logger.debug(
                "No tour captured for review mutation, skipping rating recomputation",
                correlation_id=correlation_id,
                metadata={"event": "ratings_recompute_skipped"}
            )
            return None

        try:
            return await calc_average_ratings(
                tour_id,
                self.review_repository,
                self.tour_repository,
                correlation_id=correlation_id,
            )
        except (ErrorResponse, PyMongoError) as e:
            logger.error(
                f"Failed to recompute ratings for tour {tour_id}",
                correlation_id=correlation_id,
                error=e,
                metadata={"event": "ratings_recompute_failed", "tourId": tour_id}
            )
            return None

    def after_create(self, review: Review) -> asyncio.Task:
        """
        Schedule recomputation for a newly created review's tour.

        The caller does not wait for it; the task is kept in the pending set
        until it finishes.
        """
        task = asyncio.create_task(self.recompute(review.tour))
        _pending.add(task)
        task.add_done_callback(_task_done)
        return task

    async def around_mutation(self, review_id: str, mutation: Callable[[], Awaitable[T]]) -> T:
        """
        Run an update/delete of a review with recomputation of its tour.

        1. capture the review's tour before anything changes
        2. await the mutation (its errors propagate, nothing is recomputed)
        3. recompute the captured tour, or skip when nothing was captured
        """
        tour_id = await self.capture_context(review_id)
        result = await mutation()
        await self.recompute(tour_id)
        return result


def _task_done(task: asyncio.Task) -> None:
    _pending.discard(task)
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error(
            "Background rating recomputation crashed",
            error=exc,
            metadata={"event": "ratings_recompute_crashed"}
        )


def pending_recomputations() -> int:
    return len(_pending)


async def wait_idle(timeout: Optional[float] = None) -> None:
    """Wait for scheduled background recomputations to finish"""
    if not _pending:
        return
    _, not_done = await asyncio.wait(set(_pending), timeout=timeout)
    if not_done:
        logger.warning(
            f"{len(not_done)} rating recomputations still running",
            metadata={"event": "ratings_recompute_pending", "count": len(not_done)}
        )
