"""
Rating Aggregator
Re-derives a tour's ratings_average / ratings_quantity from its live reviews.

The aggregate is always recomputed from the full review set instead of being
incremented or decremented, so concurrent recomputations for the same tour
all write a correct value and the last one to commit wins.
"""

from typing import Optional

from natours.core.config import DEFAULT_RATINGS_AVERAGE
from natours.core.logger import logger
from natours.models.review import RatingStats
from natours.repositories.review import ReviewRepository
from natours.repositories.tour import TourRepository


async def calc_average_ratings(
    tour_id: str,
    review_repository: ReviewRepository,
    tour_repository: TourRepository,
    correlation_id: Optional[str] = None,
) -> RatingStats:
    """
    Recompute and store the rating aggregates of one tour.

    Args:
        tour_id: Tour whose reviews are aggregated
        review_repository: Review store holding the reviews
        tour_repository: Tour store receiving the aggregate fields
        correlation_id: Correlation ID for tracing

    Returns:
        RatingStats: the values written. With no reviews left, the tour gets
        ratings_quantity=0 and the default ratings_average, never 0 or null.

    A tour that no longer exists is not recreated; the write is skipped
    silently by the tour store.
    """
    stats = await review_repository.rating_stats(tour_id)

    if stats.count > 0:
        written = RatingStats(count=stats.count, average=stats.average)
    else:
        written = RatingStats(count=0, average=DEFAULT_RATINGS_AVERAGE)

    matched = await tour_repository.set_rating_aggregates(
        tour_id, quantity=written.count, average=written.average
    )

    if matched:
        logger.info(
            f"Recomputed ratings for tour {tour_id}",
            correlation_id=correlation_id,
            metadata={
                "event": "ratings_recomputed",
                "tourId": tour_id,
                "ratingsQuantity": written.count,
                "ratingsAverage": written.average,
            }
        )
    else:
        logger.debug(
            f"Tour {tour_id} not found, rating aggregates not written",
            correlation_id=correlation_id,
            metadata={"event": "ratings_tour_missing", "tourId": tour_id}
        )

    return written
