"""
Review service containing business logic layer

Every review mutation goes through this service so that the tour rating
aggregates are recomputed; the repository alone never touches tours.
"""

from typing import List, Optional

from natours.core.errors import ErrorResponse
from natours.core.logger import logger
from natours.models.review import Review
from natours.models.user import User
from natours.repositories.review import ReviewRepository
from natours.repositories.tour import TourRepository
from natours.schemas.review import ReviewCreate, ReviewResponse, ReviewUpdate
from natours.services.review_trigger import ReviewConsistencyTrigger

REVIEW_NOT_FOUND = "No review found with that ID"


class ReviewService:
    """Service layer for review business logic"""

    def __init__(
        self,
        repository: ReviewRepository,
        tour_repository: TourRepository,
        trigger: Optional[ReviewConsistencyTrigger] = None,
    ):
        self.repository = repository
        self.tour_repository = tour_repository
        self.trigger = trigger or ReviewConsistencyTrigger(repository, tour_repository)

    async def create_review(self, tour_id: Optional[str], data: ReviewCreate, author: User) -> Review:
        """
        Create a review of a tour as the authenticated user.

        The tour comes from the nested route when present, otherwise from the
        body; the author is always the authenticated user.
        """
        tour_id = tour_id or data.tour
        if not tour_id:
            raise ErrorResponse("Review must belong to a tour", status_code=400)

        if not await self.tour_repository.exists(tour_id):
            raise ErrorResponse("No tour found with that ID", status_code=404)

        review = await self.repository.create(
            Review(review=data.review, rating=data.rating, tour=tour_id, user=author.id)
        )

        logger.info(
            f"Created review {review.id} for tour {tour_id}",
            user_id=author.id,
            metadata={"event": "review_created", "reviewId": review.id, "tourId": tour_id}
        )

        self.trigger.after_create(review)
        return review

    async def get_review(self, review_id: str) -> ReviewResponse:
        review = await self.repository.get_with_author(review_id)
        if not review:
            raise ErrorResponse(REVIEW_NOT_FOUND, status_code=404)
        return review

    async def list_reviews(self, tour_id: Optional[str] = None) -> List[ReviewResponse]:
        reviews = await self.repository.list_reviews(tour_id)
        logger.debug(
            f"Fetched {len(reviews)} reviews",
            metadata={"event": "list_reviews", "count": len(reviews), "tourId": tour_id}
        )
        return reviews

    async def _authorize(self, review_id: str, acting_user: User, action: str) -> Review:
        """Only the author of a review or an admin may change it"""
        review = await self.repository.get_by_id(review_id)
        if not review:
            raise ErrorResponse(REVIEW_NOT_FOUND, status_code=404)

        if review.user != acting_user.id and not acting_user.is_admin():
            logger.warning(
                f"User {acting_user.id} denied {action} of review {review_id}",
                user_id=acting_user.id,
                metadata={"event": "review_permission_denied", "reviewId": review_id, "action": action}
            )
            raise ErrorResponse(
                f"You can only {action} your own review unless you are an admin.",
                status_code=403,
            )
        return review

    async def update_review(self, review_id: str, data: ReviewUpdate, acting_user: User) -> Review:
        """Update body and/or rating, then recompute the tour's ratings"""
        await self._authorize(review_id, acting_user, "update")

        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        review = await self.trigger.around_mutation(
            review_id, lambda: self.repository.update(review_id, changes)
        )
        if not review:
            raise ErrorResponse(REVIEW_NOT_FOUND, status_code=404)

        logger.info(
            f"Updated review {review_id}",
            user_id=acting_user.id,
            metadata={"event": "review_updated", "reviewId": review_id, "fields": sorted(changes)}
        )
        return review

    async def delete_review(self, review_id: str, acting_user: User) -> None:
        """Delete a review, then recompute the ratings of the tour it belonged to"""
        await self._authorize(review_id, acting_user, "delete")

        deleted = await self.trigger.around_mutation(
            review_id, lambda: self.repository.delete(review_id)
        )
        if not deleted:
            raise ErrorResponse(REVIEW_NOT_FOUND, status_code=404)

        logger.info(
            f"Deleted review {review_id}",
            user_id=acting_user.id,
            metadata={"event": "review_deleted", "reviewId": review_id, "tourId": deleted.tour}
        )
