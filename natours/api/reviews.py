"""
Review API endpoints

Two routers share the handlers: /api/v1/reviews and the nested
/api/v1/tours/{tour_id}/reviews. Every route requires authentication.
"""

from fastapi import APIRouter, Depends, Request, Response, status

from natours.core.config import config
from natours.core.errors import ErrorResponseModel
from natours.core.rate_limit import limiter
from natours.dependencies.auth import get_current_user, restrict_to
from natours.dependencies.services import get_review_service
from natours.models.user import User
from natours.schemas.review import ReviewCreate, ReviewUpdate
from natours.services.review import ReviewService
from natours.utils.responses import success

router = APIRouter(dependencies=[Depends(get_current_user)])
tour_reviews_router = APIRouter(dependencies=[Depends(get_current_user)])


@router.get("")
async def list_reviews(service: ReviewService = Depends(get_review_service)):
    """All reviews with their authors"""
    reviews = await service.list_reviews()
    return success(reviews, results=len(reviews))


@tour_reviews_router.get("/{tour_id}/reviews")
async def list_tour_reviews(
    tour_id: str,
    service: ReviewService = Depends(get_review_service),
):
    """Reviews of one tour"""
    reviews = await service.list_reviews(tour_id)
    return success(reviews, results=len(reviews))


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponseModel},
        403: {"model": ErrorResponseModel},
        404: {"model": ErrorResponseModel},
        429: {"description": "Rate limit exceeded"},
    },
)
@limiter.limit(config.review_rate_limit)
async def create_review(
    request: Request,
    review: ReviewCreate,
    service: ReviewService = Depends(get_review_service),
    user: User = Depends(restrict_to("user")),
):
    """Create a review; the tour comes from the body. One review per user per tour."""
    created = await service.create_review(None, review, user)
    return success(created)


@tour_reviews_router.post(
    "/{tour_id}/reviews",
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponseModel},
        403: {"model": ErrorResponseModel},
        404: {"model": ErrorResponseModel},
        429: {"description": "Rate limit exceeded"},
    },
)
@limiter.limit(config.review_rate_limit)
async def create_tour_review(
    request: Request,
    tour_id: str,
    review: ReviewCreate,
    service: ReviewService = Depends(get_review_service),
    user: User = Depends(restrict_to("user")),
):
    """Create a review of the tour in the path"""
    created = await service.create_review(tour_id, review, user)
    return success(created)


@router.get("/{review_id}", responses={404: {"model": ErrorResponseModel}})
async def get_review(
    review_id: str,
    service: ReviewService = Depends(get_review_service),
):
    review = await service.get_review(review_id)
    return success(review)


@router.patch(
    "/{review_id}",
    responses={
        400: {"model": ErrorResponseModel},
        403: {"model": ErrorResponseModel},
        404: {"model": ErrorResponseModel},
    },
)
async def update_review(
    review_id: str,
    review: ReviewUpdate,
    service: ReviewService = Depends(get_review_service),
    user: User = Depends(restrict_to("user", "admin")),
):
    """Update body and/or rating. Only the author or an admin."""
    updated = await service.update_review(review_id, review, user)
    return success(updated)


@router.delete(
    "/{review_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={403: {"model": ErrorResponseModel}, 404: {"model": ErrorResponseModel}},
)
async def delete_review(
    review_id: str,
    service: ReviewService = Depends(get_review_service),
    user: User = Depends(restrict_to("user", "admin")),
):
    """Delete a review. Only the author or an admin."""
    await service.delete_review(review_id, user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
