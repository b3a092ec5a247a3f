"""
Dependency injection for repositories and services
"""

from fastapi import Depends

from natours.db.mongodb import get_review_collection, get_tour_collection, get_user_collection
from natours.repositories.review import ReviewRepository
from natours.repositories.tour import TourRepository
from natours.repositories.user import UserRepository
from natours.services.review import ReviewService
from natours.services.tour import TourService
from natours.services.user import UserService


async def get_tour_repository() -> TourRepository:
    """Get tour repository instance"""
    collection = await get_tour_collection()
    return TourRepository(collection)


async def get_review_repository() -> ReviewRepository:
    """Get review repository instance"""
    collection = await get_review_collection()
    return ReviewRepository(collection)


async def get_tour_service(
    repository: TourRepository = Depends(get_tour_repository)
) -> TourService:
    """Get tour service instance"""
    return TourService(repository)


async def get_review_service(
    repository: ReviewRepository = Depends(get_review_repository),
    tour_repository: TourRepository = Depends(get_tour_repository),
) -> ReviewService:
    """Get review service instance"""
    return ReviewService(repository, tour_repository)


async def get_user_repository() -> UserRepository:
    """Get user repository instance"""
    collection = await get_user_collection()
    return UserRepository(collection)


async def get_user_service(
    repository: UserRepository = Depends(get_user_repository)
) -> UserService:
    """Get user service instance"""
    return UserService(repository)
