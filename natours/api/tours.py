"""
Tour API endpoints
Static paths are declared before /{tour_id} so they are not captured by it
"""

from fastapi import APIRouter, Depends, Path, Request, Response, status

from natours.core.errors import ErrorResponseModel
from natours.dependencies.auth import restrict_to
from natours.dependencies.services import get_tour_service
from natours.models.user import User
from natours.schemas.tour import TourCreate, TourUpdate
from natours.services.tour import TourService
from natours.utils.responses import success

router = APIRouter()


@router.get("/top-5-cheap")
async def top_five_cheap(
    request: Request,
    service: TourService = Depends(get_tour_service),
):
    """The five best-rated tours, cheapest first on ties"""
    tours = await service.top_cheap(request.query_params)
    return success(tours, results=len(tours))


@router.get("/tour-stats")
async def get_tour_stats(service: TourService = Depends(get_tour_service)):
    """Statistics per difficulty over tours rated 4.5 and above"""
    stats = await service.get_tour_stats()
    return success(stats)


@router.get(
    "/monthly-plan/{year}",
    responses={401: {"model": ErrorResponseModel}, 403: {"model": ErrorResponseModel}},
)
async def get_monthly_plan(
    year: int,
    service: TourService = Depends(get_tour_service),
    user: User = Depends(restrict_to("admin", "lead-guide", "guide")),
):
    """Tour starts per month of the given year, busiest month first"""
    plan = await service.get_monthly_plan(year)
    return success(plan)


@router.get(
    "/tours-within/{distance}/center/{latlng}/unit/{unit}",
    responses={400: {"model": ErrorResponseModel}},
)
async def get_tours_within(
    distance: float,
    latlng: str,
    unit: str = Path(..., description="mi or km"),
    service: TourService = Depends(get_tour_service),
):
    """Tours starting within `distance` of the `lat,lng` point"""
    tours = await service.get_tours_within(distance, latlng, unit)
    return success(tours, results=len(tours))


@router.get(
    "/distances/{latlng}/unit/{unit}",
    responses={400: {"model": ErrorResponseModel}},
)
async def get_distances(
    latlng: str,
    unit: str = Path(..., description="mi or km"),
    service: TourService = Depends(get_tour_service),
):
    """Distance from the `lat,lng` point to every tour's start, nearest first"""
    distances = await service.get_distances(latlng, unit)
    return success(distances)


@router.get("", responses={400: {"model": ErrorResponseModel}})
async def list_tours(
    request: Request,
    service: TourService = Depends(get_tour_service),
):
    """
    List tours.

    Query string: `field=value` or `field[gte|gt|lte|lt]=value` filters,
    `sort=-price,ratings_average`, `fields=name,price`, `page`, `limit`.
    """
    tours = await service.list_tours(request.query_params)
    return success(tours, results=len(tours))


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponseModel},
        401: {"model": ErrorResponseModel},
        403: {"model": ErrorResponseModel},
    },
)
async def create_tour(
    tour: TourCreate,
    service: TourService = Depends(get_tour_service),
    user: User = Depends(restrict_to("admin", "lead-guide")),
):
    """Create a tour; its ratings start at the defaults"""
    created = await service.create_tour(tour, created_by=user.id)
    return success(created)


@router.get("/{tour_id}", responses={404: {"model": ErrorResponseModel}})
async def get_tour(
    tour_id: str,
    service: TourService = Depends(get_tour_service),
):
    tour = await service.get_tour(tour_id)
    return success(tour)


@router.patch(
    "/{tour_id}",
    responses={
        400: {"model": ErrorResponseModel},
        401: {"model": ErrorResponseModel},
        403: {"model": ErrorResponseModel},
        404: {"model": ErrorResponseModel},
    },
)
async def update_tour(
    tour_id: str,
    tour: TourUpdate,
    service: TourService = Depends(get_tour_service),
    user: User = Depends(restrict_to("admin", "lead-guide")),
):
    updated = await service.update_tour(tour_id, tour, updated_by=user.id)
    return success(updated)


@router.delete(
    "/{tour_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={
        401: {"model": ErrorResponseModel},
        403: {"model": ErrorResponseModel},
        404: {"model": ErrorResponseModel},
    },
)
async def delete_tour(
    tour_id: str,
    service: TourService = Depends(get_tour_service),
    user: User = Depends(restrict_to("admin", "lead-guide")),
):
    await service.delete_tour(tour_id, deleted_by=user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
