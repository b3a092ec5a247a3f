"""
Tour service containing business logic layer
"""

from typing import List, Mapping, Tuple

from natours.core.errors import ErrorResponse
from natours.core.logger import logger
from natours.repositories.tour import FILTERABLE_FIELDS, TourRepository
from natours.schemas.tour import (
    MonthlyPlanEntry,
    TourCreate,
    TourDistance,
    TourResponse,
    TourStats,
    TourUpdate,
)
from natours.utils.query_features import build_list_query

TOUR_NOT_FOUND = "No tour found with that ID"

# Earth radius per unit, to turn a distance into radians for $centerSphere
EARTH_RADIUS = {"mi": 3963.2, "km": 6378.1}
# Metres (what $geoNear returns) to unit
METRES_TO_UNIT = {"mi": 0.000621371, "km": 0.001}

TOP_CHEAP_PARAMS = {
    "limit": "5",
    "sort": "-ratings_average,price",
    "fields": "name,price,ratings_average,summary,difficulty",
}


def parse_latlng(latlng: str) -> Tuple[float, float]:
    """'34.11,-118.11' -> (34.11, -118.11)"""
    try:
        lat, lng = (float(part) for part in latlng.split(","))
    except ValueError:
        raise ErrorResponse(
            "Please provide latitude and longitude in the format lat,lng.",
            status_code=400,
        )
    if not (-90 <= lat <= 90 and -180 <= lng <= 180):
        raise ErrorResponse("Latitude or longitude out of range", status_code=400)
    return lat, lng


def check_unit(unit: str) -> str:
    if unit not in EARTH_RADIUS:
        raise ErrorResponse("Unit must be 'mi' or 'km'", status_code=400)
    return unit


class TourService:
    """Service layer for tour business logic"""

    def __init__(self, repository: TourRepository):
        self.repository = repository

    async def list_tours(self, params: Mapping[str, str]) -> List[dict]:
        query = build_list_query(params, FILTERABLE_FIELDS)
        tours = await self.repository.list_tours(query)

        logger.info(
            f"Fetched {len(tours)} tours",
            metadata={
                "event": "list_tours",
                "count": len(tours),
                "filter": query.filter,
                "skip": query.skip,
                "limit": query.limit,
            }
        )
        return tours

    async def top_cheap(self, params: Mapping[str, str]) -> List[dict]:
        """The five best-rated, cheapest tours; explicit filters still apply"""
        return await self.list_tours({**params, **TOP_CHEAP_PARAMS})

    async def get_tour(self, tour_id: str) -> TourResponse:
        tour = await self.repository.get_by_id(tour_id)
        if not tour:
            raise ErrorResponse(TOUR_NOT_FOUND, status_code=404)
        return tour

    async def create_tour(self, tour_data: TourCreate, created_by: str = "system") -> TourResponse:
        tour = await self.repository.create(tour_data)

        logger.info(
            f"Created tour {tour.id}",
            user_id=created_by,
            metadata={"event": "tour_created", "tourId": tour.id, "name": tour.name}
        )
        return tour

    async def update_tour(self, tour_id: str, tour_data: TourUpdate, updated_by: str = None) -> TourResponse:
        # When only one of price / discount is sent, the other comes from the stored tour
        if (tour_data.price is None) != (tour_data.price_discount is None):
            current = await self.get_tour(tour_id)
            price = tour_data.price if tour_data.price is not None else current.price
            discount = (
                tour_data.price_discount if tour_data.price_discount is not None
                else current.price_discount
            )
            if discount is not None and discount >= price:
                raise ErrorResponse(
                    f"Discount price ({discount}) should be below regular price",
                    status_code=400,
                )

        tour = await self.repository.update(tour_id, tour_data)
        if not tour:
            raise ErrorResponse(TOUR_NOT_FOUND, status_code=404)

        logger.info(
            f"Updated tour {tour_id}",
            user_id=updated_by,
            metadata={
                "event": "tour_updated",
                "tourId": tour_id,
                "fields": sorted(tour_data.model_dump(exclude_unset=True, exclude_none=True)),
            }
        )
        return tour

    async def delete_tour(self, tour_id: str, deleted_by: str = None) -> None:
        if not await self.repository.delete(tour_id):
            raise ErrorResponse(TOUR_NOT_FOUND, status_code=404)

        logger.info(
            f"Deleted tour {tour_id}",
            user_id=deleted_by,
            metadata={"event": "tour_deleted", "tourId": tour_id}
        )

    async def get_tour_stats(self) -> List[TourStats]:
        return await self.repository.tour_stats()

    async def get_monthly_plan(self, year: int) -> List[MonthlyPlanEntry]:
        if year < 1970 or year > 9999:
            raise ErrorResponse("Year out of range", status_code=400)
        return await self.repository.monthly_plan(year)

    async def get_tours_within(self, distance: float, latlng: str, unit: str) -> List[TourResponse]:
        """Tours whose start location lies within `distance` of `latlng`"""
        lat, lng = parse_latlng(latlng)
        if distance <= 0:
            raise ErrorResponse("Distance must be positive", status_code=400)
        radius = distance / EARTH_RADIUS[check_unit(unit)]
        return await self.repository.tours_within(lat, lng, radius)

    async def get_distances(self, latlng: str, unit: str) -> List[TourDistance]:
        """Distance from `latlng` to the start of every tour"""
        lat, lng = parse_latlng(latlng)
        multiplier = METRES_TO_UNIT[check_unit(unit)]
        return await self.repository.distances(lat, lng, multiplier)
