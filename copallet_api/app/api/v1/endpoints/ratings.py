"""
Rating endpoints for API v1.

After delivery the shipper rates the carrier and the carrier rates the
shipper.  Ratings received by any user are public.
"""

from fastapi import APIRouter, Depends, status

from copallet_api.app.api.deps import http_error
from copallet_api.app.core.security import get_current_user
from copallet_api.app.schemas.rating import RatingCreate, RatingRead, UserRatings
from copallet_api.app.services.rating_service import RatingService


router = APIRouter()


@router.post("", response_model=RatingRead, status_code=status.HTTP_201_CREATED)
async def create_rating(data: RatingCreate, current_user: dict = Depends(get_current_user)) -> RatingRead:
    try:
        return await RatingService.rate(data, current_user)
    except ValueError as e:
        raise http_error(e) from e


@router.get("/users/{user_id}", response_model=UserRatings)
async def user_ratings(user_id: int) -> UserRatings:
    try:
        return await RatingService.for_user(user_id)
    except ValueError as e:
        raise http_error(e) from e
