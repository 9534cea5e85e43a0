"""
Dashboard analytics for the signed-in user, mounted under ``/analytics``.
"""

from fastapi import APIRouter, Depends, Query

from copallet_api.app.api.deps import http_error
from copallet_api.app.core.security import get_current_user
from copallet_api.app.schemas.analytics import AnalyticsRange, UserAnalytics
from copallet_api.app.services.analytics_service import AnalyticsService


router = APIRouter()


@router.get("/me", response_model=UserAnalytics)
async def my_analytics(
    range_key: AnalyticsRange = Query("30d", alias="range"),
    current_user: dict = Depends(get_current_user),
) -> UserAnalytics:
    """Shipment counts, rates, routes and spend over the last 7d, 30d, 90d or 1y."""
    try:
        return await AnalyticsService.for_user(current_user, range_key)
    except ValueError as e:
        raise http_error(e) from e
