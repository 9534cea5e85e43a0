"""
Calculator endpoints for API v1.

Route estimate, instant quote, shipper spend, carrier ROI and cost
preview.  All are public except ROI with a stored ``cost_model_id``,
which needs the owning carrier's token.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status

from copallet_api.app.api.deps import http_error
from copallet_api.app.core.security import get_optional_user
from copallet_api.app.schemas.calculator import (
    CostModelParams,
    CostPreviewRequest,
    CostPreviewResult,
    QuoteRequest,
    QuoteResult,
    ROIRequest,
    ROIResult,
    RouteEstimate,
    RouteRequest,
    SpendRequest,
    SpendResult,
)
from copallet_api.app.services.cost_model_service import CostModelService
from copallet_api.app.services.pricing import calculate_roi, estimate_spend, preview_costs, quote_price
from copallet_api.app.services.route_calculation import calculate_route


router = APIRouter()


@router.post("/route", response_model=RouteEstimate)
async def route_estimate(data: RouteRequest) -> RouteEstimate:
    """Estimate distance, duration and route type between two points.

    If any coordinate is missing both points default to Amsterdam.
    """
    return calculate_route(
        data.from_address.latitude,
        data.from_address.longitude,
        data.to_address.latitude,
        data.to_address.longitude,
    )


@router.post("/quote", response_model=QuoteResult)
async def instant_quote(data: QuoteRequest) -> QuoteResult:
    return quote_price(**data.model_dump())


@router.post("/spend", response_model=SpendResult)
async def shipper_spend(data: SpendRequest) -> SpendResult:
    return estimate_spend(**data.model_dump())


@router.post("/roi", response_model=ROIResult)
async def carrier_roi(
    data: ROIRequest,
    current_user: Optional[dict] = Depends(get_optional_user),
) -> ROIResult:
    """Profit and ROI of a bid price for inline or stored cost parameters."""
    model: CostModelParams
    if data.cost_model_id is not None:
        if current_user is None:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Authentication required to use a stored cost model",
            )
        try:
            model = await CostModelService.get_model(data.cost_model_id, current_user)
        except ValueError as e:
            raise http_error(e) from e
    else:
        model = data.cost_model
    return calculate_roi(model, distance=data.distance, bid_price=data.bid_price, deadhead_km=data.deadhead_km)


@router.post("/cost-preview", response_model=CostPreviewResult)
async def cost_preview(data: CostPreviewRequest) -> CostPreviewResult:
    params = CostModelParams(**data.model_dump(exclude={"distance", "duration_hours"}))
    return preview_costs(params, distance=data.distance, duration_hours=data.duration_hours)
