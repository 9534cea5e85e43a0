"""
Bid endpoints for API v1, mounted under ``/shipments``.

Verified carriers and dispatchers bid on open shipments; the shipment
owner accepts or declines.  Accepting a bid assigns the shipment and
declines every other bid in one step.
"""

from fastapi import APIRouter, Depends, Query, status

from copallet_api.app.api.deps import http_error
from copallet_api.app.core.security import get_current_user, require_roles
from copallet_api.app.schemas.bid import BidAcceptResponse, BidCreate, BidListResponse, BidResponse
from copallet_api.app.schemas.calculator import ROIResult
from copallet_api.app.services.bid_service import BidService


router = APIRouter()


@router.get("/bids", response_model=BidListResponse)
async def list_my_bids(current_user: dict = Depends(get_current_user)) -> BidListResponse:
    """Bids placed by the caller (carriers) or received on their shipments (shippers)."""
    return BidListResponse(bids=await BidService.list_my_bids(current_user))


@router.get("/{shipment_id}/bids", response_model=BidListResponse)
async def list_shipment_bids(shipment_id: int, current_user: dict = Depends(get_current_user)) -> BidListResponse:
    try:
        bids = await BidService.list_shipment_bids(shipment_id, current_user)
    except ValueError as e:
        raise http_error(e) from e
    return BidListResponse(bids=bids)


@router.post("/{shipment_id}/bids", response_model=BidResponse, status_code=status.HTTP_201_CREATED)
async def place_bid(
    shipment_id: int,
    data: BidCreate,
    current_user: dict = Depends(require_roles("carrier", "dispatcher", verified=True)),
) -> BidResponse:
    """Bid on an open shipment.  One pending bid per carrier and shipment."""
    try:
        bid = await BidService.place_bid(shipment_id, data, current_user)
    except ValueError as e:
        raise http_error(e) from e
    return BidResponse(bid=bid)


@router.put("/{shipment_id}/bids/{bid_id}/accept", response_model=BidAcceptResponse)
async def accept_bid(
    shipment_id: int,
    bid_id: int,
    current_user: dict = Depends(require_roles("shipper", verified=True)),
) -> BidAcceptResponse:
    """Accept a pending bid on an open shipment owned by the caller."""
    try:
        bid, shipment = await BidService.accept_bid(shipment_id, bid_id, current_user)
    except ValueError as e:
        raise http_error(e) from e
    return BidAcceptResponse(message="Bid accepted successfully", bid=bid, shipment=shipment)


@router.put("/{shipment_id}/bids/{bid_id}/decline", response_model=BidResponse)
async def decline_bid(
    shipment_id: int,
    bid_id: int,
    current_user: dict = Depends(require_roles("shipper", verified=True)),
) -> BidResponse:
    try:
        bid = await BidService.decline_bid(shipment_id, bid_id, current_user)
    except ValueError as e:
        raise http_error(e) from e
    return BidResponse(bid=bid)


@router.delete("/{shipment_id}/bids/{bid_id}", status_code=status.HTTP_204_NO_CONTENT)
async def withdraw_bid(
    shipment_id: int,
    bid_id: int,
    current_user: dict = Depends(require_roles("carrier", "dispatcher")),
) -> None:
    try:
        await BidService.withdraw_bid(shipment_id, bid_id, current_user)
    except ValueError as e:
        raise http_error(e) from e
    return None


@router.get("/{shipment_id}/bids/{bid_id}/roi", response_model=ROIResult)
async def bid_roi(
    shipment_id: int,
    bid_id: int,
    cost_model_id: int = Query(...),
    deadhead_km: float = Query(0, ge=0),
    current_user: dict = Depends(require_roles("carrier", "dispatcher")),
) -> ROIResult:
    """ROI of one of the caller's bids under one of their cost models."""
    try:
        return await BidService.bid_roi(shipment_id, bid_id, cost_model_id, current_user, deadhead_km)
    except ValueError as e:
        raise http_error(e) from e
