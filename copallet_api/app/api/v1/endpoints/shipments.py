"""
Shipment endpoints for API v1.

Shippers create drafts, edit and publish them, and may cancel them
while unassigned.  The assigned carrier marks the pickup through
``PUT /shipments/{id}/status``.  Bid, tracking, POD and message routes
for a shipment live in their own modules under the same prefix.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from copallet_api.app.api.deps import http_error
from copallet_api.app.core.security import get_current_user, require_roles
from copallet_api.app.schemas.calculator import RouteEstimate
from copallet_api.app.schemas.shipment import (
    ShipmentCreate,
    ShipmentDetailResponse,
    ShipmentListResponse,
    ShipmentResponse,
    ShipmentStatus,
    ShipmentStatusUpdate,
    ShipmentUpdate,
)
from copallet_api.app.services.shipment_service import ShipmentService


router = APIRouter()


@router.get("", response_model=ShipmentListResponse)
async def list_shipments(
    status_filter: Optional[ShipmentStatus] = Query(None, alias="status"),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    current_user: dict = Depends(get_current_user),
) -> ShipmentListResponse:
    """List shipments visible to the caller.

    - shippers: their own shipments
    - carriers and dispatchers: open shipments (the marketplace)
    - admins: everything
    """
    shipments = await ShipmentService.list_shipments(current_user, status_filter, limit, offset)
    return ShipmentListResponse(shipments=shipments, total=len(shipments))


@router.post("", response_model=ShipmentResponse, status_code=status.HTTP_201_CREATED)
async def create_shipment(
    data: ShipmentCreate,
    current_user: dict = Depends(require_roles("shipper", verified=True)),
) -> ShipmentResponse:
    """Create a draft shipment (verified shippers only)."""
    try:
        shipment = await ShipmentService.create_shipment(data, current_user)
    except ValueError as e:
        raise http_error(e) from e
    return ShipmentResponse(shipment=shipment)


@router.get("/{shipment_id}", response_model=ShipmentDetailResponse)
async def get_shipment(shipment_id: int, current_user: dict = Depends(get_current_user)) -> ShipmentDetailResponse:
    try:
        shipment = await ShipmentService.get_shipment(shipment_id, current_user)
        route = await ShipmentService.get_route(shipment_id, current_user)
    except ValueError as e:
        raise http_error(e) from e
    return ShipmentDetailResponse(shipment=shipment, route=route)


@router.put("/{shipment_id}", response_model=ShipmentResponse)
async def update_shipment(
    shipment_id: int,
    data: ShipmentUpdate,
    current_user: dict = Depends(require_roles("shipper", verified=True)),
) -> ShipmentResponse:
    try:
        shipment = await ShipmentService.update_shipment(shipment_id, data, current_user)
    except ValueError as e:
        raise http_error(e) from e
    return ShipmentResponse(shipment=shipment)


@router.post("/{shipment_id}/publish", response_model=ShipmentResponse)
async def publish_shipment(
    shipment_id: int,
    current_user: dict = Depends(require_roles("shipper", verified=True)),
) -> ShipmentResponse:
    try:
        shipment = await ShipmentService.publish_shipment(shipment_id, current_user)
    except ValueError as e:
        raise http_error(e) from e
    return ShipmentResponse(shipment=shipment)


@router.post("/{shipment_id}/cancel", response_model=ShipmentResponse)
async def cancel_shipment(
    shipment_id: int,
    current_user: dict = Depends(require_roles("shipper", "admin")),
) -> ShipmentResponse:
    """Cancel a draft or open shipment; pending bids are declined."""
    try:
        shipment = await ShipmentService.cancel_shipment(shipment_id, current_user)
    except ValueError as e:
        raise http_error(e) from e
    return ShipmentResponse(shipment=shipment)


@router.put("/{shipment_id}/status", response_model=ShipmentResponse)
async def update_shipment_status(
    shipment_id: int,
    data: ShipmentStatusUpdate,
    current_user: dict = Depends(require_roles("carrier", "dispatcher", "admin")),
) -> ShipmentResponse:
    try:
        shipment = await ShipmentService.update_status(shipment_id, data.status, current_user)
    except ValueError as e:
        raise http_error(e) from e
    return ShipmentResponse(shipment=shipment)


@router.get("/{shipment_id}/route", response_model=RouteEstimate)
async def get_shipment_route(shipment_id: int, current_user: dict = Depends(get_current_user)) -> RouteEstimate:
    try:
        return await ShipmentService.get_route(shipment_id, current_user)
    except ValueError as e:
        raise http_error(e) from e
