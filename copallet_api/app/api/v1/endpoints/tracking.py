"""
Tracking and proof-of-delivery endpoints for API v1, mounted under
``/shipments``.
"""

from fastapi import APIRouter, Depends, status

from copallet_api.app.api.deps import http_error
from copallet_api.app.core.security import require_roles, require_verified
from copallet_api.app.schemas.pod import PODCreate, PODList, PODResponse
from copallet_api.app.schemas.tracking import (
    SimulationResult,
    SimulationStep,
    TrackingHistory,
    TrackingPointCreate,
    TrackingPointRead,
)
from copallet_api.app.services.pod_service import PODService
from copallet_api.app.services.tracking_service import TrackingService


router = APIRouter()


@router.get("/{shipment_id}/tracking", response_model=TrackingHistory)
async def get_tracking(shipment_id: int, current_user: dict = Depends(require_verified)) -> TrackingHistory:
    try:
        return await TrackingService.get_history(shipment_id, current_user)
    except ValueError as e:
        raise http_error(e) from e


@router.post("/{shipment_id}/tracking", response_model=TrackingPointRead, status_code=status.HTTP_201_CREATED)
async def add_tracking_point(
    shipment_id: int,
    data: TrackingPointCreate,
    current_user: dict = Depends(require_roles("carrier", "dispatcher", verified=True)),
) -> TrackingPointRead:
    """Report a position.  The first point on an assigned shipment marks the pickup."""
    try:
        return await TrackingService.add_point(shipment_id, data, current_user)
    except ValueError as e:
        raise http_error(e) from e


@router.post("/{shipment_id}/tracking/simulate", response_model=SimulationResult)
async def simulate_tracking(
    shipment_id: int,
    data: SimulationStep,
    current_user: dict = Depends(require_roles("carrier", "dispatcher", verified=True)),
) -> SimulationResult:
    try:
        return await TrackingService.simulate_step(shipment_id, data.step, data.total_steps, current_user)
    except ValueError as e:
        raise http_error(e) from e


@router.post("/{shipment_id}/pod", response_model=PODResponse, status_code=status.HTTP_201_CREATED)
async def submit_pod(
    shipment_id: int,
    data: PODCreate,
    current_user: dict = Depends(require_roles("carrier", "dispatcher", verified=True)),
) -> PODResponse:
    """Submit proof of delivery; the shipment becomes ``delivered``."""
    try:
        pod = await PODService.submit(shipment_id, data, current_user)
    except ValueError as e:
        raise http_error(e) from e
    return PODResponse(pod=pod)


@router.get("/{shipment_id}/pod", response_model=PODList)
async def list_pods(shipment_id: int, current_user: dict = Depends(require_verified)) -> PODList:
    try:
        return PODList(pods=await PODService.list_for_shipment(shipment_id, current_user))
    except ValueError as e:
        raise http_error(e) from e
