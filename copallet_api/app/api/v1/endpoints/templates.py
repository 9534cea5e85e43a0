"""
Shipment template endpoints for API v1 (verified shippers, own templates).
"""

from typing import List

from fastapi import APIRouter, Depends, status

from copallet_api.app.api.deps import http_error
from copallet_api.app.core.security import require_roles
from copallet_api.app.schemas.shipment import ShipmentResponse
from copallet_api.app.schemas.template import (
    TemplateCreate,
    TemplateRead,
    TemplateShipmentCreate,
    TemplateUpdate,
)
from copallet_api.app.services.template_service import TemplateService


router = APIRouter()

shipper_only = require_roles("shipper", verified=True)


@router.get("", response_model=List[TemplateRead])
async def list_templates(current_user: dict = Depends(shipper_only)) -> List[TemplateRead]:
    return await TemplateService.list_templates(current_user)


@router.post("", response_model=TemplateRead, status_code=status.HTTP_201_CREATED)
async def create_template(data: TemplateCreate, current_user: dict = Depends(shipper_only)) -> TemplateRead:
    return await TemplateService.create_template(data, current_user)


@router.get("/{template_id}", response_model=TemplateRead)
async def get_template(template_id: int, current_user: dict = Depends(shipper_only)) -> TemplateRead:
    try:
        return await TemplateService.get_template(template_id, current_user)
    except ValueError as e:
        raise http_error(e) from e


@router.put("/{template_id}", response_model=TemplateRead)
async def update_template(
    template_id: int,
    data: TemplateUpdate,
    current_user: dict = Depends(shipper_only),
) -> TemplateRead:
    try:
        return await TemplateService.update_template(template_id, data, current_user)
    except ValueError as e:
        raise http_error(e) from e


@router.delete("/{template_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_template(template_id: int, current_user: dict = Depends(shipper_only)) -> None:
    try:
        await TemplateService.delete_template(template_id, current_user)
    except ValueError as e:
        raise http_error(e) from e
    return None


@router.post("/{template_id}/shipments", response_model=ShipmentResponse, status_code=status.HTTP_201_CREATED)
async def create_shipment_from_template(
    template_id: int,
    data: TemplateShipmentCreate,
    current_user: dict = Depends(shipper_only),
) -> ShipmentResponse:
    """Create a draft shipment from a template and the given time windows."""
    try:
        shipment = await TemplateService.create_shipment(template_id, data, current_user)
    except ValueError as e:
        raise http_error(e) from e
    return ShipmentResponse(shipment=shipment)
