"""
Shipment message threads for API v1, mounted under ``/shipments``.
Reading and writing both need an approved account.
"""

from fastapi import APIRouter, Depends, status

from copallet_api.app.api.deps import http_error
from copallet_api.app.core.security import require_verified
from copallet_api.app.schemas.message import MessageCreate, MessageCreated, MessageList
from copallet_api.app.services.message_service import MessageService


router = APIRouter()


@router.get("/{shipment_id}/messages", response_model=MessageList)
async def list_messages(shipment_id: int, current_user: dict = Depends(require_verified)) -> MessageList:
    """Messages of a shipment, oldest first.  Participants and admins only."""
    try:
        return MessageList(messages=await MessageService.list_messages(shipment_id, current_user))
    except ValueError as e:
        raise http_error(e) from e


@router.post("/{shipment_id}/messages", response_model=MessageCreated, status_code=status.HTTP_201_CREATED)
async def send_message(
    shipment_id: int,
    data: MessageCreate,
    current_user: dict = Depends(require_verified),
) -> MessageCreated:
    try:
        message = await MessageService.send_message(shipment_id, data.content, current_user)
    except ValueError as e:
        raise http_error(e) from e
    return MessageCreated(message=message)
