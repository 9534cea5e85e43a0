"""
Notification endpoints for API v1.  Users only ever see their own.
"""

from fastapi import APIRouter, Depends, Query, status

from copallet_api.app.api.deps import http_error
from copallet_api.app.core.security import get_current_user
from copallet_api.app.schemas.common import MessageResponse
from copallet_api.app.schemas.notification import NotificationList, NotificationRead
from copallet_api.app.services.notification_service import NotificationService


router = APIRouter()


@router.get("", response_model=NotificationList)
async def list_notifications(
    unread_only: bool = Query(False),
    current_user: dict = Depends(get_current_user),
) -> NotificationList:
    return await NotificationService.list_notifications(current_user, unread_only)


@router.put("/read-all", response_model=MessageResponse)
async def mark_all_read(current_user: dict = Depends(get_current_user)) -> MessageResponse:
    count = await NotificationService.mark_all_read(current_user)
    return MessageResponse(message=f"{count} notifications marked as read")


@router.put("/{notification_id}/read", response_model=NotificationRead)
async def mark_read(notification_id: int, current_user: dict = Depends(get_current_user)) -> NotificationRead:
    try:
        return await NotificationService.mark_read(notification_id, current_user)
    except ValueError as e:
        raise http_error(e) from e


@router.delete("/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_notification(notification_id: int, current_user: dict = Depends(get_current_user)) -> None:
    try:
        await NotificationService.delete_notification(notification_id, current_user)
    except ValueError as e:
        raise http_error(e) from e
    return None
