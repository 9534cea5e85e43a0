"""
Pydantic schemas for in-app notifications.

Notifications are created by the services as a side effect of
marketplace events (new bid, bid accepted, delivery, verification
decision, ...).  Users can only read and dismiss their own.
"""

from typing import List, Literal, Optional

from pydantic import BaseModel


NotificationType = Literal[
    "bid_received",
    "bid_accepted",
    "bid_declined",
    "shipment_assigned",
    "shipment_picked_up",
    "shipment_delivered",
    "eta_updated",
    "message_received",
    "verification_approved",
    "verification_rejected",
    "info",
]


class NotificationRead(BaseModel):
    id: int
    user_id: int
    title: str
    message: str
    type: NotificationType
    shipment_id: Optional[int] = None
    read: bool
    created_at: str


class NotificationList(BaseModel):
    notifications: List[NotificationRead]
    unread_count: int
