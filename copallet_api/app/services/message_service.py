"""
Per-shipment message threads between the shipper and carriers.
"""

import logging
from typing import List

from ..core.db import get_connection, utcnow
from ..core.errors import AccessDenied
from ..schemas.message import MessageRead
from .notification_service import NotificationService
from .shipment_service import describe_route, fetch_shipment, participant_ids


logger = logging.getLogger(__name__)

MESSAGE_SELECT = (
    "SELECT m.id, m.shipment_id, m.sender_id, u.role AS sender_role, m.content, m.created_at "
    "FROM messages m JOIN users u ON u.id = m.sender_id"
)


def _message_from_row(row) -> MessageRead:
    return MessageRead(
        id=row["id"],
        shipment_id=row["shipment_id"],
        sender_id=row["sender_id"],
        sender_role=row["sender_role"],
        content=row["content"],
        created_at=row["created_at"],
    )


def _check_participant(cursor, shipment, current_user: dict) -> set:
    participants = participant_ids(cursor, shipment)
    if current_user.get("role") != "admin" and current_user["user_id"] not in participants:
        raise AccessDenied("Not authorized to access messages for this shipment")
    return participants


class MessageService:

    @classmethod
    async def list_messages(cls, shipment_id: int, current_user: dict) -> List[MessageRead]:
        conn = get_connection()
        try:
            cursor = conn.cursor()
            shipment = fetch_shipment(cursor, shipment_id)
            _check_participant(cursor, shipment, current_user)
            rows = cursor.execute(
                f"{MESSAGE_SELECT} WHERE m.shipment_id = ? ORDER BY m.created_at ASC, m.id ASC",
                (shipment_id,),
            ).fetchall()
            return [_message_from_row(r) for r in rows]
        finally:
            conn.close()

    @classmethod
    async def send_message(cls, shipment_id: int, content: str, current_user: dict) -> MessageRead:
        """Post a message and notify the other participants.

        A shipper's message reaches the assigned carrier, or every bidder
        while the shipment is unassigned; a carrier's message reaches the
        shipper.
        """
        sender_id = current_user["user_id"]
        conn = get_connection()
        try:
            cursor = conn.cursor()
            shipment = fetch_shipment(cursor, shipment_id)
            participants = _check_participant(cursor, shipment, current_user)
            cursor.execute(
                "INSERT INTO messages (shipment_id, sender_id, content, created_at) VALUES (?, ?, ?, ?)",
                (shipment_id, sender_id, content, utcnow()),
            )
            message_id = cursor.lastrowid
            if sender_id == shipment["shipper_id"]:
                if shipment["assigned_carrier_id"]:
                    recipients = {shipment["assigned_carrier_id"]}
                else:
                    recipients = participants - {sender_id}
            else:
                recipients = {shipment["shipper_id"]} - {sender_id}
            route = describe_route(shipment)
            for user_id in sorted(recipients):
                NotificationService.push(
                    cursor, user_id, "message_received", "New Message",
                    f"New message about shipment {route}",
                    shipment_id,
                )
            conn.commit()
            row = cursor.execute(f"{MESSAGE_SELECT} WHERE m.id = ?", (message_id,)).fetchone()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()
        logger.debug("Message %s on shipment %s notified %d users", message_id, shipment_id, len(recipients))
        return _message_from_row(row)
