"""
In-app notifications.

Other services call ``NotificationService.push`` with their own cursor
so a notification is committed (or rolled back) together with the
action that caused it.  The async classmethods serve the
``/notifications`` endpoints.
"""

import logging
import sqlite3
from typing import Optional

from ..core.db import get_connection, utcnow
from ..schemas.notification import NotificationList, NotificationRead


logger = logging.getLogger(__name__)


def _to_read(row: sqlite3.Row) -> NotificationRead:
    return NotificationRead(
        id=row["id"],
        user_id=row["user_id"],
        title=row["title"],
        message=row["message"],
        type=row["type"],
        shipment_id=row["shipment_id"],
        read=bool(row["read"]),
        created_at=row["created_at"],
    )


class NotificationService:
    """Create, list and dismiss notifications."""

    @staticmethod
    def push(
        cursor: sqlite3.Cursor,
        user_id: int,
        type: str,
        title: str,
        message: str,
        shipment_id: Optional[int] = None,
    ) -> int:
        """Queue a notification inside the caller's transaction."""
        cursor.execute(
            """
            INSERT INTO notifications (user_id, title, message, type, shipment_id, read, created_at)
            VALUES (?, ?, ?, ?, ?, 0, ?)
            """,
            (user_id, title, message, type, shipment_id, utcnow()),
        )
        logger.debug("Notification %s for user %s (%s)", cursor.lastrowid, user_id, type)
        return cursor.lastrowid

    @classmethod
    async def list_notifications(cls, current_user: dict, unread_only: bool = False) -> NotificationList:
        conn = get_connection()
        try:
            query = (
                "SELECT id, user_id, title, message, type, shipment_id, read, created_at "
                "FROM notifications WHERE user_id = ?"
            )
            if unread_only:
                query += " AND read = 0"
            query += " ORDER BY created_at DESC, id DESC"
            rows = conn.execute(query, (current_user["user_id"],)).fetchall()
            unread = conn.execute(
                "SELECT COUNT(*) AS cnt FROM notifications WHERE user_id = ? AND read = 0",
                (current_user["user_id"],),
            ).fetchone()["cnt"]
            return NotificationList(notifications=[_to_read(r) for r in rows], unread_count=unread)
        finally:
            conn.close()

    @classmethod
    async def mark_read(cls, notification_id: int, current_user: dict) -> NotificationRead:
        """Mark one of the current user's notifications as read.

        Notifications of other users are reported as not found.
        """
        conn = get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                "UPDATE notifications SET read = 1 WHERE id = ? AND user_id = ?",
                (notification_id, current_user["user_id"]),
            )
            if cursor.rowcount == 0:
                raise ValueError(f"Notification {notification_id} not found")
            conn.commit()
            row = cursor.execute(
                "SELECT id, user_id, title, message, type, shipment_id, read, created_at "
                "FROM notifications WHERE id = ?",
                (notification_id,),
            ).fetchone()
            return _to_read(row)
        finally:
            conn.close()

    @classmethod
    async def mark_all_read(cls, current_user: dict) -> int:
        conn = get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                "UPDATE notifications SET read = 1 WHERE user_id = ? AND read = 0",
                (current_user["user_id"],),
            )
            conn.commit()
            return cursor.rowcount
        finally:
            conn.close()

    @classmethod
    async def delete_notification(cls, notification_id: int, current_user: dict) -> None:
        conn = get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                "DELETE FROM notifications WHERE id = ? AND user_id = ?",
                (notification_id, current_user["user_id"]),
            )
            if cursor.rowcount == 0:
                raise ValueError(f"Notification {notification_id} not found")
            conn.commit()
        finally:
            conn.close()

