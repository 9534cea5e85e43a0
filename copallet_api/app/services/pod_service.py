"""
Proof of delivery.  Submitting a POD completes the shipment.
"""

import logging
import sqlite3
from typing import List

from ..core.db import get_connection, utcnow
from ..core.errors import AccessDenied
from ..schemas.pod import PODCreate, PODRead
from .audit_service import AuditService
from .notification_service import NotificationService
from .shipment_service import describe_route, fetch_shipment


logger = logging.getLogger(__name__)


def _pod_from_row(row: sqlite3.Row) -> PODRead:
    return PODRead(
        id=row["id"],
        shipment_id=row["shipment_id"],
        carrier_id=row["carrier_id"],
        photo_url=row["photo_url"],
        signature_url=row["signature_url"],
        recipient_name=row["recipient_name"],
        delivery_notes=row["delivery_notes"],
        delivered_at=row["delivered_at"],
        created_at=row["created_at"],
    )


class PODService:

    @classmethod
    async def submit(cls, shipment_id: int, data: PODCreate, current_user: dict) -> PODRead:
        """Record the POD, mark the shipment delivered and notify the shipper."""
        conn = get_connection()
        try:
            cursor = conn.cursor()
            shipment = fetch_shipment(cursor, shipment_id)
            if shipment["assigned_carrier_id"] != current_user["user_id"]:
                raise AccessDenied("Only the assigned carrier can submit proof of delivery")
            existing = cursor.execute(
                "SELECT id FROM pods WHERE shipment_id = ?", (shipment_id,)
            ).fetchone()
            if existing:
                raise ValueError("Proof of delivery already exists for this shipment")
            if shipment["status"] not in ("assigned", "in-transit"):
                raise ValueError(f"Shipment in status '{shipment['status']}' cannot be delivered")
            now = utcnow()
            delivered_at = data.delivered_at.isoformat() if data.delivered_at else now
            cursor.execute(
                """
                INSERT INTO pods (shipment_id, carrier_id, photo_url, signature_url, recipient_name,
                                  delivery_notes, delivered_at, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    shipment_id,
                    current_user["user_id"],
                    data.photo_url,
                    data.signature_url,
                    data.recipient_name,
                    data.delivery_notes,
                    delivered_at,
                    now,
                ),
            )
            pod_id = cursor.lastrowid
            cursor.execute(
                "UPDATE shipments SET status = 'delivered', updated_at = ? WHERE id = ?",
                (now, shipment_id),
            )
            NotificationService.push(
                cursor, shipment["shipper_id"], "shipment_delivered", "Shipment Delivered",
                f"Your shipment {describe_route(shipment)} has been delivered to {data.recipient_name}.",
                shipment_id,
            )
            conn.commit()
            row = cursor.execute("SELECT * FROM pods WHERE id = ?", (pod_id,)).fetchone()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()
        logger.info("Shipment %s delivered (POD %s)", shipment_id, pod_id)
        await AuditService.log(
            current_user["user_id"], "deliver", "shipment", shipment_id,
            {"pod_id": pod_id, "recipient_name": data.recipient_name},
        )
        return _pod_from_row(row)

    @classmethod
    async def list_for_shipment(cls, shipment_id: int, current_user: dict) -> List[PODRead]:
        conn = get_connection()
        try:
            cursor = conn.cursor()
            shipment = fetch_shipment(cursor, shipment_id)
            if current_user.get("role") != "admin" and current_user["user_id"] not in (
                shipment["shipper_id"],
                shipment["assigned_carrier_id"],
            ):
                raise AccessDenied("Not authorized to view proof of delivery for this shipment")
            rows = cursor.execute(
                "SELECT * FROM pods WHERE shipment_id = ? ORDER BY created_at ASC", (shipment_id,)
            ).fetchall()
            return [_pod_from_row(r) for r in rows]
        finally:
            conn.close()
