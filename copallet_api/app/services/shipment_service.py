"""
Business logic for shipments.

Shipments are created as drafts by verified shippers, published to the
marketplace (``open``), assigned when the shipper accepts a bid, picked
up (``in-transit``) and finally ``delivered`` when the carrier submits a
proof of delivery.  Drafts and open shipments can be cancelled.

Visibility follows the marketplace: shippers see their own shipments,
carriers and dispatchers see open shipments plus the ones they bid on
or were assigned, administrators see everything.

The module-level helpers (``fetch_shipment``, ``shipment_from_row``,
``participant_ids``) are shared with the bid, tracking, POD, message
and rating services.
"""

import logging
import sqlite3
from typing import List, Optional, Set

from ..core.db import from_json, get_connection, to_json, utcnow
from ..core.errors import AccessDenied
from ..core.security import CARRIER_ROLES
from ..schemas.calculator import RouteEstimate
from ..schemas.shipment import (
    ShipmentCreate,
    ShipmentRead,
    ShipmentUpdate,
    TimeWindow,
    check_windows,
)
from .audit_service import AuditService
from .notification_service import NotificationService
from .route_calculation import route_between


logger = logging.getLogger(__name__)

SHIPMENT_SELECT = (
    "SELECT s.*, (SELECT COUNT(*) FROM bids b WHERE b.shipment_id = s.id) AS bid_count "
    "FROM shipments s"
)

EDITABLE_STATUSES = ("draft", "open")


def shipment_from_row(row: sqlite3.Row) -> ShipmentRead:
    return ShipmentRead(
        id=row["id"],
        shipper_id=row["shipper_id"],
        status=row["status"],
        from_address=from_json(row["from_address"]),
        to_address=from_json(row["to_address"]),
        pickup_window=from_json(row["pickup_window"]),
        delivery_window=from_json(row["delivery_window"]),
        pallets=from_json(row["pallets"]),
        adr_required=bool(row["adr_required"]),
        constraints=from_json(row["constraints"], {}),
        notes=row["notes"],
        price_guidance=from_json(row["price_guidance"]),
        assigned_carrier_id=row["assigned_carrier_id"],
        assigned_at=row["assigned_at"],
        accepted_price=row["accepted_price"],
        bid_count=row["bid_count"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def fetch_shipment(cursor: sqlite3.Cursor, shipment_id: int) -> sqlite3.Row:
    """Return the shipment row or raise ``ValueError`` if it does not exist."""
    row = cursor.execute(f"{SHIPMENT_SELECT} WHERE s.id = ?", (shipment_id,)).fetchone()
    if not row:
        raise ValueError(f"Shipment {shipment_id} not found")
    return row


def bidder_ids(cursor: sqlite3.Cursor, shipment_id: int) -> Set[int]:
    rows = cursor.execute(
        "SELECT DISTINCT carrier_id FROM bids WHERE shipment_id = ?", (shipment_id,)
    ).fetchall()
    return {r["carrier_id"] for r in rows}


def participant_ids(cursor: sqlite3.Cursor, row: sqlite3.Row) -> Set[int]:
    """Users taking part in a shipment: the shipper, the assigned carrier and bidders."""
    ids = {row["shipper_id"]} | bidder_ids(cursor, row["id"])
    if row["assigned_carrier_id"]:
        ids.add(row["assigned_carrier_id"])
    return ids


def can_view(cursor: sqlite3.Cursor, row: sqlite3.Row, current_user: dict) -> bool:
    role = current_user.get("role")
    user_id = current_user.get("user_id")
    if role == "admin" or row["shipper_id"] == user_id:
        return True
    if role in CARRIER_ROLES:
        if row["status"] == "open" or row["assigned_carrier_id"] == user_id:
            return True
        return user_id in bidder_ids(cursor, row["id"])
    return False


def describe_route(row: sqlite3.Row) -> str:
    """``"Amsterdam → Rotterdam"`` style label used in notifications."""
    origin = from_json(row["from_address"], {})
    destination = from_json(row["to_address"], {})
    return f"{origin.get('city', '?')} → {destination.get('city', '?')}"


def insert_shipment(cursor: sqlite3.Cursor, shipper_id: int, data: ShipmentCreate, status: str = "draft") -> int:
    payload = data.model_dump(mode="json")
    now = utcnow()
    cursor.execute(
        """
        INSERT INTO shipments (
            shipper_id, status, from_address, to_address, pickup_window, delivery_window,
            pallets, adr_required, constraints, notes, price_guidance, created_at, updated_at
        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
        (
            shipper_id,
            status,
            to_json(payload["from_address"]),
            to_json(payload["to_address"]),
            to_json(payload["pickup_window"]),
            to_json(payload["delivery_window"]),
            to_json(payload["pallets"]),
            1 if data.adr_required else 0,
            to_json(payload["constraints"]),
            data.notes,
            to_json(payload["price_guidance"]),
            now,
            now,
        ),
    )
    return cursor.lastrowid


class ShipmentService:
    """Service for the shipment lifecycle."""

    @classmethod
    async def list_shipments(
        cls,
        current_user: dict,
        status: Optional[str] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[ShipmentRead]:
        """List the shipments visible to ``current_user``, newest first."""
        conn = get_connection()
        try:
            where_clauses: List[str] = []
            params: list = []
            role = current_user.get("role")
            if role == "shipper":
                where_clauses.append("s.shipper_id = ?")
                params.append(current_user["user_id"])
            elif role in CARRIER_ROLES:
                # Marketplace view
                where_clauses.append("s.status = 'open'")
            if status:
                where_clauses.append("s.status = ?")
                params.append(status)
            query = SHIPMENT_SELECT
            if where_clauses:
                query += " WHERE " + " AND ".join(where_clauses)
            query += " ORDER BY s.created_at DESC, s.id DESC LIMIT ? OFFSET ?"
            params.extend([limit, offset])
            rows = conn.execute(query, tuple(params)).fetchall()
            return [shipment_from_row(r) for r in rows]
        finally:
            conn.close()

    @classmethod
    async def create_shipment(cls, data: ShipmentCreate, current_user: dict) -> ShipmentRead:
        """Create a draft shipment owned by the current shipper."""
        conn = get_connection()
        try:
            cursor = conn.cursor()
            shipment_id = insert_shipment(cursor, current_user["user_id"], data)
            conn.commit()
            row = fetch_shipment(cursor, shipment_id)
        except Exception as e:
            conn.rollback()
            logger.error("Failed to create shipment: %s", e)
            raise
        finally:
            conn.close()
        logger.info("Shipper %s created shipment %s", current_user["user_id"], shipment_id)
        await AuditService.log(
            current_user["user_id"], "create", "shipment", shipment_id,
            {"from": data.from_address.city, "to": data.to_address.city},
        )
        return shipment_from_row(row)

    @classmethod
    async def get_shipment(cls, shipment_id: int, current_user: dict) -> ShipmentRead:
        conn = get_connection()
        try:
            cursor = conn.cursor()
            row = fetch_shipment(cursor, shipment_id)
            if not can_view(cursor, row, current_user):
                raise AccessDenied("Not authorized to view this shipment")
            return shipment_from_row(row)
        finally:
            conn.close()

    @classmethod
    async def get_route(cls, shipment_id: int, current_user: dict) -> RouteEstimate:
        shipment = await cls.get_shipment(shipment_id, current_user)
        return route_between(shipment.from_address.model_dump(), shipment.to_address.model_dump())

    @classmethod
    async def update_shipment(cls, shipment_id: int, data: ShipmentUpdate, current_user: dict) -> ShipmentRead:
        """Edit a draft or open shipment.  Only the owner may edit."""
        # Only notes and price guidance may be cleared with an explicit null.
        updates = {
            key: value
            for key, value in data.model_dump(mode="json", exclude_unset=True).items()
            if value is not None or key in ("notes", "price_guidance")
        }
        conn = get_connection()
        try:
            cursor = conn.cursor()
            row = fetch_shipment(cursor, shipment_id)
            if row["shipper_id"] != current_user["user_id"]:
                raise AccessDenied("Not authorized to edit this shipment")
            if row["status"] not in EDITABLE_STATUSES:
                raise ValueError(f"Shipment in status '{row['status']}' can no longer be edited")
            if not updates:
                return shipment_from_row(row)
            pickup = TimeWindow(**(updates.get("pickup_window") or from_json(row["pickup_window"])))
            delivery = TimeWindow(**(updates.get("delivery_window") or from_json(row["delivery_window"])))
            check_windows(pickup, delivery)
            columns = {}
            for key, value in updates.items():
                if key == "notes":
                    columns[key] = value
                elif key == "adr_required":
                    columns[key] = 1 if value else 0
                else:
                    columns[key] = to_json(value)
            assignments = ", ".join(f"{key} = ?" for key in columns)
            cursor.execute(
                f"UPDATE shipments SET {assignments}, updated_at = ? WHERE id = ?",
                tuple(columns.values()) + (utcnow(), shipment_id),
            )
            conn.commit()
            updated = fetch_shipment(cursor, shipment_id)
        finally:
            conn.close()
        await AuditService.log(
            current_user["user_id"], "update", "shipment", shipment_id, {"fields": sorted(updates)}
        )
        return shipment_from_row(updated)

    @classmethod
    async def publish_shipment(cls, shipment_id: int, current_user: dict) -> ShipmentRead:
        """Move a draft to ``open`` so carriers can bid on it."""
        conn = get_connection()
        try:
            cursor = conn.cursor()
            row = fetch_shipment(cursor, shipment_id)
            if row["shipper_id"] != current_user["user_id"]:
                raise AccessDenied("Only the shipment owner can publish it")
            if row["status"] != "draft":
                raise ValueError(f"Only draft shipments can be published (current status: {row['status']})")
            cursor.execute(
                "UPDATE shipments SET status = 'open', updated_at = ? WHERE id = ?",
                (utcnow(), shipment_id),
            )
            conn.commit()
            updated = fetch_shipment(cursor, shipment_id)
        finally:
            conn.close()
        logger.info("Shipment %s published", shipment_id)
        await AuditService.log(current_user["user_id"], "publish", "shipment", shipment_id, None)
        return shipment_from_row(updated)

    @classmethod
    async def cancel_shipment(cls, shipment_id: int, current_user: dict) -> ShipmentRead:
        """Cancel a draft or open shipment; pending bids are declined."""
        conn = get_connection()
        try:
            cursor = conn.cursor()
            row = fetch_shipment(cursor, shipment_id)
            if current_user.get("role") != "admin" and row["shipper_id"] != current_user["user_id"]:
                raise AccessDenied("Not authorized to cancel this shipment")
            if row["status"] not in EDITABLE_STATUSES:
                raise ValueError(f"Shipment in status '{row['status']}' cannot be cancelled")
            now = utcnow()
            pending = cursor.execute(
                "SELECT id, carrier_id FROM bids WHERE shipment_id = ? AND status = 'pending'",
                (shipment_id,),
            ).fetchall()
            cursor.execute(
                "UPDATE bids SET status = 'declined', updated_at = ? WHERE shipment_id = ? AND status = 'pending'",
                (now, shipment_id),
            )
            cursor.execute(
                "UPDATE shipments SET status = 'cancelled', updated_at = ? WHERE id = ?",
                (now, shipment_id),
            )
            route = describe_route(row)
            for bid in pending:
                NotificationService.push(
                    cursor, bid["carrier_id"], "bid_declined", "Shipment Cancelled",
                    f"The shipment {route} was cancelled and your bid was declined.",
                    shipment_id,
                )
            conn.commit()
            updated = fetch_shipment(cursor, shipment_id)
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()
        logger.info("Shipment %s cancelled by user %s", shipment_id, current_user["user_id"])
        await AuditService.log(
            current_user["user_id"], "cancel", "shipment", shipment_id, {"declined_bids": len(pending)}
        )
        return shipment_from_row(updated)

    @classmethod
    async def update_status(cls, shipment_id: int, new_status: str, current_user: dict) -> ShipmentRead:
        """Advance the shipment status.

        The assigned carrier may only mark an assigned shipment as
        picked up (``in-transit``); delivery happens through a proof of
        delivery.  Administrators may set any status.
        """
        conn = get_connection()
        try:
            cursor = conn.cursor()
            row = fetch_shipment(cursor, shipment_id)
            is_admin = current_user.get("role") == "admin"
            if not is_admin:
                if row["assigned_carrier_id"] != current_user["user_id"]:
                    raise AccessDenied("Only the assigned carrier can update the shipment status")
                if not (row["status"] == "assigned" and new_status == "in-transit"):
                    raise ValueError(
                        f"Invalid status transition from '{row['status']}' to '{new_status}'"
                    )
            cursor.execute(
                "UPDATE shipments SET status = ?, updated_at = ? WHERE id = ?",
                (new_status, utcnow(), shipment_id),
            )
            if new_status == "in-transit" and row["status"] == "assigned":
                NotificationService.push(
                    cursor, row["shipper_id"], "shipment_picked_up", "Shipment Picked Up",
                    f"Your shipment {describe_route(row)} has been picked up.",
                    shipment_id,
                )
            conn.commit()
            updated = fetch_shipment(cursor, shipment_id)
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()
        await AuditService.log(
            current_user["user_id"], "status", "shipment", shipment_id,
            {"from": row["status"], "to": new_status},
        )
        return shipment_from_row(updated)
