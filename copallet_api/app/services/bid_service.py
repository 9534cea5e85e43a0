"""
Business logic for the bidding marketplace.

Verified carriers and dispatchers bid on open shipments.  The shipment
owner accepts exactly one bid: in a single transaction the winning bid
becomes ``accepted``, every sibling bid becomes ``declined`` and the
shipment moves to ``assigned`` with the winning carrier, time and
price.  The conditional update on the shipment status guarantees that
two concurrent acceptances cannot both succeed.
"""

import logging
import sqlite3
from typing import List, Tuple

from ..core.db import from_json, get_connection, utcnow
from ..core.errors import AccessDenied
from ..core.security import CARRIER_ROLES
from ..schemas.bid import BidCreate, BidRead
from ..schemas.calculator import ROIResult
from ..schemas.shipment import ShipmentRead
from .audit_service import AuditService
from .notification_service import NotificationService
from .pricing import roi_for_model_row
from .route_calculation import route_between
from .shipment_service import describe_route, fetch_shipment, shipment_from_row


logger = logging.getLogger(__name__)

BID_SELECT = (
    "SELECT b.id, b.shipment_id, b.carrier_id, b.price, b.eta_pickup, b.message, b.status, "
    "b.created_at, b.updated_at, p.company_name AS carrier_company "
    "FROM bids b LEFT JOIN user_profiles p ON p.user_id = b.carrier_id"
)


def bid_from_row(row: sqlite3.Row) -> BidRead:
    return BidRead(
        id=row["id"],
        shipment_id=row["shipment_id"],
        carrier_id=row["carrier_id"],
        carrier_company=row["carrier_company"],
        price=row["price"],
        eta_pickup=row["eta_pickup"],
        message=row["message"],
        status=row["status"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _fetch_bid(cursor: sqlite3.Cursor, shipment_id: int, bid_id: int) -> sqlite3.Row:
    row = cursor.execute(
        f"{BID_SELECT} WHERE b.id = ? AND b.shipment_id = ?", (bid_id, shipment_id)
    ).fetchone()
    if not row:
        raise ValueError(f"Bid {bid_id} not found for shipment {shipment_id}")
    return row


class BidService:
    """Service for placing, accepting and declining bids."""

    @classmethod
    async def list_my_bids(cls, current_user: dict) -> List[BidRead]:
        """Bids relevant to the current user.

        Carriers and dispatchers see the bids they placed, shippers the
        bids on their shipments, administrators all bids.
        """
        conn = get_connection()
        try:
            role = current_user.get("role")
            params: tuple = ()
            query = BID_SELECT
            if role in CARRIER_ROLES:
                query += " WHERE b.carrier_id = ?"
                params = (current_user["user_id"],)
            elif role == "shipper":
                query += " WHERE b.shipment_id IN (SELECT id FROM shipments WHERE shipper_id = ?)"
                params = (current_user["user_id"],)
            query += " ORDER BY b.created_at DESC, b.id DESC"
            return [bid_from_row(r) for r in conn.execute(query, params).fetchall()]
        finally:
            conn.close()

    @classmethod
    async def list_shipment_bids(cls, shipment_id: int, current_user: dict) -> List[BidRead]:
        """Bids on one shipment: all for the owner/admin, own bids for carriers."""
        conn = get_connection()
        try:
            cursor = conn.cursor()
            shipment = fetch_shipment(cursor, shipment_id)
            role = current_user.get("role")
            query = f"{BID_SELECT} WHERE b.shipment_id = ?"
            params: tuple = (shipment_id,)
            if role in CARRIER_ROLES:
                query += " AND b.carrier_id = ?"
                params += (current_user["user_id"],)
            elif role != "admin" and shipment["shipper_id"] != current_user["user_id"]:
                raise AccessDenied("Not authorized to view bids for this shipment")
            query += " ORDER BY b.price ASC, b.id ASC"
            return [bid_from_row(r) for r in cursor.execute(query, params).fetchall()]
        finally:
            conn.close()

    @classmethod
    async def place_bid(cls, shipment_id: int, data: BidCreate, current_user: dict) -> BidRead:
        """Place a bid on an open shipment and notify the shipper."""
        carrier_id = current_user["user_id"]
        conn = get_connection()
        try:
            cursor = conn.cursor()
            shipment = fetch_shipment(cursor, shipment_id)
            if shipment["status"] != "open":
                raise ValueError("Shipment is not open for bidding")
            existing = cursor.execute(
                "SELECT id FROM bids WHERE shipment_id = ? AND carrier_id = ? AND status = 'pending'",
                (shipment_id, carrier_id),
            ).fetchone()
            if existing:
                raise ValueError("A pending bid from this carrier already exists for this shipment")
            now = utcnow()
            eta = data.eta_pickup.isoformat() if data.eta_pickup else None
            cursor.execute(
                """
                INSERT INTO bids (shipment_id, carrier_id, price, eta_pickup, message, status, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, 'pending', ?, ?)
                """,
                (shipment_id, carrier_id, data.price, eta, data.message, now, now),
            )
            bid_id = cursor.lastrowid
            NotificationService.push(
                cursor, shipment["shipper_id"], "bid_received", "New Bid Received",
                f"You received a new bid of €{data.price:g} for shipment {describe_route(shipment)}",
                shipment_id,
            )
            conn.commit()
            row = _fetch_bid(cursor, shipment_id, bid_id)
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()
        logger.info("Carrier %s bid %s on shipment %s", carrier_id, data.price, shipment_id)
        await AuditService.log(carrier_id, "create", "bid", bid_id, {"shipment_id": shipment_id, "price": data.price})
        return bid_from_row(row)

    @classmethod
    async def accept_bid(cls, shipment_id: int, bid_id: int, current_user: dict) -> Tuple[BidRead, ShipmentRead]:
        """Accept a bid, decline its siblings and assign the shipment.

        Raises
        ------
        ValueError
            If the shipment or bid does not exist, the caller does not
            own the shipment, the bid is no longer pending or the
            shipment is no longer open.
        """
        conn = get_connection()
        try:
            cursor = conn.cursor()
            shipment = fetch_shipment(cursor, shipment_id)
            if shipment["shipper_id"] != current_user["user_id"]:
                raise AccessDenied("Only the shipment owner can accept bids")
            bid = _fetch_bid(cursor, shipment_id, bid_id)
            if bid["status"] != "pending":
                raise ValueError(f"Bid is no longer pending (status: {bid['status']})")
            if shipment["status"] != "open":
                raise ValueError(f"Shipment is not open (status: {shipment['status']})")
            now = utcnow()
            cursor.execute(
                """
                UPDATE shipments
                SET status = 'assigned', assigned_carrier_id = ?, assigned_at = ?, accepted_price = ?, updated_at = ?
                WHERE id = ? AND status = 'open'
                """,
                (bid["carrier_id"], now, bid["price"], now, shipment_id),
            )
            if cursor.rowcount != 1:
                raise ValueError("Shipment is not open (already assigned)")
            losers = cursor.execute(
                "SELECT id, carrier_id FROM bids WHERE shipment_id = ? AND id != ? AND status = 'pending'",
                (shipment_id, bid_id),
            ).fetchall()
            cursor.execute(
                "UPDATE bids SET status = 'accepted', updated_at = ? WHERE id = ?",
                (now, bid_id),
            )
            cursor.execute(
                "UPDATE bids SET status = 'declined', updated_at = ? WHERE shipment_id = ? AND id != ?",
                (now, shipment_id, bid_id),
            )
            route = describe_route(shipment)
            NotificationService.push(
                cursor, bid["carrier_id"], "bid_accepted", "Bid Accepted",
                f"Your bid of €{bid['price']:g} for shipment {route} has been accepted",
                shipment_id,
            )
            NotificationService.push(
                cursor, bid["carrier_id"], "shipment_assigned", "Shipment Assigned",
                f"You have been assigned to transport shipment {route}",
                shipment_id,
            )
            for loser in losers:
                NotificationService.push(
                    cursor, loser["carrier_id"], "bid_declined", "Bid Declined",
                    f"Your bid for shipment {route} was not selected",
                    shipment_id,
                )
            conn.commit()
            accepted = _fetch_bid(cursor, shipment_id, bid_id)
            updated_shipment = fetch_shipment(cursor, shipment_id)
        except Exception as e:
            conn.rollback()
            logger.warning("Accepting bid %s on shipment %s failed: %s", bid_id, shipment_id, e)
            raise
        finally:
            conn.close()
        logger.info(
            "Shipment %s assigned to carrier %s (bid %s, %d declined)",
            shipment_id, accepted["carrier_id"], bid_id, len(losers),
        )
        await AuditService.log(
            current_user["user_id"], "accept_bid", "shipment", shipment_id,
            {"bid_id": bid_id, "carrier_id": accepted["carrier_id"], "price": accepted["price"]},
        )
        return bid_from_row(accepted), shipment_from_row(updated_shipment)

    @classmethod
    async def decline_bid(cls, shipment_id: int, bid_id: int, current_user: dict) -> BidRead:
        conn = get_connection()
        try:
            cursor = conn.cursor()
            shipment = fetch_shipment(cursor, shipment_id)
            if shipment["shipper_id"] != current_user["user_id"]:
                raise AccessDenied("Only the shipment owner can decline bids")
            bid = _fetch_bid(cursor, shipment_id, bid_id)
            if bid["status"] != "pending":
                raise ValueError(f"Bid is no longer pending (status: {bid['status']})")
            cursor.execute(
                "UPDATE bids SET status = 'declined', updated_at = ? WHERE id = ?",
                (utcnow(), bid_id),
            )
            NotificationService.push(
                cursor, bid["carrier_id"], "bid_declined", "Bid Declined",
                f"Your bid for shipment {describe_route(shipment)} was declined",
                shipment_id,
            )
            conn.commit()
            row = _fetch_bid(cursor, shipment_id, bid_id)
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()
        await AuditService.log(current_user["user_id"], "decline_bid", "bid", bid_id, {"shipment_id": shipment_id})
        return bid_from_row(row)

    @classmethod
    async def withdraw_bid(cls, shipment_id: int, bid_id: int, current_user: dict) -> None:
        """Delete one of the caller's own pending bids."""
        conn = get_connection()
        try:
            cursor = conn.cursor()
            fetch_shipment(cursor, shipment_id)
            bid = _fetch_bid(cursor, shipment_id, bid_id)
            if bid["carrier_id"] != current_user["user_id"]:
                raise AccessDenied("Only the bidding carrier can withdraw this bid")
            if bid["status"] != "pending":
                raise ValueError("Only pending bids can be withdrawn")
            cursor.execute("DELETE FROM bids WHERE id = ?", (bid_id,))
            conn.commit()
        finally:
            conn.close()
        await AuditService.log(current_user["user_id"], "delete", "bid", bid_id, {"shipment_id": shipment_id})

    @classmethod
    async def bid_roi(
        cls,
        shipment_id: int,
        bid_id: int,
        cost_model_id: int,
        current_user: dict,
        deadhead_km: float = 0,
    ) -> ROIResult:
        """ROI of one of the caller's bids under one of their cost models.

        The loaded distance is the estimated road distance of the
        shipment route.
        """
        conn = get_connection()
        try:
            cursor = conn.cursor()
            shipment = fetch_shipment(cursor, shipment_id)
            bid = _fetch_bid(cursor, shipment_id, bid_id)
            if bid["carrier_id"] != current_user["user_id"]:
                raise AccessDenied("Not authorized to analyse this bid")
            model = cursor.execute(
                "SELECT * FROM cost_models WHERE id = ? AND carrier_id = ?",
                (cost_model_id, current_user["user_id"]),
            ).fetchone()
            if not model:
                raise ValueError(f"Cost model {cost_model_id} not found")
        finally:
            conn.close()
        route = route_between(from_json(shipment["from_address"], {}), from_json(shipment["to_address"], {}))
        return roi_for_model_row(model, distance=route.distance, bid_price=bid["price"], deadhead_km=deadhead_km)

