"""
Ratings exchanged by the shipper and the carrier of a delivered shipment.
"""

import logging
import sqlite3

from ..core.db import get_connection, utcnow
from ..core.errors import AccessDenied
from ..schemas.rating import RatingCreate, RatingRead, UserRatings
from .audit_service import AuditService
from .shipment_service import fetch_shipment


logger = logging.getLogger(__name__)


def _rating_from_row(row: sqlite3.Row) -> RatingRead:
    return RatingRead(
        id=row["id"],
        shipment_id=row["shipment_id"],
        rater_id=row["rater_id"],
        ratee_id=row["ratee_id"],
        rating=row["rating"],
        comment=row["comment"],
        created_at=row["created_at"],
    )


class RatingService:

    @classmethod
    async def rate(cls, data: RatingCreate, current_user: dict) -> RatingRead:
        """Rate the other party of a delivered shipment.

        The shipper rates the assigned carrier and the carrier rates the
        shipper.  Each party rates a shipment at most once.
        """
        rater_id = current_user["user_id"]
        conn = get_connection()
        try:
            cursor = conn.cursor()
            shipment = fetch_shipment(cursor, data.shipment_id)
            if shipment["status"] != "delivered":
                raise ValueError("Only delivered shipments can be rated")
            if rater_id == shipment["shipper_id"]:
                ratee_id = shipment["assigned_carrier_id"]
            elif rater_id == shipment["assigned_carrier_id"]:
                ratee_id = shipment["shipper_id"]
            else:
                raise AccessDenied("Not authorized to rate this shipment")
            existing = cursor.execute(
                "SELECT id FROM ratings WHERE shipment_id = ? AND rater_id = ?",
                (data.shipment_id, rater_id),
            ).fetchone()
            if existing:
                raise ValueError("Rating for this shipment already exists")
            cursor.execute(
                """
                INSERT INTO ratings (shipment_id, rater_id, ratee_id, rating, comment, created_at)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (data.shipment_id, rater_id, ratee_id, data.rating, data.comment, utcnow()),
            )
            rating_id = cursor.lastrowid
            conn.commit()
            row = cursor.execute("SELECT * FROM ratings WHERE id = ?", (rating_id,)).fetchone()
        finally:
            conn.close()
        await AuditService.log(
            rater_id, "create", "rating", rating_id,
            {"shipment_id": data.shipment_id, "ratee_id": ratee_id, "rating": data.rating},
        )
        return _rating_from_row(row)

    @classmethod
    async def for_user(cls, user_id: int) -> UserRatings:
        """Ratings received by a user with their average."""
        conn = get_connection()
        try:
            if not conn.execute("SELECT id FROM users WHERE id = ?", (user_id,)).fetchone():
                raise ValueError(f"User {user_id} not found")
            rows = conn.execute(
                "SELECT * FROM ratings WHERE ratee_id = ? ORDER BY created_at DESC, id DESC",
                (user_id,),
            ).fetchall()
        finally:
            conn.close()
        ratings = [_rating_from_row(r) for r in rows]
        average = round(sum(r.rating for r in ratings) / len(ratings), 2) if ratings else None
        return UserRatings(user_id=user_id, ratings=ratings, average=average, count=len(ratings))
