"""
Shipment tracking.

The assigned carrier reports GPS points while a shipment is under way.
The first point on an ``assigned`` shipment counts as the pickup and
moves it to ``in-transit``.  ``simulate_step`` produces points along the
straight line between pickup and delivery for demos.
"""

import logging
import random
import sqlite3
from typing import Optional, Tuple

from ..core.db import from_json, get_connection, utcnow
from ..core.errors import AccessDenied
from ..schemas.tracking import (
    SimulationResult,
    TrackingHistory,
    TrackingPointCreate,
    TrackingPointRead,
)
from .audit_service import AuditService
from .notification_service import NotificationService
from .route_calculation import DEFAULT_LOCATION
from .shipment_service import describe_route, fetch_shipment


logger = logging.getLogger(__name__)

TRACKABLE_STATUSES = ("assigned", "in-transit")
SIMULATION_JITTER_DEGREES = 0.005


def _point_from_row(row: sqlite3.Row) -> TrackingPointRead:
    return TrackingPointRead(
        id=row["id"],
        shipment_id=row["shipment_id"],
        latitude=row["latitude"],
        longitude=row["longitude"],
        timestamp=row["timestamp"],
        status=row["status"],
        notes=row["notes"],
        accuracy=row["accuracy"],
        speed=row["speed"],
        heading=row["heading"],
    )


def _endpoint(address: dict) -> Tuple[float, float]:
    lat = address.get("latitude")
    lng = address.get("longitude")
    return (
        lat if lat is not None else DEFAULT_LOCATION[0],
        lng if lng is not None else DEFAULT_LOCATION[1],
    )


def simulated_position(
    origin: Tuple[float, float],
    destination: Tuple[float, float],
    step: int,
    total_steps: int,
    rng: Optional[random.Random] = None,
) -> dict:
    """Interpolated position with jitter and plausible GPS readings.

    Returns a dict with ``latitude``, ``longitude``, ``accuracy``,
    ``speed``, ``heading`` and ``progress``.
    """
    rng = rng or random
    progress = min(step / total_steps, 1.0)
    lat = origin[0] + (destination[0] - origin[0]) * progress
    lng = origin[1] + (destination[1] - origin[1]) * progress
    return {
        "latitude": lat + (rng.random() - 0.5) * SIMULATION_JITTER_DEGREES,
        "longitude": lng + (rng.random() - 0.5) * SIMULATION_JITTER_DEGREES,
        "accuracy": rng.random() * 10 + 3,
        "speed": rng.random() * 40 + 50,
        "heading": rng.random() * 30 + 45,
        "progress": progress,
    }


class TrackingService:
    """Service for tracking points."""

    @classmethod
    async def get_history(cls, shipment_id: int, current_user: dict) -> TrackingHistory:
        """Tracking points oldest first; visible to the owner, the carrier and admins."""
        conn = get_connection()
        try:
            cursor = conn.cursor()
            shipment = fetch_shipment(cursor, shipment_id)
            user_id = current_user["user_id"]
            if current_user.get("role") != "admin" and user_id not in (
                shipment["shipper_id"],
                shipment["assigned_carrier_id"],
            ):
                raise AccessDenied("Not authorized to view tracking for this shipment")
            rows = cursor.execute(
                "SELECT * FROM tracking_points WHERE shipment_id = ? ORDER BY timestamp ASC, id ASC",
                (shipment_id,),
            ).fetchall()
        finally:
            conn.close()
        points = [_point_from_row(r) for r in rows]
        return TrackingHistory(tracking_points=points, current_location=points[-1] if points else None)

    @classmethod
    async def add_point(cls, shipment_id: int, data: TrackingPointCreate, current_user: dict) -> TrackingPointRead:
        conn = get_connection()
        try:
            cursor = conn.cursor()
            shipment = fetch_shipment(cursor, shipment_id)
            point_id = cls._insert_point(cursor, shipment, data.model_dump(), current_user)
            conn.commit()
            row = cursor.execute("SELECT * FROM tracking_points WHERE id = ?", (point_id,)).fetchone()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()
        await AuditService.log(
            current_user["user_id"], "track", "shipment", shipment_id,
            {"latitude": data.latitude, "longitude": data.longitude},
        )
        return _point_from_row(row)

    @classmethod
    async def simulate_step(
        cls,
        shipment_id: int,
        step: int,
        total_steps: int,
        current_user: dict,
        rng: Optional[random.Random] = None,
    ) -> SimulationResult:
        """Store the simulated position for ``step`` of ``total_steps``."""
        conn = get_connection()
        try:
            cursor = conn.cursor()
            shipment = fetch_shipment(cursor, shipment_id)
            origin = _endpoint(from_json(shipment["from_address"], {}))
            destination = _endpoint(from_json(shipment["to_address"], {}))
            position = simulated_position(origin, destination, step, total_steps, rng)
            progress = position.pop("progress")
            completed = step >= total_steps
            position["status"] = "arrived" if completed else "in_transit"
            position["notes"] = f"Simulated step {step}/{total_steps}"
            point_id = cls._insert_point(cursor, shipment, position, current_user)
            conn.commit()
            row = cursor.execute("SELECT * FROM tracking_points WHERE id = ?", (point_id,)).fetchone()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()
        return SimulationResult(point=_point_from_row(row), progress=progress, completed=completed)

    @staticmethod
    def _insert_point(cursor: sqlite3.Cursor, shipment: sqlite3.Row, data: dict, current_user: dict) -> int:
        if shipment["assigned_carrier_id"] != current_user["user_id"]:
            raise AccessDenied("Only the assigned carrier can add tracking points")
        if shipment["status"] not in TRACKABLE_STATUSES:
            raise ValueError(f"Shipment in status '{shipment['status']}' cannot be tracked")
        now = utcnow()
        cursor.execute(
            """
            INSERT INTO tracking_points (shipment_id, latitude, longitude, timestamp, status, notes, accuracy, speed, heading)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                shipment["id"],
                data["latitude"],
                data["longitude"],
                now,
                data.get("status"),
                data.get("notes"),
                data.get("accuracy"),
                data.get("speed"),
                data.get("heading"),
            ),
        )
        point_id = cursor.lastrowid
        if shipment["status"] == "assigned":
            cursor.execute(
                "UPDATE shipments SET status = 'in-transit', updated_at = ? WHERE id = ?",
                (now, shipment["id"]),
            )
            NotificationService.push(
                cursor, shipment["shipper_id"], "shipment_picked_up", "Shipment Picked Up",
                f"Your shipment {describe_route(shipment)} has been picked up.",
                shipment["id"],
            )
            logger.info("Shipment %s picked up (first tracking point)", shipment["id"])
        return point_id
