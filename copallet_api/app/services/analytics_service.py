"""
Shipment analytics for the dashboard of the signed-in user.

Shippers see the shipments they posted, carriers and dispatchers the
shipments assigned to them and admins every shipment.  Only shipments
created within the selected range count.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, get_args

from ..core.db import from_json, get_connection
from ..core.security import CARRIER_ROLES
from ..schemas.analytics import RouteBreakdown, SavingsSummary, UserAnalytics
from ..schemas.shipment import ShipmentStatus


logger = logging.getLogger(__name__)

RANGE_DAYS = {"7d": 7, "30d": 30, "90d": 90, "1y": 365}

# Conventional freight is priced 25% above what shippers pay on the platform
TRADITIONAL_COST_FACTOR = 1.25


def _percentage(part: float, whole: float) -> float:
    return round(part / whole * 100, 1) if whole else 0.0


def _route_breakdown(rows: List[Dict[str, Any]]) -> List[RouteBreakdown]:
    """Group shipments by ``origin → destination``, valued at the top of their price guidance."""
    groups: Dict[str, List[float]] = {}
    for row in rows:
        origin = (row["from_address"] or {}).get("city") or "Unknown"
        destination = (row["to_address"] or {}).get("city") or "Unknown"
        value = (row["price_guidance"] or {}).get("max") or 0
        groups.setdefault(f"{origin} → {destination}", []).append(float(value))
    breakdown = [
        RouteBreakdown(
            route=route,
            count=len(values),
            total_value=round(sum(values), 2),
            average_value=round(sum(values) / len(values), 2),
        )
        for route, values in groups.items()
    ]
    breakdown.sort(key=lambda item: (-item.count, item.route))
    return breakdown


def _savings(completed_value: float) -> SavingsSummary:
    traditional = completed_value * TRADITIONAL_COST_FACTOR
    savings = traditional - completed_value
    return SavingsSummary(
        traditional_cost=round(traditional, 2),
        estimated_savings=round(savings, 2),
        savings_percentage=_percentage(savings, traditional),
    )


class AnalyticsService:
    @classmethod
    async def for_user(cls, current_user: Dict[str, Any], range_key: str = "30d") -> UserAnalytics:
        """Summarise the caller's shipments created in the last ``range_key``.

        Parameters
        ----------
        current_user : dict
            Authenticated user payload (``user_id`` and ``role``).
        range_key : str
            One of ``7d``, ``30d``, ``90d`` or ``1y``.

        Returns
        -------
        UserAnalytics
            Counts, rates, status distribution, route breakdown and the
            value of delivered shipments.  ``savings`` is filled in for
            shippers and admins.
        """
        if range_key not in RANGE_DAYS:
            raise ValueError(f"Unknown analytics range: {range_key}")
        since = datetime.now(timezone.utc) - timedelta(days=RANGE_DAYS[range_key])
        since_stamp = since.isoformat(timespec="seconds").replace("+00:00", "Z")

        role = current_user["role"]
        query = (
            "SELECT status, from_address, to_address, price_guidance, accepted_price "
            "FROM shipments WHERE created_at >= ?"
        )
        params: List[Any] = [since_stamp]
        if role == "shipper":
            query += " AND shipper_id = ?"
            params.append(current_user["user_id"])
        elif role in CARRIER_ROLES:
            query += " AND assigned_carrier_id = ?"
            params.append(current_user["user_id"])

        conn = get_connection()
        try:
            rows = [
                {
                    "status": row["status"],
                    "from_address": from_json(row["from_address"], {}),
                    "to_address": from_json(row["to_address"], {}),
                    "price_guidance": from_json(row["price_guidance"], {}),
                    "accepted_price": row["accepted_price"],
                }
                for row in conn.execute(query + " ORDER BY id", params).fetchall()
            ]
        finally:
            conn.close()

        distribution = {status: 0 for status in get_args(ShipmentStatus)}
        for row in rows:
            distribution[row["status"]] = distribution.get(row["status"], 0) + 1

        total = len(rows)
        completed = distribution["delivered"]
        cancelled = distribution["cancelled"]
        delivered_prices = [
            row["accepted_price"] for row in rows
            if row["status"] == "delivered" and row["accepted_price"] is not None
        ]
        completed_value = float(sum(delivered_prices))

        logger.debug("Analytics for user %s over %s: %d shipments", current_user["user_id"], range_key, total)
        return UserAnalytics(
            range=range_key,
            since=since_stamp,
            role=role,
            total=total,
            completed=completed,
            in_progress=distribution["assigned"] + distribution["in-transit"],
            cancelled=cancelled,
            completion_rate=_percentage(completed, total),
            cancellation_rate=_percentage(cancelled, total),
            status_distribution=distribution,
            routes=_route_breakdown(rows),
            completed_value=round(completed_value, 2),
            average_completed_value=round(completed_value / len(delivered_prices), 2) if delivered_prices else 0.0,
            savings=_savings(completed_value) if role in ("shipper", "admin") else None,
        )
