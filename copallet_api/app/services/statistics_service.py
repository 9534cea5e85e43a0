"""
Platform-wide statistics for the admin dashboard.
"""

from typing import Dict

from ..core.db import get_connection
from ..schemas.admin import PlatformStats


def _grouped(conn, table: str, column: str) -> Dict[str, int]:
    rows = conn.execute(
        f"SELECT {column} AS key, COUNT(*) AS cnt FROM {table} GROUP BY {column}"
    ).fetchall()
    return {r["key"]: r["cnt"] for r in rows}


class StatisticsService:

    @classmethod
    async def platform_stats(cls) -> PlatformStats:
        conn = get_connection()
        try:
            users_by_role = _grouped(conn, "users", "role")
            shipments_by_status = _grouped(conn, "shipments", "status")
            bids_by_status = _grouped(conn, "bids", "status")
            accepted = conn.execute(
                "SELECT COALESCE(SUM(accepted_price), 0) AS total FROM shipments WHERE accepted_price IS NOT NULL"
            ).fetchone()
            rating = conn.execute("SELECT AVG(rating) AS avg FROM ratings").fetchone()
            published = conn.execute(
                "SELECT COUNT(*) AS cnt FROM blog_posts WHERE status = 'published'"
            ).fetchone()
            return PlatformStats(
                users_total=sum(users_by_role.values()),
                users_by_role=users_by_role,
                users_by_verification=_grouped(conn, "users", "verification_status"),
                shipments_total=sum(shipments_by_status.values()),
                shipments_by_status=shipments_by_status,
                open_shipments=shipments_by_status.get("open", 0),
                bids_total=sum(bids_by_status.values()),
                bids_by_status=bids_by_status,
                accepted_bid_value=round(accepted["total"], 2),
                average_rating=round(rating["avg"], 2) if rating["avg"] is not None else None,
                blog_posts_published=published["cnt"],
            )
        finally:
            conn.close()
