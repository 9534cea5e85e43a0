"""
Pydantic schemas for the per-user shipment analytics dashboard.
"""

from typing import Dict, List, Literal, Optional

from pydantic import BaseModel


AnalyticsRange = Literal["7d", "30d", "90d", "1y"]


class RouteBreakdown(BaseModel):
    route: str
    count: int
    total_value: float
    average_value: float


class SavingsSummary(BaseModel):
    """Spend on the platform compared with conventional freight."""

    traditional_cost: float
    estimated_savings: float
    savings_percentage: float


class UserAnalytics(BaseModel):
    range: AnalyticsRange
    since: str
    role: str
    total: int
    completed: int
    in_progress: int
    cancelled: int
    completion_rate: float
    cancellation_rate: float
    status_distribution: Dict[str, int]
    routes: List[RouteBreakdown]
    completed_value: float
    average_completed_value: float
    # Shippers and admins only
    savings: Optional[SavingsSummary] = None
