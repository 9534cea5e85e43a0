"""
Top-level router for version 1 of the API.

Aggregates the resource routers; ``main`` mounts the result under
``/api``.
"""

from fastapi import APIRouter

from .endpoints import (
    admin,
    analytics,
    auth,
    bids,
    blog,
    calculators,
    carrier_settings,
    messages,
    notifications,
    ratings,
    shipments,
    templates,
    tracking,
    users,
)

router = APIRouter()

router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(users.router, prefix="/users", tags=["users"])
# Bid routes first: ``/shipments/bids`` must win over ``/shipments/{shipment_id}``.
router.include_router(bids.router, prefix="/shipments", tags=["bids"])
router.include_router(shipments.router, prefix="/shipments", tags=["shipments"])
router.include_router(tracking.router, prefix="/shipments", tags=["tracking"])
router.include_router(messages.router, prefix="/shipments", tags=["messages"])
router.include_router(notifications.router, prefix="/notifications", tags=["notifications"])
router.include_router(ratings.router, prefix="/ratings", tags=["ratings"])
router.include_router(templates.router, prefix="/templates", tags=["templates"])
router.include_router(carrier_settings.auto_bid_router, prefix="/auto-bid-rules", tags=["auto-bid rules"])
router.include_router(carrier_settings.cost_model_router, prefix="/cost-models", tags=["cost models"])
router.include_router(calculators.router, prefix="/calculators", tags=["calculators"])
router.include_router(analytics.router, prefix="/analytics", tags=["analytics"])
router.include_router(admin.router, prefix="/admin", tags=["admin"])
router.include_router(blog.router, prefix="/blog", tags=["blog"])
