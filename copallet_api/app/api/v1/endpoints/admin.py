"""
Administration endpoints for API v1.

User verification and activation, platform statistics and the audit
log.  Every route requires the ``admin`` role.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from copallet_api.app.api.deps import http_error
from copallet_api.app.core.security import require_roles
from copallet_api.app.schemas.admin import (
    ActivationUpdate,
    AuditLogList,
    PendingVerifications,
    PlatformStats,
    VerificationDecision,
    VerificationResponse,
)
from copallet_api.app.schemas.user import AdminUserList, AdminUserRead, Role, VerificationStatus
from copallet_api.app.services.audit_service import AuditService
from copallet_api.app.services.statistics_service import StatisticsService
from copallet_api.app.services.user_service import UserService


router = APIRouter()

admin_only = require_roles("admin")


@router.get("/users", response_model=AdminUserList)
async def list_users(
    role: Optional[Role] = Query(None),
    verification_status: Optional[VerificationStatus] = Query(None),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    current_user: dict = Depends(admin_only),
) -> AdminUserList:
    users, total = await UserService.list_users(role, verification_status, limit, offset)
    return AdminUserList(users=users, total=total)


@router.put("/users/{user_id}/verification", response_model=VerificationResponse)
async def update_verification(
    user_id: int,
    decision: VerificationDecision,
    current_user: dict = Depends(admin_only),
) -> VerificationResponse:
    """Approve or reject an account.  The user is notified either way."""
    try:
        user = await UserService.set_verification(user_id, decision, current_user)
    except ValueError as e:
        raise http_error(e) from e
    return VerificationResponse(message=f"User {decision.status} successfully", user=user)


@router.put("/users/{user_id}/active", response_model=AdminUserRead)
async def update_activation(
    user_id: int,
    data: ActivationUpdate,
    current_user: dict = Depends(admin_only),
) -> AdminUserRead:
    try:
        return await UserService.set_active(user_id, data.is_active, current_user)
    except ValueError as e:
        raise http_error(e) from e


@router.get("/verifications", response_model=PendingVerifications)
async def pending_verifications(current_user: dict = Depends(admin_only)) -> PendingVerifications:
    users = await UserService.pending_verifications()
    return PendingVerifications(users=users, total=len(users))


@router.get("/stats", response_model=PlatformStats)
async def platform_stats(current_user: dict = Depends(admin_only)) -> PlatformStats:
    return await StatisticsService.platform_stats()


@router.get("/audit-logs", response_model=AuditLogList)
async def audit_logs(
    user_id: Optional[int] = Query(None),
    object_type: Optional[str] = Query(None),
    action: Optional[str] = Query(None),
    start_date: Optional[str] = Query(None),
    end_date: Optional[str] = Query(None),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    current_user: dict = Depends(admin_only),
) -> AuditLogList:
    """Filter the audit log.  Dates are ISO strings compared lexically."""
    logs = await AuditService.list_logs(
        user_id=user_id,
        object_type=object_type,
        action=action,
        start_date=start_date,
        end_date=end_date,
        limit=limit,
        offset=offset,
    )
    return AuditLogList(logs=logs)
