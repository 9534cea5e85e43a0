"""
Pydantic schemas for the admin panel: verification decisions,
account activation, platform statistics and audit log entries.
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, model_validator

from .user import AdminUserRead


class VerificationDecision(BaseModel):
    status: Literal["approved", "rejected"]
    rejection_reason: Optional[str] = Field(None, max_length=500)

    @model_validator(mode="after")
    def drop_reason_on_approval(self) -> "VerificationDecision":
        if self.status == "approved":
            self.rejection_reason = None
        return self


class ActivationUpdate(BaseModel):
    is_active: bool


class VerificationResponse(BaseModel):
    message: str
    user: AdminUserRead


class PendingVerifications(BaseModel):
    users: List[AdminUserRead]
    total: int


class PlatformStats(BaseModel):
    users_total: int
    users_by_role: Dict[str, int]
    users_by_verification: Dict[str, int]
    shipments_total: int
    shipments_by_status: Dict[str, int]
    open_shipments: int
    bids_total: int
    bids_by_status: Dict[str, int]
    accepted_bid_value: float
    average_rating: Optional[float] = None
    blog_posts_published: int


class AuditLogRead(BaseModel):
    id: int
    user_id: Optional[int] = None
    action: str
    object_type: str
    object_id: Optional[int] = None
    timestamp: str
    details: Optional[Any] = None


class AuditLogList(BaseModel):
    logs: List[AuditLogRead]
