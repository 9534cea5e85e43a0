"""
Pydantic schemas for auto-bid rules.

Rules are stored carrier preferences only; nothing evaluates them
against incoming shipments.
"""

from typing import Optional

from pydantic import BaseModel, Field


class AutoBidRuleBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    from_city: Optional[str] = Field(None, max_length=100)
    to_city: Optional[str] = Field(None, max_length=100)
    max_radius_km: Optional[float] = Field(None, ge=0)
    min_margin_percentage: Optional[float] = Field(None, ge=0, le=100)
    max_bid_amount: Optional[float] = Field(None, ge=0)
    adr_allowed: bool = False
    is_active: bool = True


class AutoBidRuleCreate(AutoBidRuleBase):
    pass


class AutoBidRuleUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    from_city: Optional[str] = Field(None, max_length=100)
    to_city: Optional[str] = Field(None, max_length=100)
    max_radius_km: Optional[float] = Field(None, ge=0)
    min_margin_percentage: Optional[float] = Field(None, ge=0, le=100)
    max_bid_amount: Optional[float] = Field(None, ge=0)
    adr_allowed: Optional[bool] = None
    is_active: Optional[bool] = None


class AutoBidRuleRead(AutoBidRuleBase):
    id: int
    carrier_id: int
    created_at: str
    updated_at: str
