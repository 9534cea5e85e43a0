"""
Pydantic schemas for bids on shipments.

A bid is a carrier's price offer against an open shipment.  At most
one bid per shipment is ever accepted; accepting it declines the rest.
"""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from .shipment import ShipmentRead


BidStatus = Literal["pending", "accepted", "declined"]


class BidCreate(BaseModel):
    price: float = Field(..., ge=0, description="Offered price in EUR")
    eta_pickup: Optional[datetime] = None
    message: Optional[str] = Field(None, max_length=1000)

    @field_validator("message")
    @classmethod
    def strip_message(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return v.strip() or None


class BidRead(BaseModel):
    id: int
    shipment_id: int
    carrier_id: int
    carrier_company: Optional[str] = None
    price: float
    eta_pickup: Optional[str] = None
    message: Optional[str] = None
    status: BidStatus
    created_at: str
    updated_at: str


class BidResponse(BaseModel):
    bid: BidRead


class BidListResponse(BaseModel):
    bids: List[BidRead]


class BidAcceptResponse(BaseModel):
    message: str
    bid: BidRead
    shipment: ShipmentRead
