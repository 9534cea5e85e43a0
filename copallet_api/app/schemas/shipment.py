"""
Pydantic schemas for shipments.

A shipment is a transport job posted by a shipper: origin and
destination addresses, pickup and delivery windows, the pallet load
and handling constraints.  Shipments move through the statuses
``draft → open → assigned → in-transit → delivered`` and may be
cancelled while still ``draft`` or ``open``.
"""

from datetime import datetime, timezone
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from .calculator import RouteEstimate
from .common import Address


ShipmentStatus = Literal["draft", "open", "assigned", "in-transit", "delivered", "cancelled"]


class TimeWindow(BaseModel):
    """A start/end interval.  Naive datetimes are taken to be UTC."""

    start: datetime
    end: datetime

    @field_validator("start", "end")
    @classmethod
    def assume_utc(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    @model_validator(mode="after")
    def check_order(self) -> "TimeWindow":
        if self.end < self.start:
            raise ValueError("Window end must not be before its start")
        return self


class PalletDimensions(BaseModel):
    """Pallet dimensions in centimetres."""

    length: float = Field(..., ge=1)
    width: float = Field(..., ge=1)
    height: float = Field(..., ge=1)


class PalletSpec(BaseModel):
    quantity: int = Field(..., ge=1, le=66)
    dimensions: PalletDimensions
    weight: float = Field(..., ge=1, description="Total weight in kg")


class ShipmentConstraints(BaseModel):
    tail_lift_required: bool = False
    forklift_required: bool = False
    indoor_delivery: bool = False
    appointment_required: bool = False


class PriceGuidance(BaseModel):
    min: float = Field(..., ge=0)
    max: float = Field(..., ge=0)

    @model_validator(mode="after")
    def check_range(self) -> "PriceGuidance":
        if self.max < self.min:
            raise ValueError("Price guidance max must be >= min")
        return self


class ShipmentBase(BaseModel):
    from_address: Address
    to_address: Address
    pickup_window: TimeWindow
    delivery_window: TimeWindow
    pallets: PalletSpec
    adr_required: bool = False
    constraints: ShipmentConstraints = Field(default_factory=ShipmentConstraints)
    notes: Optional[str] = Field(None, max_length=2000)
    price_guidance: Optional[PriceGuidance] = None


def check_windows(pickup: TimeWindow, delivery: TimeWindow) -> None:
    """Delivery may not end before pickup starts."""
    if delivery.end < pickup.start:
        raise ValueError("Delivery window must end after the pickup window starts")


class ShipmentCreate(ShipmentBase):
    """Schema for creating a shipment.  New shipments start as drafts."""

    @model_validator(mode="after")
    def check_window_order(self) -> "ShipmentCreate":
        check_windows(self.pickup_window, self.delivery_window)
        return self


class ShipmentUpdate(BaseModel):
    """Partial update of a draft or open shipment."""

    from_address: Optional[Address] = None
    to_address: Optional[Address] = None
    pickup_window: Optional[TimeWindow] = None
    delivery_window: Optional[TimeWindow] = None
    pallets: Optional[PalletSpec] = None
    adr_required: Optional[bool] = None
    constraints: Optional[ShipmentConstraints] = None
    notes: Optional[str] = Field(None, max_length=2000)
    price_guidance: Optional[PriceGuidance] = None


class ShipmentRead(ShipmentBase):
    id: int
    shipper_id: int
    status: ShipmentStatus
    assigned_carrier_id: Optional[int] = None
    assigned_at: Optional[str] = None
    accepted_price: Optional[float] = None
    bid_count: int = 0
    created_at: str
    updated_at: str


class ShipmentStatusUpdate(BaseModel):
    status: ShipmentStatus


class ShipmentResponse(BaseModel):
    shipment: ShipmentRead


class ShipmentDetailResponse(BaseModel):
    shipment: ShipmentRead
    route: RouteEstimate


class ShipmentListResponse(BaseModel):
    shipments: List[ShipmentRead]
    total: int
