"""
Pydantic schemas for shipment templates.

A template stores the recurring parts of a shipment (route, load and
constraints) so a shipper only has to supply time windows to create a
new draft from it.
"""

from typing import Optional

from pydantic import BaseModel, Field, model_validator

from .common import Address
from .shipment import PalletSpec, PriceGuidance, ShipmentConstraints, TimeWindow, check_windows


class TemplateBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    from_address: Address
    to_address: Address
    pallets: PalletSpec
    adr_required: bool = False
    constraints: ShipmentConstraints = Field(default_factory=ShipmentConstraints)
    notes: Optional[str] = Field(None, max_length=2000)


class TemplateCreate(TemplateBase):
    pass


class TemplateUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    from_address: Optional[Address] = None
    to_address: Optional[Address] = None
    pallets: Optional[PalletSpec] = None
    adr_required: Optional[bool] = None
    constraints: Optional[ShipmentConstraints] = None
    notes: Optional[str] = Field(None, max_length=2000)


class TemplateRead(TemplateBase):
    id: int
    shipper_id: int
    created_at: str
    updated_at: str


class TemplateShipmentCreate(BaseModel):
    """Time windows (and optional overrides) for a shipment built from a template."""

    pickup_window: TimeWindow
    delivery_window: TimeWindow
    notes: Optional[str] = Field(None, max_length=2000)
    price_guidance: Optional[PriceGuidance] = None

    @model_validator(mode="after")
    def check_window_order(self) -> "TemplateShipmentCreate":
        check_windows(self.pickup_window, self.delivery_window)
        return self
