"""
Request and response models for the route, pricing and ROI calculators.

All calculators are stateless arithmetic; these models only validate
inputs and document the shape of the results.
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, Field, model_validator

from .common import Coordinates


RouteType = Literal["road", "ferry", "combined"]
DeliveryType = Literal["standard", "express", "same-day"]
Urgency = Literal["standard", "express", "urgent"]
ServiceType = Literal["standard", "white_glove", "temperature_controlled"]


class Waypoint(BaseModel):
    lat: float
    lng: float
    type: Literal["pickup", "waypoint", "delivery"]


class RouteRequest(BaseModel):
    """Two points; full addresses are accepted and extra fields ignored."""

    from_address: Coordinates
    to_address: Coordinates


class RouteEstimate(BaseModel):
    distance: int = Field(..., description="Road distance in km")
    duration: int = Field(..., description="Driving time in minutes")
    route_type: RouteType
    waypoints: List[Waypoint]
    summary: str


class QuoteRequest(BaseModel):
    distance: float = Field(..., ge=0)
    pallets: int = Field(..., ge=0)
    weight: float = Field(0, ge=0, description="Total weight in kg")
    delivery_type: DeliveryType = "standard"
    adr_required: bool = False
    tail_lift_required: bool = False
    temperature_controlled: bool = False


class QuoteResult(BaseModel):
    price: Optional[int] = None
    base_price: float = 0
    distance_cost: float = 0
    pallet_cost: float = 0
    weight_surcharge: float = 0
    extras: float = 0
    multiplier: float = 1


class SpendRequest(BaseModel):
    distance: float = Field(..., ge=0)
    pallets: int = Field(..., ge=0)
    weight_per_pallet: float = Field(0, ge=0)
    urgency: Urgency = "standard"
    service_type: ServiceType = "standard"
    insurance_value: float = Field(0, ge=0)


class SpendResult(BaseModel):
    base_rate: float
    distance_cost: float
    weight_cost: float
    urgency_multiplier: float
    service_multiplier: float
    insurance: float
    subtotal: float
    platform_fee: float
    total: float
    savings: float


class CostModelParams(BaseModel):
    """Cost inputs of a carrier; the same fields as a stored cost model."""

    cost_per_km: float = Field(..., ge=0)
    driver_cost_per_hour: float = Field(..., ge=0)
    load_time_minutes: float = Field(0, ge=0)
    unload_time_minutes: float = Field(0, ge=0)
    average_speed_kmh: float = Field(..., gt=0)
    platform_fee_percentage: float = Field(0, ge=0, le=100)
    fuel_cost_per_km: float = Field(0, ge=0)
    maintenance_cost_per_km: float = Field(0, ge=0)
    insurance_cost_per_km: float = Field(0, ge=0)


class ROIRequest(BaseModel):
    """Either inline cost parameters or the id of a stored cost model."""

    cost_model_id: Optional[int] = None
    cost_model: Optional[CostModelParams] = None
    distance: float = Field(..., ge=0)
    deadhead_km: float = Field(0, ge=0)
    bid_price: float = Field(..., ge=0)

    @model_validator(mode="after")
    def check_source(self) -> "ROIRequest":
        if self.cost_model_id is None and self.cost_model is None:
            raise ValueError("Provide either cost_model or cost_model_id")
        return self


class ROIResult(BaseModel):
    route_km: float
    deadhead_km: float
    time_estimate: float = Field(..., description="Hours including loading")
    variable_cost: float
    platform_fee: float
    profit: float
    roi_percentage: float


class CostPreviewRequest(CostModelParams):
    distance: float = Field(..., ge=0)
    duration_hours: float = Field(..., ge=0)


class CostPreviewResult(BaseModel):
    fuel_cost: float
    maintenance_cost: float
    insurance_cost: float
    vehicle_cost: float
    driver_cost: float
    load_unload_cost: float
    total_cost: float
    platform_fee: float
    net_profit: float
