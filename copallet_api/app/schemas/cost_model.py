"""
Pydantic schemas for stored carrier cost models.
"""

from typing import Optional

from pydantic import BaseModel, Field

from .calculator import CostModelParams


class CostModelCreate(CostModelParams):
    name: str = Field(..., min_length=1, max_length=200)
    is_active: bool = True


class CostModelUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    cost_per_km: Optional[float] = Field(None, ge=0)
    driver_cost_per_hour: Optional[float] = Field(None, ge=0)
    load_time_minutes: Optional[float] = Field(None, ge=0)
    unload_time_minutes: Optional[float] = Field(None, ge=0)
    average_speed_kmh: Optional[float] = Field(None, gt=0)
    platform_fee_percentage: Optional[float] = Field(None, ge=0, le=100)
    fuel_cost_per_km: Optional[float] = Field(None, ge=0)
    maintenance_cost_per_km: Optional[float] = Field(None, ge=0)
    insurance_cost_per_km: Optional[float] = Field(None, ge=0)
    is_active: Optional[bool] = None


class CostModelRead(CostModelCreate):
    id: int
    carrier_id: int
    created_at: str
    updated_at: str
