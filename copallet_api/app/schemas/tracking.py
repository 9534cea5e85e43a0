"""
Pydantic schemas for shipment tracking points and the tracking simulator.
"""

from typing import List, Optional

from pydantic import BaseModel, Field


class TrackingPointCreate(BaseModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    status: Optional[str] = Field(None, max_length=100)
    notes: Optional[str] = Field(None, max_length=500)
    accuracy: Optional[float] = Field(None, ge=0, description="Metres")
    speed: Optional[float] = Field(None, ge=0, description="km/h")
    heading: Optional[float] = Field(None, ge=0, lt=360, description="Degrees")


class TrackingPointRead(BaseModel):
    id: int
    shipment_id: int
    latitude: float
    longitude: float
    timestamp: str
    status: Optional[str] = None
    notes: Optional[str] = None
    accuracy: Optional[float] = None
    speed: Optional[float] = None
    heading: Optional[float] = None


class TrackingHistory(BaseModel):
    tracking_points: List[TrackingPointRead]
    current_location: Optional[TrackingPointRead] = None


class SimulationStep(BaseModel):
    step: int = Field(..., ge=0)
    total_steps: int = Field(20, ge=1, le=1000)


class SimulationResult(BaseModel):
    point: TrackingPointRead
    progress: float = Field(..., description="Fraction of the route covered, 0..1")
    completed: bool
