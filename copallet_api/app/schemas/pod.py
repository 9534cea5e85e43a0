"""
Pydantic schemas for proof of delivery (POD).

A POD records the recipient name, optional photo and signature URLs and
the delivery time.  Submitting one completes the shipment.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class PODCreate(BaseModel):
    recipient_name: str = Field(..., min_length=1, max_length=200)
    photo_url: Optional[str] = Field(None, max_length=500)
    signature_url: Optional[str] = Field(None, max_length=500)
    delivery_notes: Optional[str] = Field(None, max_length=2000)
    delivered_at: Optional[datetime] = None


class PODRead(BaseModel):
    id: int
    shipment_id: int
    carrier_id: int
    photo_url: Optional[str] = None
    signature_url: Optional[str] = None
    recipient_name: str
    delivery_notes: Optional[str] = None
    delivered_at: str
    created_at: str


class PODResponse(BaseModel):
    pod: PODRead


class PODList(BaseModel):
    pods: List[PODRead]
