"""
Value objects shared by several schema modules.

Addresses and contact persons appear on shipments, templates and user
profiles.  They are stored as JSON documents and validated here.
"""

from typing import Optional

from pydantic import BaseModel, Field


class Coordinates(BaseModel):
    """A point that may or may not have been geocoded."""

    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)


class Address(Coordinates):
    """Postal address with optional coordinates."""

    street: str = Field(..., min_length=1, max_length=200, examples=["123 Main St"])
    city: str = Field(..., min_length=1, max_length=100, examples=["Amsterdam"])
    postal_code: str = Field(..., min_length=1, max_length=20, examples=["1012 AB"])
    country: str = Field(..., min_length=1, max_length=100, examples=["Netherlands"])


class ContactPerson(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    phone: str = Field(..., min_length=3, max_length=30)
    email: Optional[str] = Field(None, max_length=254)


class MessageResponse(BaseModel):
    """Plain acknowledgement body."""

    message: str
