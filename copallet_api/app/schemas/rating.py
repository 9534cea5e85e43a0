"""
Pydantic schemas for ratings exchanged after a delivered shipment.
"""

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class RatingCreate(BaseModel):
    shipment_id: int
    rating: int = Field(..., ge=1, le=5, description="Rating from 1 to 5")
    comment: Optional[str] = Field(None, description="Optional textual comment")

    @field_validator("comment")
    @classmethod
    def sanitize_comment(cls, v: Optional[str]) -> Optional[str]:
        """Trim whitespace from the comment and enforce a maximum length."""
        if v is None:
            return None
        v = v.strip()
        if len(v) > 1000:
            raise ValueError("Comment must be 1000 characters or fewer")
        return v or None


class RatingRead(BaseModel):
    id: int
    shipment_id: int
    rater_id: int
    ratee_id: int
    rating: int
    comment: Optional[str] = None
    created_at: str


class UserRatings(BaseModel):
    user_id: int
    ratings: List[RatingRead]
    average: Optional[float] = None
    count: int
