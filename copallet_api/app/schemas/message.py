"""
Pydantic schemas for per-shipment messaging between shippers and carriers.
"""

from typing import List

from pydantic import BaseModel, Field, field_validator


class MessageCreate(BaseModel):
    content: str = Field(..., max_length=2000)

    @field_validator("content")
    @classmethod
    def strip_content(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Message content must not be empty")
        return v


class MessageRead(BaseModel):
    id: int
    shipment_id: int
    sender_id: int
    sender_role: str
    content: str
    created_at: str


class MessageList(BaseModel):
    messages: List[MessageRead]


class MessageCreated(BaseModel):
    message: MessageRead
