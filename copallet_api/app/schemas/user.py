"""
Pydantic models for accounts, authentication and profiles.

Users have one of four roles (shipper, carrier, dispatcher, admin) and
a verification status that gates marketplace actions.  Every user has
exactly one profile row holding personal and company details.
"""

import re
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from .common import Address, ContactPerson


Role = Literal["shipper", "carrier", "dispatcher", "admin"]
VerificationStatus = Literal["pending", "approved", "rejected"]

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def normalize_email(value: str) -> str:
    value = value.strip().lower()
    if not EMAIL_RE.match(value):
        raise ValueError("Valid email is required")
    return value


class UserSignup(BaseModel):
    """Schema for self-service registration."""

    email: str = Field(..., max_length=254, examples=["shipper@example.com"])
    password: str = Field(..., min_length=6, max_length=128)
    role: Role = Field(..., examples=["shipper"])

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        return normalize_email(v)


class UserLogin(BaseModel):
    email: str = Field(..., max_length=254)
    password: str = Field(..., min_length=1, max_length=128)

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        return normalize_email(v)


class RefreshRequest(BaseModel):
    # Optional so that a missing token yields 400 rather than 422.
    refresh_token: Optional[str] = None


class UserRead(BaseModel):
    """Public view of a user account.  Never includes the password hash."""

    id: int
    email: str
    role: Role
    verification_status: VerificationStatus
    is_active: bool
    last_login_at: Optional[str] = None
    created_at: str

    model_config = {
        "from_attributes": True,
    }


class TokenPair(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int


class AuthResponse(BaseModel):
    message: str
    user: UserRead
    tokens: TokenPair


class RefreshResponse(BaseModel):
    message: str
    tokens: TokenPair


class CurrentUserResponse(BaseModel):
    user: UserRead


class ProfileRead(BaseModel):
    user_id: int
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    company_name: Optional[str] = None
    vat_number: Optional[str] = None
    billing_address: Optional[Address] = None
    default_pickup_contact: Optional[ContactPerson] = None
    updated_at: str


class ProfileUpdate(BaseModel):
    """Partial profile update; omitted fields are left unchanged."""

    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    phone: Optional[str] = Field(None, max_length=30)
    company_name: Optional[str] = Field(None, max_length=200)
    vat_number: Optional[str] = Field(None, max_length=30)
    billing_address: Optional[Address] = None
    default_pickup_contact: Optional[ContactPerson] = None


class ProfileResponse(BaseModel):
    user: UserRead
    profile: ProfileRead


class CompanyProfileRead(BaseModel):
    company_name: Optional[str] = None
    vat_number: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[Address] = None


class CompanyProfileUpdate(BaseModel):
    company_name: Optional[str] = Field(None, min_length=1, max_length=200)
    vat_number: Optional[str] = Field(None, max_length=30)
    phone: Optional[str] = Field(None, max_length=30)
    address: Optional[Address] = None


class AdminUserRead(UserRead):
    """User listing entry for the admin panel, enriched with profile names."""

    rejection_reason: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    company_name: Optional[str] = None


class AdminUserList(BaseModel):
    users: List[AdminUserRead]
    total: int
