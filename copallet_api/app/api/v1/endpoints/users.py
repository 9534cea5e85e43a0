"""
Profile endpoints for API v1.

Both views operate on the caller's own profile and require an
approved account.
"""

from fastapi import APIRouter, Depends

from copallet_api.app.api.deps import http_error
from copallet_api.app.core.security import require_verified
from copallet_api.app.schemas.user import (
    CompanyProfileRead,
    CompanyProfileUpdate,
    ProfileResponse,
    ProfileUpdate,
)
from copallet_api.app.services.user_service import UserService


router = APIRouter()


@router.get("/profile", response_model=ProfileResponse)
async def get_profile(current_user: dict = Depends(require_verified)) -> ProfileResponse:
    try:
        return await UserService.get_profile(current_user["user_id"])
    except ValueError as e:
        raise http_error(e) from e


@router.put("/profile", response_model=ProfileResponse)
async def update_profile(
    data: ProfileUpdate,
    current_user: dict = Depends(require_verified),
) -> ProfileResponse:
    """Update personal and billing details.  Omitted fields stay unchanged."""
    try:
        return await UserService.update_profile(current_user["user_id"], data)
    except ValueError as e:
        raise http_error(e) from e


@router.get("/company-profile", response_model=CompanyProfileRead)
async def get_company_profile(current_user: dict = Depends(require_verified)) -> CompanyProfileRead:
    try:
        return await UserService.get_company_profile(current_user["user_id"])
    except ValueError as e:
        raise http_error(e) from e


@router.put("/company-profile", response_model=CompanyProfileRead)
async def update_company_profile(
    data: CompanyProfileUpdate,
    current_user: dict = Depends(require_verified),
) -> CompanyProfileRead:
    try:
        return await UserService.update_company_profile(current_user["user_id"], data)
    except ValueError as e:
        raise http_error(e) from e
