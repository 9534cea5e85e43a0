"""
Authentication endpoints for API v1.

Sign up, log in, refresh the token pair and read the current user.
Access tokens are short-lived bearer tokens; refresh tokens are
exchanged at ``/auth/refresh``.  Logout is stateless: the client simply
drops its tokens.
"""

from fastapi import APIRouter, Depends, HTTPException, status

from copallet_api.app.api.deps import http_error
from copallet_api.app.core.security import get_current_user
from copallet_api.app.schemas.common import MessageResponse
from copallet_api.app.schemas.user import (
    AuthResponse,
    CurrentUserResponse,
    RefreshRequest,
    RefreshResponse,
    UserLogin,
    UserSignup,
)
from copallet_api.app.services.user_service import UserService


router = APIRouter()


@router.post("/signup", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def signup(data: UserSignup) -> AuthResponse:
    """Register a new account.

    New shippers and carriers start with verification ``pending``.  An
    e-mail that is already registered yields 409.
    """
    try:
        user, tokens = await UserService.signup(data)
    except ValueError as e:
        raise http_error(e) from e
    return AuthResponse(message="User created successfully", user=user, tokens=tokens)


@router.post("/login", response_model=AuthResponse)
async def login(data: UserLogin) -> AuthResponse:
    try:
        user, tokens = await UserService.authenticate(data.email, data.password)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        ) from e
    return AuthResponse(message="Login successful", user=user, tokens=tokens)


@router.post("/refresh", response_model=RefreshResponse)
async def refresh(data: RefreshRequest) -> RefreshResponse:
    """Exchange a refresh token for a new token pair."""
    if not data.refresh_token:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Refresh token is required")
    try:
        tokens = await UserService.refresh(data.refresh_token)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e)) from e
    return RefreshResponse(message="Tokens refreshed", tokens=tokens)


@router.get("/me", response_model=CurrentUserResponse)
async def me(current_user: dict = Depends(get_current_user)) -> CurrentUserResponse:
    try:
        user = await UserService.get_user(current_user["user_id"])
    except ValueError as e:
        raise http_error(e) from e
    return CurrentUserResponse(user=user)


@router.post("/logout", response_model=MessageResponse)
async def logout(current_user: dict = Depends(get_current_user)) -> MessageResponse:
    return MessageResponse(message="Logged out successfully")
