"""Authentication API endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, Request, status

from ..core.schemas.auth import (
    LoginRequest,
    RefreshTokenRequest,
    RegisterRequest,
    TokenResponse,
    UserResponse,
)
from ..core.schemas.common import ApiResponse, MessageResponse
from ..core.services import AuthService
from ..middleware.auth import get_bearer_token, get_current_user_id
from .deps import get_auth_service

router = APIRouter(prefix="/auth", tags=["authentication"])


@router.post("/register", response_model=ApiResponse[UserResponse], status_code=status.HTTP_201_CREATED)
async def register(
    payload: RegisterRequest,
    request: Request,
    auth_service: AuthService = Depends(get_auth_service),
):
    """Register a new user."""
    user = await auth_service.register_user(payload)
    return ApiResponse.wrap(user, request)


@router.post("/login", response_model=ApiResponse[TokenResponse])
async def login(
    payload: LoginRequest,
    request: Request,
    auth_service: AuthService = Depends(get_auth_service),
):
    """Login user and get JWT tokens."""
    tokens = await auth_service.authenticate_user(payload)
    return ApiResponse.wrap(tokens, request)


@router.post("/refresh", response_model=ApiResponse[TokenResponse])
async def refresh_token(
    payload: RefreshTokenRequest,
    request: Request,
    auth_service: AuthService = Depends(get_auth_service),
):
    """Rotate the refresh token into a new token pair."""
    tokens = await auth_service.refresh_token(payload)
    return ApiResponse.wrap(tokens, request)


@router.post("/logout", response_model=ApiResponse[MessageResponse])
async def logout(
    request: Request,
    current_user_id: UUID = Depends(get_current_user_id),
    access_token: str = Depends(get_bearer_token),
    auth_service: AuthService = Depends(get_auth_service),
):
    """Revoke refresh tokens and blacklist the current access token."""
    revoked = await auth_service.logout_user(current_user_id, access_token)
    message = "Logged out successfully" if revoked else "No active sessions found"
    return ApiResponse.wrap(MessageResponse(message=message), request)


@router.get("/me", response_model=ApiResponse[UserResponse])
async def get_current_user(
    request: Request,
    current_user_id: UUID = Depends(get_current_user_id),
    auth_service: AuthService = Depends(get_auth_service),
):
    """Get current user profile."""
    user = await auth_service.get_current_user(current_user_id)
    return ApiResponse.wrap(user, request)
