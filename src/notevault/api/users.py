"""User profile API endpoints."""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request

from ..core.schemas.auth import PasswordChangeRequest, UserResponse, UserSummary, UserUpdateRequest
from ..core.schemas.common import ApiResponse, MessageResponse
from ..core.services import AuthService, SharingService
from ..middleware.auth import get_bearer_token, get_current_user_id
from .deps import get_auth_service, get_sharing_service

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me", response_model=ApiResponse[UserResponse])
async def get_profile(
    request: Request,
    current_user_id: UUID = Depends(get_current_user_id),
    auth_service: AuthService = Depends(get_auth_service),
):
    user = await auth_service.get_current_user(current_user_id)
    return ApiResponse.wrap(user, request)


@router.patch("/me", response_model=ApiResponse[UserResponse])
async def update_profile(
    payload: UserUpdateRequest,
    request: Request,
    current_user_id: UUID = Depends(get_current_user_id),
    auth_service: AuthService = Depends(get_auth_service),
):
    """Update display name or profile picture URL."""
    user = await auth_service.update_user_profile(current_user_id, payload)
    return ApiResponse.wrap(user, request)


@router.post("/me/password", response_model=ApiResponse[MessageResponse])
async def change_password(
    payload: PasswordChangeRequest,
    request: Request,
    current_user_id: UUID = Depends(get_current_user_id),
    auth_service: AuthService = Depends(get_auth_service),
):
    """Change password; every refresh token is revoked."""
    await auth_service.change_password(current_user_id, payload)
    return ApiResponse.wrap(MessageResponse(message="Password changed successfully"), request)


@router.delete("/me", response_model=ApiResponse[MessageResponse])
async def delete_account(
    request: Request,
    current_user_id: UUID = Depends(get_current_user_id),
    access_token: str = Depends(get_bearer_token),
    auth_service: AuthService = Depends(get_auth_service),
):
    """Disable the caller's account. The e-mail address can be registered again."""
    await auth_service.delete_account(current_user_id, access_token)
    return ApiResponse.wrap(MessageResponse(message="Account deleted successfully"), request)


@router.get("/shareable", response_model=ApiResponse[List[UserSummary]])
async def find_shareable_users(
    request: Request,
    name: Optional[str] = Query(None, max_length=100, description="Case-insensitive name filter"),
    current_user_id: UUID = Depends(get_current_user_id),
    sharing_service: SharingService = Depends(get_sharing_service),
):
    """Users the caller can share notes with."""
    users = await sharing_service.find_shareable_users(current_user_id, name)
    return ApiResponse.wrap(users, request)
