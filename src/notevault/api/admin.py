"""Admin console API endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, status

from ..core.schemas.admin import (
    AdminUserQuery,
    AnnouncementRequest,
    AnnouncementResponse,
    ChangeRoleRequest,
    RecentActivity,
    SystemStats,
)
from ..core.schemas.auth import Identity, UserResponse
from ..core.schemas.common import ApiResponse, MessageResponse, Page
from ..core.schemas.notes import NoteQuery, NoteResponse, NoteUpdate
from ..core.services import AdminService
from ..middleware.auth import require_admin
from .deps import get_admin_service

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])


@router.get("/stats", response_model=ApiResponse[SystemStats])
async def system_stats(request: Request, service: AdminService = Depends(get_admin_service)):
    stats = await service.get_system_stats()
    return ApiResponse.wrap(stats, request)


@router.get("/users", response_model=ApiResponse[Page[UserResponse]])
async def list_users(
    request: Request,
    query: Annotated[AdminUserQuery, Query()],
    service: AdminService = Depends(get_admin_service),
):
    page = await service.list_users(query)
    return ApiResponse.wrap(page, request)


@router.patch("/users/{user_id}/status", response_model=ApiResponse[UserResponse])
async def toggle_user_status(
    user_id: UUID,
    request: Request,
    admin: Identity = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
):
    """Activate or deactivate another user's account."""
    user = await service.toggle_user_status(user_id, admin.id)
    return ApiResponse.wrap(user, request)


@router.patch("/users/{user_id}/role", response_model=ApiResponse[UserResponse])
async def change_user_role(
    user_id: UUID,
    payload: ChangeRoleRequest,
    request: Request,
    admin: Identity = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
):
    user = await service.change_user_role(user_id, payload.role.value, admin.id)
    return ApiResponse.wrap(user, request)


@router.delete("/users/{user_id}", response_model=ApiResponse[MessageResponse])
async def delete_user(
    user_id: UUID,
    request: Request,
    admin: Identity = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
):
    await service.delete_user(user_id, admin.id)
    return ApiResponse.wrap(MessageResponse(message="User deleted"), request)


@router.get("/notes", response_model=ApiResponse[Page[NoteResponse]])
async def list_all_notes(
    request: Request,
    query: Annotated[NoteQuery, Query()],
    service: AdminService = Depends(get_admin_service),
):
    """Every note, whatever its visibility."""
    page = await service.list_all_notes(query)
    return ApiResponse.wrap(page, request)


@router.patch("/notes/{note_id}", response_model=ApiResponse[NoteResponse])
async def update_note(
    note_id: UUID,
    payload: NoteUpdate,
    request: Request,
    admin: Identity = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
):
    """Edit any note; content changes add a version credited to the admin."""
    note = await service.update_note(note_id, payload, admin.id)
    return ApiResponse.wrap(note, request)


@router.delete("/notes/{note_id}", response_model=ApiResponse[MessageResponse])
async def delete_note(
    note_id: UUID,
    request: Request,
    admin: Identity = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
):
    """Delete any note; grantees are notified."""
    await service.delete_note(note_id, admin.id)
    return ApiResponse.wrap(MessageResponse(message="Note deleted"), request)


@router.get("/activity", response_model=ApiResponse[RecentActivity])
async def recent_activity(
    request: Request,
    limit: int = Query(10, ge=1, le=50),
    service: AdminService = Depends(get_admin_service),
):
    activity = await service.get_recent_activity(limit)
    return ApiResponse.wrap(activity, request)


@router.post(
    "/announcements",
    response_model=ApiResponse[AnnouncementResponse],
    status_code=status.HTTP_201_CREATED,
)
async def announce(
    payload: AnnouncementRequest,
    request: Request,
    service: AdminService = Depends(get_admin_service),
):
    """Notify every active user and broadcast to connected sockets."""
    result = await service.announce(payload)
    return ApiResponse.wrap(result, request)
