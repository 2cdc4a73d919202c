"""Notification inbox API endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request

from ..core.schemas.common import ApiResponse, CountResponse, MessageResponse, Page
from ..core.schemas.notifications import NotificationQuery, NotificationResponse
from ..core.services import NotificationService
from ..middleware.auth import get_current_user_id
from .deps import get_notification_service

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=ApiResponse[Page[NotificationResponse]])
async def list_notifications(
    request: Request,
    query: Annotated[NotificationQuery, Query()],
    current_user_id: UUID = Depends(get_current_user_id),
    service: NotificationService = Depends(get_notification_service),
):
    """Newest first unless sort_order=asc."""
    page = await service.list_notifications(current_user_id, query)
    return ApiResponse.wrap(page, request)


@router.get("/unread-count", response_model=ApiResponse[CountResponse])
async def unread_count(
    request: Request,
    current_user_id: UUID = Depends(get_current_user_id),
    service: NotificationService = Depends(get_notification_service),
):
    count = await service.unread_count(current_user_id)
    return ApiResponse.wrap(CountResponse(count=count), request)


@router.patch("/read-all", response_model=ApiResponse[CountResponse])
async def mark_all_read(
    request: Request,
    current_user_id: UUID = Depends(get_current_user_id),
    service: NotificationService = Depends(get_notification_service),
):
    """Returns how many notifications were unread."""
    count = await service.mark_all_read(current_user_id)
    return ApiResponse.wrap(CountResponse(count=count), request)


@router.patch("/{notification_id}/read", response_model=ApiResponse[NotificationResponse])
async def mark_read(
    notification_id: UUID,
    request: Request,
    current_user_id: UUID = Depends(get_current_user_id),
    service: NotificationService = Depends(get_notification_service),
):
    notification = await service.mark_read(notification_id, current_user_id)
    return ApiResponse.wrap(notification, request)


@router.delete("/{notification_id}", response_model=ApiResponse[MessageResponse])
async def delete_notification(
    notification_id: UUID,
    request: Request,
    current_user_id: UUID = Depends(get_current_user_id),
    service: NotificationService = Depends(get_notification_service),
):
    await service.delete_notification(notification_id, current_user_id)
    return ApiResponse.wrap(MessageResponse(message="Notification deleted"), request)
