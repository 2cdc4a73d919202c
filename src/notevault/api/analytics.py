"""Analytics API endpoints.

Every user can read their own activity summary; per-note, per-user and
system-wide figures are admin only.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request

from ..core.schemas.analytics import NoteAnalytics, SystemAnalytics, UserAnalytics
from ..core.schemas.common import ApiResponse
from ..core.services import AnalyticsService
from ..middleware.auth import get_current_user_id, require_admin
from .deps import get_analytics_service

router = APIRouter(prefix="/analytics", tags=["analytics"])


@router.get("/me", response_model=ApiResponse[UserAnalytics])
async def my_analytics(
    request: Request,
    days: int = Query(30, ge=1, le=365, description="Length of the period in days"),
    current_user_id: UUID = Depends(get_current_user_id),
    service: AnalyticsService = Depends(get_analytics_service),
):
    analytics = await service.get_user_analytics(current_user_id, days)
    return ApiResponse.wrap(analytics, request)


@router.get("/notes/{note_id}", response_model=ApiResponse[NoteAnalytics], dependencies=[Depends(require_admin)])
async def note_analytics(
    note_id: UUID,
    request: Request,
    days: int = Query(30, ge=1, le=365),
    service: AnalyticsService = Depends(get_analytics_service),
):
    """View counts of one note."""
    analytics = await service.get_note_analytics(note_id, days)
    return ApiResponse.wrap(analytics, request)


@router.get("/users/{user_id}", response_model=ApiResponse[UserAnalytics], dependencies=[Depends(require_admin)])
async def user_analytics(
    user_id: UUID,
    request: Request,
    days: int = Query(30, ge=1, le=365),
    service: AnalyticsService = Depends(get_analytics_service),
):
    analytics = await service.get_user_analytics(user_id, days)
    return ApiResponse.wrap(analytics, request)


@router.get("/system", response_model=ApiResponse[SystemAnalytics], dependencies=[Depends(require_admin)])
async def system_analytics(
    request: Request,
    days: int = Query(7, ge=1, le=365),
    service: AnalyticsService = Depends(get_analytics_service),
):
    """Users, notes and views across the whole system."""
    analytics = await service.get_system_analytics(days)
    return ApiResponse.wrap(analytics, request)
