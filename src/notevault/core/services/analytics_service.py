"""Analytics service implementation."""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from ..exceptions import NotFoundError
from ..models.analytics import ActivityType, NoteView, UserActivity
from ..repositories.analytics_repository import AnalyticsRepository
from ..repositories.note_repository import NoteRepository
from ..repositories.user_repository import UserRepository
from ..schemas.analytics import ActivityCount, NoteAnalytics, SystemAnalytics, UserAnalytics
from .interfaces import IAnalyticsService
from .unit_of_work import unit_of_work

logger = logging.getLogger(__name__)

MAX_USER_AGENT_LENGTH = 500


def _period_start(days: int) -> datetime:
    return datetime.now(timezone.utc) - timedelta(days=days)


class AnalyticsService(IAnalyticsService):
    """
    Note views, user activity and their aggregates.

    Activities are staged inside the caller's transaction and commit with it.
    Views are written in a transaction of their own after the read; a view
    that cannot be stored is logged and dropped, the read still succeeds.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.analytics_repo = AnalyticsRepository(session)
        self.note_repo = NoteRepository(session)
        self.user_repo = UserRepository(session)

    def stage_activity(
        self,
        user_id: UUID,
        activity: str,
        description: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> UserActivity:
        """Add an activity row to the current transaction without committing."""
        row = UserActivity(
            user_id=user_id,
            activity=ActivityType(activity).value,
            description=description,
            details=details or {},
        )
        self.session.add(row)
        return row

    async def track_note_view(
        self, note_id: UUID, user_id: UUID, ip_address: Optional[str] = None, user_agent: Optional[str] = None
    ) -> bool:
        try:
            async with unit_of_work(self.session):
                await self.analytics_repo.add_view(
                    NoteView(
                        note_id=note_id,
                        user_id=user_id,
                        ip_address=ip_address,
                        user_agent=user_agent[:MAX_USER_AGENT_LENGTH] if user_agent else None,
                    )
                )
        except Exception as e:
            logger.error(f"Failed to track view of note {note_id}: {e}")
            return False

        logger.debug(f"Note view tracked: {note_id} by {user_id}")
        return True

    async def get_note_analytics(self, note_id: UUID, days: int = 30) -> NoteAnalytics:
        if await self.note_repo.get_by_id(note_id) is None:
            raise NotFoundError("Note not found")

        return NoteAnalytics(
            total_views=await self.analytics_repo.count_views(note_id=note_id),
            recent_views=await self.analytics_repo.count_views(note_id=note_id, since=_period_start(days)),
            unique_viewers=await self.analytics_repo.count_unique_viewers(note_id),
            period=f"{days} days",
        )

    async def get_user_analytics(self, user_id: UUID, days: int = 30) -> UserAnalytics:
        if await self.user_repo.get_by_id(user_id) is None:
            raise NotFoundError("User not found")

        since = _period_start(days)
        breakdown = await self.analytics_repo.activity_breakdown(user_id, since)
        return UserAnalytics(
            total_activities=await self.analytics_repo.count_activities(user_id=user_id),
            recent_activities=await self.analytics_repo.count_activities(user_id=user_id, since=since),
            note_views=await self.analytics_repo.count_views(user_id=user_id, since=since),
            activity_breakdown=[ActivityCount(activity=activity, count=count) for activity, count in breakdown],
            period=f"{days} days",
        )

    async def get_system_analytics(self, days: int = 7) -> SystemAnalytics:
        since = _period_start(days)
        return SystemAnalytics(
            total_users=await self.user_repo.count(),
            active_users=await self.analytics_repo.count_active_users(since),
            total_notes=await self.note_repo.count(),
            total_views=await self.analytics_repo.count_views(since=since),
            period=f"{days} days",
        )
