"""Analytics repository: note views and user activity."""

from datetime import datetime
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import distinct, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.analytics import NoteView, UserActivity


class AnalyticsRepository:
    """Counts over the view and activity tables. Flushes, never commits."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def add_view(self, view: NoteView) -> NoteView:
        self.session.add(view)
        await self.session.flush()
        return view

    async def count_views(
        self,
        note_id: Optional[UUID] = None,
        user_id: Optional[UUID] = None,
        since: Optional[datetime] = None,
    ) -> int:
        stmt = select(func.count(NoteView.id))
        if note_id:
            stmt = stmt.where(NoteView.note_id == note_id)
        if user_id:
            stmt = stmt.where(NoteView.user_id == user_id)
        if since:
            stmt = stmt.where(NoteView.created_at >= since)
        return (await self.session.execute(stmt)).scalar_one()

    async def count_unique_viewers(self, note_id: UUID) -> int:
        stmt = select(func.count(distinct(NoteView.user_id))).where(NoteView.note_id == note_id)
        return (await self.session.execute(stmt)).scalar_one()

    async def count_activities(self, user_id: Optional[UUID] = None, since: Optional[datetime] = None) -> int:
        stmt = select(func.count(UserActivity.id))
        if user_id:
            stmt = stmt.where(UserActivity.user_id == user_id)
        if since:
            stmt = stmt.where(UserActivity.created_at >= since)
        return (await self.session.execute(stmt)).scalar_one()

    async def activity_breakdown(self, user_id: UUID, since: datetime) -> List[Tuple[str, int]]:
        """(activity, count) pairs, most frequent first."""
        count = func.count(UserActivity.id)
        stmt = (
            select(UserActivity.activity, count)
            .where(UserActivity.user_id == user_id, UserActivity.created_at >= since)
            .group_by(UserActivity.activity)
            .order_by(count.desc(), UserActivity.activity)
        )
        result = await self.session.execute(stmt)
        return [(activity, total) for activity, total in result.all()]

    async def count_active_users(self, since: datetime) -> int:
        """Distinct users with at least one activity since ``since``."""
        stmt = select(func.count(distinct(UserActivity.user_id))).where(UserActivity.created_at >= since)
        return (await self.session.execute(stmt)).scalar_one()
