"""Notification repository."""

from typing import List, Optional
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.base import utcnow
from ..models.notification import Notification


class NotificationRepository:
    """Repository for notification rows. Flushes, never commits."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_for_user(self, notification_id: UUID, user_id: UUID) -> Optional[Notification]:
        """Only returns the row when ``user_id`` is its recipient."""
        stmt = select(Notification).where(
            Notification.id == notification_id, Notification.user_id == user_id
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_for_user(
        self,
        user_id: UUID,
        page: int = 1,
        per_page: int = 20,
        notification_type: Optional[str] = None,
        is_read: Optional[bool] = None,
        newest_first: bool = True,
    ) -> tuple[List[Notification], int]:
        conditions = [Notification.user_id == user_id]
        if notification_type:
            conditions.append(Notification.type == notification_type)
        if is_read is not None:
            conditions.append(Notification.is_read == is_read)

        count_stmt = select(func.count(Notification.id)).where(*conditions)
        total_count = (await self.session.execute(count_stmt)).scalar_one()

        order = Notification.created_at.desc() if newest_first else Notification.created_at.asc()
        stmt = (
            select(Notification)
            .where(*conditions)
            .order_by(order, Notification.id)
            .offset((page - 1) * per_page)
            .limit(per_page)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars()), total_count

    async def unread_count(self, user_id: UUID) -> int:
        stmt = select(func.count(Notification.id)).where(
            Notification.user_id == user_id, Notification.is_read.is_(False)
        )
        return (await self.session.execute(stmt)).scalar_one()

    async def mark_all_read(self, user_id: UUID) -> int:
        """Flip every unread row of the user; returns how many changed."""
        stmt = (
            update(Notification)
            .where(Notification.user_id == user_id, Notification.is_read.is_(False))
            .values(is_read=True, read_at=utcnow())
            .execution_options(synchronize_session="fetch")
        )
        result = await self.session.execute(stmt)
        return result.rowcount

    async def delete(self, notification: Notification) -> None:
        await self.session.delete(notification)
        await self.session.flush()

    async def count(self, is_read: Optional[bool] = None) -> int:
        stmt = select(func.count(Notification.id))
        if is_read is not None:
            stmt = stmt.where(Notification.is_read == is_read)
        return (await self.session.execute(stmt)).scalar_one()
