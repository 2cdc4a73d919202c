"""User repository for database operations."""

from typing import Iterable, List, Optional
from uuid import UUID

from sqlalchemy import delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.user import User, UserRole


class UserRepository:
    """Repository for user database operations. Flushes, never commits."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_user(self, user_data: dict) -> User:
        user = User(**user_data)
        self.session.add(user)
        await self.session.flush()
        return user

    async def get_by_id(self, user_id: UUID) -> Optional[User]:
        stmt = select(User).where(User.id == user_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> Optional[User]:
        """E-mails are compared case-insensitively."""
        stmt = select(User).where(func.lower(User.email) == email.strip().lower())
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def is_email_taken(self, email: str) -> bool:
        return await self.get_by_email(email) is not None

    async def get_by_ids(self, user_ids: Iterable[UUID]) -> List[User]:
        ids = list(user_ids)
        if not ids:
            return []
        stmt = select(User).where(User.id.in_(ids))
        result = await self.session.execute(stmt)
        return list(result.scalars())

    async def count_existing(self, user_ids: Iterable[UUID]) -> int:
        ids = list(user_ids)
        if not ids:
            return 0
        stmt = select(func.count(User.id)).where(User.id.in_(ids))
        return (await self.session.execute(stmt)).scalar_one()

    async def update_user(self, user: User, update_data: dict) -> User:
        for key, value in update_data.items():
            setattr(user, key, value)
        await self.session.flush()
        return user

    async def delete_user(self, user_id: UUID) -> bool:
        """Delete by id; notes, grants and notifications go with it through FK cascades."""
        result = await self.session.execute(delete(User).where(User.id == user_id))
        return result.rowcount > 0

    async def list_users(
        self,
        page: int = 1,
        per_page: int = 10,
        search: Optional[str] = None,
        role: Optional[str] = None,
        is_active: Optional[bool] = None,
    ) -> tuple[list[User], int]:
        """Paginated listing, newest accounts first."""
        conditions = []
        if search:
            conditions.append(
                or_(User.name.icontains(search, autoescape=True), User.email.icontains(search, autoescape=True))
            )
        if role:
            conditions.append(User.role == role)
        if is_active is not None:
            conditions.append(User.is_active == is_active)

        count_stmt = select(func.count(User.id)).where(*conditions)
        total_count = (await self.session.execute(count_stmt)).scalar_one()

        stmt = (
            select(User)
            .where(*conditions)
            .order_by(User.created_at.desc(), User.id)
            .offset((page - 1) * per_page)
            .limit(per_page)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars()), total_count

    async def find_shareable(self, exclude_user_id: UUID, name: Optional[str] = None, limit: int = 20) -> List[User]:
        """Active USER-role accounts other than ``exclude_user_id``, optionally filtered by name."""
        stmt = select(User).where(
            User.is_active.is_(True),
            User.role == UserRole.USER.value,
            User.id != exclude_user_id,
        )
        if name:
            stmt = stmt.where(User.name.icontains(name, autoescape=True))
        stmt = stmt.order_by(User.name).limit(limit)
        result = await self.session.execute(stmt)
        return list(result.scalars())

    async def list_active_ids(self) -> List[UUID]:
        stmt = select(User.id).where(User.is_active.is_(True))
        result = await self.session.execute(stmt)
        return list(result.scalars())

    async def count(self, is_active: Optional[bool] = None) -> int:
        stmt = select(func.count(User.id))
        if is_active is not None:
            stmt = stmt.where(User.is_active == is_active)
        return (await self.session.execute(stmt)).scalar_one()

    async def recent(self, limit: int = 10) -> List[User]:
        stmt = select(User).order_by(User.created_at.desc(), User.id).limit(limit)
        result = await self.session.execute(stmt)
        return list(result.scalars())
