"""Refresh token repository for database operations."""

from typing import Optional
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.base import utcnow
from ..models.refresh_token import RefreshToken


class RefreshTokenRepository:
    """Repository for refresh tokens. Flushes, never commits."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def issue(self, user_id: UUID, expires_days: int) -> RefreshToken:
        token = RefreshToken.issue(user_id, expires_days)
        self.session.add(token)
        await self.session.flush()
        return token

    async def get_by_token(self, token: str) -> Optional[RefreshToken]:
        stmt = select(RefreshToken).where(RefreshToken.token == token)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def revoke_user_tokens(self, user_id: UUID, reason: str) -> int:
        """Deactivate every live token of a user."""
        stmt = (
            update(RefreshToken)
            .where(RefreshToken.user_id == user_id, RefreshToken.is_active.is_(True))
            .values(is_active=False, revoked_at=utcnow(), revocation_reason=reason)
            .execution_options(synchronize_session="fetch")
        )
        result = await self.session.execute(stmt)
        return result.rowcount
