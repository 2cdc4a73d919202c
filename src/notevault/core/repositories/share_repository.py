"""Share grant repository."""

from typing import List, Sequence
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..models.share import NoteShare, SharePermission


class ShareRepository:
    """Repository for note grants. Flushes, never commits."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def replace_grants(
        self, note_id: UUID, user_ids: Sequence[UUID], permission: str = SharePermission.VIEW.value
    ) -> List[NoteShare]:
        """Drop every grant on the note, then insert one per user id."""
        await self.session.execute(delete(NoteShare).where(NoteShare.note_id == note_id))
        grants = [NoteShare(note_id=note_id, user_id=user_id, permission=permission) for user_id in user_ids]
        self.session.add_all(grants)
        await self.session.flush()
        return grants

    async def list_for_note(self, note_id: UUID) -> List[NoteShare]:
        stmt = (
            select(NoteShare)
            .options(selectinload(NoteShare.user))
            .where(NoteShare.note_id == note_id)
            .order_by(NoteShare.created_at, NoteShare.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars())
