"""Note version repository."""

from typing import List, Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.note import Note
from ..models.note_version import NoteVersion


class NoteVersionRepository:
    """Snapshots are append-only: there is no update or delete here."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def next_number(self, note_id: UUID) -> int:
        stmt = select(func.max(NoteVersion.version)).where(NoteVersion.note_id == note_id)
        current = (await self.session.execute(stmt)).scalar_one_or_none()
        return (current or 0) + 1

    async def add_snapshot(self, note: Note, created_by: UUID) -> NoteVersion:
        """Record the note's current title/body as its next version."""
        number = await self.next_number(note.id) if note.id is not None else 1
        version = NoteVersion(
            version=number,
            title=note.title,
            body=note.body,
            created_by_id=created_by,
        )
        note.versions.append(version)
        await self.session.flush()
        return version

    async def get(self, note_id: UUID, version: int) -> Optional[NoteVersion]:
        stmt = select(NoteVersion).where(
            NoteVersion.note_id == note_id, NoteVersion.version == version
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_for_note(self, note_id: UUID) -> List[NoteVersion]:
        """Newest first."""
        stmt = (
            select(NoteVersion)
            .where(NoteVersion.note_id == note_id)
            .order_by(NoteVersion.version.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars())
