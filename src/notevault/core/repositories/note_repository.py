"""Note repository for database operations."""

from dataclasses import dataclass, field
from typing import List, Optional
from uuid import UUID

from sqlalchemy import and_, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..access import readable_by
from ..models.note import Note, NoteTag
from ..models.share import NoteShare

SORTABLE_FIELDS = {
    "created_at": Note.created_at,
    "updated_at": Note.updated_at,
    "title": Note.title,
}


@dataclass
class NoteFilter:
    """Criteria shared by listing, search and the admin view."""

    search: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    visibility: Optional[str] = None
    author_id: Optional[UUID] = None
    is_archived: Optional[bool] = None
    # free text also matches a tag exactly
    match_tags: bool = False
    sort_by: str = "updated_at"
    sort_order: str = "desc"


class NoteRepository:
    """Repository for note database operations. Flushes, never commits."""

    def __init__(self, session: AsyncSession):
        self.session = session

    def _load_options(self):
        return (
            selectinload(Note.author),
            selectinload(Note.note_tags),
            selectinload(Note.versions),
            selectinload(Note.shares).selectinload(NoteShare.user),
        )

    async def add(self, note: Note) -> Note:
        self.session.add(note)
        await self.session.flush()
        return note

    async def get_by_id(self, note_id: UUID, refresh: bool = False, for_update: bool = False) -> Optional[Note]:
        """
        Note with author, tags, versions and grants loaded.

        ``refresh`` reloads an instance already in the session, e.g. after
        rows were written behind the ORM's back. ``for_update`` also holds a row
        lock on the note until the transaction ends and implies ``refresh``.
        """
        stmt = select(Note).options(*self._load_options()).where(Note.id == note_id)
        if for_update:
            stmt = stmt.with_for_update(of=Note)
        if refresh or for_update:
            stmt = stmt.execution_options(populate_existing=True)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def delete(self, note: Note) -> None:
        await self.session.delete(note)
        await self.session.flush()

    def _conditions(self, filters: NoteFilter) -> list:
        conditions = []
        if filters.search:
            term = filters.search.strip()
            text_match = or_(
                Note.title.icontains(term, autoescape=True),
                Note.body.icontains(term, autoescape=True),
            )
            if filters.match_tags:
                tagged = select(NoteTag.note_id).where(NoteTag.name == term.lower())
                text_match = or_(text_match, Note.id.in_(tagged))
            conditions.append(text_match)
        if filters.tags:
            any_tag = select(NoteTag.note_id).where(NoteTag.name.in_(filters.tags))
            conditions.append(Note.id.in_(any_tag))
        if filters.visibility:
            conditions.append(Note.visibility == filters.visibility)
        if filters.author_id:
            conditions.append(Note.author_id == filters.author_id)
        if filters.is_archived is not None:
            conditions.append(Note.is_archived == filters.is_archived)
        return conditions

    def _ordering(self, filters: NoteFilter):
        column = SORTABLE_FIELDS.get(filters.sort_by, Note.updated_at)
        primary = column.asc() if filters.sort_order == "asc" else column.desc()
        return primary, Note.id

    async def _page(self, conditions: list, filters: NoteFilter, page: int, per_page: int) -> tuple[List[Note], int]:
        count_stmt = select(func.count(Note.id)).where(*conditions)
        total_count = (await self.session.execute(count_stmt)).scalar_one()

        stmt = (
            select(Note)
            .options(*self._load_options())
            .where(*conditions)
            .order_by(*self._ordering(filters))
            .offset((page - 1) * per_page)
            .limit(per_page)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars()), total_count

    async def list_readable(
        self, user_id: UUID, filters: NoteFilter, page: int = 1, per_page: int = 10
    ) -> tuple[List[Note], int]:
        """Notes ``user_id`` may read, filtered and paginated."""
        conditions = [readable_by(user_id), *self._conditions(filters)]
        return await self._page(conditions, filters, page, per_page)

    async def list_all(self, filters: NoteFilter, page: int = 1, per_page: int = 10) -> tuple[List[Note], int]:
        """Every note regardless of access; admin only."""
        return await self._page(self._conditions(filters), filters, page, per_page)

    async def list_shared_with(self, user_id: UUID, page: int = 1, per_page: int = 10) -> tuple[List[Note], int]:
        """Notes other users granted to ``user_id``, most recently updated first."""
        granted = select(NoteShare.note_id).where(NoteShare.user_id == user_id)
        conditions = [Note.id.in_(granted), Note.author_id != user_id]
        return await self._page(conditions, NoteFilter(), page, per_page)

    async def suggestion_sources(self, user_id: UUID, query: str, limit: int = 10) -> List[Note]:
        """Readable notes whose title contains ``query`` or that carry a tag containing it."""
        tagged = select(NoteTag.note_id).where(NoteTag.name.icontains(query, autoescape=True))
        stmt = (
            select(Note)
            .options(selectinload(Note.note_tags))
            .where(
                and_(
                    readable_by(user_id),
                    or_(Note.title.icontains(query, autoescape=True), Note.id.in_(tagged)),
                )
            )
            .order_by(Note.updated_at.desc(), Note.id)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars())

    async def tags_for_author(self, author_id: UUID) -> List[str]:
        stmt = (
            select(NoteTag.name)
            .join(Note, Note.id == NoteTag.note_id)
            .where(Note.author_id == author_id)
            .distinct()
            .order_by(NoteTag.name)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars())

    async def count(self, visibility: Optional[str] = None) -> int:
        stmt = select(func.count(Note.id))
        if visibility:
            stmt = stmt.where(Note.visibility == visibility)
        return (await self.session.execute(stmt)).scalar_one()

    async def recent(self, limit: int = 10) -> List[Note]:
        stmt = (
            select(Note)
            .options(selectinload(Note.author))
            .order_by(Note.created_at.desc(), Note.id)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars())
