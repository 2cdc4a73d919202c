"""Note service implementation."""

import logging
import re
from typing import List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from ...config import get_settings
from ..access import ensure_readable, ensure_writable
from ..exceptions import NotFoundError
from ..models.analytics import ActivityType
from ..models.note import Note
from ..repositories.note_repository import NoteFilter, NoteRepository
from ..repositories.user_repository import UserRepository
from ..repositories.version_repository import NoteVersionRepository
from ..schemas.common import Page
from ..schemas.notes import NoteCreate, NoteQuery, NoteResponse, NoteUpdate, VersionResponse
from .analytics_service import AnalyticsService
from .interfaces import INoteService
from .notification_service import NotificationService
from .unit_of_work import unit_of_work

logger = logging.getLogger(__name__)

MIN_SUGGESTION_QUERY = 2
SUGGESTION_SOURCE_NOTES = 10

_WORD_EDGES = re.compile(r"^\W+|\W+$")


class NoteService(INoteService):
    """
    Note lifecycle: create, edit, restore, delete, list and search.

    A version row is written whenever a note's title or body changes, and
    never otherwise. Version numbers only grow; restoring an old version
    writes its content as a new top version.
    """

    def __init__(self, session: AsyncSession, notifications: Optional[NotificationService] = None):
        self.session = session
        self.note_repo = NoteRepository(session)
        self.version_repo = NoteVersionRepository(session)
        self.user_repo = UserRepository(session)
        self.notifications = notifications or NotificationService(session)
        self.analytics = AnalyticsService(session)
        self.settings = get_settings()

    async def _reload(self, note_id: UUID) -> Note:
        note = await self.note_repo.get_by_id(note_id, refresh=True)
        if note is None:
            raise NotFoundError("Note not found")
        return note

    async def create_note(self, user_id: UUID, request: NoteCreate) -> NoteResponse:
        """Create a note together with its first version."""
        async with unit_of_work(self.session):
            note = Note(
                title=request.title,
                body=request.body,
                visibility=request.visibility.value,
                is_archived=False,
                author_id=user_id,
            )
            note.set_tags(request.tags)
            await self.note_repo.add(note)
            await self.version_repo.add_snapshot(note, created_by=user_id)
            note_id = note.id
            self.analytics.stage_activity(user_id, ActivityType.NOTE_CREATE, details={"noteId": str(note_id)})

        logger.info(f"Note {note_id} created by {user_id}", extra={"note_id": str(note_id), "user_id": str(user_id)})
        note = await self._reload(note_id)
        return NoteResponse.from_note(note, user_id)

    async def get_note(
        self, note_id: UUID, user_id: UUID, ip_address: Optional[str] = None, user_agent: Optional[str] = None
    ) -> NoteResponse:
        """Read one note and record the view."""
        note = ensure_readable(await self.note_repo.get_by_id(note_id), user_id)
        response = NoteResponse.from_note(note, user_id)
        await self.analytics.track_note_view(note_id, user_id, ip_address, user_agent)
        return response

    async def update_note(
        self, note_id: UUID, user_id: UUID, request: NoteUpdate, as_admin: bool = False
    ) -> NoteResponse:
        """
        Apply the provided fields.

        Content changes (title or body) add a version and notify the current
        grantees. Tags, visibility and the archive flag are metadata and do
        neither. ``as_admin`` skips the author check; the version and the
        notifications are then credited to the admin.
        """
        changes = request.provided()
        staged = []

        async with unit_of_work(self.session):
            note = await self.note_repo.get_by_id(note_id, for_update=True)
            if as_admin:
                if note is None:
                    raise NotFoundError("Note not found")
                actor = await self.user_repo.get_by_id(user_id)
            else:
                note = ensure_writable(note, user_id)
                actor = note.author
            previous_title, previous_body = note.title, note.body

            if "title" in changes:
                note.title = changes["title"]
            if "body" in changes:
                note.body = changes["body"]
            if "tags" in changes:
                note.set_tags(changes["tags"])
            if "visibility" in changes:
                note.visibility = request.visibility.value
            if "is_archived" in changes:
                note.is_archived = changes["is_archived"]
            await self.session.flush()

            content_changed = note.title != previous_title or note.body != previous_body
            if content_changed:
                await self.version_repo.add_snapshot(note, created_by=user_id)
                staged = self.notifications.stage_note_updated(note, actor, note.grantee_ids)
            if changes:
                self.analytics.stage_activity(
                    user_id,
                    ActivityType.NOTE_UPDATE,
                    details={"noteId": str(note_id), "fields": sorted(changes), "contentChanged": content_changed},
                )

        note = await self._reload(note_id)
        if content_changed:
            logger.info(
                f"Note {note_id} updated to version {note.latest_version}",
                extra={"note_id": str(note_id), "user_id": str(user_id)},
            )
            await self.notifications.deliver(staged)
            await self.notifications.push_note_updated(note, note.grantee_ids, user_id)
        return NoteResponse.from_note(note, None if as_admin else user_id)

    async def delete_note(self, note_id: UUID, user_id: UUID) -> bool:
        """Delete the note with its versions, tags and grants. Grantees are told."""
        async with unit_of_work(self.session):
            note = ensure_writable(await self.note_repo.get_by_id(note_id, for_update=True), user_id)
            staged = self.notifications.stage_note_deleted(note, note.author, note.grantee_ids)
            self.analytics.stage_activity(
                user_id, ActivityType.NOTE_DELETE, description=note.title, details={"noteId": str(note_id)}
            )
            await self.note_repo.delete(note)

        logger.info(f"Note {note_id} deleted by {user_id}", extra={"note_id": str(note_id), "user_id": str(user_id)})
        await self.notifications.deliver(staged)
        return True

    async def list_versions(self, note_id: UUID, user_id: UUID) -> List[VersionResponse]:
        ensure_readable(await self.note_repo.get_by_id(note_id), user_id)
        versions = await self.version_repo.list_for_note(note_id)
        return [VersionResponse.from_version(version) for version in versions]

    async def restore_version(self, note_id: UUID, version: int, user_id: UUID) -> NoteResponse:
        """Copy an old version's content onto the note as a new top version."""
        staged = []

        async with unit_of_work(self.session):
            note = ensure_writable(await self.note_repo.get_by_id(note_id, for_update=True), user_id)
            target = await self.version_repo.get(note_id, version)
            if target is None:
                raise NotFoundError(f"Version {version} not found for this note")

            content_changed = not target.same_content(note.title, note.body)
            note.title = target.title
            note.body = target.body
            await self.version_repo.add_snapshot(note, created_by=user_id)
            if content_changed:
                staged = self.notifications.stage_note_updated(note, note.author, note.grantee_ids)
            self.analytics.stage_activity(
                user_id, ActivityType.NOTE_RESTORE, details={"noteId": str(note_id), "version": version}
            )

        note = await self._reload(note_id)
        logger.info(
            f"Note {note_id} restored from version {version} as version {note.latest_version}",
            extra={"note_id": str(note_id), "user_id": str(user_id)},
        )
        if content_changed:
            await self.notifications.deliver(staged)
            await self.notifications.push_note_updated(note, note.grantee_ids, user_id)
        return NoteResponse.from_note(note, user_id)

    def _filters(self, query: NoteQuery, match_tags: bool = False) -> NoteFilter:
        return NoteFilter(
            search=query.search,
            tags=query.tags,
            visibility=query.visibility.value if query.visibility else None,
            author_id=query.author_id,
            is_archived=query.is_archived,
            match_tags=match_tags,
            sort_by=query.sort_by,
            sort_order=query.sort_order,
        )

    async def _list(self, user_id: UUID, query: NoteQuery, match_tags: bool) -> Page[NoteResponse]:
        notes, total = await self.note_repo.list_readable(
            user_id, self._filters(query, match_tags), page=query.page, per_page=query.limit
        )
        items = [NoteResponse.from_note(note, user_id) for note in notes]
        return Page.create(items, total, query.page, query.limit)

    async def list_notes(self, user_id: UUID, query: NoteQuery) -> Page[NoteResponse]:
        """Readable notes; anything the user may not read is left out."""
        return await self._list(user_id, query, match_tags=False)

    async def search_notes(self, user_id: UUID, query: NoteQuery) -> Page[NoteResponse]:
        """Like ``list_notes`` but the search term also matches a tag exactly."""
        return await self._list(user_id, query, match_tags=True)

    async def suggest(self, user_id: UUID, query: str) -> List[str]:
        """Title words and tags containing ``query``, from notes the user can read."""
        term = (query or "").strip().lower()
        if len(term) < MIN_SUGGESTION_QUERY:
            return []

        notes = await self.note_repo.suggestion_sources(user_id, term, limit=SUGGESTION_SOURCE_NOTES)
        suggestions = []
        for note in notes:
            for word in note.title.lower().split():
                word = _WORD_EDGES.sub("", word)
                if len(word) > 2 and term in word and word not in suggestions:
                    suggestions.append(word)
            for tag in note.tags:
                if term in tag and tag not in suggestions:
                    suggestions.append(tag)

        return suggestions[: self.settings.suggestion_limit]

    async def get_available_tags(self, user_id: UUID) -> List[str]:
        return await self.note_repo.tags_for_author(user_id)
