"""Sharing service implementation."""

import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from ..access import ensure_writable
from ..exceptions import BadRequestError
from ..models.analytics import ActivityType
from ..models.note import Visibility
from ..models.share import SharePermission
from ..repositories.note_repository import NoteRepository
from ..repositories.share_repository import ShareRepository
from ..repositories.user_repository import UserRepository
from ..schemas.auth import UserSummary
from ..schemas.common import Page
from ..schemas.notes import NoteResponse
from ..schemas.sharing import NoteSharesResponse, ShareGrantResponse, ShareNoteRequest
from .analytics_service import AnalyticsService
from .interfaces import ISharingService
from .notification_service import NotificationService
from .unit_of_work import unit_of_work

logger = logging.getLogger(__name__)


class SharingService(ISharingService):
    """Sharing service implementation."""

    def __init__(self, session: AsyncSession, notifications: Optional[NotificationService] = None):
        self.session = session
        self.share_repo = ShareRepository(session)
        self.user_repo = UserRepository(session)
        self.note_repo = NoteRepository(session)
        self.notifications = notifications or NotificationService(session)
        self.analytics = AnalyticsService(session)

    async def share_note(self, note_id: UUID, user_id: UUID, request: ShareNoteRequest) -> NoteResponse:
        """
        Set the note's share list to exactly ``request.user_ids``.

        Users left out lose access. Every listed user is notified, including
        ones that already had a grant. A PRIVATE note becomes SHARED; PUBLIC
        and SHARED notes keep their visibility, also when the list is empty.
        """
        grantee_ids = request.user_ids
        staged = []

        async with unit_of_work(self.session):
            note = ensure_writable(await self.note_repo.get_by_id(note_id, for_update=True), user_id)

            # all checks run before anything is written
            if user_id in grantee_ids:
                raise BadRequestError("Cannot share a note with yourself")
            if await self.user_repo.count_existing(grantee_ids) != len(grantee_ids):
                raise BadRequestError("One or more users not found")

            await self.share_repo.replace_grants(note.id, grantee_ids, SharePermission.VIEW.value)
            if grantee_ids and note.visibility == Visibility.PRIVATE.value:
                note.visibility = Visibility.SHARED.value
            staged = self.notifications.stage_note_shared(note, note.author, grantee_ids)
            self.analytics.stage_activity(
                user_id,
                ActivityType.NOTE_SHARE,
                details={"noteId": str(note_id), "userIds": [str(grantee_id) for grantee_id in grantee_ids]},
            )

        logger.info(
            f"Note {note_id} share list set to {len(grantee_ids)} users",
            extra={"note_id": str(note_id), "user_id": str(user_id)},
        )
        note = await self.note_repo.get_by_id(note_id, refresh=True)
        await self.notifications.deliver(staged)
        return NoteResponse.from_note(note, user_id)

    async def list_note_shares(self, note_id: UUID, user_id: UUID) -> NoteSharesResponse:
        """Current grants; only the author may look."""
        note = ensure_writable(await self.note_repo.get_by_id(note_id), user_id)
        grants = await self.share_repo.list_for_note(note_id)
        return NoteSharesResponse(
            note_id=note.id,
            visibility=note.visibility,
            grants=[ShareGrantResponse.from_share(grant) for grant in grants],
        )

    async def list_shared_with_me(self, user_id: UUID, page: int = 1, limit: int = 10) -> Page[NoteResponse]:
        notes, total = await self.note_repo.list_shared_with(user_id, page=page, per_page=limit)
        items = [NoteResponse.from_note(note, user_id) for note in notes]
        return Page.create(items, total, page, limit)

    async def find_shareable_users(self, user_id: UUID, name: Optional[str] = None) -> List[UserSummary]:
        """Active regular users other than the caller, optionally filtered by name."""
        term = name.strip() if name else None
        users = await self.user_repo.find_shareable(user_id, term or None)
        return [UserSummary.model_validate(user) for user in users]
