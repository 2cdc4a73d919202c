"""Admin console service."""

import logging
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from ..exceptions import ForbiddenError, NotFoundError
from ..models.note import Visibility
from ..models.notification import NotificationType
from ..models.user import UserRole
from ..realtime import RealtimeHub, get_realtime_hub
from ..repositories.note_repository import NoteFilter, NoteRepository
from ..repositories.notification_repository import NotificationRepository
from ..repositories.user_repository import UserRepository
from ..schemas.admin import (
    AdminUserQuery,
    AnnouncementRequest,
    AnnouncementResponse,
    NoteStats,
    NotificationStats,
    RecentActivity,
    RecentNote,
    SystemStats,
    UserStats,
)
from ..schemas.auth import UserResponse, UserSummary
from ..schemas.common import Page
from ..schemas.notes import NoteQuery, NoteResponse, NoteUpdate
from .interfaces import IAdminService
from .note_service import NoteService
from .notification_service import NotificationService
from .unit_of_work import unit_of_work

logger = logging.getLogger(__name__)


class AdminService(IAdminService):
    """
    Operations behind the admin-role guard.

    Admins never act on their own account here: status, role and deletion of
    oneself are refused.
    """

    def __init__(
        self,
        session: AsyncSession,
        notifications: Optional[NotificationService] = None,
        hub: Optional[RealtimeHub] = None,
    ):
        self.session = session
        self.user_repo = UserRepository(session)
        self.note_repo = NoteRepository(session)
        self.notification_repo = NotificationRepository(session)
        self.hub = hub or get_realtime_hub()
        self.notifications = notifications or NotificationService(session, hub=self.hub)

    async def get_system_stats(self) -> SystemStats:
        total_users = await self.user_repo.count()
        active_users = await self.user_repo.count(is_active=True)
        total_notifications = await self.notification_repo.count()
        unread_notifications = await self.notification_repo.count(is_read=False)

        return SystemStats(
            users=UserStats(total=total_users, active=active_users, inactive=total_users - active_users),
            notes=NoteStats(
                total=await self.note_repo.count(),
                public=await self.note_repo.count(Visibility.PUBLIC.value),
                shared=await self.note_repo.count(Visibility.SHARED.value),
                private=await self.note_repo.count(Visibility.PRIVATE.value),
            ),
            notifications=NotificationStats(
                total=total_notifications,
                unread=unread_notifications,
                read=total_notifications - unread_notifications,
            ),
            online_users=await self.hub.online_count(),
        )

    async def list_users(self, query: AdminUserQuery) -> Page[UserResponse]:
        users, total = await self.user_repo.list_users(
            page=query.page,
            per_page=query.limit,
            search=query.search,
            role=query.role.value if query.role else None,
            is_active=query.is_active,
        )
        return Page.create([UserResponse.model_validate(user) for user in users], total, query.page, query.limit)

    async def _other_user(self, user_id: UUID, admin_id: UUID, action: str):
        if user_id == admin_id:
            raise ForbiddenError(f"Admins cannot {action} their own account")
        user = await self.user_repo.get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    async def toggle_user_status(self, user_id: UUID, admin_id: UUID) -> UserResponse:
        async with unit_of_work(self.session):
            user = await self._other_user(user_id, admin_id, "change the status of")
            await self.user_repo.update_user(user, {"is_active": not user.is_active})

        logger.info(f"Admin {admin_id} set user {user_id} active={user.is_active}")
        return UserResponse.model_validate(user)

    async def change_user_role(self, user_id: UUID, role: str, admin_id: UUID) -> UserResponse:
        new_role = UserRole(role).value
        async with unit_of_work(self.session):
            user = await self._other_user(user_id, admin_id, "change the role of")
            await self.user_repo.update_user(user, {"role": new_role})

        logger.info(f"Admin {admin_id} set user {user_id} role={new_role}")
        return UserResponse.model_validate(user)

    async def delete_user(self, user_id: UUID, admin_id: UUID) -> bool:
        """Remove the account; its notes, grants and notifications cascade."""
        async with unit_of_work(self.session):
            await self._other_user(user_id, admin_id, "delete")
            deleted = await self.user_repo.delete_user(user_id)

        logger.info(f"Admin {admin_id} deleted user {user_id}")
        return deleted

    async def list_all_notes(self, query: NoteQuery) -> Page[NoteResponse]:
        filters = NoteFilter(
            search=query.search,
            tags=query.tags,
            visibility=query.visibility.value if query.visibility else None,
            author_id=query.author_id,
            is_archived=query.is_archived,
            sort_by=query.sort_by,
            sort_order=query.sort_order,
        )
        notes, total = await self.note_repo.list_all(filters, page=query.page, per_page=query.limit)
        return Page.create([NoteResponse.from_note(note) for note in notes], total, query.page, query.limit)

    async def update_note(self, note_id: UUID, request: NoteUpdate, admin_id: UUID) -> NoteResponse:
        """Edit any note. Versioning and grantee notifications work as for the author."""
        note = await NoteService(self.session, notifications=self.notifications).update_note(
            note_id, admin_id, request, as_admin=True
        )
        logger.info(f"Admin {admin_id} edited note {note_id}")
        return note

    async def delete_note(self, note_id: UUID, admin_id: UUID) -> bool:
        """Remove any note; its grantees get NOTE_DELETED like on an author delete."""
        async with unit_of_work(self.session):
            note = await self.note_repo.get_by_id(note_id, for_update=True)
            if note is None:
                raise NotFoundError("Note not found")
            admin = await self.user_repo.get_by_id(admin_id)
            staged = self.notifications.stage_note_deleted(note, admin, note.grantee_ids)
            await self.note_repo.delete(note)

        logger.info(f"Admin {admin_id} deleted note {note_id}")
        await self.notifications.deliver(staged)
        return True

    async def get_recent_activity(self, limit: int = 10) -> RecentActivity:
        notes = await self.note_repo.recent(limit)
        users = await self.user_repo.recent(limit)
        return RecentActivity(
            recent_notes=[
                RecentNote(
                    id=note.id,
                    title=note.title,
                    author_name=note.author.name if note.author else None,
                    visibility=note.visibility,
                    created_at=note.created_at,
                )
                for note in notes
            ],
            recent_users=[UserSummary.model_validate(user) for user in users],
        )

    async def announce(self, request: AnnouncementRequest) -> AnnouncementResponse:
        """One SYSTEM notification per active user, then a live broadcast."""
        async with unit_of_work(self.session):
            recipient_ids = await self.user_repo.list_active_ids()
            for recipient_id in recipient_ids:
                self.notifications.stage(
                    recipient_id,
                    NotificationType.SYSTEM.value,
                    request.title,
                    request.message,
                    {"announcement": True},
                )

        event = {
            "title": request.title,
            "message": request.message,
            "sentAt": datetime.now(timezone.utc).isoformat(),
        }
        try:
            delivered = await self.hub.broadcast("system-message", event)
        except Exception as e:
            logger.warning(f"Announcement broadcast failed: {e}")
            delivered = 0

        logger.info(f"Announcement sent to {len(recipient_ids)} users, {delivered} sockets reached")
        return AnnouncementResponse(recipients=len(recipient_ids), delivered=delivered)
