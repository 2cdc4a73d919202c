"""Notification dispatcher and inbox service."""

import logging
from typing import Any, Dict, Iterable, List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from ...config import get_settings
from ..exceptions import NotFoundError
from ..mail_queue import MailQueue, get_mail_queue
from ..models.note import Note
from ..models.notification import Notification, NotificationType
from ..models.user import User
from ..realtime import RealtimeHub, get_realtime_hub
from ..repositories.notification_repository import NotificationRepository
from ..repositories.user_repository import UserRepository
from ..schemas.common import Page
from ..schemas.notifications import NotificationQuery, NotificationResponse
from .interfaces import INotificationService
from .unit_of_work import unit_of_work

logger = logging.getLogger(__name__)

FALLBACK_ACTOR_NAME = "Someone"


class NotificationService(INotificationService):
    """
    Persists notifications and pushes them out.

    Rows are staged inside the caller's transaction and delivered once it has
    committed. Delivery (socket push and e-mail job) is best effort: failures
    are logged and never reach the caller.
    """

    def __init__(
        self,
        session: AsyncSession,
        hub: Optional[RealtimeHub] = None,
        mail_queue: Optional[MailQueue] = None,
    ):
        self.session = session
        self.notification_repo = NotificationRepository(session)
        self.user_repo = UserRepository(session)
        self.hub = hub or get_realtime_hub()
        self.mail_queue = mail_queue or get_mail_queue()
        self.settings = get_settings()

    # staging / delivery

    def stage(
        self, recipient_id: UUID, notification_type: str, title: str, message: str, payload: Dict[str, Any]
    ) -> Notification:
        """Add a row to the current transaction without committing."""
        row = Notification(
            user_id=recipient_id,
            type=NotificationType(notification_type).value,
            title=title,
            message=message,
            payload=payload,
            is_read=False,
        )
        self.session.add(row)
        return row

    def stage_note_shared(self, note: Note, actor: Optional[User], recipient_ids: Iterable[UUID]) -> List[Notification]:
        name = actor.name if actor else FALLBACK_ACTOR_NAME
        return [
            self.stage(
                recipient_id,
                NotificationType.NOTE_SHARED.value,
                "Note shared with you",
                f'{name} shared a note "{note.title}" with you',
                {"noteId": str(note.id), "actorId": str(note.author_id), "noteTitle": note.title},
            )
            for recipient_id in recipient_ids
        ]

    def stage_note_updated(self, note: Note, actor: Optional[User], recipient_ids: Iterable[UUID]) -> List[Notification]:
        name = actor.name if actor else FALLBACK_ACTOR_NAME
        return [
            self.stage(
                recipient_id,
                NotificationType.NOTE_UPDATED.value,
                "Note updated",
                f'{name} updated the note "{note.title}"',
                {"noteId": str(note.id), "actorId": str(actor.id if actor else note.author_id), "noteTitle": note.title},
            )
            for recipient_id in recipient_ids
            if recipient_id != note.author_id
        ]

    def stage_note_deleted(self, note: Note, actor: Optional[User], recipient_ids: Iterable[UUID]) -> List[Notification]:
        name = actor.name if actor else FALLBACK_ACTOR_NAME
        return [
            self.stage(
                recipient_id,
                NotificationType.NOTE_DELETED.value,
                "Note deleted",
                f'{name} deleted the note "{note.title}"',
                {"noteId": str(note.id), "actorId": str(actor.id if actor else note.author_id), "noteTitle": note.title},
            )
            for recipient_id in recipient_ids
            if recipient_id != note.author_id
        ]

    async def deliver(self, rows: List[Notification]) -> int:
        """Push committed rows to their recipients. Returns how many reached a live socket."""
        if not rows:
            return 0

        pushed = 0
        for row in rows:
            try:
                if await self.hub.send_to_user(row.user_id, "notification", row.to_event()):
                    pushed += 1
            except Exception as e:
                logger.warning(f"Realtime push of notification {row.id} failed: {e}")

        await self._queue_emails(rows)
        logger.info(f"Delivered {len(rows)} notifications, {pushed} pushed live")
        return pushed

    async def _queue_emails(self, rows: List[Notification]) -> None:
        try:
            recipients = {user.id: user for user in await self.user_repo.get_by_ids({row.user_id for row in rows})}
        except Exception as e:
            logger.warning(f"Could not load notification e-mail recipients: {e}")
            return

        for row in rows:
            recipient = recipients.get(row.user_id)
            if recipient is None or not recipient.is_active:
                continue
            try:
                await self.mail_queue.enqueue_notification_email(
                    recipient.email, recipient.name, row.type, row.title, row.message, row.payload or {}
                )
            except Exception as e:
                logger.warning(f"Failed to queue notification e-mail for user {row.user_id}: {e}")

    async def push_note_updated(self, note: Note, recipient_ids: Iterable[UUID], actor_id: UUID) -> int:
        """Multicast a `note-updated` event to the note's grantees."""
        event = {
            "noteId": str(note.id),
            "title": note.title,
            "updatedBy": str(actor_id),
            "updatedAt": note.updated_at.isoformat() if note.updated_at else None,
        }
        try:
            return await self.hub.send_to_users(
                [user_id for user_id in recipient_ids if user_id != note.author_id], "note-updated", event
            )
        except Exception as e:
            logger.warning(f"note-updated multicast for note {note.id} failed: {e}")
            return 0

    # inbox

    async def notify(
        self, recipient_id: UUID, notification_type: str, title: str, message: str, payload: Dict[str, Any]
    ) -> NotificationResponse:
        """Persist one notification, commit it, then deliver it."""
        async with unit_of_work(self.session):
            row = self.stage(recipient_id, notification_type, title, message, payload)
        await self.deliver([row])
        return NotificationResponse.model_validate(row)

    async def list_notifications(self, user_id: UUID, query: NotificationQuery) -> Page[NotificationResponse]:
        rows, total = await self.notification_repo.list_for_user(
            user_id,
            page=query.page,
            per_page=query.limit,
            notification_type=query.type.value if query.type else None,
            is_read=query.is_read,
            newest_first=query.sort_order == "desc",
        )
        items = [NotificationResponse.model_validate(row) for row in rows]
        return Page.create(items, total, query.page, query.limit)

    async def mark_read(self, notification_id: UUID, user_id: UUID) -> NotificationResponse:
        async with unit_of_work(self.session):
            row = await self.notification_repo.get_for_user(notification_id, user_id)
            if row is None:
                raise NotFoundError("Notification not found")
            row.mark_read()
        return NotificationResponse.model_validate(row)

    async def mark_all_read(self, user_id: UUID) -> int:
        async with unit_of_work(self.session):
            count = await self.notification_repo.mark_all_read(user_id)
        logger.info(f"Marked {count} notifications read for user {user_id}")
        return count

    async def unread_count(self, user_id: UUID) -> int:
        return await self.notification_repo.unread_count(user_id)

    async def delete_notification(self, notification_id: UUID, user_id: UUID) -> bool:
        async with unit_of_work(self.session):
            row = await self.notification_repo.get_for_user(notification_id, user_id)
            if row is None:
                raise NotFoundError("Notification not found")
            await self.notification_repo.delete(row)
        return True
