"""Service factories used as FastAPI dependencies.

The realtime hub and mail queue are resolved through their own dependencies
so tests can override them with fakes.
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.mail_queue import MailQueue, get_mail_queue
from ..core.realtime import RealtimeHub, get_realtime_hub
from ..core.services import (
    AdminService,
    AnalyticsService,
    AuthService,
    HealthService,
    NoteService,
    NotificationService,
    SharingService,
)
from ..database import get_db_session


def get_auth_service(session: AsyncSession = Depends(get_db_session)) -> AuthService:
    return AuthService(session)


def get_notification_service(
    session: AsyncSession = Depends(get_db_session),
    hub: RealtimeHub = Depends(get_realtime_hub),
    mail_queue: MailQueue = Depends(get_mail_queue),
) -> NotificationService:
    return NotificationService(session, hub=hub, mail_queue=mail_queue)


def get_note_service(
    session: AsyncSession = Depends(get_db_session),
    notifications: NotificationService = Depends(get_notification_service),
) -> NoteService:
    return NoteService(session, notifications=notifications)


def get_sharing_service(
    session: AsyncSession = Depends(get_db_session),
    notifications: NotificationService = Depends(get_notification_service),
) -> SharingService:
    return SharingService(session, notifications=notifications)


def get_admin_service(
    session: AsyncSession = Depends(get_db_session),
    notifications: NotificationService = Depends(get_notification_service),
    hub: RealtimeHub = Depends(get_realtime_hub),
) -> AdminService:
    return AdminService(session, notifications=notifications, hub=hub)


def get_analytics_service(session: AsyncSession = Depends(get_db_session)) -> AnalyticsService:
    return AnalyticsService(session)


def get_health_service(
    session: AsyncSession = Depends(get_db_session),
    hub: RealtimeHub = Depends(get_realtime_hub),
) -> HealthService:
    return HealthService(session, hub=hub)
