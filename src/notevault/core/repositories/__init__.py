"""Repository layer for data access."""

from .analytics_repository import AnalyticsRepository
from .note_repository import NoteFilter, NoteRepository
from .notification_repository import NotificationRepository
from .refresh_token_repository import RefreshTokenRepository
from .share_repository import ShareRepository
from .user_repository import UserRepository
from .version_repository import NoteVersionRepository

__all__ = [
    "UserRepository",
    "NoteRepository",
    "NoteFilter",
    "NoteVersionRepository",
    "ShareRepository",
    "NotificationRepository",
    "RefreshTokenRepository",
    "AnalyticsRepository",
]
