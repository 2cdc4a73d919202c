"""
Database models for NoteVault.

SQLAlchemy 2.x async-friendly ORM models:
    - User: accounts with role and active flag
    - Note / NoteTag: notes and their ordered, lower-cased tags
    - NoteVersion: immutable title/body snapshots, numbered per note
    - NoteShare: VIEW grants on a note
    - Notification: per-user inbox entries
    - RefreshToken: login refresh tokens
    - NoteView / UserActivity: read tracking and the per-user activity log
"""

from .analytics import ActivityType, NoteView, UserActivity
from .base import BaseModel
from .note import Note, NoteTag, Visibility
from .note_version import NoteVersion
from .notification import Notification, NotificationType
from .refresh_token import RefreshToken
from .share import NoteShare, SharePermission
from .user import User, UserRole

__all__ = [
    "BaseModel",
    "User",
    "UserRole",
    "Note",
    "NoteTag",
    "Visibility",
    "NoteVersion",
    "NoteShare",
    "SharePermission",
    "Notification",
    "NotificationType",
    "RefreshToken",
    "NoteView",
    "UserActivity",
    "ActivityType",
]
