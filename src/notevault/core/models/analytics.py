# Note views and user activity log
import uuid
from enum import Enum
from typing import Any, Dict, Optional

from sqlalchemy import CheckConstraint, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import BaseModel
from .types import GUID, JSONPayload


class ActivityType(str, Enum):
    LOGIN = "login"
    NOTE_CREATE = "note_create"
    NOTE_UPDATE = "note_update"
    NOTE_RESTORE = "note_restore"
    NOTE_DELETE = "note_delete"
    NOTE_SHARE = "note_share"


class NoteView(BaseModel):
    """One successful read of a note; `created_at` is the view time."""

    __tablename__ = "note_views"

    note_id: Mapped[uuid.UUID] = mapped_column(
        GUID(), ForeignKey("notes.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        GUID(), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    ip_address: Mapped[Optional[str]] = mapped_column(String(45), nullable=True)
    user_agent: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    __table_args__ = (
        Index("idx_note_views_note_created", "note_id", "created_at"),
        Index("idx_note_views_user_created", "user_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<NoteView(note_id={self.note_id}, user_id={self.user_id})>"


class UserActivity(BaseModel):
    """Something a user did, for the activity breakdown."""

    __tablename__ = "user_activities"

    user_id: Mapped[uuid.UUID] = mapped_column(
        GUID(), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    activity: Mapped[str] = mapped_column(String(50), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    details: Mapped[Dict[str, Any]] = mapped_column(JSONPayload(), default=dict, nullable=False)

    __table_args__ = (
        CheckConstraint(
            "activity IN ('login', 'note_create', 'note_update', 'note_restore', 'note_delete', 'note_share')",
            name="ck_user_activities_activity",
        ),
        Index("idx_user_activities_user_created", "user_id", "created_at"),
        Index("idx_user_activities_activity", "activity"),
    )

    def __repr__(self) -> str:
        return f"<UserActivity(user_id={self.user_id}, activity={self.activity})>"
