"""Admin console schemas."""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from ..models.user import UserRole
from .auth import UserSummary


class UserStats(BaseModel):
    total: int
    active: int
    inactive: int


class NoteStats(BaseModel):
    total: int
    public: int
    shared: int
    private: int


class NotificationStats(BaseModel):
    total: int
    unread: int
    read: int


class SystemStats(BaseModel):
    users: UserStats
    notes: NoteStats
    notifications: NotificationStats
    online_users: int = 0


class AdminUserQuery(BaseModel):
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=10, ge=1, le=100)
    search: Optional[str] = Field(default=None, max_length=100)
    role: Optional[UserRole] = None
    is_active: Optional[bool] = None


class ChangeRoleRequest(BaseModel):
    role: UserRole


class RecentNote(BaseModel):
    id: uuid.UUID
    title: str
    author_name: Optional[str] = None
    visibility: str
    created_at: datetime


class RecentActivity(BaseModel):
    recent_notes: List[RecentNote]
    recent_users: List[UserSummary]


class AnnouncementRequest(BaseModel):
    """System-wide message to every active user."""

    title: str = Field(min_length=1, max_length=200)
    message: str = Field(min_length=1, max_length=2000)


class AnnouncementResponse(BaseModel):
    recipients: int = Field(description="Notification rows written")
    delivered: int = Field(description="Sockets reached by the live broadcast")
