"""
Pydantic schemas for validating and documenting API requests and responses.

This package exposes the models used across the application to define
input/output contracts for authentication, notes, sharing, notifications,
the admin console, analytics and the common envelope/pagination formats.
"""

from .admin import (
    AdminUserQuery,
    AnnouncementRequest,
    AnnouncementResponse,
    ChangeRoleRequest,
    RecentActivity,
    SystemStats,
)
from .analytics import ActivityCount, NoteAnalytics, SystemAnalytics, UserAnalytics
from .auth import (
    Identity,
    LoginRequest,
    PasswordChangeRequest,
    RefreshTokenRequest,
    RegisterRequest,
    TokenResponse,
    UserResponse,
    UserSummary,
    UserUpdateRequest,
)
from .common import ApiResponse, CountResponse, ErrorResponse, MessageResponse, Page, PageMeta
from .notes import NoteCreate, NoteQuery, NoteResponse, NoteUpdate, VersionResponse
from .notifications import NotificationQuery, NotificationResponse
from .sharing import NoteSharesResponse, ShareGrantResponse, ShareNoteRequest

__all__ = [
    # Auth schemas
    "LoginRequest",
    "RegisterRequest",
    "RefreshTokenRequest",
    "PasswordChangeRequest",
    "UserUpdateRequest",
    "TokenResponse",
    "UserResponse",
    "UserSummary",
    "Identity",
    # Note schemas
    "NoteCreate",
    "NoteUpdate",
    "NoteResponse",
    "NoteQuery",
    "VersionResponse",
    # Sharing schemas
    "ShareNoteRequest",
    "ShareGrantResponse",
    "NoteSharesResponse",
    # Notification schemas
    "NotificationResponse",
    "NotificationQuery",
    # Admin schemas
    "SystemStats",
    "AdminUserQuery",
    "ChangeRoleRequest",
    "RecentActivity",
    "AnnouncementRequest",
    "AnnouncementResponse",
    # Analytics schemas
    "NoteAnalytics",
    "UserAnalytics",
    "SystemAnalytics",
    "ActivityCount",
    # Common schemas
    "ApiResponse",
    "Page",
    "PageMeta",
    "ErrorResponse",
    "MessageResponse",
    "CountResponse",
]
