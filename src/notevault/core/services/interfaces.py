"""
Service interfaces for NoteVault.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional
from uuid import UUID

from ..schemas.admin import (
    AdminUserQuery,
    AnnouncementRequest,
    AnnouncementResponse,
    RecentActivity,
    SystemStats,
)
from ..schemas.analytics import NoteAnalytics, SystemAnalytics, UserAnalytics
from ..schemas.auth import (
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
from ..schemas.common import HealthCheckResponse, Page
from ..schemas.notes import NoteCreate, NoteQuery, NoteResponse, NoteUpdate, VersionResponse
from ..schemas.notifications import NotificationQuery, NotificationResponse
from ..schemas.sharing import NoteSharesResponse, ShareNoteRequest


class IAuthService(ABC):
    """Accounts, tokens and identity resolution."""

    @abstractmethod
    async def register_user(self, request: RegisterRequest) -> UserResponse:
        pass

    @abstractmethod
    async def authenticate_user(self, request: LoginRequest) -> TokenResponse:
        """Login user and return JWT tokens."""
        pass

    @abstractmethod
    async def refresh_token(self, request: RefreshTokenRequest) -> TokenResponse:
        """Rotate a refresh token into a new token pair."""
        pass

    @abstractmethod
    async def get_current_user(self, user_id: UUID) -> UserResponse:
        pass

    @abstractmethod
    async def update_user_profile(self, user_id: UUID, request: UserUpdateRequest) -> UserResponse:
        pass

    @abstractmethod
    async def change_password(self, user_id: UUID, request: PasswordChangeRequest) -> bool:
        pass

    @abstractmethod
    async def logout_user(self, user_id: UUID, access_token: str) -> bool:
        pass

    @abstractmethod
    async def delete_account(self, user_id: UUID, access_token: Optional[str] = None) -> bool:
        """Disable the caller's own account and free its e-mail."""
        pass

    @abstractmethod
    async def resolve_identity(self, token: str) -> Identity:
        """Bearer credential -> active identity, or UnauthorizedError."""
        pass


class INoteService(ABC):
    """Note lifecycle: CRUD, versions, listing and search."""

    @abstractmethod
    async def create_note(self, user_id: UUID, request: NoteCreate) -> NoteResponse:
        pass

    @abstractmethod
    async def get_note(
        self, note_id: UUID, user_id: UUID, ip_address: Optional[str] = None, user_agent: Optional[str] = None
    ) -> NoteResponse:
        pass

    @abstractmethod
    async def update_note(
        self, note_id: UUID, user_id: UUID, request: NoteUpdate, as_admin: bool = False
    ) -> NoteResponse:
        pass

    @abstractmethod
    async def delete_note(self, note_id: UUID, user_id: UUID) -> bool:
        pass

    @abstractmethod
    async def list_versions(self, note_id: UUID, user_id: UUID) -> List[VersionResponse]:
        pass

    @abstractmethod
    async def restore_version(self, note_id: UUID, version: int, user_id: UUID) -> NoteResponse:
        pass

    @abstractmethod
    async def list_notes(self, user_id: UUID, query: NoteQuery) -> Page[NoteResponse]:
        pass

    @abstractmethod
    async def search_notes(self, user_id: UUID, query: NoteQuery) -> Page[NoteResponse]:
        pass

    @abstractmethod
    async def suggest(self, user_id: UUID, query: str) -> List[str]:
        pass

    @abstractmethod
    async def get_available_tags(self, user_id: UUID) -> List[str]:
        pass


class ISharingService(ABC):
    """Note sharing service."""

    @abstractmethod
    async def share_note(self, note_id: UUID, user_id: UUID, request: ShareNoteRequest) -> NoteResponse:
        """Replace the note's grant list."""
        pass

    @abstractmethod
    async def list_note_shares(self, note_id: UUID, user_id: UUID) -> NoteSharesResponse:
        pass

    @abstractmethod
    async def list_shared_with_me(self, user_id: UUID, page: int = 1, limit: int = 10) -> Page[NoteResponse]:
        pass

    @abstractmethod
    async def find_shareable_users(self, user_id: UUID, name: Optional[str] = None) -> List[UserSummary]:
        pass


class INotificationService(ABC):
    """Notification inbox and dispatch."""

    @abstractmethod
    async def notify(
        self, recipient_id: UUID, notification_type: str, title: str, message: str, payload: Dict[str, Any]
    ) -> NotificationResponse:
        pass

    @abstractmethod
    async def list_notifications(self, user_id: UUID, query: NotificationQuery) -> Page[NotificationResponse]:
        pass

    @abstractmethod
    async def mark_read(self, notification_id: UUID, user_id: UUID) -> NotificationResponse:
        pass

    @abstractmethod
    async def mark_all_read(self, user_id: UUID) -> int:
        pass

    @abstractmethod
    async def unread_count(self, user_id: UUID) -> int:
        pass

    @abstractmethod
    async def delete_notification(self, notification_id: UUID, user_id: UUID) -> bool:
        pass


class IAdminService(ABC):
    """Admin console."""

    @abstractmethod
    async def get_system_stats(self) -> SystemStats:
        pass

    @abstractmethod
    async def list_users(self, query: AdminUserQuery) -> Page[UserResponse]:
        pass

    @abstractmethod
    async def toggle_user_status(self, user_id: UUID, admin_id: UUID) -> UserResponse:
        pass

    @abstractmethod
    async def change_user_role(self, user_id: UUID, role: str, admin_id: UUID) -> UserResponse:
        pass

    @abstractmethod
    async def delete_user(self, user_id: UUID, admin_id: UUID) -> bool:
        pass

    @abstractmethod
    async def list_all_notes(self, query: NoteQuery) -> Page[NoteResponse]:
        pass

    @abstractmethod
    async def update_note(self, note_id: UUID, request: NoteUpdate, admin_id: UUID) -> NoteResponse:
        pass

    @abstractmethod
    async def delete_note(self, note_id: UUID, admin_id: UUID) -> bool:
        pass

    @abstractmethod
    async def get_recent_activity(self, limit: int = 10) -> RecentActivity:
        pass

    @abstractmethod
    async def announce(self, request: AnnouncementRequest) -> AnnouncementResponse:
        pass


class IHealthService(ABC):
    """Health check service."""

    @abstractmethod
    async def get_health_status(self) -> HealthCheckResponse:
        """Get app health status."""
        pass

    @abstractmethod
    async def check_database_health(self) -> Dict[str, Any]:
        """Check DB connection."""
        pass

    @abstractmethod
    async def check_redis_health(self) -> Dict[str, Any]:
        """Check Redis connection."""
        pass


class IAnalyticsService(ABC):
    """Note views, user activity and the aggregates built on them."""

    @abstractmethod
    async def track_note_view(
        self, note_id: UUID, user_id: UUID, ip_address: Optional[str] = None, user_agent: Optional[str] = None
    ) -> bool:
        pass

    @abstractmethod
    async def get_note_analytics(self, note_id: UUID, days: int = 30) -> NoteAnalytics:
        pass

    @abstractmethod
    async def get_user_analytics(self, user_id: UUID, days: int = 30) -> UserAnalytics:
        pass

    @abstractmethod
    async def get_system_analytics(self, days: int = 7) -> SystemAnalytics:
        pass
