"""
Service layer interfaces and implementations.

Services own transactions: repositories flush, services commit through
``unit_of_work``.
"""

from .interfaces import (
    IAdminService,
    IAnalyticsService,
    IAuthService,
    IHealthService,
    INoteService,
    INotificationService,
    ISharingService,
)

from .admin_service import AdminService
from .analytics_service import AnalyticsService
from .auth_service import AuthService
from .health_service import HealthService
from .note_service import NoteService
from .notification_service import NotificationService
from .sharing_service import SharingService
from .unit_of_work import unit_of_work

__all__ = [
    # Interfaces
    "IAdminService",
    "IAnalyticsService",
    "IAuthService",
    "IHealthService",
    "INoteService",
    "INotificationService",
    "ISharingService",

    # Implementations
    "AdminService",
    "AnalyticsService",
    "AuthService",
    "HealthService",
    "NoteService",
    "NotificationService",
    "SharingService",
    "unit_of_work",
]
