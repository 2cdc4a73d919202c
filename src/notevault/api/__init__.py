"""API routers for NoteVault."""

from .admin import router as admin_router
from .analytics import router as analytics_router
from .auth import router as auth_router
from .health import router as health_router
from .notes import router as notes_router
from .notifications import router as notifications_router
from .realtime import router as realtime_router
from .users import router as users_router

__all__ = [
    "admin_router",
    "analytics_router",
    "auth_router",
    "health_router",
    "notes_router",
    "notifications_router",
    "realtime_router",
    "users_router",
]
