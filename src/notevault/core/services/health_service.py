"""Health service implementation."""

import asyncio
from typing import Any, Dict, Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from ... import __version__
from ...config import get_settings
from ..realtime import RealtimeHub, get_realtime_hub
from ..redis_client import RedisClient, get_redis_client
from ..schemas.common import HealthCheckResponse
from .interfaces import IHealthService


class HealthService(IHealthService):
    """
    Health check service implementation.

    The database is required; Redis only backs the token blacklist and the
    e-mail queue, so losing it degrades the service instead of failing it.
    """

    def __init__(
        self,
        session: AsyncSession,
        redis_client: Optional[RedisClient] = None,
        hub: Optional[RealtimeHub] = None,
    ):
        self.session = session
        self.redis_client = redis_client or get_redis_client()
        self.hub = hub or get_realtime_hub()
        self.settings = get_settings()

    async def get_health_status(self) -> HealthCheckResponse:
        """Get app health status."""
        db_health = await self.check_database_health()
        redis_health = await self.check_redis_health()
        realtime_health = await self.check_realtime_health()

        overall_status = "healthy"
        if not db_health["connected"]:
            overall_status = "unhealthy"
        elif not redis_health["connected"]:
            overall_status = "degraded"

        return HealthCheckResponse(
            status=overall_status,
            version=__version__,
            checks={"database": db_health, "redis": redis_health, "realtime": realtime_health},
        )

    async def check_database_health(self) -> Dict[str, Any]:
        """Check DB connection."""
        try:
            start_time = asyncio.get_running_loop().time()
            result = await self.session.execute(text("SELECT 1"))
            result.scalar()
            response_time = (asyncio.get_running_loop().time() - start_time) * 1000

            return {
                "connected": True,
                "status": "healthy",
                "response_time_ms": round(response_time, 2),
            }
        except Exception as e:
            return {
                "connected": False,
                "status": "unhealthy",
                "error": type(e).__name__,
                "response_time_ms": 0.0,
            }

    async def check_redis_health(self) -> Dict[str, Any]:
        """Check Redis connection."""
        if not self.redis_client.is_connected:
            return {"connected": False, "status": "unavailable", "response_time_ms": None}

        start_time = asyncio.get_running_loop().time()
        alive = await self.redis_client.ping()
        response_time = (asyncio.get_running_loop().time() - start_time) * 1000
        return {
            "connected": alive,
            "status": "healthy" if alive else "unhealthy",
            "response_time_ms": round(response_time, 2) if alive else None,
        }

    async def check_realtime_health(self) -> Dict[str, Any]:
        return {"status": "healthy", "online_users": await self.hub.online_count()}
