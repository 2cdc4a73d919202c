"""Authentication middleware."""

from typing import Optional
from uuid import UUID

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import ForbiddenError, UnauthorizedError
from ..core.schemas.auth import Identity
from ..core.services.auth_service import AuthService
from ..database import get_db_session


class JWTBearer(HTTPBearer):
    """Bearer scheme that answers 401 instead of FastAPI's default 403."""

    def __init__(self, auto_error: bool = False):
        super().__init__(auto_error=auto_error)

    async def __call__(self, request: Request) -> str:
        credentials: Optional[HTTPAuthorizationCredentials] = await super().__call__(request)
        if not credentials or not credentials.credentials:
            raise UnauthorizedError("Not authenticated")
        if credentials.scheme.lower() != "bearer":
            raise UnauthorizedError("Invalid authentication scheme")
        return credentials.credentials


bearer_scheme = JWTBearer()


async def get_bearer_token(token: str = Depends(bearer_scheme)) -> str:
    """Raw access token of the current request."""
    return token


async def get_current_identity(
    token: str = Depends(bearer_scheme),
    session: AsyncSession = Depends(get_db_session),
) -> Identity:
    """Resolve the bearer token to an active identity."""
    return await AuthService(session).resolve_identity(token)


# Dependency for getting current user ID from JWT
async def get_current_user_id(identity: Identity = Depends(get_current_identity)) -> UUID:
    """Get current authenticated user ID."""
    return identity.id


async def require_admin(identity: Identity = Depends(get_current_identity)) -> Identity:
    if not identity.is_admin:
        raise ForbiddenError("Admin privileges required")
    return identity
