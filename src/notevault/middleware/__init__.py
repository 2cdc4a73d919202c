"""Middleware for authentication and other cross-cutting concerns."""

from .auth import JWTBearer, get_bearer_token, get_current_identity, get_current_user_id, require_admin

__all__ = ["JWTBearer", "get_bearer_token", "get_current_identity", "get_current_user_id", "require_admin"]
