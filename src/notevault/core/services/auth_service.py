"""Authentication service implementation."""

import logging
import time
from typing import Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from ...config import get_settings
from ...security import blacklist_token, create_access_token, decode_access_token, hash_password
from ...security.password import verify_and_update, verify_password
from ..exceptions import BadRequestError, ConflictError, NotFoundError, UnauthorizedError
from ..models.analytics import ActivityType
from ..models.user import User, UserRole
from ..repositories.refresh_token_repository import RefreshTokenRepository
from ..repositories.user_repository import UserRepository
from ..schemas.auth import (
    Identity,
    LoginRequest,
    PasswordChangeRequest,
    RefreshTokenRequest,
    RegisterRequest,
    TokenResponse,
    UserResponse,
    UserUpdateRequest,
)
from .analytics_service import AnalyticsService
from .interfaces import IAuthService
from .unit_of_work import unit_of_work

logger = logging.getLogger(__name__)

EMAIL_MAX_LENGTH = 255
EMAIL_LOCAL_MAX_LENGTH = 64


def tombstone_email(email: str, deleted_at_ms: int) -> str:
    """
    Address stored on a deleted account.

    Stays a well-formed, unique address while freeing the original one for
    a new registration.
    """
    local, _, domain = email.rpartition("@")
    local = f"deleted_{deleted_at_ms}_{local}"[:EMAIL_LOCAL_MAX_LENGTH]
    return f"{local}@{domain}"[:EMAIL_MAX_LENGTH]


class AuthService(IAuthService):
    """Authentication service implementation."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.user_repo = UserRepository(session)
        self.token_repo = RefreshTokenRepository(session)
        self.analytics = AnalyticsService(session)
        self.settings = get_settings()

    async def _issue_tokens(self, user: User) -> TokenResponse:
        access_token = create_access_token(data={"sub": str(user.id), "role": user.role})
        refresh = await self.token_repo.issue(user.id, self.settings.refresh_token_expire_days)
        return TokenResponse(
            access_token=access_token,
            refresh_token=refresh.token,
            token_type="bearer",
            expires_in=self.settings.access_token_expire_minutes * 60,
            user=UserResponse.model_validate(user),
        )

    async def register_user(self, request: RegisterRequest) -> UserResponse:
        """Register new user."""
        if await self.user_repo.is_email_taken(request.email):
            raise ConflictError("Email already registered")

        async with unit_of_work(self.session):
            user = await self.user_repo.create_user(
                {
                    "email": request.email,
                    "name": request.name,
                    "password_hash": hash_password(request.password),
                    "role": UserRole.USER.value,
                    "is_active": True,
                }
            )

        logger.info(f"Registered user {user.id}", extra={"user_id": str(user.id)})
        return UserResponse.model_validate(user)

    async def authenticate_user(self, request: LoginRequest) -> TokenResponse:
        """Login user and return JWT tokens."""
        user = await self.user_repo.get_by_email(request.email)
        if not user or not user.can_login():
            raise UnauthorizedError("Invalid credentials")

        valid, new_hash = verify_and_update(request.password, user.password_hash)
        if not valid:
            raise UnauthorizedError("Invalid credentials")

        async with unit_of_work(self.session):
            if new_hash:
                # stored hash used outdated parameters
                user.password_hash = new_hash
            tokens = await self._issue_tokens(user)
            self.analytics.stage_activity(user.id, ActivityType.LOGIN)

        logger.info(f"User {user.id} logged in", extra={"user_id": str(user.id)})
        return tokens

    async def refresh_token(self, request: RefreshTokenRequest) -> TokenResponse:
        """Rotate a refresh token: the presented one is revoked, a new pair issued."""
        async with unit_of_work(self.session):
            token_obj = await self.token_repo.get_by_token(request.refresh_token)
            if not token_obj or not token_obj.is_valid:
                raise UnauthorizedError("Invalid refresh token")

            user = await self.user_repo.get_by_id(token_obj.user_id)
            if not user or not user.can_login():
                raise UnauthorizedError("User account inactive")

            token_obj.revoke("rotated")
            tokens = await self._issue_tokens(user)

        return tokens

    async def get_current_user(self, user_id: UUID) -> UserResponse:
        user = await self.user_repo.get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        return UserResponse.model_validate(user)

    async def update_user_profile(self, user_id: UUID, request: UserUpdateRequest) -> UserResponse:
        """Update display name and/or profile picture URL."""
        update_data = request.model_dump(exclude_unset=True, exclude_none=True)
        if "name" in update_data:
            update_data["name"] = update_data["name"].strip()
            if not update_data["name"]:
                raise BadRequestError("Name cannot be blank")

        async with unit_of_work(self.session):
            user = await self.user_repo.get_by_id(user_id)
            if not user:
                raise NotFoundError("User not found")
            if update_data:
                user = await self.user_repo.update_user(user, update_data)

        return UserResponse.model_validate(user)

    async def change_password(self, user_id: UUID, request: PasswordChangeRequest) -> bool:
        """Change the password and revoke every refresh token of the user."""
        async with unit_of_work(self.session):
            user = await self.user_repo.get_by_id(user_id)
            if not user:
                raise NotFoundError("User not found")
            if not verify_password(request.current_password, user.password_hash):
                raise BadRequestError("Current password is incorrect")

            await self.user_repo.update_user(user, {"password_hash": hash_password(request.new_password)})
            revoked = await self.token_repo.revoke_user_tokens(user_id, "password_change")

        logger.info(f"Password changed for user {user_id}, {revoked} refresh tokens revoked")
        return True

    async def logout_user(self, user_id: UUID, access_token: str) -> bool:
        """Revoke refresh tokens and blacklist the access token."""
        try:
            await blacklist_token(access_token)
        except Exception as e:
            # Redis down must not break logout
            logger.warning(f"Failed to blacklist token in Redis: {e}")

        async with unit_of_work(self.session):
            revoked = await self.token_repo.revoke_user_tokens(user_id, "logout")

        return revoked > 0

    async def delete_account(self, user_id: UUID, access_token: Optional[str] = None) -> bool:
        """
        Self-service deletion.

        The account is disabled rather than removed, so notes and grants stay
        in place. The e-mail is rewritten and every refresh token revoked; the
        presented access token is blacklisted when Redis is reachable.
        """
        async with unit_of_work(self.session):
            user = await self.user_repo.get_by_id(user_id)
            if not user or not user.is_active:
                raise NotFoundError("User not found")

            await self.user_repo.update_user(
                user,
                {"is_active": False, "email": tombstone_email(user.email, int(time.time() * 1000))},
            )
            revoked = await self.token_repo.revoke_user_tokens(user_id, "account_deleted")

        if access_token:
            try:
                await blacklist_token(access_token)
            except Exception as e:
                logger.warning(f"Failed to blacklist token in Redis: {e}")

        logger.info(f"User {user_id} deleted their account, {revoked} refresh tokens revoked")
        return True

    async def resolve_identity(self, token: str) -> Identity:
        """Validate a bearer token and load the active user behind it."""
        payload = await decode_access_token(token)
        if not payload:
            raise UnauthorizedError("Invalid or expired token")

        try:
            user_id = UUID(str(payload.get("sub")))
        except ValueError:
            raise UnauthorizedError("Invalid token subject")

        user = await self.user_repo.get_by_id(user_id)
        if not user or not user.is_active:
            raise UnauthorizedError("User not found or inactive")

        # role comes from the store, never from the token
        return Identity(id=user.id, role=user.role, is_active=user.is_active)
