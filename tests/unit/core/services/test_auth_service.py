"""Tests for AuthService."""

import uuid
from datetime import timedelta

import pytest

from notevault.core.exceptions import BadRequestError, ConflictError, NotFoundError, UnauthorizedError
from notevault.core.repositories import UserRepository
from notevault.core.schemas.auth import (
    LoginRequest,
    PasswordChangeRequest,
    RefreshTokenRequest,
    RegisterRequest,
    UserUpdateRequest,
)
from notevault.core.services import AuthService
from notevault.core.services.auth_service import tombstone_email
from notevault.security.jwt import create_access_token

DEFAULT_PASSWORD = "Password123!"


@pytest.fixture
def auth_service(test_session):
    return AuthService(test_session)


async def _login(auth_service, email, password=DEFAULT_PASSWORD):
    return await auth_service.authenticate_user(LoginRequest(email=email, password=password))


class TestRegistration:
    async def test_register_creates_regular_user(self, auth_service):
        user = await auth_service.register_user(
            RegisterRequest(email="New.User@Example.com", name="  New User ", password="longenough1")
        )

        assert user.email == "new.user@example.com"
        assert user.name == "New User"
        assert user.role == "USER"
        assert user.is_active is True

    async def test_duplicate_email_is_a_conflict(self, auth_service, alice):
        with pytest.raises(ConflictError):
            await auth_service.register_user(
                RegisterRequest(email="ALICE@example.com", name="Other", password="longenough1")
            )


class TestLogin:
    async def test_login_issues_token_pair(self, auth_service, alice):
        tokens = await _login(auth_service, "alice@example.com")

        assert tokens.token_type == "bearer"
        assert tokens.refresh_token
        assert tokens.user.id == alice.id
        identity = await auth_service.resolve_identity(tokens.access_token)
        assert identity.id == alice.id

    async def test_wrong_password(self, auth_service, alice):
        with pytest.raises(UnauthorizedError) as exc_info:
            await _login(auth_service, "alice@example.com", "wrong-password")
        assert exc_info.value.detail == "Invalid credentials"

    async def test_unknown_email_looks_the_same(self, auth_service):
        with pytest.raises(UnauthorizedError) as exc_info:
            await _login(auth_service, "nobody@example.com")
        assert exc_info.value.detail == "Invalid credentials"

    async def test_inactive_user_cannot_login(self, auth_service, make_user):
        await make_user("Sleeper", "sleeper@example.com", is_active=False)

        with pytest.raises(UnauthorizedError):
            await _login(auth_service, "sleeper@example.com")


class TestRefresh:
    async def test_refresh_rotates(self, auth_service, alice):
        first = await _login(auth_service, "alice@example.com")

        second = await auth_service.refresh_token(RefreshTokenRequest(refresh_token=first.refresh_token))

        assert second.refresh_token != first.refresh_token
        with pytest.raises(UnauthorizedError):
            await auth_service.refresh_token(RefreshTokenRequest(refresh_token=first.refresh_token))

    async def test_unknown_refresh_token(self, auth_service):
        with pytest.raises(UnauthorizedError):
            await auth_service.refresh_token(RefreshTokenRequest(refresh_token="not-a-token"))


class TestAccount:
    async def test_update_profile(self, auth_service, alice):
        updated = await auth_service.update_user_profile(
            alice.id, UserUpdateRequest(name=" Alice A. ", profile_picture="https://cdn.example.com/a.png")
        )

        assert updated.name == "Alice A."
        assert updated.profile_picture == "https://cdn.example.com/a.png"
        assert updated.email == "alice@example.com"

    async def test_blank_name_rejected(self, auth_service, alice):
        with pytest.raises(BadRequestError):
            await auth_service.update_user_profile(alice.id, UserUpdateRequest(name="   "))

    async def test_change_password_revokes_refresh_tokens(self, auth_service, alice):
        alice_id = alice.id
        tokens = await _login(auth_service, "alice@example.com")

        await auth_service.change_password(
            alice_id, PasswordChangeRequest(current_password=DEFAULT_PASSWORD, new_password="brand-new-pass")
        )

        with pytest.raises(UnauthorizedError):
            await auth_service.refresh_token(RefreshTokenRequest(refresh_token=tokens.refresh_token))
        with pytest.raises(UnauthorizedError):
            await _login(auth_service, "alice@example.com")
        assert (await _login(auth_service, "alice@example.com", "brand-new-pass")).user.id == alice_id

    async def test_change_password_checks_current(self, auth_service, alice):
        with pytest.raises(BadRequestError):
            await auth_service.change_password(
                alice.id, PasswordChangeRequest(current_password="nope", new_password="brand-new-pass")
            )

    async def test_logout_revokes_refresh_tokens(self, auth_service, alice):
        alice_id = alice.id
        tokens = await _login(auth_service, "alice@example.com")

        assert await auth_service.logout_user(alice_id, tokens.access_token) is True
        assert await auth_service.logout_user(alice_id, tokens.access_token) is False


class TestAccountDeletion:
    async def test_delete_disables_and_frees_the_email(self, auth_service, test_session, alice):
        alice_id = alice.id
        tokens = await _login(auth_service, "alice@example.com")

        assert await auth_service.delete_account(alice_id, tokens.access_token) is True

        stored = await UserRepository(test_session).get_by_id(alice_id)
        assert stored.is_active is False
        assert stored.email.startswith("deleted_")
        assert stored.email.endswith("_alice@example.com")
        with pytest.raises(UnauthorizedError):
            await auth_service.refresh_token(RefreshTokenRequest(refresh_token=tokens.refresh_token))
        with pytest.raises(UnauthorizedError):
            await auth_service.resolve_identity(tokens.access_token)

        again = await auth_service.register_user(
            RegisterRequest(email="alice@example.com", name="Alice Again", password="longenough1")
        )
        assert again.id != alice_id

    async def test_deleted_account_cannot_be_deleted_twice(self, auth_service, alice):
        alice_id = alice.id
        await auth_service.delete_account(alice_id)

        with pytest.raises(NotFoundError):
            await auth_service.delete_account(alice_id)

    async def test_unknown_account(self, auth_service):
        with pytest.raises(NotFoundError):
            await auth_service.delete_account(uuid.uuid4())


class TestTombstoneEmail:
    def test_keeps_domain_and_original_address(self):
        assert tombstone_email("jane@example.com", 1700000000000) == "deleted_1700000000000_jane@example.com"

    def test_local_part_stays_within_limit(self):
        email = tombstone_email("x" * 60 + "@example.com", 1700000000000)

        local, _, domain = email.partition("@")
        assert len(local) == 64
        assert local.startswith("deleted_1700000000000_")
        assert domain == "example.com"


class TestResolveIdentity:
    async def test_role_comes_from_the_store(self, auth_service, alice):
        token = create_access_token({"sub": str(alice.id), "role": "ADMIN"})

        identity = await auth_service.resolve_identity(token)

        assert identity.role == "USER"
        assert identity.is_admin is False

    @pytest.mark.parametrize("token", ["garbage", ""])
    async def test_malformed_token(self, auth_service, token):
        with pytest.raises(UnauthorizedError):
            await auth_service.resolve_identity(token)

    async def test_expired_token(self, auth_service, alice):
        token = create_access_token({"sub": str(alice.id)}, expires_delta=timedelta(seconds=-1))

        with pytest.raises(UnauthorizedError):
            await auth_service.resolve_identity(token)

    async def test_unknown_or_inactive_subject(self, auth_service, make_user):
        sleeper = await make_user("Sleeper", is_active=False)

        for subject in (uuid.uuid4(), sleeper.id):
            with pytest.raises(UnauthorizedError):
                await auth_service.resolve_identity(create_access_token({"sub": str(subject)}))

    async def test_subject_must_be_a_uuid(self, auth_service):
        with pytest.raises(UnauthorizedError):
            await auth_service.resolve_identity(create_access_token({"sub": "not-a-uuid"}))
