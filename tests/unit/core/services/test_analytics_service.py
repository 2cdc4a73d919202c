"""Tests for AnalyticsService: view tracking, activity log and aggregates."""

import uuid
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest
from sqlalchemy import func, select

from notevault.core.exceptions import ForbiddenError, NotFoundError
from notevault.core.models import NoteView, UserActivity
from notevault.core.schemas.auth import LoginRequest
from notevault.core.schemas.notes import NoteCreate, NoteUpdate
from notevault.core.schemas.sharing import ShareNoteRequest
from notevault.core.services import AnalyticsService, AuthService

DEFAULT_PASSWORD = "Password123!"


@pytest.fixture
def analytics_service(test_session):
    return AnalyticsService(test_session)


async def _views(session, note_id):
    result = await session.execute(select(NoteView).where(NoteView.note_id == note_id))
    return list(result.scalars())


async def _activities(session, user_id):
    result = await session.execute(
        select(UserActivity.activity).where(UserActivity.user_id == user_id).order_by(UserActivity.created_at)
    )
    return list(result.scalars())


class TestViewTracking:
    async def test_read_records_a_view(self, note_service, test_session, alice, bob):
        note = await note_service.create_note(alice.id, NoteCreate(title="T", body="B", visibility="PUBLIC"))

        await note_service.get_note(note.id, bob.id, ip_address="10.0.0.7", user_agent="Mozilla/5.0")

        [view] = await _views(test_session, note.id)
        assert (view.user_id, view.ip_address, view.user_agent) == (bob.id, "10.0.0.7", "Mozilla/5.0")

    async def test_refused_read_records_nothing(self, note_service, test_session, alice, bob):
        note = await note_service.create_note(alice.id, NoteCreate(title="T", body="B"))
        note_id = note.id

        with pytest.raises(ForbiddenError):
            await note_service.get_note(note_id, bob.id)

        assert await _views(test_session, note_id) == []

    async def test_failed_tracking_does_not_break_the_read(self, note_service, test_session, alice, monkeypatch):
        note = await note_service.create_note(alice.id, NoteCreate(title="T", body="B"))
        note_id = note.id
        monkeypatch.setattr(
            note_service.analytics.analytics_repo, "add_view", AsyncMock(side_effect=RuntimeError("db hiccup"))
        )

        seen = await note_service.get_note(note_id, alice.id)

        assert (seen.id, seen.title) == (note_id, "T")
        assert await _views(test_session, note_id) == []

    async def test_long_user_agent_is_cut(self, analytics_service, test_session, make_note, alice):
        note = await make_note(alice)

        assert await analytics_service.track_note_view(note.id, alice.id, user_agent="x" * 900) is True

        [view] = await _views(test_session, note.id)
        assert len(view.user_agent) == 500

    async def test_note_analytics(self, note_service, analytics_service, test_session, alice, bob):
        note = await note_service.create_note(alice.id, NoteCreate(title="T", body="B", visibility="PUBLIC"))
        for reader in (alice, bob, bob):
            await note_service.get_note(note.id, reader.id)
        # a view from before the period
        test_session.add(
            NoteView(note_id=note.id, user_id=bob.id, created_at=datetime.now(timezone.utc) - timedelta(days=45))
        )
        await test_session.commit()

        analytics = await analytics_service.get_note_analytics(note.id, days=30)

        assert (analytics.total_views, analytics.recent_views, analytics.unique_viewers) == (4, 3, 2)
        assert analytics.period == "30 days"

    async def test_note_analytics_unknown_note(self, analytics_service):
        with pytest.raises(NotFoundError):
            await analytics_service.get_note_analytics(uuid.uuid4())


class TestActivityLog:
    async def test_note_operations_are_logged(self, note_service, sharing_service, test_session, alice, bob):
        note = await note_service.create_note(alice.id, NoteCreate(title="T", body="B"))
        await note_service.update_note(note.id, alice.id, NoteUpdate(body="B2"))
        await note_service.restore_version(note.id, 1, alice.id)
        await sharing_service.share_note(note.id, alice.id, ShareNoteRequest(user_ids=[bob.id]))
        await note_service.delete_note(note.id, alice.id)

        assert sorted(await _activities(test_session, alice.id)) == [
            "note_create",
            "note_delete",
            "note_restore",
            "note_share",
            "note_update",
        ]
        assert await _activities(test_session, bob.id) == []

    async def test_failed_operation_logs_nothing(self, note_service, test_session, alice, bob):
        note = await note_service.create_note(alice.id, NoteCreate(title="T", body="B", visibility="PUBLIC"))
        note_id, bob_id = note.id, bob.id

        with pytest.raises(ForbiddenError):
            await note_service.update_note(note_id, bob_id, NoteUpdate(body="hijacked"))

        assert await _activities(test_session, bob_id) == []

    async def test_login_is_logged(self, test_session, alice):
        await AuthService(test_session).authenticate_user(
            LoginRequest(email="alice@example.com", password=DEFAULT_PASSWORD)
        )

        assert await _activities(test_session, alice.id) == ["login"]

    async def test_user_analytics(self, note_service, analytics_service, test_session, alice, bob):
        first = await note_service.create_note(alice.id, NoteCreate(title="one", body="x", visibility="PUBLIC"))
        await note_service.create_note(alice.id, NoteCreate(title="two", body="x"))
        await note_service.update_note(first.id, alice.id, NoteUpdate(body="y"))
        await note_service.get_note(first.id, alice.id)
        await note_service.get_note(first.id, bob.id)
        analytics_service.stage_activity(alice.id, "login")
        test_session.add(
            UserActivity(
                user_id=alice.id,
                activity="login",
                details={},
                created_at=datetime.now(timezone.utc) - timedelta(days=90),
            )
        )
        await test_session.commit()

        analytics = await analytics_service.get_user_analytics(alice.id, days=30)

        assert (analytics.total_activities, analytics.recent_activities, analytics.note_views) == (5, 4, 1)
        assert [(item.activity, item.count) for item in analytics.activity_breakdown] == [
            ("note_create", 2),
            ("login", 1),
            ("note_update", 1),
        ]
        assert analytics.period == "30 days"

    async def test_user_analytics_unknown_user(self, analytics_service):
        with pytest.raises(NotFoundError):
            await analytics_service.get_user_analytics(uuid.uuid4())

    async def test_unknown_activity_is_rejected(self, analytics_service):
        with pytest.raises(ValueError):
            analytics_service.stage_activity(uuid.uuid4(), "teleport")


async def test_system_analytics(note_service, analytics_service, test_session, make_user, alice, bob):
    await make_user("Idle")
    note = await note_service.create_note(alice.id, NoteCreate(title="T", body="B", visibility="PUBLIC"))
    await note_service.create_note(bob.id, NoteCreate(title="U", body="B"))
    await note_service.get_note(note.id, bob.id)

    analytics = await analytics_service.get_system_analytics()

    assert (analytics.total_users, analytics.active_users) == (3, 2)
    assert (analytics.total_notes, analytics.total_views) == (2, 1)
    assert analytics.period == "7 days"
    total_rows = (await test_session.execute(select(func.count(UserActivity.id)))).scalar_one()
    assert total_rows == 2
