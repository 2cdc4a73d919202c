"""Unit tests for model helpers that need no database."""

import uuid
from datetime import datetime, timedelta, timezone

from notevault.core.models import Note, NoteVersion, Notification, RefreshToken, User


class TestNote:
    def test_fresh_note_has_loaded_empty_collections(self):
        note = Note(title="T", body="B", visibility="PRIVATE", author_id=uuid.uuid4())

        assert note.tags == []
        assert note.latest_version == 0
        assert note.grantee_ids == []

    def test_set_tags_keeps_order_and_reuses_rows(self):
        note = Note(title="T", body="B", visibility="PRIVATE", author_id=uuid.uuid4())
        note.set_tags(["a", "b"])
        kept = note.note_tags[1]

        note.set_tags(["b", "c"])

        assert note.tags == ["b", "c"]
        assert note.note_tags[0] is kept
        assert [row.position for row in note.note_tags] == [0, 1]

    def test_latest_version(self):
        note = Note(title="T", body="B", visibility="PRIVATE", author_id=uuid.uuid4())
        note.versions.extend(NoteVersion(version=n, title="T", body="B") for n in (1, 3, 2))

        assert note.latest_version == 3

    def test_repr_truncates_long_titles(self):
        note = Note(title="x" * 40, body="B", author_id=uuid.uuid4())
        assert "x" * 30 + "..." in repr(note)


def test_version_same_content():
    version = NoteVersion(version=1, title="T", body="B")
    assert version.same_content("T", "B") is True
    assert version.same_content("T", "B2") is False


class TestNotification:
    def test_mark_read_once(self):
        row = Notification(user_id=uuid.uuid4(), type="SYSTEM", title="t", message="m", payload={}, is_read=False)

        row.mark_read()
        first = row.read_at
        row.mark_read()

        assert row.is_read is True
        assert row.read_at is first

    def test_event_shape(self):
        created = datetime(2025, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
        row = Notification(
            id=uuid.uuid4(),
            user_id=uuid.uuid4(),
            type="NOTE_SHARED",
            title="Note shared with you",
            message="Alice shared a note",
            payload={"noteId": "n1"},
            is_read=False,
            created_at=created,
        )

        event = row.to_event()

        assert event == {
            "id": str(row.id),
            "type": "NOTE_SHARED",
            "title": "Note shared with you",
            "message": "Alice shared a note",
            "data": {"noteId": "n1"},
            "isRead": False,
            "createdAt": created.isoformat(),
        }


class TestRefreshToken:
    def test_issue(self):
        token = RefreshToken.issue(uuid.uuid4(), expires_days=7)
        token.is_active = True

        assert len(token.token) > 30
        assert token.is_valid is True

    def test_expired_naive_timestamp(self):
        token = RefreshToken(token="t", user_id=uuid.uuid4(), is_active=True)
        token.expires_at = (datetime.now(timezone.utc) - timedelta(minutes=1)).replace(tzinfo=None)

        assert token.is_expired is True
        assert token.is_valid is False

    def test_revoke(self):
        token = RefreshToken.issue(uuid.uuid4())
        token.is_active = True

        token.revoke("logout")

        assert token.is_valid is False
        assert token.revocation_reason == "logout"
        assert token.revoked_at is not None


def test_user_roles():
    admin = User(email="a@example.com", name="A", password_hash="x", role="ADMIN", is_active=True)
    user = User(email="u@example.com", name="U", password_hash="x", role="USER", is_active=False)

    assert admin.is_admin is True
    assert user.is_admin is False
    assert user.can_login() is False
