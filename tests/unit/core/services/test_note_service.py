"""Tests for NoteService: lifecycle, versioning and listing."""

import uuid

import pytest
from sqlalchemy import event, select
from sqlalchemy.dialects import postgresql

from notevault.core.exceptions import ForbiddenError, NotFoundError
from notevault.core.models.notification import Notification
from notevault.core.repositories import NoteVersionRepository
from notevault.core.schemas.notes import NoteCreate, NoteQuery, NoteUpdate
from notevault.core.schemas.sharing import ShareNoteRequest
from notevault.core.services import NoteService, NotificationService


async def _versions(note_service, note_id, user_id):
    return [v.version for v in await note_service.list_versions(note_id, user_id)]


async def _notifications_for(session, user_id):
    result = await session.execute(select(Notification).where(Notification.user_id == user_id))
    return list(result.scalars())


class TestCreateNote:
    async def test_create_writes_first_version(self, note_service, alice):
        note = await note_service.create_note(
            alice.id, NoteCreate(title="Groceries", body="milk", tags=[" Home ", "home", "Errands"])
        )

        assert note.version == 1
        assert note.versions_count == 1
        assert note.author_id == alice.id
        assert note.author.name == "Alice"
        assert note.visibility == "PRIVATE"
        assert note.tags == ["home", "errands"]
        assert note.can_edit is True
        assert await _versions(note_service, note.id, alice.id) == [1]

    async def test_first_version_copies_content(self, note_service, test_session, alice):
        note = await note_service.create_note(alice.id, NoteCreate(title="T", body="B"))

        snapshot = await NoteVersionRepository(test_session).get(note.id, 1)
        assert (snapshot.title, snapshot.body, snapshot.created_by_id) == ("T", "B", alice.id)


class TestUpdateNote:
    async def test_content_change_adds_version(self, note_service, alice):
        note = await note_service.create_note(alice.id, NoteCreate(title="T", body="B"))

        updated = await note_service.update_note(note.id, alice.id, NoteUpdate(body="B2"))

        assert updated.body == "B2"
        assert updated.title == "T"
        assert updated.version == 2
        assert await _versions(note_service, note.id, alice.id) == [2, 1]

    async def test_noop_update_keeps_version_count(self, note_service, alice):
        note = await note_service.create_note(alice.id, NoteCreate(title="T", body="B"))

        updated = await note_service.update_note(note.id, alice.id, NoteUpdate(title="T", body="B"))

        assert updated.versions_count == note.versions_count == 1

    @pytest.mark.parametrize(
        "change",
        [
            {"tags": ["work"]},
            {"visibility": "PUBLIC"},
            {"is_archived": True},
            {"tags": ["a", "b"], "visibility": "SHARED"},
        ],
    )
    async def test_metadata_only_update_adds_no_version(self, note_service, alice, change):
        note = await note_service.create_note(alice.id, NoteCreate(title="T", body="B"))

        updated = await note_service.update_note(note.id, alice.id, NoteUpdate(**change))

        assert updated.versions_count == 1
        assert await _versions(note_service, note.id, alice.id) == [1]

    async def test_visibility_moves_freely(self, note_service, alice):
        note = await note_service.create_note(alice.id, NoteCreate(title="T", body="B", visibility="PUBLIC"))

        for target in ("SHARED", "PRIVATE", "PUBLIC", "PRIVATE"):
            note = await note_service.update_note(note.id, alice.id, NoteUpdate(visibility=target))
            assert note.visibility == target

    async def test_tags_are_replaced_in_order(self, note_service, alice):
        note = await note_service.create_note(alice.id, NoteCreate(title="T", body="B", tags=["a", "b", "c"]))

        updated = await note_service.update_note(note.id, alice.id, NoteUpdate(tags=["c", "d", "a"]))

        assert updated.tags == ["c", "d", "a"]

    async def test_non_author_cannot_update(self, note_service, alice, bob):
        alice_id = alice.id
        note = await note_service.create_note(alice_id, NoteCreate(title="T", body="B", visibility="PUBLIC"))

        with pytest.raises(ForbiddenError):
            await note_service.update_note(note.id, bob.id, NoteUpdate(body="hijacked"))

        assert (await note_service.get_note(note.id, alice_id)).body == "B"

    async def test_update_missing_note(self, note_service, alice):
        with pytest.raises(NotFoundError):
            await note_service.update_note(uuid.uuid4(), alice.id, NoteUpdate(body="x"))


class TestRestoreVersion:
    async def test_restore_creates_new_top_version(self, note_service, test_session, alice):
        note = await note_service.create_note(alice.id, NoteCreate(title="T", body="B"))
        await note_service.update_note(note.id, alice.id, NoteUpdate(body="B2"))

        restored = await note_service.restore_version(note.id, 1, alice.id)

        assert restored.body == "B"
        assert restored.version == 3
        assert await _versions(note_service, note.id, alice.id) == [3, 2, 1]

        repo = NoteVersionRepository(test_session)
        v1, v2, v3 = [await repo.get(note.id, number) for number in (1, 2, 3)]
        assert (v1.title, v1.body) == ("T", "B")
        assert (v2.title, v2.body) == ("T", "B2")
        assert (v3.title, v3.body) == (v1.title, v1.body)

    async def test_restore_same_content_still_adds_version(self, note_service, alice):
        note = await note_service.create_note(alice.id, NoteCreate(title="T", body="B"))

        restored = await note_service.restore_version(note.id, 1, alice.id)

        assert restored.version == 2

    async def test_restore_unknown_version(self, note_service, alice):
        alice_id = alice.id
        note = await note_service.create_note(alice_id, NoteCreate(title="T", body="B"))

        with pytest.raises(NotFoundError):
            await note_service.restore_version(note.id, 7, alice_id)
        assert await _versions(note_service, note.id, alice_id) == [1]

    async def test_restore_requires_author(self, note_service, alice, bob):
        note = await note_service.create_note(alice.id, NoteCreate(title="T", body="B", visibility="PUBLIC"))

        with pytest.raises(ForbiddenError):
            await note_service.restore_version(note.id, 1, bob.id)


@pytest.fixture
def note_selects(test_session):
    """Top-level SELECT statements the session runs."""
    statements = []

    def _capture(orm_execute_state):
        if orm_execute_state.is_select and not orm_execute_state.is_relationship_load:
            statements.append(orm_execute_state.statement)

    event.listen(test_session.sync_session, "do_orm_execute", _capture)
    yield statements
    event.remove(test_session.sync_session, "do_orm_execute", _capture)


def _locks_notes(statements) -> bool:
    # SQLite drops FOR UPDATE, so render the way PostgreSQL would
    rendered = [str(stmt.compile(dialect=postgresql.dialect())) for stmt in statements]
    return any("FOR UPDATE OF notes" in sql for sql in rendered)


class TestConcurrentEdits:
    @pytest.mark.parametrize("operation", ["update", "restore", "delete", "share"])
    async def test_write_paths_lock_the_note_row(
        self, note_service, sharing_service, note_selects, alice, bob, operation
    ):
        note = await note_service.create_note(alice.id, NoteCreate(title="T", body="B"))
        note_selects.clear()

        if operation == "update":
            await note_service.update_note(note.id, alice.id, NoteUpdate(body="B2"))
        elif operation == "restore":
            await note_service.restore_version(note.id, 1, alice.id)
        elif operation == "delete":
            await note_service.delete_note(note.id, alice.id)
        else:
            await sharing_service.share_note(note.id, alice.id, ShareNoteRequest(user_ids=[bob.id]))

        assert _locks_notes(note_selects)

    async def test_reads_do_not_lock(self, note_service, note_selects, alice):
        note = await note_service.create_note(alice.id, NoteCreate(title="T", body="B"))
        note_selects.clear()

        await note_service.get_note(note.id, alice.id)
        await note_service.list_versions(note.id, alice.id)

        assert note_selects
        assert not _locks_notes(note_selects)

    async def test_interleaved_editors_each_get_a_version(self, session_factory, hub, mail_queue, alice):
        async with session_factory() as first_session, session_factory() as second_session:
            first = NoteService(first_session, NotificationService(first_session, hub=hub, mail_queue=mail_queue))
            second = NoteService(second_session, NotificationService(second_session, hub=hub, mail_queue=mail_queue))

            note = await first.create_note(alice.id, NoteCreate(title="T", body="B"))
            # the second editor opened the note before the first one saved
            assert (await second.get_note(note.id, alice.id)).version == 1

            await first.update_note(note.id, alice.id, NoteUpdate(body="from first"))
            latest = await second.update_note(note.id, alice.id, NoteUpdate(body="from second"))

            assert latest.version == 3
            assert latest.body == "from second"
            assert await _versions(first, note.id, alice.id) == [3, 2, 1]

    async def test_stale_editor_sees_current_content(self, session_factory, hub, mail_queue, alice):
        async with session_factory() as first_session, session_factory() as second_session:
            first = NoteService(first_session, NotificationService(first_session, hub=hub, mail_queue=mail_queue))
            second = NoteService(second_session, NotificationService(second_session, hub=hub, mail_queue=mail_queue))

            note = await first.create_note(alice.id, NoteCreate(title="T", body="B"))
            await second.get_note(note.id, alice.id)
            await first.update_note(note.id, alice.id, NoteUpdate(body="same"))

            # identical to what is stored now, so no new version
            unchanged = await second.update_note(note.id, alice.id, NoteUpdate(body="same"))

            assert unchanged.version == 2
            assert unchanged.versions_count == 2


class TestReadAccess:
    async def test_forbidden_vs_not_found(self, note_service, alice, make_user):
        dave = await make_user("Dave")
        note = await note_service.create_note(alice.id, NoteCreate(title="T", body="B"))

        with pytest.raises(ForbiddenError):
            await note_service.get_note(note.id, dave.id)
        with pytest.raises(NotFoundError):
            await note_service.get_note(uuid.uuid4(), dave.id)
        with pytest.raises(NotFoundError):
            await note_service.update_note(uuid.uuid4(), dave.id, NoteUpdate(body="x"))

    async def test_public_note_readable_by_anyone(self, note_service, alice, bob):
        note = await note_service.create_note(alice.id, NoteCreate(title="T", body="B", visibility="PUBLIC"))

        seen = await note_service.get_note(note.id, bob.id)

        assert seen.title == "T"
        assert seen.can_edit is False

    async def test_versions_need_read_access(self, note_service, alice, bob):
        note = await note_service.create_note(alice.id, NoteCreate(title="T", body="B"))

        with pytest.raises(ForbiddenError):
            await note_service.list_versions(note.id, bob.id)


class TestDeleteNote:
    async def test_delete_cascades_versions(self, note_service, test_session, alice):
        note = await note_service.create_note(alice.id, NoteCreate(title="T", body="B", tags=["x"]))
        await note_service.update_note(note.id, alice.id, NoteUpdate(body="B2"))

        assert await note_service.delete_note(note.id, alice.id) is True

        assert await NoteVersionRepository(test_session).list_for_note(note.id) == []
        with pytest.raises(NotFoundError):
            await note_service.get_note(note.id, alice.id)

    async def test_delete_requires_author(self, note_service, alice, bob):
        note = await note_service.create_note(alice.id, NoteCreate(title="T", body="B", visibility="PUBLIC"))

        with pytest.raises(ForbiddenError):
            await note_service.delete_note(note.id, bob.id)

    async def test_delete_tells_grantees(self, note_service, sharing_service, test_session, hub, alice, bob):
        note = await note_service.create_note(alice.id, NoteCreate(title="Plans", body="B"))
        await sharing_service.share_note(note.id, alice.id, ShareNoteRequest(user_ids=[bob.id]))

        await note_service.delete_note(note.id, alice.id)

        types = sorted(n.type for n in await _notifications_for(test_session, bob.id))
        assert types == ["NOTE_DELETED", "NOTE_SHARED"]
        assert hub.events_for(alice.id) == []


class TestScenario:
    async def test_version_share_and_notify_flow(
        self, note_service, sharing_service, test_session, hub, mail_queue, alice, carol
    ):
        note = await note_service.create_note(alice.id, NoteCreate(title="T", body="B", visibility="PRIVATE"))
        assert await _versions(note_service, note.id, alice.id) == [1]

        note = await note_service.update_note(note.id, alice.id, NoteUpdate(body="B2"))
        assert note.body == "B2"
        assert await _versions(note_service, note.id, alice.id) == [2, 1]

        note = await note_service.restore_version(note.id, 1, alice.id)
        assert note.body == "B"
        assert await _versions(note_service, note.id, alice.id) == [3, 2, 1]

        note = await sharing_service.share_note(note.id, alice.id, ShareNoteRequest(user_ids=[carol.id]))
        assert note.visibility == "SHARED"
        shared = await _notifications_for(test_session, carol.id)
        assert [n.type for n in shared] == ["NOTE_SHARED"]
        assert hub.events_for(carol.id, "notification")[0]["type"] == "NOTE_SHARED"

        await note_service.update_note(note.id, alice.id, NoteUpdate(title="T2"))

        carol_types = sorted(n.type for n in await _notifications_for(test_session, carol.id))
        assert carol_types == ["NOTE_SHARED", "NOTE_UPDATED"]
        assert await _notifications_for(test_session, alice.id) == []
        assert len(hub.events_for(carol.id, "note-updated")) == 1
        assert hub.events_for(alice.id) == []
        assert [job["email"] for job in mail_queue.jobs] == ["carol@example.com", "carol@example.com"]

    async def test_metadata_update_does_not_notify(self, note_service, sharing_service, test_session, alice, carol):
        note = await note_service.create_note(alice.id, NoteCreate(title="T", body="B"))
        await sharing_service.share_note(note.id, alice.id, ShareNoteRequest(user_ids=[carol.id]))

        await note_service.update_note(note.id, alice.id, NoteUpdate(tags=["new"]))

        assert [n.type for n in await _notifications_for(test_session, carol.id)] == ["NOTE_SHARED"]

    async def test_update_message_names_the_author(self, note_service, sharing_service, test_session, alice, carol):
        note = await note_service.create_note(alice.id, NoteCreate(title="Plan", body="B"))
        await sharing_service.share_note(note.id, alice.id, ShareNoteRequest(user_ids=[carol.id]))

        await note_service.update_note(note.id, alice.id, NoteUpdate(title="Roadmap"))

        updated = [n for n in await _notifications_for(test_session, carol.id) if n.type == "NOTE_UPDATED"][0]
        assert updated.message == 'Alice updated the note "Roadmap"'
        assert updated.payload["noteId"] == str(note.id)
        assert updated.payload["actorId"] == str(alice.id)


class TestListing:
    async def test_list_only_readable(self, note_service, sharing_service, alice, bob, carol):
        await note_service.create_note(alice.id, NoteCreate(title="alice private", body="x"))
        public = await note_service.create_note(alice.id, NoteCreate(title="alice public", body="x", visibility="PUBLIC"))
        shared = await note_service.create_note(alice.id, NoteCreate(title="alice shared", body="x"))
        await sharing_service.share_note(shared.id, alice.id, ShareNoteRequest(user_ids=[bob.id]))
        own = await note_service.create_note(bob.id, NoteCreate(title="bob own", body="x"))

        page = await note_service.list_notes(bob.id, NoteQuery(sort_by="title", sort_order="asc"))

        assert [n.id for n in page.items] == [public.id, shared.id, own.id]
        assert page.meta.total == 3

        carol_page = await note_service.list_notes(carol.id, NoteQuery())
        assert [n.id for n in carol_page.items] == [public.id]

    async def test_shared_visibility_without_grant_is_hidden(self, note_service, alice, bob):
        await note_service.create_note(alice.id, NoteCreate(title="T", body="B", visibility="SHARED"))

        page = await note_service.list_notes(bob.id, NoteQuery())

        assert page.items == []

    async def test_filters(self, note_service, alice):
        await note_service.create_note(alice.id, NoteCreate(title="Weekly Sync", body="agenda", tags=["work"]))
        await note_service.create_note(alice.id, NoteCreate(title="Recipes", body="Pasta SAUCE", tags=["home"]))
        await note_service.create_note(alice.id, NoteCreate(title="Trip", body="beach", tags=["home", "travel"], visibility="PUBLIC"))

        by_text = await note_service.list_notes(alice.id, NoteQuery(search="sauce"))
        assert [n.title for n in by_text.items] == ["Recipes"]

        by_tags = await note_service.list_notes(alice.id, NoteQuery(tags="travel,work", sort_by="title", sort_order="asc"))
        assert [n.title for n in by_tags.items] == ["Trip", "Weekly Sync"]

        by_visibility = await note_service.list_notes(alice.id, NoteQuery(visibility="PUBLIC"))
        assert [n.title for n in by_visibility.items] == ["Trip"]

    async def test_search_term_with_wildcards_is_literal(self, note_service, alice):
        await note_service.create_note(alice.id, NoteCreate(title="100% done", body="x"))
        await note_service.create_note(alice.id, NoteCreate(title="1000 things", body="x"))

        page = await note_service.list_notes(alice.id, NoteQuery(search="100%"))

        assert [n.title for n in page.items] == ["100% done"]

    async def test_pagination_meta(self, note_service, alice):
        for i in range(5):
            await note_service.create_note(alice.id, NoteCreate(title=f"note {i}", body="x"))

        page = await note_service.list_notes(alice.id, NoteQuery(page=2, limit=2, sort_by="title", sort_order="asc"))

        assert [n.title for n in page.items] == ["note 2", "note 3"]
        assert (page.meta.total, page.meta.page, page.meta.limit, page.meta.total_pages) == (5, 2, 2, 3)

    async def test_search_matches_tag_exactly(self, note_service, alice):
        await note_service.create_note(alice.id, NoteCreate(title="Standup", body="notes", tags=["meeting"]))
        await note_service.create_note(alice.id, NoteCreate(title="Other", body="nothing"))

        listed = await note_service.list_notes(alice.id, NoteQuery(search="Meeting"))
        searched = await note_service.search_notes(alice.id, NoteQuery(search="Meeting"))

        assert listed.items == []
        assert [n.title for n in searched.items] == ["Standup"]


class TestSuggestions:
    async def test_short_query_returns_nothing(self, note_service, alice):
        await note_service.create_note(alice.id, NoteCreate(title="Project plan", body="x"))
        assert await note_service.suggest(alice.id, "p") == []

    async def test_title_words_and_tags(self, note_service, alice):
        await note_service.create_note(
            alice.id, NoteCreate(title="Project planning, phase one", body="x", tags=["planner", "misc"])
        )

        suggestions = await note_service.suggest(alice.id, "PLAN")

        assert suggestions == ["planning", "planner"]

    async def test_ignores_unreadable_notes(self, note_service, alice, bob):
        await note_service.create_note(alice.id, NoteCreate(title="Secret roadmap", body="x"))

        assert await note_service.suggest(bob.id, "road") == []

    async def test_capped(self, note_service, alice):
        words = " ".join(f"alpha{i}" for i in range(12))
        await note_service.create_note(alice.id, NoteCreate(title=words, body="x"))

        assert len(await note_service.suggest(alice.id, "alpha")) == 8


async def test_available_tags_are_own_and_distinct(note_service, alice, bob):
    await note_service.create_note(alice.id, NoteCreate(title="a", body="x", tags=["work", "home"]))
    await note_service.create_note(alice.id, NoteCreate(title="b", body="x", tags=["work"]))
    await note_service.create_note(bob.id, NoteCreate(title="c", body="x", tags=["bob-only"], visibility="PUBLIC"))

    assert await note_service.get_available_tags(alice.id) == ["home", "work"]
