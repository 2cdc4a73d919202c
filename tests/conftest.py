"""Shared pytest fixtures configured to use SQLite in-memory for unit tests."""

import logging
import os
import tempfile
from uuid import uuid4

# configure the app before anything imports it
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="notevault-logs-"))
os.environ.setdefault("NOTIFICATION_EMAILS_ENABLED", "true")
os.environ["NOTEVAULT_SKIP_LIFESPAN_DB"] = "1"

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from notevault.core.mail_queue import get_mail_queue
from notevault.core.models import BaseModel, Note, User
from notevault.core.realtime import RealtimeHub, get_realtime_hub
from notevault.core.repositories import NoteRepository
from notevault.core.services import AdminService, NoteService, NotificationService, SharingService
from notevault.database import get_db_session
from notevault.main import app as fastapi_app
from notevault.security.jwt import create_access_token
from notevault.security.password import hash_password

# Silence extremely verbose DEBUG logs from aiosqlite to keep test output readable
logging.getLogger("aiosqlite").setLevel(logging.WARNING)

DEFAULT_PASSWORD = "Password123!"


class RecordingHub(RealtimeHub):
    """Realtime hub that records pushes instead of writing to sockets."""

    def __init__(self):
        super().__init__()
        self.sent = []
        self.broadcasts = []
        self.online = set()

    async def send_to_user(self, user_id, event, data):
        self.sent.append((user_id, event, data))
        return user_id in self.online

    async def broadcast(self, event, data):
        self.broadcasts.append((event, data))
        return len(self.online)

    def events_for(self, user_id, event=None):
        return [data for uid, name, data in self.sent if uid == user_id and (event is None or name == event)]


class FakeMailQueue:
    """Collects notification e-mail jobs."""

    def __init__(self, fail: bool = False):
        self.jobs = []
        self.fail = fail

    async def enqueue_notification_email(self, email, name, notification_type, title, message, data):
        if self.fail:
            raise ConnectionError("redis down")
        self.jobs.append({"email": email, "name": name, "type": notification_type, "title": title, "data": data})
        return True


@pytest.fixture
async def test_engine():
    """Fresh SQLite in-memory database per test."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,  # keep the same memory DB across connections
        connect_args={"check_same_thread": False},
    )

    # Ensure SQLite enforces foreign key constraints (required for CASCADE/SET NULL)
    @event.listens_for(engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):  # noqa: ANN001
        cursor = dbapi_connection.cursor()
        try:
            cursor.execute("PRAGMA foreign_keys=ON")
        finally:
            cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(BaseModel.metadata.create_all)

    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def test_session(session_factory):
    async with session_factory() as session:
        try:
            yield session
        finally:
            await session.rollback()


@pytest.fixture
def hub():
    return RecordingHub()


@pytest.fixture
def mail_queue():
    return FakeMailQueue()


@pytest.fixture
def notification_service(test_session, hub, mail_queue):
    return NotificationService(test_session, hub=hub, mail_queue=mail_queue)


@pytest.fixture
def note_service(test_session, notification_service):
    return NoteService(test_session, notifications=notification_service)


@pytest.fixture
def sharing_service(test_session, notification_service):
    return SharingService(test_session, notifications=notification_service)


@pytest.fixture
def admin_service(test_session, notification_service, hub):
    return AdminService(test_session, notifications=notification_service, hub=hub)


@pytest.fixture
def make_user(test_session):
    """Factory creating committed users."""

    async def _make_user(name: str = "Test User", email: str = None, role: str = "USER", is_active: bool = True):
        user = User(
            email=email or f"user_{uuid4().hex[:8]}@example.com",
            name=name,
            password_hash=hash_password(DEFAULT_PASSWORD),
            role=role,
            is_active=is_active,
        )
        test_session.add(user)
        await test_session.commit()
        return user

    return _make_user


@pytest.fixture
async def alice(make_user):
    return await make_user("Alice", "alice@example.com")


@pytest.fixture
async def bob(make_user):
    return await make_user("Bob", "bob@example.com")


@pytest.fixture
async def carol(make_user):
    return await make_user("Carol", "carol@example.com")


@pytest.fixture
async def admin_user(make_user):
    return await make_user("Admin", "admin@example.com", role="ADMIN")


@pytest.fixture
def make_note(test_session):
    """Factory inserting a note row directly, with a first version."""

    async def _make_note(author, title="Test Note", body="Test body", visibility="PRIVATE", tags=()):
        from notevault.core.models import NoteVersion

        note = Note(title=title, body=body, visibility=visibility, is_archived=False, author_id=author.id)
        note.set_tags(list(tags))
        note.versions.append(NoteVersion(version=1, title=title, body=body, created_by_id=author.id))
        test_session.add(note)
        await test_session.commit()
        # hand back the fully loaded instance, author included
        return await NoteRepository(test_session).get_by_id(note.id, refresh=True)

    return _make_note


@pytest.fixture
def auth_headers():
    """Build a bearer header for a user."""

    def _auth_headers(user) -> dict:
        token = create_access_token({"sub": str(user.id)})
        return {"Authorization": f"Bearer {token}"}

    return _auth_headers


@pytest.fixture
def test_app(session_factory, hub, mail_queue):
    """App wired to the test database and the recording hub / mail queue."""

    async def _override_get_db():
        async with session_factory() as session:
            yield session

    fastapi_app.dependency_overrides[get_db_session] = _override_get_db
    fastapi_app.dependency_overrides[get_realtime_hub] = lambda: hub
    fastapi_app.dependency_overrides[get_mail_queue] = lambda: mail_queue
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
async def async_client(test_app):
    async with AsyncClient(transport=ASGITransport(app=test_app), base_url="http://test") as ac:
        yield ac
