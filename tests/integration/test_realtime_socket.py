"""Tests for the notifications WebSocket endpoint."""

import uuid

import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from notevault.api.realtime import WS_INTERNAL_ERROR, WS_UNAUTHORIZED, get_identity_resolver
from notevault.core.exceptions import UnauthorizedError
from notevault.core.realtime import RealtimeHub, get_realtime_hub
from notevault.core.schemas.auth import Identity
from notevault.main import app

USER_ID = uuid.uuid4()
OTHER_ID = uuid.uuid4()


@pytest.fixture
def socket_hub():
    return RealtimeHub()


@pytest.fixture
def client(socket_hub):
    identities = {
        "alice-token": Identity(id=USER_ID, role="USER", is_active=True),
    }

    async def resolver(token):
        if token == "db-down-token":
            raise ConnectionRefusedError("database unavailable")
        try:
            return identities[token]
        except KeyError:
            raise UnauthorizedError("Invalid or expired token")

    app.dependency_overrides[get_identity_resolver] = lambda: resolver
    app.dependency_overrides[get_realtime_hub] = lambda: socket_hub
    # no context manager: skip the lifespan so nothing touches Postgres or Redis
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestHandshake:
    @pytest.mark.parametrize("url", ["/ws/notifications", "/ws/notifications?token=bogus"])
    def test_rejects_missing_or_bad_token(self, client, url):
        with client.websocket_connect(url) as ws:
            with pytest.raises(WebSocketDisconnect) as exc_info:
                ws.receive_json()

        assert exc_info.value.code == WS_UNAUTHORIZED

    def test_resolver_failure_closes_with_internal_error(self, client, socket_hub):
        with client.websocket_connect("/ws/notifications?token=db-down-token") as ws:
            with pytest.raises(WebSocketDisconnect) as exc_info:
                ws.receive_json()

        assert exc_info.value.code == WS_INTERNAL_ERROR
        assert not socket_hub.connections

    def test_query_token(self, client, socket_hub):
        with client.websocket_connect("/ws/notifications?token=alice-token") as ws:
            connected = ws.receive_json()

            assert connected["event"] == "connected"
            assert connected["data"]["userId"] == str(USER_ID)
            assert connected["data"]["room"] == f"user:{USER_ID}"
            assert [c.user_id for c in socket_hub.connections] == [USER_ID]

        # disconnect clears presence
        assert not socket_hub.connections

    def test_bearer_header(self, client):
        with client.websocket_connect(
            "/ws/notifications", headers={"Authorization": "Bearer alice-token"}
        ) as ws:
            assert ws.receive_json()["event"] == "connected"


class TestMessages:
    @pytest.fixture
    def ws(self, client):
        with client.websocket_connect("/ws/notifications?token=alice-token") as ws:
            ws.receive_json()
            yield ws

    def test_ping(self, ws):
        ws.send_json({"event": "ping"})

        reply = ws.receive_json()

        assert reply["event"] == "pong"
        assert "timestamp" in reply["data"]

    def test_join_and_leave_room(self, ws, socket_hub):
        ws.send_json({"event": "join-room", "data": {"room": "project"}})
        assert ws.receive_json() == {"event": "joined-room", "data": {"room": "project"}}
        assert len(socket_hub.rooms["project"]) == 1

        ws.send_json({"event": "leave-room", "data": "project"})
        assert ws.receive_json() == {"event": "left-room", "data": {"room": "project"}}
        assert not socket_hub.rooms.get("project")

    def test_cannot_join_another_users_room(self, ws):
        ws.send_json({"event": "join-room", "data": {"room": f"user:{OTHER_ID}"}})

        reply = ws.receive_json()

        assert reply["event"] == "error"
        assert reply["data"]["room"] == f"user:{OTHER_ID}"

    def test_can_rejoin_own_room(self, ws):
        ws.send_json({"event": "join-room", "data": {"room": f"user:{USER_ID}"}})
        assert ws.receive_json()["event"] == "joined-room"

    @pytest.mark.parametrize(
        "frame",
        [
            '{"event": "dance"}',
            "not json",
            "[1, 2]",
            '{"event": "join-room", "data": {}}',
        ],
    )
    def test_bad_frames_get_error_event(self, ws, frame):
        ws.send_text(frame)

        assert ws.receive_json()["event"] == "error"

        # the connection survives
        ws.send_json({"event": "ping"})
        assert ws.receive_json()["event"] == "pong"
