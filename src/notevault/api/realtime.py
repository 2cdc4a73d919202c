"""
WebSocket endpoint for realtime notifications.

Clients connect to ``/ws/notifications`` with an access token, either as
``?token=`` or in an ``Authorization: Bearer`` header. A connection whose token
does not resolve to an active user is closed with code 4401; clients have to
reconnect with a fresh token. If the token cannot be checked at all, e.g. the
database is down, the close code is 1011.

Frames in both directions are JSON objects ``{"event": ..., "data": ...}``.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Optional

from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect

from ..config import get_settings
from ..core.exceptions import UnauthorizedError
from ..core.realtime import ClientConnection, RealtimeHub, get_realtime_hub, user_room
from ..core.schemas.auth import Identity
from ..core.services.auth_service import AuthService
from ..database import AsyncSessionLocal

logger = logging.getLogger(__name__)

router = APIRouter(tags=["realtime"])

WS_UNAUTHORIZED = 4401
WS_INTERNAL_ERROR = 1011

IdentityResolver = Callable[[str], Awaitable[Identity]]


async def resolve_identity(token: str) -> Identity:
    # short-lived session; the socket may stay open for hours
    async with AsyncSessionLocal() as session:
        return await AuthService(session).resolve_identity(token)


def get_identity_resolver() -> IdentityResolver:
    return resolve_identity


def _header_token(websocket: WebSocket) -> Optional[str]:
    header = websocket.headers.get("authorization", "")
    scheme, _, credentials = header.partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()
    return None


def _room_name(data: Any) -> Optional[str]:
    if isinstance(data, dict):
        data = data.get("room")
    if isinstance(data, str) and data.strip():
        return data.strip()
    return None


async def _handle_message(hub: RealtimeHub, connection: ClientConnection, raw: str) -> None:
    try:
        message = json.loads(raw)
    except ValueError:
        await connection.emit("error", {"message": "Frames must be JSON"})
        return
    if not isinstance(message, dict):
        await connection.emit("error", {"message": "Frames must be JSON objects"})
        return

    event = message.get("event")
    if event == "ping":
        await connection.emit("pong", {"timestamp": datetime.now(timezone.utc).isoformat()})
    elif event == "join-room":
        room = _room_name(message.get("data"))
        prefix = get_settings().ws_user_room_prefix
        if room is None:
            await connection.emit("error", {"message": "Room name required"})
        elif room.startswith(prefix) and room != user_room(connection.user_id):
            # other users' private rooms are off limits
            await connection.emit("error", {"message": "Cannot join another user's room", "room": room})
        else:
            await hub.join(connection, room)
            await connection.emit("joined-room", {"room": room})
    elif event == "leave-room":
        room = _room_name(message.get("data"))
        if room is None:
            await connection.emit("error", {"message": "Room name required"})
        else:
            await hub.leave(connection, room)
            await connection.emit("left-room", {"room": room})
    else:
        await connection.emit("error", {"message": f"Unknown event: {event}"})


@router.websocket("/ws/notifications")
async def notifications_socket(
    websocket: WebSocket,
    token: Optional[str] = Query(None),
    resolver: IdentityResolver = Depends(get_identity_resolver),
    hub: RealtimeHub = Depends(get_realtime_hub),
):
    await websocket.accept()

    credential = token or _header_token(websocket)
    identity = None
    if credential:
        try:
            identity = await resolver(credential)
        except UnauthorizedError as e:
            logger.info(f"Rejected realtime connection: {e.detail}")
        except Exception:
            logger.exception("Could not resolve realtime connection identity")
            await websocket.close(code=WS_INTERNAL_ERROR, reason="Internal error")
            return

    if identity is None:
        await websocket.close(code=WS_UNAUTHORIZED, reason="Unauthorized")
        return

    connection = ClientConnection(websocket, identity.id)
    await hub.connect(connection)
    try:
        await connection.emit(
            "connected",
            {"userId": str(identity.id), "socketId": connection.id, "room": user_room(identity.id)},
        )
        while True:
            raw = await websocket.receive_text()
            await _handle_message(hub, connection, raw)
    except WebSocketDisconnect:
        pass
    finally:
        await hub.disconnect(connection)
