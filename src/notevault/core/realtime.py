"""
Realtime delivery: presence registry, rooms and push primitives.

Every push is best effort. The durable record of a notification is its
database row; nothing here is persisted or replayed.
"""

import logging
import uuid
from abc import ABC, abstractmethod
from collections import defaultdict
from typing import Any, Dict, Iterable, List, Optional, Set
from uuid import UUID

from fastapi import WebSocket

from ..config import get_settings

logger = logging.getLogger(__name__)


def user_room(user_id: UUID) -> str:
    """Private room every connection of ``user_id`` joins."""
    return f"{get_settings().ws_user_room_prefix}{user_id}"


class ClientConnection:
    """One authenticated socket."""

    def __init__(self, websocket: WebSocket, user_id: UUID):
        self.id = uuid.uuid4().hex
        self.websocket = websocket
        self.user_id = user_id
        self.rooms: Set[str] = set()

    def __repr__(self) -> str:
        return f"<ClientConnection(id={self.id}, user_id={self.user_id})>"

    async def emit(self, event: str, data: Any = None) -> None:
        await self.websocket.send_json({"event": event, "data": data})


class PresenceRegistry(ABC):
    """Which connection currently represents each online user.

    Async so a shared external store can stand in for the in-process map.
    """

    @abstractmethod
    async def register(self, user_id: UUID, connection: ClientConnection) -> Optional[ClientConnection]:
        """Track ``connection`` for ``user_id``; return the one it displaced, if any."""

    @abstractmethod
    async def unregister(self, user_id: UUID, connection: ClientConnection) -> bool:
        """Forget ``user_id`` only if it still points at ``connection``."""

    @abstractmethod
    async def lookup(self, user_id: UUID) -> Optional[ClientConnection]:
        pass

    @abstractmethod
    async def online_user_ids(self) -> List[UUID]:
        pass


class InMemoryPresenceRegistry(PresenceRegistry):
    """
    Single-process registry, last writer wins.

    A user with several sockets is represented by the most recent one. None of
    the methods await, so under the event loop each call is atomic.
    """

    def __init__(self):
        self._connections: Dict[UUID, ClientConnection] = {}

    async def register(self, user_id, connection):
        previous = self._connections.get(user_id)
        self._connections[user_id] = connection
        return previous if previous is not connection else None

    async def unregister(self, user_id, connection):
        if self._connections.get(user_id) is connection:
            del self._connections[user_id]
            return True
        return False

    async def lookup(self, user_id):
        return self._connections.get(user_id)

    async def online_user_ids(self):
        return list(self._connections)


class RealtimeHub:
    """Owns live connections and room membership and pushes events to them."""

    def __init__(self, registry: Optional[PresenceRegistry] = None):
        self.registry = registry or InMemoryPresenceRegistry()
        self.rooms: Dict[str, Set[ClientConnection]] = defaultdict(set)
        self.connections: Set[ClientConnection] = set()

    async def connect(self, connection: ClientConnection) -> None:
        """Register an authenticated connection and join it to its user room."""
        self.connections.add(connection)
        previous = await self.registry.register(connection.user_id, connection)
        if previous is not None:
            logger.info(f"User {connection.user_id} reconnected, connection {previous.id} no longer tracked")
        await self.join(connection, user_room(connection.user_id))
        logger.info(f"User {connection.user_id} connected with socket {connection.id}")

    async def disconnect(self, connection: ClientConnection) -> None:
        if connection not in self.connections:
            return
        self.connections.discard(connection)
        for room in list(connection.rooms):
            await self.leave(connection, room)
        await self.registry.unregister(connection.user_id, connection)
        logger.info(f"User {connection.user_id} disconnected socket {connection.id}")

    async def join(self, connection: ClientConnection, room: str) -> None:
        self.rooms[room].add(connection)
        connection.rooms.add(room)

    async def leave(self, connection: ClientConnection, room: str) -> None:
        members = self.rooms.get(room)
        if members is not None:
            members.discard(connection)
            if not members:
                del self.rooms[room]
        connection.rooms.discard(room)

    async def is_online(self, user_id: UUID) -> bool:
        return await self.registry.lookup(user_id) is not None

    async def online_count(self) -> int:
        return len(await self.registry.online_user_ids())

    async def _emit(self, connection: ClientConnection, event: str, data: Any) -> bool:
        try:
            await connection.emit(event, data)
            return True
        except Exception as e:
            logger.warning(f"Failed to push '{event}' to socket {connection.id}: {e}")
            await self.disconnect(connection)
            return False

    async def _emit_many(self, connections: Iterable[ClientConnection], event: str, data: Any) -> int:
        delivered = 0
        # snapshot: failed sends mutate the room tables
        for connection in list(connections):
            if await self._emit(connection, event, data):
                delivered += 1
        return delivered

    async def send_to_user(self, user_id: UUID, event: str, data: Any) -> bool:
        """Unicast to the user's current connection. False when offline or the send failed."""
        connection = await self.registry.lookup(user_id)
        if connection is None:
            return False
        return await self._emit(connection, event, data)

    async def send_to_users(self, user_ids: Iterable[UUID], event: str, data: Any) -> int:
        delivered = 0
        for user_id in dict.fromkeys(user_ids):
            if await self.send_to_user(user_id, event, data):
                delivered += 1
        logger.debug(f"Sent '{event}' to {delivered} online users")
        return delivered

    async def send_to_room(self, room: str, event: str, data: Any) -> int:
        return await self._emit_many(self.rooms.get(room, ()), event, data)

    async def broadcast(self, event: str, data: Any) -> int:
        delivered = await self._emit_many(self.connections, event, data)
        logger.info(f"Broadcast '{event}' to {delivered} sockets")
        return delivered


# Process-wide hub
_hub: Optional[RealtimeHub] = None


def get_realtime_hub() -> RealtimeHub:
    global _hub
    if _hub is None:
        _hub = RealtimeHub()
    return _hub
