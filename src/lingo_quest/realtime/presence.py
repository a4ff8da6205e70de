"""In-process presence and room fan-out for connected clients."""

from collections import defaultdict
from collections.abc import Callable, Coroutine
from typing import Any, Protocol

import structlog

logger = structlog.get_logger()

MessageHandler = Callable[[str, dict[str, Any]], Coroutine[Any, Any, None]]


class Connection(Protocol):
    async def send_json(self, data: Any) -> None: ...


class PresenceHub:
    """Tracks who is online and which rooms they are in, and fans out events."""

    def __init__(self) -> None:
        self._connections: dict[str, set[Connection]] = defaultdict(set)
        self._rooms: dict[str, set[str]] = defaultdict(set)
        self._handlers: dict[str, list[MessageHandler]] = {}

    def online_users(self) -> list[str]:
        return sorted(user_id for user_id, conns in self._connections.items() if conns)

    def is_online(self, user_id: str) -> bool:
        return bool(self._connections.get(user_id))

    def room_members(self, room_id: str) -> list[str]:
        return sorted(self._rooms.get(room_id, ()))

    async def connect(self, user_id: str, connection: Connection) -> None:
        first = not self.is_online(user_id)
        self._connections[user_id].add(connection)
        if first:
            logger.info("user_online", user_id=user_id)
            await self.broadcast_all(
                {"type": "presence_update", "user_id": user_id, "status": "online"},
                exclude=user_id,
            )

    async def disconnect(self, user_id: str, connection: Connection) -> None:
        conns = self._connections.get(user_id)
        if conns is None:
            return
        conns.discard(connection)
        if conns:
            return
        del self._connections[user_id]
        for room_id in [r for r, members in self._rooms.items() if user_id in members]:
            await self.leave_room(room_id, user_id)
        logger.info("user_offline", user_id=user_id)
        await self.broadcast_all(
            {"type": "presence_update", "user_id": user_id, "status": "offline"}
        )

    async def join_room(self, room_id: str, user_id: str) -> None:
        self._rooms[room_id].add(user_id)
        await self.broadcast_room(
            room_id, {"type": "participant_joined", "room_id": room_id, "user_id": user_id},
            exclude=user_id,
        )

    async def leave_room(self, room_id: str, user_id: str) -> None:
        members = self._rooms.get(room_id)
        if not members or user_id not in members:
            return
        members.discard(user_id)
        if not members:
            del self._rooms[room_id]
        await self.broadcast_room(
            room_id, {"type": "participant_left", "room_id": room_id, "user_id": user_id}
        )

    async def send_to_user(self, user_id: str, event: dict[str, Any]) -> None:
        for connection in list(self._connections.get(user_id, ())):
            try:
                await connection.send_json(event)
            except Exception:
                logger.warning("presence_send_failed", user_id=user_id, event=event.get("type"))

    async def broadcast_room(
        self, room_id: str, event: dict[str, Any], exclude: str | None = None
    ) -> None:
        for user_id in list(self._rooms.get(room_id, ())):
            if user_id != exclude:
                await self.send_to_user(user_id, event)

    async def broadcast_all(self, event: dict[str, Any], exclude: str | None = None) -> None:
        for user_id in self.online_users():
            if user_id != exclude:
                await self.send_to_user(user_id, event)

    async def broadcast(self, target: str, event: dict[str, Any]) -> None:
        """Send to a room if ``target`` names one, otherwise to that user."""
        if target in self._rooms:
            await self.broadcast_room(target, event)
        else:
            await self.send_to_user(target, event)

    def on_message(self, event_type: str, handler: MessageHandler) -> None:
        """Register an async handler(user_id, message) for an incoming event type."""
        self._handlers.setdefault(event_type, []).append(handler)

    async def dispatch(self, user_id: str, message: dict[str, Any]) -> bool:
        """Run handlers for an incoming message; False when none is registered."""
        handlers = self._handlers.get(message.get("type", ""), [])
        for handler in handlers:
            await handler(user_id, message)
        return bool(handlers)
