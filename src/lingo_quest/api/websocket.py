"""Client WebSocket handler: authentication, rooms, conversation and live progress."""

import json
from typing import Any

import structlog
from fastapi import WebSocket, WebSocketDisconnect
from pydantic import ValidationError as PydanticValidationError

from lingo_quest.errors import LingoQuestError, ValidationError
from lingo_quest.models.assessment import ConversationContext
from lingo_quest.models.session import ActivityReport
from lingo_quest.services import Services
from lingo_quest.storage.profile_store import validate_user_id

logger = structlog.get_logger()


class ClientSession:
    """One client connection; bound to a user after ``authenticate``.

    Args:
        services: Shared application services.
        websocket: Accepted client WebSocket.
    """

    def __init__(self, services: Services, websocket: WebSocket):
        self.services = services
        self.websocket = websocket
        self.user_id: str | None = None

    async def handle(self, data: Any) -> None:
        if not isinstance(data, dict):
            raise ValidationError("Messages must be JSON objects")
        msg_type = data.get("type", "")
        if msg_type == "authenticate":
            await self._authenticate(data)
            return
        if self.user_id is None:
            await self.send_error("unauthenticated", "Authenticate first")
            return

        if msg_type == "join_room":
            room_id = self._room_id(data)
            await self.services.hub.join_room(room_id, self.user_id)
            await self._send({"type": "room_joined", "room_id": room_id})
        elif msg_type == "leave_room":
            room_id = self._room_id(data)
            await self.services.hub.leave_room(room_id, self.user_id)
            await self._send({"type": "room_left", "room_id": room_id})
        elif msg_type == "conversation_message":
            await self._conversation_message(data)
        elif msg_type == "session_update":
            report = ActivityReport.parse(data.get("report") or {})
            await self.services.dispatcher.submit(self.user_id, report)
        elif msg_type == "presence_update":
            await self.services.hub.broadcast_all(
                {
                    "type": "presence_update",
                    "user_id": self.user_id,
                    "status": data.get("status", "online"),
                },
                exclude=self.user_id,
            )
        elif not await self.services.hub.dispatch(self.user_id, data):
            await self.send_error("unknown_message_type", f"Unknown message type: {msg_type!r}")

    async def close(self) -> None:
        if self.user_id is not None:
            await self.services.hub.disconnect(self.user_id, self.websocket)
            self.user_id = None

    async def _authenticate(self, data: dict[str, Any]) -> None:
        user_id = validate_user_id(str(data.get("user_id", "")))
        if self.user_id is not None and self.user_id != user_id:
            await self.close()
        self.user_id = user_id
        await self.services.hub.connect(user_id, self.websocket)
        profile = await self.services.dispatcher.read(user_id)
        logger.info("client_authenticated", user_id=user_id)
        await self._send(
            {
                "type": "authenticated",
                "user_id": user_id,
                "level": profile.level,
                "total_xp": profile.total_xp,
                "streak_days": profile.current_streak_days,
                "online_users": self.services.hub.online_users(),
            }
        )

    async def _conversation_message(self, data: dict[str, Any]) -> None:
        text = str(data.get("text", "")).strip()
        if not text:
            raise ValidationError("Message text is required")
        profile = await self.services.dispatcher.read(self.user_id)
        try:
            context = ConversationContext(
                user_id=self.user_id,
                level=profile.learning_level.value,
                topic=data.get("topic"),
                history=data.get("history") or [],
            )
        except PydanticValidationError as e:
            raise ValidationError("Invalid conversation topic or history") from e
        reply = await self.services.conversation.generate_reply(text, context)
        await self._send({"type": "conversation_reply", "reply": reply.model_dump(mode="json")})

        if room_id := data.get("room_id"):
            room_id = str(room_id)
            await self.services.hub.broadcast_room(
                room_id,
                {
                    "type": "room_message",
                    "room_id": room_id,
                    "user_id": self.user_id,
                    "text": text,
                },
                exclude=self.user_id,
            )

    @staticmethod
    def _room_id(data: dict[str, Any]) -> str:
        room_id = data.get("room_id")
        if not room_id:
            raise ValidationError("room_id is required")
        return str(room_id)

    async def send_error(self, code: str, message: str) -> None:
        await self._send({"type": "error", "code": code, "message": message})

    async def _send(self, data: dict) -> None:
        """Send a message to this client."""
        try:
            await self.websocket.send_json(data)
        except Exception:
            logger.warning("client_send_failed", user_id=self.user_id)


async def handle_client_websocket(websocket: WebSocket, services: Services) -> None:
    """Handle a client WebSocket connection."""
    await websocket.accept()
    session = ClientSession(services, websocket)

    try:
        while True:
            try:
                data = await websocket.receive_json()
            except json.JSONDecodeError:
                await session.send_error(ValidationError.code, "Messages must be valid JSON")
                continue
            try:
                await session.handle(data)
            except LingoQuestError as e:
                await session.send_error(e.code, str(e))
    except WebSocketDisconnect:
        logger.info("client_disconnected", user_id=session.user_id)
    except Exception:
        logger.exception("websocket_handler_error", user_id=session.user_id)
    finally:
        await session.close()
