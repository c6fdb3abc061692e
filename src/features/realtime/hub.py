"""Realtime channel hub: WebSocket connections and topic pub/sub.

All state lives on the event loop; mutations never await between reading
and writing the subscriber map, so no lock is needed. Publishing iterates a
snapshot so a subscriber leaving mid-broadcast is harmless.
"""

import json
import logging
import time
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Protocol
from uuid import uuid4

from pydantic import ValidationError
from starlette.websockets import WebSocketDisconnect

from src.features.auth.jwt_utils import decode_access_token

from .schemas import CLIENT_MESSAGE_TYPES, AuthenticateMessage, ChatMessageIn, PingMessage, client_message_adapter

logger = logging.getLogger(__name__)

GLOBAL_NOTIFICATIONS = "global-notifications"
GLOBAL_CHAT = "global-chat"


def user_channel(user_id: int) -> str:
    return f"user-{user_id}"


def _timestamp() -> str:
    return datetime.now(UTC).isoformat()


class MessageSink(Protocol):
    """Anything that can receive a JSON frame (a Starlette WebSocket in practice)."""

    async def send_json(self, data: Any, mode: str = "text") -> None: ...


class ChannelAccessDenied(Exception):
    """Raised when a connection subscribes to a channel it may not join."""

    def __init__(self, channel: str):
        super().__init__(f"Subscription to {channel!r} is not allowed")
        self.channel = channel


@dataclass(eq=False)
class Connection:
    """One live WebSocket session.

    Authentication is one-way: once ``user_id`` is set it never changes.
    """

    websocket: MessageSink
    id: str = field(default_factory=lambda: uuid4().hex)
    connected_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    user_id: int | None = None
    email: str | None = None
    channels: set[str] = field(default_factory=set)

    @property
    def authenticated(self) -> bool:
        return self.user_id is not None


class ChannelHub:
    """Tracks open connections and fans messages out to channel subscribers."""

    def __init__(self):
        self._connections: dict[str, Connection] = {}
        self._subscribers: dict[str, set[Connection]] = {}
        self._last_chat_id = 0

    @property
    def connection_count(self) -> int:
        return len(self._connections)

    def subscribers(self, channel: str) -> list[Connection]:
        """Snapshot of the connections currently subscribed to ``channel``."""
        return list(self._subscribers.get(channel, ()))

    # Connection lifecycle

    async def connect(self, websocket: MessageSink) -> Connection:
        """Register an accepted socket, greet it and announce it."""
        connection = Connection(websocket=websocket)
        self._connections[connection.id] = connection
        self.subscribe(connection, GLOBAL_NOTIFICATIONS)
        logger.info(f"WebSocket client connected: {connection.id} (total: {self.connection_count})")

        await self.send(
            connection,
            {
                "type": "welcome",
                "message": "Connected to enhanced API real-time features",
                "timestamp": _timestamp(),
                "connected": connection.connected_at.isoformat(),
            },
        )
        await self.publish(
            GLOBAL_NOTIFICATIONS,
            {
                "type": "user_connected",
                "message": "New user connected to real-time features",
                "timestamp": _timestamp(),
                "connectedClients": self.connection_count,
            },
        )
        return connection

    async def disconnect(self, connection: Connection) -> None:
        """Forget a closed connection and announce the new count.

        The connection leaves every channel before the announcement, so it
        never receives its own ``user_disconnected`` event.
        """
        if self._connections.pop(connection.id, None) is None:
            return

        for channel in list(connection.channels):
            self.unsubscribe(connection, channel)

        logger.info(f"WebSocket client disconnected: {connection.id} (total: {self.connection_count})")
        await self.publish(
            GLOBAL_NOTIFICATIONS,
            {
                "type": "user_disconnected",
                "message": "User disconnected from real-time features",
                "timestamp": _timestamp(),
                "connectedClients": self.connection_count,
            },
        )

    # Subscriptions

    def _may_join(self, connection: Connection, channel: str) -> bool:
        if channel in (GLOBAL_NOTIFICATIONS, GLOBAL_CHAT):
            return True
        return connection.user_id is not None and channel == user_channel(connection.user_id)

    def subscribe(self, connection: Connection, channel: str) -> None:
        """Add ``connection`` to ``channel``.

        Raises:
            ChannelAccessDenied: Channel is not global and not the connection's own user channel

        """
        if not self._may_join(connection, channel):
            raise ChannelAccessDenied(channel)

        self._subscribers.setdefault(channel, set()).add(connection)
        connection.channels.add(channel)

    def unsubscribe(self, connection: Connection, channel: str) -> None:
        members = self._subscribers.get(channel)
        if members is not None:
            members.discard(connection)
            if not members:
                del self._subscribers[channel]
        connection.channels.discard(channel)

    # Delivery

    async def send(self, connection: Connection, payload: dict[str, Any]) -> bool:
        """Send one frame; a failed send is logged and reported as False."""
        try:
            await connection.websocket.send_json(payload)
        except (WebSocketDisconnect, RuntimeError, OSError) as exc:
            logger.warning(f"Dropped {payload.get('type')} message for connection {connection.id}: {exc}")
            return False
        return True

    async def publish(self, channel: str, payload: dict[str, Any]) -> int:
        """Send ``payload`` to every subscriber of ``channel``.

        Best-effort and at-most-once. Returns the number of successful deliveries.
        """
        delivered = 0
        for connection in self.subscribers(channel):
            if await self.send(connection, payload):
                delivered += 1
        return delivered

    async def notify_user(self, user_id: int, payload: dict[str, Any]) -> int:
        """Publish to the private channel of ``user_id``."""
        return await self.publish(user_channel(user_id), payload)

    # Inbound messages

    async def handle_message(self, connection: Connection, raw: str | bytes) -> None:
        """Dispatch one inbound frame."""
        try:
            data = json.loads(raw)
        except (ValueError, RecursionError):
            await self._send_error(connection, "Invalid JSON message format")
            return

        message_type = data.get("type") if isinstance(data, dict) else None
        if not isinstance(message_type, str) or message_type not in CLIENT_MESSAGE_TYPES:
            await self._send_error(connection, "Unknown message type")
            return

        try:
            message = client_message_adapter.validate_python(data)
        except ValidationError:
            if message_type == "authenticate":
                await self._send_auth_error(connection)
            else:
                await self._send_error(connection, "Invalid message format")
            return

        match message:
            case AuthenticateMessage():
                await self._authenticate(connection, message.token)
            case ChatMessageIn():
                await self._chat(connection, message.message)
            case PingMessage():
                await self.send(connection, {"type": "pong", "timestamp": _timestamp()})

    async def _authenticate(self, connection: Connection, token: str | None) -> None:
        payload = decode_access_token(token) if token else None
        if payload is None:
            await self._send_auth_error(connection)
            return

        if connection.authenticated and connection.user_id != payload.user_id:
            await self.send(
                connection,
                {"type": "authentication_error", "message": "Connection already authenticated as another user"},
            )
            return

        first_time = not connection.authenticated
        connection.user_id = payload.user_id
        connection.email = payload.email
        self.subscribe(connection, user_channel(payload.user_id))
        self.subscribe(connection, GLOBAL_CHAT)

        await self.send(
            connection,
            {
                "type": "authenticated",
                "message": "WebSocket connection authenticated",
                "user": {"id": payload.user_id, "email": payload.email},
            },
        )

        if first_time:
            logger.info(f"WebSocket connection {connection.id} authenticated as {payload.email}")
            await self.publish(
                GLOBAL_NOTIFICATIONS,
                {
                    "type": "user_authenticated",
                    "message": f"User {payload.email} authenticated",
                    "timestamp": _timestamp(),
                },
            )

    async def _chat(self, connection: Connection, text: str | None) -> None:
        if not connection.authenticated:
            await self._send_error(connection, "Authentication required to send messages")
            return

        if not text:
            await self._send_error(connection, "Message content is required")
            return

        await self.publish(
            GLOBAL_CHAT,
            {
                "type": "chat_message",
                "id": self._next_chat_id(),
                "userId": connection.user_id,
                "username": connection.email,
                "message": text,
                "timestamp": _timestamp(),
            },
        )

    def _next_chat_id(self) -> int:
        # Millisecond clock, bumped so ids stay strictly increasing
        candidate = int(time.time() * 1000)
        self._last_chat_id = max(candidate, self._last_chat_id + 1)
        return self._last_chat_id

    async def _send_error(self, connection: Connection, message: str) -> None:
        await self.send(connection, {"type": "error", "message": message})

    async def _send_auth_error(self, connection: Connection) -> None:
        await self.send(connection, {"type": "authentication_error", "message": "Invalid authentication token"})


hub = ChannelHub()


def get_hub() -> ChannelHub:
    """FastAPI dependency returning the process-wide hub."""
    return hub
