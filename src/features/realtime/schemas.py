"""Realtime message schemas.

Inbound frames are a tagged union over ``type``. Outbound frames are plain
dicts built by the hub.
"""

from typing import Annotated, Literal

from pydantic import BaseModel, Field, TypeAdapter


class AuthenticateMessage(BaseModel):
    type: Literal["authenticate"]
    token: str | None = None


class ChatMessageIn(BaseModel):
    type: Literal["chat_message"]
    message: str | None = None


class PingMessage(BaseModel):
    type: Literal["ping"]


ClientMessage = Annotated[AuthenticateMessage | ChatMessageIn | PingMessage, Field(discriminator="type")]

client_message_adapter: TypeAdapter[ClientMessage] = TypeAdapter(ClientMessage)

CLIENT_MESSAGE_TYPES = frozenset({"authenticate", "chat_message", "ping"})
