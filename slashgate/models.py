from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Any

from pydantic import BaseModel, Field


class InteractionType(IntEnum):
    PING = 1
    APPLICATION_COMMAND = 2


class InteractionResponseType(IntEnum):
    PONG = 1
    CHANNEL_MESSAGE_WITH_SOURCE = 4


class OptionType(IntEnum):
    STRING = 3


# --- Command registration schema ---


class CommandOption(BaseModel):
    name: str
    description: str
    type: int = OptionType.STRING.value
    required: bool = False


class CommandDescriptor(BaseModel):
    """A slash command as Discord expects it in a bulk overwrite.

    ``route``, ``required_params`` and ``optional_params`` are kept for
    dispatch and never sent over the wire.
    """

    name: str
    description: str
    options: list[CommandOption] = Field(default_factory=list)

    route: str = Field(default="", exclude=True)
    required_params: tuple[str, ...] = Field(default=(), exclude=True)
    optional_params: tuple[str, ...] = Field(default=(), exclude=True)

    model_config = {"frozen": True}


# --- Inbound interaction payload ---


class InteractionOption(BaseModel):
    name: str
    value: Any = None


class InteractionData(BaseModel):
    id: str | None = None
    name: str = ""
    options: list[InteractionOption] | None = None


class Interaction(BaseModel):
    id: str | None = None
    type: int = 0
    data: InteractionData | None = None
    guild_id: str | None = None
    channel_id: str | None = None
    token: str | None = None

    model_config = {"extra": "ignore"}


# --- Outbound replies ---


class PongReply(BaseModel):
    type: int = InteractionResponseType.PONG.value


class MessageData(BaseModel):
    content: str = ""
    embeds: list[dict] = Field(default_factory=list)
    components: list[dict] = Field(default_factory=list)
    attachments: list[dict] = Field(default_factory=list)


class MessageReply(BaseModel):
    type: int = InteractionResponseType.CHANNEL_MESSAGE_WITH_SOURCE.value
    data: MessageData = Field(default_factory=MessageData)


class ErrorBody(BaseModel):
    error: str


class HealthResponse(BaseModel):
    status: str
    commands: int
    endpoint: str


# --- Connection metadata ---


@dataclass(frozen=True)
class ConnInfo:
    """Addresses of the HTTP connection that delivered the interaction."""

    local_addr: tuple[str, int] | None = None
    remote_addr: tuple[str, int] | None = None
