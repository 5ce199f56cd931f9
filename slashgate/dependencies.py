from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import Request

from slashgate.commands.registry import CommandRegistry
from slashgate.config import Settings

if TYPE_CHECKING:
    from slashgate.webhook.dispatcher import InteractionDispatcher


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_command_registry(request: Request) -> CommandRegistry:
    return request.app.state.command_registry


def get_dispatcher(request: Request) -> InteractionDispatcher:
    return request.app.state.dispatcher
