from __future__ import annotations

import logging
from collections.abc import Mapping
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from slashgate.commands.registry import CommandRegistry, Handler
from slashgate.commands.routes import mount_command_routes
from slashgate.config import Settings
from slashgate.discord.client import DiscordClient
from slashgate.health.router import router as health_router
from slashgate.logging_config import configure_logging
from slashgate.webhook.dispatcher import InteractionDispatcher
from slashgate.webhook.router import build_interactions_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    registry: CommandRegistry = app.state.command_registry

    configure_logging(
        level=settings.log_level, json_format=settings.log_json, log_file=settings.log_file
    )

    http_client = httpx.AsyncClient(timeout=httpx.Timeout(settings.http_timeout))
    app.state.http_client = http_client
    app.state.discord_client = DiscordClient(
        http_client=http_client,
        application_id=settings.discord_application_id,
        auth_token=settings.discord_bot_token,
        token_prefix=settings.token_prefix,
        guild_id=settings.discord_guild_id,
        api_url=settings.discord_api_url,
    )

    logger.info(
        "Serving %d command(s) at %s: %s",
        len(registry),
        settings.endpoint,
        ", ".join(f"/{d.name}" for d in registry.descriptors()) or "(none)",
    )

    app.state.sync_result = None
    if settings.serve_only:
        logger.info("serve_only set, skipping command registration")
    else:
        # Failures are reported, not raised: the webhook still serves.
        result = await registry.sync_remote(app.state.discord_client)
        app.state.sync_result = result
        if not result.ok:
            logger.error("Command registration did not succeed: %s", result.error)

    yield

    await http_client.aclose()


def create_app(
    routes: Mapping[str, Handler] | None = None,
    settings: Settings | None = None,
) -> FastAPI:
    """Build the gateway app for a ``route pattern -> handler`` mapping.

    Example::

        async def greet(request, conn_info, params):
            title = request.query_params.get("title") or "friend"
            return PlainTextResponse(f"Hello {title} {params['name']}")

        app = create_app({"/greet/:name?title=": greet})
    """
    settings = settings or Settings()

    registry = CommandRegistry()
    registry.register_routes(routes or {})
    registry.freeze()

    app = FastAPI(title="slashgate", lifespan=lifespan)
    app.state.settings = settings
    app.state.command_registry = registry
    app.state.dispatcher = InteractionDispatcher(registry, settings.discord_public_key)

    app.include_router(health_router)
    app.include_router(build_interactions_router(settings.endpoint))
    if settings.serve_routes:
        mount_command_routes(app, registry)
    return app
