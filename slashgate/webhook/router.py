from __future__ import annotations

import logging

from fastapi import APIRouter, Request
from fastapi.responses import Response

from slashgate.dependencies import get_dispatcher

logger = logging.getLogger(__name__)


async def incoming_interaction(request: Request) -> Response:
    dispatcher = get_dispatcher(request)
    return await dispatcher.handle(request)


def build_interactions_router(endpoint: str = "/api/interactions") -> APIRouter:
    """Router exposing the Discord interactions webhook at ``endpoint``."""
    router = APIRouter()
    router.add_api_route(
        endpoint,
        incoming_interaction,
        methods=["POST"],
        include_in_schema=False,
    )
    logger.debug("Interactions endpoint mounted at %s", endpoint)
    return router
