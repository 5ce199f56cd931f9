from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse, Response

from slashgate.commands.compiler import to_path_template
from slashgate.commands.handlers import conn_info, invoke, read_text
from slashgate.commands.registry import Binding, CommandRegistry

logger = logging.getLogger(__name__)


def _command_endpoint(binding: Binding):
    async def endpoint(request: Request) -> Response:
        params = {k: str(v) for k, v in request.path_params.items()}
        result = await invoke(binding.handler, request, conn_info(request), params)
        if isinstance(result, Response):
            return result
        return PlainTextResponse(await read_text(result))

    return endpoint


def mount_command_routes(app: FastAPI, registry: CommandRegistry) -> None:
    """Serve every command route as a plain GET endpoint, e.g. ``/echo/{word}``.

    Routes whose path is already taken (e.g. ``/health``) are not mounted.
    """
    taken = {getattr(route, "path", None) for route in app.routes}
    for binding in registry.list_bindings():
        path = to_path_template(binding.route)
        if path in taken:
            logger.warning(
                "Not serving /%s at GET %s: path already in use", binding.name, path
            )
            continue
        taken.add(path)
        app.add_api_route(
            path,
            _command_endpoint(binding),
            methods=["GET"],
            name=f"command:{binding.name}",
        )
        logger.debug("Serving /%s at GET %s", binding.name, path)
