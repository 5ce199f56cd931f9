from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from urllib.parse import parse_qsl, quote, unquote, urlencode, urljoin, urlsplit

from pydantic import BaseModel, ValidationError
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from slashgate.commands.compiler import ROUTE_BASE_URL
from slashgate.commands.handlers import conn_info, invoke, read_text
from slashgate.commands.registry import CommandRegistry
from slashgate.models import (
    CommandDescriptor,
    ErrorBody,
    Interaction,
    InteractionOption,
    InteractionType,
    MessageData,
    MessageReply,
    PongReply,
)
from slashgate.webhook.security import SIGNATURE_HEADER, TIMESTAMP_HEADER, verify_signature

logger = logging.getLogger(__name__)

JSON_MEDIA_TYPE = "application/json; charset=utf-8"


def json_response(body: BaseModel, status_code: int = 200) -> JSONResponse:
    return JSONResponse(
        body.model_dump(mode="json"), status_code=status_code, media_type=JSON_MEDIA_TYPE
    )


def error_response(message: str, status_code: int) -> JSONResponse:
    return json_response(ErrorBody(error=message), status_code=status_code)


def _option_value(value: object) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    return "" if value is None else str(value)


def reconcile_options(
    descriptor: CommandDescriptor, options: Iterable[InteractionOption]
) -> tuple[str, list[tuple[str, str]], dict[str, str]]:
    """Map interaction options back onto the command's route.

    Options naming a query parameter of the route overwrite its value;
    every other option fills the ``:name`` path segment and is returned in
    the params dict. Returns (decoded path, query pairs, params).
    """
    options = list(options)
    optional = set(descriptor.optional_params)

    overrides = {o.name: _option_value(o.value) for o in options if o.name in optional}
    required = [(o.name, _option_value(o.value)) for o in options if o.name not in optional]

    parts = urlsplit(urljoin(ROUTE_BASE_URL, descriptor.route))

    # Absent optional options keep the default written in the route.
    query: list[tuple[str, str]] = []
    overridden: set[str] = set()
    for key, value in parse_qsl(parts.query, keep_blank_values=True):
        if key in overrides:
            if key in overridden:
                continue
            overridden.add(key)
            value = overrides[key]
        query.append((key, value))

    template = [unquote(s) for s in parts.path.split("/")]
    # Placeholder positions come from the route, never from substituted values.
    slots: dict[str, int] = {}
    for i, s in enumerate(template):
        if s.startswith(":"):
            slots.setdefault(s, i)

    segments = list(template)
    params: dict[str, str] = {}
    for name, value in required:
        params[name] = value
        slot = slots.get(f":{name}")
        if slot is not None:
            segments[slot] = value

    return "/".join(segments), query, params


def build_command_request(
    request: Request, path: str, query: list[tuple[str, str]]
) -> Request:
    """Build the GET request a handler would have received over plain HTTP."""
    raw_path = "/".join(quote(s, safe=":@") for s in path.split("/"))
    headers: list[tuple[bytes, bytes]] = []
    host = request.headers.get("host")
    if host:
        headers.append((b"host", host.encode("latin-1")))
    scope = {
        "type": "http",
        "asgi": {"version": "3.0"},
        "http_version": "1.1",
        "method": "GET",
        "scheme": request.url.scheme,
        "server": request.scope.get("server"),
        "client": request.scope.get("client"),
        "root_path": request.scope.get("root_path", ""),
        "path": path,
        "raw_path": raw_path.encode("ascii"),
        "query_string": urlencode(query).encode("ascii"),
        "headers": headers,
    }
    return Request(scope)


class InteractionDispatcher:
    """Authenticates Discord interactions and routes commands to handlers."""

    def __init__(self, registry: CommandRegistry, public_key: str) -> None:
        self._registry = registry
        self._public_key = public_key

    async def handle(self, request: Request) -> Response:
        signature = request.headers.get(SIGNATURE_HEADER)
        timestamp = request.headers.get(TIMESTAMP_HEADER)
        if not signature:
            return error_response(f"header {SIGNATURE_HEADER} not available", 400)
        if not timestamp:
            return error_response(f"header {TIMESTAMP_HEADER} not available", 400)

        body = await request.body()

        # Discord sends requests with bad signatures to check that we reject them.
        if not verify_signature(body, timestamp, signature, self._public_key):
            logger.warning("Invalid interaction signature")
            return error_response("Invalid request", 401)

        try:
            payload = json.loads(body)
        except ValueError:
            logger.warning("Interaction body is not valid JSON")
            return error_response("bad request", 400)
        if not isinstance(payload, dict):
            return error_response("bad request", 400)

        interaction_type = payload.get("type")
        if isinstance(interaction_type, bool):
            interaction_type = None
        if interaction_type == InteractionType.PING:
            logger.debug("Ping received")
            return json_response(PongReply())

        if interaction_type == InteractionType.APPLICATION_COMMAND:
            try:
                interaction = Interaction.model_validate(payload)
            except ValidationError:
                logger.warning("Malformed application command payload", exc_info=True)
                return error_response("bad request", 400)
            return await self._handle_command(request, interaction)

        # A genuine Discord request should never get here.
        logger.warning("Unsupported interaction type: %r", interaction_type)
        return error_response("bad request", 400)

    async def _handle_command(self, request: Request, interaction: Interaction) -> Response:
        name = interaction.data.name if interaction.data else ""
        options = (interaction.data.options or []) if interaction.data else []

        binding = self._registry.lookup(name)
        if binding is None:
            logger.error("Received unregistered command /%s", name)
            return error_response("unknown command", 500)

        path, query, params = reconcile_options(binding.descriptor, options)
        command_request = build_command_request(request, path, query)
        logger.info("Command /%s -> %s", name, command_request.url)

        try:
            result = await invoke(binding.handler, command_request, conn_info(request), params)
            content = await read_text(result)
        except Exception:
            logger.exception("Handler for /%s failed", name)
            return error_response("handler failed", 500)

        return json_response(MessageReply(data=MessageData(content=content)))
