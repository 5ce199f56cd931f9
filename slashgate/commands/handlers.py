"""Calling user handlers and reading back what they return.

Handlers can be ``def`` or ``async def`` and may return a starlette
``Response`` (streaming or not), raw bytes, or plain text.
"""

from __future__ import annotations

import inspect
from typing import Any

from starlette.requests import Request
from starlette.responses import Response, StreamingResponse

from slashgate.models import ConnInfo


async def invoke(handler: Any, *args: Any, **kwargs: Any) -> Any:
    """Call a handler and await the result if it's a coroutine."""
    result = handler(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result


async def read_text(result: Any) -> str:
    """Return the body of a handler result as text."""
    if result is None:
        return ""
    if isinstance(result, str):
        return result
    if isinstance(result, (bytes, bytearray)):
        return bytes(result).decode("utf-8")
    if isinstance(result, StreamingResponse):
        chunks: list[bytes] = []
        async for chunk in result.body_iterator:
            chunks.append(chunk.encode(result.charset) if isinstance(chunk, str) else bytes(chunk))
        return b"".join(chunks).decode(result.charset)
    if isinstance(result, Response):
        return bytes(result.body).decode(result.charset)
    raise TypeError(f"Handler returned unsupported type {type(result).__name__}")


def conn_info(request: Request) -> ConnInfo:
    server = request.scope.get("server")
    client = request.client
    return ConnInfo(
        local_addr=(server[0], server[1]) if server else None,
        remote_addr=(client.host, client.port) if client else None,
    )
