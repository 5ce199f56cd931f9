import json

import pytest
from fastapi.testclient import TestClient
from nacl.signing import SigningKey
from starlette.responses import PlainTextResponse

from slashgate.commands.registry import CommandRegistry
from slashgate.config import Settings
from slashgate.main import create_app

SIGNING_KEY = SigningKey(bytes(range(32)))
PUBLIC_KEY = SIGNING_KEY.verify_key.encode().hex()

TEST_SETTINGS = Settings(
    _env_file=None,
    discord_application_id="1234567890",
    discord_public_key=PUBLIC_KEY,
    discord_bot_token="test_token",
    serve_only=True,
    log_json=False,
)


class HandlerCalls:
    """Records what the command handlers were called with."""

    def __init__(self) -> None:
        self.calls: list[tuple] = []

    def record(self, request, conn_info, params) -> None:
        self.calls.append((request, conn_info, params))

    @property
    def last(self) -> tuple:
        return self.calls[-1]


@pytest.fixture
def settings() -> Settings:
    return TEST_SETTINGS


@pytest.fixture
def calls() -> HandlerCalls:
    return HandlerCalls()


@pytest.fixture
def routes(calls: HandlerCalls) -> dict:
    async def ping(request, conn_info, params):
        calls.record(request, conn_info, params)
        return PlainTextResponse("pong!")

    async def echo(request, conn_info, params):
        calls.record(request, conn_info, params)
        return PlainTextResponse(params["word"])

    async def greet(request, conn_info, params):
        calls.record(request, conn_info, params)
        title = request.query_params.get("title") or "friend"
        return PlainTextResponse(f"Hello {title} {params['name']}")

    def shout(request, conn_info, params):
        calls.record(request, conn_info, params)
        return params["text"].upper()

    async def boom(request, conn_info, params):
        raise RuntimeError("handler exploded")

    return {
        "/ping": ping,
        "/echo/:word": echo,
        "/greet/:name?title=": greet,
        "/shout/:text": shout,
        "/boom": boom,
        "/not a command": ping,
    }


@pytest.fixture
def registry(routes) -> CommandRegistry:
    reg = CommandRegistry()
    reg.register_routes(routes)
    return reg


@pytest.fixture
def client(routes, settings: Settings) -> TestClient:
    app = create_app(routes, settings=settings)
    return TestClient(app, raise_server_exceptions=False)


def sign_request(body: bytes, timestamp: str = "1700000000", key: SigningKey = SIGNING_KEY) -> dict:
    signature = key.sign(timestamp.encode() + body).signature.hex()
    return {
        "Content-Type": "application/json",
        "X-Signature-Ed25519": signature,
        "X-Signature-Timestamp": timestamp,
    }


def make_interaction(
    interaction_type: int = 2, name: str = "ping", options: list[dict] | None = None
) -> bytes:
    payload: dict = {"id": "1111", "type": interaction_type, "token": "tok"}
    if interaction_type == 2:
        payload["data"] = {"id": "2222", "name": name, "options": options or []}
    return json.dumps(payload).encode()
