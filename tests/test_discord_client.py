from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from slashgate.commands.compiler import compile_route
from slashgate.discord.client import DiscordClient


def _response(status_code: int = 200, text: str = "[]") -> MagicMock:
    resp = MagicMock()
    resp.status_code = status_code
    resp.is_success = 200 <= status_code < 300
    resp.text = text
    return resp


@pytest.fixture
def discord_client() -> DiscordClient:
    mock_http = AsyncMock()
    mock_http.put = AsyncMock(return_value=_response())
    return DiscordClient(
        http_client=mock_http,
        application_id="1234567890",
        auth_token="test_token",
    )


def test_commands_url(discord_client):
    assert (
        discord_client.commands_url()
        == "https://discord.com/api/v10/applications/1234567890/commands"
    )
    assert (
        discord_client.commands_url("42")
        == "https://discord.com/api/v10/applications/1234567890/guilds/42/commands"
    )


async def test_bulk_overwrite_global(discord_client):
    descriptors = [compile_route("/ping"), compile_route("/greet/:name?title=")]

    result = await discord_client.bulk_overwrite_commands(descriptors)

    assert result.ok
    assert result.commands == 2
    discord_client._http.put.assert_awaited_once()
    call = discord_client._http.put.call_args
    assert call.args[0].endswith("/applications/1234567890/commands")
    assert call.kwargs["headers"]["Authorization"] == "Bot test_token"
    payload = call.kwargs["json"]
    assert [c["name"] for c in payload] == ["ping", "greet"]
    assert "route" not in payload[1]
    assert [o["required"] for o in payload[1]["options"]] == [True, False]


async def test_bulk_overwrite_guild_and_prefix():
    mock_http = AsyncMock()
    mock_http.put = AsyncMock(return_value=_response())
    client = DiscordClient(
        http_client=mock_http,
        application_id="1",
        auth_token="abc",
        token_prefix="Bearer",
        guild_id="99",
    )

    await client.bulk_overwrite_commands([compile_route("/ping")])

    call = mock_http.put.call_args
    assert call.args[0].endswith("/applications/1/guilds/99/commands")
    assert call.kwargs["headers"]["Authorization"] == "Bearer abc"


async def test_explicit_guild_overrides_configured(discord_client):
    await discord_client.bulk_overwrite_commands([], guild_id="7")
    assert discord_client._http.put.call_args.args[0].endswith("/guilds/7/commands")


async def test_http_error_status_is_returned(discord_client):
    discord_client._http.put = AsyncMock(return_value=_response(401, '{"message": "401: Unauthorized"}'))

    result = await discord_client.bulk_overwrite_commands([compile_route("/ping")])

    assert result.ok is False
    assert result.status_code == 401
    assert "Unauthorized" in result.error


async def test_transport_error_is_returned(discord_client):
    discord_client._http.put = AsyncMock(side_effect=httpx.ConnectError("refused"))

    result = await discord_client.bulk_overwrite_commands([compile_route("/ping")])

    assert result.ok is False
    assert result.status_code is None
    assert result.error == "refused"
    discord_client._http.put.assert_awaited_once()
