from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

from slashgate.models import CommandDescriptor

logger = logging.getLogger(__name__)

DISCORD_API_URL = "https://discord.com/api/v10"


@dataclass(frozen=True)
class SyncResult:
    ok: bool
    status_code: int | None = None
    error: str | None = None
    commands: int = 0


class DiscordClient:
    def __init__(
        self,
        http_client: httpx.AsyncClient,
        application_id: str,
        auth_token: str,
        token_prefix: str = "Bot",
        guild_id: str | None = None,
        api_url: str = DISCORD_API_URL,
    ):
        self._http = http_client
        self._application_id = application_id
        self._auth_token = auth_token
        self._token_prefix = token_prefix
        self._guild_id = guild_id
        self._api_url = api_url.rstrip("/")

    @property
    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"{self._token_prefix} {self._auth_token}",
            "Content-Type": "application/json",
        }

    def commands_url(self, guild_id: str | None = None) -> str:
        """Guild-scoped commands update instantly; global ones are cached by Discord."""
        base = f"{self._api_url}/applications/{self._application_id}"
        if guild_id:
            return f"{base}/guilds/{guild_id}/commands"
        return f"{base}/commands"

    async def bulk_overwrite_commands(
        self,
        descriptors: list[CommandDescriptor],
        guild_id: str | None = None,
    ) -> SyncResult:
        guild_id = guild_id or self._guild_id
        url = self.commands_url(guild_id)
        payload = [d.model_dump(mode="json") for d in descriptors]
        try:
            resp = await self._http.put(url, json=payload, headers=self._headers)
        except httpx.HTTPError as e:
            logger.error("Command registration request failed: %s", e)
            return SyncResult(ok=False, error=str(e) or type(e).__name__)

        if resp.status_code == 401:
            logger.error(
                "Discord API auth failed (401): bot token missing or invalid. "
                "Check DISCORD_BOT_TOKEN and TOKEN_PREFIX"
            )
        if not resp.is_success:
            logger.error("Command registration failed [%s]: %s", resp.status_code, resp.text)
            return SyncResult(ok=False, status_code=resp.status_code, error=resp.text)

        logger.info(
            "Registered %d command(s) %s",
            len(payload),
            f"in guild {guild_id}" if guild_id else "globally",
        )
        return SyncResult(ok=True, status_code=resp.status_code, commands=len(payload))
