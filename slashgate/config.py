from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Discord application
    discord_application_id: str = ""
    discord_public_key: str = ""
    discord_bot_token: str = ""
    discord_guild_id: str | None = None
    discord_api_url: str = "https://discord.com/api/v10"
    token_prefix: str = "Bot"

    @field_validator("discord_guild_id", mode="before")
    @classmethod
    def blank_guild_is_global(cls, v: object) -> object:
        if isinstance(v, str) and not v.strip():
            return None
        if isinstance(v, int):
            return str(v)
        return v

    @field_validator("token_prefix", mode="before")
    @classmethod
    def default_token_prefix(cls, v: object) -> object:
        if v is None or (isinstance(v, str) and not v.strip()):
            return "Bot"
        return v

    # Serving
    endpoint: str = "/api/interactions"
    serve_only: bool = False  # skip command registration at startup
    serve_routes: bool = True  # also mount user routes as plain GET endpoints

    @field_validator("endpoint")
    @classmethod
    def endpoint_leading_slash(cls, v: str) -> str:
        return v if v.startswith("/") else "/" + v

    # HTTP client
    http_timeout: float = 10.0

    # Logging
    log_level: str = "INFO"
    log_json: bool = True
    log_file: str | None = None

    model_config = {"env_file": ".env", "extra": "ignore"}
