from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Union

from slashgate.commands.compiler import compile_route
from slashgate.errors import RegistryFrozenError
from slashgate.models import CommandDescriptor

if TYPE_CHECKING:
    from starlette.requests import Request
    from starlette.responses import Response

    from slashgate.discord.client import DiscordClient, SyncResult
    from slashgate.models import ConnInfo

logger = logging.getLogger(__name__)

HandlerResult = Union["Response", str]
# handler(request, conn_info, params) -> Response | str, sync or async
Handler = Callable[
    ["Request", "ConnInfo", dict[str, str]],
    Union[HandlerResult, Awaitable[HandlerResult]],
]


@dataclass(frozen=True)
class Binding:
    descriptor: CommandDescriptor
    handler: Handler

    @property
    def name(self) -> str:
        return self.descriptor.name

    @property
    def route(self) -> str:
        return self.descriptor.route


class CommandRegistry:
    """Compiled slash commands and the handlers bound to them.

    Built once at startup, then frozen and read concurrently by the
    interaction dispatcher.
    """

    def __init__(self) -> None:
        self._bindings: dict[str, Binding] = {}
        self._frozen = False

    def register(self, route: str, handler: Handler) -> CommandDescriptor | None:
        if self._frozen:
            raise RegistryFrozenError(f"Cannot register {route!r}: registry is frozen")
        descriptor = compile_route(route)
        if descriptor is None:
            return None
        previous = self._bindings.get(descriptor.name)
        if previous is not None:
            logger.warning(
                "Command /%s redeclared by %s (was %s)",
                descriptor.name,
                route,
                previous.route,
            )
        self._bindings[descriptor.name] = Binding(descriptor=descriptor, handler=handler)
        logger.debug("Registered /%s from %s", descriptor.name, route)
        return descriptor

    def register_routes(self, routes: Mapping[str, Handler]) -> None:
        for route, handler in routes.items():
            self.register(route, handler)

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def lookup(self, name: str) -> Binding | None:
        return self._bindings.get(name)

    def descriptors(self) -> list[CommandDescriptor]:
        return [b.descriptor for b in self._bindings.values()]

    def list_bindings(self) -> list[Binding]:
        return list(self._bindings.values())

    def __len__(self) -> int:
        return len(self._bindings)

    def __contains__(self, name: Any) -> bool:
        return name in self._bindings

    async def sync_remote(
        self, client: DiscordClient, guild_id: str | None = None
    ) -> SyncResult:
        """Overwrite the remote command list with every registered command."""
        return await client.bulk_overwrite_commands(self.descriptors(), guild_id=guild_id)
