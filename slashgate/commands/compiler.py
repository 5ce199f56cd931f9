from __future__ import annotations

import logging
import re
from urllib.parse import parse_qsl, unquote, urljoin, urlsplit

from slashgate.models import CommandDescriptor, CommandOption, OptionType

logger = logging.getLogger(__name__)

# Any fixed base works; only path and query of the resolved URL are used.
ROUTE_BASE_URL = "https://example.com"

# Letters, digits, "-" and "_" in any script, plus Devanagari and Thai
# (including their combining vowel signs, which are not alphanumeric).
NAME_PATTERN = re.compile(r"[-\w\u0900-\u097F\uA8E0-\uA8FF\u0E00-\u0E7F]{1,32}")


def split_route(route: str) -> tuple[str, list[str], list[str]]:
    """Split a route pattern into (name, required params, optional params).

    ``/greet/:name?title=`` -> ``("greet", ["name"], ["title"])``
    """
    parts = urlsplit(urljoin(ROUTE_BASE_URL, route))
    segments = [unquote(s) for s in parts.path.split("/")[1:] if s]
    name = segments[0] if segments else ""
    required = [s.removeprefix(":") for s in segments[1:]]
    # Query keys are optional params; their default values are ignored here.
    optional = list(dict.fromkeys(k for k, _ in parse_qsl(parts.query, keep_blank_values=True)))
    return name, required, optional


def compile_route(route: str) -> CommandDescriptor | None:
    """Compile a route pattern into a command descriptor.

    Returns None when the command name is not a valid slash command name.
    """
    name, required, optional = split_route(route)

    if not NAME_PATTERN.fullmatch(name):
        logger.warning("Invalid command name: %r (route %s)", name, route)
        return None

    # Discord rejects commands listing an optional option before a required one.
    options = [
        CommandOption(name=p, description=p, type=OptionType.STRING.value, required=True)
        for p in required
    ]
    options.extend(
        CommandOption(name=p, description=p, type=OptionType.STRING.value, required=False)
        for p in optional
    )

    return CommandDescriptor(
        name=name,
        description=name,
        options=options,
        route=route,
        required_params=tuple(required),
        optional_params=tuple(optional),
    )


def to_path_template(route: str) -> str:
    """Convert ``/echo/:word?x=`` into the FastAPI path ``/echo/{word}``."""
    path = urlsplit(urljoin(ROUTE_BASE_URL, route)).path
    segments = [
        "{" + s[1:] + "}" if s.startswith(":") else s for s in path.split("/")[1:] if s
    ]
    return "/" + "/".join(segments)
