class SlashgateError(Exception):
    """Base class for gateway errors."""


class RegistryFrozenError(SlashgateError):
    """Raised when a command is registered after the app started serving."""
