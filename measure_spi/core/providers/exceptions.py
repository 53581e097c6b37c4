"""Provider registry exception types."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from measure_spi.core.errors import ErrorCode


class ProviderRegistryError(Exception):
    def __init__(
        self,
        code: ErrorCode | str,
        message: str,
        provider: Optional[str] = None,
    ):
        super().__init__(message)
        self.code = code
        self.provider = provider
        self.message = message

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "provider": self.provider,
        }


class NullArgumentError(ProviderRegistryError, ValueError):
    """A required argument was ``None``."""

    def __init__(self, argument: str):
        super().__init__(ErrorCode.NULL_ARGUMENT, f"{argument} must not be None")
        self.argument = argument


class InvalidProviderError(ProviderRegistryError, TypeError):
    """An object offered as a provider is not a ``ServiceProvider``."""

    def __init__(self, message: str, source: Optional[str] = None):
        super().__init__(ErrorCode.INVALID_PROVIDER, message, provider=source)


class ProviderNotFoundError(ProviderRegistryError, LookupError):
    """No available provider has the requested name."""

    def __init__(self, name: str, available: Optional[List[str]] = None):
        self.available = list(available or [])
        listing = ", ".join(self.available) or "none"
        super().__init__(
            ErrorCode.PROVIDER_NOT_FOUND,
            f"No measurement provider named {name!r} found. Available: {listing}",
            provider=name,
        )

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["available"] = list(self.available)
        return data


class NoProviderAvailableError(ProviderRegistryError, RuntimeError):
    """Discovery completed but registered no providers."""

    def __init__(self):
        super().__init__(
            ErrorCode.NO_PROVIDER_AVAILABLE,
            "No measurement provider registered",
        )


class DiscoveryError(ProviderRegistryError, RuntimeError):
    """The discovery collaborator failed; nothing was published."""

    def __init__(self, message: str):
        super().__init__(ErrorCode.DISCOVERY_FAILED, message)


__all__ = [
    "ProviderRegistryError",
    "NullArgumentError",
    "InvalidProviderError",
    "ProviderNotFoundError",
    "NoProviderAvailableError",
    "DiscoveryError",
]
