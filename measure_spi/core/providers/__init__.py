"""Measurement service provider framework.

Provides the provider base class, discovery sources and the registry that
ranks them:
- ServiceProvider: capability accessors plus priority and name
- ProviderRegistry: lazy discovery, ordering, lookup and override
- Discovery sources: entry points, configured plugins, static lists

Example usage:
    from measure_spi.core.providers import ServiceProvider, current, of, set_current

    provider = current()              # highest priority, or the override
    set_current(of("reference"))      # force a provider by name
"""

from measure_spi.core.providers.base import ServiceProvider
from measure_spi.core.providers.discovery import (
    CompositeDiscovery,
    EntryPointDiscovery,
    PluginDiscovery,
    ProviderDiscovery,
    StaticDiscovery,
    default_discovery,
)
from measure_spi.core.providers.exceptions import (
    DiscoveryError,
    InvalidProviderError,
    NoProviderAvailableError,
    NullArgumentError,
    ProviderNotFoundError,
    ProviderRegistryError,
)
from measure_spi.core.providers.registry import (
    ProviderRegistry,
    available,
    current,
    get_provider_registry,
    of,
    reset_provider_registry_for_tests,
    set_current,
)

__all__ = [
    "ServiceProvider",
    "ProviderRegistry",
    "ProviderDiscovery",
    "StaticDiscovery",
    "EntryPointDiscovery",
    "PluginDiscovery",
    "CompositeDiscovery",
    "default_discovery",
    "ProviderRegistryError",
    "NullArgumentError",
    "InvalidProviderError",
    "ProviderNotFoundError",
    "NoProviderAvailableError",
    "DiscoveryError",
    "get_provider_registry",
    "reset_provider_registry_for_tests",
    "available",
    "of",
    "current",
    "set_current",
]
