"""Provider registry: lazy discovery, priority ordering and override.

The registry publishes an immutable ``tuple`` of providers. Readers take a
single reference read and never lock; the first discovery, every
``set_current`` and ``reset`` run under one lock and replace the reference
with a freshly built tuple. A published tuple is never modified.

Ordering is priority descending. Equal priorities keep the order in which
the discovery source enumerated them. The provider most recently passed to
``set_current`` sits at the head regardless of its priority.

Usage:
    from measure_spi.core.providers import current, of, set_current

    provider = current()
    set_current(of("reference"))
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Any, Dict, List, Optional, Tuple

from measure_spi.core.providers.base import ServiceProvider
from measure_spi.core.providers.discovery import ProviderDiscovery, default_discovery
from measure_spi.core.providers.exceptions import (
    DiscoveryError,
    InvalidProviderError,
    NoProviderAvailableError,
    NullArgumentError,
    ProviderNotFoundError,
)
from measure_spi.utils.metrics import (
    provider_discovery_duration_seconds,
    provider_discovery_total,
    provider_overrides_total,
    providers_available,
)

logger = logging.getLogger(__name__)

Snapshot = Tuple[ServiceProvider, ...]


def _observe_discovery(result: str, duration_seconds: float) -> None:
    try:
        provider_discovery_total.labels(result=result).inc()
        provider_discovery_duration_seconds.labels(result=result).observe(duration_seconds)
    except Exception:
        # Metrics should never affect registry behavior.
        pass


def sort_by_priority(providers: List[ServiceProvider]) -> Snapshot:
    """Order providers by priority, highest first; ties keep input order."""
    return tuple(sorted(providers, key=lambda p: p.get_priority(), reverse=True))


class ProviderRegistry:
    """Thread-safe registry of measurement service providers.

    Each instance owns one snapshot reference and one discovery source, so
    tests can build isolated registries. Production code goes through
    :func:`get_provider_registry`.
    """

    def __init__(self, discovery: Optional[ProviderDiscovery] = None):
        self._discovery = discovery
        self._snapshot: Optional[Snapshot] = None
        self._lock = threading.RLock()
        self._discovering = False
        self._discovered_at: Optional[float] = None
        self._discovery_count = 0

    @property
    def discovery(self) -> Optional[ProviderDiscovery]:
        return self._discovery

    @property
    def is_populated(self) -> bool:
        return self._snapshot is not None

    def _discover_locked(self) -> Snapshot:
        if self._discovering:
            # The lock is reentrant; a source reading this registry lands here.
            raise DiscoveryError("Measurement provider discovery re-entered by its own source")
        started_at = time.perf_counter()
        self._discovering = True
        try:
            if self._discovery is None:
                self._discovery = default_discovery()
            found: List[ServiceProvider] = []
            for provider in self._discovery.discover():
                if not isinstance(provider, ServiceProvider):
                    raise InvalidProviderError(
                        f"Discovered object is not a ServiceProvider: {provider!r}"
                    )
                if any(existing is provider for existing in found):
                    continue
                found.append(provider)
            snapshot = sort_by_priority(found)
        except Exception as exc:  # noqa: BLE001
            _observe_discovery("error", time.perf_counter() - started_at)
            logger.error("Measurement provider discovery failed", exc_info=True)
            raise DiscoveryError(
                f"Measurement provider discovery failed: {type(exc).__name__}: {exc}"
            ) from exc
        finally:
            self._discovering = False

        duration = time.perf_counter() - started_at
        # Set only on success.
        self._snapshot = snapshot
        self._discovered_at = time.time()
        self._discovery_count += 1
        _observe_discovery("ok", duration)
        providers_available.set(len(snapshot))
        logger.info(
            "Measurement providers discovered",
            extra={
                "count": len(snapshot),
                "provider": snapshot[0].name if snapshot else None,
                "duration_ms": round(duration * 1000.0, 3),
            },
        )
        return snapshot

    def _providers(self) -> Snapshot:
        snapshot = self._snapshot
        if snapshot is None:
            with self._lock:
                snapshot = self._snapshot
                if snapshot is None:
                    snapshot = self._discover_locked()
        return snapshot

    def available(self) -> List[ServiceProvider]:
        """Return all providers, current first, then by descending priority."""
        return list(self._providers())

    def of(self, name: str) -> ServiceProvider:
        """Return the first provider whose name equals ``name``.

        Should several providers share a name, the one nearest the head wins
        (the override, else the highest priority).

        Raises:
            NullArgumentError: if ``name`` is None
            ProviderNotFoundError: if no provider has that name
        """
        if name is None:
            raise NullArgumentError("name")
        if not isinstance(name, str):
            raise TypeError(f"name must be a string, got {type(name).__name__}")
        snapshot = self._providers()
        for provider in snapshot:
            if provider.name == name:
                return provider
        raise ProviderNotFoundError(name, [p.name for p in snapshot])

    def current(self) -> ServiceProvider:
        """Return the current provider.

        This is the provider last passed to :meth:`set_current`, or the one
        with the highest priority.

        Raises:
            NoProviderAvailableError: if discovery found no providers
        """
        snapshot = self._providers()
        if snapshot:
            return snapshot[0]
        raise NoProviderAvailableError()

    def set_current(self, provider: ServiceProvider) -> Optional[ServiceProvider]:
        """Make ``provider`` the current provider.

        The provider does not need to have been discovered. Other providers
        keep their relative order.

        Returns:
            The provider that was current before the call, or None if the
            registry was empty.
        """
        if provider is None:
            raise NullArgumentError("provider")
        if not isinstance(provider, ServiceProvider):
            raise InvalidProviderError(
                f"provider must be a ServiceProvider, got {type(provider).__name__}"
            )
        with self._lock:
            snapshot = self._snapshot
            if snapshot is None:
                snapshot = self._discover_locked()
            previous = snapshot[0] if snapshot else None
            if provider is previous:
                provider_overrides_total.labels(result="unchanged").inc()
                return previous

            self._snapshot = (provider,) + tuple(p for p in snapshot if p is not provider)
            providers_available.set(len(self._snapshot))
            provider_overrides_total.labels(result="replaced").inc()

            # Logged under the lock so log order matches replacement order.
            message = (
                "Measurement provider set to %s"
                if previous is None
                else "Measurement provider replaced by %s"
            )
            logger.debug(
                message,
                provider.class_path,
                extra={
                    "provider": provider.name,
                    "previous": previous.name if previous is not None else None,
                    "priority": provider.get_priority(),
                },
            )
            return previous

    def reset(self) -> None:
        """Forget the published snapshot; the next read rediscovers."""
        with self._lock:
            self._snapshot = None
            self._discovered_at = None
        logger.debug("Measurement provider registry reset")

    def describe(self) -> Dict[str, Any]:
        """Return a serializable view of the registry without triggering discovery."""
        with self._lock:
            snapshot = self._snapshot
            discovered_at = self._discovered_at
            discovery_count = self._discovery_count
        providers = [p.describe() for p in snapshot] if snapshot is not None else []
        data: Dict[str, Any] = {
            "populated": snapshot is not None,
            "discovered_at": discovered_at,
            "discovery_count": discovery_count,
            "current": snapshot[0].name if snapshot else None,
            "total_providers": len(providers),
            "providers": providers,
            "discovery": None,
        }
        status_fn = getattr(self._discovery, "status", None)
        if callable(status_fn):
            try:
                data["discovery"] = status_fn()
            except Exception:
                # Best-effort only; describe should never fail because of metadata.
                data["discovery"] = {"error": "status unavailable"}
        return data


_REGISTRY: Optional[ProviderRegistry] = None
_REGISTRY_LOCK = threading.Lock()


def get_provider_registry() -> ProviderRegistry:
    """Return the process-wide registry, creating it on first use."""
    global _REGISTRY
    registry = _REGISTRY
    if registry is None:
        with _REGISTRY_LOCK:
            registry = _REGISTRY
            if registry is None:
                registry = ProviderRegistry()
                _REGISTRY = registry
    return registry


def reset_provider_registry_for_tests(registry: Optional[ProviderRegistry] = None) -> None:
    """Drop the process-wide registry, optionally installing ``registry``.

    Intended for tests. In production the registry lives for the process.
    """
    global _REGISTRY
    with _REGISTRY_LOCK:
        _REGISTRY = registry


def available() -> List[ServiceProvider]:
    return get_provider_registry().available()


def of(name: str) -> ServiceProvider:
    return get_provider_registry().of(name)


def current() -> ServiceProvider:
    return get_provider_registry().current()


def set_current(provider: ServiceProvider) -> Optional[ServiceProvider]:
    return get_provider_registry().set_current(provider)
