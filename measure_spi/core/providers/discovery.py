"""Discovery collaborators that enumerate candidate providers.

The registry calls ``discover()`` once, on first demand, and ranks whatever
comes back. Sources:

- ``EntryPointDiscovery``: providers advertised by installed distributions
  under an entry-point group (default ``measure_spi.providers``)::

      [project.entry-points."measure_spi.providers"]
      reference = "reference_units.provider:ReferenceProvider"

- ``PluginDiscovery``: providers named by configuration
  (``MEASURE_SPI_PLUGINS``), one token per target:
  - "pkg.module" imports the module and takes its ``PROVIDERS`` sequence
  - "pkg.module:attr" imports the module and resolves ``attr``
- ``StaticDiscovery``: a fixed list wired by the host application.
- ``CompositeDiscovery``: several sources concatenated in order.

A target resolves to providers as follows: a ``ServiceProvider`` instance is
used as is, a ``ServiceProvider`` subclass is instantiated without
arguments, and any other callable is called and its result resolved again
(a provider, an iterable of providers, or ``None`` for nothing).
"""

from __future__ import annotations

import copy
import importlib
import logging
import re
import time
from importlib.metadata import entry_points
from typing import Any, Dict, Iterable, List, Optional, Protocol, Sequence, runtime_checkable

from measure_spi.core.config import get_settings
from measure_spi.core.errors import ErrorCode
from measure_spi.core.providers.base import ServiceProvider
from measure_spi.core.providers.exceptions import InvalidProviderError
from measure_spi.utils.metrics import plugin_load_total

logger = logging.getLogger(__name__)


@runtime_checkable
class ProviderDiscovery(Protocol):
    def discover(self) -> Iterable[ServiceProvider]:
        ...


def parse_plugin_list(raw: str) -> List[str]:
    if not raw:
        return []
    return [t.strip() for t in re.split(r"[,\s]+", raw) if t.strip()]


def _resolve_item(item: Any, source: str) -> ServiceProvider:
    if isinstance(item, ServiceProvider):
        return item
    if isinstance(item, type) and issubclass(item, ServiceProvider):
        return item()
    raise InvalidProviderError(
        f"Discovery target is not a ServiceProvider: {source} -> {item!r}", source
    )


def resolve_providers(target: Any, source: str) -> List[ServiceProvider]:
    """Resolve a discovery target into provider instances."""
    if isinstance(target, ServiceProvider):
        return [target]
    if isinstance(target, type):
        return [_resolve_item(target, source)]
    if callable(target):
        result = target()
        if result is None:
            return []
        if isinstance(result, ServiceProvider):
            return [result]
        if isinstance(result, (str, bytes)) or not isinstance(result, Iterable):
            raise InvalidProviderError(
                f"Discovery factory returned unsupported value: {source} -> {result!r}",
                source,
            )
        return [_resolve_item(item, source) for item in result]
    raise InvalidProviderError(f"Discovery target not callable: {source} -> {target!r}", source)


class StaticDiscovery:
    """Discovery over a fixed, host-supplied sequence of providers."""

    def __init__(self, providers: Sequence[ServiceProvider] = ()):
        self._providers = tuple(providers)

    def discover(self) -> List[ServiceProvider]:
        return list(self._providers)

    def status(self) -> Dict[str, Any]:
        return {"source": "static", "count": len(self._providers)}


class EntryPointDiscovery:
    """Discovery over installed entry points."""

    def __init__(self, group: Optional[str] = None):
        self.group = group or get_settings().MEASURE_SPI_ENTRY_POINT_GROUP
        self._loaded: List[str] = []
        self._checked_at: Optional[float] = None

    def discover(self) -> List[ServiceProvider]:
        found: List[ServiceProvider] = []
        loaded: List[str] = []
        for ep in entry_points(group=self.group):
            source = f"{ep.name} = {ep.value}"
            found.extend(resolve_providers(ep.load(), source))
            loaded.append(ep.name)
        self._loaded = loaded
        self._checked_at = time.time()
        return found

    def status(self) -> Dict[str, Any]:
        return {
            "source": "entry_points",
            "group": self.group,
            "loaded": list(self._loaded),
            "checked_at": self._checked_at,
        }


class PluginDiscovery:
    """Discovery over configured plugin tokens.

    In non-strict mode a failing token is logged, recorded in ``status()``
    and skipped. In strict mode the first failure is re-raised to the caller.
    """

    def __init__(self, plugins: Optional[str] = None, strict: Optional[bool] = None):
        settings = get_settings()
        raw = settings.MEASURE_SPI_PLUGINS if plugins is None else plugins
        self.tokens = parse_plugin_list(raw.strip())
        self.strict = settings.MEASURE_SPI_PLUGINS_STRICT if strict is None else bool(strict)
        self._status: Dict[str, Any] = self._empty_status()

    def _empty_status(self) -> Dict[str, Any]:
        return {
            "source": "plugins",
            "enabled": bool(self.tokens),
            "strict": self.strict,
            "configured": list(self.tokens),
            "loaded": [],
            "errors": [],
            "registered": {},
            "checked_at": None,
        }

    def _load_token(self, token: str) -> List[ServiceProvider]:
        module_name = token
        attr_name = ""
        if ":" in token:
            module_name, attr_name = token.split(":", 1)
            module_name = module_name.strip()
            attr_name = attr_name.strip()
        module = importlib.import_module(module_name)
        if not attr_name:
            return [_resolve_item(item, token) for item in getattr(module, "PROVIDERS", ())]
        return resolve_providers(getattr(module, attr_name), token)

    def discover(self) -> List[ServiceProvider]:
        status = self._empty_status()
        status["checked_at"] = time.time()
        self._status = status

        found: List[ServiceProvider] = []
        for token in self.tokens:
            try:
                providers = self._load_token(token)
            except Exception as exc:  # noqa: BLE001
                status["errors"].append(
                    {
                        "plugin": token,
                        "code": ErrorCode.PLUGIN_LOAD_FAILED.value,
                        "error": f"{type(exc).__name__}: {exc}",
                    }
                )
                plugin_load_total.labels(result="error").inc()
                if self.strict:
                    raise
                logger.warning(
                    "Measurement provider plugin failed to load",
                    extra={"plugin": token, "error": f"{type(exc).__name__}: {exc}"},
                )
                continue
            plugin_load_total.labels(result="ok").inc()
            status["loaded"].append(token)
            status["registered"][token] = [p.name for p in providers]
            found.extend(providers)
        return found

    def status(self) -> Dict[str, Any]:
        return copy.deepcopy(self._status)


class CompositeDiscovery:
    """Concatenate several discovery sources, preserving their order."""

    def __init__(self, *sources: ProviderDiscovery):
        self.sources = list(sources)

    def discover(self) -> List[ServiceProvider]:
        found: List[ServiceProvider] = []
        for source in self.sources:
            found.extend(source.discover())
        return found

    def status(self) -> Dict[str, Any]:
        statuses = []
        for source in self.sources:
            status_fn = getattr(source, "status", None)
            if callable(status_fn):
                statuses.append(status_fn())
            else:
                statuses.append({"source": type(source).__name__})
        return {"source": "composite", "sources": statuses}


def default_discovery() -> CompositeDiscovery:
    """Build the discovery used by the process-wide registry."""
    settings = get_settings()
    sources: List[ProviderDiscovery] = []
    if settings.MEASURE_SPI_ENTRY_POINTS_ENABLED:
        sources.append(EntryPointDiscovery(settings.MEASURE_SPI_ENTRY_POINT_GROUP))
    sources.append(
        PluginDiscovery(settings.MEASURE_SPI_PLUGINS, settings.MEASURE_SPI_PLUGINS_STRICT)
    )
    return CompositeDiscovery(*sources)


__all__ = [
    "ProviderDiscovery",
    "StaticDiscovery",
    "EntryPointDiscovery",
    "PluginDiscovery",
    "CompositeDiscovery",
    "default_discovery",
    "parse_plugin_list",
    "resolve_providers",
]
