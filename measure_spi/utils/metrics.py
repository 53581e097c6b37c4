"""Prometheus metrics registration for provider discovery and selection.

All metric objects are defined at import time on the default
prometheus_client registry.
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

provider_discovery_total = Counter(
    "measure_spi_discovery_total",
    "Provider discovery outcomes",
    ["result"],
)
provider_discovery_duration_seconds = Histogram(
    "measure_spi_discovery_duration_seconds",
    "Provider discovery duration seconds",
    ["result"],
    buckets=[0.0005, 0.001, 0.005, 0.01, 0.05, 0.1, 0.25, 0.5, 1.0],
)
providers_available = Gauge(
    "measure_spi_providers_available",
    "Number of providers in the latest published snapshot",
)
provider_overrides_total = Counter(
    "measure_spi_provider_overrides_total",
    "Explicit current-provider overrides",
    ["result"],
)
plugin_load_total = Counter(
    "measure_spi_plugin_load_total",
    "Configured plugin load outcomes",
    ["result"],
)


__all__ = [
    "provider_discovery_total",
    "provider_discovery_duration_seconds",
    "providers_available",
    "provider_overrides_total",
    "plugin_load_total",
]
