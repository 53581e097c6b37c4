import os
import pytest


# List of environment variables that may be modified by tests
_ENV_VARS_TO_ISOLATE = [
    "LOG_LEVEL",
    "MEASURE_SPI_ENTRY_POINTS_ENABLED",
    "MEASURE_SPI_ENTRY_POINT_GROUP",
    "MEASURE_SPI_PLUGINS",
    "MEASURE_SPI_PLUGINS_STRICT",
]


@pytest.fixture(autouse=True)
def env_isolation():
    """Isolate environment variables between tests."""
    backup = {k: os.environ.get(k) for k in _ENV_VARS_TO_ISOLATE}
    try:
        yield
    finally:
        for k, v in backup.items():
            if v is None:
                os.environ.pop(k, None)
            else:
                os.environ[k] = v


@pytest.fixture(autouse=True)
def config_cache_isolation():
    """Reset config settings cache between tests."""
    import measure_spi.core.config as cfg

    cfg._settings_cache = None
    yield
    cfg._settings_cache = None


@pytest.fixture(autouse=True)
def provider_registry_isolation():
    """Drop the process-wide provider registry between tests."""
    from measure_spi.core.providers.registry import reset_provider_registry_for_tests

    reset_provider_registry_for_tests()
    yield
    reset_provider_registry_for_tests()


@pytest.fixture
def metrics_text():
    """Return a callable rendering the default Prometheus registry as text."""
    from prometheus_client import generate_latest

    def _render() -> str:
        return generate_latest().decode()

    return _render


@pytest.fixture
def metric_value(metrics_text):
    """Return a callable reading one exact sample (name plus labels), 0.0 if absent."""

    def _value(sample: str) -> float:
        for line in metrics_text().splitlines():
            if line.startswith(sample + " "):
                return float(line.rsplit(" ", 1)[1])
        return 0.0

    return _value
