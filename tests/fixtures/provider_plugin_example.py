from __future__ import annotations

from typing import Any, Dict, List

from measure_spi.core.providers.base import ServiceProvider


class ExampleProvider(ServiceProvider):
    def __init__(self, name: str = "example", priority: int = 0):
        self._name = name
        self.priority = priority

    @property
    def name(self) -> str:
        return self._name

    def get_system_of_units_service(self) -> Dict[str, Any]:
        return {"system": "SI", "provider": self._name}

    def get_format_service(self) -> Dict[str, Any]:
        return {"format": "simple", "provider": self._name}

    def get_quantity_factory(self, quantity_type: type) -> tuple:
        return (self._name, quantity_type)


class HighPriorityProvider(ExampleProvider):
    def __init__(self):
        super().__init__(name="high", priority=100)


# Picked up by a bare "tests.fixtures.provider_plugin_example" token.
PROVIDERS = [ExampleProvider(name="module-listed", priority=1)]

SINGLE = ExampleProvider(name="single", priority=3)

NOT_A_PROVIDER = 42


def bootstrap() -> List[ExampleProvider]:
    """Return example providers for unit tests."""
    return [ExampleProvider(name="boot-a", priority=5), ExampleProvider(name="boot-b", priority=7)]


def bootstrap_nothing() -> None:
    return None


def bootstrap_broken() -> List[ExampleProvider]:
    raise RuntimeError("plugin boom")
