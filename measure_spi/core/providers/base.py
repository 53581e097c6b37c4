"""Core measurement service provider abstraction.

A provider bundles the capability services of one measurement
implementation (system of units, formatting, quantity factories). The
registry ranks providers by priority and looks them up by name, but never
calls into the services themselves.
"""

from __future__ import annotations

import warnings
from abc import ABC, abstractmethod
from typing import Any, Dict


class ServiceProvider(ABC):
    """Base class for measurement service providers.

    Subclasses implement the capability accessors. Priority defaults to 0 and
    can be changed either by setting a ``priority`` attribute or by
    overriding :meth:`get_priority`. Implementors are encouraged to override
    :attr:`name` with something unique enough to tell providers apart, such
    as a distribution or module qualified name.

    Example:
        class ReferenceProvider(ServiceProvider):
            priority = 10

            @property
            def name(self) -> str:
                return "reference"

            def get_system_of_units_service(self):
                return self._units
            ...
    """

    priority: int = 0

    def get_priority(self) -> int:
        """Return the provider's priority; higher values are preferred."""
        return self.priority

    @property
    def name(self) -> str:
        return self.__class__.__qualname__

    @property
    def class_path(self) -> str:
        cls = self.__class__
        return f"{cls.__module__}.{cls.__qualname__}"

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"<{self.class_path} name={self.name!r} priority={self.get_priority()}>"

    @abstractmethod
    def get_system_of_units_service(self) -> Any:
        """Return the service used to obtain systems of units, or ``None``."""

    @abstractmethod
    def get_format_service(self) -> Any:
        """Return the service used to obtain unit and quantity formats, or ``None``."""

    @abstractmethod
    def get_quantity_factory(self, quantity_type: type) -> Any:
        """Return the quantity factory for ``quantity_type``."""

    def get_unit_format_service(self) -> Any:
        """Deprecated: use :meth:`get_format_service`."""
        warnings.warn(
            "get_unit_format_service() is deprecated; use get_format_service()",
            DeprecationWarning,
            stacklevel=2,
        )
        return self.get_format_service()

    def describe(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "priority": self.get_priority(),
            "class": self.class_path,
        }
