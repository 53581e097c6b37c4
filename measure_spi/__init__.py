"""Package marker for the measurement service provider registry."""

__version__ = "0.1.0"
