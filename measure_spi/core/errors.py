"""Shared error codes for registry failures.

Centralizes error code enumeration so exceptions and diagnostics payloads
use the same vocabulary.
"""

from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    NULL_ARGUMENT = "NULL_ARGUMENT"
    INVALID_PROVIDER = "INVALID_PROVIDER"
    PROVIDER_NOT_FOUND = "PROVIDER_NOT_FOUND"
    NO_PROVIDER_AVAILABLE = "NO_PROVIDER_AVAILABLE"
    DISCOVERY_FAILED = "DISCOVERY_FAILED"  # Discovery collaborator raised
    PLUGIN_LOAD_FAILED = "PLUGIN_LOAD_FAILED"  # Single plugin token failed (non-strict)


__all__ = ["ErrorCode"]
