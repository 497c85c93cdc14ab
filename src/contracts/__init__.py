"""Contracts shared by the harness: errors, response schemas and metrics."""

from __future__ import annotations

from .errors import (
    AdapterInvocationError,
    AdapterTimeoutError,
    ConfigurationError,
    HarnessError,
    MalformedResponseError,
    ValidationMismatchError,
)
from .metrics import MetricsMapping, metrics_equal
from .schema_validator import parse_response, validate_document

__all__ = [
    "AdapterInvocationError",
    "AdapterTimeoutError",
    "ConfigurationError",
    "HarnessError",
    "MalformedResponseError",
    "MetricsMapping",
    "ValidationMismatchError",
    "metrics_equal",
    "parse_response",
    "validate_document",
]
