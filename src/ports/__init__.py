"""Framework adapter ports: invocation and response normalisation."""

from __future__ import annotations

from .adapter_kit import AdapterUsageError, build_document, delta, latency_points
from .adapter_port import AdapterInvoker, AdapterResponse, SubprocessAdapter

__all__ = [
    "AdapterInvoker",
    "AdapterResponse",
    "AdapterUsageError",
    "SubprocessAdapter",
    "build_document",
    "delta",
    "latency_points",
]
