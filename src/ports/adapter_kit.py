"""Normalisation helpers for framework adapter programs.

Native pipeline programs report raw clock readings and hash fields as a flat
JSON array (the *sink*).  Adapters turn that array into the response document
expected by the harness:

* ``duration``: ``{"duration": end - reference, "hashes": {...}}``
* ``latencies``: ``{"hashes": {...}, "points": [[t, time - reference], ...]}``

Clock readings are 64-bit nanosecond values and frequently arrive as strings,
so every arithmetic helper accepts integer strings.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Sequence, Tuple

__all__ = [
    "AdapterUsageError",
    "EXPERIMENTS",
    "PIPELINE_HASH_FIELDS",
    "build_document",
    "delta",
    "latency_points",
    "native_program",
    "resolve_fields",
]

_FLOW_FIELDS = ("events", "t_hash", "vx_hash", "vy_hash", "x_hash", "y_hash")

PIPELINE_HASH_FIELDS: Mapping[str, Tuple[str, ...]] = {
    "mask": ("events", "increases", "t_hash", "x_hash", "y_hash"),
    "flow": _FLOW_FIELDS,
    "denoised_flow": _FLOW_FIELDS,
    "masked_denoised_flow": _FLOW_FIELDS,
    "masked_denoised_flow_activity": ("events", "t_hash", "potential_hash", "x_hash", "y_hash"),
}

EXPERIMENTS = ("duration", "latencies")


class AdapterUsageError(ValueError):
    """Raised for requests an adapter cannot serve (unknown pipeline or experiment)."""


def _as_int(value: Any) -> int:
    if isinstance(value, bool):
        raise TypeError("clock readings must be integers, not booleans")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"clock reading {value!r} is not integral")
        return int(value)
    if isinstance(value, str):
        return int(value.strip())
    raise TypeError(f"unsupported clock reading {value!r}")


def delta(start: int | str, end: int | str) -> int:
    """Return ``end - start``."""

    return _as_int(end) - _as_int(start)


def latency_points(reference: int | str, points: Sequence[Sequence[Any]]) -> List[List[int]]:
    """Rebase ``(event timestamp, clock reading)`` pairs on *reference*, keeping order."""

    rebased: List[List[int]] = []
    for point in points:
        if len(point) != 2:
            raise ValueError(f"latency point {point!r} must have exactly two fields")
        t, time = point
        rebased.append([_as_int(t), delta(reference, time)])
    return rebased


def resolve_fields(pipeline: str, experiment: str) -> Tuple[str, ...]:
    """Return the hash field names for *pipeline*, validating the request."""

    fields = PIPELINE_HASH_FIELDS.get(pipeline)
    if fields is None:
        raise AdapterUsageError(f"unknown pipeline {pipeline}")
    if experiment not in EXPERIMENTS:
        raise AdapterUsageError(f"unknown experiment {experiment}")
    return fields


def native_program(pipeline: str, experiment: str) -> str:
    """Name of the native executable serving (pipeline, experiment)."""

    resolve_fields(pipeline, experiment)
    return pipeline if experiment == "duration" else f"{pipeline}_latencies"


def build_document(
    pipeline: str,
    experiment: str,
    sink: Sequence[Any],
    reference: int | str = 0,
) -> Dict[str, Any]:
    """Convert a native sink array into the adapter response document.

    For ``duration`` the sink is ``[end, *hashes]``; for ``latencies`` it is
    ``[*hashes, points]``.  A zero *reference* means the native program already
    reports elapsed times.
    """

    fields = resolve_fields(pipeline, experiment)
    expected = len(fields) + 1
    if len(sink) != expected:
        raise ValueError(f"{pipeline} {experiment} output has {len(sink)} fields, expected {expected}")

    if experiment == "duration":
        return {
            "duration": delta(reference, sink[0]),
            "hashes": dict(zip(fields, sink[1:])),
        }
    return {
        "hashes": dict(zip(fields, sink[:-1])),
        "points": latency_points(reference, sink[-1]),
    }
