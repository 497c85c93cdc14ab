"""Canonical JSON helpers used for configuration and metrics fingerprints.

Only the subset of RFC 8785 needed by the harness is covered: object keys are
sorted, integral floats collapse to integers, whitespace is removed, and the
output is UTF-8 encoded.  NaN and infinities are rejected.
"""

from __future__ import annotations

import hashlib
import json
import math
from typing import Any

__all__ = ["jcs_dump", "jcs_sha256"]


def _canonical_float(value: float) -> int | float:
    if math.isnan(value) or math.isinf(value):
        raise ValueError("NaN and Infinity are not permitted in canonical JSON")
    if value.is_integer():
        # Both 1.0 and -0.0 serialise as integers.
        return int(value)
    return value


def _canonicalize(obj: Any) -> Any:
    if obj is None or isinstance(obj, (bool, int, str)):
        return obj
    if isinstance(obj, float):
        return _canonical_float(obj)
    if isinstance(obj, (list, tuple)):
        return [_canonicalize(item) for item in obj]
    if isinstance(obj, dict):
        return {str(key): _canonicalize(obj[key]) for key in sorted(obj.keys(), key=str)}
    raise TypeError(f"Unsupported type for canonical JSON: {type(obj)!r}")


def jcs_dump(obj: Any) -> bytes:
    """Return canonical bytes for ``obj``.

    Unsupported value types raise :class:`TypeError`.
    """

    dumped = json.dumps(
        _canonicalize(obj),
        sort_keys=True,
        ensure_ascii=False,
        separators=(",", ":"),
        allow_nan=False,
    )
    return dumped.encode("utf-8")


def jcs_sha256(obj: Any) -> str:
    """Return the ``sha256-<hex>`` digest of the canonical representation of ``obj``."""

    return f"sha256-{hashlib.sha256(jcs_dump(obj)).hexdigest()}"
