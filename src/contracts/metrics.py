"""Metrics Mapping value type used to fingerprint framework correctness."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Iterator, Union

from .errors import MalformedResponseError
from .jsoncanon import jcs_sha256

__all__ = ["MetricsMapping", "Scalar", "metrics_equal"]

Scalar = Union[str, int, float, bool, None]

_SCALAR_TYPES = (str, int, float, bool, type(None))


def _strict_equal(left: Any, right: Any) -> bool:
    # ``1 == 1.0 == True`` in Python; hash digests and counts must not coerce.
    return type(left) is type(right) and left == right


class MetricsMapping(Mapping):
    """Immutable mapping from metric name to a scalar value.

    Two mappings are equal when they have the same key set and every value is
    equal to its counterpart without type coercion.  Comparison is shallow and
    exact: there is no numerical tolerance.
    """

    __slots__ = ("_values",)

    def __init__(self, values: Mapping[str, Scalar] | None = None) -> None:
        materialised: dict[str, Scalar] = {}
        for key, value in (values or {}).items():
            if not isinstance(key, str):
                raise MalformedResponseError(f"metric names must be strings, got {key!r}")
            if not isinstance(value, _SCALAR_TYPES):
                raise MalformedResponseError(
                    f"metric '{key}' must be a scalar value, got {type(value).__name__}"
                )
            materialised[key] = value
        self._values = materialised

    @classmethod
    def from_document(cls, document: Mapping[str, Any], *, source: str | None = None) -> "MetricsMapping":
        """Extract the ``hashes`` block of an adapter response document."""

        hashes = document.get("hashes")
        if not isinstance(hashes, Mapping):
            raise MalformedResponseError("response is missing the 'hashes' object", source=source)
        return cls(hashes)

    def __getitem__(self, key: str) -> Scalar:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MetricsMapping):
            return NotImplemented
        return metrics_equal(self, other)

    def __ne__(self, other: object) -> bool:
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    def __hash__(self) -> int:
        return hash(frozenset((key, type(value), value) for key, value in self._values.items()))

    def __repr__(self) -> str:
        return f"MetricsMapping({self._values!r})"

    def to_dict(self) -> dict[str, Scalar]:
        return dict(self._values)

    def digest(self) -> str:
        """Return the canonical ``sha256`` fingerprint of the mapping."""

        return jcs_sha256(self._values)

    def to_text(self, indent: int = 1) -> str:
        """Render one ``key: value`` line per metric, indented by four spaces per level."""

        prefix = " " * (4 * indent)
        return "\n".join(f"{prefix}{key}: {value}" for key, value in self._values.items())


def metrics_equal(reference: Mapping[str, Scalar], candidate: Mapping[str, Scalar]) -> bool:
    """Shallow, exact comparison of two metric mappings."""

    if len(reference) != len(candidate):
        return False
    for key, value in reference.items():
        if key not in candidate:
            return False
        if not _strict_equal(value, candidate[key]):
            return False
    return True
