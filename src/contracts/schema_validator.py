"""JSON Schema validation of framework adapter responses."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import jsonschema

from .errors import MalformedResponseError

_REPO_ROOT = Path(__file__).resolve().parents[2]
_CONTRACT_ROOT = _REPO_ROOT / "BenchmarkContracts"
_CATALOG_PATH = _CONTRACT_ROOT / "catalog.json"
_FALLBACK_KEY = "*"


@dataclass(frozen=True)
class SchemaDescriptor:
    """Descriptor that binds an experiment to its response schema."""

    experiment: str
    version: str
    schema_id: str
    schema_path: str


_catalog: Dict[str, SchemaDescriptor] = {}
_validator_cache: Dict[str, Any] = {}


def _load_catalog() -> Dict[str, SchemaDescriptor]:
    if _catalog:
        return _catalog

    raw = json.loads(_CATALOG_PATH.read_text("utf-8"))
    for experiment, data in raw.items():
        _catalog[experiment] = SchemaDescriptor(
            experiment=experiment,
            version=data["version"],
            schema_id=data["schema_id"],
            schema_path=data["schema_path"],
        )
    return _catalog


def get_schema_descriptor(experiment: str) -> SchemaDescriptor:
    """Return the descriptor for *experiment*, or the generic response schema."""

    catalog = _load_catalog()
    if experiment in catalog:
        return catalog[experiment]
    return catalog[_FALLBACK_KEY]


def load_schema(schema_path: str) -> Dict[str, Any]:
    """Load a schema relative to the contracts root directory."""

    if "://" in schema_path:
        raise ValueError("Remote schema paths are not permitted")
    resolved = (_CONTRACT_ROOT / schema_path).resolve()
    if not str(resolved).startswith(str(_CONTRACT_ROOT.resolve())):
        raise ValueError("Schema path escapes the contracts directory")
    return json.loads(resolved.read_text("utf-8"))


def _validator_for(descriptor: SchemaDescriptor) -> Any:
    cached = _validator_cache.get(descriptor.schema_id)
    if cached is not None:
        return cached

    schema = load_schema(descriptor.schema_path)
    if schema.get("$id") != descriptor.schema_id:
        raise ValueError(
            f"Schema id mismatch: catalog has {descriptor.schema_id!r}, schema has {schema.get('$id')!r}"
        )
    validator_cls = jsonschema.validators.validator_for(schema)
    validator_cls.check_schema(schema)
    validator = validator_cls(schema)
    _validator_cache[descriptor.schema_id] = validator
    return validator


def _error_path(error: jsonschema.ValidationError) -> str:
    components = ["$"]
    for part in error.absolute_path:
        if isinstance(part, int):
            components.append(f"[{part}]")
        else:
            components.append(f".{part}")
    return "".join(components)


def validate_document(document: Any, experiment: str, *, source: Optional[str] = None) -> None:
    """Raise :class:`MalformedResponseError` unless *document* fits the experiment's schema."""

    validator = _validator_for(get_schema_descriptor(experiment))
    error = jsonschema.exceptions.best_match(validator.iter_errors(document))
    if error is not None:
        raise MalformedResponseError(f"{_error_path(error)}: {error.message}", source=source)


def _reject_constant(token: str) -> Any:
    raise ValueError(f"{token} is not a JSON value")


def parse_response(raw: bytes | str, experiment: str, *, source: Optional[str] = None) -> Dict[str, Any]:
    """Decode an adapter's standard output and validate its shape.

    The adapter contract requires exactly one JSON document; surrounding
    whitespace is tolerated, anything else is not.
    """

    try:
        text = raw.decode("utf-8") if isinstance(raw, (bytes, bytearray)) else raw
        document = json.loads(text, parse_constant=_reject_constant)
    except ValueError as exc:
        raise MalformedResponseError(f"response is not a JSON document ({exc})", source=source) from exc

    validate_document(document, experiment, source=source)
    return document


__all__ = [
    "SchemaDescriptor",
    "get_schema_descriptor",
    "load_schema",
    "parse_response",
    "validate_document",
]
