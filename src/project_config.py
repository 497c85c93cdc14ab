"""Utility helpers for loading the benchmark campaign configuration."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

try:  # Python 3.11+
    import tomllib  # type: ignore[attr-defined]
except ModuleNotFoundError:  # pragma: no cover - fallback for older Python
    import tomli as tomllib  # type: ignore[import-untyped]

from contracts.errors import ConfigurationError

_CONFIG_FILENAME = "config.toml"
_MISSING = object()

_DEFAULT_COMMAND = ("node", "--max-old-space-size=16384", "{frameworks_dir}/{framework}/run_task.js")


def project_root() -> Path:
    return Path(__file__).resolve().parents[1]


def _config_path() -> Path:
    return project_root() / _CONFIG_FILENAME


def load_config(path: str | Path) -> Dict[str, Any]:
    """Read a TOML configuration file."""

    path = Path(path)
    try:
        with path.open("rb") as fh:
            return tomllib.load(fh)
    except FileNotFoundError as exc:
        raise ConfigurationError(f"configuration file '{path}' was not found") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigurationError(f"configuration file '{path}' is not valid TOML: {exc}") from exc


@lru_cache(maxsize=1)
def get_config() -> Dict[str, Any]:
    """Load and cache the project configuration as a dictionary."""

    return load_config(_config_path())


def get_section(path: str, default: Any = _MISSING, *, config: Mapping[str, Any] | None = None) -> Any:
    """Retrieve a nested configuration value using dotted notation."""

    data: Any = get_config() if config is None else config
    for part in path.split("."):
        if isinstance(data, Mapping) and part in data:
            data = data[part]
        else:
            if default is not _MISSING:
                return default
            raise KeyError(f"Configuration path '{path}' not found")
    return data


@dataclass(frozen=True)
class Settings:
    """Fully resolved campaign settings."""

    frameworks: Tuple[str, ...]
    pipelines: Tuple[str, ...]
    streams: Tuple[str, ...]
    experiments: Tuple[Tuple[str, int], ...]
    adapter_command: Tuple[str, ...]
    timeout_s: Optional[float]
    frameworks_dir: Path
    media_dir: Path
    results_dir: Path
    logs_dir: Path
    seed: Optional[int]

    def stream_path(self, stream: str) -> Path:
        return self.media_dir / f"{stream}.es"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "frameworks": list(self.frameworks),
            "pipelines": list(self.pipelines),
            "streams": list(self.streams),
            "experiments": [[name, repetitions] for name, repetitions in self.experiments],
            "adapter_command": list(self.adapter_command),
            "timeout_s": self.timeout_s,
            "frameworks_dir": str(self.frameworks_dir),
            "media_dir": str(self.media_dir),
            "results_dir": str(self.results_dir),
            "logs_dir": str(self.logs_dir),
            "seed": self.seed,
        }


def _names(value: Any, label: str) -> Tuple[str, ...]:
    if not isinstance(value, (list, tuple)) or not all(isinstance(item, str) and item for item in value):
        raise ConfigurationError(f"{label} must be a list of non-empty strings")
    if len(set(value)) != len(value):
        raise ConfigurationError(f"{label} must not contain duplicates")
    return tuple(value)


def _experiments(value: Any) -> Tuple[Tuple[str, int], ...]:
    if not isinstance(value, (list, tuple)):
        raise ConfigurationError("experiments must be a list of [name, repetitions] pairs")
    pairs = []
    for entry in value:
        if not (isinstance(entry, (list, tuple)) and len(entry) == 2):
            raise ConfigurationError(f"experiment entry {entry!r} must be a [name, repetitions] pair")
        name, repetitions = entry
        if not isinstance(name, str) or not name:
            raise ConfigurationError(f"experiment name {name!r} must be a non-empty string")
        if isinstance(repetitions, bool) or not isinstance(repetitions, int) or repetitions < 0:
            raise ConfigurationError(f"repetitions for '{name}' must be a non-negative integer")
        pairs.append((name, repetitions))
    if len({name for name, _ in pairs}) != len(pairs):
        raise ConfigurationError("experiments must not contain duplicates")
    return tuple(pairs)


def _resolve_path(value: Any, label: str, root: Path) -> Path:
    if not isinstance(value, str) or not value:
        raise ConfigurationError(f"paths.{label} must be a non-empty string")
    path = Path(value).expanduser()
    if not path.is_absolute():
        path = root / path
    return path


def _timeout(value: Any) -> Optional[float]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
        raise ConfigurationError("adapter.timeout_s must be a non-negative number")
    return float(value) if value > 0 else None


def resolve_settings(
    config: Mapping[str, Any] | None = None,
    *,
    overrides: Mapping[str, Any] | None = None,
    root: Path | None = None,
) -> Settings:
    """Merge the configuration file with command line overrides.

    Precedence is override > file > built-in default.  ``overrides`` uses the
    flat :class:`Settings` field names; ``None`` values are ignored.
    """

    config = get_config() if config is None else config
    root = project_root() if root is None else root
    merged: Dict[str, Any] = {
        "frameworks": get_section("benchmark.frameworks", None, config=config),
        "pipelines": get_section("benchmark.pipelines", None, config=config),
        "streams": get_section("benchmark.streams", None, config=config),
        "experiments": get_section("benchmark.experiments", None, config=config),
        "adapter_command": get_section("adapter.command", list(_DEFAULT_COMMAND), config=config),
        "timeout_s": get_section("adapter.timeout_s", None, config=config),
        "frameworks_dir": get_section("paths.frameworks_dir", "frameworks", config=config),
        "media_dir": get_section("paths.media_dir", "media", config=config),
        "results_dir": get_section("paths.results_dir", "results", config=config),
        "logs_dir": get_section("paths.logs_dir", "logs/benchmark", config=config),
        "seed": get_section("scheduler.seed", None, config=config),
    }
    for key, value in (overrides or {}).items():
        if key not in merged:
            raise ConfigurationError(f"unknown setting '{key}'")
        if value is not None:
            merged[key] = value

    frameworks = _names(merged["frameworks"], "frameworks")
    if not frameworks:
        raise ConfigurationError("at least one framework is required")

    command = merged["adapter_command"]
    if not isinstance(command, (list, tuple)) or not command or not all(isinstance(part, str) for part in command):
        raise ConfigurationError("adapter.command must be a non-empty list of strings")

    seed = merged["seed"]
    if seed is not None and (isinstance(seed, bool) or not isinstance(seed, int)):
        raise ConfigurationError("scheduler.seed must be an integer")

    return Settings(
        frameworks=frameworks,
        pipelines=_names(merged["pipelines"], "pipelines"),
        streams=_names(merged["streams"], "streams"),
        experiments=_experiments(merged["experiments"]),
        adapter_command=tuple(command),
        timeout_s=_timeout(merged["timeout_s"]),
        frameworks_dir=_resolve_path(merged["frameworks_dir"], "frameworks_dir", root),
        media_dir=_resolve_path(merged["media_dir"], "media_dir", root),
        results_dir=_resolve_path(merged["results_dir"], "results_dir", root),
        logs_dir=_resolve_path(merged["logs_dir"], "logs_dir", root),
        seed=seed,
    )


__all__ = ["Settings", "get_config", "get_section", "load_config", "project_root", "resolve_settings"]
