"""Aggregation helpers for persisted benchmark results."""

from __future__ import annotations

import json
import statistics
from collections import Counter, defaultdict
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Tuple

from artifacts.result_store import ResultStore
from contracts.jsoncanon import jcs_dump

__all__ = ["aggregate", "load_records", "parse_task_name"]

_NAME_FIELDS = 5


def parse_task_name(name: str) -> Tuple[str, str, str, str, int] | None:
    """Split ``pipeline::experiment::stream::framework::index``; ``None`` if foreign."""

    parts = name.split("::")
    if len(parts) != _NAME_FIELDS or not parts[4].isdigit():
        return None
    pipeline, experiment, stream, framework, index = parts
    return pipeline, experiment, stream, framework, int(index)


def load_records(results_dir: str | Path) -> Iterable[Tuple[Tuple[str, str, str, str, int], Mapping[str, Any]]]:
    for name, raw in ResultStore(results_dir):
        key = parse_task_name(name)
        if key is None:
            continue
        yield key, json.loads(raw.decode("utf-8"))


def _describe(values: List[float]) -> Dict[str, float]:
    return {
        "min": min(values),
        "median": statistics.median(values),
        "mean": statistics.fmean(values),
        "max": max(values),
    }


def aggregate(results_dir: str | Path) -> Mapping[str, object]:
    """Summarise every result record, grouped by job and framework.

    Duration records contribute their ``duration``; latency records contribute
    the median of their point latencies.
    """

    counts: Counter[Tuple[str, str]] = Counter()
    values: Dict[Tuple[str, str], List[float]] = defaultdict(list)
    for (pipeline, experiment, stream, framework, _index), document in load_records(results_dir):
        key = (f"{pipeline}::{experiment}::{stream}", framework)
        counts[key] += 1
        if experiment == "duration" and isinstance(document.get("duration"), (int, float)):
            values[key].append(float(document["duration"]))
        elif experiment == "latencies":
            latencies = [float(point[1]) for point in document.get("points", [])]
            if latencies:
                values[key].append(statistics.median(latencies))

    jobs: Dict[str, Dict[str, Dict[str, Any]]] = {}
    for (job, framework), count in sorted(counts.items()):
        entry: Dict[str, Any] = {"records": count}
        if values[(job, framework)]:
            entry.update(_describe(values[(job, framework)]))
        jobs.setdefault(job, {})[framework] = entry

    summary: Dict[str, Any] = {"total_records": sum(counts.values()), "jobs": jobs}
    # Canonicalise summary for deterministic snapshots
    summary["canonical"] = jcs_dump(dict(summary)).decode("utf-8")
    return summary
