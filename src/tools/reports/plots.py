"""PDF rendering of duration distributions, one page per job."""

from __future__ import annotations

from collections import defaultdict
from pathlib import Path
from typing import Dict, List

from .results_report import load_records

__all__ = ["collect_durations", "plot_durations"]

NS_PER_MS = 1e6


def collect_durations(results_dir: str | Path) -> Dict[str, Dict[str, List[float]]]:
    """Return ``{job: {framework: [duration in ms, ...]}}`` for duration records."""

    durations: Dict[str, Dict[str, List[float]]] = defaultdict(lambda: defaultdict(list))
    for (pipeline, experiment, stream, framework, _index), document in load_records(results_dir):
        if experiment != "duration":
            continue
        value = document.get("duration")
        if isinstance(value, (int, float)):
            durations[f"{pipeline}::{experiment}::{stream}"][framework].append(value / NS_PER_MS)
    return {job: dict(per_framework) for job, per_framework in sorted(durations.items())}


def plot_durations(results_dir: str | Path, out_path: str | Path) -> int:
    """Write a box plot per job to *out_path* and return the number of pages."""

    from matplotlib.backends.backend_pdf import PdfPages
    import matplotlib.pyplot as plt

    durations = collect_durations(results_dir)
    out_path = Path(out_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)

    with PdfPages(out_path) as pdf:
        for job, per_framework in durations.items():
            frameworks = sorted(per_framework)
            fig, ax = plt.subplots(figsize=(8.27, 5.83))
            ax.boxplot([per_framework[name] for name in frameworks], showfliers=True)
            ax.set_xticks(range(1, len(frameworks) + 1))
            ax.set_xticklabels(frameworks)
            ax.set_ylabel("duration (ms)")
            ax.set_title(job)
            ax.grid(axis="y", linewidth=0.5, alpha=0.5)
            pdf.savefig(fig)
            plt.close(fig)
    return len(durations)
