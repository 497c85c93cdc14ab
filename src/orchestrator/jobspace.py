"""Deterministic job and task enumeration."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Sequence, Tuple

from contracts.errors import ConfigurationError

from .task import SEPARATOR, Job, Task

if TYPE_CHECKING:  # pragma: no cover
    from project_config import Settings

__all__ = ["JobSpace", "expand_job"]


def _check_names(values: Sequence[str], label: str) -> None:
    if len(set(values)) != len(values):
        raise ConfigurationError(f"{label} must not contain duplicates")
    for value in values:
        if not value or "/" in value or "\\" in value:
            raise ConfigurationError(f"{label} entry '{value}' must be a non-empty name without path separators")
        if SEPARATOR in value:
            raise ConfigurationError(f"{label} entry '{value}' must not contain '{SEPARATOR}'")


@dataclass(frozen=True)
class JobSpace:
    """Cross product of pipelines, experiments and streams.

    Ordering is fully deterministic and becomes the pre-shuffle order: jobs are
    enumerated pipeline-major, then experiment, then stream; a job's tasks are
    framework-major, then repetition.
    """

    pipelines: Tuple[str, ...]
    experiments: Tuple[Tuple[str, int], ...]
    streams: Tuple[str, ...]
    frameworks: Tuple[str, ...]

    def __post_init__(self) -> None:
        _check_names(self.pipelines, "pipelines")
        _check_names([name for name, _ in self.experiments], "experiments")
        _check_names(self.streams, "streams")
        _check_names(self.frameworks, "frameworks")
        if not self.frameworks:
            raise ConfigurationError("at least one framework is required")
        for name, repetitions in self.experiments:
            if repetitions < 0:
                raise ConfigurationError(f"repetitions for '{name}' must be non-negative")

    @classmethod
    def from_settings(cls, settings: "Settings") -> "JobSpace":
        return cls(
            pipelines=tuple(settings.pipelines),
            experiments=tuple(settings.experiments),
            streams=tuple(settings.streams),
            frameworks=tuple(settings.frameworks),
        )

    @property
    def reference_framework(self) -> str:
        return self.frameworks[0]

    def repetitions(self, experiment: str) -> int:
        for name, count in self.experiments:
            if name == experiment:
                return count
        raise KeyError(experiment)

    def jobs(self) -> List[Job]:
        return [
            Job(pipeline=pipeline, experiment=experiment, stream=stream)
            for pipeline in self.pipelines
            for experiment, _ in self.experiments
            for stream in self.streams
        ]

    def tasks_for(self, job: Job) -> List[Task]:
        return expand_job(job, self.frameworks, self.repetitions(job.experiment))

    def task_count(self) -> int:
        total_repetitions = sum(count for _, count in self.experiments)
        return len(self.pipelines) * len(self.streams) * len(self.frameworks) * total_repetitions


def expand_job(job: Job, frameworks: Sequence[str], repetitions: int) -> List[Task]:
    """Return the timed tasks of *job*: framework-major, repetition-minor."""

    return [
        Task(job=job, framework=framework, repetition=index)
        for framework in frameworks
        for index in range(repetitions)
    ]
