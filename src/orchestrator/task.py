"""Work unit definitions for the benchmark orchestrator."""

from __future__ import annotations

from dataclasses import dataclass

__all__ = ["Job", "Task", "SEPARATOR"]

SEPARATOR = "::"


@dataclass(frozen=True, order=True)
class Job:
    """One unit of required cross-framework equivalence."""

    pipeline: str
    experiment: str
    stream: str

    @property
    def id(self) -> str:
        return SEPARATOR.join((self.pipeline, self.experiment, self.stream))

    def __str__(self) -> str:
        return self.id


@dataclass(frozen=True, order=True)
class Task:
    """One scheduled, timed execution of a job under a framework.

    Tasks order by job, framework and repetition so that a shuffled list can be
    compared with its source by sorting both.
    """

    job: Job
    framework: str
    repetition: int

    @property
    def name(self) -> str:
        return SEPARATOR.join((self.job.id, self.framework, str(self.repetition)))

    @property
    def pipeline(self) -> str:
        return self.job.pipeline

    @property
    def experiment(self) -> str:
        return self.job.experiment

    @property
    def stream(self) -> str:
        return self.job.stream
