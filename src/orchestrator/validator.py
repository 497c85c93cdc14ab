"""Cross-implementation validation of benchmark jobs.

Before any timing is trusted, every framework runs each job once and the hash
fingerprints it reports must match those of the reference framework (the first
framework of the job space).  A single disagreement aborts the campaign.
"""

from __future__ import annotations

import gc
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Mapping, Tuple

from contracts.errors import ValidationMismatchError
from contracts.metrics import MetricsMapping
from contracts.schema_validator import parse_response
from ports.adapter_port import AdapterInvoker

from . import log
from .jobspace import JobSpace
from .task import Job, Task

__all__ = [
    "ValidatedJob",
    "ValidationReport",
    "fetch_metrics",
    "find_mismatches",
    "validate_job",
    "validate_jobs",
]


@dataclass(frozen=True)
class ValidatedJob:
    job: Job
    reference: MetricsMapping
    tasks: Tuple[Task, ...]


@dataclass(frozen=True)
class ValidationReport:
    """Jobs that passed validation, in job space order, with their tasks."""

    jobs: Tuple[ValidatedJob, ...]

    def tasks(self) -> List[Task]:
        return [task for validated in self.jobs for task in validated.tasks]

    @property
    def task_count(self) -> int:
        return sum(len(validated.tasks) for validated in self.jobs)


def fetch_metrics(invoke: AdapterInvoker, framework: str, job: Job, stream_path: Path) -> MetricsMapping:
    """Run *framework* on *job* once and extract its Metrics Mapping."""

    response = invoke(framework, job.pipeline, job.experiment, stream_path).raise_for_status()
    source = f"{framework} {job.id}"
    document = parse_response(response.stdout, job.experiment, source=source)
    return MetricsMapping.from_document(document, source=source)


def find_mismatches(reference_framework: str, framework_metrics: Mapping[str, MetricsMapping]) -> List[str]:
    """Return the frameworks whose mapping differs from the reference."""

    reference = framework_metrics[reference_framework]
    return [
        framework
        for framework, metrics in framework_metrics.items()
        if framework != reference_framework and metrics != reference
    ]


def validate_job(
    space: JobSpace,
    job: Job,
    invoke: AdapterInvoker,
    stream_path_for: Callable[[str], Path],
    *,
    reclaim: Callable[[], object] = gc.collect,
) -> ValidatedJob:
    """Validate one job across all frameworks and expand it into tasks.

    Every framework is invoked before the verdict so that a mismatch report
    lists all of them.
    """

    stream_path = stream_path_for(job.stream)
    framework_metrics: Dict[str, MetricsMapping] = {}
    for framework in space.frameworks:
        framework_metrics[framework] = fetch_metrics(invoke, framework, job, stream_path)
        reclaim()

    mismatched = find_mismatches(space.reference_framework, framework_metrics)
    if mismatched:
        log.append_event(
            {
                "event": "job.mismatch",
                "job": job.id,
                "reference": space.reference_framework,
                "mismatched": mismatched,
                "metrics": {framework: metrics.to_dict() for framework, metrics in framework_metrics.items()},
            }
        )
        raise ValidationMismatchError(job.id, framework_metrics, mismatched)

    reference = framework_metrics[space.reference_framework]
    tasks = tuple(space.tasks_for(job))
    log.append_event(
        {
            "event": "job.validated",
            "job": job.id,
            "reference": space.reference_framework,
            "metrics": reference.to_dict(),
            "metrics_digest": reference.digest(),
            "tasks": len(tasks),
        }
    )
    return ValidatedJob(job=job, reference=reference, tasks=tasks)


def validate_jobs(
    space: JobSpace,
    invoke: AdapterInvoker,
    stream_path_for: Callable[[str], Path],
    *,
    echo: Callable[[str], None] = print,
    reclaim: Callable[[], object] = gc.collect,
) -> ValidationReport:
    """Validate every job in generation order, expanding each as it passes.

    Raises :class:`ValidationMismatchError` on the first disagreement; jobs
    after it are never run.
    """

    validated: List[ValidatedJob] = []
    for job in space.jobs():
        echo(job.id)
        result = validate_job(space, job, invoke, stream_path_for, reclaim=reclaim)
        echo(result.reference.to_text())
        validated.append(result)
    return ValidationReport(jobs=tuple(validated))
