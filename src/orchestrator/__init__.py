"""Benchmark orchestrator: job space, validation, scheduling and execution."""

from .executor import Executor, SequentialExecutor, TaskResult
from .jobspace import JobSpace, expand_job
from .scheduler import Scheduler, shuffle_tasks
from .task import Job, Task
from .validator import ValidatedJob, ValidationReport, validate_job, validate_jobs

__all__ = [
    "Executor",
    "Job",
    "JobSpace",
    "Scheduler",
    "SequentialExecutor",
    "Task",
    "TaskResult",
    "ValidatedJob",
    "ValidationReport",
    "expand_job",
    "shuffle_tasks",
    "validate_job",
    "validate_jobs",
]
