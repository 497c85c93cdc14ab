"""Executor interfaces for timed task execution."""

from __future__ import annotations

import gc
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Protocol, Sequence

from artifacts.result_store import ResultStore
from contracts.schema_validator import parse_response
from ports.adapter_port import AdapterInvoker

from . import log
from .task import Task

__all__ = ["Executor", "SequentialExecutor", "TaskResult"]


@dataclass(frozen=True)
class TaskResult:
    """Where and when a task's raw response was persisted."""

    task: Task
    position: int
    path: Path
    size: int
    wall_s: float
    completed_at: str


class Executor(Protocol):
    """Abstract execution backend."""

    def submit(self, tasks: Sequence[Task]) -> List[TaskResult]:
        """Run a batch of tasks and return their results in execution order."""


class SequentialExecutor:
    """Run tasks strictly one after another.

    Each response is checked for shape and written to the result store before
    the next task starts; the harness collects garbage after every task.
    """

    def __init__(
        self,
        invoke: AdapterInvoker,
        store: ResultStore,
        stream_path_for: Callable[[str], Path],
        *,
        echo: Callable[[str], None] = print,
        reclaim: Callable[[], object] = gc.collect,
        clock: Callable[[], str] = log.utc_now,
    ) -> None:
        self.invoke = invoke
        self.store = store
        self.stream_path_for = stream_path_for
        self.echo = echo
        self.reclaim = reclaim
        self.clock = clock

    def run_one(self, task: Task, position: int, total: int) -> TaskResult:
        response = self.invoke(
            task.framework,
            task.pipeline,
            task.experiment,
            self.stream_path_for(task.stream),
        ).raise_for_status()
        parse_response(response.stdout, task.experiment, source=task.name)
        path = self.store.write(task.name, response.stdout)
        completed_at = self.clock()

        self.echo(f"{position} / {total} {task.name} {completed_at}")
        log.append_event(
            {
                "event": "task.completed",
                "task": task.name,
                "position": position,
                "total": total,
                "wall_s": round(response.wall_s, 6),
                "ts": completed_at,
            }
        )
        return TaskResult(
            task=task,
            position=position,
            path=path,
            size=len(response.stdout),
            wall_s=response.wall_s,
            completed_at=completed_at,
        )

    def submit(self, tasks: Sequence[Task]) -> List[TaskResult]:
        results: List[TaskResult] = []
        total = len(tasks)
        for position, task in enumerate(tasks, start=1):
            results.append(self.run_one(task, position, total))
            self.reclaim()
        return results
