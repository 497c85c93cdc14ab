"""Randomised task scheduling for timed execution."""

from __future__ import annotations

import random
from typing import List, Optional, Sequence

from .executor import Executor, TaskResult
from .task import Task
from .validator import ValidationReport

__all__ = ["Scheduler", "shuffle_tasks"]


def shuffle_tasks(tasks: Sequence[Task], rng: random.Random) -> List[Task]:
    """Return a uniformly random permutation of *tasks* (Fisher-Yates).

    The input sequence is left untouched.
    """

    shuffled = list(tasks)
    for index in range(len(shuffled) - 1, 0, -1):
        other = rng.randrange(index + 1)
        shuffled[index], shuffled[other] = shuffled[other], shuffled[index]
    return shuffled


class Scheduler:
    """Shuffle validated tasks and hand them to an executor."""

    def __init__(self, executor: Executor, rng: Optional[random.Random] = None) -> None:
        self.executor = executor
        self.rng = rng or random.Random()

    def plan(self, report: ValidationReport) -> List[Task]:
        """Return the execution order for every task of a successful validation."""

        return shuffle_tasks(report.tasks(), self.rng)

    def submit(self, tasks: Sequence[Task]) -> List[TaskResult]:
        """Submit the planned tasks to the underlying executor."""

        return self.executor.submit(list(tasks))
