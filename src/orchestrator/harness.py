"""Benchmark campaign orchestrator (Validate → Schedule → Execute)."""

from __future__ import annotations

import gc
import hashlib
import random
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional

from artifacts.result_store import ResultStore
from contracts.envelope import envelope_to_dict, make_envelope
from contracts.errors import HarnessError
from contracts.jsoncanon import jcs_dump
from ports.adapter_port import AdapterInvoker, SubprocessAdapter
from project_config import Settings, project_root

from . import log
from .executor import SequentialExecutor, TaskResult
from .jobspace import JobSpace
from .scheduler import Scheduler, shuffle_tasks
from .task import Task
from .validator import ValidationReport, validate_jobs

__all__ = ["CampaignSummary", "build_invoker", "config_banner", "plan_tasks", "run_campaign", "run_validation"]


@dataclass(frozen=True)
class CampaignSummary:
    run_id: str
    jobs: int
    tasks: int
    results: List[TaskResult]
    results_dir: Path
    log_path: Optional[Path]
    started_at: str
    finished_at: str


def config_banner(settings: Settings) -> tuple[str, str]:
    """Return the canonical resolved configuration and its digest."""

    canonical = jcs_dump(settings.to_dict())
    digest = f"sha256-{hashlib.sha256(canonical).hexdigest()}"
    return canonical.decode("utf-8"), digest


def build_invoker(settings: Settings) -> SubprocessAdapter:
    return SubprocessAdapter(
        settings.adapter_command,
        settings.frameworks_dir,
        timeout_s=settings.timeout_s,
        cwd=project_root(),
    )


def _open_journal(settings: Settings, echo: Callable[[str], None]) -> str:
    canonical, digest = config_banner(settings)
    echo(f"[benchmark] resolved config {digest}: {canonical}")
    envelope = make_envelope(digest)
    log.configure(settings.logs_dir)
    log.bind_envelope(envelope_to_dict(envelope))
    return envelope.run_id


def run_validation(
    settings: Settings,
    *,
    invoke: Optional[AdapterInvoker] = None,
    echo: Callable[[str], None] = print,
    reclaim: Callable[[], object] = gc.collect,
) -> ValidationReport:
    """Validate every job without scheduling any timed task."""

    _open_journal(settings, echo)
    space = JobSpace.from_settings(settings)
    invoke = invoke or build_invoker(settings)
    try:
        report = validate_jobs(space, invoke, settings.stream_path, echo=echo, reclaim=reclaim)
    except HarnessError as exc:
        log.append_event({"event": "run.aborted", "code": exc.code, "detail": exc.detail})
        raise
    finally:
        log.bind_envelope(None)
    return report


def plan_tasks(settings: Settings, *, rng: Optional[random.Random] = None) -> List[Task]:
    """Return the shuffled task order for a campaign, assuming every job validates."""

    space = JobSpace.from_settings(settings)
    tasks = [task for job in space.jobs() for task in space.tasks_for(job)]
    return shuffle_tasks(tasks, rng or random.Random(settings.seed))


def run_campaign(
    settings: Settings,
    *,
    invoke: Optional[AdapterInvoker] = None,
    rng: Optional[random.Random] = None,
    echo: Callable[[str], None] = print,
    reclaim: Callable[[], object] = gc.collect,
) -> CampaignSummary:
    """Execute the full measurement campaign.

    Validation runs job by job and must succeed for every job before a single
    timed task is scheduled.  Any error aborts the campaign.
    """

    run_id = _open_journal(settings, echo)
    started_at = log.utc_now()
    echo(started_at)

    try:
        space = JobSpace.from_settings(settings)
        invoke = invoke or build_invoker(settings)
        store = ResultStore(settings.results_dir)
        log.append_event(
            {
                "event": "run.started",
                "jobs": len(space.jobs()),
                "tasks": space.task_count(),
                "frameworks": list(space.frameworks),
            }
        )
        try:
            report = validate_jobs(space, invoke, settings.stream_path, echo=echo, reclaim=reclaim)
            executor = SequentialExecutor(invoke, store, settings.stream_path, echo=echo, reclaim=reclaim)
            scheduler = Scheduler(executor, rng=rng or random.Random(settings.seed))
            results = scheduler.submit(scheduler.plan(report))
        except HarnessError as exc:
            log.append_event({"event": "run.aborted", "code": exc.code, "detail": exc.detail})
            raise

        finished_at = log.utc_now()
        echo(finished_at)
        log.append_event({"event": "run.finished", "tasks": len(results), "ts": finished_at})
    finally:
        log.bind_envelope(None)

    return CampaignSummary(
        run_id=run_id,
        jobs=len(report.jobs),
        tasks=len(results),
        results=results,
        results_dir=store.root,
        log_path=log.current_log_path(),
        started_at=started_at,
        finished_at=finished_at,
    )
