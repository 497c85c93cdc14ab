"""Command line entry point for benchmark campaigns."""

from __future__ import annotations

import argparse
import json
import random
import sys
from pathlib import Path
from typing import Any, Dict, List, Tuple

from contracts.errors import HarnessError, ValidationMismatchError
from orchestrator.harness import plan_tasks, run_campaign, run_validation
from project_config import Settings, get_config, load_config, project_root, resolve_settings
from tools.reports import plots, results_report


def _parse_experiment(value: str) -> Tuple[str, int]:
    name, sep, repetitions = value.rpartition(":")
    if not sep or not name:
        raise argparse.ArgumentTypeError(f"expected NAME:REPETITIONS, got {value!r}")
    try:
        count = int(repetitions)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"repetitions must be an integer, got {repetitions!r}") from exc
    if count < 0:
        raise argparse.ArgumentTypeError("repetitions must be non-negative")
    return name, count


def _settings_from_args(args: argparse.Namespace) -> Settings:
    if args.config:
        config_path = Path(args.config).resolve()
        config = load_config(config_path)
        root = config_path.parent
    else:
        config = get_config()
        root = project_root()

    overrides: Dict[str, Any] = {
        "frameworks": args.frameworks,
        "pipelines": args.pipelines,
        "streams": args.streams,
        "experiments": [list(pair) for pair in args.experiments] if args.experiments else None,
        "timeout_s": args.timeout,
        "seed": args.seed,
        "frameworks_dir": args.frameworks_dir,
        "media_dir": args.media_dir,
        "results_dir": args.results_dir,
        "logs_dir": args.logs_dir,
    }
    return resolve_settings(config, overrides=overrides, root=root)


def cmd_run(args: argparse.Namespace) -> int:
    settings = _settings_from_args(args)
    summary = run_campaign(settings)
    print(f"{summary.tasks} results from {summary.jobs} jobs written to {summary.results_dir}")
    return 0


def cmd_validate(args: argparse.Namespace) -> int:
    settings = _settings_from_args(args)
    report = run_validation(settings)
    print(f"{len(report.jobs)} jobs validated, {report.task_count} tasks ready")
    return 0


def cmd_plan(args: argparse.Namespace) -> int:
    settings = _settings_from_args(args)
    rng = random.Random(settings.seed)
    tasks = plan_tasks(settings, rng=rng)
    print(f"{len(tasks)} tasks")
    if args.list:
        for task in tasks:
            print(task.name)
    return 0


def cmd_report(args: argparse.Namespace) -> int:
    results_dir = Path(args.path)
    if not results_dir.is_dir():
        raise SystemExit(f"No results directory at {results_dir}")
    summary = results_report.aggregate(results_dir)
    print(json.dumps(summary, indent=2, sort_keys=True))
    return 0


def cmd_plot(args: argparse.Namespace) -> int:
    results_dir = Path(args.path)
    if not results_dir.is_dir():
        raise SystemExit(f"No results directory at {results_dir}")
    pages = plots.plot_durations(results_dir, args.out)
    print(f"{pages} pages written to {Path(args.out).resolve()}")
    return 0


def _add_campaign_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--config", default=None, help="Path to a config.toml (default: repository config)")
    parser.add_argument("--frameworks", nargs="+", default=None, help="Frameworks, reference first")
    parser.add_argument("--pipelines", nargs="+", default=None)
    parser.add_argument("--streams", nargs="+", default=None)
    parser.add_argument(
        "--experiment",
        dest="experiments",
        action="append",
        type=_parse_experiment,
        default=None,
        metavar="NAME:REPETITIONS",
        help="Experiment and repetition count; repeat for several",
    )
    parser.add_argument("--timeout", type=float, default=None, help="Adapter timeout in seconds (0 disables)")
    parser.add_argument("--seed", type=int, default=None, help="Seed for the task shuffle")
    parser.add_argument("--frameworks-dir", default=None)
    parser.add_argument("--media-dir", default=None)
    parser.add_argument("--results-dir", default=None)
    parser.add_argument("--logs-dir", default=None)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Event-stream framework benchmark harness")
    sub = parser.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", help="Validate every job, then run all timed tasks in random order")
    _add_campaign_options(run)
    run.set_defaults(func=cmd_run)

    validate = sub.add_parser("validate", help="Only check that all frameworks agree on every job")
    _add_campaign_options(validate)
    validate.set_defaults(func=cmd_validate)

    plan = sub.add_parser("plan", help="Show the task count and shuffled order without running anything")
    _add_campaign_options(plan)
    plan.add_argument("--list", action="store_true", help="Print every task name in execution order")
    plan.set_defaults(func=cmd_plan)

    report = sub.add_parser("report", help="Aggregate persisted results")
    report.add_argument("path", help="Results directory")
    report.set_defaults(func=cmd_report)

    plot = sub.add_parser("plot", help="Render duration box plots to a PDF")
    plot.add_argument("path", help="Results directory")
    plot.add_argument("--out", default="durations.pdf")
    plot.set_defaults(func=cmd_plot)

    return parser


def main(argv: List[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    try:
        return args.func(args)
    except ValidationMismatchError as exc:
        print(exc.diagnostic(), file=sys.stderr)
        return 1
    except HarnessError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
