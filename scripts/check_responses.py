#!/usr/bin/env python3
"""Validate contract fixtures and persisted result records offline."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from artifacts.result_store import ResultStore
from contracts.errors import MalformedResponseError
from contracts.schema_validator import parse_response
from tools.reports.results_report import parse_task_name


def _experiment_for_fixture(path: Path) -> str:
    return path.stem.split("-", 1)[0]


def check_fixtures(fixtures_root: Path) -> List[str]:
    failures: List[str] = []
    for path in sorted((fixtures_root / "valid").glob("*.json")):
        try:
            parse_response(path.read_bytes(), _experiment_for_fixture(path), source=path.name)
        except MalformedResponseError as exc:
            failures.append(f"valid fixture failed: {exc}")

    for path in sorted((fixtures_root / "invalid").glob("*.json")):
        try:
            parse_response(path.read_bytes(), _experiment_for_fixture(path), source=path.name)
        except MalformedResponseError:
            continue
        failures.append(f"invalid fixture passed: {path.name}")
    return failures


def check_results(results_dir: Path) -> List[str]:
    failures: List[str] = []
    for name, raw in ResultStore(results_dir):
        key = parse_task_name(name)
        if key is None:
            failures.append(f"unexpected file name: {name}")
            continue
        try:
            parse_response(raw, key[1], source=name)
        except MalformedResponseError as exc:
            failures.append(str(exc))
    return failures


def main(argv: List[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--results", default=None, help="Also check every record in this results directory")
    args = parser.parse_args(argv)

    failures = check_fixtures(ROOT / "BenchmarkContracts" / "fixtures")
    if args.results:
        failures.extend(check_results(Path(args.results)))

    for failure in failures:
        print(failure, file=sys.stderr)
    if failures:
        return 1
    print("all responses conform")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
