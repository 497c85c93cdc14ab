"""Generic framework adapter built on a directory of native pipeline programs.

Usage::

    benchmark-adapter [--native-dir DIR] [--reader-file F] [--sink-file F] PIPELINE EXPERIMENT STREAM

The native program ``DIR/<pipeline>`` (or ``DIR/<pipeline>_latencies``) is run
on the stream.  Its sink array is read from standard output, or from
``--sink-file`` for frameworks that write it to disk, and normalised into the
response document printed on standard output.  ``--reader-file`` supplies the
reference clock reading taken when the stream was read; without it the native
program is assumed to report elapsed times.
"""

from __future__ import annotations

import argparse
import json
import subprocess
import sys
from pathlib import Path
from typing import Any, List

from ports.adapter_kit import AdapterUsageError, build_document, native_program

USAGE = "3 arguments are expected (a pipeline name, an experiment name and an Event Stream filename)"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="benchmark-adapter", description="Run a native pipeline and normalise its output")
    parser.add_argument("--native-dir", default="build", help="Directory holding the native pipeline programs")
    parser.add_argument("--reader-file", default=None, help="JSON file with the reference clock reading")
    parser.add_argument("--sink-file", default=None, help="JSON file with the sink array (default: standard output)")
    parser.add_argument("arguments", nargs="*", metavar="PIPELINE EXPERIMENT STREAM")
    return parser


def _read_json(path: str) -> Any:
    return json.loads(Path(path).read_text("utf-8"))


def main(argv: List[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    if len(args.arguments) != 3:
        print(USAGE, file=sys.stderr)
        return 1
    pipeline, experiment, stream = args.arguments

    try:
        program = native_program(pipeline, experiment)
    except AdapterUsageError as exc:
        print(exc, file=sys.stderr)
        return 1

    for stale in (args.reader_file, args.sink_file):
        if stale:
            Path(stale).unlink(missing_ok=True)

    command = [str(Path(args.native_dir) / program), str(Path(stream).resolve())]
    try:
        completed = subprocess.run(command, stdout=subprocess.PIPE, stderr=subprocess.PIPE, check=False)
    except OSError as exc:
        print(f"cannot run {command[0]}: {exc}", file=sys.stderr)
        return 1
    if completed.returncode != 0:
        sys.stderr.write(completed.stderr.decode("utf-8", errors="replace"))
        print(f"{program} exited with status {completed.returncode}", file=sys.stderr)
        return completed.returncode

    try:
        sink = _read_json(args.sink_file) if args.sink_file else json.loads(completed.stdout.decode("utf-8"))
        reference = _read_json(args.reader_file) if args.reader_file else 0
        document = build_document(pipeline, experiment, sink, reference)
    except (OSError, ValueError, TypeError) as exc:
        print(f"malformed output from {program}: {exc}", file=sys.stderr)
        return 1

    sys.stdout.write(json.dumps(document) + "\n")
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
