"""Synchronous invocation of framework adapter programs."""

from __future__ import annotations

import subprocess
import time
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Protocol, Sequence, Tuple

from contracts.errors import AdapterInvocationError, AdapterTimeoutError

__all__ = ["AdapterInvoker", "AdapterResponse", "SubprocessAdapter"]


@dataclass(frozen=True)
class AdapterResponse:
    """Outcome of one adapter invocation.

    ``ok`` is ``True`` only for a zero exit status; the raw standard output is
    kept verbatim so it can be persisted without re-serialisation.
    """

    command: Tuple[str, ...]
    returncode: int
    stdout: bytes
    stderr: str
    wall_s: float

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    def raise_for_status(self) -> "AdapterResponse":
        if not self.ok:
            raise AdapterInvocationError(self.command, self.returncode, self.stderr)
        return self


class AdapterInvoker(Protocol):
    """Callable running one framework adapter to completion."""

    def __call__(self, framework: str, pipeline: str, experiment: str, stream_path: Path) -> AdapterResponse:
        """Run the adapter and return its response, failed or not."""


class SubprocessAdapter:
    """Run adapters as child processes, one at a time.

    ``command`` is an argv prefix whose items may reference ``{framework}`` and
    ``{frameworks_dir}``; the pipeline, experiment and stream path are appended
    as the three positional arguments of the adapter contract.  Without a
    timeout a hung adapter blocks the caller indefinitely.
    """

    def __init__(
        self,
        command: Sequence[str],
        frameworks_dir: Path,
        *,
        timeout_s: Optional[float] = None,
        cwd: Optional[Path] = None,
    ) -> None:
        self.command = tuple(command)
        self.frameworks_dir = Path(frameworks_dir)
        self.timeout_s = timeout_s
        self.cwd = cwd

    def command_for(self, framework: str, pipeline: str, experiment: str, stream_path: Path) -> List[str]:
        prefix = [
            part.format(framework=framework, frameworks_dir=str(self.frameworks_dir))
            for part in self.command
        ]
        return prefix + [pipeline, experiment, str(stream_path)]

    def __call__(self, framework: str, pipeline: str, experiment: str, stream_path: Path) -> AdapterResponse:
        command = self.command_for(framework, pipeline, experiment, stream_path)
        start = time.perf_counter()
        try:
            completed = subprocess.run(
                command,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                timeout=self.timeout_s,
                cwd=self.cwd,
                check=False,
            )
        except subprocess.TimeoutExpired as exc:
            raise AdapterTimeoutError(command, self.timeout_s or 0.0) from exc
        except OSError as exc:
            raise AdapterInvocationError(command, -1, str(exc)) from exc
        wall_s = time.perf_counter() - start

        return AdapterResponse(
            command=tuple(command),
            returncode=completed.returncode,
            stdout=completed.stdout,
            stderr=completed.stderr.decode("utf-8", errors="replace"),
            wall_s=wall_s,
        )
