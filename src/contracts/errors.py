"""Shared error types for the benchmark harness.

Every failure is fatal to the whole measurement campaign.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Mapping, Optional, Sequence

if TYPE_CHECKING:  # pragma: no cover
    from .metrics import MetricsMapping


class HarnessError(RuntimeError):
    """Base class for all harness failures.

    ``code`` is a short machine-friendly identifier, ``detail`` a human
    readable explanation.
    """

    def __init__(self, code: str, detail: Optional[str] = None) -> None:
        self.code = code
        self.detail = detail
        message = code if detail is None else f"{code}: {detail}"
        super().__init__(message)


class ConfigurationError(HarnessError):
    """Raised when the campaign definition is missing or inconsistent."""

    def __init__(self, detail: str) -> None:
        super().__init__("invalid-configuration", detail)


class AdapterInvocationError(HarnessError):
    """Raised when an adapter program exits with a non-zero status."""

    def __init__(self, command: Sequence[str], returncode: int, stderr: str) -> None:
        self.command = list(command)
        self.returncode = returncode
        self.stderr = stderr
        detail = f"{' '.join(self.command)} exited with status {returncode}"
        message = stderr.strip()
        if message:
            detail = f"{detail}\n{message}"
        super().__init__("adapter-failed", detail)


class AdapterTimeoutError(HarnessError):
    """Raised when an adapter program outlives the configured timeout."""

    def __init__(self, command: Sequence[str], timeout_s: float) -> None:
        self.command = list(command)
        self.timeout_s = timeout_s
        super().__init__("adapter-timeout", f"{' '.join(self.command)} did not exit within {timeout_s:g} s")


class MalformedResponseError(HarnessError):
    """Raised when an adapter response is not a document of the expected shape."""

    def __init__(self, detail: str, *, source: Optional[str] = None) -> None:
        self.source = source
        if source:
            detail = f"{source}: {detail}"
        super().__init__("malformed-response", detail)


class ValidationMismatchError(HarnessError):
    """Raised when a framework disagrees with the reference framework for a job."""

    def __init__(
        self,
        job_id: str,
        framework_metrics: Mapping[str, "MetricsMapping"],
        mismatched: Sequence[str],
    ) -> None:
        self.job_id = job_id
        self.framework_metrics = dict(framework_metrics)
        self.mismatched = list(mismatched)
        super().__init__("validation-mismatch", f"the frameworks returned non-identical hashes for {job_id}")

    def diagnostic(self) -> str:
        """Return every framework's mapping, formatted for the operator."""

        lines = [f"the frameworks returned non-identical hashes for {self.job_id}"]
        for framework, metrics in self.framework_metrics.items():
            lines.append(f"    {framework}:")
            lines.append(metrics.to_text(indent=2))
        return "\n".join(lines)


__all__ = [
    "AdapterInvocationError",
    "AdapterTimeoutError",
    "ConfigurationError",
    "HarnessError",
    "MalformedResponseError",
    "ValidationMismatchError",
]
