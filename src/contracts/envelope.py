"""Run envelope attached to every journal event."""

from __future__ import annotations

import hashlib
import platform
import socket
import uuid
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Any, Dict

__all__ = ["RunEnvelope", "make_envelope", "envelope_to_dict"]


@dataclass(frozen=True)
class RunEnvelope:
    run_id: str
    started_at: str
    config_digest: str
    hw_fingerprint: str
    python: str


def _default_hw_fingerprint() -> str:
    cpu = platform.processor() or platform.machine()
    node = socket.gethostname()
    kernel = platform.release()
    payload = f"{cpu}|{node}|{kernel}"
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()[:16]


def make_envelope(
    config_digest: str,
    *,
    run_id: str | None = None,
    started_at: str | None = None,
    hw_fingerprint: str | None = None,
) -> RunEnvelope:
    """Construct a :class:`RunEnvelope` for a new measurement campaign."""

    return RunEnvelope(
        run_id=run_id or f"run-{uuid.uuid4().hex[:12]}",
        started_at=started_at or datetime.now(timezone.utc).isoformat(timespec="milliseconds"),
        config_digest=config_digest,
        hw_fingerprint=hw_fingerprint or _default_hw_fingerprint(),
        python=platform.python_version(),
    )


def envelope_to_dict(envelope: RunEnvelope) -> Dict[str, Any]:
    return asdict(envelope)
