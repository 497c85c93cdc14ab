from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

import pytest

from orchestrator import log as journal
from ports.adapter_port import AdapterResponse
from project_config import resolve_settings

HASHES = {"events": 3, "t_hash": "9f2c", "x_hash": "01ab", "y_hash": "77e0"}


def default_document(framework: str, pipeline: str, experiment: str, stream: str) -> Dict[str, Any]:
    if experiment == "latencies":
        return {"hashes": dict(HASHES), "points": [[5, 200], [9, 300]]}
    return {"duration": 1500, "hashes": dict(HASHES)}


class FakeAdapter:
    """In-process stand-in for adapter programs that records every call."""

    def __init__(
        self,
        document: Callable[[str, str, str, str], Any] = default_document,
        *,
        returncode: int = 0,
    ) -> None:
        self.document = document
        self.returncode = returncode
        self.calls: List[Tuple[str, str, str, str]] = []

    def __call__(self, framework: str, pipeline: str, experiment: str, stream_path: Path) -> AdapterResponse:
        stream = Path(stream_path).stem
        self.calls.append((framework, pipeline, experiment, stream))
        payload = self.document(framework, pipeline, experiment, stream)
        stdout = payload if isinstance(payload, bytes) else (json.dumps(payload) + "\n").encode("utf-8")
        return AdapterResponse(
            command=("fake", framework, pipeline, experiment, str(stream_path)),
            returncode=self.returncode,
            stdout=stdout,
            stderr="" if self.returncode == 0 else "unknown pipeline",
            wall_s=0.001,
        )


@pytest.fixture(autouse=True)
def isolated_journal(tmp_path):
    journal.configure(tmp_path / "logs")
    journal.bind_envelope(None)
    yield tmp_path / "logs"
    journal.bind_envelope(None)


@pytest.fixture
def fake_adapter() -> Callable[..., FakeAdapter]:
    return FakeAdapter


@pytest.fixture
def make_settings(tmp_path):
    def _make(
        *,
        frameworks=("alpha", "beta"),
        pipelines=("mask", "flow"),
        streams=("squares", "street"),
        experiments=(("duration", 2),),
        seed: Optional[int] = 7,
        extra: Optional[Mapping[str, Any]] = None,
    ):
        config = {
            "benchmark": {
                "frameworks": list(frameworks),
                "pipelines": list(pipelines),
                "streams": list(streams),
                "experiments": [list(pair) for pair in experiments],
            },
            "paths": {
                "frameworks_dir": "frameworks",
                "media_dir": "media",
                "results_dir": "results",
                "logs_dir": "logs",
            },
        }
        if seed is not None:
            config["scheduler"] = {"seed": seed}
        for section, values in (extra or {}).items():
            config.setdefault(section, {}).update(values)
        return resolve_settings(config, root=tmp_path)

    return _make
