from __future__ import annotations

import json
import random
import sys
import textwrap
from pathlib import Path

import pytest

from contracts.errors import ConfigurationError
from orchestrator import log
from orchestrator.harness import plan_tasks, run_campaign
from tools.cli import benchmark

ADAPTER = textwrap.dedent(
    """
    import json
    import os
    import sys

    SALT = {salt!r}

    if len(sys.argv) != 4:
        sys.stderr.write("3 arguments are expected\\n")
        sys.exit(1)
    pipeline, experiment, stream = sys.argv[1:]
    stream = os.path.splitext(os.path.basename(stream))[0]
    hashes = {{"events": len(pipeline) + len(stream), "t_hash": pipeline + "/" + stream + SALT}}
    if experiment == "duration":
        document = {{"duration": 1000 + len(stream), "hashes": hashes}}
    else:
        document = {{"hashes": hashes, "points": [[1, 10], [2, 20]]}}
    print(json.dumps(document))
    """
)


def _write_campaign(tmp_path: Path, salts: dict) -> Path:
    for framework, salt in salts.items():
        script = tmp_path / "frameworks" / framework / "run_task.py"
        script.parent.mkdir(parents=True)
        script.write_text(ADAPTER.format(salt=salt), encoding="utf-8")

    config = tmp_path / "config.toml"
    config.write_text(
        textwrap.dedent(
            f"""\
            [benchmark]
            frameworks = {json.dumps(list(salts))}
            pipelines = ["mask", "flow"]
            streams = ["squares", "street"]
            experiments = [["duration", 2], ["latencies", 1]]

            [adapter]
            command = [{json.dumps(sys.executable)}, "{{frameworks_dir}}/{{framework}}/run_task.py"]
            timeout_s = 60

            [paths]
            frameworks_dir = "frameworks"
            media_dir = "media"
            results_dir = "results"
            logs_dir = "logs"

            [scheduler]
            seed = 11
            """
        ),
        encoding="utf-8",
    )
    return config


def _events(tmp_path: Path) -> list[dict]:
    events = []
    for path in sorted((tmp_path / "logs").glob("**/*.jsonl")):
        events.extend(json.loads(line) for line in path.read_text("utf-8").splitlines())
    return events


def test_run_validates_then_persists_every_task(tmp_path, capsys):
    config = _write_campaign(tmp_path, {"alpha": "", "beta": ""})

    assert benchmark.main(["run", "--config", str(config)]) == 0

    results = sorted(path.name for path in (tmp_path / "results").iterdir())
    assert len(results) == 24
    assert "mask::duration::squares::alpha::0.json" in results
    assert "flow::latencies::street::beta::0.json" in results
    assert "flow::latencies::street::beta::1.json" not in results

    record = json.loads((tmp_path / "results" / "mask::duration::street::beta::1.json").read_text("utf-8"))
    assert record == {"duration": 1006, "hashes": {"events": 10, "t_hash": "mask/street"}}

    out = capsys.readouterr().out
    assert "mask::duration::squares" in out
    assert "24 / 24 " in out
    assert "24 results from 8 jobs" in out

    kinds = [event["event"] for event in _events(tmp_path)]
    assert kinds[0] == "run.started"
    assert kinds.count("job.validated") == 8
    assert kinds.count("task.completed") == 24
    assert kinds[-1] == "run.finished"


def test_mismatch_exits_with_status_one_and_writes_nothing(tmp_path, capsys):
    config = _write_campaign(tmp_path, {"alpha": "", "beta": "!"})

    assert benchmark.main(["run", "--config", str(config)]) == 1

    assert not (tmp_path / "results").exists()
    err = capsys.readouterr().err
    assert "non-identical hashes for mask::duration::squares" in err
    assert "    alpha:" in err and "    beta:" in err
    assert "t_hash: mask/squares!" in err
    assert _events(tmp_path)[-1]["event"] == "run.aborted"


def test_rerun_replaces_previous_results(tmp_path, capsys):
    config = _write_campaign(tmp_path, {"alpha": ""})
    results = tmp_path / "results"
    results.mkdir()
    stale = results / "mask::duration::squares::alpha::0.json"
    stale.write_text('{"stale": true}', encoding="utf-8")

    assert benchmark.main(["run", "--config", str(config), "--frameworks", "alpha"]) == 0

    assert len(list(results.iterdir())) == 12
    assert json.loads(stale.read_text("utf-8"))["duration"] == 1007


def test_command_line_overrides_the_file(tmp_path, capsys):
    config = _write_campaign(tmp_path, {"alpha": "", "beta": ""})
    argv = ["plan", "--config", str(config), "--pipelines", "mask", "--experiment", "duration:3", "--list"]

    assert benchmark.main(argv) == 0

    lines = capsys.readouterr().out.splitlines()
    names = [line for line in lines if "::" in line and not line.startswith("[benchmark]")]
    assert "12 tasks" in lines
    assert len(names) == 12
    assert all(name.startswith("mask::duration::") for name in names)


def test_validate_runs_no_timed_task(tmp_path, capsys):
    config = _write_campaign(tmp_path, {"alpha": "", "beta": ""})

    assert benchmark.main(["validate", "--config", str(config)]) == 0

    assert "8 jobs validated, 24 tasks ready" in capsys.readouterr().out
    assert not (tmp_path / "results").exists()


def test_unknown_framework_directory_is_an_adapter_failure(tmp_path, capsys):
    config = _write_campaign(tmp_path, {"alpha": ""})

    assert benchmark.main(["validate", "--config", str(config), "--frameworks", "alpha", "ghost"]) == 1
    assert "error: adapter-failed" in capsys.readouterr().err


def test_plan_is_reproducible_for_a_seed(make_settings):
    settings = make_settings(seed=3)
    assert plan_tasks(settings) == plan_tasks(settings)
    assert plan_tasks(settings, rng=random.Random(4)) != plan_tasks(settings)


def test_campaign_with_injected_adapter(make_settings, fake_adapter, tmp_path):
    settings = make_settings(experiments=(("duration", 1), ("latencies", 0)))
    adapter = fake_adapter()
    echoed: list[str] = []

    summary = run_campaign(settings, invoke=adapter, echo=echoed.append, reclaim=lambda: None)

    assert summary.jobs == 8
    assert summary.tasks == 8
    assert len(adapter.calls) == 16 + 8
    assert summary.results_dir == tmp_path / "results"
    assert sorted(path.stem for path in summary.results_dir.iterdir()) == sorted(r.task.name for r in summary.results)
    assert echoed[0].startswith("[benchmark] resolved config sha256-")
    assert echoed[-1] == summary.finished_at


def test_missing_config_file_is_reported(tmp_path, capsys):
    assert benchmark.main(["plan", "--config", str(tmp_path / "nope.toml")]) == 1
    assert "error: invalid-configuration" in capsys.readouterr().err


@pytest.mark.parametrize("value", ["duration", "duration:x", "duration:-1"])
def test_bad_experiment_option_is_rejected(value, tmp_path):
    with pytest.raises(SystemExit):
        benchmark.main(["plan", "--config", str(tmp_path / "config.toml"), "--experiment", value])


def test_stream_with_path_separator_is_rejected_before_any_adapter_runs(make_settings, fake_adapter):
    settings = make_settings(streams=("sub/car",))
    adapter = fake_adapter()

    with pytest.raises(ConfigurationError, match="path separators"):
        run_campaign(settings, invoke=adapter, echo=lambda _: None, reclaim=lambda: None)

    assert adapter.calls == []
    assert "envelope" not in json.loads(log.append_event({"event": "after"}).read_text("utf-8").splitlines()[-1])


def test_unexpected_failure_still_releases_the_envelope(make_settings, tmp_path):
    def broken(framework, pipeline, experiment, stream_path):
        raise OSError("disk on fire")

    with pytest.raises(OSError):
        run_campaign(make_settings(), invoke=broken, echo=lambda _: None, reclaim=lambda: None)

    path = log.append_event({"event": "after"})
    assert "envelope" not in json.loads(path.read_text("utf-8").splitlines()[-1])
