from __future__ import annotations

import json
import shutil
from pathlib import Path

import pytest

from jobshop.benchmark import run_algorithm, run_benchmark
from jobshop.config import AlgoParams, build_run_config, load_config
from jobshop.greedy import PriorityRule
from jobshop.models import ExitCause

DATA_DIR = Path(__file__).resolve().parents[1] / "data"


def test_load_yaml_and_build(tmp_path: Path) -> None:
    cfg_file = tmp_path / "cfg.yaml"
    cfg_file.write_text(
        "instance: data/ft06\n"
        "solvers: [greedy, tabu]\n"
        "priority_rule: est_lrpt\n"
        "time_limit_ms: 500\n"
        "tabu:\n  iterations: 7\n  tenure: 3\n"
        "charts:\n  dir: out\n  gantt: false\n"
        "best_known:\n  ft06: 55\n"
    )
    cfg = build_run_config(load_config(str(cfg_file)))
    assert cfg.solvers == ["greedy", "tabu"]
    assert cfg.params.priority_rule is PriorityRule.EST_LRPT
    assert cfg.params.time_limit_ms == 500
    assert cfg.params.tabu_iterations == 7
    assert cfg.params.tabu_tenure == 3
    assert cfg.charts_dir == "out"
    assert cfg.gantt is False
    assert cfg.best_known == {"ft06": 55}


def test_load_json_defaults(tmp_path: Path) -> None:
    cfg_file = tmp_path / "cfg.json"
    cfg_file.write_text(json.dumps({"instance": "data/ft06"}))
    cfg = build_run_config(load_config(str(cfg_file)))
    assert cfg.solvers == ["greedy", "descent", "tabu"]
    assert cfg.params.priority_rule is PriorityRule.EST_SPT
    assert cfg.params.time_limit_ms is None
    assert cfg.params.tabu_iterations == 50
    assert cfg.params.tabu_tenure == 5


def test_config_errors(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "missing.yaml"))
    with pytest.raises(ValueError):
        build_run_config({})
    with pytest.raises(ValueError):
        build_run_config({"instance": "x", "solvers": ["annealing"]})
    with pytest.raises(ValueError):
        build_run_config({"instance": "x", "priority_rule": "FIFO"})


def test_run_algorithm_unknown(ft06) -> None:
    with pytest.raises(ValueError):
        run_algorithm("annealing", ft06, AlgoParams())


def test_run_benchmark_writes_summary(tmp_path: Path) -> None:
    inst_dir = tmp_path / "instances"
    inst_dir.mkdir()
    shutil.copy(DATA_DIR / "tiny2x2", inst_dir / "tiny2x2")
    cfg = build_run_config(
        {
            "instance": str(inst_dir),
            "solvers": ["greedy", "descent", "tabu"],
            "charts": {"dir": str(tmp_path / "out"), "gantt": True, "traces": True},
            "best_known": {"tiny2x2": 7},
        }
    )
    records = run_benchmark(cfg)
    assert [r.solver for r in records] == ["greedy", "descent", "tabu"]
    assert all(r.cmax == 7 for r in records)
    assert all(r.gap_percent() == 0.0 for r in records)
    assert records[2].exit_cause == ExitCause.BLOCKED.value

    summary = json.loads((tmp_path / "out" / "summary.json").read_text())
    assert len(summary["runs"]) == 3
    assert summary["params"]["tabu_tenure"] == 5
    assert summary["runs"][0]["order"] == [[[0, 0], [1, 1]], [[1, 0], [0, 1]]]
    assert list((tmp_path / "out").glob("gantt_*.png"))
    assert (tmp_path / "out" / "traces" / "trace_tabu_tiny2x2.txt").exists()
