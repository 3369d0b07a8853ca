"""Run configuration: YAML/JSON loading and the hyper-parameter bundle."""
from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import yaml

from jobshop.greedy import PriorityRule
from jobshop.search import TABU_ITERATIONS, TABU_TENURE

SOLVER_NAMES = ("greedy", "descent", "tabu")


@dataclass(slots=True)
class AlgoParams:
    """Bundle of all configurable hyper-parameters for the three solvers.

    Keeping them in a single dataclass simplifies passing configuration to
    the benchmark driver and makes it easy to log an experiment setup.
    """
    priority_rule: PriorityRule = PriorityRule.EST_SPT
    time_limit_ms: Optional[int] = None
    tabu_iterations: int = TABU_ITERATIONS
    tabu_tenure: int = TABU_TENURE


@dataclass
class RunConfig:
    instance: str
    solvers: list[str]
    params: AlgoParams
    log_level: str = "INFO"
    charts_dir: str = "charts"
    gantt: bool = True
    traces: bool = False
    best_known: Dict[str, int] = field(default_factory=dict)


def load_config(config_file: str = "config.yaml") -> dict:
    """Load a configuration mapping from a YAML or JSON file."""
    if not os.path.isfile(config_file):
        raise FileNotFoundError(f"Config file not found: {config_file}")
    with open(config_file, "r", encoding="utf-8") as f:
        text = f.read()
    if config_file.endswith((".yml", ".yaml")):
        cfg = yaml.safe_load(text) or {}
    else:
        cfg = json.loads(text)
    if not isinstance(cfg, dict):
        raise ValueError(f"Config root must be a mapping: {config_file}")
    return cfg


def _section(cfg: Dict[str, Any], name: str) -> Dict[str, Any]:
    value = cfg.get(name, {})
    return value if isinstance(value, dict) else {}


def build_run_config(cfg: Dict[str, Any]) -> RunConfig:
    """Turn a raw mapping into a checked ``RunConfig``.

    Raises:
        ValueError: If ``instance`` is missing or a solver name is unknown.
    """
    instance = cfg.get("instance")
    if not instance:
        raise ValueError("Missing 'instance' key in config")
    solvers = cfg.get("solvers") or list(SOLVER_NAMES)
    if isinstance(solvers, str):
        solvers = [solvers]
    unknown = [s for s in solvers if s not in SOLVER_NAMES]
    if unknown:
        raise ValueError(f"Unknown solver(s): {unknown} (expected {list(SOLVER_NAMES)})")

    tabu_cfg = _section(cfg, "tabu")
    charts_cfg = _section(cfg, "charts")
    time_limit_ms = cfg.get("time_limit_ms")
    params = AlgoParams(
        priority_rule=PriorityRule.parse(cfg.get("priority_rule", "EST_SPT")),
        time_limit_ms=int(time_limit_ms) if time_limit_ms is not None else None,
        tabu_iterations=int(tabu_cfg.get("iterations", TABU_ITERATIONS)),
        tabu_tenure=int(tabu_cfg.get("tenure", TABU_TENURE)),
    )
    best_known = {str(k): int(v) for k, v in (cfg.get("best_known") or {}).items()}
    return RunConfig(
        instance=str(instance),
        solvers=list(solvers),
        params=params,
        log_level=str(cfg.get("log_level", "INFO")),
        charts_dir=charts_cfg.get("dir", "charts"),
        gantt=bool(charts_cfg.get("gantt", True)),
        traces=bool(charts_cfg.get("traces", False)),
        best_known=best_known,
    )
