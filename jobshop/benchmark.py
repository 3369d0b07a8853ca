"""Benchmark driver: every configured solver on every configured instance.

One ``RunRecord`` per (instance, solver) pair is logged as a table line and
persisted in ``summary.json`` under the output directory, together with the
best resource order found. Gantt charts and a convergence plot per instance
are optional.
"""
from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Optional

from jobshop.config import AlgoParams, RunConfig
from jobshop.greedy import greedy_solve
from jobshop.models import DataInstance, Result
from jobshop.parser import list_instance_files, load_instance
from jobshop.search import descent_search, tabu_search
from jobshop.visualization import next_unique_path, plot_gantt, plot_iteration_progress_multi

logger = logging.getLogger("jobshop.benchmark")


def run_algorithm(
    name: str,
    instance: DataInstance,
    params: AlgoParams,
    trace_file: Optional[str] = None,
) -> Result:
    """Execute one solver and return its result.

    Raises:
        ValueError: If an unknown solver name is provided.
    """
    if name == "greedy":
        return greedy_solve(instance, params.priority_rule)
    if name == "descent":
        return descent_search(
            instance,
            time_limit_ms=params.time_limit_ms,
            trace_file=trace_file,
        )
    if name == "tabu":
        return tabu_search(
            instance,
            iterations=params.tabu_iterations,
            tenure=params.tabu_tenure,
            time_limit_ms=params.time_limit_ms,
            trace_file=trace_file,
        )
    raise ValueError(f"Unknown solver: {name}")


@dataclass
class RunRecord:
    instance: str
    solver: str
    jobs: int
    machines: int
    cmax: int
    best_known: Optional[int]
    exit_cause: str
    iterations: int
    elapsed_ms: Optional[int]
    cmax_history: list[int]
    order: list[list[list[int]]]

    def gap_percent(self) -> Optional[float]:
        if not self.best_known:
            return None
        return (self.cmax - self.best_known) / self.best_known * 100.0

    def to_dict(self) -> dict:
        d = asdict(self)
        d["gap_percent"] = self.gap_percent()
        return d


def _record(instance_name: str, solver: str, result: Result, best_known: Optional[int]) -> RunRecord:
    inst = result.instance
    return RunRecord(
        instance=instance_name,
        solver=solver,
        jobs=inst.jobs_number,
        machines=inst.machines_number,
        cmax=result.cmax,
        best_known=best_known,
        exit_cause=result.exit_cause.value,
        iterations=result.iterations,
        elapsed_ms=result.elapsed_ms,
        cmax_history=list(result.cmax_history),
        order=[[[t.job, t.step] for t in seq] for seq in result.order.tasks_by_machine],
    )


def run_benchmark(cfg: RunConfig, out_dir: Optional[str] = None) -> list[RunRecord]:
    """Run the configured solvers and write ``summary.json``.

    Args:
        cfg: Parsed run configuration.
        out_dir: Output directory; defaults to ``cfg.charts_dir``.

    Returns:
        One record per (instance, solver) pair, in execution order.
    """
    out_dir = out_dir or cfg.charts_dir
    os.makedirs(out_dir, exist_ok=True)
    trace_dir = os.path.join(out_dir, "traces") if cfg.traces else None
    if trace_dir:
        os.makedirs(trace_dir, exist_ok=True)

    records: list[RunRecord] = []
    for path in list_instance_files(cfg.instance):
        instance = load_instance(path)
        name = os.path.splitext(os.path.basename(path))[0]
        logger.info(
            "Instance: %s jobs=%d machines=%d ops=%d",
            path,
            instance.jobs_number,
            instance.machines_number,
            instance.operations_number,
        )
        best_known = cfg.best_known.get(name)
        histories: dict[str, list[int]] = {}
        for solver in cfg.solvers:
            trace_file = (
                os.path.join(trace_dir, f"trace_{solver}_{name}.txt")
                if trace_dir and solver != "greedy"
                else None
            )
            result = run_algorithm(solver, instance, cfg.params, trace_file=trace_file)
            record = _record(name, solver, result, best_known)
            records.append(record)
            histories[solver] = record.cmax_history
            gap = record.gap_percent()
            logger.info(
                "%-12s %-8s cmax=%-6d best_known=%-6s gap=%-7s time=%dms exit=%s",
                name,
                solver,
                record.cmax,
                best_known if best_known is not None else "-",
                f"{gap:.2f}%" if gap is not None else "-",
                record.elapsed_ms or 0,
                record.exit_cause,
            )
            if cfg.gantt:
                plot_gantt(
                    result.schedule,
                    save_path=next_unique_path(
                        os.path.join(out_dir, f"gantt_{solver}_{name}_c{record.cmax}.png")
                    ),
                    algo_name=solver,
                )
        if cfg.gantt and any(len(h) > 1 for h in histories.values()):
            plot_iteration_progress_multi(
                histories,
                save_path=next_unique_path(os.path.join(out_dir, f"progress_{name}.png")),
            )

    summary_path = os.path.join(out_dir, "summary.json")
    payload = {
        "timestamp": datetime.now().strftime("%Y%m%d_%H%M%S"),
        "params": {
            "priority_rule": cfg.params.priority_rule.name,
            "time_limit_ms": cfg.params.time_limit_ms,
            "tabu_iterations": cfg.params.tabu_iterations,
            "tabu_tenure": cfg.params.tabu_tenure,
        },
        "runs": [r.to_dict() for r in records],
    }
    with open(summary_path, "w", encoding="utf-8") as f:
        json.dump(payload, f, ensure_ascii=False, indent=2)
    logger.info("Saved summary to %s", summary_path)
    return records
