"""Greedy constructor: list scheduling with a priority dispatch rule.

Ready operations are the next unscheduled step of every job. They are kept
in insertion order (jobs 0..J-1 first, then each successor appended when its
predecessor is placed) and every rule resolves ties by taking the earliest
entry of that list, so runs are reproducible.
"""

from __future__ import annotations

import logging
import time
from enum import Enum

from jobshop.decoder import build_schedule_from_resource_order
from jobshop.encoding import ResourceOrder
from jobshop.models import DataInstance, ExitCause, Result, Task

logger = logging.getLogger("jobshop.greedy")


class PriorityRule(Enum):
    SPT = "SPT"  # shortest duration
    LRPT = "LRPT"  # longest remaining work of the job
    EST_SPT = "EST_SPT"
    EST_LRPT = "EST_LRPT"

    @classmethod
    def parse(cls, name: "str | PriorityRule") -> "PriorityRule":
        if isinstance(name, cls):
            return name
        try:
            return cls[str(name).upper().replace("-", "_").replace("/", "_")]
        except KeyError:
            raise ValueError(
                f"Unknown priority rule: {name} (expected one of {[r.name for r in cls]})"
            ) from None


def choose_spt(ready: list[Task], instance: DataInstance) -> Task:
    return min(ready, key=instance.duration)


def choose_lrpt(ready: list[Task], instance: DataInstance) -> Task:
    # max() keeps the first maximal element
    return max(ready, key=instance.remaining_work)


class _EstState:
    """Incremental start-time bookkeeping for the EST rules."""

    def __init__(self, instance: DataInstance):
        self.instance = instance
        self.job_ready = [0] * instance.jobs_number
        self.machine_release = [0] * instance.machines_number

    def earliest_start(self, task: Task) -> int:
        return max(self.job_ready[task.job], self.machine_release[self.instance.machine(task)])

    def commit(self, task: Task) -> None:
        end = self.earliest_start(task) + self.instance.duration(task)
        self.job_ready[task.job] = end
        self.machine_release[self.instance.machine(task)] = end


def choose_est(ready: list[Task], state: _EstState, tie_break) -> Task:
    """Restrict ``ready`` to the minimal earliest start, then apply ``tie_break``."""
    best = min(state.earliest_start(t) for t in ready)
    earliest = [t for t in ready if state.earliest_start(t) == best]
    if len(earliest) == 1:
        return earliest[0]
    return tie_break(earliest, state.instance)


def greedy_resource_order(instance: DataInstance, rule: "PriorityRule | str") -> ResourceOrder:
    """Build a resource order by repeatedly dispatching one ready operation.

    Args:
        instance: Problem data.
        rule: Priority rule (enum member or its name).

    Returns:
        A complete, always decodable ResourceOrder.

    Raises:
        ValueError: If ``rule`` is not a known priority rule.
    """
    rule = PriorityRule.parse(rule)
    order = ResourceOrder(instance)
    state = _EstState(instance)
    steps = instance.steps_per_job
    ready = [Task(j, 0) for j in range(instance.jobs_number)] if steps > 0 else []

    while ready:
        if rule is PriorityRule.SPT:
            chosen = choose_spt(ready, instance)
        elif rule is PriorityRule.LRPT:
            chosen = choose_lrpt(ready, instance)
        elif rule is PriorityRule.EST_SPT:
            chosen = choose_est(ready, state, choose_spt)
        else:
            chosen = choose_est(ready, state, choose_lrpt)
        state.commit(chosen)
        order.tasks_by_machine[instance.machine(chosen)].append(chosen)
        ready.remove(chosen)
        if chosen.step + 1 < steps:
            ready.append(Task(chosen.job, chosen.step + 1))
    return order


def greedy_solve(instance: DataInstance, rule: "PriorityRule | str" = PriorityRule.EST_SPT) -> Result:
    """Run the greedy constructor and decode its order."""
    rule = PriorityRule.parse(rule)
    t0 = time.perf_counter()
    order = greedy_resource_order(instance, rule)
    schedule = build_schedule_from_resource_order(instance, order)
    if schedule is None:  # pragma: no cover - dispatch orders are acyclic
        raise RuntimeError("greedy order failed to decode")
    elapsed_ms = int((time.perf_counter() - t0) * 1000)
    logger.info("[greedy] rule=%s cmax=%d time=%dms", rule.name, schedule.cmax, elapsed_ms)
    return Result(
        instance=instance,
        order=order,
        schedule=schedule,
        exit_cause=ExitCause.BLOCKED,
        cmax_history=[schedule.cmax],
        elapsed_ms=elapsed_ms,
    )
