"""Local search over the critical-path block neighborhood.

Contains:
- Descent (steepest descent, stops at a local optimum)
- Tabu Search (accepts non-improving moves, forbids reversing recent swaps)

Both loops evaluate every candidate on its own copy of the current order,
so a rejected or cyclic candidate never affects the incumbent.
"""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Iterator, Optional, TextIO

from jobshop.decoder import build_schedule_from_resource_order, check_schedule
from jobshop.encoding import ResourceOrder
from jobshop.evaluation import CacheType, evaluate
from jobshop.greedy import PriorityRule, greedy_solve
from jobshop.models import DataInstance, ExitCause, Result, Schedule, Task
from jobshop.neighborhood import Swap, generate_neighbors
from jobshop.operations import validate_resource_order

logger = logging.getLogger("jobshop.search")

TABU_TENURE = 5
TABU_ITERATIONS = 50


@dataclass
class SearchState:
    """State owned by one search run."""

    current: ResourceOrder
    current_cmax: int
    best: ResourceOrder
    best_cmax: int
    cmax_history: list[int] = field(default_factory=list)
    start_time: float = 0.0
    iteration: int = 0
    evals: int = 0

    def update_best(self) -> bool:
        """Update best solution. Returns True if improved."""
        if self.current_cmax < self.best_cmax:
            self.best_cmax = self.current_cmax
            self.best = self.current
            return True
        return False

    def elapsed_ms(self) -> int:
        return int((time.perf_counter() - self.start_time) * 1000)

    def time_up(self, time_limit_ms: Optional[int]) -> bool:
        return time_limit_ms is not None and self.elapsed_ms() >= time_limit_ms


class TabuList:
    """Expiry iteration of forbidden ordered task pairs.

    ``is_tabu(a, b, it)`` is True while swapping ``a`` (first position) with
    ``b`` (second position) stays forbidden at iteration ``it``.
    """

    def __init__(self, tenure: int = TABU_TENURE):
        self.tenure = tenure
        self.expiry: dict[tuple[Task, Task], int] = {}

    def is_tabu(self, t1: Task, t2: Task, iteration: int) -> bool:
        return self.expiry.get((t1, t2), 0) > iteration

    def forbid_reverse(self, t1: Task, t2: Task, iteration: int) -> None:
        self.expiry[(t2, t1)] = iteration + self.tenure


def initial_state(
    instance: DataInstance,
    start_order: Optional[ResourceOrder] = None,
) -> SearchState:
    """Build the starting state (greedy EST_SPT unless an order is given).

    Raises:
        ValueError: If ``start_order`` is malformed or does not decode.
    """
    if start_order is None:
        greedy = greedy_solve(instance, PriorityRule.EST_SPT)
        order = ResourceOrder.from_schedule(greedy.schedule)
        schedule: Optional[Schedule] = greedy.schedule
    else:
        validate_resource_order(instance, start_order)
        order = start_order.copy()
        schedule = build_schedule_from_resource_order(instance, order)
        if schedule is None:
            raise ValueError("start order is cyclic and cannot be decoded")
    cmax = schedule.cmax
    return SearchState(
        current=order,
        current_cmax=cmax,
        best=order,
        best_cmax=cmax,
        cmax_history=[cmax],
        start_time=time.perf_counter(),
    )


@contextmanager
def open_trace_file(path: str | None, header: str) -> Iterator[Optional[TextIO]]:
    """Open an iteration trace (semicolon separated) or yield None."""
    if not path:
        yield None
        return
    with open(path, "w", encoding="utf-8") as tf:
        tf.write(header + "\n")
        yield tf


def _evaluate_swap(
    instance: DataInstance,
    state: SearchState,
    swap: Swap,
    cache: Optional[CacheType],
) -> tuple[ResourceOrder, Optional[int]]:
    """Apply ``swap`` to a copy of the current order; cmax is None if infeasible."""
    candidate = swap.apply_on(state.current)
    c, sched = evaluate(instance, candidate, cache=cache, return_schedule=True)
    state.evals += 1
    if sched is None or not check_schedule(sched, candidate):
        return candidate, None
    return candidate, c


def _finish(
    instance: DataInstance,
    state: SearchState,
    exit_cause: ExitCause,
    algo: str,
) -> Result:
    schedule = build_schedule_from_resource_order(instance, state.best)
    logger.info(
        "[%s] stop %s iter=%d best=%d evals=%d time=%dms",
        algo,
        exit_cause.value,
        state.iteration,
        state.best_cmax,
        state.evals,
        state.elapsed_ms(),
    )
    return Result(
        instance=instance,
        order=state.best,
        schedule=schedule,
        exit_cause=exit_cause,
        iterations=state.iteration,
        cmax_history=state.cmax_history,
        elapsed_ms=state.elapsed_ms(),
    )


def descent_search(
    instance: DataInstance,
    start_order: Optional[ResourceOrder] = None,
    time_limit_ms: Optional[int] = None,
    trace_file: str | None = None,
    cache: Optional[CacheType] = None,
) -> Result:
    """Steepest descent over the block neighborhood.

    Every iteration scans all swaps of all blocks and moves to the single best
    strictly improving feasible candidate (first one found among equals).
    Stops when no such candidate exists.

    Args:
        instance: Problem data.
        start_order: Optional feasible start; greedy EST_SPT by default.
        time_limit_ms: Optional wall-clock budget, checked once per iteration.
        trace_file: Optional path of a per-iteration trace.
        cache: Optional evaluation cache shared across calls.

    Returns:
        Result with exit cause BLOCKED (local optimum) or TIMEOUT.
    """
    state = initial_state(instance, start_order)
    exit_cause = ExitCause.BLOCKED
    with open_trace_file(trace_file, "iter;current;best;move;evals") as tf:
        while True:
            if state.time_up(time_limit_ms):
                exit_cause = ExitCause.TIMEOUT
                break
            best_candidate: Optional[ResourceOrder] = None
            best_move: Optional[Swap] = None
            best_c = state.current_cmax
            for swap in generate_neighbors(state.current):
                candidate, c = _evaluate_swap(instance, state, swap, cache)
                if c is not None and c < best_c:
                    best_candidate, best_move, best_c = candidate, swap, c
            if best_candidate is None:
                break
            state.iteration += 1
            state.current = best_candidate
            state.current_cmax = best_c
            state.update_best()
            state.cmax_history.append(best_c)
            logger.debug(
                "[descent] iter %d current=%d move=%s evals=%d",
                state.iteration,
                best_c,
                best_move,
                state.evals,
            )
            if tf is not None:
                tf.write(
                    f"{state.iteration};{state.current_cmax};{state.best_cmax};"
                    f"{best_move};{state.evals}\n"
                )
    return _finish(instance, state, exit_cause, "descent")


def tabu_search(
    instance: DataInstance,
    start_order: Optional[ResourceOrder] = None,
    iterations: int = TABU_ITERATIONS,
    tenure: int = TABU_TENURE,
    time_limit_ms: Optional[int] = None,
    trace_file: str | None = None,
    cache: Optional[CacheType] = None,
) -> Result:
    """Tabu Search core loop.

    Notes:
        - Neighborhood: first/last pair swaps of every critical-path block.
        - Tabu status is decided before a swap is applied; tabu swaps are still
          evaluated so they can be used as a fallback.
        - Non-tabu choice: the first feasible non-tabu candidate sets the bar,
          later ones replace it when their cmax is lower or equal.
        - Tabu choice: strictly better than the current cmax (aspiration).
        - A non-tabu move is taken whenever one exists, even if it is worse.
        - After a move on tasks (a, b) the reverse swap (b, a) is forbidden
          for ``tenure`` iterations.

    Args:
        iterations: Max main iterations.
        tenure: Number of iterations a reverse swap stays forbidden.
        time_limit_ms: Optional wall-clock limit (milliseconds).
        trace_file: Optional trace file (one line per iteration).

    Returns:
        Result holding the best order seen during the run, with exit cause
        MAX_ITERATIONS, BLOCKED (no feasible move at all) or TIMEOUT.
    """
    state = initial_state(instance, start_order)
    tabu = TabuList(tenure)
    exit_cause = ExitCause.MAX_ITERATIONS
    with open_trace_file(trace_file, "iter;current;best;move;evals;kind") as tf:
        for it in range(1, iterations + 1):
            if state.time_up(time_limit_ms):
                exit_cause = ExitCause.TIMEOUT
                break
            free_move: Optional[tuple[ResourceOrder, int, tuple[Task, Task]]] = None
            tabu_move: Optional[tuple[ResourceOrder, int, tuple[Task, Task]]] = None
            tabu_bar = state.current_cmax

            for swap in generate_neighbors(state.current):
                t1, t2 = swap.tasks(state.current)
                is_tabu = tabu.is_tabu(t1, t2, it)
                candidate, c = _evaluate_swap(instance, state, swap, cache)
                if c is None:
                    continue
                if is_tabu:
                    if c < tabu_bar:
                        tabu_move = (candidate, c, (t1, t2))
                        tabu_bar = c
                elif free_move is None or c <= free_move[1]:
                    free_move = (candidate, c, (t1, t2))

            if free_move is not None:
                chosen, kind = free_move, "free"
            elif tabu_move is not None:
                chosen, kind = tabu_move, "aspiration"
            else:
                exit_cause = ExitCause.BLOCKED
                break

            state.iteration = it
            state.current, state.current_cmax, (t1, t2) = chosen
            tabu.forbid_reverse(t1, t2, it)
            improved = state.update_best()
            state.cmax_history.append(state.current_cmax)
            logger.debug(
                "[tabu] iter %d/%d current=%d best=%d move=%s/%s %s%s",
                it,
                iterations,
                state.current_cmax,
                state.best_cmax,
                t1,
                t2,
                kind,
                " improved" if improved else "",
            )
            if tf is not None:
                tf.write(
                    f"{it};{state.current_cmax};{state.best_cmax};"
                    f"{t1}-{t2};{state.evals};{kind}\n"
                )
    return _finish(instance, state, exit_cause, "tabu")
