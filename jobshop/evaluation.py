"""Evaluation of resource orders (cmax with optional schedule) plus a simple cache.

Kept apart from search.py so neighborhood code can evaluate moves without
importing the search loops.
"""

from __future__ import annotations

from typing import Optional, Union

from .decoder import build_schedule_from_resource_order
from .encoding import ResourceOrder
from .models import DataInstance, Schedule

CacheType = dict[tuple, Optional[Schedule]]


def evaluate(
    data: DataInstance,
    order: ResourceOrder,
    cache: CacheType | None = None,
    return_schedule: bool = False,
) -> Union[Optional[int], tuple[Optional[int], Optional[Schedule]]]:
    """Decode ``order`` and return its cmax (None when the order is cyclic).

    With ``return_schedule`` the pair ``(cmax, schedule)`` is returned. The
    cache maps the order's key to its schedule, including the None outcome
    of infeasible orders.
    """
    key = order.key()
    if cache is not None and key in cache:
        sched = cache[key]
    else:
        sched = build_schedule_from_resource_order(data, order)
        if cache is not None:
            cache[key] = sched
    cmax = sched.cmax if sched is not None else None
    if return_schedule:
        return cmax, sched
    return cmax
