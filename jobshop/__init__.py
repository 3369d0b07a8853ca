"""Job Shop Scheduling heuristics.

Exports the problem/solution data structures and the three solvers.
"""

from jobshop.encoding import ResourceOrder  # noqa: F401
from jobshop.greedy import PriorityRule, greedy_solve  # noqa: F401
from jobshop.models import DataInstance, ExitCause, Result, Schedule, Task  # noqa: F401
from jobshop.parser import load_instance, parse_jsplib_data  # noqa: F401
from jobshop.search import descent_search, tabu_search  # noqa: F401

__all__ = [
    "DataInstance",
    "ExitCause",
    "PriorityRule",
    "ResourceOrder",
    "Result",
    "Schedule",
    "Task",
    "descent_search",
    "greedy_solve",
    "load_instance",
    "parse_jsplib_data",
    "tabu_search",
]
