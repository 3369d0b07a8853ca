import pytest

from jobshop.decoder import build_schedule_from_resource_order, check_schedule
from jobshop.greedy import PriorityRule, greedy_resource_order, greedy_solve
from jobshop.models import DataInstance, ExitCause, Task
from jobshop.operations import validate_resource_order


def test_est_spt_tiny_is_reproducible(tiny):
    first = greedy_solve(tiny, PriorityRule.EST_SPT)
    second = greedy_solve(tiny, PriorityRule.EST_SPT)
    assert first.order == second.order
    assert first.order.tasks_by_machine == [
        [Task(0, 0), Task(1, 1)],
        [Task(1, 0), Task(0, 1)],
    ]
    assert first.cmax == 7
    assert first.exit_cause is ExitCause.BLOCKED


@pytest.mark.parametrize("rule", list(PriorityRule))
def test_all_rules_give_valid_schedules(ft06, rule):
    order = greedy_resource_order(ft06, rule)
    validate_resource_order(ft06, order)
    sched = build_schedule_from_resource_order(ft06, order)
    assert sched is not None
    assert check_schedule(sched, order)
    assert sched.cmax >= 55  # known optimum of ft06


def test_spt_picks_shortest_first():
    inst = DataInstance(jobs=[[(0, 5)], [(0, 2)], [(0, 2)]], jobs_number=3, machines_number=1)
    order = greedy_resource_order(inst, PriorityRule.SPT)
    # ties keep ready-list order: job 1 before job 2
    assert order.tasks_by_machine[0] == [Task(1, 0), Task(2, 0), Task(0, 0)]


def test_lrpt_picks_longest_remaining_work():
    inst = DataInstance(
        jobs=[[(0, 1), (1, 1)], [(1, 2), (0, 5)]],
        jobs_number=2,
        machines_number=2,
    )
    order = greedy_resource_order(inst, PriorityRule.LRPT)
    # job1 remaining 7 > job0 remaining 2 -> job1 dispatched first, twice
    assert order.tasks_by_machine[1][0] == Task(1, 0)
    assert order.tasks_by_machine[0][0] == Task(1, 1)


def test_est_lrpt_breaks_est_tie_by_remaining_work():
    inst = DataInstance(
        jobs=[[(0, 1), (1, 1)], [(0, 1), (1, 9)]],
        jobs_number=2,
        machines_number=2,
    )
    order = greedy_resource_order(inst, PriorityRule.EST_LRPT)
    assert order.tasks_by_machine[0][0] == Task(1, 0)


def test_est_unique_minimum_beats_spt():
    inst = DataInstance(
        jobs=[[(0, 3), (1, 1)], [(1, 1), (0, 1)]],
        jobs_number=2,
        machines_number=2,
    )
    order = greedy_resource_order(inst, PriorityRule.EST_SPT)
    # round two: (0,0) can start at 0, (1,1) only at 1 although it is shorter
    assert order.tasks_by_machine[0] == [Task(0, 0), Task(1, 1)]
    assert order.tasks_by_machine[1] == [Task(1, 0), Task(0, 1)]


def test_unknown_rule_raises(tiny):
    with pytest.raises(ValueError):
        greedy_resource_order(tiny, "FIFO")


def test_rule_parse_accepts_names():
    assert PriorityRule.parse("est_spt") is PriorityRule.EST_SPT
    assert PriorityRule.parse("EST/LRPT") is PriorityRule.EST_LRPT
    assert PriorityRule.parse(PriorityRule.SPT) is PriorityRule.SPT
