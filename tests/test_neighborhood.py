import random

import pytest

from jobshop.decoder import build_schedule_from_resource_order, critical_path
from jobshop.encoding import ResourceOrder
from jobshop.greedy import PriorityRule, greedy_resource_order
from jobshop.models import DataInstance, Task
from jobshop.neighborhood import (
    Block,
    Swap,
    blocks_of_critical_path,
    blocks_of_path,
    generate_neighbors,
    neighbors,
)
from jobshop.operations import create_random_resource_order, validate_resource_order


def test_neighbors_of_two_task_block():
    swaps = neighbors(Block(machine=1, first=2, last=3))
    assert swaps == [Swap(1, 2, 3)]


@pytest.mark.parametrize("first,last", [(0, 2), (1, 4), (3, 9)])
def test_neighbors_of_long_block_are_extremities(first, last):
    swaps = neighbors(Block(machine=0, first=first, last=last))
    assert swaps == [Swap(0, first, first + 1), Swap(0, last - 1, last)]
    for s in swaps:
        assert first <= s.t1 <= last and first <= s.t2 <= last


def test_blocks_of_tiny_greedy(tiny):
    order = greedy_resource_order(tiny, PriorityRule.EST_SPT)
    assert blocks_of_critical_path(order) == [Block(machine=0, first=0, last=1)]


def test_no_blocks_when_path_never_repeats_machine():
    inst = DataInstance(jobs=[[(0, 2), (1, 3)]], jobs_number=1, machines_number=2)
    order = ResourceOrder(inst, [[Task(0, 0)], [Task(0, 1)]])
    assert blocks_of_critical_path(order) == []
    assert generate_neighbors(order) == []


def test_blocks_follow_machine_positions(ft06):
    rng = random.Random(5)
    for _ in range(10):
        order = create_random_resource_order(ft06, rng=rng)
        path = critical_path(build_schedule_from_resource_order(ft06, order))
        for block in blocks_of_path(order, path):
            assert len(block) >= 2
            seq = order.tasks_by_machine[block.machine]
            run = seq[block.first : block.last + 1]
            # the whole run lies on the critical path, consecutively
            start = path.index(run[0])
            assert path[start : start + len(run)] == run


def test_swap_returns_copy_and_is_involution(ft06):
    order = greedy_resource_order(ft06, PriorityRule.EST_SPT)
    snapshot = order.copy()
    swap = Swap(machine=2, t1=1, t2=4)
    moved = swap.apply_on(order)
    assert order == snapshot
    assert moved != order
    validate_resource_order(ft06, moved)
    assert swap.apply_on(moved) == order


def test_swap_tasks_reports_positions(tiny):
    order = greedy_resource_order(tiny, PriorityRule.EST_SPT)
    assert Swap(0, 0, 1).tasks(order) == (Task(0, 0), Task(1, 1))


def test_swap_out_of_range(tiny):
    order = greedy_resource_order(tiny, PriorityRule.EST_SPT)
    with pytest.raises(IndexError):
        Swap(0, 0, 5).apply_on(order)
