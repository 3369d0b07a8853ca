"""Critical-path blocks and the Nowicki-Smutnicki swap neighborhood.

Design choices
--------------
Block
    A maximal run of at least two consecutive critical-path operations on
    the same machine, stored as positions in that machine's sequence.

Restricted neighborhood:
    Only the first pair and the last pair of a block are swapped (one swap
    for a block of two). Interior swaps cannot shorten the current critical
    path, so they are never generated.

Return semantics:
    ``Swap.apply_on`` returns a new order; the input is never mutated. The
    result may be cyclic, so callers decode it and drop infeasible ones.
"""

from __future__ import annotations

from dataclasses import dataclass
from itertools import groupby

from .decoder import build_schedule_from_resource_order, critical_path
from .encoding import ResourceOrder
from .models import Task


@dataclass(frozen=True)
class Block:
    """Positions ``first..last`` (inclusive) of ``machine``'s sequence."""

    machine: int
    first: int
    last: int

    def __len__(self) -> int:
        return self.last - self.first + 1


@dataclass(frozen=True)
class Swap:
    """Exchange of positions ``t1`` and ``t2`` on ``machine``."""

    machine: int
    t1: int
    t2: int

    def apply_on(self, order: ResourceOrder) -> ResourceOrder:
        return order.swapped(self.machine, self.t1, self.t2)

    def tasks(self, order: ResourceOrder) -> tuple[Task, Task]:
        """Tasks currently sitting at the two swapped positions."""
        seq = order.tasks_by_machine[self.machine]
        return seq[self.t1], seq[self.t2]


def blocks_of_path(order: ResourceOrder, path: list[Task]) -> list[Block]:
    """Split ``path`` into same-machine runs and keep those of length >= 2."""
    instance = order.instance
    positions = order.positions()
    blocks: list[Block] = []
    for machine, run in groupby(path, key=instance.machine):
        run = list(run)
        if len(run) >= 2:
            blocks.append(Block(machine, positions[run[0]], positions[run[-1]]))
    return blocks


def blocks_of_critical_path(order: ResourceOrder) -> list[Block]:
    """Decode ``order`` and return the blocks of its critical path.

    Returns an empty list for an order that does not decode.
    """
    schedule = build_schedule_from_resource_order(order.instance, order)
    if schedule is None:
        return []
    return blocks_of_path(order, critical_path(schedule, order))


def neighbors(block: Block) -> list[Swap]:
    """Swaps of the restricted neighborhood for one block."""
    if block.last == block.first + 1:
        return [Swap(block.machine, block.first, block.last)]
    return [
        Swap(block.machine, block.first, block.first + 1),
        Swap(block.machine, block.last - 1, block.last),
    ]


def generate_neighbors(order: ResourceOrder) -> list[Swap]:
    """All swaps of all blocks, in block order."""
    return [swap for block in blocks_of_critical_path(order) for swap in neighbors(block)]
