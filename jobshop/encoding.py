"""Resource-order encoding of a JSSP solution.

Concepts
--------
ResourceOrder
    For every machine, the ordered list of ``Task`` identifiers that the
    machine processes. It carries no timing at all: job precedence is only
    enforced when the order is decoded (see ``jobshop.decoder``). Because a
    machine order can contradict job precedence, not every ResourceOrder
    decodes to a schedule.

Return semantics:
    ``copy`` and ``swapped`` always return a new object so search loops can
    evaluate candidates without touching their incumbent.
"""

from __future__ import annotations

from jobshop.models import DataInstance, Schedule, Task


class ResourceOrder:
    """Per-machine operation order.

    Attributes:
        instance: Problem the order belongs to.
        tasks_by_machine: tasks_by_machine[m] -> tasks in processing order.
    """

    __slots__ = ("instance", "tasks_by_machine")

    def __init__(self, instance: DataInstance, tasks_by_machine: list[list[Task]] | None = None):
        self.instance = instance
        if tasks_by_machine is None:
            tasks_by_machine = [[] for _ in range(instance.machines_number)]
        self.tasks_by_machine = [list(seq) for seq in tasks_by_machine]

    @classmethod
    def from_schedule(cls, schedule: Schedule) -> "ResourceOrder":
        """Rebuild the machine orders implied by a schedule's start times.

        Operations of each machine are sorted by start time, ties by job.
        """
        instance = schedule.instance
        order = cls(instance)
        for task in schedule.tasks():
            order.tasks_by_machine[instance.machine(task)].append(task)
        for seq in order.tasks_by_machine:
            seq.sort(key=lambda t: (schedule.start_time(t), t.job))
        return order

    def copy(self) -> "ResourceOrder":
        return ResourceOrder(self.instance, self.tasks_by_machine)

    def swapped(self, machine: int, a: int, b: int) -> "ResourceOrder":
        """Return a copy with positions ``a`` and ``b`` of ``machine`` exchanged.

        Raises:
            IndexError: If a position is outside the machine's sequence.
        """
        seq = self.tasks_by_machine[machine]
        if not (0 <= a < len(seq) and 0 <= b < len(seq)):
            raise IndexError(f"swap ({a}, {b}) out of range on machine {machine}")
        new = self.copy()
        new_seq = new.tasks_by_machine[machine]
        new_seq[a], new_seq[b] = new_seq[b], new_seq[a]
        return new

    def position(self, task: Task) -> int:
        """Index of ``task`` inside its machine's sequence."""
        return self.tasks_by_machine[self.instance.machine(task)].index(task)

    def positions(self) -> dict[Task, int]:
        return {t: i for seq in self.tasks_by_machine for i, t in enumerate(seq)}

    def key(self) -> tuple[tuple[Task, ...], ...]:
        return tuple(tuple(seq) for seq in self.tasks_by_machine)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ResourceOrder):
            return NotImplemented
        return self.instance is other.instance and self.key() == other.key()

    def __hash__(self) -> int:
        return hash(self.key())

    def __repr__(self) -> str:
        lines = [
            f"M{m}: " + " ".join(f"({t.job},{t.step})" for t in seq)
            for m, seq in enumerate(self.tasks_by_machine)
        ]
        return "ResourceOrder(\n  " + "\n  ".join(lines) + "\n)"
