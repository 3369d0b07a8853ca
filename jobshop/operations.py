"""ResourceOrder utilities: creation and validation of encodings.

Concepts
--------
Well-formed encoding
    Every operation of the instance appears exactly once, inside the
    sequence of the machine it runs on. Well-formedness says nothing about
    feasibility: a well-formed order may still be cyclic and fail to decode.
"""

import random
from typing import Optional

from jobshop.encoding import ResourceOrder
from jobshop.models import DataInstance, Task


def validate_resource_order(instance: DataInstance, order: ResourceOrder) -> bool:
    """Validate that ``order`` places every operation exactly once.

    Args:
        instance: Problem instance.
        order: Candidate encoding.

    Returns:
        True if the encoding is well formed (so it can be used inside
        assertions / conditional flows).

    Raises:
        ValueError: If the machine count is wrong, a task is unknown, sits on
            the wrong machine, is duplicated, or some task is missing.
    """
    if len(order.tasks_by_machine) != instance.machines_number:
        raise ValueError(
            f"Expected {instance.machines_number} machine sequences, "
            f"got {len(order.tasks_by_machine)}"
        )
    seen: set[Task] = set()
    for machine, seq in enumerate(order.tasks_by_machine):
        for task in seq:
            job, step = task
            if not (0 <= job < instance.jobs_number and 0 <= step < instance.steps_per_job):
                raise ValueError(f"Unknown task: {task}")
            if instance.machine(task) != machine:
                raise ValueError(f"Task {task} placed on machine {machine}")
            if task in seen:
                raise ValueError(f"Duplicate task: {task}")
            seen.add(task)
    if len(seen) != instance.operations_number:
        raise ValueError(
            f"Incomplete resource order: {len(seen)}/{instance.operations_number} operations"
        )
    return True


def create_random_resource_order(
    instance: DataInstance,
    *,
    rng: Optional[random.Random] = None,
) -> ResourceOrder:
    """Generate a random feasible encoding.

    At each step uniformly chooses among jobs with remaining operations and
    appends that job's next operation to its machine, so the result always
    decodes.

    Args:
        instance: Problem data.
        rng: Optional random.Random instance (for reproducibility). If
            None uses module-level random.
    """
    if rng is None:
        rng = random
    next_step = [0] * instance.jobs_number
    eligible = [j for j in range(instance.jobs_number) if instance.steps_per_job > 0]
    order = ResourceOrder(instance)
    while eligible:
        job = rng.choice(eligible)
        task = Task(job, next_step[job])
        order.tasks_by_machine[instance.machine(task)].append(task)
        next_step[job] += 1
        if next_step[job] == instance.steps_per_job:
            eligible.remove(job)
    return order
