"""Decoding of resource orders into schedules and critical-path extraction.

Concepts
--------
Semi-active schedule
    Every operation starts at ``max(job predecessor end, machine predecessor
    end)``; nothing can be shifted left without changing a machine order.

Critical path
    A chain of operations with no idle time between consecutive members,
    running from time 0 to the makespan. Consecutive members are linked
    either by job precedence or by adjacency in the machine order.

Return semantics:
    ``build_schedule_from_resource_order`` returns None for an order that
    contradicts job precedence (a cycle); it never raises for that case.
"""

from typing import Optional

from .encoding import ResourceOrder
from .models import DataInstance, Schedule, Task


def build_schedule_from_resource_order(
    data_instance: DataInstance,
    order: ResourceOrder,
) -> Optional[Schedule]:
    """Decode a resource order into a semi-active schedule.

    Machine release times and job progress pointers are simulated jointly.
    An operation is schedulable when it is next on its machine and next on
    its job; it starts at ``max(job predecessor end, machine release)``.
    Among schedulable operations the one on the lowest machine index goes
    first, which keeps decoding deterministic.

    Args:
        data_instance: Problem data (jobs with (machine, duration) tuples).
        order: Per-machine processing order.

    Returns:
        Schedule with start times for all operations, or None when machine
        orders and job precedence form a cycle (no operation can be
        scheduled while some remain).
    """
    jobs_number = data_instance.jobs_number
    machines_number = data_instance.machines_number
    steps = data_instance.steps_per_job
    start_times = [[0] * steps for _ in range(jobs_number)]
    ready_job = [0] * jobs_number  # completion time of the last scheduled step
    ready_machine = [0] * machines_number  # release time per machine
    next_by_job = [0] * jobs_number
    next_by_machine = [0] * machines_number
    remaining = data_instance.operations_number

    while remaining > 0:
        progressed = False
        for machine in range(machines_number):
            seq = order.tasks_by_machine[machine]
            # drain the machine while its head is next on its job
            while next_by_machine[machine] < len(seq):
                task = seq[next_by_machine[machine]]
                if task.step != next_by_job[task.job]:
                    break
                start = max(ready_job[task.job], ready_machine[machine])
                end = start + data_instance.duration(task)
                start_times[task.job][task.step] = start
                ready_job[task.job] = end
                ready_machine[machine] = end
                next_by_job[task.job] += 1
                next_by_machine[machine] += 1
                remaining -= 1
                progressed = True
        if not progressed:
            return None

    return Schedule(instance=data_instance, start_times=start_times)


def check_schedule(schedule: Schedule, order: Optional[ResourceOrder] = None) -> bool:
    """Check job precedence and machine exclusivity of a schedule.

    Args:
        schedule: Schedule to verify.
        order: When given, start times must also follow this machine order.

    Returns:
        True if every constraint holds, False on the first violation.
    """
    instance = schedule.instance
    for j in range(instance.jobs_number):
        for k in range(instance.steps_per_job):
            task = Task(j, k)
            if schedule.start_time(task) < 0:
                return False
            if k > 0 and schedule.end_time(Task(j, k - 1)) > schedule.start_time(task):
                return False

    by_machine: dict[int, list[Task]] = {}
    for task in schedule.tasks():
        by_machine.setdefault(instance.machine(task), []).append(task)
    for machine_tasks in by_machine.values():
        machine_tasks.sort(key=lambda t: (schedule.start_time(t), schedule.end_time(t)))
        for prev, cur in zip(machine_tasks, machine_tasks[1:]):
            if schedule.end_time(prev) > schedule.start_time(cur):
                return False

    if order is not None:
        for seq in order.tasks_by_machine:
            for prev, cur in zip(seq, seq[1:]):
                if schedule.end_time(prev) > schedule.start_time(cur):
                    return False
    return True


def critical_path(schedule: Schedule, order: Optional[ResourceOrder] = None) -> list[Task]:
    """Extract one critical path, ending at the last-finishing operation.

    Walks backwards from the operation with the greatest end time (lowest
    ``(job, step)`` among equals). At each step the job predecessor is taken
    when it ends exactly at the current start; otherwise the operation just
    before it in the machine order, when that one ends exactly then.

    Args:
        schedule: Decoded schedule.
        order: Machine order the schedule was decoded from. Rebuilt from the
            start times when omitted, which is ambiguous only for
            zero-duration operations sharing a start time.

    Returns:
        Tasks in chronological order; the first one starts at time 0.
    """
    tasks = schedule.tasks()
    if not tasks:
        return []
    if order is None:
        order = ResourceOrder.from_schedule(schedule)
    instance = schedule.instance
    cmax = schedule.cmax
    last = next(t for t in tasks if schedule.end_time(t) == cmax)
    path = [last]
    on_path = {last}
    while schedule.start_time(path[-1]) != 0:
        cur = path[-1]
        start = schedule.start_time(cur)
        pred: Optional[Task] = None
        if cur.step > 0:
            job_pred = Task(cur.job, cur.step - 1)
            if schedule.end_time(job_pred) == start:
                pred = job_pred
        if pred is None:
            pos = order.position(cur)
            if pos > 0:
                machine_pred = order.tasks_by_machine[instance.machine(cur)][pos - 1]
                if schedule.end_time(machine_pred) == start:
                    pred = machine_pred
        if pred is None or pred in on_path:
            # start is not tied to any predecessor: schedule does not match the order
            break
        path.append(pred)
        on_path.add(pred)
    path.reverse()
    return path
