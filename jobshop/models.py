"""Core data structures for Job Shop instances and their schedules.

This module defines:
    Job          -- alias describing a single operation (machine, duration).
    Task         -- identifier of one operation (job, step).
    DataInstance -- immutable container with all jobs for one instance.
    Schedule     -- start times of every operation plus derived values.
    Result       -- what a solver hands back to its driver.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, NamedTuple, Optional

if TYPE_CHECKING:
    from jobshop.encoding import ResourceOrder

Job = tuple[int, int]  # (machine, duration)


class Task(NamedTuple):
    """Operation identifier: ``step``-th operation of job ``job``."""

    job: int
    step: int


@dataclass(frozen=True)
class DataInstance:
    """Immutable representation of a JSSP instance.

    Attributes:
        jobs: Nested list: jobs[j][k] -> (machine, duration).
        jobs_number: Number of jobs (J).
        machines_number: Number of machines (M).

    Raises:
        ValueError: On construction, if the job list disagrees with the
            declared sizes, jobs differ in length, a machine index is out of
            range or a duration is negative.
    """

    jobs: list[list[Job]]
    jobs_number: int
    machines_number: int

    def __post_init__(self) -> None:
        if len(self.jobs) != self.jobs_number:
            raise ValueError(f"Expected {self.jobs_number} jobs, got {len(self.jobs)}")
        if self.jobs_number == 0:
            return
        steps = len(self.jobs[0])
        for j, ops in enumerate(self.jobs):
            if len(ops) != steps:
                raise ValueError(f"Job {j} has {len(ops)} operations, expected {steps}")
            for k, (machine, duration) in enumerate(ops):
                if not (0 <= machine < self.machines_number):
                    raise ValueError(f"Machine index out of range for job {j} step {k}: {machine}")
                if duration < 0:
                    raise ValueError(f"Negative duration for job {j} step {k}: {duration}")

    @property
    def steps_per_job(self) -> int:
        return len(self.jobs[0]) if self.jobs else 0

    @property
    def operations_number(self) -> int:
        return self.jobs_number * self.steps_per_job

    def machine(self, task: Task) -> int:
        return self.jobs[task.job][task.step][0]

    def duration(self, task: Task) -> int:
        return self.jobs[task.job][task.step][1]

    def task_with_machine(self, job: int, machine: int) -> int:
        """Return the step of ``job`` that runs on ``machine``.

        Raises:
            ValueError: If the job never visits the machine.
        """
        for step, (m, _) in enumerate(self.jobs[job]):
            if m == machine:
                return step
        raise ValueError(f"Job {job} does not use machine {machine}")

    def remaining_work(self, task: Task) -> int:
        """Total duration of ``task`` and every later step of its job."""
        return sum(d for _, d in self.jobs[task.job][task.step:])


@dataclass(frozen=True)
class ScheduleOperationRow:
    """Single scheduled operation with timing and identification data.

    Fields:
        start: Start time of the operation.
        end: Completion time (start + duration).
        job: Job identifier.
        operation_index: Index of the operation inside its job (0-based).
        machine: Machine on which the operation is processed.
        processing_time: Duration of the operation.
    """
    start: int
    end: int
    job: int
    operation_index: int
    machine: int
    processing_time: int


@dataclass(frozen=True)
class Schedule:
    """Concrete timing of every operation of an instance.

    Fields:
        instance: Problem the schedule belongs to.
        start_times: start_times[j][k] -> start of step k of job j.
    """
    instance: DataInstance
    start_times: list[list[int]]

    def start_time(self, task: Task) -> int:
        return self.start_times[task.job][task.step]

    def end_time(self, task: Task) -> int:
        return self.start_times[task.job][task.step] + self.instance.duration(task)

    def tasks(self) -> list[Task]:
        return [
            Task(j, k)
            for j in range(self.instance.jobs_number)
            for k in range(self.instance.steps_per_job)
        ]

    @property
    def cmax(self) -> int:
        """Makespan (maximum completion time across all operations)."""
        return max((self.end_time(t) for t in self.tasks()), default=0)

    @property
    def operations(self) -> list[ScheduleOperationRow]:
        rows = []
        for t in self.tasks():
            machine, duration = self.instance.jobs[t.job][t.step]
            start = self.start_time(t)
            rows.append(
                ScheduleOperationRow(
                    start=start,
                    end=start + duration,
                    job=t.job,
                    operation_index=t.step,
                    machine=machine,
                    processing_time=duration,
                )
            )
        return rows


class ExitCause(Enum):
    """Why a solver returned."""

    BLOCKED = "blocked"  # no (improving) move left
    TIMEOUT = "timeout"
    MAX_ITERATIONS = "max_iterations"


@dataclass
class Result:
    instance: DataInstance
    order: "ResourceOrder"
    schedule: Schedule
    exit_cause: ExitCause
    iterations: int = 0
    cmax_history: list[int] = field(default_factory=list)
    elapsed_ms: Optional[int] = None

    @property
    def cmax(self) -> int:
        return self.schedule.cmax
