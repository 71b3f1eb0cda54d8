"""Core data structures for job shop instances and schedules.

This module defines:
    Job               -- alias describing a single job step (machine, proc_time).
    Operation         -- immutable unit of work placed in a schedule sequence.
    DataInstance      -- immutable container with all jobs for one instance.
    ScheduledOperation -- one decoded operation with start/end times.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

Job = tuple[int, int]  # (machine, processing_time)
OperationKey = tuple[int, int]  # OperationKey = (job_id, operation_index)


@dataclass(frozen=True)
class Operation:
    """Single operation of a job.

    Attributes:
        job: Job identifier.
        machine: Machine on which the operation is processed.
        processing_time: Duration (strictly positive).
        index: Position of the operation inside its job (0-based). Keeps
            operations distinct when a job revisits a machine with the same
            duration.
    """

    job: int
    machine: int
    processing_time: int
    index: int = 0

    @property
    def key(self) -> OperationKey:
        return (self.job, self.index)

    def __str__(self) -> str:
        return f"Job{self.job}(M{self.machine}, T{self.processing_time})"


@dataclass(frozen=True)
class DataInstance:
    """Immutable representation of a JSSP instance.

    Attributes:
        jobs: Ordered mapping job_id -> tuple of (machine, processing_time)
            steps in the job's technological order. Read-only when built by
            the loaders in :mod:`cultural_jssp.parser`.
        machines: Declared machine identifiers.
    """

    jobs: Mapping[int, tuple[Job, ...]]
    machines: tuple[int, ...]

    @property
    def jobs_number(self) -> int:
        return len(self.jobs)

    @property
    def machines_number(self) -> int:
        return len(self.machines)

    @property
    def job_ids(self) -> list[int]:
        return list(self.jobs)

    @property
    def operations_number(self) -> int:
        return sum(len(steps) for steps in self.jobs.values())

    def job_operations(self, job_id: int) -> list[Operation]:
        """Return the canonical operations of ``job_id`` in technological order."""
        return [
            Operation(job=job_id, machine=machine, processing_time=p, index=k)
            for k, (machine, p) in enumerate(self.jobs[job_id])
        ]

    def operations(self) -> list[Operation]:
        """Return the canonical operation set in job-major order."""
        ops: list[Operation] = []
        for job_id in self.jobs:
            ops.extend(self.job_operations(job_id))
        return ops


@dataclass(frozen=True)
class ScheduledOperation:
    """Single scheduled operation with timing and identification data.

    Fields:
        start: Start time of the operation.
        end: Completion time (start + processing_time).
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
