"""Operation sequence utilities: canonical sequence creation and validation.

Concepts
--------
Sequence
    A list of :class:`Operation` values that contains every operation of the
    instance exactly once and respects each job's internal technological
    order (operation indices of a given job appear in strictly increasing
    sequence without gaps). The makespan evaluator does not check this
    invariant; the functions here produce and verify such sequences.
"""

from __future__ import annotations

from collections import Counter
from typing import Sequence

from .errors import ScheduleInvariantError
from .models import DataInstance, Operation


def create_base_sequence(data_instance: DataInstance) -> list[Operation]:
    """Create the canonical job-major sequence.

    Args:
        data_instance: Loaded problem instance.

    Returns:
        List with operations ordered by job (instance order) and, within
        each job, by ascending operation index. Trivially feasible; useful
        as a deterministic baseline in tests.
    """
    return data_instance.operations()


def validate_sequence(
    data_instance: DataInstance,
    sequence: Sequence[Operation],
) -> bool:
    """Validate a sequence's completeness and per-job order.

    Args:
        data_instance: Problem instance supplying the canonical operations.
        sequence: Candidate operation sequence to check.

    Returns:
        True if the sequence is valid (so the function can be used inside
        assertions / conditional flows).

    Raises:
        ScheduleInvariantError: If the operation multiset differs from the
            canonical set (loss, duplication, foreign operation) or the
            operations of some job deviate from their canonical order.
    """
    canonical = data_instance.operations()
    if len(sequence) != len(canonical):
        raise ScheduleInvariantError(
            f"Sequence length {len(sequence)} != {len(canonical)} canonical operations"
        )
    if Counter(sequence) != Counter(canonical):
        raise ScheduleInvariantError("Sequence is not a permutation of the canonical operations")
    next_operation_index = {job_id: 0 for job_id in data_instance.jobs}
    for op in sequence:
        if op.index != next_operation_index[op.job]:
            raise ScheduleInvariantError(
                "Operation index out of order for job " f"{op.job}: {op.index}"
            )
        next_operation_index[op.job] += 1
    return True


def job_order_ok(sequence: Sequence[Operation], job_id: int) -> bool:
    """Check whether a job's operations appear in canonical order ``0..k``."""
    seq = [op.index for op in sequence if op.job == job_id]
    return seq == list(range(len(seq)))
