from __future__ import annotations

from typing import Iterable, Iterator

from .models import Operation, ScheduledOperation


def _simulate(operations: Iterable[Operation]) -> Iterator[tuple[Operation, int, int]]:
    """Yield ``(operation, start, end)`` under list scheduling.

    Operations are placed strictly in the given order. Each starts at the
    later of its machine's and its job's completion time (both default to
    0) and both completion times advance to its end.
    """
    ready_machine: dict[int, int] = {}
    ready_job: dict[int, int] = {}
    for op in operations:
        start = max(ready_machine.get(op.machine, 0), ready_job.get(op.job, 0))
        end = start + op.processing_time
        ready_machine[op.machine] = end
        ready_job[op.job] = end
        yield op, start, end


def compute_makespan(operations: Iterable[Operation]) -> int:
    """Return the makespan of an operation sequence, 0 when it is empty.

    This is a greedy simulation, not an optimal placement: the same set of
    operations in a different order generally yields a different makespan.
    """
    return max((end for _, _, end in _simulate(operations)), default=0)


def decode_timeline(operations: Iterable[Operation]) -> list[ScheduledOperation]:
    """Decode a sequence into timed rows.

    Args:
        operations: Operation sequence in placement order.

    Returns:
        One :class:`ScheduledOperation` per input operation, in input order.
        ``max(row.end)`` equals :func:`compute_makespan` of the same input.
    """
    return [
        ScheduledOperation(
            start=start,
            end=end,
            job=op.job,
            operation_index=op.index,
            machine=op.machine,
            processing_time=op.processing_time,
        )
        for op, start, end in _simulate(operations)
    ]
