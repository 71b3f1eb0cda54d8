"""Initial population generation and best-member lookup."""

from __future__ import annotations

import random
from collections import deque
from typing import Optional, Sequence

from .errors import EmptyPopulationError
from .models import DataInstance, Operation
from .schedule import Schedule


def generate_valid_sequence(
    data_instance: DataInstance,
    *,
    rng: Optional[random.Random] = None,
) -> list[Operation]:
    """Generate a random feasible operation sequence.

    Each round visits every job that still has pending operations in a
    uniformly shuffled order and appends exactly one operation of each
    (the job's next one), preserving intra-job order while randomising the
    interleaving across jobs.

    Args:
        data_instance: Problem data.
        rng: Optional random.Random instance (for reproducibility). If
            None uses module-level random.

    Returns:
        List of operations forming a feasible sequence.
    """
    if rng is None:
        rng = random
    queues: dict[int, deque[Operation]] = {
        job_id: deque(data_instance.job_operations(job_id)) for job_id in data_instance.jobs
    }
    queues = {job_id: q for job_id, q in queues.items() if q}
    sequence: list[Operation] = []
    while queues:
        available = list(queues)
        rng.shuffle(available)
        for job_id in available:
            queue = queues[job_id]
            sequence.append(queue.popleft())
            if not queue:
                del queues[job_id]
    return sequence


def initialize_population(
    data_instance: DataInstance,
    size: int,
    *,
    rng: Optional[random.Random] = None,
) -> list[Schedule]:
    """Build ``size`` schedules from independent random feasible sequences.

    Raises:
        ValueError: If ``size`` is smaller than 1.
    """
    if size < 1:
        raise ValueError(f"Population size must be positive, got {size}")
    return [
        Schedule.from_operations(generate_valid_sequence(data_instance, rng=rng))
        for _ in range(size)
    ]


def best_schedule(population: Sequence[Schedule]) -> Schedule:
    """Return the member with the lowest makespan (first one on ties).

    Raises:
        EmptyPopulationError: If the population is empty.
    """
    if not population:
        raise EmptyPopulationError("Cannot pick the best schedule of an empty population")
    return min(population, key=lambda s: s.makespan)
