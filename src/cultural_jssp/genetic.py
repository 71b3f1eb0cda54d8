"""Genetic operators on operation sequences.

Design choices
--------------
Feasibility preservation:
    Every operator keeps the technological (within-job) order intact. When
    a random move would violate it the operator degrades to a no-op rather
    than raising, so the optimizer never has to repair a child.

Return semantics:
    Crossover and mutation return a new list (never mutate the input) so
    parents stay valid members of the current population.
"""

from __future__ import annotations

import random
from collections import deque
from typing import Optional, Sequence

from .errors import EmptyPopulationError
from .models import Operation
from .schedule import Schedule

TIE_BREAK_POLICIES = ("first", "second")


def tournament_select(
    population: Sequence[Schedule],
    rng: random.Random,
    tie_break: str = "first",
) -> Schedule:
    """Binary tournament selection.

    Draws two members independently with replacement and returns the one
    with strictly lower makespan.

    Args:
        population: Current population.
        rng: Random source for both draws.
        tie_break: Winner on equal makespan: ``"first"`` returns the first
            drawn member, ``"second"`` the second one.

    Raises:
        EmptyPopulationError: If the population is empty.
        ValueError: On an unknown ``tie_break`` policy.
    """
    if not population:
        raise EmptyPopulationError("Tournament selection on an empty population")
    if tie_break not in TIE_BREAK_POLICIES:
        raise ValueError(f"Unknown tie_break policy: {tie_break}")
    first = population[rng.randrange(len(population))]
    second = population[rng.randrange(len(population))]
    if first.makespan < second.makespan:
        return first
    if second.makespan < first.makespan:
        return second
    return first if tie_break == "first" else second


def crossover(
    parent1: Sequence[Operation],
    parent2: Sequence[Operation],
    rng: random.Random,
    cut: Optional[int] = None,
) -> list[Operation]:
    """Job-order preserving one-point crossover.

    The child starts with ``parent1[:cut]``. Parent2 is then scanned and,
    for every job not yet represented in the child, the next pending
    operation of that job *from parent1's queue* is appended. Whatever
    remains queued is flushed job by job (in order of first occurrence in
    parent1). Taking the pending parent1 operation instead of parent2's
    copy is what keeps each job's operations in technological order.

    Args:
        parent1: First parent sequence (supplies all operations).
        parent2: Second parent sequence (supplies job priority after the cut).
        rng: Random source for the cut point.
        cut: Optional fixed cut index in ``[0, len)``; drawn uniformly
            when omitted.

    Returns:
        New child sequence (permutation of parent1).

    Raises:
        ValueError: If parents differ in length, are empty, or ``cut`` is
            out of range.
    """
    n = len(parent1)
    if n != len(parent2):
        raise ValueError(f"Parents differ in length: {n} vs {len(parent2)}")
    if n == 0:
        raise ValueError("Cannot cross over empty sequences")
    if cut is None:
        cut = rng.randrange(n)
    elif not (0 <= cut < n):
        raise ValueError(f"cut {cut} out of range [0, {n})")

    queues: dict[int, deque[Operation]] = {}
    for op in parent1:
        queues.setdefault(op.job, deque()).append(op)

    child: list[Operation] = []
    added_jobs: set[int] = set()
    for op in parent1[:cut]:
        child.append(op)
        added_jobs.add(op.job)
        queues[op.job].popleft()

    for op in parent2:
        if op.job in added_jobs:
            continue
        queue = queues.get(op.job)
        if queue:
            child.append(queue.popleft())
            added_jobs.add(op.job)

    for queue in queues.values():
        while queue:
            child.append(queue.popleft())
    return child


def swap_feasible(sequence: Sequence[Operation], i: int, j: int) -> bool:
    """Return True when swapping positions ``i`` and ``j`` keeps job order.

    Positions holding operations of the same job never swap. Otherwise the
    swap is feasible iff no other operation of either touched job lies
    strictly between the two positions.
    """
    if i == j:
        return False
    lo, hi = (i, j) if i < j else (j, i)
    a, b = sequence[lo].job, sequence[hi].job
    if a == b:
        return False
    return all(op.job not in (a, b) for op in sequence[lo + 1 : hi])


def mutate(
    sequence: Sequence[Operation],
    rng: random.Random,
    probability: float = 0.1,
) -> list[Operation]:
    """Random swap mutation.

    With probability ``probability`` draws two positions uniformly and swaps
    their operations when :func:`swap_feasible` allows it. Two operations
    of the same job are never swapped; the result then equals the input.

    Returns:
        New sequence (copy of the input when no swap happened).
    """
    mutated = list(sequence)
    if len(mutated) < 2 or rng.random() >= probability:
        return mutated
    i = rng.randrange(len(mutated))
    j = rng.randrange(len(mutated))
    if swap_feasible(mutated, i, j):
        mutated[i], mutated[j] = mutated[j], mutated[i]
    return mutated
