"""Cultural knowledge: extraction from the best schedule and its influence.

The knowledge base maps machine id -> list of job ids in the order they
occupy that machine in the best schedule of the current generation. It is
rebuilt from scratch every generation (no historical accumulation). Job ids
may repeat when a job visits the same machine more than once.

Both functions rely on dict insertion order: machines appear in order of
first use in the best schedule, and job groups in the influence operator in
order of first occurrence in the child sequence.
"""

from __future__ import annotations

from typing import Iterable, Mapping, Sequence

from .models import Operation

KnowledgeBase = dict[int, list[int]]


def extract_knowledge(best_operations: Iterable[Operation]) -> KnowledgeBase:
    """Build a fresh knowledge base from the best schedule's operations."""
    knowledge: KnowledgeBase = {}
    for op in best_operations:
        knowledge.setdefault(op.machine, []).append(op.job)
    return knowledge


def is_preferred(op: Operation, knowledge: Mapping[int, Sequence[int]]) -> bool:
    """True when ``op``'s (machine, job) pair was observed in the best schedule."""
    return op.job in knowledge.get(op.machine, ())


def apply_cultural_influence(
    sequence: Sequence[Operation],
    knowledge: Mapping[int, Sequence[int]],
) -> list[Operation]:
    """Bias a child's operation ordering with the knowledge base.

    Operations are grouped by job (first-occurrence order). Inside each
    group a stable sort moves preferred operations ahead of the others while
    keeping relative order among equals. The groups are then concatenated,
    so the result is job-major.

    Returns:
        New list; the input is not modified.
    """
    groups: dict[int, list[Operation]] = {}
    for op in sequence:
        groups.setdefault(op.job, []).append(op)

    influenced: list[Operation] = []
    for job_ops in groups.values():
        # sorted() is stable; False (preferred) sorts first
        influenced.extend(sorted(job_ops, key=lambda op: not is_preferred(op, knowledge)))
    return influenced
