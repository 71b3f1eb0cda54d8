"""Immutable schedule: operation sequence plus its makespan."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from .decoder import compute_makespan, decode_timeline
from .models import Operation, ScheduledOperation


@dataclass(frozen=True)
class Schedule:
    """Ordered operation sequence and its makespan.

    Fields:
        operations: Tuple of operations in placement order.
        makespan: Derived at construction via :func:`compute_makespan`;
            not accepted as an argument.
    """

    operations: tuple[Operation, ...]
    makespan: int = field(init=False, compare=False)

    def __post_init__(self) -> None:
        ops = tuple(self.operations)
        object.__setattr__(self, "operations", ops)
        object.__setattr__(self, "makespan", compute_makespan(ops))

    @classmethod
    def from_operations(cls, operations: Iterable[Operation]) -> "Schedule":
        return cls(tuple(operations))

    def __len__(self) -> int:
        return len(self.operations)

    def timeline(self) -> list[ScheduledOperation]:
        return decode_timeline(self.operations)

    def __str__(self) -> str:
        ops = ", ".join(str(op) for op in self.operations)
        return f"Schedule: [{ops}], Makespan: {self.makespan}"
