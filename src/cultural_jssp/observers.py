"""Per-generation observers.

An observer is any callable ``observer(generation, schedule)``. The loop
hands each one the best schedule of every generation and ignores the return
value. Schedules are immutable, so observers may keep references.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional, Tuple

from .schedule import Schedule

GenerationObserver = Callable[[int, Schedule], None]


class LoggingReporter:
    """Textual report sink: one log line per generation.

    Tracks the lowest makespan it has been handed so each line also shows the
    best-ever value.
    """

    def __init__(self, logger: Optional[logging.Logger] = None, level: int = logging.INFO):
        self.logger = logger or logging.getLogger("cultural_jssp.report")
        self.level = level
        self.best_ever: Optional[int] = None

    def __call__(self, generation: int, schedule: Schedule) -> None:
        if self.best_ever is None or schedule.makespan < self.best_ever:
            self.best_ever = schedule.makespan
        self.logger.log(
            self.level,
            "generation=%d makespan=%d best_ever=%d sequence=[%s]",
            generation,
            schedule.makespan,
            self.best_ever,
            ", ".join(str(op) for op in schedule.operations),
        )


class ScheduleCollector:
    """Keep every emitted ``(generation, schedule)`` pair (headless runs, tests)."""

    def __init__(self) -> None:
        self.emitted: List[Tuple[int, Schedule]] = []

    def __call__(self, generation: int, schedule: Schedule) -> None:
        self.emitted.append((generation, schedule))

    @property
    def schedules(self) -> List[Schedule]:
        return [s for _, s in self.emitted]

    @property
    def last(self) -> Optional[Schedule]:
        return self.emitted[-1][1] if self.emitted else None
