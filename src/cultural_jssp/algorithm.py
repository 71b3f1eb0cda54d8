"""Cultural algorithm main loop.

One :class:`CulturalAlgorithm` instance owns all run state (population,
knowledge base, best-ever tracker, stagnation counter, random source), so
independent runs never share anything.

Generation cycle::

    evaluate fitness -> extract knowledge from current best
    -> POPULATION_SIZE x (select, select -> crossover -> mutate -> influence)
    -> replace population -> track best / stagnation -> notify observers

The run terminates when ``stagnation >= max_stagnation``; a generation cap,
an optional wall-clock limit and an optional cancel event are checked
between generations as safety stops.
"""

from __future__ import annotations

import logging
import math
import random
import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional

from .config import AlgoParams
from .culture import KnowledgeBase, apply_cultural_influence, extract_knowledge
from .genetic import crossover, mutate, tournament_select
from .models import DataInstance
from .observers import GenerationObserver
from .operations import validate_sequence
from .population import best_schedule, initialize_population
from .schedule import Schedule

logger = logging.getLogger("cultural_jssp.algorithm")


class LoopState(Enum):
    INITIALIZING = "initializing"
    EVOLVING = "evolving"
    TERMINATED = "terminated"


class Termination(str, Enum):
    STAGNATION = "stagnation"
    MAX_GENERATIONS = "max_generations"
    TIME_LIMIT = "time_limit"
    CANCELLED = "cancelled"


@dataclass
class EvolutionState:
    """Best-ever tracker and per-generation history."""

    best_makespan_ever: float = math.inf
    best_ever: Optional[Schedule] = None
    current_best: Optional[Schedule] = None
    stagnation: int = 0
    generation: int = 0
    best_history: List[int] = field(default_factory=list)
    best_ever_history: List[int] = field(default_factory=list)

    def record(self, generation_best: Schedule) -> bool:
        """Record a generation's best. Returns True if it improved the best ever."""
        self.current_best = generation_best
        improved = generation_best.makespan < self.best_makespan_ever
        if improved:
            self.best_makespan_ever = generation_best.makespan
            self.best_ever = generation_best
            self.stagnation = 0
        else:
            self.stagnation += 1
        self.best_history.append(generation_best.makespan)
        self.best_ever_history.append(int(self.best_makespan_ever))
        return improved


@dataclass(frozen=True)
class RunResult:
    """Outcome of :meth:`CulturalAlgorithm.run`.

    Fields:
        best: Best schedule over the whole run (the one that last lowered
            the best-ever makespan).
        final_best: Best schedule of the final generation, i.e. the last one
            handed to observers. Without elitism it may be worse than ``best``.
        generations: Number of completed generations.
        termination: Why the loop stopped.
        best_history: Best makespan of each generation.
        best_ever_history: Best-ever makespan after each generation.
        elapsed_s: Wall-clock duration of the run.
    """

    best: Schedule
    final_best: Schedule
    generations: int
    termination: Termination
    best_history: List[int]
    best_ever_history: List[int]
    elapsed_s: float


class CulturalAlgorithm:
    """Population-based search with a per-generation cultural knowledge base.

    Args:
        instance: Problem instance.
        params: Hyper-parameters; defaults to :class:`AlgoParams` defaults.
        rng: Random source used by every stochastic step. A fresh unseeded
            ``random.Random`` when omitted.
        observers: Callables notified with ``(generation, best_schedule)``
            after every generation.
        cancel_event: Optional event; when set, the loop stops before the
            next generation.
    """

    def __init__(
        self,
        instance: DataInstance,
        params: Optional[AlgoParams] = None,
        rng: Optional[random.Random] = None,
        observers: Iterable[GenerationObserver] = (),
        cancel_event: Optional[threading.Event] = None,
    ):
        self.instance = instance
        self.params = params or AlgoParams()
        self.rng = rng if rng is not None else random.Random()
        self.observers: List[GenerationObserver] = list(observers)
        self.cancel_event = cancel_event

        self.state = LoopState.INITIALIZING
        self.population: List[Schedule] = []
        self.knowledge: KnowledgeBase = {}
        self.evolution = EvolutionState()

    def add_observer(self, observer: GenerationObserver) -> None:
        self.observers.append(observer)

    # ------------------------------------------------------------------ phases

    def initialize(self) -> None:
        """Seed the population and reset the trackers."""
        self.population = initialize_population(
            self.instance, self.params.population_size, rng=self.rng
        )
        self.knowledge = {}
        self.evolution = EvolutionState()
        self.state = LoopState.EVOLVING
        logger.info(
            "Initialized population size=%d jobs=%d machines=%d ops=%d initial_best=%d",
            len(self.population),
            self.instance.jobs_number,
            self.instance.machines_number,
            self.instance.operations_number,
            best_schedule(self.population).makespan,
        )

    def evaluate_fitness(self) -> List[int]:
        """Return the makespans of the current population.

        Makespans are computed when a :class:`Schedule` is built, so this is
        a read of already current values.
        """
        return [s.makespan for s in self.population]

    def update_knowledge(self) -> KnowledgeBase:
        """Replace the knowledge base with one extracted from the current best."""
        self.knowledge = extract_knowledge(best_schedule(self.population).operations)
        return self.knowledge

    def make_child(self) -> Schedule:
        parent1 = tournament_select(self.population, self.rng, self.params.tie_break)
        parent2 = tournament_select(self.population, self.rng, self.params.tie_break)
        child = crossover(parent1.operations, parent2.operations, self.rng)
        child = mutate(child, self.rng, self.params.mutation_probability)
        child = apply_cultural_influence(child, self.knowledge)
        if self.params.validate_children:
            validate_sequence(self.instance, child)
        return Schedule.from_operations(child)

    def evolve_population(self) -> None:
        self.population = [self.make_child() for _ in range(self.params.population_size)]

    def step(self) -> Schedule:
        """Run one generation and return its best schedule."""
        if self.state is LoopState.INITIALIZING:
            self.initialize()
        elif self.state is LoopState.TERMINATED:
            raise RuntimeError("Cannot step a terminated run")

        makespans = self.evaluate_fitness()
        self.update_knowledge()
        self.evolve_population()
        generation_best = best_schedule(self.population)
        ev = self.evolution
        ev.generation += 1
        improved = ev.record(generation_best)
        logger.debug(
            "gen=%d best=%d best_ever=%d stagnation=%d parent_mean=%.2f improved=%s",
            ev.generation,
            generation_best.makespan,
            ev.best_makespan_ever,
            ev.stagnation,
            sum(makespans) / len(makespans),
            improved,
        )
        for observer in self.observers:
            observer(ev.generation, generation_best)
        return generation_best

    def termination_reason(self, started: float) -> Optional[Termination]:
        ev = self.evolution
        if ev.stagnation >= self.params.max_stagnation:
            return Termination.STAGNATION
        if self.params.max_generations is not None and ev.generation >= self.params.max_generations:
            return Termination.MAX_GENERATIONS
        if self.cancel_event is not None and self.cancel_event.is_set():
            return Termination.CANCELLED
        if self.params.time_limit_ms is not None:
            if (time.perf_counter() - started) * 1000.0 >= self.params.time_limit_ms:
                return Termination.TIME_LIMIT
        return None

    def run(self) -> RunResult:
        """Evolve until a termination condition holds.

        Returns:
            :class:`RunResult`. When the loop stops before the first
            generation (cancelled up front) both ``best`` and ``final_best``
            are the best member of the initial population.
        """
        t0 = time.perf_counter()
        self.initialize()
        while True:
            reason = self.termination_reason(t0)
            if reason is not None:
                break
            self.step()
        self.state = LoopState.TERMINATED

        ev = self.evolution
        fallback = best_schedule(self.population)
        result = RunResult(
            best=ev.best_ever or fallback,
            final_best=ev.current_best or fallback,
            generations=ev.generation,
            termination=reason,
            best_history=list(ev.best_history),
            best_ever_history=list(ev.best_ever_history),
            elapsed_s=time.perf_counter() - t0,
        )
        logger.info(
            "[cultural] stop %s after %d generations best=%d final=%d (%.3fs)",
            reason.value,
            result.generations,
            result.best.makespan,
            result.final_best.makespan,
            result.elapsed_s,
        )
        return result
