"""Tests for the cultural algorithm loop (CulturalAlgorithm.run / step).

Covers termination (stagnation, generation cap, cancellation, time limit),
best-ever vs final-generation reporting, reproducibility under a seeded
random source, observer hand-off and invariant failure propagation.
"""

from __future__ import annotations

import random
import threading

import pytest

from cultural_jssp import algorithm as algorithm_module
from cultural_jssp.algorithm import CulturalAlgorithm, LoopState, Termination
from cultural_jssp.config import AlgoParams
from cultural_jssp.errors import ScheduleInvariantError
from cultural_jssp.observers import ScheduleCollector
from cultural_jssp.operations import validate_sequence


def _run(instance, seed=0, observers=(), cancel_event=None, **params):
    algo = CulturalAlgorithm(
        instance,
        params=AlgoParams(**params),
        rng=random.Random(seed),
        observers=observers,
        cancel_event=cancel_event,
    )
    return algo, algo.run()


def test_run_terminates_on_stagnation(toy):
    algo, result = _run(toy, seed=3, max_stagnation=20)
    assert result.termination is Termination.STAGNATION
    assert algo.state is LoopState.TERMINATED
    # the last improvement is followed by exactly max_stagnation generations
    last_improvement = result.best_ever_history.index(result.best.makespan) + 1
    assert result.generations == last_improvement + 20
    assert algo.evolution.stagnation == 20


def test_best_ever_and_final_best_are_both_reported(toy):
    collector = ScheduleCollector()
    _, result = _run(toy, seed=11, observers=[collector])
    assert result.best.makespan == min(result.best_history)
    assert result.final_best is collector.last
    assert result.final_best.makespan == result.best_history[-1]
    assert result.best.makespan <= result.final_best.makespan
    assert len(collector.emitted) == result.generations
    assert [g for g, _ in collector.emitted] == list(range(1, result.generations + 1))


def test_best_ever_history_never_increases(ft06):
    _, result = _run(ft06, seed=2, population_size=20, max_stagnation=10)
    hist = result.best_ever_history
    assert all(b <= a for a, b in zip(hist, hist[1:]))
    assert hist[-1] == result.best.makespan


def test_makespan_respects_lower_bound(toy, ft06):
    _, result = _run(toy, seed=1)
    # longest job (9) and busiest machine (M2: 4+2+3=9)
    assert result.best.makespan >= 9
    _, result = _run(ft06, seed=1, population_size=20, max_stagnation=10)
    assert result.best.makespan >= 55  # known optimum of ft06


def test_same_seed_same_run(ft06):
    _, a = _run(ft06, seed=42, population_size=15, max_stagnation=8)
    _, b = _run(ft06, seed=42, population_size=15, max_stagnation=8)
    assert a.best_history == b.best_history
    assert a.best.operations == b.best.operations
    assert a.generations == b.generations


def test_every_emitted_schedule_is_valid(ft06):
    collector = ScheduleCollector()
    _run(ft06, seed=5, observers=[collector], population_size=12, max_stagnation=6)
    assert collector.schedules
    for sched in collector.schedules:
        validate_sequence(ft06, sched.operations)


def test_generation_cap(toy):
    _, result = _run(toy, max_stagnation=10_000, max_generations=5)
    assert result.termination is Termination.MAX_GENERATIONS
    assert result.generations == 5
    assert len(result.best_history) == 5


def test_cancel_before_first_generation(toy):
    event = threading.Event()
    event.set()
    algo, result = _run(toy, cancel_event=event)
    assert result.termination is Termination.CANCELLED
    assert result.generations == 0
    assert result.best is result.final_best
    assert result.best in algo.population


def test_cancel_from_observer(toy):
    event = threading.Event()

    def stop_after_three(generation, schedule):
        if generation == 3:
            event.set()

    _, result = _run(toy, cancel_event=event, observers=[stop_after_three], max_stagnation=10_000)
    assert result.termination is Termination.CANCELLED
    assert result.generations == 3


def test_time_limit(ft06):
    _, result = _run(
        ft06, max_stagnation=10_000_000, max_generations=None, time_limit_ms=20
    )
    assert result.termination is Termination.TIME_LIMIT


def test_step_replaces_population_and_rebuilds_knowledge(toy):
    algo = CulturalAlgorithm(toy, params=AlgoParams(population_size=8), rng=random.Random(0))
    assert algo.state is LoopState.INITIALIZING
    algo.initialize()
    before = algo.population
    makespans = algo.evaluate_fitness()
    assert makespans == [s.makespan for s in before]
    best = algo.step()
    assert algo.state is LoopState.EVOLVING
    assert algo.population is not before
    assert len(algo.population) == 8
    assert best in algo.population
    # knowledge came from the previous generation's best: every machine, every visit
    assert sorted(algo.knowledge) == [1, 2, 3]
    assert sum(len(jobs) for jobs in algo.knowledge.values()) == toy.operations_number


def test_step_after_termination_raises(toy):
    algo, _ = _run(toy, max_generations=2)
    with pytest.raises(RuntimeError):
        algo.step()


def test_invariant_failure_is_not_masked(toy, monkeypatch):
    def drop_last(sequence, knowledge):
        return list(sequence)[:-1]

    monkeypatch.setattr(algorithm_module, "apply_cultural_influence", drop_last)
    algo = CulturalAlgorithm(toy, rng=random.Random(0))
    with pytest.raises(ScheduleInvariantError):
        algo.run()


def test_independent_instances_do_not_share_state(toy):
    a = CulturalAlgorithm(toy, rng=random.Random(1))
    b = CulturalAlgorithm(toy, rng=random.Random(1))
    a.initialize()
    a.step()
    assert b.population == []
    assert b.knowledge == {}
    assert b.evolution.generation == 0
