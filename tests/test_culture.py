import random

import pytest

from cultural_jssp.culture import apply_cultural_influence, extract_knowledge, is_preferred
from cultural_jssp.errors import ScheduleInvariantError
from cultural_jssp.models import DataInstance
from cultural_jssp.operations import validate_sequence
from cultural_jssp.parser import build_instance
from cultural_jssp.population import generate_valid_sequence


def scenario(toy_ops):
    return [toy_ops[n] for n in ("j1m1", "j2m2", "j3m3", "j1m2", "j2m1", "j3m2")]


def test_knowledge_records_job_order_per_machine(toy_ops):
    knowledge = extract_knowledge(scenario(toy_ops))
    assert knowledge == {1: [1, 2], 2: [2, 1, 3], 3: [3]}
    # machines keyed in order of first use
    assert list(knowledge) == [1, 2, 3]


def test_knowledge_keeps_duplicates_for_revisited_machine():
    inst: DataInstance = build_instance({0: [[0, 1], [0, 2]], 1: [[0, 3]]})
    knowledge = extract_knowledge(inst.operations())
    assert knowledge == {0: [0, 0, 1]}


def test_knowledge_is_rebuilt_not_accumulated(toy, toy_ops):
    first = extract_knowledge(scenario(toy_ops))
    second = extract_knowledge(toy.job_operations(3))
    assert second == {3: [3], 2: [3]}
    assert first == {1: [1, 2], 2: [2, 1, 3], 3: [3]}


def test_is_preferred(toy_ops):
    knowledge = {2: [1]}
    assert is_preferred(toy_ops["j1m2"], knowledge)
    assert not is_preferred(toy_ops["j1m1"], knowledge)
    assert not is_preferred(toy_ops["j2m2"], knowledge)


def test_influence_groups_jobs_in_first_occurrence_order(toy, toy_ops):
    seq = [toy_ops[n] for n in ("j2m2", "j1m1", "j3m3", "j1m2", "j2m1", "j3m2")]
    knowledge = extract_knowledge(scenario(toy_ops))
    out = apply_cultural_influence(seq, knowledge)
    assert out == [toy_ops[n] for n in ("j2m2", "j2m1", "j1m1", "j1m2", "j3m3", "j3m2")]
    validate_sequence(toy, out)


def test_influence_without_knowledge_only_groups(toy_ops):
    seq = scenario(toy_ops)
    out = apply_cultural_influence(seq, {})
    assert out == [toy_ops[n] for n in ("j1m1", "j1m2", "j2m2", "j2m1", "j3m3", "j3m2")]
    assert seq == scenario(toy_ops)  # input untouched


def test_influence_stable_partition_within_job(toy, toy_ops):
    # only job 1's M2 step is preferred, so it moves ahead of the M1 step;
    # such a reorder breaks technological order and validation reports it
    out = apply_cultural_influence(scenario(toy_ops), {2: [1]})
    assert out[:2] == [toy_ops["j1m2"], toy_ops["j1m1"]]
    assert out[2:] == [toy_ops[n] for n in ("j2m2", "j2m1", "j3m3", "j3m2")]
    with pytest.raises(ScheduleInvariantError):
        validate_sequence(toy, out)


@pytest.mark.parametrize("seed", range(10))
def test_influence_with_extracted_knowledge_keeps_invariants(ft06, seed):
    rng = random.Random(seed)
    best = generate_valid_sequence(ft06, rng=rng)
    child = generate_valid_sequence(ft06, rng=rng)
    out = apply_cultural_influence(child, extract_knowledge(best))
    validate_sequence(ft06, out)
    assert len(out) == len(child)
