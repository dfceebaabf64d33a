"""End-to-end tests of the pipeline on simulated groups."""

import math
import random
import pytest
from asimpy import Environment
from stats_collective import SimulatedGroup
from stats_pipeline import EMPTY_DATASET_WARNING, PIPELINE_STEPS
from stats_simulation import (
    SimulationConfig,
    compute_statistics,
    raise_failures,
    run_simulation,
)
from stats_source import ListDataSource
from stats_types import Step
from stats_worker import RankWorker

TEXTBOOK = [2.0, 4.0, 4.0, 4.0, 5.0, 5.0, 7.0, 9.0]


@pytest.mark.parametrize("group_size", [1, 2, 3, 4, 8])
def test_mean_and_population_variance(group_size):
    result = compute_statistics(TEXTBOOK, group_size=group_size)
    assert result.mean == pytest.approx(5.0)
    assert result.variance == pytest.approx(4.0)
    assert result.count == 8
    assert result.warnings == []


@pytest.mark.parametrize("group_size", [1, 2, 3, 4, 6])
def test_min_and_max_absolute_value(group_size):
    result = compute_statistics([-3.0, 1.0, -7.5, 2.0], group_size=group_size)
    assert result.min_abs == 1.0
    assert result.max_abs == 7.5


def test_results_do_not_depend_on_group_size():
    rng = random.Random(3)
    values = [rng.gauss(50.0, 12.0) for _ in range(101)]
    results = [compute_statistics(values, group_size=p) for p in [1, 2, 4, 7]]
    first = results[0]
    for result in results[1:]:
        assert result.mean == pytest.approx(first.mean, rel=1e-9)
        assert result.variance == pytest.approx(first.variance, rel=1e-9)
        assert result.min_abs == first.min_abs
        assert result.max_abs == first.max_abs


def test_more_ranks_than_values():
    result = compute_statistics([-1.0, 3.0], group_size=5)
    assert result.mean == pytest.approx(1.0)
    assert result.variance == pytest.approx(4.0)
    assert (result.min_abs, result.max_abs) == (1.0, 3.0)


@pytest.mark.parametrize("group_size", [1, 3])
def test_empty_dataset_is_undefined_not_an_error(group_size):
    result = compute_statistics([], group_size=group_size)
    assert result.count == 0
    assert all(math.isnan(value) for value in result.as_tuple())
    assert EMPTY_DATASET_WARNING in result.warnings


def test_short_read_warns_and_uses_actual_count():
    source = ListDataSource(TEXTBOOK, declared_count=10)
    result = run_simulation(source, SimulationConfig(group_size=3)).result
    assert result.count == 8
    assert result.declared_count == 10
    assert result.mean == pytest.approx(5.0)
    assert result.warnings == [
        "actual number read (8) differs from header value (10)"
    ]


def test_header_limits_how_many_values_are_read():
    source = ListDataSource(TEXTBOOK, declared_count=3)
    result = run_simulation(source, SimulationConfig(group_size=2)).result
    assert result.count == 3
    assert result.mean == pytest.approx(10.0 / 3.0)
    assert result.warnings == []


@pytest.mark.parametrize("group_size", [1, 2, 3, 5, 8, 13])
@pytest.mark.parametrize("latency", [0.0, 0.25])
def test_matched_calls_always_terminate(group_size, latency):
    values = [float(i) for i in range(-10, 11)]
    config = SimulationConfig(group_size=group_size, latency=latency)
    outcome = run_simulation(ListDataSource(values), config)
    assert outcome.result.mean == pytest.approx(0.0)
    assert outcome.messages_sent == len(PIPELINE_STEPS) * (group_size - 1)


def test_latency_advances_simulated_time():
    config = SimulationConfig(group_size=4, latency=0.5)
    outcome = run_simulation(ListDataSource(TEXTBOOK), config)
    assert outcome.finished_at > 0.0


def test_every_rank_runs_the_same_steps_in_order():
    env = Environment()
    group = SimulatedGroup(env, 4)
    source = ListDataSource(TEXTBOOK)
    workers = [
        RankWorker(env, group.communicator(rank), source if rank == 0 else None)
        for rank in range(4)
    ]
    env.run(until=100)
    raise_failures(workers)

    expected = [step for step, _ in PIPELINE_STEPS]
    assert expected == list(Step)
    for worker in workers:
        assert worker.communicator.completed_steps == expected
    assert workers[0].result.mean == pytest.approx(5.0)
    assert all(worker.result is None for worker in workers[1:])


def test_timings_are_recorded():
    result = compute_statistics(TEXTBOOK, group_size=2)
    assert result.timings.load_seconds >= 0.0
    assert result.timings.compute_seconds >= 0.0
