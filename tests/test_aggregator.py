"""Tests for per-rank partial aggregates and reduction operators."""

import math
import random
import pytest
from stats_aggregator import local_max_abs, local_min_abs, local_sum, local_sum_sq_dev
from stats_partition import all_partitions, owned_indices
from stats_types import ReduceOp

DATA = [-3.0, 1.0, -7.5, 2.0]


def test_local_sum_uses_owned_indices_only():
    assert local_sum(DATA, owned_indices(0, 2, 4)) == -10.5
    assert local_sum(DATA, owned_indices(1, 2, 4)) == 3.0


def test_local_sum_sq_dev():
    data = [1.0, 2.0, 3.0]
    assert local_sum_sq_dev(data, range(3), 2.0) == 2.0


def test_local_min_max_abs():
    assert local_min_abs(DATA, range(4)) == 1.0
    assert local_max_abs(DATA, range(4)) == 7.5
    assert local_min_abs(DATA, owned_indices(0, 2, 4)) == 3.0


def test_empty_partition_returns_identities():
    empty = owned_indices(6, 8, 4)
    assert local_sum(DATA, empty) == 0.0
    assert local_sum_sq_dev(DATA, empty, 1.5) == 0.0
    assert local_min_abs(DATA, empty) == math.inf
    assert local_max_abs(DATA, empty) == -math.inf


def test_identities_leave_values_unchanged():
    for op in ReduceOp:
        assert op.combine(op.identity, -2.5) == -2.5


def test_combine():
    assert ReduceOp.SUM.combine(1.5, 2.0) == 3.5
    assert ReduceOp.MIN.combine(1.5, 2.0) == 1.5
    assert ReduceOp.MAX.combine(1.5, 2.0) == 2.0


@pytest.mark.parametrize("group_size", [1, 2, 3, 5, 8, 64])
def test_combined_partial_sums_match_sequential_sum(group_size):
    rng = random.Random(7)
    data = [rng.uniform(1.0, 100.0) for _ in range(500)]
    total = ReduceOp.SUM.identity
    for indices in all_partitions(group_size, len(data)):
        total = ReduceOp.SUM.combine(total, local_sum(data, indices))
    assert total == pytest.approx(math.fsum(data), rel=1e-9)
