"""Tests for round-robin index partitioning."""

import pytest
from stats_partition import all_partitions, owned_indices, partition_size


@pytest.mark.parametrize("n", [0, 1, 5, 8, 13, 100])
@pytest.mark.parametrize("group_size", [1, 2, 3, 4, 7, 16])
def test_partitions_cover_every_index_exactly_once(n, group_size):
    seen = []
    for indices in all_partitions(group_size, n):
        seen.extend(indices)
    assert sorted(seen) == list(range(n))
    assert len(seen) == len(set(seen))


def test_indices_are_strided_by_group_size():
    assert list(owned_indices(1, 3, 10)) == [1, 4, 7]
    assert list(owned_indices(0, 3, 10)) == [0, 3, 6, 9]


def test_ranks_beyond_dataset_own_nothing():
    assert list(owned_indices(5, 8, 3)) == []
    assert partition_size(5, 8, 3) == 0


def test_partition_can_be_walked_twice():
    indices = owned_indices(2, 4, 11)
    assert list(indices) == list(indices) == [2, 6, 10]


@pytest.mark.parametrize("n", [0, 1, 6, 7, 29])
def test_partition_size_matches_indices(n):
    for rank in range(5):
        assert partition_size(rank, 5, n) == len(list(owned_indices(rank, 5, n)))


def test_load_differs_by_at_most_one():
    sizes = [len(p) for p in all_partitions(7, 100)]
    assert max(sizes) - min(sizes) <= 1


@pytest.mark.parametrize(
    "rank, group_size, n",
    [(0, 0, 5), (3, 3, 5), (-1, 3, 5), (0, 2, -1)],
)
def test_invalid_arguments_rejected(rank, group_size, n):
    with pytest.raises(ValueError):
        owned_indices(rank, group_size, n)
