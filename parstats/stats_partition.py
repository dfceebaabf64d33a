"""Round-robin assignment of dataset indices to ranks."""

from typing import List


def owned_indices(rank: int, group_size: int, n: int) -> range:
    """Indices owned by ``rank``: rank, rank + P, rank + 2P, ... below n.

    A range is lazy and can be iterated any number of times. Ranks at or
    beyond ``n`` get an empty range.
    """
    _check(rank, group_size, n)
    return range(rank, n, group_size)


def partition_size(rank: int, group_size: int, n: int) -> int:
    """Number of indices owned by ``rank`` without walking them."""
    _check(rank, group_size, n)
    if rank >= n:
        return 0
    return (n - rank + group_size - 1) // group_size


def all_partitions(group_size: int, n: int) -> List[range]:
    """Every rank's partition, indexed by rank."""
    return [owned_indices(rank, group_size, n) for rank in range(group_size)]


def _check(rank: int, group_size: int, n: int):
    if group_size < 1:
        raise ValueError(f"group size must be at least 1, got {group_size}")
    if not 0 <= rank < group_size:
        raise ValueError(f"rank {rank} outside group of size {group_size}")
    if n < 0:
        raise ValueError(f"dataset size must be non-negative, got {n}")
