"""Partial aggregates computed by one rank over its own partition.

Nothing here communicates. Each function walks the owned indices in
ascending order and returns the identity of its operator when the
partition is empty, so empty ranks can still join a reduction.
"""

from typing import Iterable, Sequence
from stats_types import ReduceOp


def local_sum(data: Sequence[float], indices: Iterable[int]) -> float:
    total = ReduceOp.SUM.identity
    for i in indices:
        total += data[i]
    return total


def local_sum_sq_dev(
    data: Sequence[float], indices: Iterable[int], mean: float
) -> float:
    """Sum of squared deviations from an already agreed global mean."""
    total = ReduceOp.SUM.identity
    for i in indices:
        deviation = data[i] - mean
        total += deviation * deviation
    return total


def local_min_abs(data: Sequence[float], indices: Iterable[int]) -> float:
    smallest = ReduceOp.MIN.identity
    for i in indices:
        value = abs(data[i])
        if value < smallest:
            smallest = value
    return smallest


def local_max_abs(data: Sequence[float], indices: Iterable[int]) -> float:
    largest = ReduceOp.MAX.identity
    for i in indices:
        value = abs(data[i])
        if value > largest:
            largest = value
    return largest
