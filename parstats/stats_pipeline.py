"""Two-pass mean and variance plus min/max absolute value.

Every rank runs ``PIPELINE_STEPS`` in the listed order. Each step issues
exactly one collective call, so keeping this list identical on all ranks
is what keeps the group in lock-step. Steps never mutate shared values:
each one takes the rank's current ``PipelineState`` and returns a new one.
"""

from dataclasses import replace
from typing import Any, Awaitable, Callable, List, Optional, Tuple
import math
from stats_aggregator import local_max_abs, local_min_abs, local_sum, local_sum_sq_dev
from stats_errors import (
    CollectiveMismatch,
    GroupAborted,
    RankFailure,
    StartupFailure,
    StatsError,
)
from stats_partition import owned_indices
from stats_source import DataSource, load_dataset
from stats_types import PipelineState, ReduceOp, StatisticsResult, Step, Timings

EMPTY_DATASET_WARNING = "empty dataset: statistics are undefined"

StepFn = Callable[[Any, PipelineState], Awaitable[PipelineState]]


def _owned(state: PipelineState) -> range:
    return owned_indices(state.rank, state.group_size, state.n)


async def _broadcast_size(comm, state: PipelineState) -> PipelineState:
    n = await comm.broadcast(
        state.n if state.is_coordinator else None, Step.BROADCAST_SIZE
    )
    return replace(state, n=n)


async def _broadcast_data(comm, state: PipelineState) -> PipelineState:
    data = await comm.broadcast(
        state.data if state.is_coordinator else None, Step.BROADCAST_DATA
    )
    data = tuple(data)
    if len(data) != state.n:
        raise CollectiveMismatch(
            f"rank {state.rank} received {len(data)} values, expected {state.n}"
        )
    return replace(state, data=data)


async def _reduce_sum(comm, state: PipelineState) -> PipelineState:
    started = comm.wtime()
    partial = local_sum(state.data, _owned(state))
    total = await comm.reduce(partial, ReduceOp.SUM, Step.REDUCE_SUM)
    return replace(state, total=total, compute_started=started)


async def _broadcast_mean(comm, state: PipelineState) -> PipelineState:
    mean = None
    if state.is_coordinator:
        mean = state.total / state.n if state.n > 0 else math.nan
    mean = await comm.broadcast(mean, Step.BROADCAST_MEAN)
    return replace(state, mean=mean)


async def _reduce_sum_sq_dev(comm, state: PipelineState) -> PipelineState:
    partial = local_sum_sq_dev(state.data, _owned(state), state.mean)
    sum_sq_dev = await comm.reduce(partial, ReduceOp.SUM, Step.REDUCE_SUM_SQ_DEV)
    return replace(state, sum_sq_dev=sum_sq_dev)


async def _reduce_min_abs(comm, state: PipelineState) -> PipelineState:
    partial = local_min_abs(state.data, _owned(state))
    min_abs = await comm.reduce(partial, ReduceOp.MIN, Step.REDUCE_MIN_ABS)
    return replace(state, min_abs=min_abs)


async def _reduce_max_abs(comm, state: PipelineState) -> PipelineState:
    partial = local_max_abs(state.data, _owned(state))
    max_abs = await comm.reduce(partial, ReduceOp.MAX, Step.REDUCE_MAX_ABS)
    return replace(state, max_abs=max_abs)


PIPELINE_STEPS: List[Tuple[Step, StepFn]] = [
    (Step.BROADCAST_SIZE, _broadcast_size),
    (Step.BROADCAST_DATA, _broadcast_data),
    (Step.REDUCE_SUM, _reduce_sum),
    (Step.BROADCAST_MEAN, _broadcast_mean),
    (Step.REDUCE_SUM_SQ_DEV, _reduce_sum_sq_dev),
    (Step.REDUCE_MIN_ABS, _reduce_min_abs),
    (Step.REDUCE_MAX_ABS, _reduce_max_abs),
]


async def run_pipeline(
    comm,
    source: Optional[DataSource] = None,
    steps: Optional[List[Tuple[Step, StepFn]]] = None,
) -> Optional[StatisticsResult]:
    """Run the pipeline on one rank.

    Only the coordinator needs a ``source``. Returns the statistics on the
    coordinator and None on every other rank. A fatal error on any rank
    aborts the whole group before it is re-raised.
    """
    if steps is None:
        steps = PIPELINE_STEPS
    state = PipelineState(rank=comm.rank, group_size=comm.size)
    try:
        if state.is_coordinator:
            state = _load(comm, state, source)
        for _, action in steps:
            state = await action(comm, state)
    except GroupAborted:
        raise
    except StatsError as exc:
        await comm.abort(exc)
        raise
    except Exception as exc:
        error = RankFailure(f"rank {comm.rank} failed: {exc!r}")
        await comm.abort(error)
        raise error from exc

    if not state.is_coordinator:
        return None
    return _finish(comm, state)


def _load(comm, state: PipelineState, source: Optional[DataSource]) -> PipelineState:
    if source is None:
        raise StartupFailure("coordinator has no data source")
    started = comm.wtime()
    declared, values, warnings = load_dataset(source)
    comm.log(f"there are allegedly {declared} data points to read")
    load_seconds = comm.wtime() - started
    comm.log(f"{len(values)} data points successfully read [{load_seconds:f} seconds]")
    return replace(
        state,
        declared_count=declared,
        n=len(values),
        data=tuple(values),
        warnings=tuple(warnings),
        load_seconds=load_seconds,
    )


def _finish(comm, state: PipelineState) -> StatisticsResult:
    warnings = list(state.warnings)
    if state.n == 0:
        warnings.append(EMPTY_DATASET_WARNING)
        variance = min_abs = max_abs = math.nan
    else:
        variance = state.sum_sq_dev / state.n
        min_abs = state.min_abs
        max_abs = state.max_abs

    compute_seconds = 0.0
    if state.compute_started is not None:
        compute_seconds = comm.wtime() - state.compute_started

    return StatisticsResult(
        count=state.n,
        declared_count=state.declared_count,
        mean=state.mean,
        variance=variance,
        min_abs=min_abs,
        max_abs=max_abs,
        warnings=warnings,
        timings=Timings(load_seconds=state.load_seconds, compute_seconds=compute_seconds),
    )
