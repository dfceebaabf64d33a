"""Run the statistics pipeline on a simulated process group."""

from asimpy import Environment
from dataclasses import dataclass
from typing import Iterable, List, Optional
from stats_collective import SimulatedGroup
from stats_errors import DeadlockDetected, GroupAborted
from stats_source import DataSource, ListDataSource
from stats_types import COORDINATOR, StatisticsResult
from stats_worker import RankWorker


@dataclass
class SimulationConfig:
    """Settings for one simulated run."""

    group_size: int = 4
    latency: float = 0.0  # Per-message delivery delay
    until: float = 1000.0  # Simulated time horizon


@dataclass
class SimulationOutcome:
    """What the coordinator reported, plus group-level statistics."""

    result: StatisticsResult
    finished_at: float
    messages_sent: int


def run_simulation(
    source: DataSource, config: Optional[SimulationConfig] = None
) -> SimulationOutcome:
    """Run one rank per group member until every rank is done or stuck."""
    if config is None:
        config = SimulationConfig()

    env = Environment()
    group = SimulatedGroup(env, config.group_size, latency=config.latency)

    workers = [
        RankWorker(
            env,
            group.communicator(rank),
            source if rank == COORDINATOR else None,
        )
        for rank in range(config.group_size)
    ]

    env.run(until=config.until)

    raise_failures(workers)
    return SimulationOutcome(
        result=workers[COORDINATOR].result,
        finished_at=max(w.finished_at for w in workers),
        messages_sent=group.messages_sent,
    )


def compute_statistics(values: Iterable[float], group_size: int = 4) -> StatisticsResult:
    """Statistics of in-memory values using ``group_size`` simulated ranks."""
    source = ListDataSource(values)
    return run_simulation(source, SimulationConfig(group_size=group_size)).result


def raise_failures(workers: List[RankWorker]):
    """Re-raise the first root-cause error, or report ranks left blocked.

    Ranks that only saw the abort raise GroupAborted; the error of the rank
    that caused the abort is the one worth reporting.
    """
    errors = [w.error for w in workers if w.error is not None]
    root_causes = [e for e in errors if not isinstance(e, GroupAborted)]
    if root_causes:
        raise root_causes[0]
    if errors:
        raise errors[0]

    blocked = [w.rank for w in workers if w.blocked]
    if blocked:
        raise DeadlockDetected(blocked)
