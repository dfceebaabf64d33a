"""Errors raised by the statistics pipeline and its process groups."""

from typing import List


class StatsError(Exception):
    """Base class for all pipeline errors."""


class StartupFailure(StatsError):
    """The process group or the data source could not be set up."""


class AllocationFailure(StartupFailure):
    """Memory for the dataset could not be reserved."""


class RankFailure(StatsError):
    """A rank hit an unexpected error part way through the pipeline."""


class GroupAborted(StatsError):
    """Another rank aborted the group."""

    def __init__(self, source: int, reason: str):
        super().__init__(f"group aborted by rank {source}: {reason}")
        self.source = source
        self.reason = reason


class CollectiveMismatch(StatsError):
    """Ranks issued different collective steps at the same position."""


class DeadlockDetected(StatsError):
    """Some ranks were still blocked when the simulation ran out of events."""

    def __init__(self, blocked_ranks: List[int]):
        ranks = ", ".join(str(r) for r in blocked_ranks)
        super().__init__(f"ranks still blocked in a collective: {ranks}")
        self.blocked_ranks = blocked_ranks
