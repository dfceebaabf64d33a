"""Core data structures for the parallel statistics pipeline."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple
import math

COORDINATOR = 0


class ReduceOp(Enum):
    """Associative, commutative reduction operators."""

    SUM = "sum"
    MIN = "min"
    MAX = "max"

    @property
    def identity(self) -> float:
        """Value that leaves any other value unchanged under this operator."""
        return _IDENTITIES[self]

    def combine(self, left: float, right: float) -> float:
        return _COMBINERS[self](left, right)


_IDENTITIES: Dict[ReduceOp, float] = {
    ReduceOp.SUM: 0.0,
    ReduceOp.MIN: math.inf,
    ReduceOp.MAX: -math.inf,
}

_COMBINERS: Dict[ReduceOp, Callable[[float, float], float]] = {
    ReduceOp.SUM: lambda a, b: a + b,
    ReduceOp.MIN: min,
    ReduceOp.MAX: max,
}


class Step(Enum):
    """Collective steps of the pipeline, in the order every rank runs them."""

    BROADCAST_SIZE = "broadcast-size"
    BROADCAST_DATA = "broadcast-data"
    REDUCE_SUM = "reduce-sum"
    BROADCAST_MEAN = "broadcast-mean"
    REDUCE_SUM_SQ_DEV = "reduce-sumsqdev"
    REDUCE_MIN_ABS = "reduce-min"
    REDUCE_MAX_ABS = "reduce-max"

    def __str__(self):
        return self.value


@dataclass
class CollectiveMessage:
    """One rank's contribution to one collective step."""

    sequence: int
    step: Step
    source: int
    payload: Any

    def __str__(self):
        return f"Msg(#{self.sequence} {self.step} from {self.source})"


@dataclass
class AbortMessage:
    """Tells a rank that the group is being torn down."""

    source: int
    reason: str


@dataclass
class Timings:
    """Wall-clock measurements taken on the coordinator."""

    load_seconds: float = 0.0
    compute_seconds: float = 0.0


@dataclass
class StatisticsResult:
    """Final statistics, available on the coordinator only."""

    count: int
    declared_count: int
    mean: float
    variance: float
    min_abs: float
    max_abs: float
    warnings: List[str] = field(default_factory=list)
    timings: Timings = field(default_factory=Timings)

    def as_tuple(self) -> Tuple[float, float, float, float]:
        return (self.mean, self.variance, self.min_abs, self.max_abs)

    def __str__(self):
        return (
            f"Stats(n={self.count}, mean={self.mean:.6f}, "
            f"variance={self.variance:.6f}, "
            f"min_abs={self.min_abs:.6f}, max_abs={self.max_abs:.6f})"
        )


@dataclass(frozen=True)
class PipelineState:
    """Values handed from one pipeline step to the next on a single rank.

    Each step returns a new state; ``total`` and ``sum_sq_dev`` and the
    min/max fields are only meaningful on the coordinator.
    """

    rank: int
    group_size: int
    declared_count: int = 0
    n: int = 0
    data: Tuple[float, ...] = ()
    warnings: Tuple[str, ...] = ()
    total: Optional[float] = math.nan
    mean: float = math.nan
    sum_sq_dev: Optional[float] = math.nan
    min_abs: Optional[float] = math.nan
    max_abs: Optional[float] = math.nan
    load_seconds: float = 0.0
    compute_started: Optional[float] = None

    @property
    def is_coordinator(self) -> bool:
        return self.rank == COORDINATOR
