"""Process that runs the statistics pipeline for one simulated rank."""

from asimpy import Process
from typing import List, Optional, Tuple
from stats_collective import SimulatedCommunicator
from stats_errors import StatsError
from stats_pipeline import StepFn, run_pipeline
from stats_source import DataSource
from stats_types import StatisticsResult, Step


class RankWorker(Process):
    """One member of a simulated process group."""

    def init(
        self,
        communicator: SimulatedCommunicator,
        source: Optional[DataSource] = None,
        steps: Optional[List[Tuple[Step, StepFn]]] = None,
    ):
        self.communicator = communicator
        self.rank = communicator.rank
        self.source = source
        self.steps = steps

        # Outcome
        self.result: Optional[StatisticsResult] = None
        self.error: Optional[StatsError] = None
        self.finished = False
        self.finished_at: Optional[float] = None

    async def run(self):
        """Run every pipeline step, then record how it went."""
        print(
            f"[{self.now:.1f}] Rank {self.rank}: "
            f"joining group of {self.communicator.size}"
        )

        try:
            self.result = await run_pipeline(self.communicator, self.source, self.steps)
        except StatsError as exc:
            self.error = exc
            print(f"[{self.now:.1f}] Rank {self.rank}: stopped: {exc}")
            return

        self.finished = True
        self.finished_at = self.now
        print(
            f"[{self.now:.1f}] Rank {self.rank}: "
            f"completed {len(self.communicator.completed_steps)} steps"
        )

    @property
    def blocked(self) -> bool:
        """Still waiting inside a collective call."""
        return not self.finished and self.error is None
