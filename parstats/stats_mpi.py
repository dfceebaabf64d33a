"""Collective operations over a real MPI communicator.

Run under ``mpiexec -n P parstats DATAFILE --backend mpi``. MPI matches
collectives by call order, so the step tag is only recorded.
"""

from mpi4py import MPI
from typing import Any, List, Optional
from stats_types import COORDINATOR, ReduceOp, Step

_MPI_OPS = {
    ReduceOp.SUM: MPI.SUM,
    ReduceOp.MIN: MPI.MIN,
    ReduceOp.MAX: MPI.MAX,
}


class MPICommunicator:
    """Collective operations for the calling MPI process."""

    def __init__(self, comm: Optional[MPI.Comm] = None):
        self.comm = comm if comm is not None else MPI.COMM_WORLD
        self.rank = self.comm.Get_rank()
        self.size = self.comm.Get_size()
        self.completed_steps: List[Step] = []
        self.started = MPI.Wtime()

    @property
    def is_coordinator(self) -> bool:
        return self.rank == COORDINATOR

    def wtime(self) -> float:
        return MPI.Wtime()

    def log(self, text: str):
        print(f"[{self.wtime() - self.started:.1f}] Rank {self.rank}: {text}")

    async def broadcast(self, value: Any, step: Step, source: int = COORDINATOR) -> Any:
        result = self.comm.bcast(value, root=source)
        self.completed_steps.append(step)
        return result

    async def reduce(
        self, value: float, op: ReduceOp, step: Step, destination: int = COORDINATOR
    ) -> Optional[float]:
        result = self.comm.reduce(value, op=_MPI_OPS[op], root=destination)
        self.completed_steps.append(step)
        return result

    async def abort(self, error: Exception):
        self.log(f"aborting group: {error}")
        self.comm.Abort(1)
