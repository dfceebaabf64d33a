"""Broadcast and reduce over a simulated group of ranks.

Each rank has an inbox queue. Every collective call on a rank takes the
next sequence number, and every message is tagged with that number, the
step name and the sender. Ranks can drift apart by several steps, so a
receiver stashes messages that belong to later steps until it gets there.
"""

from asimpy import Environment, Queue
from typing import Any, Dict, List, Optional, Tuple
import time
from stats_errors import CollectiveMismatch, GroupAborted, StartupFailure
from stats_types import COORDINATOR, AbortMessage, CollectiveMessage, ReduceOp, Step


class SimulatedGroup:
    """A fixed set of ranks connected by per-rank inboxes."""

    def __init__(self, env: Environment, group_size: int, latency: float = 0.0):
        if group_size < 1:
            raise StartupFailure(f"cannot create a group of {group_size} ranks")
        if latency < 0:
            raise StartupFailure(f"latency must be non-negative, got {latency}")
        self.env = env
        self.size = group_size
        self.latency = latency
        self.inboxes: List[Queue] = [Queue(env) for _ in range(group_size)]
        self.communicators = [
            SimulatedCommunicator(self, rank) for rank in range(group_size)
        ]
        self.aborted_by: Optional[int] = None

        # Statistics
        self.messages_sent = 0

    def communicator(self, rank: int) -> "SimulatedCommunicator":
        """The communication endpoint for one rank."""
        return self.communicators[rank]

    async def deliver(self, dest: int, message: Any):
        """Put a message in a rank's inbox after the configured delay."""
        if self.latency > 0:
            await self.env.timeout(self.latency)
        self.messages_sent += 1
        await self.inboxes[dest].put(message)


class SimulatedCommunicator:
    """Collective operations as seen by a single rank."""

    def __init__(self, group: SimulatedGroup, rank: int):
        self.group = group
        self.rank = rank
        self.size = group.size
        self.completed_steps: List[Step] = []
        self._sequence = 0
        self._stash: Dict[Tuple[int, int], CollectiveMessage] = {}

    @property
    def is_coordinator(self) -> bool:
        return self.rank == COORDINATOR

    def wtime(self) -> float:
        return time.perf_counter()

    def log(self, text: str):
        print(f"[{self.group.env.now:.1f}] Rank {self.rank}: {text}")

    async def broadcast(self, value: Any, step: Step, source: int = COORDINATOR) -> Any:
        """Send ``value`` from ``source`` to every rank; all ranks return it."""
        sequence = self._next_sequence()
        if self.rank == source:
            for dest in range(self.size):
                if dest != self.rank:
                    await self.group.deliver(
                        dest, CollectiveMessage(sequence, step, self.rank, value)
                    )
            result = value
        else:
            message = await self._receive(sequence, step, source)
            result = message.payload
        self.completed_steps.append(step)
        return result

    async def reduce(
        self, value: float, op: ReduceOp, step: Step, destination: int = COORDINATOR
    ) -> Optional[float]:
        """Combine one value per rank; only ``destination`` gets the result."""
        sequence = self._next_sequence()
        if self.rank != destination:
            await self.group.deliver(
                destination, CollectiveMessage(sequence, step, self.rank, value)
            )
            self.completed_steps.append(step)
            return None

        contributions = {self.rank: value}
        while len(contributions) < self.size:
            message = await self._receive(sequence, step)
            contributions[message.source] = message.payload

        # Combine in rank order so arrival order cannot change a sum.
        result = op.identity
        for rank in sorted(contributions):
            result = op.combine(result, contributions[rank])
        self.completed_steps.append(step)
        return result

    async def abort(self, error: Exception):
        """Tear the group down; every other rank raises GroupAborted."""
        self.log(f"aborting group: {error}")
        self.group.aborted_by = self.rank
        for dest in range(self.size):
            if dest != self.rank:
                await self.group.inboxes[dest].put(AbortMessage(self.rank, str(error)))

    def _next_sequence(self) -> int:
        sequence = self._sequence
        self._sequence += 1
        return sequence

    async def _receive(
        self, sequence: int, step: Step, source: Optional[int] = None
    ) -> CollectiveMessage:
        message = self._take_stashed(sequence, step, source)
        while message is None:
            incoming = await self.group.inboxes[self.rank].get()
            if isinstance(incoming, AbortMessage):
                raise GroupAborted(incoming.source, incoming.reason)
            if incoming.sequence == sequence and source in (None, incoming.source):
                self._check(incoming, sequence, step)
                message = incoming
            elif incoming.sequence < sequence:
                raise CollectiveMismatch(
                    f"rank {self.rank} at {step} (#{sequence}) got stale {incoming}"
                )
            else:
                self._stash[(incoming.sequence, incoming.source)] = incoming
        return message

    def _take_stashed(
        self, sequence: int, step: Step, source: Optional[int]
    ) -> Optional[CollectiveMessage]:
        for key in sorted(self._stash):
            stashed_sequence, stashed_source = key
            if stashed_sequence == sequence and source in (None, stashed_source):
                message = self._stash.pop(key)
                self._check(message, sequence, step)
                return message
        return None

    def _check(self, message: CollectiveMessage, sequence: int, step: Step):
        if message.step != step:
            raise CollectiveMismatch(
                f"rank {self.rank} expected {step} at #{sequence}, "
                f"rank {message.source} sent {message.step}"
            )
