"""What happens to the group when something goes wrong."""

from asimpy import Environment
from stats_collective import SimulatedGroup
from stats_errors import StatsError
from stats_pipeline import PIPELINE_STEPS
from stats_simulation import raise_failures, run_simulation
from stats_source import FileDataSource, ListDataSource
from stats_worker import RankWorker


def run_missing_file():
    """The coordinator cannot open its file and aborts every rank."""
    print("=== Missing data file ===")
    try:
        run_simulation(FileDataSource("no-such-file.txt"))
    except StatsError as exc:
        print(f"Run failed: {exc}")


def run_skipped_step():
    """One rank skips the last reduction and the coordinator waits forever."""
    print("\n=== Rank 2 skips the final reduction ===")
    env = Environment()
    group = SimulatedGroup(env, 3)
    source = ListDataSource([1.0, -2.0, 3.0, -4.0])

    workers = [
        RankWorker(env, group.communicator(0), source),
        RankWorker(env, group.communicator(1)),
        RankWorker(env, group.communicator(2), None, PIPELINE_STEPS[:-1]),
    ]

    env.run(until=50)

    try:
        raise_failures(workers)
    except StatsError as exc:
        print(f"Run failed: {exc}")


if __name__ == "__main__":
    run_missing_file()
    run_skipped_step()
