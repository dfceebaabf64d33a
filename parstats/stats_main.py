"""Command-line entry point: statistics of a data file."""

import argparse
import asyncio
import sys
import time
from typing import List, Optional
from stats_errors import StartupFailure, StatsError
from stats_pipeline import run_pipeline
from stats_report import print_report
from stats_simulation import SimulationConfig, run_simulation
from stats_source import FileDataSource
from stats_types import StatisticsResult


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="parstats",
        description="Mean, variance and min/max absolute value of a data file, "
        "computed by a group of cooperating ranks.",
    )
    parser.add_argument("datafile", help="point count followed by the values")
    parser.add_argument(
        "--backend",
        choices=["simulated", "mpi"],
        default="simulated",
        help="simulated ranks in one process, or MPI under mpiexec",
    )
    parser.add_argument(
        "-n",
        "--workers",
        type=int,
        default=4,
        help="number of simulated ranks (ignored with --backend mpi)",
    )
    parser.add_argument(
        "--latency",
        type=float,
        default=0.0,
        help="simulated per-message delay",
    )
    return parser


def run_mpi(path: str) -> Optional[StatisticsResult]:
    """Run this process's share of an MPI job; None except on rank 0."""
    try:
        from stats_mpi import MPICommunicator
    except ImportError as exc:
        raise StartupFailure(
            "the mpi backend needs mpi4py (pip install 'parstats[mpi]')"
        ) from exc

    comm = MPICommunicator()
    source = FileDataSource(path) if comm.is_coordinator else None
    result = asyncio.run(run_pipeline(comm, source))
    comm.log(f"completed [{comm.wtime() - comm.started:f} seconds]")
    return result


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    started = time.perf_counter()

    try:
        if args.backend == "mpi":
            result = run_mpi(args.datafile)
        else:
            config = SimulationConfig(group_size=args.workers, latency=args.latency)
            outcome = run_simulation(FileDataSource(args.datafile), config)
            print(
                f"Group of {config.group_size} finished at simulated time "
                f"{outcome.finished_at:.1f} after {outcome.messages_sent} messages"
            )
            result = outcome.result
    except StatsError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if result is not None:
        print_report(result, total_seconds=time.perf_counter() - started)
    return 0


if __name__ == "__main__":
    sys.exit(main())
