"""Statistics of a small dataset computed by four simulated ranks."""

from stats_report import print_report
from stats_simulation import SimulationConfig, run_simulation
from stats_source import ListDataSource


def run_basic_stats():
    """Mean 5, variance 4, min/max absolute value 2 and 9."""
    source = ListDataSource([2.0, 4.0, 4.0, 4.0, 5.0, 5.0, 7.0, 9.0])

    outcome = run_simulation(source, SimulationConfig(group_size=4, latency=0.1))

    print(
        f"\nGroup finished at {outcome.finished_at:.1f} "
        f"after {outcome.messages_sent} messages"
    )
    print_report(outcome.result)


if __name__ == "__main__":
    run_basic_stats()
