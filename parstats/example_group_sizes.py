"""Same dataset, different group sizes: same answer, different cost."""

import random
from stats_simulation import SimulationConfig, run_simulation
from stats_source import ListDataSource


def run_group_sizes():
    """Compare results and message counts across group sizes."""
    random.seed(42)
    values = [random.gauss(10.0, 3.0) for _ in range(1000)]
    source = ListDataSource(values)

    rows = []
    for group_size in [1, 2, 4, 7, 16]:
        config = SimulationConfig(group_size=group_size, latency=0.01)
        outcome = run_simulation(source, config)
        rows.append((group_size, outcome))

    print("\n=== Group Size Comparison ===")
    for group_size, outcome in rows:
        result = outcome.result
        print(
            f"P={group_size:2d}: mean={result.mean:.9f} "
            f"variance={result.variance:.9f} "
            f"min_abs={result.min_abs:.6f} max_abs={result.max_abs:.6f} "
            f"messages={outcome.messages_sent} "
            f"finished_at={outcome.finished_at:.2f}"
        )


if __name__ == "__main__":
    run_group_sizes()
