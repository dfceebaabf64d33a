"""Human-readable report of a finished run."""

from typing import List, Optional
from stats_types import StatisticsResult


def format_report(
    result: StatisticsResult, total_seconds: Optional[float] = None
) -> List[str]:
    """Report lines, warnings first."""
    lines = []
    if result.warnings:
        lines.append("*** WARNING ***")
        for warning in result.warnings:
            lines.append(f" {warning}")
        lines.append("")

    lines.append(
        f"{result.count} data points processed "
        f"(header declared {result.declared_count})"
    )
    lines.append(f"Data read in [{result.timings.load_seconds:f} seconds]")
    lines.append(
        f"Total parallel regions time [{result.timings.compute_seconds:f} seconds]"
    )
    lines.append(
        f"min, max absolute values are: {result.min_abs:f}, {result.max_abs:f}"
    )
    lines.append(f" with mean: {result.mean:f}")
    lines.append(f"The variance is {result.variance:f}")

    if total_seconds is not None:
        lines.append(f"Completed. [{total_seconds:f} seconds]")
    return lines


def print_report(result: StatisticsResult, total_seconds: Optional[float] = None):
    print("\n=== Statistics ===")
    for line in format_report(result, total_seconds):
        print(line)
