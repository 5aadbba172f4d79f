"""Metrics utilities for link simulation.

This module provides functions for deriving system-level and per-source
metrics from a finished run, including utilization, delay, drop probability
and Jain's fairness index, and for saving them to JSON and CSV files.
"""

import csv
import json
import os
from typing import Any, Dict, List, Sequence

from linksim.core.enums import Discipline
from linksim.core.stats import StatisticsSnapshot


def calculate_fairness_index(throughputs: Sequence[float]) -> float:
    """Calculate Jain's fairness index.

    Args:
        throughputs: Allocation of each participant.

    Returns:
        Fairness index between 1/n and 1 (1 is perfectly fair), or 0 when
        every allocation is zero.
    """
    n = len(throughputs)

    if n == 0:
        return 0.0

    sum_throughput = sum(throughputs)
    sum_squared = sum(x**2 for x in throughputs)

    if sum_squared == 0:
        return 0.0

    return (sum_throughput**2) / (n * sum_squared)


def fairness_allocations(snapshot: StatisticsSnapshot) -> List[float]:
    """Per-source allocations fed into the fairness index.

    Under WFQ each source's transmitted bytes are divided by its weight, so
    a perfectly weighted share scores 1.

    Args:
        snapshot: Finished run statistics.

    Returns:
        One allocation per source.
    """
    if snapshot.discipline is not Discipline.WFQ:
        return [s.bytes_transmitted for s in snapshot.sources]
    return [
        s.bytes_transmitted / w if w > 0 else 0.0
        for s, w in zip(snapshot.sources, snapshot.weights)
    ]


def calculate_metrics(snapshot: StatisticsSnapshot) -> Dict[str, Any]:
    """Calculate performance metrics of a finished run.

    Args:
        snapshot: Finished run statistics.

    Returns:
        Dictionary of system-level metrics with a ``sources`` list holding
        per-source metrics.
    """
    generated = snapshot.total("generated")
    transmitted = snapshot.total("transmitted")
    dropped = snapshot.total("dropped")
    total_bytes = snapshot.total("bytes_transmitted")
    total_delay = snapshot.total("total_delay")

    sources = []
    for i, (stats, weight) in enumerate(zip(snapshot.sources, snapshot.weights)):
        sources.append(
            {
                "source": i,
                "weight": weight,
                "generated": stats.generated,
                "transmitted": stats.transmitted,
                "dropped": stats.dropped,
                "backlog": stats.backlog,
                "drop_rate": stats.drop_rate,
                "average_delay": stats.average_delay,
                "throughput": stats.bytes_transmitted / snapshot.simulation_time,
            }
        )

    return {
        "discipline": snapshot.discipline.name,
        "utilization": total_bytes / snapshot.link_capacity / snapshot.simulation_time,
        "average_delay": total_delay / transmitted if transmitted > 0 else 0.0,
        "drop_probability": dropped / generated if generated > 0 else 0.0,
        "fairness_index": calculate_fairness_index(fairness_allocations(snapshot)),
        "throughput": total_bytes / snapshot.simulation_time,
        "generated": generated,
        "transmitted": transmitted,
        "dropped": dropped,
        "sources": sources,
    }


def save_metrics_to_json(
    metrics: Dict[str, Any], filename: str = "results/metrics.json"
) -> None:
    """Save metrics to a JSON file.

    Args:
        metrics: Dictionary of metrics to save.
        filename: Output filename.
    """
    directory = os.path.dirname(filename)
    if directory:
        os.makedirs(directory, exist_ok=True)

    with open(filename, "w") as f:
        json.dump(metrics, f, indent=2)


def save_metrics_to_csv(
    metrics_list: List[Dict[str, Any]],
    filename: str = "results/metrics_comparison.csv",
) -> None:
    """Save a comparison of metrics from several runs to a CSV file.

    Args:
        metrics_list: Metrics dictionaries as returned by calculate_metrics,
            optionally carrying a ``buffer_size`` entry.
        filename: Output filename.
    """
    directory = os.path.dirname(filename)
    if directory:
        os.makedirs(directory, exist_ok=True)

    with open(filename, "w", newline="") as f:
        writer = csv.writer(f)

        writer.writerow(
            [
                "Discipline",
                "Buffer Size",
                "Utilization",
                "Average Delay",
                "Drop Probability",
                "Fairness Index",
            ]
        )

        for metrics in metrics_list:
            writer.writerow(
                [
                    metrics["discipline"],
                    metrics.get("buffer_size", ""),
                    metrics["utilization"],
                    metrics["average_delay"],
                    metrics["drop_probability"],
                    metrics["fairness_index"],
                ]
            )
