"""Text reports for finished link simulation runs."""

import os
from typing import Any, Dict, Optional

from linksim.core.stats import StatisticsSnapshot
from linksim.utils.metrics import calculate_metrics

RULE = "-" * 87


def format_report(
    snapshot: StatisticsSnapshot, metrics: Optional[Dict[str, Any]] = None
) -> str:
    """Render the system-level metrics and the per-source table.

    Args:
        snapshot: Finished run statistics.
        metrics: Precomputed metrics for the snapshot, if available.

    Returns:
        The report text, ending with a newline.
    """
    if metrics is None:
        metrics = calculate_metrics(snapshot)

    lines = [
        f"## System-Level Performance Metrics ({metrics['discipline']})",
        f"1. Server Utilization:   {metrics['utilization']:.6f}",
        f"2. Avg. Packet Delay:    {metrics['average_delay']:.6f} s",
        f"3. Packet Drop Prob.:    {metrics['drop_probability']:.6f}",
        f"4. Fairness Index:       {metrics['fairness_index']:.6f}",
        "",
        "## Per-Source Statistics",
        RULE,
        "Src | Weight | Gen'd Pkts | Trans'd Pkts | Drop'd Pkts | Drop Rate | Avg Delay (s) | Thruput (B/s)",
        RULE,
    ]
    for source in metrics["sources"]:
        lines.append(
            f"{source['source']:>3} | "
            f"{source['weight']:>6.6g} | "
            f"{source['generated']:>10} | "
            f"{source['transmitted']:>12} | "
            f"{source['dropped']:>11} | "
            f"{source['drop_rate']:>9.4f} | "
            f"{source['average_delay']:>13.6f} | "
            f"{source['throughput']:>13.2f}"
        )
    lines.append(RULE)
    return "\n".join(lines) + "\n"


def output_filename(input_filename: str, discipline: str, output_dir: str = ".") -> str:
    """Name of the report file for one input and discipline.

    Args:
        input_filename: Path of the configuration file.
        discipline: Discipline name, e.g. "FCFS".
        output_dir: Directory the report goes into.

    Returns:
        ``<output_dir>/<discipline>_output_<input basename>``.
    """
    name = f"{discipline.lower()}_output_{os.path.basename(input_filename)}"
    return os.path.join(output_dir, name)


def write_report(report: str, filename: str) -> None:
    """Write a rendered report to disk, creating the directory if needed.

    Args:
        report: Report text.
        filename: Output path.
    """
    directory = os.path.dirname(filename)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(filename, "w") as f:
        f.write(report)
