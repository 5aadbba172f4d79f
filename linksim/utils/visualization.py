"""Visualization utilities for link simulation.

This module provides functions for plotting per-source throughput and
buffer sweep results with matplotlib.
"""

import os
from typing import Any, Dict, List, Optional

import matplotlib.pyplot as plt
import numpy as np

from linksim.core.enums import Discipline


def plot_source_throughput(
    metrics_by_discipline: Dict[Discipline, Dict[str, Any]],
    output_dir: Optional[str] = None,
    show=True,
) -> None:
    """Plot per-source throughput and drop rate for each discipline.

    Args:
        metrics_by_discipline: Metrics of each run keyed by discipline.
        output_dir: Directory to save the plot in, or None to show it.
        show: Whether to display the plot when it is not saved.
    """
    fig, axes = plt.subplots(1, 2, figsize=(12, 5))

    disciplines = list(metrics_by_discipline)
    num_sources = max(len(m["sources"]) for m in metrics_by_discipline.values())
    index = np.arange(num_sources)
    bar_width = 0.8 / max(len(disciplines), 1)

    for i, discipline in enumerate(disciplines):
        sources = metrics_by_discipline[discipline]["sources"]
        throughputs = [s["throughput"] / 1000 for s in sources]
        drop_rates = [s["drop_rate"] for s in sources]
        offset = index[: len(sources)] + i * bar_width

        axes[0].bar(offset, throughputs, bar_width, label=discipline.name)
        axes[1].bar(offset, drop_rates, bar_width, label=discipline.name)

    axes[0].set_ylabel("Throughput (KB/s)")
    axes[0].set_title("Per-Source Throughput")
    axes[1].set_ylabel("Drop Rate")
    axes[1].set_title("Per-Source Drop Rate")
    axes[1].set_ylim(0, 1)
    for ax in axes:
        ax.set_xlabel("Source")
        ax.set_xticks(index + bar_width * (len(disciplines) - 1) / 2)
        ax.set_xticklabels([str(i) for i in range(num_sources)])
        ax.legend()

    plt.tight_layout()

    if output_dir:
        os.makedirs(output_dir, exist_ok=True)
        fig.savefig(os.path.join(output_dir, "source_throughput.png"))
        plt.close(fig)
    elif show:
        plt.show()


def plot_buffer_sweep(
    results: List[Dict[str, Any]],
    output_dir: Optional[str] = None,
    show=True,
) -> None:
    """Plot utilization, delay and drop probability against buffer size.

    Args:
        results: Sweep results carrying ``buffer_size`` and ``discipline``.
        output_dir: Directory to save the plot in, or None to show it.
        show: Whether to display the plot when it is not saved.
    """
    fig, axes = plt.subplots(1, 3, figsize=(15, 5))

    panels = [
        ("utilization", "Server Utilization"),
        ("average_delay", "Average Delay (seconds)"),
        ("drop_probability", "Drop Probability"),
    ]

    disciplines = sorted({r["discipline"] for r in results})
    for discipline in disciplines:
        runs = sorted(
            (r for r in results if r["discipline"] == discipline),
            key=lambda r: r["buffer_size"],
        )
        buffer_sizes = [r["buffer_size"] for r in runs]
        for ax, (key, _) in zip(axes, panels):
            ax.plot(buffer_sizes, [r[key] for r in runs], marker="o", label=discipline)

    for ax, (_, label) in zip(axes, panels):
        ax.set_xlabel("Buffer Size (packets)")
        ax.set_ylabel(label)
        ax.legend()

    plt.tight_layout()

    if output_dir:
        os.makedirs(output_dir, exist_ok=True)
        fig.savefig(os.path.join(output_dir, "buffer_sweep.png"))
        plt.close(fig)
    elif show:
        plt.show()
