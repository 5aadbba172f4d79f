import argparse
import logging
import os
import sys
from dataclasses import replace

from linksim.config import load_config, validate_config
from linksim.core.enums import Discipline
from linksim.core.simulator import LinkSimulator
from linksim.utils.metrics import (
    calculate_metrics,
    save_metrics_to_csv,
    save_metrics_to_json,
)
from linksim.utils.report import format_report, output_filename, write_report
from linksim.utils.sweep import buffer_sweep


def selected_disciplines(name):
    """
    Disciplines to run for a --discipline choice

    Args:
        name: "fcfs", "wfq" or "both"

    Returns:
        List of Discipline values
    """
    if name == "both":
        return [Discipline.FCFS, Discipline.WFQ]
    return [Discipline.parse(name)]


def run_discipline(config, discipline, args):
    """
    Run one simulation, print its report and write it next to the results

    Args:
        config: Validated SimulationConfig
        discipline: Discipline to simulate
        args: Parsed command line arguments

    Returns:
        Metrics dictionary of the run
    """
    snapshot = LinkSimulator(config, discipline, args.seed).run()
    metrics = calculate_metrics(snapshot)
    report = format_report(snapshot, metrics)

    filename = output_filename(args.config, discipline.name, args.output_dir)
    write_report(report, filename)

    print(f"\n--- {discipline.name} Results for {args.config} ---")
    print(report)
    print(f"Full results written to {filename}")

    if args.json:
        json_filename = os.path.join(
            args.output_dir, f"{discipline.name.lower()}_metrics.json"
        )
        save_metrics_to_json(metrics, json_filename)
        print(f"Metrics saved to {json_filename}")

    return metrics


def run_sweep(config, disciplines, args):
    """Run the buffer size sweep and save its comparison table"""
    print(f"\n=== Buffer Sweep over {args.sweep_buffers} ===")
    results = buffer_sweep(config, args.sweep_buffers, disciplines, args.seed)

    for metrics in results:
        print(
            f"{metrics['discipline']:>4} buffer={metrics['buffer_size']:<5} "
            f"util={metrics['utilization']:.4f} "
            f"delay={metrics['average_delay']:.6f}s "
            f"drop={metrics['drop_probability']:.4f} "
            f"fairness={metrics['fairness_index']:.4f}"
        )

    csv_filename = os.path.join(args.output_dir, "buffer_sweep.csv")
    save_metrics_to_csv(results, csv_filename)
    print(f"Sweep results saved to {csv_filename}")
    return results


def main(argv=None):
    """Main function to run simulations"""
    parser = argparse.ArgumentParser(
        description="Single-link FCFS/WFQ packet scheduling simulator"
    )
    parser.add_argument("config", help="Configuration file (text or .json)")
    parser.add_argument(
        "--discipline",
        choices=["fcfs", "wfq", "both"],
        default="both",
        help="Scheduling discipline to simulate",
    )
    parser.add_argument("--seed", type=int, default=42, help="Random seed")
    parser.add_argument(
        "--output-dir", default=".", help="Directory for reports and plots"
    )
    parser.add_argument("--json", action="store_true", help="Save metrics as JSON")
    parser.add_argument("--plot", action="store_true", help="Plot the results")
    parser.add_argument(
        "--sweep-buffers",
        type=int,
        nargs="+",
        metavar="N",
        help="Also run every discipline for each of these buffer sizes",
    )
    parser.add_argument("--verbose", action="store_true", help="Log run progress")

    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    result = load_config(args.config)
    disciplines = selected_disciplines(args.discipline)
    errors = list(result.errors)
    if result.config is not None and not errors:
        for discipline in disciplines:
            errors.extend(validate_config(result.config, discipline))
            for buffer_size in args.sweep_buffers or []:
                errors.extend(
                    validate_config(replace(result.config, buffer_size=buffer_size), discipline)
                )
    if errors:
        print(f"Fatal Error: {'; '.join(dict.fromkeys(errors))}", file=sys.stderr)
        return 1

    config = result.config
    metrics_by_discipline = {
        discipline: run_discipline(config, discipline, args) for discipline in disciplines
    }

    sweep_results = None
    if args.sweep_buffers:
        sweep_results = run_sweep(config, disciplines, args)

    if args.plot:
        from linksim.utils.visualization import plot_buffer_sweep, plot_source_throughput

        plot_source_throughput(metrics_by_discipline, args.output_dir)
        if sweep_results:
            plot_buffer_sweep(sweep_results, args.output_dir)
        print(f"Plots saved to {args.output_dir}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
