"""
Main orchestration script for the conveyor sorting simulation.
Runs one or more seeded lines and generates reports.
"""

import argparse
from pathlib import Path
import sys

# Ensure root directory is in path for config import
root_dir = Path(__file__).parent.parent
sys.path.insert(0, str(root_dir))

import numpy as np
import config
from src.conveyor_model import SortingLine
from src.event_log import EventLog
from src.metrics import MetricsComputer
from src.parameters import SorterParameters


def run_single_simulation(run_id: int = 0, make_plots: bool = True) -> dict:
    """Run a single seeded sorting line.

    Args:
        run_id: Identifier for this run (offsets the seed)
        make_plots: Whether to write figures

    Returns:
        Dictionary with results
    """
    seed = config.RANDOM_SEED_BASE + run_id
    params = SorterParameters(seed=seed)

    event_log = EventLog(output_dir=config.LOG_DIR, run_id=f"run{run_id}")
    line = SortingLine(params, event_log=event_log)

    print(f"[Run {run_id}] Starting simulation (seed={seed})...")
    line.run()
    print(f"[Run {run_id}] Simulation complete.")

    metrics_computer = MetricsComputer(
        metrics=line.metrics,
        event_log=event_log,
        params=params,
        history=line.history,
        output_dir=config.REPORT_DIR,
        run_id=f"run{run_id}",
    )

    report = metrics_computer.generate_report()
    metrics_computer.save_report_json(report)
    if make_plots:
        metrics_computer.plot_cumulative_counts()
        metrics_computer.plot_actuator_activity()

    summary = report["summary"]
    print(
        f"[Run {run_id}] Spawned={summary['total_spawned']} | Sorted={summary['sorted']} | "
        f"Missed={summary['missed']} | FP={summary['false_positives']} | "
        f"FN={summary['false_negatives']} | Utilization={summary['utilization_pct']:.2f}%"
    )

    return report


def _print_stats(title: str, values, unit: str = "%"):
    print(f"\n{title}:")
    print(f"  Mean: {np.mean(values):.2f}{unit}")
    print(f"  Std:  {np.std(values):.2f}{unit}")
    print(f"  Min:  {np.min(values):.2f}{unit}")
    print(f"  Max:  {np.max(values):.2f}{unit}")


def run_batch_simulation(num_seeds: int = config.NUM_SEEDS, make_plots: bool = True):
    """Run multiple simulations with different seeds.

    Args:
        num_seeds: Number of independent runs
        make_plots: Whether to write figures for every run
    """
    print("Conveyor Sorting Simulation")
    print("=" * 50)
    print("Configuration:")
    print(f"  Simulated time: {config.T_SIM} s (dt={config.DT} s)")
    print(f"  Belt speed: {config.OBJECT_SPEED} units/s")
    print(f"  Spawn rate: {config.SPAWN_RATE} /s (min gap {config.MIN_INTERARRIVAL} s)")
    print(f"  Sensor: range={config.SENSOR_RANGE}, FN={config.FALSE_NEG_RATE}, "
          f"FP={config.FALSE_POS_RATE}/s")
    print(f"  Actuator: reaction={config.REACTION_DELAY} s, stroke={config.STROKE_DURATION} s")
    print(f"  Number of runs: {num_seeds}")
    print("=" * 50)

    all_reports = []

    for run_id in range(num_seeds):
        print(f"\n--- Run {run_id + 1}/{num_seeds} ---")
        report = run_single_simulation(run_id, make_plots=make_plots)
        all_reports.append(report)

    print(f"\n{'=' * 50}")
    print("SUMMARY")
    print(f"{'=' * 50}")

    sort_rates = [r["throughput"]["sort_rate"] * 100 for r in all_reports]
    miss_rates = [r["throughput"]["miss_rate"] * 100 for r in all_reports]
    utilizations = [r["summary"]["utilization_pct"] for r in all_reports]
    empty_cycles = [r["detection"]["empty_cycles"] for r in all_reports]

    _print_stats("Sort Rate (%)", sort_rates)
    _print_stats("Miss Rate (%)", miss_rates)
    _print_stats("Actuator Utilization (%)", utilizations)
    _print_stats("Empty Actuator Cycles", empty_cycles, unit="")

    print(f"\n{'=' * 50}")
    print("Outputs:")
    print(f"  Event logs: {config.LOG_DIR}")
    print(f"  Reports:   {config.REPORT_DIR}")
    print(f"  Plots:     {config.PLOT_DIR}")
    print(f"{'=' * 50}")

    return all_reports


def main():
    """Entry point for the simulation."""
    ap = argparse.ArgumentParser(description="Conveyor sorting line simulation")
    ap.add_argument("--seeds", type=int, default=config.NUM_SEEDS,
                    help="Number of independent seeded runs.")
    ap.add_argument("--no-plots", action="store_true", help="Skip writing figures.")
    args = ap.parse_args()

    run_batch_simulation(num_seeds=args.seeds, make_plots=not args.no_plots)


if __name__ == "__main__":
    main()
