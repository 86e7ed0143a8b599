"""
Metrics for the sorting line.
Run counters written by the simulation components, plus report and
figure generation from a finished run.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple
import numpy as np
import pandas as pd
import matplotlib.pyplot as plt
import config
from src.estimator import SpawnProcessEstimator


@dataclass(frozen=True)
class MetricsSnapshot:
    """Read-only copy of the counters at one instant."""
    total_spawned: int
    sorted_count: int
    missed_count: int
    false_positive_count: int
    false_negative_count: int
    actuator_cycles: int
    actuator_busy_time: float
    latencies: Tuple[float, ...]


@dataclass
class Metrics:
    """Process counters for one run. Each component writes its own fields."""
    total_spawned: int = 0
    sorted_count: int = 0
    missed_count: int = 0
    false_positive_count: int = 0
    false_negative_count: int = 0
    actuator_cycles: int = 0
    actuator_busy_time: float = 0.0
    latencies: List[float] = field(default_factory=list)

    def in_flight(self) -> int:
        """Objects spawned but not yet sorted or missed."""
        return self.total_spawned - self.sorted_count - self.missed_count

    def utilization_pct(self, total_sim_time: float) -> float:
        if total_sim_time <= 0:
            return 0.0
        return self.actuator_busy_time / total_sim_time * 100

    def snapshot(self) -> MetricsSnapshot:
        return MetricsSnapshot(
            total_spawned=self.total_spawned,
            sorted_count=self.sorted_count,
            missed_count=self.missed_count,
            false_positive_count=self.false_positive_count,
            false_negative_count=self.false_negative_count,
            actuator_cycles=self.actuator_cycles,
            actuator_busy_time=self.actuator_busy_time,
            latencies=tuple(self.latencies),
        )

    def summary(self, total_sim_time: float) -> Dict:
        """End-of-run totals and actuator utilization."""
        return {
            "total_spawned": self.total_spawned,
            "sorted": self.sorted_count,
            "missed": self.missed_count,
            "in_flight": self.in_flight(),
            "false_positives": self.false_positive_count,
            "false_negatives": self.false_negative_count,
            "actuator_cycles": self.actuator_cycles,
            "actuator_busy_time": self.actuator_busy_time,
            "utilization_pct": self.utilization_pct(total_sim_time),
            "mean_latency": float(np.mean(self.latencies)) if self.latencies else 0.0,
        }


class MetricsComputer:
    """Compute performance metrics and generate reports."""

    def __init__(
        self,
        metrics: Metrics,
        event_log,
        params,
        history: Optional[List] = None,
        output_dir: str = config.REPORT_DIR,
        run_id: str = "default",
    ):
        """Initialize metrics computer.

        Args:
            metrics: Final counters of the run
            event_log: EventLog of the run
            params: SorterParameters the run used
            history: Recorded step snapshots
            output_dir: Output directory for reports
            run_id: Identifier for this run
        """
        self.metrics = metrics
        self.event_log = event_log
        self.params = params
        self.history = history or []
        self.output_dir = Path(output_dir)
        self.run_id = run_id

    def compute_throughput(self) -> Dict[str, float]:
        """Objects handled per unit time."""
        duration = self.params.total_time
        return {
            "sorted_per_time": self.metrics.sorted_count / duration,
            "spawned_per_time": self.metrics.total_spawned / duration,
            "sort_rate": (
                self.metrics.sorted_count / self.metrics.total_spawned
                if self.metrics.total_spawned > 0 else 0.0
            ),
            "miss_rate": (
                self.metrics.missed_count / self.metrics.total_spawned
                if self.metrics.total_spawned > 0 else 0.0
            ),
        }

    def compute_detection_accuracy(self) -> Dict[str, float]:
        """Sensor and actuator effectiveness figures."""
        confirmed_true = self.event_log.count("detection")
        empty_cycles = sum(
            1 for e in self.event_log.get_by_type("cycle_complete") if e.detail == 0.0
        )
        cycles = self.metrics.actuator_cycles
        return {
            "confirmed_true_detections": confirmed_true,
            "false_negatives": self.metrics.false_negative_count,
            "false_positives": self.metrics.false_positive_count,
            "false_positives_per_time": self.metrics.false_positive_count / self.params.total_time,
            "empty_cycles": empty_cycles,
            "sorts_per_cycle": self.metrics.sorted_count / cycles if cycles > 0 else 0.0,
        }

    def compute_time_in_system(self) -> Tuple[List[float], float, float]:
        """Spawn-to-sort times for sorted objects.

        Returns:
            (times, mean_time, stdev_time)
        """
        df = self.event_log.get_dataframe()
        if df.empty:
            return [], 0.0, 0.0

        spawns = df[df["event_type"] == "spawn"][["object_id", "timestamp"]]
        sorts = df[df["event_type"] == "sorted"][["object_id", "timestamp"]]
        merged = spawns.merge(sorts, on="object_id", suffixes=("_spawn", "_sorted"))
        if merged.empty:
            return [], 0.0, 0.0

        times = (merged["timestamp_sorted"] - merged["timestamp_spawn"]).tolist()
        return times, float(np.mean(times)), float(np.std(times))

    def generate_report(self) -> Dict:
        """Generate the end-of-run report dictionary."""
        estimator = SpawnProcessEstimator(self.params.min_interarrival, resolution=self.params.dt)
        estimator.observe_all(e.timestamp for e in self.event_log.get_by_type("spawn"))

        times, mean_time, stdev_time = self.compute_time_in_system()

        return {
            "run_id": self.run_id,
            "parameters": self.params.to_dict(),
            "summary": self.metrics.summary(self.params.total_time),
            "throughput": self.compute_throughput(),
            "detection": self.compute_detection_accuracy(),
            "arrivals": estimator.compare(self.params.spawn_rate),
            "time_in_system": {
                "mean": mean_time,
                "stdev": stdev_time,
                "samples": len(times),
            },
        }

    def save_report_json(self, report: Dict) -> str:
        """Save report as JSON file.

        Returns:
            Path to saved file
        """
        self.output_dir.mkdir(parents=True, exist_ok=True)
        path = self.output_dir / f"report_{self.run_id}.json"

        def default_serializer(obj):
            if isinstance(obj, np.ndarray):
                return obj.tolist()
            if isinstance(obj, np.integer):
                return int(obj)
            if isinstance(obj, np.floating):
                return float(obj)
            return str(obj)

        with open(path, "w") as f:
            json.dump(report, f, indent=2, default=default_serializer)

        return str(path)

    def plot_cumulative_counts(self) -> str:
        """Plot cumulative spawned/sorted/missed counts over time.

        Returns:
            Path to saved figure
        """
        df = self.event_log.get_dataframe()
        if df.empty:
            return ""

        fig, ax = plt.subplots(figsize=(12, 6))
        for event_type, label in (("spawn", "Spawned"), ("sorted", "Sorted"), ("missed", "Missed")):
            times = df.loc[df["event_type"] == event_type, "timestamp"].sort_values()
            if times.empty:
                continue
            ax.step(times, np.arange(1, len(times) + 1), where="post", label=label, linewidth=2)

        ax.set_xlabel("Simulation Time (s)")
        ax.set_ylabel("Objects")
        ax.set_title("Cumulative Object Counts")
        ax.legend()
        ax.grid(True, alpha=0.3)

        path = self.output_dir.parent / "plots" / f"counts_{self.run_id}.png"
        path.parent.mkdir(parents=True, exist_ok=True)
        plt.tight_layout()
        plt.savefig(path, dpi=150)
        plt.close(fig)

        return str(path)

    def plot_actuator_activity(self) -> str:
        """Plot actuator arm position and belt occupancy from recorded snapshots.

        Returns:
            Path to saved figure
        """
        if not self.history:
            return ""

        df = pd.DataFrame(
            {
                "time": [s.time for s in self.history],
                "arm": [s.actuator_position for s in self.history],
                "on_belt": [len(s.objects) for s in self.history],
            }
        )

        fig, axes = plt.subplots(2, 1, figsize=(12, 8), sharex=True)

        axes[0].plot(df["time"], df["arm"], linewidth=1)
        axes[0].set_ylabel("Arm position")
        axes[0].set_title("Actuator Activity")
        axes[0].grid(True, alpha=0.3)

        axes[1].plot(df["time"], df["on_belt"], linewidth=1, color="tab:orange")
        axes[1].set_ylabel("Objects on belt")
        axes[1].set_xlabel("Simulation Time (s)")
        axes[1].grid(True, alpha=0.3)

        path = self.output_dir.parent / "plots" / f"actuator_{self.run_id}.png"
        path.parent.mkdir(parents=True, exist_ok=True)
        plt.tight_layout()
        plt.savefig(path, dpi=150)
        plt.close(fig)

        return str(path)
