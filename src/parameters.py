"""
Simulation parameters and their validation.
"""

import math
from dataclasses import dataclass, asdict
from typing import Dict, List, Tuple
import config


class ConfigurationError(ValueError):
    """Raised when a parameter set cannot describe a valid sorting line."""


@dataclass
class SorterParameters:
    """All scalar inputs of one simulation run."""

    total_time: float = config.T_SIM
    dt: float = config.DT
    belt_length: float = config.BELT_LENGTH
    spawn_position: float = config.SPAWN_POSITION
    exit_position: float = config.EXIT_POSITION
    pick_position: float = config.PICK_POSITION
    object_radius: float = config.OBJECT_RADIUS
    speed: float = config.OBJECT_SPEED
    spawn_rate: float = config.SPAWN_RATE
    min_interarrival: float = config.MIN_INTERARRIVAL
    sensor_range: float = config.SENSOR_RANGE
    false_neg_rate: float = config.FALSE_NEG_RATE
    false_pos_rate: float = config.FALSE_POS_RATE
    jitter_std: float = config.DETECTION_JITTER
    confirm_threshold: float = config.CONFIRMATION_THRESHOLD
    reaction_delay: float = config.REACTION_DELAY
    stroke_duration: float = config.STROKE_DURATION
    seed: int = config.RANDOM_SEED
    snapshot_interval: int = config.SNAPSHOT_INTERVAL
    compaction_interval: int = config.COMPACTION_INTERVAL

    @property
    def cycle_duration(self) -> float:
        """Nominal length of one actuator cycle."""
        return self.reaction_delay + self.stroke_duration

    @property
    def n_steps(self) -> int:
        """Number of clock increments; the loop visits n_steps + 1 instants."""
        return int(math.floor(self.total_time / self.dt + 1e-9))

    @property
    def detection_window(self) -> Tuple[float, float]:
        return (
            self.pick_position - self.sensor_range,
            self.pick_position + self.sensor_range,
        )

    def validate(self) -> "SorterParameters":
        """Check physical and numerical constraints.

        Returns:
            self, so calls can be chained

        Raises:
            ConfigurationError: listing every violated constraint
        """
        problems: List[str] = []

        for name in (
            "total_time",
            "dt",
            "belt_length",
            "speed",
            "spawn_rate",
            "min_interarrival",
            "sensor_range",
            "reaction_delay",
            "stroke_duration",
        ):
            if not getattr(self, name) > 0:
                problems.append(f"{name} must be > 0 (got {getattr(self, name)})")

        for name in ("jitter_std", "false_pos_rate", "object_radius", "confirm_threshold"):
            if getattr(self, name) < 0:
                problems.append(f"{name} must be >= 0 (got {getattr(self, name)})")

        if not 0.0 <= self.false_neg_rate <= 1.0:
            problems.append(f"false_neg_rate must lie in [0, 1] (got {self.false_neg_rate})")
        if self.false_pos_rate * self.dt > 1.0:
            problems.append(
                f"false_pos_rate * dt is a per-step probability and must be <= 1 "
                f"(got {self.false_pos_rate * self.dt})"
            )

        if self.dt > 0:
            if self.dt >= self.min_interarrival:
                problems.append(
                    f"dt ({self.dt}) must be smaller than min_interarrival ({self.min_interarrival})"
                )
            if self.dt >= self.reaction_delay:
                problems.append(
                    f"dt ({self.dt}) must be smaller than reaction_delay ({self.reaction_delay})"
                )
            if self.dt >= self.stroke_duration:
                problems.append(
                    f"dt ({self.dt}) must be smaller than stroke_duration ({self.stroke_duration})"
                )
            if self.dt > self.total_time:
                problems.append(f"dt ({self.dt}) must not exceed total_time ({self.total_time})")

        if not (
            0.0 <= self.spawn_position < self.pick_position < self.exit_position <= self.belt_length
        ):
            problems.append(
                "positions must satisfy 0 <= spawn < pick < exit <= belt_length "
                f"(got spawn={self.spawn_position}, pick={self.pick_position}, "
                f"exit={self.exit_position}, belt_length={self.belt_length})"
            )

        if self.snapshot_interval < 1:
            problems.append(f"snapshot_interval must be >= 1 (got {self.snapshot_interval})")
        if self.compaction_interval < 1:
            problems.append(f"compaction_interval must be >= 1 (got {self.compaction_interval})")

        if problems:
            raise ConfigurationError("Invalid sorter configuration: " + "; ".join(problems))
        return self

    def to_dict(self) -> Dict:
        return asdict(self)
