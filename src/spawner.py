"""
Spawner: renewal arrival process for objects entering the belt.
"""

from typing import Optional
import numpy as np
from src.event_log import EventLog
from src.metrics import Metrics
from src.objects import SimObject


class Spawner:
    """Creates objects with exponential interarrival times floored at a minimum."""

    def __init__(
        self,
        rng: np.random.Generator,
        spawn_rate: float,
        min_interarrival: float,
        spawn_position: float,
        metrics: Metrics,
        event_log: Optional[EventLog] = None,
    ):
        """Initialize spawner and draw the first arrival time.

        Args:
            rng: Random stream shared by the whole run
            spawn_rate: Rate λ of the exponential interarrival draw
            min_interarrival: Floor applied to every interarrival sample
            spawn_position: Belt coordinate where objects appear
            metrics: Run metrics (total_spawned is updated here)
            event_log: Optional event log
        """
        self.rng = rng
        self.spawn_rate = spawn_rate
        self.min_interarrival = min_interarrival
        self.spawn_position = spawn_position
        self.metrics = metrics
        self.event_log = event_log

        self.next_id = 1
        self.next_spawn_time = self._draw_interarrival()

    def _draw_interarrival(self) -> float:
        sample = self.rng.exponential(1.0 / self.spawn_rate)
        return max(sample, self.min_interarrival)

    def maybe_spawn(self, current_time: float) -> Optional[SimObject]:
        """Spawn at most one object if its arrival time has come.

        Args:
            current_time: Simulated time of this step

        Returns:
            The new object, or None
        """
        if current_time < self.next_spawn_time:
            return None

        obj = SimObject(
            id=self.next_id,
            position=self.spawn_position,
            spawn_time=current_time,
        )
        self.next_id += 1
        self.metrics.total_spawned += 1

        self.next_spawn_time = current_time + self._draw_interarrival()

        if self.event_log is not None:
            self.event_log.log(current_time, "spawn", obj.id, obj.position)
        return obj
