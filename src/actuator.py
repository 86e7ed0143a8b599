"""
Actuator: latched reaction-then-stroke timing state machine.

States are Idle and Active. A confirmed detection while Idle arms one
cycle of reaction_delay + stroke_duration; detections while Active are
ignored. During the stroke sub-phase the pick window is re-scanned every
step until one object has been sorted, then the scan stops for the rest of
the cycle.
"""

from dataclasses import dataclass
from typing import Iterable, Optional
from src.event_log import EventLog
from src.metrics import Metrics
from src.objects import SORTED, SimObject, first_in_window


@dataclass
class ActuatorState:
    active: bool = False
    timer: float = 0.0
    position: float = 0.0  # clamped timer / cycle, display only
    sorted_this_cycle: bool = False


class Actuator:
    """Diverter arm at the pick point."""

    def __init__(
        self,
        reaction_delay: float,
        stroke_duration: float,
        pick_position: float,
        sensor_range: float,
        metrics: Metrics,
        event_log: Optional[EventLog] = None,
        busy_time_limit: Optional[float] = None,
    ):
        """Initialize actuator.

        Args:
            reaction_delay: Time from arming to start of stroke
            stroke_duration: Length of the active push
            pick_position: Centre of the pick window
            sensor_range: Half-width of the pick window
            metrics: Run metrics
            event_log: Optional event log
            busy_time_limit: Ceiling on accumulated busy time, normally the run length
        """
        self.reaction_delay = reaction_delay
        self.stroke_duration = stroke_duration
        self.pick_position = pick_position
        self.sensor_range = sensor_range
        self.metrics = metrics
        self.event_log = event_log
        self.busy_time_limit = busy_time_limit
        self.state = ActuatorState()

    @property
    def cycle_duration(self) -> float:
        return self.reaction_delay + self.stroke_duration

    @property
    def in_stroke(self) -> bool:
        return self.state.active and self.state.timer < self.stroke_duration

    def arm(self, current_time: float) -> bool:
        """Start a cycle if Idle.

        Returns:
            True if a new cycle started, False if already Active
        """
        if self.state.active:
            return False

        self.state.active = True
        self.state.timer = self.cycle_duration
        self.state.sorted_this_cycle = False
        self.metrics.actuator_cycles += 1
        self.metrics.latencies.append(self.reaction_delay)

        if self.event_log is not None:
            self.event_log.log(current_time, "armed", detail=self.state.timer)
        return True

    def update(
        self,
        confirmed: bool,
        objects: Iterable[SimObject],
        dt: float,
        current_time: float,
    ) -> Optional[SimObject]:
        """Consume this step's detection signal and advance the timer.

        Args:
            confirmed: Whether the sensor confirmed a detection this step
            objects: Objects in scan order
            dt: Step size
            current_time: Simulated time of this step

        Returns:
            The object sorted during this step, if any
        """
        if confirmed:
            self.arm(current_time)

        if not self.state.active:
            return None

        state = self.state
        state.timer -= dt
        state.position = max(0.0, min(1.0, state.timer / self.cycle_duration))

        picked = None
        if self.in_stroke and not state.sorted_this_cycle:
            picked = first_in_window(objects, self.pick_position, self.sensor_range)
            if picked is not None:
                picked.retire(SORTED, current_time)
                state.sorted_this_cycle = True
                self.metrics.sorted_count += 1
                if self.event_log is not None:
                    self.event_log.log(current_time, "sorted", picked.id, picked.position)

        if state.timer <= 0:
            state.active = False
            state.position = 0.0
            busy = self.metrics.actuator_busy_time + self.cycle_duration
            if self.busy_time_limit is not None:
                # busy time never exceeds the run length
                busy = min(busy, self.busy_time_limit)
            self.metrics.actuator_busy_time = busy
            if self.event_log is not None:
                self.event_log.log(
                    current_time,
                    "cycle_complete",
                    detail=1.0 if state.sorted_this_cycle else 0.0,
                )

        return picked
