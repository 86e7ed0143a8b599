"""
Transport: constant-speed belt motion and exit culling.
"""

from typing import Iterable, List, Optional
from src.event_log import EventLog
from src.metrics import Metrics
from src.objects import MISSED, SimObject


def advance(objects: Iterable[SimObject], dt: float, speed: float):
    """Move every unsorted object by speed * dt."""
    step = speed * dt
    for obj in objects:
        if not obj.sorted:
            obj.position += step


def cull_missed(
    objects: Iterable[SimObject],
    exit_position: float,
    current_time: float = 0.0,
) -> List[SimObject]:
    """Retire every unsorted object past the exit as missed.

    Returns:
        The objects retired by this call, in scan order
    """
    missed = []
    for obj in objects:
        if not obj.sorted and obj.position > exit_position:
            obj.retire(MISSED, current_time)
            missed.append(obj)
    return missed


class Transport:
    """Belt stage of the step: move all, then cull."""

    def __init__(
        self,
        speed: float,
        exit_position: float,
        metrics: Metrics,
        event_log: Optional[EventLog] = None,
    ):
        self.speed = speed
        self.exit_position = exit_position
        self.metrics = metrics
        self.event_log = event_log

    def update(self, objects: List[SimObject], dt: float, current_time: float) -> List[SimObject]:
        """Advance the belt one step and report objects lost at the exit.

        Culling only runs after every object has moved, so an object that
        crosses the exit this step is gone before the sensor looks.
        """
        advance(objects, dt, self.speed)
        missed = cull_missed(objects, self.exit_position, current_time)

        self.metrics.missed_count += len(missed)
        if self.event_log is not None:
            for obj in missed:
                self.event_log.log(current_time, "missed", obj.id, obj.position)
        return missed
