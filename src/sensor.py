"""
Sensor model: imperfect detection at the pick point.

Each step consumes random draws in a fixed order so that a seeded run is
reproducible:

1. one uniform draw for the false-negative test, only if an object is
   inside the detection window;
2. one normal draw for the confirmation jitter, always;
3. one uniform draw for the false-positive test, always.
"""

from dataclasses import dataclass
from typing import Iterable, Optional
import numpy as np
import config
from src.event_log import EventLog
from src.metrics import Metrics
from src.objects import SimObject, first_in_window


@dataclass(frozen=True)
class DetectionEvent:
    """Outcome of one sensor step."""
    candidate_id: Optional[int]
    false_negative: bool
    true_detection: bool
    jitter: float
    confirmed_true: bool
    false_positive: bool

    @property
    def confirmed(self) -> bool:
        """Whether a detection reaches the actuator this step."""
        return self.confirmed_true or self.false_positive

    @property
    def detected_id(self) -> Optional[int]:
        if self.false_positive:
            return config.FALSE_POSITIVE_ID
        if self.true_detection:
            return self.candidate_id
        return None


def detect(
    objects: Iterable[SimObject],
    pick_position: float,
    sensor_range: float,
    false_neg_rate: float,
    false_pos_rate: float,
    jitter_std: float,
    dt: float,
    rng: np.random.Generator,
    confirm_threshold: float = config.CONFIRMATION_THRESHOLD,
) -> DetectionEvent:
    """Run the detection model for one step.

    Only the first in-window object (scan order) is ever tested; objects
    behind it in the window are not evaluated as substitutes.

    Args:
        objects: Objects in scan order
        pick_position: Centre of the detection window
        sensor_range: Half-width of the detection window
        false_neg_rate: Probability that the candidate is not seen
        false_pos_rate: Spurious detections per unit time
        jitter_std: Std dev of the confirmation noise
        dt: Step size
        rng: Random stream
        confirm_threshold: Jitter magnitude below which a true detection confirms

    Returns:
        DetectionEvent for this step
    """
    candidate = first_in_window(objects, pick_position, sensor_range)

    false_negative = False
    true_detection = False
    if candidate is not None:
        if rng.random() < false_neg_rate:
            false_negative = True
        else:
            true_detection = True

    jitter = float(rng.normal(0.0, jitter_std))
    confirmed_true = true_detection and abs(jitter) < confirm_threshold

    false_positive = bool(rng.random() < false_pos_rate * dt)

    return DetectionEvent(
        candidate_id=candidate.id if candidate is not None else None,
        false_negative=false_negative,
        true_detection=true_detection,
        jitter=jitter,
        confirmed_true=confirmed_true,
        false_positive=false_positive,
    )


class Sensor:
    """Sensor stage of the step, updating detection counters."""

    def __init__(
        self,
        rng: np.random.Generator,
        pick_position: float,
        sensor_range: float,
        false_neg_rate: float,
        false_pos_rate: float,
        jitter_std: float,
        metrics: Metrics,
        event_log: Optional[EventLog] = None,
        confirm_threshold: float = config.CONFIRMATION_THRESHOLD,
    ):
        self.rng = rng
        self.pick_position = pick_position
        self.sensor_range = sensor_range
        self.false_neg_rate = false_neg_rate
        self.false_pos_rate = false_pos_rate
        self.jitter_std = jitter_std
        self.confirm_threshold = confirm_threshold
        self.metrics = metrics
        self.event_log = event_log

    def update(self, objects: Iterable[SimObject], dt: float, current_time: float) -> DetectionEvent:
        event = detect(
            objects,
            self.pick_position,
            self.sensor_range,
            self.false_neg_rate,
            self.false_pos_rate,
            self.jitter_std,
            dt,
            self.rng,
            self.confirm_threshold,
        )

        if event.false_negative:
            self.metrics.false_negative_count += 1
        if event.false_positive:
            self.metrics.false_positive_count += 1

        if self.event_log is not None:
            if event.false_negative:
                self.event_log.log(current_time, "false_negative", event.candidate_id)
            if event.confirmed_true:
                self.event_log.log(current_time, "detection", event.candidate_id, detail=event.jitter)
            if event.false_positive:
                self.event_log.log(current_time, "false_positive", config.FALSE_POSITIVE_ID)
        return event
