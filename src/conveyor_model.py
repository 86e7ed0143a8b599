"""
Sorting line model: the simulation context that owns the belt, sensor,
actuator and metrics of one run, driven by a fixed-step SimPy clock.
"""

from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Tuple
import simpy
import numpy as np
import pandas as pd
from src.actuator import Actuator
from src.event_log import EventLog
from src.metrics import Metrics, MetricsSnapshot
from src.objects import ObjectArena
from src.parameters import SorterParameters
from src.sensor import DetectionEvent, Sensor
from src.spawner import Spawner
from src.transport import Transport


@dataclass(frozen=True)
class Snapshot:
    """State published after a step, for renderers and reports."""
    time: float
    objects: Tuple[Tuple[int, float], ...]  # (id, position) of unsorted objects
    actuator_position: float
    actuator_active: bool
    metrics: MetricsSnapshot


class Clock:
    """Fixed-step clock running as a SimPy process.

    Step i happens at time i * dt for i = 0 .. n_steps; the step time is
    computed from the index so it does not accumulate rounding error.
    """

    def __init__(self, env: simpy.Environment, dt: float, n_steps: int):
        self.env = env
        self.dt = dt
        self.n_steps = n_steps

    def process(self, on_tick: Callable[[int, float], None]):
        """SimPy process: call on_tick(index, time) once per step."""
        for i in range(self.n_steps + 1):
            on_tick(i, i * self.dt)
            if i < self.n_steps:
                yield self.env.timeout(self.dt)


class SortingLine:
    """One conveyor sorting simulation.

    All mutable state lives on the instance, so independent lines can run
    side by side in one process.
    """

    def __init__(
        self,
        params: Optional[SorterParameters] = None,
        rng: Optional[np.random.Generator] = None,
        event_log: Optional[EventLog] = None,
        on_step: Optional[Callable[[Snapshot], None]] = None,
    ):
        """Initialize the line.

        Args:
            params: Run parameters (reference configuration if omitted)
            rng: Random stream; a Generator seeded with params.seed if omitted
            event_log: Event log; an in-memory log if omitted
            on_step: Callback receiving the snapshot after every step

        Raises:
            ConfigurationError: if params are invalid
        """
        self.params = (params or SorterParameters()).validate()
        self.rng = rng if rng is not None else np.random.default_rng(self.params.seed)
        self.event_log = event_log if event_log is not None else EventLog()
        self.on_step = on_step

        p = self.params
        self.metrics = Metrics()
        self.arena = ObjectArena()
        self.history: List[Snapshot] = []
        self.steps_done = 0

        # Spawner draws its first interarrival here, before any step runs
        self.spawner = Spawner(
            self.rng, p.spawn_rate, p.min_interarrival, p.spawn_position,
            self.metrics, self.event_log,
        )
        self.transport = Transport(p.speed, p.exit_position, self.metrics, self.event_log)
        self.sensor = Sensor(
            self.rng,
            p.pick_position,
            p.sensor_range,
            p.false_neg_rate,
            p.false_pos_rate,
            p.jitter_std,
            self.metrics,
            self.event_log,
            confirm_threshold=p.confirm_threshold,
        )
        self.actuator = Actuator(
            p.reaction_delay, p.stroke_duration, p.pick_position, p.sensor_range,
            self.metrics, self.event_log,
            busy_time_limit=p.total_time,
        )
        self.last_detection: Optional[DetectionEvent] = None

    def step(self, current_time: float) -> Snapshot:
        """Advance the line by one step: spawn, move, cull, sense, actuate."""
        dt = self.params.dt

        obj = self.spawner.maybe_spawn(current_time)
        if obj is not None:
            self.arena.add(obj)

        self.transport.update(self.arena, dt, current_time)
        self.last_detection = self.sensor.update(self.arena, dt, current_time)
        self.actuator.update(self.last_detection.confirmed, self.arena, dt, current_time)

        self.steps_done += 1
        return self.snapshot(current_time)

    def snapshot(self, current_time: float) -> Snapshot:
        return Snapshot(
            time=current_time,
            objects=tuple((o.id, o.position) for o in self.arena.active()),
            actuator_position=self.actuator.state.position,
            actuator_active=self.actuator.state.active,
            metrics=self.metrics.snapshot(),
        )

    def _tick(self, index: int, current_time: float):
        snap = self.step(current_time)
        if index % self.params.snapshot_interval == 0:
            self.history.append(snap)
        if self.on_step is not None:
            self.on_step(snap)
        if (index + 1) % self.params.compaction_interval == 0:
            self.arena.compact()

    def run(self) -> Dict:
        """Run every step of [0, total_time] and return the summary."""
        env = simpy.Environment()
        clock = Clock(env, self.params.dt, self.params.n_steps)
        env.process(clock.process(self._tick))
        env.run()
        return self.summary()

    def summary(self) -> Dict:
        return self.metrics.summary(self.params.total_time)

    def terminal_states(self) -> Dict[int, str]:
        return self.arena.terminal_states()


def run_monte_carlo(params: SorterParameters, seeds: Iterable[int]) -> pd.DataFrame:
    """Run one independent line per seed.

    Returns:
        DataFrame with one summary row per seed
    """
    rows = []
    for seed in seeds:
        run_params = SorterParameters(**{**params.to_dict(), "seed": int(seed)})
        line = SortingLine(run_params)
        summary = line.run()
        summary["seed"] = int(seed)
        rows.append(summary)
    return pd.DataFrame(rows)
