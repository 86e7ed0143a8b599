"""
Unit tests for the spawner, transport, sensor and actuator stages.
"""

import pytest
import numpy as np
import config
from src.actuator import Actuator
from src.event_log import EventLog
from src.metrics import Metrics
from src.objects import MISSED, SORTED, ObjectArena, SimObject, first_in_window, in_window
from src.sensor import Sensor, detect
from src.spawner import Spawner
from src.transport import Transport, advance, cull_missed

PICK = 0.65
RANGE = 0.06
DT = 0.02


def make_actuator(metrics=None, event_log=None):
    return Actuator(0.06, 0.35, PICK, RANGE, metrics or Metrics(), event_log)


# ---------------------------------------------------------------------------
# Objects and scan order
# ---------------------------------------------------------------------------

def test_in_window_edges():
    assert in_window(0.65, PICK, RANGE)
    assert in_window(0.60, PICK, RANGE)
    assert not in_window(0.58, PICK, RANGE)
    assert not in_window(0.72, PICK, RANGE)


def test_first_in_window_uses_scan_order_not_distance():
    far = SimObject(id=1, position=0.70, spawn_time=0.0)
    near = SimObject(id=2, position=0.65, spawn_time=1.0)

    assert first_in_window([far, near], PICK, RANGE) is far


def test_first_in_window_skips_sorted_and_outside():
    done = SimObject(id=1, position=0.65, spawn_time=0.0, sorted=True)
    outside = SimObject(id=2, position=0.40, spawn_time=1.0)
    inside = SimObject(id=3, position=0.62, spawn_time=2.0)

    assert first_in_window([done, outside, inside], PICK, RANGE) is inside
    assert first_in_window([done, outside], PICK, RANGE) is None


def test_retire_only_once():
    obj = SimObject(id=1, position=0.9, spawn_time=0.0)
    obj.retire(MISSED, 10.0)

    assert obj.sorted and obj.outcome == MISSED
    with pytest.raises(RuntimeError):
        obj.retire(SORTED, 10.02)


def test_arena_compaction_keeps_order_and_outcomes():
    arena = ObjectArena()
    for i in range(1, 6):
        arena.add(SimObject(id=i, position=0.1 * i, spawn_time=float(i)))
    objs = list(arena)
    objs[1].retire(SORTED, 3.0)
    objs[3].retire(MISSED, 4.0)

    assert arena.compact() == 2
    assert [o.id for o in arena] == [1, 3, 5]
    assert arena.outcome_of(2) == SORTED
    assert arena.outcome_of(4) == MISSED
    assert arena.outcome_of(3) is None
    assert arena.terminal_states() == {2: SORTED, 4: MISSED}


def test_arena_rejects_non_increasing_ids():
    arena = ObjectArena()
    arena.add(SimObject(id=5, position=0.05, spawn_time=0.0))
    with pytest.raises(ValueError):
        arena.add(SimObject(id=5, position=0.05, spawn_time=1.0))


# ---------------------------------------------------------------------------
# Spawner
# ---------------------------------------------------------------------------

def test_spawner_floors_interarrival(scripted_rng):
    rng = scripted_rng(exponentials=[0.05, 3.0])
    metrics = Metrics()
    spawner = Spawner(rng, 0.8, 0.2, 0.05, metrics)

    assert spawner.next_spawn_time == pytest.approx(0.2)
    assert spawner.maybe_spawn(0.18) is None

    obj = spawner.maybe_spawn(0.2)
    assert obj.id == 1
    assert obj.position == 0.05
    assert obj.spawn_time == 0.2
    assert metrics.total_spawned == 1
    assert spawner.next_spawn_time == pytest.approx(3.2)


def test_spawner_ids_strictly_increasing():
    metrics = Metrics()
    event_log = EventLog()
    spawner = Spawner(np.random.default_rng(3), 2.0, 0.1, 0.05, metrics, event_log)

    ids = []
    for i in range(5000):
        obj = spawner.maybe_spawn(i * 0.02)
        if obj is not None:
            ids.append(obj.id)

    assert len(ids) > 10
    assert ids == list(range(1, len(ids) + 1))
    assert metrics.total_spawned == len(ids)
    assert event_log.count("spawn") == len(ids)


def test_spawner_respects_min_interarrival():
    spawner = Spawner(np.random.default_rng(9), 50.0, 0.2, 0.05, Metrics())
    times = []
    for i in range(2000):
        obj = spawner.maybe_spawn(i * 0.02)
        if obj is not None:
            times.append(obj.spawn_time)

    gaps = np.diff(times)
    assert np.all(gaps >= 0.2 - 1e-9)


# ---------------------------------------------------------------------------
# Transport
# ---------------------------------------------------------------------------

def test_advance_moves_only_unsorted():
    moving = SimObject(id=1, position=0.3, spawn_time=0.0)
    parked = SimObject(id=2, position=0.3, spawn_time=0.0, sorted=True)

    advance([moving, parked], DT, 0.08)

    assert moving.position == pytest.approx(0.3016)
    assert parked.position == 0.3


def test_cull_requires_strictly_past_exit():
    at_exit = SimObject(id=1, position=0.95, spawn_time=0.0)
    past_exit = SimObject(id=2, position=0.9500001, spawn_time=0.0)

    missed = cull_missed([at_exit, past_exit], 0.95, 12.0)

    assert missed == [past_exit]
    assert past_exit.outcome == MISSED
    assert past_exit.retired_at == 12.0
    assert not at_exit.sorted


def test_transport_counts_misses():
    metrics = Metrics()
    event_log = EventLog()
    transport = Transport(0.08, 0.95, metrics, event_log)
    objs = [SimObject(id=1, position=0.9495, spawn_time=0.0)]

    transport.update(objs, DT, 11.2)

    assert metrics.missed_count == 1
    assert event_log.get_by_type("missed")[0].object_id == 1
    # Already retired objects neither move nor count again
    transport.update(objs, DT, 11.22)
    assert metrics.missed_count == 1


def test_boundary_scenario_pick_window():
    """Object spawned at t=0, x=0.05 crosses the pick point at t=7.5 s."""
    obj = SimObject(id=1, position=0.05, spawn_time=0.0)
    inside_steps = []
    for k in range(1, 501):
        advance([obj], DT, 0.08)
        if k == 375:
            assert obj.position == pytest.approx(0.65, abs=1e-9)
        if in_window(obj.position, PICK, RANGE):
            inside_steps.append(k)

    first_t = inside_steps[0] * DT
    last_t = inside_steps[-1] * DT
    assert inside_steps == list(range(inside_steps[0], inside_steps[-1] + 1))
    assert first_t == pytest.approx(6.75, abs=DT + 1e-9)
    assert last_t == pytest.approx(8.25, abs=DT + 1e-9)


# ---------------------------------------------------------------------------
# Sensor
# ---------------------------------------------------------------------------

def test_sensor_no_candidate_draws_jitter_and_false_positive(scripted_rng):
    rng = scripted_rng()
    event = detect([], PICK, RANGE, 0.05, 0.01, 0.02, DT, rng)

    assert rng.calls == ["normal", "random"]
    assert event.candidate_id is None
    assert not event.confirmed
    assert event.detected_id is None


def test_sensor_false_negative_tests_only_first_candidate(scripted_rng):
    first = SimObject(id=1, position=0.64, spawn_time=0.0)
    second = SimObject(id=2, position=0.66, spawn_time=0.5)
    rng = scripted_rng(uniforms=[0.01])

    event = detect([first, second], PICK, RANGE, 0.05, 0.0, 0.02, DT, rng)

    assert rng.calls == ["random", "normal", "random"]
    assert event.candidate_id == 1
    assert event.false_negative
    assert not event.true_detection
    assert not event.confirmed


def test_sensor_true_detection_confirmed_by_small_jitter(scripted_rng):
    obj = SimObject(id=4, position=0.65, spawn_time=0.0)
    rng = scripted_rng(uniforms=[0.5], normals=[0.01])

    event = detect([obj], PICK, RANGE, 0.05, 0.01, 0.02, DT, rng)

    assert event.true_detection
    assert event.confirmed_true
    assert event.confirmed
    assert event.detected_id == 4


def test_sensor_large_jitter_blocks_confirmation(scripted_rng):
    obj = SimObject(id=4, position=0.65, spawn_time=0.0)
    rng = scripted_rng(uniforms=[0.5], normals=[-0.06])

    event = detect([obj], PICK, RANGE, 0.05, 0.01, 0.02, DT, rng)

    assert event.true_detection
    assert not event.confirmed_true
    assert not event.confirmed


def test_sensor_false_positive_without_object(scripted_rng):
    rng = scripted_rng(uniforms=[0.0001])

    event = detect([], PICK, RANGE, 0.05, 0.01, 0.02, DT, rng)

    assert event.false_positive
    assert event.confirmed
    assert event.detected_id == config.FALSE_POSITIVE_ID


def test_sensor_false_positive_alongside_true_detection(scripted_rng):
    obj = SimObject(id=2, position=0.66, spawn_time=0.0)
    rng = scripted_rng(uniforms=[0.5, 0.0], normals=[0.0])

    event = detect([obj], PICK, RANGE, 0.05, 0.01, 0.02, DT, rng)

    assert event.confirmed_true and event.false_positive
    assert event.confirmed


def test_sensor_stage_updates_counters(scripted_rng):
    metrics = Metrics()
    event_log = EventLog()
    rng = scripted_rng(uniforms=[0.01, 0.0])
    sensor = Sensor(rng, PICK, RANGE, 0.05, 0.01, 0.02, metrics, event_log)

    sensor.update([SimObject(id=1, position=0.65, spawn_time=0.0)], DT, 7.5)

    assert metrics.false_negative_count == 1
    assert metrics.false_positive_count == 1
    assert event_log.count("false_negative") == 1
    assert event_log.count("false_positive") == 1
    assert event_log.count("detection") == 0


# ---------------------------------------------------------------------------
# Actuator
# ---------------------------------------------------------------------------

def test_actuator_arms_once_per_cycle():
    metrics = Metrics()
    actuator = make_actuator(metrics)

    actuator.update(True, [], DT, 0.0)
    assert actuator.state.active
    assert actuator.state.timer == pytest.approx(0.39)
    assert actuator.state.position == pytest.approx(0.39 / 0.41)
    assert metrics.actuator_cycles == 1
    assert metrics.latencies == [0.06]

    actuator.update(True, [], DT, 0.02)
    assert metrics.actuator_cycles == 1
    assert metrics.latencies == [0.06]


def test_actuator_sorts_only_during_stroke():
    metrics = Metrics()
    actuator = make_actuator(metrics)
    obj = SimObject(id=1, position=0.65, spawn_time=0.0)

    # Reaction phase: timer still >= stroke duration
    assert actuator.update(True, [obj], DT, 0.0) is None
    assert not obj.sorted

    picked = []
    for i in range(1, 5):
        result = actuator.update(False, [obj], DT, i * DT)
        if result is not None:
            picked.append(result)

    assert picked == [obj]
    assert obj.outcome == SORTED
    assert metrics.sorted_count == 1


def test_actuator_sorts_at_most_one_object_per_cycle():
    metrics = Metrics()
    event_log = EventLog()
    actuator = make_actuator(metrics, event_log)
    objs = [SimObject(id=i, position=0.62 + 0.01 * i, spawn_time=0.0) for i in range(1, 4)]

    actuator.update(True, objs, DT, 0.0)
    for i in range(1, 21):
        actuator.update(False, objs, DT, i * DT)

    assert not actuator.state.active
    assert metrics.sorted_count == 1
    assert objs[0].outcome == SORTED
    assert not objs[1].sorted and not objs[2].sorted
    assert event_log.get_by_type("cycle_complete")[0].detail == 1.0


def test_actuator_cycle_length_and_busy_time():
    metrics = Metrics()
    actuator = make_actuator(metrics)

    actuator.update(True, [], DT, 0.0)
    for i in range(1, 20):
        actuator.update(False, [], DT, i * DT)
    # 20 decrements leave 0.01 on the timer
    assert actuator.state.active
    assert metrics.actuator_busy_time == 0.0

    actuator.update(False, [], DT, 20 * DT)
    assert not actuator.state.active
    assert actuator.state.position == 0.0
    assert metrics.actuator_busy_time == pytest.approx(0.41)


def test_actuator_rearms_after_cycle_completes():
    metrics = Metrics()
    actuator = make_actuator(metrics)

    for i in range(21):
        actuator.update(True, [], DT, i * DT)
    assert not actuator.state.active
    assert metrics.actuator_cycles == 1

    actuator.update(True, [], DT, 21 * DT)
    assert actuator.state.active
    assert metrics.actuator_cycles == 2
    assert metrics.latencies == [0.06, 0.06]


def test_false_positive_cycle_with_empty_window_sorts_nothing():
    metrics = Metrics()
    event_log = EventLog()
    actuator = make_actuator(metrics, event_log)
    far_away = SimObject(id=1, position=0.2, spawn_time=0.0)

    for i in range(21):
        actuator.update(i == 0, [far_away], DT, i * DT)

    assert metrics.actuator_cycles == 1
    assert metrics.sorted_count == 0
    assert not far_away.sorted
    assert event_log.get_by_type("cycle_complete")[0].detail == 0.0


def test_stroke_rescan_sorts_object_entering_window_late():
    """An unrelated object reaching the window during the stroke is sorted."""
    metrics = Metrics()
    actuator = make_actuator(metrics)
    late = SimObject(id=7, position=0.5, spawn_time=0.0)

    actuator.update(True, [late], DT, 0.0)
    for i in range(1, 10):
        actuator.update(False, [late], DT, i * DT)
    assert not late.sorted

    late.position = 0.595
    actuator.update(False, [late], DT, 10 * DT)
    assert late.outcome == SORTED
    assert metrics.sorted_count == 1


def test_actuator_in_stroke_after_reaction_delay():
    actuator = make_actuator()
    assert not actuator.in_stroke

    actuator.update(True, [], DT, 0.0)
    # timer 0.39: still reacting
    assert not actuator.in_stroke

    for i in range(1, 4):
        actuator.update(False, [], DT, i * DT)
    # timer 0.33: pushing
    assert actuator.in_stroke


def test_actuator_busy_time_respects_limit():
    metrics = Metrics()
    actuator = Actuator(0.06, 0.35, PICK, RANGE, metrics, busy_time_limit=0.5)

    for i in range(42):
        actuator.update(True, [], DT, i * DT)

    assert metrics.actuator_cycles == 2
    assert metrics.actuator_busy_time == 0.5
