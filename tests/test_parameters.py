"""
Tests for parameter validation.
"""

import pytest
import config
from src.conveyor_model import SortingLine
from src.parameters import ConfigurationError, SorterParameters


def test_reference_configuration_is_valid(reference_params):
    assert reference_params.validate() is reference_params
    assert reference_params.n_steps == 2000
    assert reference_params.cycle_duration == pytest.approx(0.41)
    lo, hi = reference_params.detection_window
    assert lo == pytest.approx(0.59)
    assert hi == pytest.approx(0.71)


def test_defaults_follow_config_module():
    params = SorterParameters()
    assert params.dt == config.DT
    assert params.pick_position == config.PICK_POSITION
    assert params.seed == config.RANDOM_SEED
    assert params.to_dict()["stroke_duration"] == config.STROKE_DURATION


@pytest.mark.parametrize(
    "overrides, fragment",
    [
        ({"dt": 0.0}, "dt must be > 0"),
        ({"speed": -0.1}, "speed must be > 0"),
        ({"spawn_rate": 0.0}, "spawn_rate must be > 0"),
        ({"false_neg_rate": 1.5}, "false_neg_rate"),
        ({"false_neg_rate": -0.1}, "false_neg_rate"),
        ({"false_pos_rate": -1.0}, "false_pos_rate must be >= 0"),
        ({"false_pos_rate": 60.0}, "per-step probability"),
        ({"jitter_std": -0.01}, "jitter_std"),
        ({"dt": 0.25}, "min_interarrival"),
        ({"reaction_delay": 0.01}, "reaction_delay"),
        ({"stroke_duration": 0.02}, "stroke_duration"),
        ({"total_time": 0.01}, "total_time"),
        ({"pick_position": 0.99}, "positions must satisfy"),
        ({"spawn_position": 0.7}, "positions must satisfy"),
        ({"exit_position": 1.2}, "positions must satisfy"),
        ({"snapshot_interval": 0}, "snapshot_interval"),
        ({"compaction_interval": 0}, "compaction_interval"),
    ],
)
def test_invalid_parameters_rejected(overrides, fragment):
    with pytest.raises(ConfigurationError, match=fragment):
        SorterParameters(**overrides).validate()


def test_all_problems_reported_together():
    with pytest.raises(ConfigurationError) as excinfo:
        SorterParameters(false_neg_rate=2.0, dt=0.5).validate()

    message = str(excinfo.value)
    assert "false_neg_rate" in message
    assert "min_interarrival" in message
    assert "reaction_delay" in message


def test_configuration_error_is_value_error():
    assert issubclass(ConfigurationError, ValueError)


def test_line_validates_before_running():
    with pytest.raises(ConfigurationError):
        SortingLine(SorterParameters(dt=0.3))
