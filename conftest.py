"""
Shared pytest fixtures.
"""

import matplotlib

matplotlib.use("Agg")

import pytest
from src.parameters import SorterParameters


class ScriptedRng:
    """Random source returning queued values, then fixed defaults.

    Mirrors the subset of numpy.random.Generator the simulation uses and
    records the order of draws.
    """

    def __init__(
        self,
        uniforms=(),
        normals=(),
        exponentials=(),
        default_uniform=0.99,
        default_normal=0.0,
        default_exponential=1000.0,
    ):
        self.uniforms = list(uniforms)
        self.normals = list(normals)
        self.exponentials = list(exponentials)
        self.default_uniform = default_uniform
        self.default_normal = default_normal
        self.default_exponential = default_exponential
        self.calls = []

    def random(self):
        self.calls.append("random")
        return self.uniforms.pop(0) if self.uniforms else self.default_uniform

    def normal(self, loc=0.0, scale=1.0):
        self.calls.append("normal")
        return self.normals.pop(0) if self.normals else self.default_normal

    def exponential(self, scale=1.0):
        self.calls.append("exponential")
        return self.exponentials.pop(0) if self.exponentials else self.default_exponential


@pytest.fixture
def scripted_rng():
    """Factory for ScriptedRng instances."""
    return ScriptedRng


@pytest.fixture
def reference_params():
    """The reference line configuration."""
    return SorterParameters()


@pytest.fixture
def short_params():
    """Reference line over a shorter horizon, for quicker runs."""
    return SorterParameters(total_time=15.0)
