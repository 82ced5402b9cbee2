"""Shared test fixtures and configuration."""

import pytest
import torch

from spikespec.config import SimulationConfig


@pytest.fixture(autouse=True)
def set_random_seed():
    """Ensure reproducible tests by setting the torch seed.

    This fixture runs automatically for every test.
    """
    torch.manual_seed(42)
    if torch.cuda.is_available():
        torch.cuda.manual_seed_all(42)


@pytest.fixture
def sim_config():
    """Standard simulation settings for recording tests."""
    return SimulationConfig(dt=0.1, n_steps=50)


@pytest.fixture
def leaky_spec_text():
    """Minimal neuron specification used across parser and generator tests."""
    return """
Leaky<Voltage, Time>:
params { tau: Time, threshold: Voltage }
initialize { v: Voltage = 0.0 }
time_step { v @= (input - v) / tau }
spike_when { v > threshold }
get_voltage { v }
reset { v = 0.0 }
"""


@pytest.fixture
def trace_synapse_text():
    """Minimal synapse specification with one decaying trace."""
    return """
Trace<Voltage, Time>:
params { tau: Time, w0: Voltage }
initialize { w: Voltage = w0; trace: Voltage = 0.0 }
time_step { trace @= -trace / tau }
weight_getter { w }
on_pre { trace += 1.0 }
on_post { w += trace }
"""


class Duration:
    """Time quantity in the style of a unit library: no float conversion.

    ``value`` is expressed in units of ``scale`` seconds; only
    ``to_base_units().magnitude`` yields a plain number.
    """

    def __init__(self, value, scale=1.0):
        self.value = value
        self.scale = scale

    def _other(self, other):
        if isinstance(other, Duration):
            return other.value * other.scale / self.scale
        if other == 0:
            return 0.0
        raise TypeError(f"cannot combine duration with {other!r}")

    def __lt__(self, other):
        return self.value < self._other(other)

    def __gt__(self, other):
        return self.value > self._other(other)

    def __le__(self, other):
        return self.value <= self._other(other)

    def __add__(self, other):
        return Duration(self.value + self._other(other), self.scale)

    def __sub__(self, other):
        return Duration(self.value - self._other(other), self.scale)

    def __neg__(self):
        return Duration(-self.value, self.scale)

    def __mul__(self, factor):
        return Duration(self.value * factor, self.scale)

    def __truediv__(self, divisor):
        return Duration(self.value / divisor, self.scale)

    @property
    def magnitude(self):
        return self.value

    def to_base_units(self):
        return Duration(self.value * self.scale)

    def __repr__(self):
        return f"Duration({self.value}, scale={self.scale})"


@pytest.fixture
def duration():
    """Factory for dimensioned time values that refuse ``float()``."""
    return Duration
