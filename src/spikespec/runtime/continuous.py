"""
Continuous output for discrete spike generators.

A discrete generator only reports its spike output on the spiking tick.
The decorators here keep reporting a decaying output afterwards:

- Before the wrapped generator's first spike the output is a zero baseline.
- On a spiking tick the output is exactly the wrapped generator's output,
  and the elapsed-time accumulator restarts from zero.
- On every other tick the output is ``decay_fn(elapsed, spike_output)``.

Spikes are detected by querying the wrapped generator after each step, so
the decay timing can be off by up to one time step.

Usage:
    spiker = SpikeAtTimes([1.0, 2.0], tolerance=0.1, spike_output=0.5)
    smooth = exp_decay(spiker, scale_a=1.0, scale_b=5.0)
    for _ in range(100):
        smooth.advance(0.01)
        trace.append(smooth.get_output())
"""

from __future__ import annotations

import math
from typing import Any, Callable, Optional, Union

from spikespec.errors import ConfigurationError
from spikespec.runtime.protocols import (
    InnerSpikeGenerator,
    InputSpikeGenerator,
    SpikeGenerator,
)
from spikespec.units import to_base_units, zero_like

DecayFn = Callable[[Any, Any], Any]
"""Maps ``(time_since_spike, spike_output)`` to the output between spikes."""


class _SpikeDecay:
    """Shared state and queries for the decay decorators."""

    def __init__(self, generator: SpikeGenerator, decay_fn: DecayFn):
        self.generator = generator
        self.decay_fn = decay_fn
        self.baseline = zero_like(generator.get_output())
        self.spike_output = self.baseline
        self.time_since_spike: Optional[Any] = None
        self.spiked_yet = False
        if generator.did_spike():
            self._record_spike()

    @property
    def output_dimension(self):  # type: ignore[override]
        return self.generator.output_dimension

    @property
    def time_dimension(self):  # type: ignore[override]
        return self.generator.time_dimension

    def did_spike(self) -> bool:
        return self.generator.did_spike()

    def get_output(self) -> Any:
        if self.did_spike():
            return self.generator.get_output()
        if not self.spiked_yet:
            return self.baseline
        return self.decay_fn(self.time_since_spike, self.spike_output)

    def _record_spike(self, dt: Any = None) -> None:
        self.spiked_yet = True
        self.time_since_spike = zero_like(dt) if dt is not None else None
        self.spike_output = self.generator.get_output()

    def _observe_step(self, dt: Any) -> None:
        if self.generator.did_spike():
            self._record_spike(dt)
        elif self.spiked_yet:
            if self.time_since_spike is None:
                self.time_since_spike = dt
            else:
                self.time_since_spike = self.time_since_spike + dt


class WithSpikeDecay(_SpikeDecay, InputSpikeGenerator):
    """Decaying output over an input generator stepped with ``advance``."""

    def __init__(self, generator: InputSpikeGenerator, decay_fn: DecayFn):
        """
        Args:
            generator: Discrete generator to wrap (owned by the decorator)
            decay_fn: Output between spikes; called with the time since the
                previous spike and the output recorded at that spike
        """
        if not isinstance(generator, InputSpikeGenerator):
            raise ConfigurationError(
                f"WithSpikeDecay wraps input generators, got {type(generator).__name__}"
            )
        super().__init__(generator, decay_fn)

    def advance(self, dt: Any) -> None:
        self.generator.advance(dt)
        self._observe_step(dt)


class InnerWithSpikeDecay(_SpikeDecay, InnerSpikeGenerator):
    """Decaying output over a hidden unit stepped with ``handle_input``."""

    def __init__(self, generator: InnerSpikeGenerator, decay_fn: DecayFn):
        if not isinstance(generator, InnerSpikeGenerator):
            raise ConfigurationError(
                f"InnerWithSpikeDecay wraps hidden units, got {type(generator).__name__}"
            )
        super().__init__(generator, decay_fn)

    def handle_input(self, input: Any, dt: Any) -> None:
        self.generator.handle_input(input, dt)
        self._observe_step(dt)


def with_spike_decay(
    generator: SpikeGenerator, decay_fn: DecayFn
) -> Union[WithSpikeDecay, InnerWithSpikeDecay]:
    """Wrap ``generator`` in the decorator matching its stepping capability."""
    if isinstance(generator, InputSpikeGenerator):
        return WithSpikeDecay(generator, decay_fn)
    if isinstance(generator, InnerSpikeGenerator):
        return InnerWithSpikeDecay(generator, decay_fn)
    raise ConfigurationError(
        f"{type(generator).__name__} implements neither advance nor handle_input"
    )


def exponential_decay_fn(scale_a: float, scale_b: float) -> DecayFn:
    """``spike_output * scale_a * exp(-time_since_spike * scale_b)``.

    ``time_since_spike`` is converted to its base unit before exponentiation.
    """

    def decay(time_since_spike: Any, spike_output: Any) -> Any:
        elapsed = to_base_units(time_since_spike)
        return spike_output * scale_a * math.exp(-elapsed * scale_b)

    return decay


def exp_decay(
    generator: SpikeGenerator, scale_a: float, scale_b: float
) -> Union[WithSpikeDecay, InnerWithSpikeDecay]:
    """Wrap a discrete generator so its output decays exponentially after spikes.

    Args:
        generator: Discrete generator to wrap
        scale_a: Multiplier "a" on the recorded spike output
        scale_b: Rate "b" in the exponent
    """
    return with_spike_decay(generator, exponential_decay_fn(scale_a, scale_b))
