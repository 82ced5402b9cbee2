"""
Simulation runtime: capability contracts and concrete spike generators.

    from spikespec.runtime import SpikeAtTimes, SpikeAtRate, exp_decay
"""

from spikespec.runtime.continuous import (
    DecayFn,
    InnerWithSpikeDecay,
    WithSpikeDecay,
    exp_decay,
    exponential_decay_fn,
    with_spike_decay,
)
from spikespec.runtime.discrete import (
    EXHAUSTED_RATE,
    RateFn,
    SpikeAtRate,
    SpikeAtTimes,
    rate_fn_from_slots,
)
from spikespec.runtime.protocols import (
    InnerSpikeGenerator,
    InputSpikeGenerator,
    SpikeGenerator,
    Synaptic,
)

__all__ = [
    # Contracts
    "SpikeGenerator",
    "InnerSpikeGenerator",
    "InputSpikeGenerator",
    "Synaptic",
    # Discrete generators
    "SpikeAtTimes",
    "SpikeAtRate",
    "rate_fn_from_slots",
    "RateFn",
    "EXHAUSTED_RATE",
    # Continuous decay
    "WithSpikeDecay",
    "InnerWithSpikeDecay",
    "with_spike_decay",
    "exp_decay",
    "exponential_decay_fn",
    "DecayFn",
]
