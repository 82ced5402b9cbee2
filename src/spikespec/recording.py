"""
Recording helpers for spiking units.

Drive a unit for a fixed number of ticks and collect what it reports as
torch tensors, so spike trains can be analysed with the usual tensor tools.

Key Functions:
    - record_input_generator: query, then ``advance(dt)``, each tick
    - record_hidden_unit: ``handle_input(input, dt)``, then query, per input
    - record_synapse: deliver pre/post spikes, ``advance_once(dt)``, read weight
    - compute_spike_count / compute_firing_rate: statistics on spike tensors

Recorded spikes are boolean tensors [n_steps]; outputs and weights use the
configured floating dtype.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence, Union

import torch

from spikespec.config import SimulationConfig
from spikespec.errors import ConfigurationError
from spikespec.runtime.protocols import InnerSpikeGenerator, InputSpikeGenerator, Synaptic
from spikespec.units import to_base_units

logger = logging.getLogger(__name__)


def compute_spike_count(spikes: torch.Tensor) -> int:
    """Count total number of spikes in tensor.

    Example:
        >>> compute_spike_count(torch.tensor([True, False, True]))
        2
    """
    if spikes.numel() == 0:
        return 0
    return int(spikes.sum().item())


def compute_firing_rate(spikes: torch.Tensor, dt: float) -> float:
    """Spikes per unit time for a spike train of ticks spaced ``dt`` apart.

    Returns 0.0 for an empty spike train.
    """
    if spikes.numel() == 0:
        return 0.0
    return compute_spike_count(spikes) / (spikes.numel() * dt)


@dataclass
class SpikeRecord:
    """Per-tick spikes and outputs of one unit.

    Attributes:
        spikes: Boolean spike train [n_steps]
        outputs: Reported output per tick [n_steps]
        dt: Time step between ticks
        start_time: Time at which tick 0 was sampled. Input generators are
            sampled before their first step (0.0); hidden units after
            each step, so their tick 0 is at ``dt``.
    """

    spikes: torch.Tensor
    outputs: torch.Tensor
    dt: float
    start_time: float = 0.0

    def spike_count(self) -> int:
        return compute_spike_count(self.spikes)

    def spike_ticks(self) -> torch.Tensor:
        """Indices of spiking ticks."""
        return torch.nonzero(self.spikes, as_tuple=False).flatten()

    def spike_times(self) -> torch.Tensor:
        """Sampling time of each spiking tick: start_time + tick * dt."""
        ticks = self.spike_ticks().to(self.outputs.dtype)
        return self.start_time + ticks * self.dt

    def firing_rate(self) -> float:
        return compute_firing_rate(self.spikes, self.dt)

    def inter_spike_intervals(self) -> torch.Tensor:
        """Time between consecutive spikes (empty with fewer than two spikes)."""
        return torch.diff(self.spike_times())


def _resolve(
    config: Optional[SimulationConfig],
    dt: Optional[float],
    n_steps: Optional[int] = None,
) -> SimulationConfig:
    if config is not None:
        return config
    if dt is None:
        raise ConfigurationError("dt is required when no SimulationConfig is given")
    if n_steps is None:
        return SimulationConfig(dt=dt)
    return SimulationConfig(dt=dt, n_steps=n_steps)


def _as_float(value: Any) -> float:
    return to_base_units(value)


def record_input_generator(
    generator: InputSpikeGenerator,
    n_steps: Optional[int] = None,
    dt: Optional[float] = None,
    config: Optional[SimulationConfig] = None,
) -> SpikeRecord:
    """Record an input generator from its current state.

    Each tick the generator is queried first and then advanced, so tick 0
    reports the state before any step.
    """
    config = _resolve(config, dt, n_steps)
    config.apply_seed()
    spikes: List[bool] = []
    outputs: List[float] = []
    for _ in range(config.n_steps):
        spikes.append(generator.did_spike())
        outputs.append(_as_float(generator.get_output()))
        generator.advance(config.dt)
    logger.debug("Recorded %d ticks, %d spikes", config.n_steps, sum(spikes))
    return _make_record(spikes, outputs, config)


def record_hidden_unit(
    unit: InnerSpikeGenerator,
    inputs: Union[Sequence[Any], torch.Tensor],
    dt: Optional[float] = None,
    config: Optional[SimulationConfig] = None,
) -> SpikeRecord:
    """Step a hidden unit once per input and record after every step.

    The number of ticks is the number of inputs; ``config.n_steps`` is
    ignored.
    """
    config = _resolve(config, dt)
    config.apply_seed()
    if isinstance(inputs, torch.Tensor):
        inputs = inputs.tolist()
    spikes: List[bool] = []
    outputs: List[float] = []
    for value in inputs:
        unit.handle_input(value, config.dt)
        spikes.append(unit.did_spike())
        outputs.append(_as_float(unit.get_output()))
    logger.debug("Recorded %d ticks, %d spikes", len(spikes), sum(spikes))
    return _make_record(spikes, outputs, config, start_time=config.dt)


def record_synapse(
    synapse: Synaptic,
    pre_spikes: Union[Sequence[bool], torch.Tensor],
    post_spikes: Union[Sequence[bool], torch.Tensor],
    dt: Optional[float] = None,
    spike_input: Any = 1.0,
    config: Optional[SimulationConfig] = None,
) -> torch.Tensor:
    """Replay pre/post spike trains through a synapse and record its weight.

    Per tick: ``on_pre`` if the pre side spiked, ``on_post`` if the post side
    spiked, then ``advance_once(dt)``, then read ``current_weight()``.

    Returns:
        Weight after each tick [n_steps]
    """
    config = _resolve(config, dt)
    pre = torch.as_tensor(pre_spikes, dtype=torch.bool).flatten()
    post = torch.as_tensor(post_spikes, dtype=torch.bool).flatten()
    if pre.numel() != post.numel():
        raise ConfigurationError(
            f"pre_spikes and post_spikes differ in length: {pre.numel()} vs {post.numel()}"
        )
    weights: List[float] = []
    for pre_spiked, post_spiked in zip(pre.tolist(), post.tolist()):
        if pre_spiked:
            synapse.on_pre(spike_input)
        if post_spiked:
            synapse.on_post(spike_input)
        synapse.advance_once(config.dt)
        weights.append(_as_float(synapse.current_weight()))
    return torch.tensor(
        weights, dtype=config.get_torch_dtype(), device=config.get_torch_device()
    )


def _make_record(
    spikes: List[bool],
    outputs: List[float],
    config: SimulationConfig,
    start_time: float = 0.0,
) -> SpikeRecord:
    device = config.get_torch_device()
    return SpikeRecord(
        spikes=torch.tensor(spikes, dtype=torch.bool, device=device),
        outputs=torch.tensor(outputs, dtype=config.get_torch_dtype(), device=device),
        dt=config.dt,
        start_time=start_time,
    )
