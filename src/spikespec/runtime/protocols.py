"""
Capability contracts for spike generators and synapses.

Generated units and the hand-written generators in this package subclass
these abstract bases, and an external driver talks to units only through
them:

- `SpikeGenerator`: pure queries, `did_spike()` and `get_output()`
- `InnerSpikeGenerator`: hidden units stepped with an external signal,
  `handle_input(input, dt)`
- `InputSpikeGenerator`: input/encoding units stepped by time alone,
  `advance(dt)`
- `Synaptic`: plasticity state machines with `on_pre`, `on_post`,
  `current_weight` and `advance_once`

A concrete unit implements exactly one of `handle_input`/`advance`.

Usage:
======
    def drive(unit: InputSpikeGenerator, dt: float, n_steps: int) -> int:
        spikes = 0
        for _ in range(n_steps):
            spikes += unit.did_spike()
            unit.advance(dt)
        return spikes
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, ClassVar

from spikespec.units import Dimension


class SpikeGenerator(ABC):
    """A unit that can report whether it spiked and what it outputs.

    Both queries are side-effect free and idempotent within a tick: calling
    them any number of times between two steps yields the same answer.
    """

    __slots__ = ()

    output_dimension: ClassVar[Dimension] = Dimension.VOLTAGE
    time_dimension: ClassVar[Dimension] = Dimension.TIME

    @abstractmethod
    def did_spike(self) -> bool:
        """Whether the unit spiked at the most recent step."""

    @abstractmethod
    def get_output(self) -> Any:
        """Output (voltage or current) to report for the current tick."""


class InnerSpikeGenerator(SpikeGenerator):
    """Hidden unit driven by an external signal."""

    __slots__ = ()

    @abstractmethod
    def handle_input(self, input: Any, dt: Any) -> None:
        """Apply exactly one step with the given input over ``dt``."""


class InputSpikeGenerator(SpikeGenerator):
    """Input/encoding unit with no external signal."""

    __slots__ = ()

    @abstractmethod
    def advance(self, dt: Any) -> None:
        """Apply exactly one step over ``dt``."""


class Synaptic(ABC):
    """Plasticity state machine between a pre- and a post-synaptic unit.

    Spike reactions are instantaneous statement lists; `advance_once` runs
    the continuous dynamics (trace decay) every tick regardless of spikes.
    """

    __slots__ = ()

    output_dimension: ClassVar[Dimension] = Dimension.VOLTAGE
    time_dimension: ClassVar[Dimension] = Dimension.TIME

    @abstractmethod
    def on_pre(self, input: Any) -> None:
        """React to a spike arriving from the pre-synaptic side."""

    @abstractmethod
    def on_post(self, input: Any) -> None:
        """React to a spike emitted by the post-synaptic side."""

    @abstractmethod
    def current_weight(self) -> Any:
        """Current synaptic weight (pure query)."""

    @abstractmethod
    def advance_once(self, dt: Any) -> None:
        """Apply the continuous time-step equations once."""
