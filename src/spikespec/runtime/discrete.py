"""
Discrete input spike generators.

Input units that spike on a schedule rather than in response to a signal.
They are the usual encoding layer of a network and the building block the
continuous-decay decorator (``spikespec.runtime.continuous``) wraps.

Generators:
    - SpikeAtTimes: spikes at fixed, pre-scheduled instants
    - SpikeAtRate: spikes a given number of times within successive slots

Both report ``spike_output`` on a spiking tick and zero otherwise, and both
assume a monotonically non-decreasing time: a negative ``dt`` is not
supported.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, List, Optional, Sequence, Tuple

from spikespec.errors import ConfigurationError
from spikespec.runtime.protocols import InputSpikeGenerator
from spikespec.units import (
    Dimension,
    require_output_quantity,
    require_quantity,
    zero_like,
)

logger = logging.getLogger(__name__)

RateFn = Callable[[Any], Optional[Tuple[int, Any]]]
"""Maps the current time to ``(spike_count, slot_end_time)``, or None when done."""

EXHAUSTED_RATE = -1
"""Sentinel rate once the rate function signals there are no more slots."""


class SpikeAtTimes(InputSpikeGenerator):
    """Input unit that spikes at the given times.

    Useful for simple feature detectors whose spike timing is derived from
    the example shown to the network.

    A tick spikes when the current time is within ``tolerance`` (exclusive)
    of the scheduled instant under the cursor. The cursor only moves
    forward; once every instant has passed, the last one is kept as the
    reference forever.

    Example:
        >>> spiker = SpikeAtTimes([1.0, 2.0], tolerance=0.1, spike_output=0.3)
        >>> for _ in range(5):
        ...     spiker.advance(0.2)
        >>> spiker.did_spike()
        True
    """

    def __init__(self, times: Sequence[Any], tolerance: Any, spike_output: Any):
        """
        Args:
            times: Ascending spike instants
            tolerance: Absolute timing error accepted around each instant,
                for floating-point drift or a step that skips the exact time
            spike_output: Output reported on a spiking tick
        """
        if len(times) == 0:
            raise ConfigurationError("SpikeAtTimes needs at least one scheduled time")
        self.times: List[Any] = [
            require_quantity(t, f"times[{i}]", Dimension.TIME) for i, t in enumerate(times)
        ]
        for i in range(1, len(self.times)):
            if self.times[i] < self.times[i - 1]:
                raise ConfigurationError(
                    f"times must be ascending, got {self.times[i - 1]} before {self.times[i]}"
                )
        self.tolerance = require_quantity(tolerance, "tolerance", Dimension.TIME)
        self.spike_output = require_output_quantity(spike_output, "spike_output")
        self.time = zero_like(self.tolerance)
        self.cursor = 0

    def did_spike(self) -> bool:
        idx = min(self.cursor, len(self.times) - 1)
        time_diff = self.times[idx] - self.time
        return bool(-self.tolerance < time_diff and time_diff < self.tolerance)

    def get_output(self) -> Any:
        if self.did_spike():
            return self.spike_output
        return zero_like(self.spike_output)

    def advance(self, dt: Any) -> None:
        self.time = self.time + dt
        n_times = len(self.times)
        while self.cursor < n_times and self.times[self.cursor] < self.time:
            self.cursor += 1
            if self.cursor == n_times:
                logger.debug("Schedule exhausted at t=%s; holding last spike time", self.time)


class SpikeAtRate(InputSpikeGenerator):
    """Input unit that spikes a given number of times within each time slot.

    Slots come from ``rate_fn``: called with the current time when a slot
    ends, it returns the next ``(spike_count, slot_end_time)`` or None once
    there are no more slots. It only means "rate" when slots are one time
    unit long.

    A slot of duration D and count N is split into sub-intervals of D / N;
    the unit spikes once near the start of each sub-interval. The tolerance
    is how far past a sub-interval start a tick may land and still count,
    so advancing with ``tolerance < dt < 2 * tolerance`` hits every spike
    exactly once.
    """

    def __init__(
        self,
        rate_fn: RateFn,
        slot_end_time: Any,
        spike_output: Any,
        starting_rate: int,
        tolerance: Any,
    ):
        """
        Args:
            rate_fn: Next slot for a given time, or None when done spiking
            slot_end_time: End of the first slot
            spike_output: Output reported on a spiking tick
            starting_rate: Spike count of the first slot
            tolerance: Window after each sub-interval start that counts as a spike
        """
        self.rate_fn = rate_fn
        self.slot_end_time = require_quantity(slot_end_time, "slot_end_time", Dimension.TIME)
        self.tolerance = require_quantity(tolerance, "tolerance", Dimension.TIME)
        self.spike_output = require_output_quantity(spike_output, "spike_output")
        self.time = zero_like(self.tolerance)
        self.slot_start_time = zero_like(self.tolerance)
        self.current_rate = int(starting_rate)
        self.num_spiked = 0

    @classmethod
    def from_slots(
        cls,
        slots: Sequence[Tuple[Any, int]],
        spike_output: Any,
        tolerance: Any,
    ) -> "SpikeAtRate":
        """Build a generator from ``(slot_end_time, spike_count)`` pairs.

        Example:
            >>> spiker = SpikeAtRate.from_slots([(1.0, 0), (2.0, 5)], 0.5, 0.15)
        """
        rate_fn = rate_fn_from_slots(slots)
        first_end, first_count = min(slots, key=lambda slot: slot[0])
        return cls(rate_fn, first_end, spike_output, first_count, tolerance)

    def did_spike(self) -> bool:
        if self.current_rate <= 0:
            return False
        spike_interval_len = (self.slot_end_time - self.slot_start_time) / self.current_rate
        adjusted_time = (
            self.time - spike_interval_len * self.num_spiked - self.slot_start_time
        )
        return bool(zero_like(adjusted_time) < adjusted_time and adjusted_time <= self.tolerance)

    def get_output(self) -> Any:
        if self.did_spike():
            return self.spike_output
        return zero_like(self.spike_output)

    def advance(self, dt: Any) -> None:
        # Count the spike reported for this tick before moving time; doing it
        # after the slot bookkeeping misses spikes at slot boundaries.
        if self.did_spike():
            self.num_spiked += 1
        self.time = self.time + dt
        if self.time > self.slot_end_time and self.current_rate > EXHAUSTED_RATE:
            self.slot_start_time = self.slot_end_time
            next_slot = self.rate_fn(self.time)
            if next_slot is None:
                self.current_rate = EXHAUSTED_RATE
                logger.debug("Rate function exhausted at t=%s", self.time)
            else:
                new_rate, new_end = next_slot
                self.current_rate = int(new_rate)
                self.slot_end_time = new_end
                self.num_spiked = 0
                logger.debug(
                    "New slot [%s, %s] with %d spikes",
                    self.slot_start_time, new_end, self.current_rate,
                )


def rate_fn_from_slots(slots: Sequence[Tuple[Any, int]]) -> RateFn:
    """Make a rate function from ``(slot_end_time, spike_count)`` pairs.

    The returned function yields the first slot (by end time) that ends
    strictly after the queried time, and None past the last slot.

    Example:
        >>> rate_fn = rate_fn_from_slots([(2.0, 5), (1.0, 0)])
        >>> rate_fn(0.5), rate_fn(1.5), rate_fn(2.5)
        ((0, 1.0), (5, 2.0), None)
    """
    if len(slots) == 0:
        raise ConfigurationError("rate_fn_from_slots needs at least one slot")
    ordered = []
    for i, (end, count) in enumerate(slots):
        require_quantity(end, f"slots[{i}] end time", Dimension.TIME)
        ordered.append((end, int(count)))
    ordered.sort(key=lambda slot: slot[0])

    def rate_fn(time: Any) -> Optional[Tuple[int, Any]]:
        for end, count in ordered:
            if time < end:
                return count, end
        return None

    return rate_fn
