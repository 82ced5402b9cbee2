"""
Unit tests for the scheduled and rate-slot input generators.
"""

import pytest
import torch

from spikespec.errors import ConfigurationError
from spikespec.runtime import (
    EXHAUSTED_RATE,
    InputSpikeGenerator,
    SpikeAtRate,
    SpikeAtTimes,
    rate_fn_from_slots,
)
from spikespec.units import Dimension


def spiking_ticks(generator, n_ticks, dt):
    """Query-then-advance loop; returns the indices of spiking ticks."""
    ticks = []
    for tick in range(n_ticks):
        if generator.did_spike():
            ticks.append(tick)
        generator.advance(dt)
    return ticks


class TaggedFloat(float):
    """Float carrying a dimension tag, like a unit-library quantity."""

    def __new__(cls, value, dimension):
        obj = super().__new__(cls, value)
        obj.dimension = dimension
        return obj


@pytest.mark.unit
class TestSpikeAtTimes:
    """Fixed-schedule generator."""

    def test_schedule_tolerance(self):
        spiker = SpikeAtTimes([1.0, 2.0], tolerance=0.1, spike_output=0.3)
        assert spiking_ticks(spiker, 31, 0.2) == [5, 10]

    def test_output_follows_spikes(self):
        spiker = SpikeAtTimes([1.0], tolerance=0.1, spike_output=0.3)
        assert spiker.get_output() == 0.0
        for _ in range(5):
            spiker.advance(0.2)
        assert spiker.did_spike()
        assert spiker.get_output() == 0.3

    def test_cursor_never_decreases(self):
        spiker = SpikeAtTimes([0.5, 1.0, 1.5, 2.0], tolerance=0.05, spike_output=1.0)
        cursors = [spiker.cursor]
        for dt in [0.0, 0.3, 0.0, 0.7, 0.01, 1.5, 0.0, 2.0]:
            spiker.advance(dt)
            cursors.append(spiker.cursor)
        assert cursors == sorted(cursors)
        assert cursors[-1] == 4

    def test_last_entry_kept_after_exhaustion(self):
        spiker = SpikeAtTimes([1.0], tolerance=0.1, spike_output=0.3)
        spiker.advance(5.0)
        assert spiker.cursor == 1
        assert not spiker.did_spike()
        assert spiker.get_output() == 0.0

    def test_queries_are_idempotent(self):
        spiker = SpikeAtTimes([0.0], tolerance=0.1, spike_output=0.3)
        assert [spiker.did_spike() for _ in range(3)] == [True, True, True]
        assert spiker.time == 0.0

    def test_tensor_quantities(self):
        spiker = SpikeAtTimes(
            [torch.tensor(1.0)], tolerance=torch.tensor(0.1), spike_output=torch.tensor(0.3)
        )
        spiker.advance(torch.tensor(1.0))
        assert spiker.did_spike()
        torch.testing.assert_close(spiker.get_output(), torch.tensor(0.3))

    def test_is_input_generator(self):
        spiker = SpikeAtTimes([1.0], tolerance=0.1, spike_output=0.3)
        assert isinstance(spiker, InputSpikeGenerator)
        assert spiker.output_dimension is Dimension.VOLTAGE

    def test_rejects_empty_schedule(self):
        with pytest.raises(ConfigurationError, match="at least one"):
            SpikeAtTimes([], tolerance=0.1, spike_output=0.3)

    def test_rejects_descending_schedule(self):
        with pytest.raises(ConfigurationError, match="ascending"):
            SpikeAtTimes([2.0, 1.0], tolerance=0.1, spike_output=0.3)

    def test_rejects_non_quantity(self):
        with pytest.raises(ConfigurationError, match="tolerance"):
            SpikeAtTimes([1.0], tolerance="0.1", spike_output=0.3)
        with pytest.raises(ConfigurationError, match="spike_output"):
            SpikeAtTimes([1.0], tolerance=0.1, spike_output=True)

    def test_rejects_wrong_dimension_tag(self):
        with pytest.raises(ConfigurationError, match="expected time"):
            SpikeAtTimes([1.0], tolerance=TaggedFloat(0.1, Dimension.VOLTAGE), spike_output=0.3)
        with pytest.raises(ConfigurationError, match="voltage or current"):
            SpikeAtTimes([1.0], tolerance=0.1, spike_output=TaggedFloat(0.3, Dimension.TIME))

    def test_accepts_matching_dimension_tag(self):
        spiker = SpikeAtTimes(
            [TaggedFloat(1.0, Dimension.TIME)],
            tolerance=TaggedFloat(0.1, Dimension.TIME),
            spike_output=TaggedFloat(0.3, Dimension.CURRENT),
        )
        assert spiker.cursor == 0


class CountAfterAdvance(SpikeAtRate):
    """Rate generator with the spike count taken after moving time."""

    def advance(self, dt):
        self.time = self.time + dt
        if self.time > self.slot_end_time and self.current_rate > EXHAUSTED_RATE:
            self.slot_start_time = self.slot_end_time
            next_slot = self.rate_fn(self.time)
            if next_slot is None:
                self.current_rate = EXHAUSTED_RATE
            else:
                self.current_rate, self.slot_end_time = next_slot
                self.num_spiked = 0
        if self.did_spike():
            self.num_spiked += 1


@pytest.mark.unit
class TestSpikeAtRate:
    """Rate-slot generator."""

    SLOTS = [(1.0, 0), (2.0, 5)]

    def test_exact_count_within_slot(self):
        spiker = SpikeAtRate.from_slots(self.SLOTS, spike_output=0.5, tolerance=0.15)
        ticks = spiking_ticks(spiker, 31, 0.1)
        assert len(ticks) == 5
        assert all(10 <= tick <= 20 for tick in ticks)

    def test_exhausted_after_last_slot(self):
        spiker = SpikeAtRate.from_slots(self.SLOTS, spike_output=0.5, tolerance=0.15)
        spiking_ticks(spiker, 31, 0.1)
        assert spiker.current_rate == EXHAUSTED_RATE
        assert spiking_ticks(spiker, 20, 0.1) == []

    def test_count_order_matters(self):
        spiker = CountAfterAdvance.from_slots(self.SLOTS, spike_output=0.5, tolerance=0.15)
        assert len(spiking_ticks(spiker, 31, 0.1)) != 5

    def test_zero_rate_never_spikes(self):
        spiker = SpikeAtRate(lambda t: (0, t + 1.0), 1.0, 0.5, starting_rate=0, tolerance=0.15)
        assert spiking_ticks(spiker, 50, 0.1) == []

    def test_rate_fn_none_sets_sentinel(self):
        calls = []

        def rate_fn(time):
            calls.append(time)
            return None

        spiker = SpikeAtRate(rate_fn, 0.5, 0.5, starting_rate=1, tolerance=0.15)
        spiking_ticks(spiker, 20, 0.1)
        assert spiker.current_rate == EXHAUSTED_RATE
        assert len(calls) == 1

    def test_output_on_spike(self):
        spiker = SpikeAtRate(lambda t: None, 1.0, 0.5, starting_rate=1, tolerance=0.15)
        assert spiker.get_output() == 0.0
        spiker.advance(0.1)
        assert spiker.did_spike()
        assert spiker.get_output() == 0.5


@pytest.mark.unit
class TestRateFnFromSlots:

    def test_slots_sorted_by_end(self):
        rate_fn = rate_fn_from_slots([(2.0, 5), (1.0, 0)])
        assert rate_fn(0.5) == (0, 1.0)
        assert rate_fn(1.0) == (5, 2.0)
        assert rate_fn(2.0) is None

    def test_rejects_empty(self):
        with pytest.raises(ConfigurationError):
            rate_fn_from_slots([])
