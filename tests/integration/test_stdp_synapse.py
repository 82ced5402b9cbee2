"""
Integration tests for the library STDP synapse.

Spike order alone decides the sign of the weight change: the ordinary
on_pre/on_post statement lists bump one trace and read the other.
"""

import pytest

from spikespec.library import STDP_SYNAPSE_SPEC, StdpSynapse
from spikespec.recording import record_synapse
from spikespec.runtime import Synaptic

TAU = 20.0
W0 = 0.5
A_PLUS = 0.01
A_MINUS = -0.012


@pytest.fixture
def synapse():
    return StdpSynapse(TAU, TAU, W0, A_PLUS, A_MINUS)


@pytest.mark.integration
class TestStdpSynapse:

    def test_surface(self, synapse):
        assert isinstance(synapse, Synaptic)
        assert synapse.current_weight() == W0
        assert "weight_getter { w }" in STDP_SYNAPSE_SPEC

    def test_pre_then_post_potentiates(self, synapse):
        weights = record_synapse(
            synapse,
            pre_spikes=[True, False, False, False, False, False],
            post_spikes=[False, False, False, False, False, True],
            dt=1.0,
        )
        expected = W0 + A_PLUS * (1 - 1 / TAU) ** 5
        assert weights[-1].item() == pytest.approx(expected, rel=1e-6)
        assert weights[-1].item() > W0

    def test_post_then_pre_depresses(self, synapse):
        weights = record_synapse(
            synapse,
            pre_spikes=[False, False, False, False, False, True],
            post_spikes=[True, False, False, False, False, False],
            dt=1.0,
        )
        expected = W0 + A_MINUS * (1 - 1 / TAU) ** 5
        assert weights[-1].item() == pytest.approx(expected, rel=1e-6)
        assert weights[-1].item() < W0

    def test_closer_pairs_change_more(self):
        changes = []
        for gap in (2, 10):
            synapse = StdpSynapse(TAU, TAU, W0, A_PLUS, A_MINUS)
            pre = [True] + [False] * gap
            post = [False] * gap + [True]
            weights = record_synapse(synapse, pre, post, dt=1.0)
            changes.append(weights[-1].item() - W0)
        assert changes[0] > changes[1] > 0

    def test_traces_decay_without_spikes(self, synapse):
        synapse.on_pre(1.0)
        for _ in range(100):
            synapse.advance_once(1.0)
        assert synapse.a_pre == pytest.approx(A_PLUS * (1 - 1 / TAU) ** 100)
        assert synapse.current_weight() == W0
