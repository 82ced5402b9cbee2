"""
Ready-made model specifications.

Each model ships as specification text (``*_SPEC``) and as the class
compiled from it. The texts double as reference examples of the language.

Usage:
    from spikespec.library import Izhikevich, StdpSynapse

    neuron = Izhikevich(0.02, 0.2, -65.0, 8.0)   # regular spiking
    synapse = StdpSynapse(20.0, 20.0, 0.5, 0.01, -0.012)
"""

from __future__ import annotations

from spikespec.codegen import define_neuron, define_synapse

IZHIKEVICH_SPEC = """\
Izhikevich<Voltage, Time>:
params {
    a: Time,
    b: Dimensionless,
    c: Voltage,
    d: Voltage,
}
initialize {
    v: Voltage = c;
    u: Voltage = b * c
}
time_step {
    v @= 0.04 * v * v + 5.0 * v + 140.0 - u + input;
    u @= a * (b * v - u)
}
spike_when { v >= 30.0 }
get_voltage { v }
reset {
    v = c;
    u += d
}
"""

LEAKY_INTEGRATE_AND_FIRE_SPEC = """\
LeakyIntegrateAndFire<Voltage, Time>:
params {
    tau: Time,
    v_rest: Voltage,
    v_reset: Voltage,
    v_threshold: Voltage,
    resistance: Dimensionless
}
initialize { v: Voltage = v_rest }
time_step { v @= (v_rest - v + resistance * input) / tau }
spike_when { v >= v_threshold }
get_voltage { v }
reset { v = v_reset }
"""

# Pair-based STDP: each side keeps a decaying trace, bumped on its own spike
# and read by the other side's weight update. a_minus is negative.
STDP_SYNAPSE_SPEC = """\
StdpSynapse<Voltage, Time>:
params {
    tau_pre: Time,
    tau_post: Time,
    w_initial: Voltage,
    a_plus: Voltage,
    a_minus: Voltage
}
initialize {
    w: Voltage = w_initial;
    a_pre: Voltage = 0.0;
    a_post: Voltage = 0.0
}
time_step {
    a_pre @= -a_pre / tau_pre;
    a_post @= -a_post / tau_post
}
weight_getter { w }
on_pre {
    a_pre += a_plus;
    w += a_post
}
on_post {
    a_post += a_minus;
    w += a_pre
}
"""

Izhikevich = define_neuron(IZHIKEVICH_SPEC)
LeakyIntegrateAndFire = define_neuron(LEAKY_INTEGRATE_AND_FIRE_SPEC)
StdpSynapse = define_synapse(STDP_SYNAPSE_SPEC)

__all__ = [
    "IZHIKEVICH_SPEC",
    "LEAKY_INTEGRATE_AND_FIRE_SPEC",
    "STDP_SYNAPSE_SPEC",
    "Izhikevich",
    "LeakyIntegrateAndFire",
    "StdpSynapse",
]
